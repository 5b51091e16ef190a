# config.py

# --- target ---
PROC_NAME = "SuperliminalSteam"
MODULE_NAME = "UnityPlayer.dylib"

# Pointer chains, first offset is relative to the module base.
GAME_TIME_OFFSETS = (0x0195D848, 0x08, 0xB0, 0xC0, 0x28, 0x130)       # float64 seconds
SCENE_PTR_OFFSETS = (0x019151F8, 0x48, 0x10)                         # char* scene path
RETRO_ALARM_OFFSETS = (0x0195D848, 0x08, 0xB0, 0xA8, 0x28, 0x141)     # uint8 flag

SCENE_BUF_LEN = 255
SCENE_DECODE_FALLBACK = "null"

# --- scene paths ---
LOADING_SCENE_PREFIX = "Assets/_Levels/_LiveFolder/Misc/LoadingScenes/"
ACT_SCENE_PREFIX = "Assets/_Levels/_LiveFolder/ACT"
START_SCREEN_SUFFIX = "StartScreen_Live.unity"
TEST_CHAMBER_SUFFIX = "TestChamber_Live.unity"
ENDING_MONTAGE_SUFFIX = "EndingMontage_Live.unity"

RETRO_ALARM_FROM = 0
RETRO_ALARM_TO = 1

# --- polling ---
READ_INTERVAL_MS = 100

# --- ui ---
BG_COLOR = "#101010"
FG_COLOR = "#E0E0E0"
FONT_TIME = ("Consolas", 28, "bold")
FONT_TITLE = ("Consolas", 14, "bold")
FONT_MONO = ("Consolas", 11)
