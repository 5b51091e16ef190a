# model.py

import enum
import math
from dataclasses import dataclass
from typing import Generic, Optional, Protocol, TypeVar

from config import (
    ACT_SCENE_PREFIX,
    ENDING_MONTAGE_SUFFIX,
    LOADING_SCENE_PREFIX,
    RETRO_ALARM_FROM,
    RETRO_ALARM_TO,
    SCENE_DECODE_FALLBACK,
    START_SCREEN_SUFFIX,
    TEST_CHAMBER_SUFFIX,
)

T = TypeVar("T")


def format_hhmmss(total_seconds: Optional[float]) -> str:
    if total_seconds is None or not math.isfinite(total_seconds):
        return "--:--:--"
    if total_seconds < 0:
        total_seconds = 0
    whole = int(total_seconds)
    h = whole // 3600
    m = (whole % 3600) // 60
    s = whole % 60
    return f"{h:02d}:{m:02d}:{s:02d}"


def format_igt(total_seconds: Optional[float]) -> str:
    """Like format_hhmmss but keeps hundredths, the way the IGT is shown in game."""
    if total_seconds is None or not math.isfinite(total_seconds):
        return "--:--:--.--"
    if total_seconds < 0:
        total_seconds = 0
    whole, hundredths = divmod(int(round(total_seconds * 100)), 100)
    return f"{format_hhmmss(whole)}.{hundredths:02d}"


def bytes_to_string(buf: bytes) -> str:
    """Decode a NUL-terminated scene path; garbage decodes to SCENE_DECODE_FALLBACK."""
    end = buf.find(b"\x00")
    if end < 0:
        end = len(buf)
    try:
        return bytes(buf[:end]).decode("utf-8")
    except UnicodeDecodeError:
        return SCENE_DECODE_FALLBACK


@dataclass
class ValuePair(Generic[T]):
    old: T
    current: T

    @property
    def changed(self) -> bool:
        return self.old != self.current

    @property
    def increased(self) -> bool:
        return self.current > self.old

    @property
    def decreased(self) -> bool:
        return self.current < self.old

    def changed_from_to(self, old: T, current: T) -> bool:
        return self.old == old and self.current == current

    def starts_with(self, prefix: str) -> bool:
        return self.current.startswith(prefix)

    def ends_with(self, suffix: str) -> bool:
        return self.current.endswith(suffix)


class Watcher(Generic[T]):
    """
    Tracks the last two successfully read values of one quantity.

    A failed read (None) never moves the pair, so `old` is always the
    previous successful `current`.
    """

    def __init__(self, default: T) -> None:
        self.pair: ValuePair[T] = ValuePair(old=default, current=default)
        self.has_value = False

    def update(self, value: Optional[T]) -> Optional[ValuePair[T]]:
        if value is None:
            return self.pair if self.has_value else None
        self.pair = ValuePair(old=self.pair.current, current=value)
        self.has_value = True
        return self.pair


@dataclass(frozen=True)
class GameVars:
    """Everything the autosplitter looks at in one poll cycle."""
    game_time: ValuePair[float]
    scene: ValuePair[str]
    retro_alarm_clicked: ValuePair[int]


class TimerPhase(enum.Enum):
    NOT_RUNNING = "NotRunning"
    RUNNING = "Running"
    PAUSED = "Paused"
    ENDED = "Ended"
    UNKNOWN = "Unknown"


class CommandKind(enum.Enum):
    START = "start"
    SPLIT = "split"
    RESET = "reset"
    SET_GAME_TIME = "set_game_time"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    game_time: Optional[float] = None


def decide(vars: GameVars, phase: TimerPhase) -> list[Command]:
    game_time = vars.game_time
    scene = vars.scene
    commands: list[Command] = []

    if phase is TimerPhase.NOT_RUNNING:
        # A zero or frozen clock is a menu or a stale baseline, not a new run.
        if game_time.current > 0.0 and game_time.changed:
            commands.append(Command(CommandKind.START))

    elif phase is TimerPhase.RUNNING:
        commands.append(Command(CommandKind.SET_GAME_TIME, game_time.current))

        if scene.changed:
            if scene.starts_with(LOADING_SCENE_PREFIX) and scene.old.startswith(ACT_SCENE_PREFIX):
                commands.append(Command(CommandKind.SPLIT))
            elif scene.ends_with(START_SCREEN_SUFFIX):
                commands.append(Command(CommandKind.RESET))

        # Reloading the test chamber rewinds the clock.
        if scene.ends_with(TEST_CHAMBER_SUFFIX) and game_time.decreased:
            commands.append(Command(CommandKind.RESET))

        if scene.ends_with(ENDING_MONTAGE_SUFFIX) and vars.retro_alarm_clicked.changed_from_to(
            RETRO_ALARM_FROM, RETRO_ALARM_TO
        ):
            commands.append(Command(CommandKind.SPLIT))

    return commands


class TimerSink(Protocol):
    def query_state(self) -> TimerPhase: ...

    def start(self) -> None: ...

    def split(self) -> None: ...

    def reset(self) -> None: ...

    def set_game_time(self, seconds: float) -> None: ...


def apply_commands(timer: TimerSink, commands: list[Command]) -> None:
    for cmd in commands:
        if cmd.kind is CommandKind.START:
            timer.start()
        elif cmd.kind is CommandKind.SPLIT:
            timer.split()
        elif cmd.kind is CommandKind.RESET:
            timer.reset()
        elif cmd.kind is CommandKind.SET_GAME_TIME:
            timer.set_game_time(cmd.game_time)


@dataclass
class DisplayInfo:
    time_text: str
    scene_text: str
    phase_text: str
    current_segment_text: str
    last_segment_text: str
    splits_text: str
    status_text: str
