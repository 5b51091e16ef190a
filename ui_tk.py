# ui_tk.py

import tkinter as tk

from config import (
    BG_COLOR,
    FG_COLOR,
    FONT_TIME,
    FONT_TITLE,
    FONT_MONO,
    READ_INTERVAL_MS,
)
from controller import AutosplitController
from model import TimerPhase


class TimerWindow:
    def __init__(self, controller: AutosplitController, interval_ms: int = READ_INTERVAL_MS) -> None:
        # --- Window setup ---
        self.root = tk.Tk()
        self.root.title("Superliminal Autosplitter")
        self.root.configure(bg=BG_COLOR)

        self.controller = controller
        self.interval_ms = interval_ms

        # 2 columns: [label] [value]
        self.root.columnconfigure(0, weight=0)
        self.root.columnconfigure(1, weight=1)

        self._build_widgets()

        # Start polling
        self.root.after(self.interval_ms, self.poll)

    def _label_row(self, row: int, title: str, text: str, font) -> tk.Label:
        tk.Label(
            self.root,
            text=title,
            bg=BG_COLOR,
            fg=FG_COLOR,
            font=FONT_MONO,
        ).grid(row=row, column=0, padx=(10, 4), pady=2, sticky="w")

        value = tk.Label(
            self.root,
            text=text,
            bg=BG_COLOR,
            fg=FG_COLOR,
            font=font,
        )
        value.grid(row=row, column=1, padx=(0, 10), pady=2, sticky="w")
        return value

    def _build_widgets(self) -> None:
        self.label_time = self._label_row(0, "IGT:", "--:--:--.--", FONT_TIME)
        self.label_scene = self._label_row(1, "Scene:", "--", FONT_TITLE)
        self.label_phase = self._label_row(2, "Timer:", "--", FONT_MONO)
        self.label_current_value = self._label_row(3, "Current Split:", "--:--:--.--", FONT_MONO)
        self.label_last_value = self._label_row(4, "Previous Split:", "--:--:--.--", FONT_MONO)

        self.label_splits = tk.Label(
            self.root,
            text="Splits: 0",
            bg=BG_COLOR,
            fg=FG_COLOR,
            font=FONT_MONO,
        )
        self.label_splits.grid(row=5, column=0, columnspan=2, padx=10, pady=(4, 2), sticky="w")

        self.label_status = tk.Label(
            self.root,
            text="",
            bg=BG_COLOR,
            fg=FG_COLOR,
            font=FONT_MONO,
        )
        self.label_status.grid(row=6, column=0, columnspan=2, padx=10, pady=(0, 4), sticky="w")

        tk.Button(
            self.root,
            text="Reset",
            command=self.controller.timer.reset,
        ).grid(row=7, column=0, padx=(10, 4), pady=(0, 10), sticky="w")

        self.button_pause = tk.Button(
            self.root,
            text="Pause",
            command=self.controller.timer.toggle_pause,
        )
        self.button_pause.grid(row=7, column=1, padx=(0, 10), pady=(0, 10), sticky="w")

    def poll(self) -> None:
        info = self.controller.tick()

        self.label_time.config(text=info.time_text)
        self.label_scene.config(text=info.scene_text)
        self.label_phase.config(text=info.phase_text)
        self.label_current_value.config(text=info.current_segment_text)
        self.label_last_value.config(text=info.last_segment_text)
        self.label_splits.config(text=info.splits_text)
        self.label_status.config(text=info.status_text)
        self.button_pause.config(text="Resume" if info.phase_text == TimerPhase.PAUSED.value else "Pause")

        self.root.after(self.interval_ms, self.poll)

    def run(self) -> None:
        self.root.mainloop()
