# controller.py

import os
import threading
from typing import Callable, Optional

from config import MODULE_NAME, PROC_NAME
from memory_reader import ProcessAccessor, SessionManager
from model import (
    Command,
    CommandKind,
    DisplayInfo,
    GameVars,
    TimerPhase,
    apply_commands,
    decide,
    format_hhmmss,
    format_igt,
)
from split_timer import SplitTimer


def print_message(text: str) -> None:
    print(f"[•] {text}", flush=True)


class AutosplitController:
    def __init__(
        self,
        accessor: ProcessAccessor,
        timer: Optional[SplitTimer] = None,
        print_message: Callable[[str], None] = print_message,
        process_name: str = PROC_NAME,
        module_name: str = MODULE_NAME,
    ) -> None:
        self.timer = timer if timer is not None else SplitTimer()
        self.print_message = print_message
        self.sessions = SessionManager(accessor, print_message, process_name, module_name)
        self.last_vars: Optional[GameVars] = None
        self._lock = threading.Lock()

    @property
    def attached(self) -> bool:
        return self.sessions.game is not None

    def update(self) -> list[Command]:
        """One poll cycle. Safe to call with the game closed."""
        with self._lock:
            game = self.sessions.ensure_session()
            if game is None:
                self.last_vars = None
                return []

            vars = game.update_vars()
            if vars is None:
                return []
            self.last_vars = vars

            phase = self.timer.query_state()
            commands = decide(vars, phase)

            if phase is TimerPhase.RUNNING and vars.scene.changed:
                self.print_message(vars.scene.current)
            if any(cmd.kind is CommandKind.START for cmd in commands):
                self.print_message("start")

            apply_commands(self.timer, commands)
            return commands

    def tick(self) -> DisplayInfo:
        self.update()
        return self.display_info()

    def display_info(self) -> DisplayInfo:
        timer = self.timer
        vars = self.last_vars

        if not self.attached:
            status = f"Not attached ({self.sessions.process_name} not running)"
        elif vars is None:
            status = "Attached, waiting for game data"
        else:
            status = ""

        scene = os.path.basename(vars.scene.current) if vars is not None else "--"
        igt = timer.game_time
        if igt is None and vars is not None:
            igt = vars.game_time.current

        return DisplayInfo(
            time_text=format_igt(igt),
            scene_text=scene or "--",
            phase_text=timer.query_state().value,
            current_segment_text=format_igt(timer.current_segment_time),
            last_segment_text=format_igt(timer.last_segment_time),
            splits_text=f"Splits: {len(timer.splits)}"
            + (f"/{timer.segment_count}" if timer.segment_count else ""),
            status_text=status,
        )


def describe(cmd: Command) -> str:
    if cmd.kind is CommandKind.SET_GAME_TIME:
        return f"{cmd.kind.value} {format_hhmmss(cmd.game_time)}"
    return cmd.kind.value
