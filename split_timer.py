# split_timer.py

from typing import Optional

from model import TimerPhase


class SplitTimer:
    """
    In-process run timer driven by the autosplitter.

    Time is game time pushed in with set_game_time; splits record the game
    time at which each segment closed. With segment_count set, the last
    split ends the run.
    """

    def __init__(self, segment_count: Optional[int] = None) -> None:
        self.segment_count = segment_count
        self.phase = TimerPhase.NOT_RUNNING
        self.game_time: Optional[float] = None
        self.splits: list[float] = []

    def query_state(self) -> TimerPhase:
        return self.phase

    def start(self) -> None:
        if self.phase is not TimerPhase.NOT_RUNNING:
            return
        self.phase = TimerPhase.RUNNING
        self.game_time = 0.0
        self.splits = []

    def split(self) -> None:
        if self.phase is not TimerPhase.RUNNING:
            return
        self.splits.append(self.game_time or 0.0)
        if self.segment_count is not None and len(self.splits) >= self.segment_count:
            self.phase = TimerPhase.ENDED

    def reset(self) -> None:
        self.phase = TimerPhase.NOT_RUNNING
        self.game_time = None
        self.splits = []

    def pause(self) -> None:
        if self.phase is TimerPhase.RUNNING:
            self.phase = TimerPhase.PAUSED

    def resume(self) -> None:
        if self.phase is TimerPhase.PAUSED:
            self.phase = TimerPhase.RUNNING

    def toggle_pause(self) -> None:
        if self.phase is TimerPhase.PAUSED:
            self.resume()
        else:
            self.pause()

    def set_game_time(self, seconds: float) -> None:
        if self.phase is TimerPhase.RUNNING:
            self.game_time = seconds

    @property
    def current_segment_time(self) -> Optional[float]:
        if self.game_time is None:
            return None
        last = self.splits[-1] if self.splits else 0.0
        return self.game_time - last

    @property
    def last_segment_time(self) -> Optional[float]:
        if not self.splits:
            return None
        if len(self.splits) == 1:
            return self.splits[0]
        return self.splits[-1] - self.splits[-2]
