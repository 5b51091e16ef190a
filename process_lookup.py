# process_lookup.py
# Requires: pip install psutil

import os
from typing import Callable, Optional

import psutil


def _same_name(proc_name: str, wanted: str) -> bool:
    proc_name = proc_name.lower()
    wanted = wanted.lower()
    return proc_name == wanted or os.path.splitext(proc_name)[0] == wanted


class WatchedProcess:
    """
    Liveness of one attached process.

    Holds the psutil.Process found at attach time; psutil checks its
    creation time, so a new process that reuses the PID reads as closed.
    """

    def __init__(self, proc: psutil.Process) -> None:
        self.proc = proc
        self.pid = proc.pid

    def is_open(self) -> bool:
        try:
            return self.proc.is_running()
        except psutil.Error:
            return False


class ProcessFinder:
    def __init__(self, print_message: Callable[[str], None]) -> None:
        self.print_message = print_message
        self.reported_pid: Optional[int] = None

    def find(self, name: str) -> Optional[WatchedProcess]:
        for proc in psutil.process_iter(["pid", "name"]):
            try:
                if proc.info["name"] and _same_name(proc.info["name"], name):
                    break
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue
        else:
            # not running
            return None

        if proc.pid != self.reported_pid:
            self.reported_pid = proc.pid
            self.print_message(f"found {name} (PID {proc.pid})")
        return WatchedProcess(proc)
