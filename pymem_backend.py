# pymem_backend.py
# Requires: pip install pymem psutil

from typing import Callable, Optional

import pymem
import pymem.exception
import pymem.process

from controller import print_message
from memory_reader import MemoryUnavailable, ModuleNotFound
from process_lookup import ProcessFinder, WatchedProcess


class PymemProcess:
    """Process handle backed by pymem; liveness is checked through psutil."""

    def __init__(self, pm: pymem.Pymem, watched: WatchedProcess, print_message: Callable[[str], None]) -> None:
        self.pm = pm
        self.watched = watched
        self.pid = watched.pid
        self.print_message = print_message

    def read_bytes(self, address: int, size: int) -> bytes:
        try:
            return self.pm.read_bytes(address, size)
        except pymem.exception.PymemError as e:
            raise MemoryUnavailable(str(e)) from e

    def module_base(self, module_name: str) -> int:
        mod = pymem.process.module_from_name(self.pm.process_handle, module_name)
        if mod is None:
            raise ModuleNotFound(f"{module_name} is not loaded in pid {self.pid}")
        return mod.lpBaseOfDll

    def is_open(self) -> bool:
        return self.watched.is_open()

    def close(self) -> None:
        try:
            self.pm.close_process()
        except pymem.exception.PymemError as e:
            self.print_message(f"failed to close process handle: {e}")


class PymemAccessor:
    def __init__(self, print_message: Callable[[str], None] = print_message) -> None:
        self.print_message = print_message
        self.finder = ProcessFinder(print_message)

    def attach(self, process_name: str) -> Optional[PymemProcess]:
        watched = self.finder.find(process_name)
        if watched is None:
            return None
        try:
            pm = pymem.Pymem()
            pm.open_process_from_id(watched.pid)
        except pymem.exception.PymemError as e:
            self.print_message(f"failed to attach: {e}")
            return None
        return PymemProcess(pm, watched, self.print_message)
