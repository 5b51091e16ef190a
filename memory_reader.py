# memory_reader.py

import struct
from typing import Callable, Optional, Protocol, Sequence

from config import (
    GAME_TIME_OFFSETS,
    MODULE_NAME,
    PROC_NAME,
    RETRO_ALARM_OFFSETS,
    SCENE_BUF_LEN,
    SCENE_PTR_OFFSETS,
)
from model import GameVars, ValuePair, Watcher, bytes_to_string

POINTER_FMT = "<Q"


class MemoryReadError(RuntimeError):
    """Base exception for reads from the game process."""


class MemoryUnavailable(MemoryReadError):
    """Raised when a pointer chain cannot be followed or its target read."""


class ModuleNotFound(MemoryReadError):
    """Raised when the named module is not loaded in the attached process."""


class ProcessHandle(Protocol):
    def read_bytes(self, address: int, size: int) -> bytes: ...

    def module_base(self, module_name: str) -> int: ...

    def is_open(self) -> bool: ...

    def close(self) -> None: ...


class ProcessAccessor(Protocol):
    def attach(self, process_name: str) -> Optional[ProcessHandle]: ...


def read_typed(process: ProcessHandle, address: int, fmt: str):
    size = struct.calcsize(fmt)
    try:
        raw = process.read_bytes(address, size)
    except MemoryReadError as e:
        raise MemoryUnavailable(f"read of {size} bytes at 0x{address:X} failed: {e}") from e
    if raw is None or len(raw) != size:
        raise MemoryUnavailable(f"short read at 0x{address:X}")
    return struct.unpack(fmt, raw)[0]


def resolve_address(process: ProcessHandle, base_addr: int, offsets: Sequence[int]) -> int:
    """Follow every offset but the last through pointers; return the final address."""
    if not offsets:
        return base_addr
    addr = base_addr + offsets[0]
    for off in offsets[1:]:
        addr = read_typed(process, addr, POINTER_FMT) + off
    return addr


def resolve_pointer_chain(process: ProcessHandle, base_addr: int, offsets: Sequence[int], fmt: str):
    return read_typed(process, resolve_address(process, base_addr, offsets), fmt)


class PointerWatcher:
    """A Watcher whose value lives at the end of a fixed pointer chain."""

    def __init__(self, offsets: Sequence[int], fmt: str, default) -> None:
        self.offsets = tuple(offsets)
        self.fmt = fmt
        self.watcher = Watcher(default)

    @property
    def pair(self) -> ValuePair:
        return self.watcher.pair

    def read(self, process: ProcessHandle, module: int):
        """Raw read without touching history; None when the chain is broken."""
        try:
            return resolve_pointer_chain(process, module, self.offsets, self.fmt)
        except MemoryUnavailable:
            return None

    def update(self, process: ProcessHandle, module: int) -> Optional[ValuePair]:
        return self.watcher.update(self.read(process, module))


class GameSession:
    def __init__(self, process: ProcessHandle, module: int) -> None:
        self.process = process
        self.module = module
        self.game_time = PointerWatcher(GAME_TIME_OFFSETS, "<d", 0.0)
        self.scene_ptr = PointerWatcher(SCENE_PTR_OFFSETS, POINTER_FMT, 0)
        self.scene: ValuePair[str] = ValuePair(old="", current="")
        self.retro_alarm_clicked = PointerWatcher(RETRO_ALARM_OFFSETS, "<B", 0)

    def read_scene(self, scene_ptr: int) -> Optional[str]:
        try:
            buf = self.process.read_bytes(scene_ptr, SCENE_BUF_LEN)
        except MemoryReadError:
            return None
        if buf is None:
            return None
        return bytes_to_string(buf)

    def update_vars(self) -> Optional[GameVars]:
        """
        Read every watched value for this cycle.

        The scene pointer is read first and gates the rest. Histories only
        advance when all reads succeeded, so a half-read cycle can't show up
        as a change on the next one.
        """
        scene_ptr = self.scene_ptr.read(self.process, self.module)
        if scene_ptr is None:
            return None
        scene = self.read_scene(scene_ptr)
        if scene is None:
            return None
        game_time = self.game_time.read(self.process, self.module)
        if game_time is None:
            return None
        retro_alarm_clicked = self.retro_alarm_clicked.read(self.process, self.module)
        if retro_alarm_clicked is None:
            return None

        self.scene_ptr.watcher.update(scene_ptr)
        self.scene = ValuePair(old=self.scene.current, current=scene)
        return GameVars(
            game_time=self.game_time.watcher.update(game_time),
            scene=self.scene,
            retro_alarm_clicked=self.retro_alarm_clicked.watcher.update(retro_alarm_clicked),
        )


class SessionManager:
    """Owns the single live GameSession; attaches and detaches as the game comes and goes."""

    def __init__(
        self,
        accessor: ProcessAccessor,
        print_message: Callable[[str], None],
        process_name: str = PROC_NAME,
        module_name: str = MODULE_NAME,
    ) -> None:
        self.accessor = accessor
        self.print_message = print_message
        self.process_name = process_name
        self.module_name = module_name
        self.game: Optional[GameSession] = None

    def ensure_session(self) -> Optional[GameSession]:
        if self.game is None:
            process = self.accessor.attach(self.process_name)
            if process is None:
                return None
            try:
                module = process.module_base(self.module_name)
            except ModuleNotFound:
                self.print_message("module not found")
                process.close()
                return None
            self.game = GameSession(process, module)
            self.print_message("attached to process successfully")

        if not self.game.process.is_open():
            self.print_message("process closed")
            self.game.process.close()
            self.game = None
            return None

        return self.game
