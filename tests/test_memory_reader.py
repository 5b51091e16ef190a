from __future__ import annotations

import struct
import unittest

from config import GAME_TIME_OFFSETS, MODULE_NAME, PROC_NAME, SCENE_BUF_LEN
from memory_reader import (
    GameSession,
    MemoryUnavailable,
    PointerWatcher,
    SessionManager,
    read_typed,
    resolve_address,
    resolve_pointer_chain,
)
from model import ValuePair

from fakes import MODULE_BASE, SCENE_BUF_ADDR, FakeAccessor, FakeGame, FakeProcess

ACT1_ROOM = "Assets/_Levels/_LiveFolder/ACT1/Room3.unity"
LOADING = "Assets/_Levels/_LiveFolder/Misc/LoadingScenes/Load.unity"


class PointerChainTests(unittest.TestCase):
    def test_chain_follows_every_hop(self) -> None:
        process = FakeProcess()
        process.memory[0x1010] = struct.pack("<Q", 0x5000)
        process.memory[0x5020] = struct.pack("<Q", 0x9000)
        process.memory[0x9008] = struct.pack("<d", 12.5)

        self.assertEqual(resolve_address(process, 0x1000, (0x10, 0x20, 0x08)), 0x9008)
        self.assertEqual(resolve_pointer_chain(process, 0x1000, (0x10, 0x20, 0x08), "<d"), 12.5)

    def test_single_offset_reads_at_base_plus_offset(self) -> None:
        process = FakeProcess()
        process.memory[0x1040] = b"\x07"
        self.assertEqual(resolve_pointer_chain(process, 0x1000, (0x40,), "<B"), 7)
        self.assertEqual(process.read_calls, [(0x1040, 1)])

    def test_empty_chain_reads_base(self) -> None:
        process = FakeProcess()
        process.memory[0x1000] = struct.pack("<I", 99)
        self.assertEqual(resolve_pointer_chain(process, 0x1000, (), "<I"), 99)

    def test_broken_intermediate_pointer_fails(self) -> None:
        process = FakeProcess()
        final = process.install_chain(MODULE_BASE, GAME_TIME_OFFSETS, struct.pack("<d", 1.0))
        broken = MODULE_BASE + GAME_TIME_OFFSETS[0]
        process.broken.add(broken)
        with self.assertRaises(MemoryUnavailable):
            resolve_pointer_chain(process, MODULE_BASE, GAME_TIME_OFFSETS, "<d")
        self.assertNotIn((final, 8), process.read_calls)

    def test_unmapped_final_address_fails(self) -> None:
        process = FakeProcess()
        final = process.install_chain(MODULE_BASE, GAME_TIME_OFFSETS, struct.pack("<d", 1.0))
        del process.memory[final]
        with self.assertRaises(MemoryUnavailable):
            resolve_pointer_chain(process, MODULE_BASE, GAME_TIME_OFFSETS, "<d")

    def test_short_read_fails(self) -> None:
        process = FakeProcess()
        process.memory[0x2000] = b"\x01\x02"
        with self.assertRaises(MemoryUnavailable):
            read_typed(process, 0x2000, "<d")


class PointerWatcherTests(unittest.TestCase):
    def test_failed_read_keeps_history(self) -> None:
        game = FakeGame()
        watcher = PointerWatcher(GAME_TIME_OFFSETS, "<d", 0.0)

        game.set_game_time(3.0)
        self.assertEqual(watcher.update(game.process, MODULE_BASE), ValuePair(0.0, 3.0))

        game.process.broken.add(game.game_time_addr)
        self.assertEqual(watcher.update(game.process, MODULE_BASE), ValuePair(0.0, 3.0))

        game.process.broken.clear()
        game.set_game_time(4.0)
        self.assertEqual(watcher.update(game.process, MODULE_BASE), ValuePair(3.0, 4.0))

    def test_no_baseline_returns_none(self) -> None:
        watcher = PointerWatcher(GAME_TIME_OFFSETS, "<d", 0.0)
        self.assertIsNone(watcher.update(FakeProcess(), MODULE_BASE))


class GameSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.game = FakeGame()
        self.session = GameSession(self.game.process, MODULE_BASE)

    def test_update_vars_reads_all_values(self) -> None:
        self.game.set(game_time=1.5, scene=ACT1_ROOM, alarm=1)
        vars = self.session.update_vars()
        self.assertIsNotNone(vars)
        self.assertEqual(vars.game_time, ValuePair(0.0, 1.5))
        self.assertEqual(vars.scene, ValuePair("", ACT1_ROOM))
        self.assertEqual(vars.retro_alarm_clicked, ValuePair(0, 1))
        self.assertIn((SCENE_BUF_ADDR, SCENE_BUF_LEN), self.game.process.read_calls)

    def test_scene_pair_tracks_previous_cycle(self) -> None:
        self.game.set(game_time=1.0, scene=ACT1_ROOM)
        self.session.update_vars()
        self.game.set(game_time=2.0, scene=LOADING)
        vars = self.session.update_vars()
        self.assertEqual(vars.scene, ValuePair(ACT1_ROOM, LOADING))
        self.assertTrue(vars.scene.changed)
        self.assertEqual(vars.game_time, ValuePair(1.0, 2.0))

    def test_scene_pointer_failure_gates_everything(self) -> None:
        self.game.set(game_time=1.0, scene=ACT1_ROOM)
        self.game.process.broken.add(self.game.scene_ptr_addr)
        self.assertIsNone(self.session.update_vars())
        self.assertNotIn((self.game.game_time_addr, 8), self.game.process.read_calls)

    def test_flag_failure_discards_whole_snapshot(self) -> None:
        self.game.set(game_time=1.0, scene=ACT1_ROOM)
        self.session.update_vars()
        before = (
            self.session.game_time.pair,
            self.session.scene_ptr.pair,
            self.session.scene,
            self.session.retro_alarm_clicked.pair,
        )

        self.game.set(game_time=2.0, scene=LOADING, alarm=1)
        self.game.process.broken.add(self.game.alarm_addr)
        self.assertIsNone(self.session.update_vars())

        after = (
            self.session.game_time.pair,
            self.session.scene_ptr.pair,
            self.session.scene,
            self.session.retro_alarm_clicked.pair,
        )
        self.assertEqual(after, before)

        # Once the read works again the change shows up exactly once.
        self.game.process.broken.clear()
        vars = self.session.update_vars()
        self.assertEqual(vars.scene, ValuePair(ACT1_ROOM, LOADING))
        self.assertEqual(vars.game_time, ValuePair(1.0, 2.0))
        self.assertEqual(vars.retro_alarm_clicked, ValuePair(0, 1))

    def test_scene_buffer_failure_discards_snapshot(self) -> None:
        self.game.set(game_time=1.0, scene=ACT1_ROOM)
        self.game.process.broken.add(SCENE_BUF_ADDR)
        self.assertIsNone(self.session.update_vars())
        self.assertEqual(self.session.scene, ValuePair("", ""))
        self.assertEqual(self.session.scene_ptr.pair, ValuePair(0, 0))

    def test_invalid_scene_text_becomes_null(self) -> None:
        self.game.set(game_time=1.0, scene=ACT1_ROOM)
        self.game.set_scene_bytes(b"Assets/\xc3\x28broken")
        vars = self.session.update_vars()
        self.assertEqual(vars.scene.current, "null")

    def test_long_scene_path_is_truncated(self) -> None:
        path = "Assets/" + "x" * 400 + ".unity"
        self.game.set(game_time=1.0, scene=path)
        vars = self.session.update_vars()
        self.assertEqual(vars.scene.current, path[:SCENE_BUF_LEN])

    def test_scene_pointer_is_followed_fresh_each_cycle(self) -> None:
        self.game.set(game_time=1.0, scene=ACT1_ROOM)
        self.session.update_vars()

        moved = SCENE_BUF_ADDR + 0x1000
        self.game.process.memory[self.game.scene_ptr_addr] = struct.pack("<Q", moved)
        self.game.process.memory[moved] = LOADING.encode().ljust(SCENE_BUF_LEN, b"\x00")
        vars = self.session.update_vars()
        self.assertEqual(vars.scene.current, LOADING)
        self.assertEqual(self.session.scene_ptr.pair, ValuePair(SCENE_BUF_ADDR, moved))


class SessionManagerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.messages: list[str] = []

    def test_attaches_once_process_and_module_exist(self) -> None:
        game = FakeGame()
        manager = SessionManager(FakeAccessor(game.process), self.messages.append)
        session = manager.ensure_session()
        self.assertIsNotNone(session)
        self.assertEqual(session.module, MODULE_BASE)
        self.assertIs(manager.ensure_session(), session)
        self.assertEqual(self.messages, ["attached to process successfully"])

    def test_missing_process_is_retried_every_call(self) -> None:
        accessor = FakeAccessor(None)
        manager = SessionManager(accessor, self.messages.append)
        for _ in range(3):
            self.assertIsNone(manager.ensure_session())
        self.assertEqual(accessor.attach_calls, [PROC_NAME] * 3)
        self.assertEqual(self.messages, [])

    def test_missing_module_is_reported_and_retried(self) -> None:
        process = FakeProcess(modules={})
        accessor = FakeAccessor(process)
        manager = SessionManager(accessor, self.messages.append)
        self.assertIsNone(manager.ensure_session())
        self.assertIsNone(manager.ensure_session())
        self.assertEqual(self.messages, ["module not found", "module not found"])
        self.assertEqual(len(accessor.attach_calls), 2)
        self.assertTrue(process.closed)

        process.modules[MODULE_NAME] = MODULE_BASE
        self.assertIsNotNone(manager.ensure_session())

    def test_closed_process_tears_session_down(self) -> None:
        game = FakeGame()
        manager = SessionManager(FakeAccessor(game.process), self.messages.append)
        manager.ensure_session()

        game.process.open = False
        game.process.read_calls.clear()
        self.assertIsNone(manager.ensure_session())
        self.assertIsNone(manager.game)
        self.assertTrue(game.process.closed)
        self.assertEqual(game.process.read_calls, [])

    def test_reattach_starts_with_fresh_watchers(self) -> None:
        first = FakeGame()
        accessor = FakeAccessor(first.process)
        manager = SessionManager(accessor, self.messages.append)
        first.set(game_time=50.0, scene=ACT1_ROOM)
        manager.ensure_session().update_vars()

        first.process.open = False
        manager.ensure_session()

        second = FakeGame()
        second.set(game_time=1.0, scene=ACT1_ROOM)
        accessor.process = second.process
        vars = manager.ensure_session().update_vars()
        self.assertEqual(vars.game_time, ValuePair(0.0, 1.0))
        self.assertEqual(vars.scene, ValuePair("", ACT1_ROOM))

    def test_process_gone_right_after_attach_is_dropped_same_cycle(self) -> None:
        game = FakeGame()
        game.process.open = False
        manager = SessionManager(FakeAccessor(game.process), self.messages.append)
        self.assertIsNone(manager.ensure_session())
        self.assertIsNone(manager.game)
        self.assertEqual(self.messages, ["attached to process successfully", "process closed"])
        self.assertEqual(game.process.read_calls, [])

    def test_custom_names_are_used(self) -> None:
        accessor = FakeAccessor(FakeProcess(modules={"UnityPlayer.dll": MODULE_BASE}), process_name="Superliminal")
        manager = SessionManager(accessor, self.messages.append, "Superliminal", "UnityPlayer.dll")
        self.assertIsNotNone(manager.ensure_session())


if __name__ == "__main__":
    unittest.main()
