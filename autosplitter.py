# autosplitter.py
# Requires: pip install pymem psutil

import argparse
import csv
import os
import signal
import sys
import threading
import time
from datetime import datetime, UTC
from typing import Optional

from config import MODULE_NAME, PROC_NAME, READ_INTERVAL_MS
from controller import AutosplitController, describe
from model import CommandKind
from pymem_backend import PymemAccessor
from split_timer import SplitTimer


_controller: Optional[AutosplitController] = None
_controller_lock = threading.Lock()


def get_controller() -> AutosplitController:
    global _controller
    with _controller_lock:
        if _controller is None:
            _controller = AutosplitController(PymemAccessor())
        return _controller


def update() -> None:
    """Poll entry point for hosts that schedule the autosplitter themselves."""
    get_controller().update()


# --------------------- CSV ---------------------
def open_csv(path: str):
    new = not os.path.exists(path)
    f = open(path, "a", newline="", encoding="utf-8")
    w = csv.writer(f)
    if new:
        w.writerow(["timestamp_iso", "command", "game_time", "scene"])
    return f, w


def run_headless(controller: AutosplitController, interval: float, csv_path: Optional[str], debug: bool) -> None:
    csv_file, writer = open_csv(csv_path) if csv_path else (None, None)
    if csv_path:
        print(f"[+] Logging to: {os.path.abspath(csv_path)}")
    print("[i] Press Ctrl+C to stop.\n")

    def cleanup(*_):
        if csv_file is not None:
            csv_file.close()
        print("\n[+] Stopped.")
        sys.exit(0)

    signal.signal(signal.SIGINT, cleanup)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, cleanup)

    next_tick = time.monotonic()
    while True:
        now = time.monotonic()
        if now < next_tick:
            time.sleep(max(0.0, next_tick - now))
        next_tick += interval

        commands = controller.update()
        vars = controller.last_vars

        if debug and vars is not None:
            print(
                f"[dbg] igt={vars.game_time.current:.2f} scene='{vars.scene.current}' "
                f"alarm={vars.retro_alarm_clicked.current} timer={controller.timer.query_state().value}"
            )

        for cmd in commands:
            if cmd.kind is CommandKind.SET_GAME_TIME:
                continue
            ts = datetime.now(UTC).isoformat(timespec="seconds")
            print(f"[+] {ts} | {describe(cmd)} | IGT {vars.game_time.current:.2f}")
            if writer is not None:
                writer.writerow([ts, cmd.kind.value, f"{vars.game_time.current:.3f}", vars.scene.current])
                csv_file.flush()


# --------------------- main ---------------------
def main():
    ap = argparse.ArgumentParser(description="Superliminal autosplitter (reads IGT and scene from game memory).")
    ap.add_argument("--interval", type=float, default=READ_INTERVAL_MS / 1000,
                    help=f"Polling interval in seconds (default {READ_INTERVAL_MS / 1000}).")
    ap.add_argument("--headless", action="store_true", help="Run without the window, print to the console.")
    ap.add_argument("--csv", type=str, default=None, help="Append issued start/split/reset commands to this CSV.")
    ap.add_argument("--segments", type=int, default=None, help="End the run after this many splits.")
    ap.add_argument("--process", type=str, default=PROC_NAME, help=f"Process name (default {PROC_NAME}).")
    ap.add_argument("--module", type=str, default=MODULE_NAME, help=f"Module name (default {MODULE_NAME}).")
    ap.add_argument("--debug", action="store_true", help="Print debug info each tick.")
    args = ap.parse_args()

    interval = max(0.01, float(args.interval))
    controller = AutosplitController(
        PymemAccessor(),
        timer=SplitTimer(segment_count=args.segments),
        process_name=args.process,
        module_name=args.module,
    )

    if args.headless:
        run_headless(controller, interval, args.csv, args.debug)
        return

    from ui_tk import TimerWindow

    TimerWindow(controller, interval_ms=int(interval * 1000)).run()


if __name__ == "__main__":
    main()
