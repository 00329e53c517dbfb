"""
Console demo: a fake long calculation with a progress display that can
be cancelled after a number of render ticks.
"""

import argparse
import logging
import sys
import time
from typing import List, Optional, TextIO
from . import config
from .context import ExecutionContext
from .loop import pump_until_finished
from .progress import LatestProgress, QueuedProgress
from .task import AsyncTask, Task


logger = logging.getLogger(__name__)

FINISHED_RESULT = "Finished result object"
CANCELLED_RESULT = "Empty, unfinished object"


class DemoFailure(Exception):
    pass


class ProgressBarTask(AsyncTask):
    def __init__(
        self,
        delay_ms: int = 100,
        fail_at: Optional[int] = None,
        out: Optional[TextIO] = None,
        queued: bool = False,
    ):
        progress = QueuedProgress() if queued else LatestProgress(int)
        super().__init__(progress=progress, key="demo")
        self.delay_ms = delay_ms
        self.fail_at = fail_at
        self.out = out or sys.stdout

    def do_in_background(self, context: ExecutionContext, steps: int):
        for i in range(steps + 1):
            time.sleep(self.delay_ms / 1000.0)
            context.publish_progress(i * 100 // max(steps, 1))
            if self.fail_at is not None and i >= self.fail_at:
                raise DemoFailure(f"Failed at step {i}")
            if context.is_cancelled():
                return CANCELLED_RESULT
        return FINISHED_RESULT

    def should_merge_progress(self, old: int, new: int) -> bool:
        # Only report each percentage once.
        return old == new

    def on_pre_execute(self):
        self._write("Time-consuming calculation:\nProgress: 0%")

    def on_progress_update(self, progress):
        if progress is not None:
            self._write(f"\rProgress: {progress}%")

    def on_post_execute(self, result):
        self._write("\rProgress is finished.")

    def on_cancelled(self, result):
        self._write("\rProgress is cancelled.")

    def _write(self, text: str):
        self.out.write(text)
        self.out.flush()


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="asynctask",
        description="Runs a cancellable background calculation.",
    )
    parser.add_argument(
        "--steps", type=int, default=100, help="Number of work steps."
    )
    parser.add_argument(
        "--delay-ms",
        type=int,
        default=20,
        help="Time each work step takes.",
    )
    parser.add_argument(
        "--interval-ms",
        type=int,
        default=None,
        help="Time between two progress polls "
        "(default: ASYNCTASK_POLL_INTERVAL_MS or 100).",
    )
    parser.add_argument(
        "--cancel-after",
        type=int,
        default=None,
        metavar="TICKS",
        help="Cancel the task after this many polls.",
    )
    parser.add_argument(
        "--fail",
        type=int,
        default=None,
        metavar="STEP",
        help="Make the work fail at the given step.",
    )
    parser.add_argument(
        "--queue",
        action="store_true",
        help="Deliver every progress value instead of the latest only.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging."
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None, out: Optional[TextIO] = None):
    args = parse_arguments(argv)
    out = out or sys.stdout

    logging.basicConfig(
        level=logging.DEBUG if args.verbose or config.TRACE else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger.debug(f"Running demo with {args}")
    task = ProgressBarTask(
        delay_ms=args.delay_ms, fail_at=args.fail, out=out, queued=args.queue
    )

    def on_tick(running: Task, tick: int):
        if args.cancel_after is not None and tick >= args.cancel_after:
            running.cancel()

    with task:
        task.start(args.steps)
        try:
            result = pump_until_finished(
                task, interval_ms=args.interval_ms, on_tick=on_tick
            )
        except DemoFailure as e:
            out.write(f"\nException was thrown: {e}\n")
            return 1

    out.write(f"\nThe result: {result}\n")
    return 0
