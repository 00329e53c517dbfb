"""
A ready-made controlling-side loop for hosts without an event loop of
their own, such as console tools.
"""

import logging
import time
from typing import Any, Callable, Optional
from . import config
from .task import Task


logger = logging.getLogger(__name__)


def pump_until_finished(
    task: Task,
    interval_ms: Optional[int] = None,
    on_tick: Optional[Callable[[Task, int], None]] = None,
) -> Any:
    """
    Pumps the task until it is finished and returns its result.

    on_tick(task, tick) is called after every pump() that did not finish
    the task, before sleeping. It may call task.cancel(). Exceptions from
    the background work propagate from here.
    """
    if interval_ms is None:
        interval_ms = config.POLL_INTERVAL_MS
    tick = 0
    while not task.pump():
        if on_tick:
            on_tick(task, tick)
        tick += 1
        time.sleep(interval_ms / 1000.0)
    logger.debug(f"Task '{task.key}' finished after {tick} ticks")
    return task.result()
