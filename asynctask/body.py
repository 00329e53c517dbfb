"""
The work and callbacks a task author supplies.
"""

from __future__ import annotations
import abc
from typing import Any, Callable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .context import ExecutionContext


class TaskBody(abc.ABC):
    """
    Abstract base class for the work a Task runs.

    do_in_background() and post_result() run on the background side.
    All other hooks run on the controlling side, from within start(),
    pump() or get().
    """

    @abc.abstractmethod
    def do_in_background(
        self, context: ExecutionContext, *args: Any, **kwargs: Any
    ) -> Any:
        """
        The actual work. It should check context.is_cancelled() now and
        then and return early once it is set. Exceptions raised here are
        re-raised on the controlling side by pump() or get().
        """
        pass

    def post_result(self, result: Any) -> Any:
        """
        Post-processes the result, still on the background side.
        """
        return result

    def should_merge_progress(self, old: Any, new: Any) -> bool:
        """
        Only used with QueuedProgress. Returning True replaces the last
        queued value with the new one instead of appending it.
        """
        return False

    def on_pre_execute(self):
        """Called by start() before the background work begins."""
        pass

    def on_progress_update(self, progress: Any):
        pass

    def on_post_execute(self, result: Any):
        """Called when the task finished without being cancelled."""
        pass

    def on_cancelled(self, result: Any):
        """
        Called instead of on_post_execute() when the task was cancelled,
        or when the background work failed. Calls on_cancelled_cleanup()
        unless overridden.
        """
        self.on_cancelled_cleanup()

    def on_cancelled_cleanup(self):
        """
        Result-less cancellation hook, for bodies that only need to tear
        down their feedback.
        """
        pass


class CallableBody(TaskBody):
    """
    Wraps a plain function and optional callbacks into a TaskBody. The
    function receives the ExecutionContext as its first argument.
    """

    def __init__(
        self,
        func: Callable[..., Any],
        on_pre_execute: Optional[Callable[[], None]] = None,
        on_progress: Optional[Callable[[Any], None]] = None,
        on_finished: Optional[Callable[[Any], None]] = None,
        on_cancelled: Optional[Callable[[Any], None]] = None,
        post_result: Optional[Callable[[Any], Any]] = None,
        merge: Optional[Callable[[Any, Any], bool]] = None,
    ):
        self.func = func
        self._on_pre_execute = on_pre_execute
        self._on_progress = on_progress
        self._on_finished = on_finished
        self._on_cancelled = on_cancelled
        self._post_result = post_result
        self._merge = merge

    def do_in_background(
        self, context: ExecutionContext, *args: Any, **kwargs: Any
    ) -> Any:
        return self.func(context, *args, **kwargs)

    def post_result(self, result: Any) -> Any:
        if self._post_result:
            return self._post_result(result)
        return result

    def should_merge_progress(self, old: Any, new: Any) -> bool:
        if self._merge:
            return self._merge(old, new)
        return False

    def on_pre_execute(self):
        if self._on_pre_execute:
            self._on_pre_execute()

    def on_progress_update(self, progress: Any):
        if self._on_progress:
            self._on_progress(progress)

    def on_post_execute(self, result: Any):
        if self._on_finished:
            self._on_finished(result)

    def on_cancelled(self, result: Any):
        if self._on_cancelled:
            self._on_cancelled(result)
        else:
            super().on_cancelled(result)

    def __repr__(self) -> str:
        name = getattr(self.func, "__name__", repr(self.func))
        return f"CallableBody({name})"
