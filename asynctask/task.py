"""
Task module: the lifecycle of a single cancellable background run.
"""

from __future__ import annotations
import asyncio
import concurrent.futures
import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple
from blinker import Signal
from .body import CallableBody, TaskBody
from .cancel import CancellationFlag
from .context import ExecutionContext
from .errors import (
    AlreadyFinishedError,
    AlreadyRunningError,
    NotStartedError,
)
from .outcome import ErrorCapture, Outcome
from .progress import LatestProgress, ProgressStore


logger = logging.getLogger(__name__)


class TaskStatus(Enum):
    PENDING = "pending"  # Not started yet.
    RUNNING = "running"
    FINISHED = "finished"  # Completed, cancelled or failed.


class Task:
    """
    Runs a TaskBody once on a background thread and lets the controlling
    side observe it.

    The controlling side calls start(), then either polls pump() from its
    own loop (a UI timer, a render loop, a console loop) or blocks in
    get(). Progress callbacks, the finish callbacks and the re-raising of
    background errors all happen inside those calls, so they always run
    on the controlling side's thread.

    A task represents exactly one run. It cannot be restarted, copied or
    pickled.
    """

    def __init__(
        self,
        body: TaskBody,
        progress: Optional[ProgressStore] = None,
        executor: Optional[concurrent.futures.Executor] = None,
        key: Optional[Any] = None,
    ):
        self.body = body
        self.key = key if key is not None else id(self)
        self.args: Tuple[Any, ...] = ()
        self.kwargs: Dict[str, Any] = {}
        self.status_changed = Signal()
        self._progress = progress if progress is not None else (
            LatestProgress()
        )
        self._executor = executor
        self._status = TaskStatus.PENDING
        self._result: Any = None
        self._future: Optional[concurrent.futures.Future] = None
        self._cancelled = CancellationFlag()
        self._errors = ErrorCapture()
        self._context = ExecutionContext(self)

    @classmethod
    def from_callable(
        cls,
        func: Callable[..., Any],
        *,
        progress: Optional[ProgressStore] = None,
        executor: Optional[concurrent.futures.Executor] = None,
        key: Optional[Any] = None,
        **callbacks: Any,
    ) -> Task:
        """
        Creates a task for a plain function. The function receives the
        ExecutionContext as its first argument. See CallableBody for the
        accepted callbacks.
        """
        body = CallableBody(func, **callbacks)
        return cls(body, progress=progress, executor=executor, key=key)

    def __copy__(self):
        raise TypeError(f"{type(self).__name__} cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError(f"{type(self).__name__} cannot be copied")

    def __reduce_ex__(self, protocol):
        raise TypeError(f"{type(self).__name__} cannot be pickled")

    def __enter__(self) -> Task:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} key={self.key!r} "
            f"status={self._status.value} cancelled={self.is_cancelled()}>"
        )

    def start(self, *args: Any, **kwargs: Any) -> Task:
        """
        Runs on_pre_execute() and launches the background work with the
        given arguments. Returns immediately.

        Raises AlreadyRunningError or AlreadyFinishedError if the task
        was started before.
        """
        if self._status == TaskStatus.RUNNING:
            raise AlreadyRunningError()
        if self._status == TaskStatus.FINISHED:
            raise AlreadyFinishedError()

        self._status = TaskStatus.RUNNING
        self.args = args
        self.kwargs = kwargs
        logger.debug(f"Task '{self.key}': starting")

        self.body.on_pre_execute()
        self._emit_status_changed()
        try:
            self._future = self._launch(args, kwargs)
        except Exception:
            # Nothing runs in the background, so the task ends here
            # without callbacks.
            logger.debug(f"Task '{self.key}': launch failed", exc_info=True)
            self._cancelled.set()
            self._status = TaskStatus.FINISHED
            self._emit_status_changed()
            raise
        return self

    execute = start

    def _launch(
        self, args: Tuple[Any, ...], kwargs: Dict[str, Any]
    ) -> concurrent.futures.Future:
        if self._executor is not None:
            return self._executor.submit(
                self._run_in_background, args, kwargs
            )

        # Without an executor, each task gets its own thread.
        future: concurrent.futures.Future = concurrent.futures.Future()
        future.set_running_or_notify_cancel()

        def runner():
            try:
                outcome = self._run_in_background(args, kwargs)
            except BaseException as e:
                # Delivered by pump() or get(), like any other failure.
                future.set_exception(e)
                return
            future.set_result(outcome)

        thread = threading.Thread(
            target=runner, name=f"asynctask-{self.key}", daemon=True
        )
        thread.start()
        return future

    def _run_in_background(
        self, args: Tuple[Any, ...], kwargs: Dict[str, Any]
    ) -> Outcome:
        # The owner may have shut the task down before this thread got
        # scheduled. The body must not run in that case.
        if self.is_cancelled():
            logger.debug(f"Task '{self.key}': cancelled before it ran")
            return Outcome.success(None)

        try:
            result = self.body.do_in_background(
                self._context, *args, **kwargs
            )
            return Outcome.success(self.body.post_result(result))
        except Exception as e:
            # Cancelling first guarantees the on_cancelled() branch.
            self.cancel()
            self._errors.capture(e)
            logger.debug(
                f"Task '{self.key}': captured {type(e).__name__}: {e}"
            )
            return Outcome.failure(e)

    def get_status(self) -> TaskStatus:
        return self._status

    def is_cancelled(self) -> bool:
        """
        Returns True once cancel() was called. Safe to call from the
        background side.
        """
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """
        Requests cancellation. The background work has to notice it by
        checking is_cancelled() and return early on its own.
        """
        if not self._cancelled.is_set():
            logger.debug(f"Task '{self.key}': cancellation requested")
        self._cancelled.set()

    def publish_progress(self, progress: Any) -> None:
        """
        Stores a progress value from the background side. Dropped once
        the task is cancelled, as the result is settled by then.
        """
        if self.is_cancelled():
            return
        self._progress.publish(progress, self.body.should_merge_progress)

    def get_progress(self) -> Any:
        return self._progress.peek()

    @property
    def error(self) -> Optional[BaseException]:
        """The exception raised by the background work, if any."""
        return self._errors.error

    def pump(self) -> bool:
        """
        Non-blocking. Dispatches pending progress while the background
        work is running and performs the finish transition once it is
        done.

        Returns True if the task is finished. Re-raises an exception from
        the background work on the call that finishes the task.
        """
        if self._status == TaskStatus.FINISHED:
            return True
        if self._status == TaskStatus.PENDING or self._future is None:
            return False

        if not self._future.done():
            self._progress.dispatch(self.body.on_progress_update)
            return False

        self._finish(self._collect())
        return True

    def get(self, timeout: Optional[float] = None) -> Any:
        """
        Blocks until the background work is done and returns the result.
        Re-raises an exception from the background work if this call
        finishes the task.

        With a timeout, raises concurrent.futures.TimeoutError if the work
        is still running after that many seconds. The task is left
        untouched in that case.
        """
        if self._status != TaskStatus.FINISHED:
            if self._future is None:
                raise NotStartedError()
            self._finish(self._collect(timeout))
        return self._result

    async def get_async(self) -> Any:
        """
        Like get(), but awaits the background work from an asyncio event
        loop instead of blocking it.
        """
        if self._status != TaskStatus.FINISHED:
            if self._future is None:
                raise NotStartedError()
            # wait() neither raises the background failure nor cancels the
            # future when this coroutine is cancelled.
            await asyncio.wait([asyncio.wrap_future(self._future)])
            # Someone may have pumped the task while we were waiting.
            if self._status != TaskStatus.FINISHED:
                self._finish(self._collect())
        return self._result

    def _collect(self, timeout: Optional[float] = None) -> Outcome:
        """
        Waits for the background run and returns its Outcome. Failures
        that escaped the background closure, such as a BaseException from
        the body, are captured here so that they are delivered once.
        """
        assert self._future is not None
        try:
            error = self._future.exception(timeout)
        except concurrent.futures.CancelledError:
            # The executor dropped the work before it started.
            self.cancel()
            return Outcome.success(None)
        if error is None:
            return self._future.result()
        self.cancel()
        self._errors.capture(error)
        logger.debug(f"Task '{self.key}': captured {type(error).__name__}")
        return Outcome.failure(error)

    def result(self) -> Any:
        """
        Returns the result of a finished task without blocking.
        """
        if self._status == TaskStatus.PENDING:
            raise NotStartedError()
        if self._status == TaskStatus.RUNNING:
            raise AlreadyRunningError("Task has not finished yet")
        return self._result

    def _finish(self, outcome: Outcome) -> None:
        self._result = outcome.value
        try:
            if self.is_cancelled():
                self.body.on_cancelled(self._result)
            else:
                self.body.on_post_execute(self._result)
        finally:
            self._status = TaskStatus.FINISHED
            logger.debug(
                f"Task '{self.key}': finished "
                f"(cancelled={self.is_cancelled()}, ok={outcome.ok})"
            )
            self._emit_status_changed()

        error = self._errors.take()
        if error is not None:
            raise error

    def close(self) -> None:
        """
        Shuts down a running task: requests cancellation and blocks until
        the background work returns. Runs no callbacks and never raises
        the background work's exception.

        Does nothing if the task is not running.
        """
        if self._status != TaskStatus.RUNNING:
            return

        self.cancel()
        if self._future is not None:
            logger.debug(f"Task '{self.key}': waiting for shutdown")
            concurrent.futures.wait([self._future])
        self._errors.discard()
        self._status = TaskStatus.FINISHED

    def _emit_status_changed(self) -> None:
        self.status_changed.send(self)


class AsyncTask(Task, TaskBody):
    """
    A Task that is its own body. Subclasses implement
    do_in_background() and override the callbacks they need.
    """

    def __init__(
        self,
        progress: Optional[ProgressStore] = None,
        executor: Optional[concurrent.futures.Executor] = None,
        key: Optional[Any] = None,
    ):
        super().__init__(self, progress=progress, executor=executor, key=key)
