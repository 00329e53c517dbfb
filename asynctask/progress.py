"""
Progress storage strategies.

A task's background side publishes progress values into a store, and the
controlling side dispatches them to the task's progress callback on every
pump() tick. Two strategies share one interface:

- LatestProgress keeps only the newest value. Values published between
  two ticks are overwritten, so the callback sees the latest state only.
- QueuedProgress keeps every published value, in order, and hands all of
  them to the callback on the next tick.
"""

from __future__ import annotations
import abc
import copy
import threading
from collections import deque
from typing import Any, Callable, Deque, List, Optional, Type


MergePolicy = Callable[[Any, Any], bool]

# Types whose instances are immutable, so a reader can never observe a
# partially updated value and the slot needs no lock.
_ATOMIC_TYPES = (int, float, bool, complex, str, bytes, type(None))


def is_atomic_compatible(progress_type: Optional[Type]) -> bool:
    if progress_type is None:
        return True
    # Typing constructs such as Optional[int] are not classes.
    if not isinstance(progress_type, type):
        return False
    return issubclass(progress_type, _ATOMIC_TYPES)


class ProgressStore(abc.ABC):
    """
    Abstract base class for progress stores.

    publish() is only ever called from the background side and never
    concurrently with itself. dispatch() is only called from the
    controlling side, but may run concurrently with publish().
    """

    @abc.abstractmethod
    def publish(self, value: Any, merge: Optional[MergePolicy] = None):
        """Stores a progress value."""
        pass

    @abc.abstractmethod
    def dispatch(self, callback: Callable[[Any], None]):
        """
        Hands the stored progress to the callback. Called once per pump()
        tick while the task is running.
        """
        pass

    @abc.abstractmethod
    def peek(self) -> Any:
        """Returns a snapshot of the store, for diagnostics."""
        pass


class AtomicSlot:
    """
    A lock-free single value cell. Rebinding an attribute is atomic in
    CPython, which is enough when the value itself is immutable.
    """

    def __init__(self, initial: Any = None):
        self._value = initial

    def store(self, value: Any):
        self._value = value

    def load(self) -> Any:
        return self._value


class LockedSlot:
    """
    A mutex-guarded single value cell for mutable progress types. Values
    are copied in and out, so the background side can keep mutating its
    own object after publishing it.
    """

    def __init__(self, initial: Any = None):
        self._lock = threading.Lock()
        self._value = initial

    def store(self, value: Any):
        value = copy.copy(value)
        with self._lock:
            self._value = value

    def load(self) -> Any:
        with self._lock:
            return copy.copy(self._value)


class LatestProgress(ProgressStore):
    """Overwrite strategy: only the most recent value is kept."""

    def __init__(
        self,
        progress_type: Optional[Type] = None,
        lockfree: Optional[bool] = None,
        initial: Any = None,
    ):
        if lockfree is None:
            lockfree = is_atomic_compatible(progress_type)
        self.lockfree = lockfree
        self._slot = AtomicSlot(initial) if lockfree else LockedSlot(initial)

    def publish(self, value: Any, merge: Optional[MergePolicy] = None):
        # merge does not apply, there is nothing to merge with.
        self._slot.store(value)

    def dispatch(self, callback: Callable[[Any], None]):
        callback(self._slot.load())

    def peek(self) -> Any:
        return self._slot.load()


class QueuedProgress(ProgressStore):
    """
    Queue strategy: every published value is delivered, in publish
    order. A merge policy may collapse a new value into the last queued
    one instead of appending it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._queue: Deque[Any] = deque()

    def publish(self, value: Any, merge: Optional[MergePolicy] = None):
        with self._lock:
            if self._queue and merge is not None and merge(
                self._queue[-1], value
            ):
                self._queue[-1] = value
            else:
                self._queue.append(value)

    def drain(self) -> List[Any]:
        """
        Detaches everything queued so far and leaves an empty queue
        behind.
        """
        with self._lock:
            drained, self._queue = self._queue, deque()
        return list(drained)

    def dispatch(self, callback: Callable[[Any], None]):
        for value in self.drain():
            callback(value)

    def peek(self) -> int:
        with self._lock:
            return len(self._queue)

    def __len__(self) -> int:
        return self.peek()
