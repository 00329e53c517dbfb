"""
Carries the result of a background run back to the controlling side.

The background closure never lets an exception escape. Instead it returns
an Outcome, and the failure itself is parked in an ErrorCapture until the
controlling side performs the finish transition and re-raises it there.
"""

from __future__ import annotations
import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome:
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any) -> Outcome:
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> Outcome:
        # A failed run still yields the default result.
        return cls(value=None, error=error)


class ErrorCapture:
    """
    Holds at most one exception raised on the background side, together
    with a flag that marks it as still needing delivery.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._error: Optional[BaseException] = None
        self._needs_delivery = False

    def capture(self, error: BaseException) -> bool:
        """
        Stores the error if none was captured yet. Returns False (and
        keeps the first error) otherwise.
        """
        with self._lock:
            if self._error is not None:
                logger.debug(
                    f"Ignoring {error!r}, already holding {self._error!r}"
                )
                return False
            self._error = error
            self._needs_delivery = True
            return True

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._needs_delivery and self._error is not None

    @property
    def error(self) -> Optional[BaseException]:
        """The captured error, delivered or not. Never cleared."""
        with self._lock:
            return self._error

    def take(self) -> Optional[BaseException]:
        """
        Returns the captured error if it still needs delivery and marks
        it as delivered, so that any later call returns None.
        """
        with self._lock:
            if not self._needs_delivery:
                return None
            self._needs_delivery = False
            return self._error

    def discard(self) -> None:
        """Marks the error as delivered without surfacing it."""
        with self._lock:
            if self._needs_delivery:
                logger.debug(f"Discarding captured error {self._error!r}")
            self._needs_delivery = False
