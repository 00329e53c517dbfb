import threading
from typing import Optional


class CancellationFlag:
    """
    A one-way cancellation signal shared between the controlling side and
    the background side. Once set it stays set; setting it again is a
    no-op.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def set(self) -> None:
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Blocks until the flag is set or the timeout expires. Returns
        True if the flag is set.
        """
        return self._event.wait(timeout)

    def __bool__(self) -> bool:
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"CancellationFlag(set={self.is_set()})"
