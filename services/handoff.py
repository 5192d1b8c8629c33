import queue
import threading
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class HandoffChannel(Generic[T]):
    """
    Rendezvous channel between one producer and one receiver.

    send() returns only once the receiver has taken the item, so at most one
    record is ever in flight between the two sides.
    """

    def __init__(self, poll_interval: float = 0.5):
        self._slot: "queue.Queue[T]" = queue.Queue(maxsize=1)
        self._taken = threading.Semaphore(0)
        self._closed = threading.Event()
        self._poll_interval = poll_interval

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def send(self, item: T) -> bool:
        while True:
            if self._closed.is_set():
                return False
            try:
                self._slot.put(item, timeout=self._poll_interval)
                break
            except queue.Full:
                continue

        while not self._closed.is_set():
            if self._taken.acquire(timeout=self._poll_interval):
                return True
        return False

    def receive(self, timeout: Optional[float] = None) -> Optional[T]:
        if self._closed.is_set():
            return None
        try:
            item = self._slot.get(timeout=timeout)
        except queue.Empty:
            return None
        self._taken.release()
        return item

    def close(self) -> None:
        self._closed.set()
