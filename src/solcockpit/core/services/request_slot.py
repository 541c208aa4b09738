from __future__ import annotations

"""
Latest-Wins Request Slot.

Serializes the work triggered by rapid selection changes for one view.
At most one request runs and at most one waits: submitting while busy
replaces the waiting request, and the result of any request that was
superseded before it finished is discarded instead of delivered.
"""

import logging
import threading
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)

Work = Callable[[], Any]
Deliver = Callable[[Any], None]


class RequestSlot:
    """
    Depth-1 request queue.

    Attributes:
        name: Label used in log messages.
    """

    def __init__(self, name: str = "slot") -> None:
        self.name = name
        self._lock = threading.Lock()
        self._latest = 0
        self._running = False
        self._pending: Optional[Tuple[int, Work, Deliver]] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._running

    def submit(self, work: Work, on_result: Deliver, background: bool = False) -> int:
        """
        Enqueue a request.

        Args:
            work: Computation to run; its return value is handed to on_result.
            on_result: Callback receiving the result if it is still current.
            background: Run the drain loop in a daemon thread instead of inline.

        Returns:
            int: Ticket of the request (monotonic per slot).
        """
        with self._lock:
            self._latest += 1
            ticket = self._latest
            if self._running:
                if self._pending is not None:
                    logger.debug(f"{self.name}: request {self._pending[0]} replaced by {ticket}")
                self._pending = (ticket, work, on_result)
                return ticket
            self._running = True

        if background:
            self._thread = threading.Thread(
                target=self._drain,
                args=(ticket, work, on_result),
                name=f"solcockpit-{self.name}",
                daemon=True,
            )
            self._thread.start()
        else:
            self._drain(ticket, work, on_result)
        return ticket

    def wait(self, timeout: Optional[float] = None) -> None:
        """Join the background drain thread, if any."""
        thread = self._thread
        if thread is not None:
            thread.join(timeout)

    def _drain(self, ticket: int, work: Work, on_result: Deliver) -> None:
        while True:
            try:
                result = work()
            except Exception as e:
                logger.error(f"{self.name}: request {ticket} failed: {e}", exc_info=True)
            else:
                with self._lock:
                    current = ticket == self._latest
                if current:
                    try:
                        on_result(result)
                    except Exception as e:
                        logger.error(f"{self.name}: delivery of request {ticket} failed: {e}", exc_info=True)
                else:
                    logger.debug(f"{self.name}: discarding stale result of request {ticket}")

            with self._lock:
                if self._pending is None:
                    self._running = False
                    return
                ticket, work, on_result = self._pending
                self._pending = None
