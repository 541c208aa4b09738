from __future__ import annotations

"""
Unit tests for the Latest-Wins Request Slot.

Verifies inline delivery, replacement of waiting requests, discarding of
superseded results (inline and threaded) and recovery after a failure.
"""

import logging
import threading
from typing import List

import pytest

from solcockpit.core.services.request_slot import RequestSlot


def test_inline_submit_delivers_result() -> None:
    """TC-01: An uncontended request is delivered immediately."""
    slot = RequestSlot("test")
    delivered: List[str] = []

    ticket = slot.submit(lambda: "r1", delivered.append)

    assert ticket == 1
    assert delivered == ["r1"]
    assert slot.busy is False


def test_requests_arriving_in_flight_keep_only_the_latest() -> None:
    """TC-02: Two arrivals while busy: the first waiter is replaced, the stale result dropped."""
    slot = RequestSlot("test")
    delivered: List[str] = []
    ran: List[str] = []

    def first() -> str:
        ran.append("r1")
        slot.submit(lambda: ran.append("r2") or "r2", delivered.append)
        slot.submit(lambda: ran.append("r3") or "r3", delivered.append)
        return "r1"

    slot.submit(first, delivered.append)

    assert ran == ["r1", "r3"]
    assert delivered == ["r3"]


def test_background_requests_latest_wins() -> None:
    """TC-03: In a worker thread, only the newest request's result is published."""
    slot = RequestSlot("test")
    release = threading.Event()
    delivered: List[str] = []

    def blocking() -> str:
        release.wait(5)
        return "r1"

    slot.submit(blocking, delivered.append, background=True)
    slot.submit(lambda: "r2", delivered.append, background=True)
    slot.submit(lambda: "r3", delivered.append, background=True)
    release.set()
    slot.wait(5)

    assert delivered == ["r3"]
    assert slot.busy is False


def test_failed_request_does_not_block_the_slot() -> None:
    """TC-04: An exception is logged, nothing is delivered and the slot stays usable."""
    slot = RequestSlot("test")
    delivered: List[str] = []

    def broken() -> str:
        raise RuntimeError("boom")

    slot.submit(broken, delivered.append)
    slot.submit(lambda: "ok", delivered.append)

    assert delivered == ["ok"]


def test_failed_delivery_releases_the_slot(caplog: pytest.LogCaptureFixture) -> None:
    """TC-05: A raising result callback is logged and later requests still run."""
    slot = RequestSlot("test")
    delivered: List[str] = []

    def broken_sink(result: str) -> None:
        raise RuntimeError("sink down")

    with caplog.at_level(logging.ERROR):
        slot.submit(lambda: "first", broken_sink)
    slot.submit(lambda: "second", delivered.append)

    assert slot.busy is False
    assert delivered == ["second"]
    assert "delivery of request 1 failed" in caplog.text
