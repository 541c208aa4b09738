from __future__ import annotations

"""
Unit tests for the Source Unit Registry (Code Model Provider).
"""

import logging
from pathlib import Path

import pytest

from solcockpit.core.services.registry import SourceUnitRegistry


def test_load_from_disk_and_lookup(sol_workspace: Path) -> None:
    """TC-01: Loaded documents are returned by id and listed in load order."""
    registry = SourceUnitRegistry()
    token = str(sol_workspace / "contracts" / "Token.sol")
    base = str(sol_workspace / "contracts" / "Base.sol")

    assert registry.load(token) is not None
    assert registry.load(base) is not None

    assert registry.known_documents() == [token, base]
    assert "Token" in registry.get_source_unit(token).contracts
    assert len(registry) == 2


def test_lookup_never_parses_on_the_fly(sol_workspace: Path) -> None:
    """TC-02: A document that exists on disk but was not loaded is unknown."""
    registry = SourceUnitRegistry()
    assert registry.get_source_unit(str(sol_workspace / "contracts" / "Token.sol")) is None


def test_load_in_memory_text_replaces_previous(token_sol: str) -> None:
    """TC-03: Editor text takes precedence and reloading refreshes the outline."""
    registry = SourceUnitRegistry()
    registry.load("/ws/Token.sol", token_sol)
    registry.load("/ws/Token.sol", "contract Renamed {}")

    unit = registry.get_source_unit("/ws/Token.sol")
    assert list(unit.contracts) == ["Renamed"]
    assert registry.known_documents() == ["/ws/Token.sol"]


def test_unrecognized_and_unreadable_documents(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """TC-04: Non-source documents are ignored, unreadable ones logged."""
    registry = SourceUnitRegistry()
    assert registry.load(str(tmp_path / "notes.md"), "# hi") is None

    with caplog.at_level(logging.WARNING):
        assert registry.load(str(tmp_path / "missing.sol")) is None
    assert "missing.sol" in caplog.text
    assert registry.known_documents() == []


def test_forget() -> None:
    """TC-05: Forgotten documents are no longer known."""
    registry = SourceUnitRegistry()
    registry.load("/ws/A.sol", "contract A {}")
    registry.forget("/ws/A.sol")

    assert registry.get_source_unit("/ws/A.sol") is None
