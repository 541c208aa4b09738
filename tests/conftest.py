from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. A small Solidity workspace on disk shared by service, view and CLI tests.
3. A recording display sink standing in for the host tree widget.
"""

import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Solidity Sources
# -----------------------------------------------------------------------------
BASE_SOL = """pragma solidity ^0.8.0;

// Access control shared by the token
contract Ownable {
    address owner;

    modifier onlyOwner() {
        require(msg.sender == owner, "not owner");
        _;
    }

    function transferOwnership(address next) public onlyOwner {
        owner = next;
    }
}
"""

TOKEN_SOL = """pragma solidity ^0.8.0;

import "./Base.sol";

contract Token is Ownable {
    mapping(address => uint256) balances;

    constructor() {
        owner = msg.sender;
    }

    function transfer(address to, uint256 amount) public returns (bool) {
        _move(msg.sender, to, amount);
        return true;
    }

    function _move(address from, address to, uint256 amount) internal {
        balances[from] -= amount;
        balances[to] += amount;
    }

    function balanceOf(address who) external view returns (uint256) {
        return balances[who];
    }

    function mint(address to, uint256 amount) external onlyOwner {
        _move(address(0), to, amount);
    }

    function deposit() public payable {
        balances[msg.sender] += msg.value;
    }

    fallback() external payable {}
}
"""

MOCK_SOL = """pragma solidity ^0.8.0;
contract MockToken { function fake() public {} }
"""

FLAT_SOL = """pragma solidity ^0.8.0;
contract FlatToken { function transfer(address to, uint256 v) public returns (bool) { return true; } }
"""


@pytest.fixture
def sol_workspace(tmp_path: Path) -> Path:
    """
    Create a Solidity workspace on disk.

    Structure:
    /workspace
      /contracts
        Base.sol
        Token.sol
      /flat
        Token_flat.sol
      /mocks
        MockToken.sol
      /node_modules/lib
        Lib.sol
      /test
        TokenTest.sol
      README.md
    """
    root = tmp_path / "workspace"
    (root / "contracts").mkdir(parents=True)
    (root / "flat").mkdir()
    (root / "mocks").mkdir()
    (root / "node_modules" / "lib").mkdir(parents=True)
    (root / "test").mkdir()

    (root / "contracts" / "Base.sol").write_text(BASE_SOL, encoding="utf-8")
    (root / "contracts" / "Token.sol").write_text(TOKEN_SOL, encoding="utf-8")
    (root / "flat" / "Token_flat.sol").write_text(FLAT_SOL, encoding="utf-8")
    (root / "mocks" / "MockToken.sol").write_text(MOCK_SOL, encoding="utf-8")
    (root / "node_modules" / "lib" / "Lib.sol").write_text(MOCK_SOL, encoding="utf-8")
    (root / "test" / "TokenTest.sol").write_text(MOCK_SOL, encoding="utf-8")
    (root / "README.md").write_text("# Workspace", encoding="utf-8")
    return root


@pytest.fixture
def locate() -> Callable[[str, str], Tuple[int, int]]:
    """Return a helper giving the 0-based (line, column) of the first occurrence of a needle."""

    def _locate(source: str, needle: str) -> Tuple[int, int]:
        offset = source.index(needle)
        line = source.count("\n", 0, offset)
        column = offset - (source.rfind("\n", 0, offset) + 1)
        return line, column

    return _locate


# -----------------------------------------------------------------------------
# Display Sink Double
# -----------------------------------------------------------------------------
class RecordingSink:
    """Tree widget double that records every call made by a view."""

    def __init__(self, visible: bool = True) -> None:
        self.visible = visible
        self.changes = 0
        self.messages: List[Optional[str]] = []

    @property
    def message(self) -> Optional[str]:
        return self.messages[-1] if self.messages else None

    def notify_changed(self) -> None:
        self.changes += 1

    def set_empty_state_message(self, text: Optional[str]) -> None:
        self.messages.append(text)

    def is_visible(self) -> bool:
        return self.visible


@pytest.fixture
def sinks() -> Dict[str, RecordingSink]:
    """Registry of sinks created through sink_factory, keyed by view id."""
    return {}


@pytest.fixture
def sink_factory(sinks: Dict[str, RecordingSink]) -> Callable[[str], RecordingSink]:
    def _factory(view_id: str) -> RecordingSink:
        sinks[view_id] = RecordingSink()
        return sinks[view_id]

    return _factory


@pytest.fixture
def cockpit_config(sol_workspace: Path) -> Dict[str, Any]:
    """Default configuration rooted at the sample workspace."""
    from solcockpit.domain.config import get_default_config

    cfg = get_default_config()
    cfg["workspace_root"] = str(sol_workspace)
    return cfg


@pytest.fixture
def token_sol() -> str:
    return TOKEN_SOL


@pytest.fixture
def base_sol() -> str:
    return BASE_SOL
