from __future__ import annotations

"""
Unit tests for the Function Call Trace Engine.

Sources are served from memory through a custom loader so that every
scenario states its own small code base.
"""

from typing import Dict

import pytest

from solcockpit.core.analysis.ftrace import FunctionTraceEngine, TraceEngineError
from solcockpit.core.analysis.sol_outline import SolidityParseError, parse_solidity_source

VAULT_SOL = """
contract Vault {
    Token token;

    function pull(address to) external {
        token.transfer(to, 1);
        this.ping();
        helper();
        IERC20(to).approve(to, 2);
        msg.sender.call("");
        abi.encode(to);
    }

    function ping() external {}

    function helper() internal {
        helper();
    }
}

contract Token {
    function transfer(address to, uint256 v) public returns (bool) { return true; }
}
"""

INHERIT_SOL = """
contract A {
    function hook() internal virtual { }
}

contract B is A {
    modifier guarded() { _; }

    function hook() internal virtual override {
        super.hook();
    }

    function run() public payable guarded {
        hook();
    }
}
"""


def _engine(sources: Dict[str, str], **kwargs) -> FunctionTraceEngine:
    def load(path: str):
        if path not in sources:
            raise SolidityParseError(f"Could not read '{path}'")
        return parse_solidity_source(sources[path], document_id=path)

    return FunctionTraceEngine(load_unit=load, **kwargs)


# -----------------------------------------------------------------------------
# RESOLUTION
# -----------------------------------------------------------------------------

def test_trace_internal_call(token_sol: str, base_sol: str) -> None:
    """TC-01: A bare call resolves inside the traced contract."""
    engine = _engine({"Token.sol": token_sol, "Base.sol": base_sol})

    result = engine.trace("Token::transfer", "all", ["Token.sol", "Base.sol"])
    assert result == {"Token::transfer | [Pub]": {"Token::_move | [Int]": {}}}


def test_trace_external_this_recursive_and_unresolved_calls() -> None:
    """TC-02: Member calls resolve to the unique implementer; builtins are skipped."""
    engine = _engine({"Vault.sol": VAULT_SOL})

    result = engine.trace("Vault::pull", "all", ["Vault.sol"])
    assert result == {
        "Vault::pull | [Ext]": {
            "Token::transfer | [Pub]": {},
            "Vault::ping | [Ext]": {},
            "Vault::helper | [Int]": {"Vault::helper | [Int] (recursive)": {}},
            "<expr>.approve | [Ext]": {},
        }
    }


def test_trace_direction_filters_edges() -> None:
    """TC-03: 'internal' keeps bare calls only, 'external' keeps member calls only."""
    engine = _engine({"Vault.sol": VAULT_SOL})

    internal = engine.trace("Vault::pull", "internal", ["Vault.sol"])
    assert list(internal["Vault::pull | [Ext]"]) == ["Vault::helper | [Int]"]

    external = engine.trace("Vault::pull", "external", ["Vault.sol"])
    assert "Vault::helper | [Int]" not in external["Vault::pull | [Ext]"]
    assert "Token::transfer | [Pub]" in external["Vault::pull | [Ext]"]


def test_trace_super_and_payable_label() -> None:
    """TC-04: super calls continue in the next base; payable roots are marked."""
    engine = _engine({"I.sol": INHERIT_SOL})

    result = engine.trace("B::run", "all", ["I.sol"])
    assert result == {"B::run | [Pub] ($)": {"B::hook | [Int]": {"A::hook | [Int]": {}}}}


def test_trace_includes_modifiers_when_enabled(token_sol: str, base_sol: str) -> None:
    """TC-05: Modifier invocations appear as leaves, resolved through bases."""
    engine = _engine({"Token.sol": token_sol, "Base.sol": base_sol}, include_modifiers=True)

    result = engine.trace("Token::mint", "all", ["Token.sol", "Base.sol"])
    assert result == {
        "Token::mint | [Ext]": {
            "Ownable::onlyOwner | [Mod]": {},
            "Token::_move | [Int]": {},
        }
    }


def test_trace_constructor_target(token_sol: str) -> None:
    """TC-06: '<Constructor>' addresses the unnamed constructor."""
    engine = _engine({"Token.sol": token_sol})

    result = engine.trace("Token::<Constructor>", "all", ["Token.sol"])
    assert result == {"Token::<Constructor> | [Pub]": {}}


def test_trace_text_output(token_sol: str) -> None:
    """TC-07: json_output=False renders the tree as text."""
    engine = _engine({"Token.sol": token_sol})

    text = engine.trace("Token::transfer", "all", ["Token.sol"], json_output=False)
    assert text.splitlines() == ["Token::transfer | [Pub]", "└── Token::_move | [Int]"]


# -----------------------------------------------------------------------------
# FAILURES
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("target", ["Token::nope", "Missing::transfer", "Token", "::transfer"])
def test_trace_unknown_or_malformed_target_raises(token_sol: str, target: str) -> None:
    """TC-08: Unknown and malformed targets raise TraceEngineError."""
    engine = _engine({"Token.sol": token_sol})

    with pytest.raises(TraceEngineError):
        engine.trace(target, "all", ["Token.sol"])


def test_trace_unreadable_file_raises(token_sol: str) -> None:
    """TC-09: An unreadable file in the set is an engine failure."""
    engine = _engine({"Token.sol": token_sol})

    with pytest.raises(TraceEngineError):
        engine.trace("Token::transfer", "all", ["Token.sol", "gone.sol"])


def test_trace_unknown_direction_raises(token_sol: str) -> None:
    """TC-10: Direction must be one of all/internal/external."""
    engine = _engine({"Token.sol": token_sol})

    with pytest.raises(TraceEngineError):
        engine.trace("Token::transfer", "sideways", ["Token.sol"])
