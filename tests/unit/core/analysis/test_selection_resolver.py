from __future__ import annotations

"""
Unit tests for the Selection Resolver.

Verifies:
1. Positions inside functions resolve to the normalized member.
2. Contract-level positions resolve with no member.
3. Unknown documents and positions outside containers are NotFound.
"""

import logging

import pytest

from solcockpit.core.analysis.selection_resolver import SelectionResolver
from solcockpit.core.services.registry import SourceUnitRegistry
from solcockpit.domain.results import ErrorKind

DOC = "/ws/Token.sol"


@pytest.fixture
def resolver(token_sol: str) -> SelectionResolver:
    registry = SourceUnitRegistry()
    registry.load(DOC, token_sol)
    return SelectionResolver(registry)


def test_resolve_named_function(resolver: SelectionResolver, token_sol: str, locate) -> None:
    """TC-01: A position inside transfer resolves to Token::transfer."""
    line, col = locate(token_sol, "_move(msg.sender")
    outcome = resolver.resolve(DOC, line, col)

    assert outcome.ok
    element = outcome.value
    assert element.container_name == "Token"
    assert element.member_name == "transfer"
    assert element.qualified_name == "Token::transfer"
    assert element.source_range.contains(line, col)
    assert element.document_id == DOC
    assert not element.is_constructor and not element.is_fallback


def test_resolve_constructor_and_fallback(resolver: SelectionResolver, token_sol: str, locate) -> None:
    """TC-02: Constructor and fallback get their sentinel names."""
    line, col = locate(token_sol, "owner = msg.sender")
    ctor = resolver.resolve(DOC, line, col).value
    assert ctor.member_name == "<Constructor>"
    assert ctor.is_constructor

    line, col = locate(token_sol, "fallback()")
    fallback = resolver.resolve(DOC, line, col).value
    assert fallback.member_name == "<Fallback>"
    assert fallback.is_fallback


def test_resolve_contract_level(resolver: SelectionResolver, token_sol: str, locate) -> None:
    """TC-03: Between members the element is the contract itself."""
    line, col = locate(token_sol, "mapping(address")
    outcome = resolver.resolve(DOC, line, col)

    assert outcome.ok
    assert outcome.value.container_name == "Token"
    assert outcome.value.member_name is None
    assert outcome.value.function is None


def test_resolve_outside_any_container(resolver: SelectionResolver, caplog: pytest.LogCaptureFixture) -> None:
    """TC-04: The pragma line yields NotFound and a warning."""
    with caplog.at_level(logging.WARNING):
        outcome = resolver.resolve(DOC, 0, 0)

    assert not outcome.ok
    assert outcome.kind is ErrorKind.NOT_FOUND
    assert "Selection not resolved" in caplog.text


def test_resolve_unknown_document(resolver: SelectionResolver) -> None:
    """TC-05: Documents never loaded into the provider are NotFound."""
    outcome = resolver.resolve("/ws/Other.sol", 5, 0)

    assert not outcome.ok
    assert outcome.kind is ErrorKind.NOT_FOUND


def test_resolve_each_overload(locate) -> None:
    """TC-06: Both overloads of a name resolve to that name, each with its own range."""
    source = (
        "contract Vault {\n"
        "    function pay(address to) public {\n"
        "        settle(to, 0);\n"
        "    }\n"
        "    function pay(address to, uint256 amount) public {\n"
        "        settle(to, amount);\n"
        "    }\n"
        "    function settle(address to, uint256 amount) internal {}\n"
        "}\n"
    )
    registry = SourceUnitRegistry()
    registry.load("/ws/Vault.sol", source)
    resolver = SelectionResolver(registry)

    first = resolver.resolve("/ws/Vault.sol", *locate(source, "settle(to, 0)")).value
    second = resolver.resolve("/ws/Vault.sol", *locate(source, "settle(to, amount)")).value

    assert first.member_name == "pay"
    assert second.member_name == "pay"
    assert first.source_range.start_line == 1
    assert second.source_range.start_line == 4
