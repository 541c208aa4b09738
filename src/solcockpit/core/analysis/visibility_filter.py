from __future__ import annotations

"""
Visibility Filter.

Selects the functions of a contract that can be called from outside and
may change state: the attack surface listed by the public methods view.
"""

from dataclasses import dataclass, field
from typing import AbstractSet, Dict, List, Mapping, Optional

from solcockpit.domain.code_models import FunctionRef, display_member_name
from solcockpit.domain.constants import NON_EXTERNAL_VISIBILITY, NON_MUTATING_STATE


@dataclass(frozen=True)
class SelectedFunction:
    """
    A function kept by the filter.

    Attributes:
        name: Display name ('<Constructor>' / '<Fallback>' for the special members).
        function: Declaration the entry was built from.
        modifiers: Modifier invocations of the header, in order.
        payable: True if the function accepts ether.
    """
    name: str
    function: FunctionRef = field(repr=False)
    modifiers: List[str] = field(default_factory=list)
    payable: bool = False


def select_externally_mutating(
        functions: Mapping[Optional[str], FunctionRef],
        excluded_visibility: AbstractSet[str] = NON_EXTERNAL_VISIBILITY,
        excluded_mutability: AbstractSet[str] = NON_MUTATING_STATE,
) -> Dict[str, SelectedFunction]:
    """
    Keep externally reachable, state-changing functions.

    Args:
        functions: Raw name -> declaration mapping of one container.
        excluded_visibility: Visibilities that hide a function from callers.
        excluded_mutability: Mutabilities that guarantee no state change.

    Returns:
        Dict[str, SelectedFunction]: Survivors keyed by display name, in input order.
    """
    selected: Dict[str, SelectedFunction] = {}
    for raw_name, fn in functions.items():
        if fn.visibility in excluded_visibility or fn.mutability in excluded_mutability:
            continue
        name = display_member_name(raw_name, fn.is_constructor, fn.is_fallback)
        selected[name] = SelectedFunction(
            name=name,
            function=fn,
            modifiers=list(fn.modifiers),
            payable=fn.mutability == "payable",
        )
    return selected
