from __future__ import annotations

"""
Code Model Data Structures.

Addressable outline of a Solidity source unit: containers (contracts,
interfaces, libraries) and the functions declared on them, each with a
source range. Positions are 0-based (line, column) editor coordinates.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

CONSTRUCTOR_NAME = "<Constructor>"
FALLBACK_NAME = "<Fallback>"


# -----------------------------------------------------------------------------
# POSITIONS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SourceRange:
    """Inclusive span between two 0-based (line, column) positions."""
    start_line: int
    start_column: int
    end_line: int
    end_column: int

    def contains(self, line: int, column: int) -> bool:
        return (self.start_line, self.start_column) <= (line, column) <= (self.end_line, self.end_column)

    def span(self) -> Tuple[int, int]:
        """Size key used to pick the innermost of nested ranges."""
        return (self.end_line - self.start_line, self.end_column - self.start_column)


# -----------------------------------------------------------------------------
# DECLARATIONS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class CallSite:
    """
    A call expression found in a function body.

    Attributes:
        name: Called identifier.
        receiver: Expression left of the dot for member calls, None for bare calls.
    """
    name: str
    receiver: Optional[str] = None

    @property
    def is_member_call(self) -> bool:
        return self.receiver is not None


@dataclass
class FunctionRef:
    """
    A function-like member of a container.

    Attributes:
        name: Declared name; None for constructors, "" for fallback functions.
        container_name: Name of the declaring container.
        visibility: public/external/internal/private.
        mutability: nonpayable/payable/view/pure/constant.
        modifiers: Names of the modifiers invoked in the header, in order.
        is_constructor: Constructor flag.
        is_fallback: Fallback flag.
        source_range: Span from the header keyword to the end of the body.
        calls: Call sites found in the body.
        has_body: False for declarations ending in ';'.
    """
    name: Optional[str]
    container_name: str
    visibility: str = "public"
    mutability: str = "nonpayable"
    modifiers: List[str] = field(default_factory=list)
    is_constructor: bool = False
    is_fallback: bool = False
    source_range: Optional[SourceRange] = None
    calls: List[CallSite] = field(default_factory=list)
    has_body: bool = True

    @property
    def display_name(self) -> str:
        return display_member_name(self.name, self.is_constructor, self.is_fallback)


@dataclass
class ModifierRef:
    """A modifier definition declared on a container."""
    name: str
    container_name: str
    source_range: Optional[SourceRange] = None
    calls: List[CallSite] = field(default_factory=list)


@dataclass
class ContainerRef:
    """
    A contract, interface or library declaration.

    Every function-like declaration is kept in members, in source order.
    functions keys them by raw declared name (None for the constructor,
    "" for the fallback); there a later overload shadows an earlier one.
    """
    name: str
    kind: str = "contract"
    bases: List[str] = field(default_factory=list)
    members: List[FunctionRef] = field(default_factory=list)
    functions: Dict[Optional[str], FunctionRef] = field(default_factory=dict)
    modifiers: Dict[str, ModifierRef] = field(default_factory=dict)
    source_range: Optional[SourceRange] = None
    document_id: str = ""


@dataclass(frozen=True)
class FunctionAt:
    """Answer to a position query: the enclosing container and, if any, function."""
    container: ContainerRef
    function: Optional[FunctionRef] = None


@dataclass(frozen=True)
class ResolvedElement:
    """
    Code element under the editor cursor.

    Attributes:
        container_name: Name of the enclosing contract.
        member_name: Normalized member name, None for a contract-level selection.
        is_constructor: The member is the constructor.
        is_fallback: The member is the fallback function.
        source_range: Range of the member, or of the container when member_name is None.
        document_id: Document the element was resolved from.
        container: Enclosing container declaration.
        function: Enclosing function declaration, if any.
    """
    container_name: str
    member_name: Optional[str]
    is_constructor: bool = False
    is_fallback: bool = False
    source_range: Optional[SourceRange] = None
    document_id: str = ""
    container: Optional[ContainerRef] = field(default=None, compare=False, repr=False)
    function: Optional[FunctionRef] = field(default=None, compare=False, repr=False)

    @property
    def qualified_name(self) -> str:
        return f"{self.container_name}::{self.member_name}"


# -----------------------------------------------------------------------------
# NAME NORMALIZATION
# -----------------------------------------------------------------------------

def display_member_name(name: Optional[str], is_constructor: bool = False, is_fallback: bool = False) -> str:
    """
    Map a raw member name to the name shown downstream.

    A null name or constructor flag gives "<Constructor>", an empty name or
    fallback flag gives "<Fallback>". Null and empty never reach the display.
    """
    if name is None or is_constructor:
        return CONSTRUCTOR_NAME
    if name == "" or is_fallback:
        return FALLBACK_NAME
    return name
