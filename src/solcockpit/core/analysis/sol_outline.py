from __future__ import annotations

"""
Solidity Outline Parser.

Fault-tolerant, comment and string aware extraction of the declarations the
cockpit needs: contracts / interfaces / libraries with their base list,
functions (including constructors, fallback and receive), modifier
definitions, header attributes and the call sites found in bodies.

This is an outline parser, not a compiler front-end. Bodies are only
scanned for call expressions and unbalanced input degrades to truncated
ranges instead of raising.
"""

import bisect
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from solcockpit.domain.code_models import (
    CallSite,
    ContainerRef,
    FunctionAt,
    FunctionRef,
    ModifierRef,
    SourceRange,
)

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PATTERNS AND KEYWORDS
# -----------------------------------------------------------------------------

_IDENT = r"[A-Za-z_$][\w$]*"

_CONTAINER_RX = re.compile(rf"\b(?:abstract\s+)?(contract|interface|library)\s+({_IDENT})")
_MEMBER_RX = re.compile(r"\b(function|constructor|fallback|receive|modifier)\b")
_IDENT_RX = re.compile(rf"{_IDENT}(?:\s*\.\s*{_IDENT})*")
_NAME_RX = re.compile(_IDENT)
_CALL_RX = re.compile(rf"({_IDENT})\s*\(")
_IS_RX = re.compile(r"\bis\b")

_VISIBILITY = frozenset({"public", "external", "internal", "private"})
_MUTABILITY = frozenset({"pure", "view", "payable", "constant", "nonpayable"})
_HEADER_SKIP = frozenset({"virtual", "override", "returns", "memory", "storage", "calldata"})

_NOT_CALLS = frozenset({
    "if", "for", "while", "do", "return", "returns", "require", "assert", "revert",
    "emit", "new", "function", "assembly", "unchecked", "try", "catch",
    "keccak256", "sha256", "sha3", "ripemd160", "ecrecover", "addmod", "mulmod",
    "selfdestruct", "suicide", "blockhash", "gasleft", "type", "delete",
    "mapping", "address", "payable", "bool", "string", "bytes", "byte", "var",
})
_ELEMENTARY_TYPE_RX = re.compile(r"^(u?int\d*|bytes\d+|u?fixed[\dx]*)$")


# -----------------------------------------------------------------------------
# EXCEPTIONS AND MODELS
# -----------------------------------------------------------------------------

class SolidityParseError(Exception):
    """Raised when a source file cannot be read."""


@dataclass
class SourceUnit:
    """
    Parsed outline of one Solidity document.

    Attributes:
        document_id: Identifier of the document (usually its absolute path).
        contracts: Containers keyed by name, in declaration order.
    """
    document_id: str
    contracts: Dict[str, ContainerRef] = field(default_factory=dict)

    @property
    def containers(self) -> List[ContainerRef]:
        return list(self.contracts.values())

    def get_function_at(self, line: int, column: int) -> Optional[FunctionAt]:
        """
        Locate the container and innermost function enclosing a position.

        Args:
            line: 0-based line.
            column: 0-based column.

        Returns:
            Optional[FunctionAt]: None if no container encloses the position;
                                  function is None for contract-level positions.
        """
        for container in self.contracts.values():
            if container.source_range is None or not container.source_range.contains(line, column):
                continue
            enclosing = [
                fn for fn in container.members
                if fn.source_range is not None and fn.source_range.contains(line, column)
            ]
            if not enclosing:
                return FunctionAt(container=container)
            innermost = min(enclosing, key=lambda fn: fn.source_range.span())
            return FunctionAt(container=container, function=innermost)
        return None


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def parse_solidity_file(file_path: str) -> SourceUnit:
    """
    Read and outline a Solidity file.

    Raises:
        SolidityParseError: If the file cannot be read or decoded.
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            source = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SolidityParseError(f"Could not read '{file_path}': {e}") from e
    return parse_solidity_source(source, document_id=file_path)


def parse_solidity_source(source: str, document_id: str = "") -> SourceUnit:
    """
    Outline Solidity source text.

    Args:
        source: Raw source code.
        document_id: Identifier recorded on the unit and its containers.

    Returns:
        SourceUnit: Containers and members found in the text.
    """
    scanner = _Scanner(source)
    unit = SourceUnit(document_id=document_id)

    for container in scanner.containers():
        container.document_id = document_id
        unit.contracts[container.name] = container

    logger.debug(
        f"Outlined {document_id or '<memory>'}: "
        f"{len(unit.contracts)} container(s), "
        f"{sum(len(c.members) for c in unit.contracts.values())} function(s)"
    )
    return unit


# -----------------------------------------------------------------------------
# SCANNER
# -----------------------------------------------------------------------------

class _Scanner:
    """Works on a masked copy of the source where comments and string bodies are blanked."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.text = mask_comments_and_strings(source)
        self._line_starts = [0] + [i + 1 for i, ch in enumerate(source) if ch == "\n"]

    # -- positions ----------------------------------------------------------

    def position(self, offset: int) -> Tuple[int, int]:
        line = bisect.bisect_right(self._line_starts, offset) - 1
        return line, offset - self._line_starts[line]

    def range(self, start: int, end: int) -> SourceRange:
        sl, sc = self.position(start)
        el, ec = self.position(max(start, end))
        return SourceRange(sl, sc, el, ec)

    # -- containers ---------------------------------------------------------

    def containers(self) -> Iterator[ContainerRef]:
        pos = 0
        while True:
            m = _CONTAINER_RX.search(self.text, pos)
            if not m:
                return
            open_brace = self.text.find("{", m.end())
            if open_brace == -1:
                return
            close_brace = _match(self.text, open_brace, "{", "}")

            container = ContainerRef(
                name=m.group(2),
                kind=m.group(1),
                bases=_parse_bases(self.text[m.end():open_brace]),
                source_range=self.range(m.start(), close_brace),
            )
            self._members(container, open_brace + 1, close_brace)
            yield container
            pos = close_brace + 1

    # -- members ------------------------------------------------------------

    def _members(self, container: ContainerRef, start: int, end: int) -> None:
        pos = start
        while pos < end:
            m = _MEMBER_RX.search(self.text, pos, end)
            if not m:
                return

            # Skip nested blocks (structs, enums) that precede the next member
            brace = self.text.find("{", pos, m.start())
            if brace != -1:
                pos = _match(self.text, brace, "{", "}") + 1
                continue

            pos = self._member(container, m, end)

    def _member(self, container: ContainerRef, m: re.Match, end: int) -> int:
        keyword = m.group(1)
        cursor = _skip_ws(self.text, m.end())

        name: Optional[str] = None
        name_match = _NAME_RX.match(self.text, cursor)
        if name_match and keyword in ("function", "modifier"):
            name = name_match.group(0)
            cursor = _skip_ws(self.text, name_match.end())

        has_params = cursor < end and self.text[cursor] == "("
        if not has_params and keyword != "modifier":
            # 'receive' or 'fallback' used as a plain identifier
            return m.end()

        header_start = _match(self.text, cursor, "(", ")") + 1 if has_params else cursor
        terminator = _find_terminator(self.text, header_start, end)
        header = self.text[header_start:terminator]

        if terminator < end and self.text[terminator] == "{":
            body_end = _match(self.text, terminator, "{", "}")
            body = self.text[terminator + 1:body_end]
            has_body = True
        else:
            body_end = terminator
            body = ""
            has_body = False

        source_range = self.range(m.start(), body_end)
        calls = extract_call_sites(body)

        if keyword == "modifier":
            if name:
                container.modifiers[name] = ModifierRef(
                    name=name,
                    container_name=container.name,
                    source_range=source_range,
                    calls=calls,
                )
            return body_end + 1

        if keyword == "function" and name is None and not has_body:
            # Function-typed state variable, not a legacy fallback
            return body_end + 1

        visibility, mutability, modifiers = _parse_header(header)
        is_constructor = keyword == "constructor" or (keyword == "function" and name == container.name)
        is_fallback = keyword == "fallback" or (keyword == "function" and name is None)

        if keyword == "receive":
            name = "receive"
        if is_constructor:
            name = None
        elif is_fallback:
            name = ""

        function = FunctionRef(
            name=name,
            container_name=container.name,
            visibility=visibility or _default_visibility(keyword, container.kind),
            mutability=mutability or "nonpayable",
            modifiers=modifiers,
            is_constructor=is_constructor,
            is_fallback=is_fallback,
            source_range=source_range,
            calls=calls,
            has_body=has_body,
        )
        container.members.append(function)
        container.functions[name] = function
        return body_end + 1


# -----------------------------------------------------------------------------
# LEXICAL HELPERS
# -----------------------------------------------------------------------------

def mask_comments_and_strings(source: str) -> str:
    """
    Blank out comments and string literal bodies, preserving offsets.

    Newlines are kept so that line numbers stay aligned with the original
    text; quote characters are kept so that literals remain visible as
    tokens.
    """
    out = list(source)
    i = 0
    n = len(source)
    while i < n:
        ch = source[i]
        nxt = source[i + 1] if i + 1 < n else ""
        if ch == "/" and nxt == "/":
            while i < n and source[i] != "\n":
                out[i] = " "
                i += 1
        elif ch == "/" and nxt == "*":
            out[i] = out[i + 1] = " "
            i += 2
            while i < n and not (source[i] == "*" and i + 1 < n and source[i + 1] == "/"):
                if source[i] != "\n":
                    out[i] = " "
                i += 1
            if i < n:
                out[i] = " "
                if i + 1 < n:
                    out[i + 1] = " "
            i += 2
        elif ch in ("'", '"'):
            quote = ch
            i += 1
            while i < n and source[i] != quote and source[i] != "\n":
                if source[i] == "\\" and i + 1 < n:
                    out[i] = " "
                    i += 1
                out[i] = " "
                i += 1
            i += 1
        else:
            i += 1
    return "".join(out)


def extract_call_sites(body: str) -> List[CallSite]:
    """
    Collect call expressions from a masked function body.

    Keywords, builtins, elementary type conversions, event emissions and
    contract creations are ignored. Member calls keep the receiver token
    ('<expr>' when the receiver is itself a call or index expression).
    """
    calls: List[CallSite] = []
    for m in _CALL_RX.finditer(body):
        name = m.group(1)
        if name in _NOT_CALLS or _ELEMENTARY_TYPE_RX.match(name):
            continue

        before = body[:m.start()].rstrip()
        prev_word = re.search(rf"({_IDENT})$", before)
        if prev_word and prev_word.group(1) in ("emit", "new"):
            continue

        receiver: Optional[str] = None
        if before.endswith("."):
            target = before[:-1].rstrip()
            recv_match = re.search(rf"({_IDENT})$", target)
            receiver = recv_match.group(1) if recv_match else "<expr>"

        calls.append(CallSite(name=name, receiver=receiver))
    return calls


def _match(text: str, open_idx: int, open_ch: str, close_ch: str) -> int:
    """Index of the bracket closing the one at open_idx (last index if unbalanced)."""
    depth = 0
    for i in range(open_idx, len(text)):
        ch = text[i]
        if ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                return i
    return len(text) - 1


def _skip_ws(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _find_terminator(text: str, start: int, end: int) -> int:
    """First '{' or ';' at parenthesis depth 0 between start and end."""
    depth = 0
    for i in range(start, end):
        ch = text[i]
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif depth == 0 and ch in "{;":
            return i
    return end


def _parse_bases(header: str) -> List[str]:
    m = _IS_RX.search(header)
    if not m:
        return []
    bases: List[str] = []
    depth = 0
    piece_start = m.end()
    rest = header + ","
    for i in range(m.end(), len(rest)):
        ch = rest[i]
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == "," and depth == 0:
            ident = _IDENT_RX.search(rest[piece_start:i])
            if ident:
                bases.append(re.sub(r"\s", "", ident.group(0)).split(".")[-1])
            piece_start = i + 1
    return bases


def _parse_header(header: str) -> Tuple[Optional[str], Optional[str], List[str]]:
    """Split a function header into visibility, mutability and modifier invocations."""
    visibility: Optional[str] = None
    mutability: Optional[str] = None
    modifiers: List[str] = []

    pos = 0
    while pos < len(header):
        ch = header[pos]
        if ch == "(":
            pos = _match(header, pos, "(", ")") + 1
            continue
        m = _IDENT_RX.match(header, pos)
        if not m:
            pos += 1
            continue

        word = re.sub(r"\s", "", m.group(0))
        pos = m.end()
        if word in _VISIBILITY:
            visibility = word
        elif word in _MUTABILITY:
            mutability = word
        elif word in _HEADER_SKIP:
            continue
        else:
            modifiers.append(word)

    return visibility, mutability, modifiers


def _default_visibility(keyword: str, container_kind: str) -> str:
    if keyword in ("fallback", "receive") or container_kind == "interface":
        return "external"
    return "public"
