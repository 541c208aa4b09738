from __future__ import annotations

"""
Source Unit Registry.

In-memory Code Model Provider: holds the parsed outline of every document
the host has opened. Passed explicitly to the resolver and the trace query
instead of living in a process-wide singleton.
"""

import logging
import os
import threading
from typing import Callable, Dict, List, Optional, Sequence

from solcockpit.core.analysis.sol_outline import (
    SolidityParseError,
    SourceUnit,
    parse_solidity_file,
    parse_solidity_source,
)
from solcockpit.domain.constants import SOURCE_EXTENSION

logger = logging.getLogger(__name__)


class SourceUnitRegistry:
    """
    Registry of parsed documents keyed by document identifier.

    Only documents explicitly loaded are known; lookups never parse on the
    fly, so an unknown document stays unknown until the host loads it.
    """

    def __init__(
            self,
            parser: Callable[[str], SourceUnit] = parse_solidity_file,
            extensions: Sequence[str] = (SOURCE_EXTENSION,),
    ) -> None:
        self._parser = parser
        self._extensions = tuple(e.lower() for e in extensions)
        self._units: Dict[str, SourceUnit] = {}
        self._lock = threading.Lock()

    # -- provider protocol --------------------------------------------------

    def get_source_unit(self, document_id: str) -> Optional[SourceUnit]:
        with self._lock:
            return self._units.get(document_id)

    def known_documents(self) -> List[str]:
        with self._lock:
            return list(self._units.keys())

    # -- lifecycle ----------------------------------------------------------

    def is_recognized(self, document_id: str) -> bool:
        return os.path.splitext(document_id)[1].lower() in self._extensions

    def load(self, document_id: str, source: Optional[str] = None) -> Optional[SourceUnit]:
        """
        Parse a document and register (or refresh) its outline.

        Args:
            document_id: Document identifier; a filesystem path when source is None.
            source: In-editor text, used instead of reading the file.

        Returns:
            Optional[SourceUnit]: The registered unit, or None if the document is
                                  not a recognized source file or cannot be read.
        """
        if not self.is_recognized(document_id):
            logger.debug(f"Registry: ignoring unrecognized document {document_id}")
            return None

        try:
            if source is None:
                unit = self._parser(document_id)
            else:
                unit = parse_solidity_source(source, document_id=document_id)
        except SolidityParseError as e:
            logger.warning(f"Registry: cannot load {document_id}: {e}")
            return None

        with self._lock:
            self._units[document_id] = unit
        logger.debug(f"Registry: loaded {document_id} ({len(unit.contracts)} container(s))")
        return unit

    def forget(self, document_id: str) -> None:
        with self._lock:
            self._units.pop(document_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._units)
