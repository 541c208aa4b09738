from __future__ import annotations

"""
Selection Resolver.

Maps an editor position to the code element under the cursor using the
Code Model Provider. The answer is an explicit result: unknown documents
and positions outside every container come back as NotFound.
"""

import logging

from solcockpit.domain.code_models import ResolvedElement, display_member_name
from solcockpit.domain.protocols import CodeModelProvider
from solcockpit.domain.results import Ok, Result, not_found

logger = logging.getLogger(__name__)


class SelectionResolver:
    """Resolves (document, line, column) triples against a provider."""

    def __init__(self, provider: CodeModelProvider) -> None:
        self.provider = provider

    def resolve(self, document_id: str, line: int, column: int) -> Result[ResolvedElement]:
        """
        Resolve the element enclosing a 0-based position.

        Args:
            document_id: Document identifier known to the provider.
            line: 0-based line.
            column: 0-based column.

        Returns:
            Result[ResolvedElement]: Ok with the element (member_name None for a
                                     contract-level position) or Err(NOT_FOUND).
        """
        unit = self.provider.get_source_unit(document_id)
        if unit is None:
            return self._missing(f"Document not parsed: {document_id}")

        hit = unit.get_function_at(line, column)
        if hit is None:
            return self._missing(f"No container at {document_id}:{line}:{column}")

        container = hit.container
        fn = hit.function
        if fn is None:
            return Ok(ResolvedElement(
                container_name=container.name,
                member_name=None,
                source_range=container.source_range,
                document_id=document_id,
                container=container,
            ))

        return Ok(ResolvedElement(
            container_name=container.name,
            member_name=display_member_name(fn.name, fn.is_constructor, fn.is_fallback),
            is_constructor=fn.is_constructor or fn.name is None,
            is_fallback=fn.is_fallback or fn.name == "",
            source_range=fn.source_range,
            document_id=document_id,
            container=container,
            function=fn,
        ))

    @staticmethod
    def _missing(message: str):
        logger.warning(f"Selection not resolved: {message}")
        return not_found(message)
