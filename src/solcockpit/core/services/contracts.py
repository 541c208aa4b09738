from __future__ import annotations

"""
Top-Level Contract Discovery.

A top-level contract is a contract no other contract in the workspace
inherits from: the deployable entry points of a code base.
"""

import logging
from typing import Dict, Iterable, List, Sequence

from solcockpit.core.analysis.sol_outline import SolidityParseError, SourceUnit, parse_solidity_file
from solcockpit.domain.constants import MAX_EXPLORER_FILES, SOURCE_GLOB
from solcockpit.domain.protocols import FileFinder

logger = logging.getLogger(__name__)


def find_top_level_contracts(units: Iterable[SourceUnit]) -> Dict[str, str]:
    """
    Collect contracts that appear in no base list.

    Interfaces and libraries are never reported; they still count as
    inheriting when they list bases.

    Returns:
        Dict[str, str]: Contract name -> document identifier, first declaration wins.
    """
    declared: Dict[str, str] = {}
    inherited = set()

    for unit in units:
        for container in unit.containers:
            inherited.update(container.bases)
            if container.kind == "contract":
                declared.setdefault(container.name, unit.document_id)

    return {name: doc for name, doc in declared.items() if name not in inherited}


def scan_top_level_contracts(
        file_finder: FileFinder,
        exclude_globs: Sequence[str],
        max_files: int = MAX_EXPLORER_FILES,
        source_glob: str = SOURCE_GLOB,
) -> Dict[str, str]:
    """
    Outline every workspace source file and report its top-level contracts.

    Unreadable files are skipped with a warning.
    """
    units: List[SourceUnit] = []
    for path in file_finder.find_files(source_glob, exclude_globs, max_files):
        try:
            units.append(parse_solidity_file(path))
        except SolidityParseError as e:
            logger.warning(f"Skipping unreadable source: {e}")

    found = find_top_level_contracts(units)
    logger.info(f"Found {len(found)} top-level contract(s) in {len(units)} file(s)")
    return found
