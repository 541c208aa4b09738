from __future__ import annotations

"""
Domain Constants.

Centralized glob patterns, discovery limits and visibility keyword sets
used across the cockpit views.
"""

from typing import FrozenSet, List

CURRENT_CONFIG_VERSION = "1.0.0"

SOURCE_EXTENSION = ".sol"
SOURCE_GLOB = "**/*.sol"
FLAT_FILES_GLOB = "{**/*_flat.sol,**/flat_*.sol}"

# -----------------------------------------------------------------------------
# DISCOVERY LIMITS AND EXCLUSIONS
# -----------------------------------------------------------------------------

MAX_TRACE_FILES = 500
MAX_EXPLORER_FILES = 5000
MAX_FLAT_FILES = 500

DEFAULT_FINDFILES_EXCLUDES_ALLOWFLAT: List[str] = [
    "**/node_modules",
    "**/mock*",
    "**/test*",
    "**/migrations",
    "**/Migrations.sol",
]

DEFAULT_FINDFILES_EXCLUDES: List[str] = DEFAULT_FINDFILES_EXCLUDES_ALLOWFLAT + [
    "**/flat_*.sol",
    "**/*_flat.sol",
]

# -----------------------------------------------------------------------------
# VISIBILITY / MUTABILITY FILTERS
# -----------------------------------------------------------------------------

NON_EXTERNAL_VISIBILITY: FrozenSet[str] = frozenset({"private", "internal"})
NON_MUTATING_STATE: FrozenSet[str] = frozenset({"view", "pure", "constant"})

# -----------------------------------------------------------------------------
# VIEW MESSAGES
# -----------------------------------------------------------------------------

MSG_CLICK_EDITOR = "click into the editor to update view..."
MSG_SCAN_CONTRACTS = "click ↻ to scan for contracts..."
