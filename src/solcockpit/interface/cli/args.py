from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema (global options plus one
sub-command per cockpit view) and translates the parsed namespace into
configuration overrides.
"""

import argparse
from typing import Any, Dict

from solcockpit.domain.constants import CURRENT_CONFIG_VERSION

VIEW_COMMANDS = ("explorer", "flatfiles", "contracts", "settings")
SELECTION_COMMANDS = ("ftrace", "methods")


# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the solcockpit CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="solcockpit",
        description="Solidity workspace cockpit: file trees, function traces and public methods.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {CURRENT_CONFIG_VERSION}")

    # --- Workspace ---
    p.add_argument(
        "-r", "--root",
        dest="workspace_root",
        default=None,
        help="Workspace root directory (default: configured root or current directory).",
    )
    p.add_argument(
        "--scope",
        choices=("known_files", "workspace"),
        default=None,
        help="Files a function trace may resolve calls against.",
    )
    p.add_argument(
        "--flat",
        action="store_true",
        help="List top-level contracts as flat paths instead of a tree.",
    )
    p.add_argument(
        "--modifiers",
        action="store_true",
        help="Show modifier invocations in function traces.",
    )
    p.add_argument(
        "--include-flat",
        action="store_true",
        help="Show flattened sources in the explorer.",
    )

    # --- Configuration and Diagnostics ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the saved configuration file.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration as JSON and exit.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write logs to this rotating file.",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print view data as JSON instead of an ASCII tree.",
    )

    # --- Views ---
    sub = p.add_subparsers(dest="command", metavar="COMMAND")
    sub.add_parser("explorer", help="All Solidity sources of the workspace.")
    sub.add_parser("flatfiles", help="Flattened sources (*_flat.sol, flat_*.sol).")
    sub.add_parser("contracts", help="Contracts no other contract inherits from.")
    sub.add_parser("settings", help="Boolean settings and their current values.")

    for name, help_text in (
            ("ftrace", "Call tree of the function at a position."),
            ("methods", "Public state-changing methods of the contract at a position."),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("file", help="Solidity source file.")
        cmd.add_argument("--line", type=_positive_int, required=True, help="1-based line.")
        cmd.add_argument("--column", type=_positive_int, default=1, help="1-based column (default: 1).")
        cmd.add_argument(
            "--open",
            dest="open_files",
            action="append",
            default=[],
            metavar="FILE",
            help="Additional document treated as open in the editor (repeatable).",
        )

    return p


# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    overrides["workspace_root"] = args.workspace_root
    overrides["trace.scope"] = args.scope

    if args.flat:
        overrides["top_level_contracts.list_style"] = "flat"
    if args.modifiers:
        overrides["trace.include_modifiers"] = True
    if args.include_flat:
        overrides["explorer.include_flat_files"] = True

    return overrides


# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number
