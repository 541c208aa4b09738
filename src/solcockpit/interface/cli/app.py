from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration
resolution (defaults, saved file, command-line overrides), cockpit
assembly and rendering of the requested view to the terminal.

Exit codes: 0 success, 1 nothing found or engine failure, 2 invalid
input path or usage.
"""

import json
import os
import sys
from typing import Any, Dict, List, Optional

from solcockpit.core.analysis.tree_renderer import render_path_forest, render_trace
from solcockpit.core.cockpit import (
    Cockpit,
    CockpitView,
    FTraceView,
    PublicMethodsView,
    SelectionEvent,
    ViewState,
    build_cockpit,
)
from solcockpit.core.validator import validate_config
from solcockpit.domain.config import get_default_config, load_config
from solcockpit.domain.tree_models import PathNode, SettingDescriptor
from solcockpit.infra.fs import normalize_path
from solcockpit.infra.logging import LoggingConfig, configure_logging, get_logger
from solcockpit.interface.cli import args as cli_args

logger = get_logger(__name__)

_COMMAND_VIEWS: Dict[str, str] = {
    "explorer": "explorer",
    "flatfiles": "flat_files",
    "contracts": "top_level_contracts",
    "settings": "settings",
    "ftrace": FTraceView.view_id,
    "methods": PublicMethodsView.view_id,
}


# -----------------------------------------------------------------------------
# CONSOLE SINK
# -----------------------------------------------------------------------------

class ConsoleSink:
    """
    Display sink for terminal output.

    Only the view selected on the command line reports itself visible,
    so selection events reach that view alone.
    """

    def __init__(self, view_id: str, visible: bool) -> None:
        self.view_id = view_id
        self.visible = visible
        self.message: Optional[str] = None
        self.changes = 0

    def notify_changed(self) -> None:
        self.changes += 1

    def set_empty_state_message(self, text: Optional[str]) -> None:
        self.message = text

    def is_visible(self) -> bool:
        return self.visible


# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code.
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console on stderr, optional rotating file)
    configure_logging(LoggingConfig.for_cli(debug=args.debug, log_file=args.log_file))

    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    # 3. Resolve base configuration (defaults vs saved file)
    base_conf = get_default_config() if args.use_defaults else load_config()

    # 4. Merge command-line overrides and validate
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return 0

    if not args.command:
        parser.print_help(sys.stderr)
        return 2

    # 5. Pre-flight workspace verification
    clean_conf["workspace_root"] = normalize_path(clean_conf["workspace_root"], os.getcwd())
    workspace_root = clean_conf["workspace_root"]
    if not os.path.isdir(workspace_root):
        return _fail(f"Workspace root does not exist: {workspace_root}", 2)

    view_id = _COMMAND_VIEWS[args.command]
    cockpit = build_cockpit(clean_conf, lambda vid: ConsoleSink(vid, visible=(vid == view_id)))

    # 6. View execution phase
    try:
        if args.command in cli_args.SELECTION_COMMANDS:
            return _run_selection_view(cockpit, view_id, args)
        view = cockpit.refresh(view_id)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return 130

    return _print_view(view, args.json_output)


# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow merge of override values into the base configuration.

    Only keys already known to the base configuration are merged.
    """
    out = dict(base)
    for k, v in overrides.items():
        if k in out and v is not None:
            out[k] = v
    return out


# -----------------------------------------------------------------------------
# SELECTION VIEWS
# -----------------------------------------------------------------------------

def _run_selection_view(cockpit: Cockpit, view_id: str, args: Any) -> int:
    document_id = os.path.abspath(args.file)
    if not os.path.isfile(document_id):
        return _fail(f"File does not exist: {args.file}", 2)
    if not cockpit.open_document(document_id):
        return _fail(f"Not a readable Solidity source: {args.file}", 2)

    for extra in args.open_files:
        if not cockpit.open_document(os.path.abspath(extra)):
            logger.warning(f"Ignoring additional document: {extra}")

    # CLI positions are 1-based, the cockpit works 0-based
    event = SelectionEvent(document_id, args.line - 1, args.column - 1)
    cockpit.on_selection_changed(event)

    view = cockpit.get(view_id)
    view.slot.wait()

    if view.state is ViewState.IDLE:
        return _fail(f"No contract or function at {args.file}:{args.line}:{args.column}", 1)

    _print_view(view, args.json_output)
    return 1 if view.state is ViewState.FAILED else 0


# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_view(view: CockpitView, json_output: bool) -> int:
    if json_output:
        print(json.dumps(_view_data(view), ensure_ascii=False, indent=2))
        return 0

    lines: List[str] = []
    if isinstance(view, FTraceView):
        render_trace(view.data, lines)
    else:
        render_path_forest(view.get_roots(), lines, label=_node_label)

    if not lines:
        message = view.sink.message or "(empty)"
        print(message)
        return 0

    print("\n".join(lines))
    return 0


def _view_data(view: CockpitView) -> Any:
    if isinstance(view, FTraceView):
        return view.data
    if isinstance(view, PublicMethodsView):
        return {
            name: {"modifiers": selected.modifiers, "payable": selected.payable}
            for name, selected in view.data.items()
        }
    return [
        {"path": node.full_path, "resource": node.resource, "metadata": _json_metadata(node.metadata)}
        for node in view.index.walk()
        if node.terminal
    ]


def _node_label(node: PathNode) -> str:
    if isinstance(node.metadata, SettingDescriptor):
        return f"{node.label} = {str(node.metadata.current_value).lower()}"
    return node.label


def _json_metadata(metadata: Any) -> Any:
    if isinstance(metadata, SettingDescriptor):
        return {"value": metadata.current_value, "description": metadata.description}
    return metadata


def _fail(message: str, code: int) -> int:
    logger.error(message)
    print(f"ERROR: {message}", file=sys.stderr)
    return code


# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
