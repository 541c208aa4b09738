from __future__ import annotations

"""
Unit tests for CLI Argument Parsing.

Verifies:
1. Mapping of CLI flags to configuration keys.
2. Sub-command positional and position arguments.
3. Rejection of invalid positions.
"""

import pytest

from solcockpit.interface.cli.args import args_to_overrides, build_parser


def parse_args(arg_list):
    """Helper to simulate CLI argument parsing."""
    parser = build_parser()
    return parser.parse_args(arg_list)


def test_cli_simple_flags_mapping():
    """Verify boolean flags are mapped correctly to config overrides."""
    args = parse_args(["--flat", "--modifiers", "--include-flat", "explorer"])

    overrides = args_to_overrides(args)

    assert overrides["top_level_contracts.list_style"] == "flat"
    assert overrides["trace.include_modifiers"] is True
    assert overrides["explorer.include_flat_files"] is True
    assert args.command == "explorer"


def test_cli_workspace_and_scope():
    args = parse_args(["-r", "/ws", "--scope", "workspace", "contracts"])
    overrides = args_to_overrides(args)

    assert overrides["workspace_root"] == "/ws"
    assert overrides["trace.scope"] == "workspace"


def test_cli_defaults_are_explicit_in_overrides():
    """
    Unset options map to None so the merge step keeps configured values.
    Flags that were not given produce no key at all.
    """
    args = parse_args([])
    overrides = args_to_overrides(args)

    assert overrides == {"workspace_root": None, "trace.scope": None}
    assert args.command is None
    assert args.json_output is False


def test_cli_selection_command_arguments():
    """ftrace/methods take a file, a 1-based position and extra open documents."""
    args = parse_args([
        "--json", "ftrace", "contracts/Token.sol", "--line", "12", "--column", "5",
        "--open", "a.sol", "--open", "b.sol",
    ])

    assert args.command == "ftrace"
    assert args.file == "contracts/Token.sol"
    assert (args.line, args.column) == (12, 5)
    assert args.open_files == ["a.sol", "b.sol"]
    assert args.json_output is True

    methods = parse_args(["methods", "Token.sol", "--line", "3"])
    assert methods.column == 1
    assert methods.open_files == []


@pytest.mark.parametrize("line", ["0", "-3", "abc"])
def test_cli_rejects_invalid_positions(line):
    with pytest.raises(SystemExit):
        parse_args(["ftrace", "Token.sol", "--line", line])


def test_cli_line_is_required():
    with pytest.raises(SystemExit):
        parse_args(["methods", "Token.sol"])
