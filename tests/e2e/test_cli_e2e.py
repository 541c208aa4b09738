from __future__ import annotations

"""
End-to-End (E2E) CLI Tests.

Verifies the application's external behavior by invoking the entry point
script via subprocess. These tests validate argument parsing, exit codes
and stream output (stdout/stderr) against a sample Solidity workspace.
"""

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import Callable, List, Optional

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
SRC_DIR = PROJECT_ROOT / "src"
ENTRY_POINT = SRC_DIR / "solcockpit" / "main.py"


def run_cli(args: List[str], cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
    """
    Helper to execute the CLI in a separate process.

    Injects the 'src' directory into PYTHONPATH so the package resolves
    without being installed, and always ignores the saved configuration.
    """
    env = os.environ.copy()
    env["PYTHONPATH"] = str(SRC_DIR) + os.pathsep + env.get("PYTHONPATH", "")

    cmd = [sys.executable, str(ENTRY_POINT), "--use-defaults"] + args

    return subprocess.run(
        cmd,
        cwd=cwd,
        env=env,
        capture_output=True,
        text=True,
        encoding="utf-8",
    )


# -----------------------------------------------------------------------------
# FILE VIEWS
# -----------------------------------------------------------------------------

def test_explorer_prints_tree(sol_workspace: Path) -> None:
    """TC-01: The explorer lists non-excluded sources as an ASCII tree."""
    result = run_cli(["--root", str(sol_workspace), "explorer"])

    assert result.returncode == 0, result.stderr
    assert result.stdout.splitlines() == [
        "└── contracts",
        "    ├── Base.sol",
        "    └── Token.sol",
    ]


def test_contracts_json(sol_workspace: Path) -> None:
    """TC-02: JSON output of the top-level contracts view."""
    result = run_cli(["--root", str(sol_workspace), "--json", "contracts"])

    assert result.returncode == 0, result.stderr
    data = json.loads(result.stdout)
    assert [entry["resource"] for entry in data] == [str(sol_workspace / "contracts" / "Token.sol")]


def test_dump_config(sol_workspace: Path) -> None:
    """TC-03: --dump-config prints the effective configuration and exits."""
    result = run_cli(["--root", str(sol_workspace), "--scope", "workspace", "--dump-config"])

    assert result.returncode == 0, result.stderr
    config = json.loads(result.stdout)
    assert config["trace.scope"] == "workspace"
    assert config["workspace_root"] == str(sol_workspace)


def test_missing_command_prints_usage(sol_workspace: Path) -> None:
    result = run_cli(["--root", str(sol_workspace)])

    assert result.returncode == 2
    assert "usage" in result.stderr.lower()


def test_missing_workspace_root(tmp_path: Path) -> None:
    result = run_cli(["--root", str(tmp_path / "nope"), "explorer"])

    assert result.returncode == 2
    assert "Workspace root does not exist" in result.stderr


# -----------------------------------------------------------------------------
# SELECTION VIEWS
# -----------------------------------------------------------------------------

def test_ftrace_prints_call_tree(sol_workspace: Path, token_sol: str, locate: Callable) -> None:
    """TC-04: A 1-based position inside transfer() prints its call tree."""
    line, column = locate(token_sol, "_move(msg.sender")
    token = sol_workspace / "contracts" / "Token.sol"

    result = run_cli([
        "--root", str(sol_workspace), "ftrace", str(token), "--line", str(line + 1), "--column", str(column + 1)
    ])

    assert result.returncode == 0, result.stderr
    assert result.stdout.splitlines() == [
        "Token::transfer | [Pub]",
        "└── Token::_move | [Int]",
    ]


def test_methods_json(sol_workspace: Path, token_sol: str, locate: Callable) -> None:
    """TC-05: Public methods as JSON, with modifiers and payable flags."""
    line, _ = locate(token_sol, "mapping(address")
    token = sol_workspace / "contracts" / "Token.sol"

    result = run_cli(["--root", str(sol_workspace), "--json", "methods", str(token), "--line", str(line + 1)])

    assert result.returncode == 0, result.stderr
    data = json.loads(result.stdout)
    assert list(data) == ["<Constructor>", "transfer", "mint", "deposit", "<Fallback>"]
    assert data["mint"] == {"modifiers": ["onlyOwner"], "payable": False}
    assert data["deposit"]["payable"] is True


def test_position_outside_contract(sol_workspace: Path) -> None:
    """TC-06: The pragma line holds no contract, exit code 1."""
    token = sol_workspace / "contracts" / "Token.sol"
    result = run_cli(["--root", str(sol_workspace), "ftrace", str(token), "--line", "1"])

    assert result.returncode == 1
    assert "No contract or function" in result.stderr


def test_missing_source_file(sol_workspace: Path) -> None:
    """TC-07: A non-existent file is a usage error."""
    result = run_cli(["--root", str(sol_workspace), "methods", str(sol_workspace / "Nope.sol"), "--line", "1"])

    assert result.returncode == 2
    assert "File does not exist" in result.stderr
