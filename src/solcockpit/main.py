from __future__ import annotations

"""
Main Entry Point and Global Supervisor.

Makes the package importable from a source checkout, installs a
sys.excepthook that records fatal crashes, and hands control to the CLI.
"""

import logging
import os
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

# -----------------------------------------------------------------------------
# ENVIRONMENT INITIALIZATION
# -----------------------------------------------------------------------------

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
SRC_DIR = os.path.dirname(PACKAGE_DIR)
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)


# -----------------------------------------------------------------------------
# GLOBAL SUPERVISOR (EXCEPTION HANDLING)
# -----------------------------------------------------------------------------

def global_exception_handler(exctype: type, value: BaseException, tb: Any) -> None:
    """
    Report an unhandled exception on stderr and keep a copy in the crash log.

    Args:
        exctype: Exception class.
        value: Exception instance.
        tb: Traceback object.
    """
    stack_trace = "".join(traceback.format_exception(exctype, value, tb))
    logging.getLogger("solcockpit.supervisor").critical(f"FATAL EXCEPTION DETECTED: {value}")

    crash_file = _write_crash_report(stack_trace)

    print("\n" + "=" * 80, file=sys.stderr)
    print("CRITICAL ERROR (SOLCOCKPIT CLI)", file=sys.stderr)
    print("=" * 80, file=sys.stderr)
    print(stack_trace, file=sys.stderr)
    if crash_file:
        print(f"Crash report saved to: {crash_file}", file=sys.stderr)


def _write_crash_report(stack_trace: str) -> Optional[str]:
    from solcockpit.infra.logging import get_default_log_path

    path = get_default_log_path("crash.log")
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(f"--- {datetime.now().isoformat(timespec='seconds')} ---\n{stack_trace}\n")
    except OSError:
        return None
    return path


sys.excepthook = global_exception_handler


# -----------------------------------------------------------------------------
# EXECUTION ROUTING
# -----------------------------------------------------------------------------

def main() -> int:
    """
    Delegate to the CLI controller.

    Returns:
        int: Process exit code.
    """
    try:
        from solcockpit.interface.cli.app import main as cli_main
        return cli_main()
    except Exception as e:
        global_exception_handler(type(e), e, e.__traceback__)
        return 1


if __name__ == "__main__":
    sys.exit(main())
