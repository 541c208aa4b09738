from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Resolves where the cockpit keeps its own files (configuration, logs) and
converts between absolute paths and workspace-relative ones for the
indexing and discovery layers.
"""

import os
from typing import Mapping, Optional

APP_DIR_NAME = "SolCockpit"
UNIX_APP_DIR_NAME = ".solcockpit"
HOME_ENV_VAR = "SOLCOCKPIT_HOME"


# -----------------------------------------------------------------------------
# APPLICATION DATA
# -----------------------------------------------------------------------------

def get_user_data_dir(environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Resolve the per-user data directory, creating it when possible.

    Resolution order:
    - $SOLCOCKPIT_HOME when set (tests, portable installs)
    - Windows: %LOCALAPPDATA% (or %APPDATA%) / SolCockpit
    - $XDG_DATA_HOME/solcockpit when set
    - ~/.solcockpit

    A directory that cannot be created is still returned; callers that
    read from it fall back to defaults.
    """
    env = os.environ if environ is None else environ

    if env.get(HOME_ENV_VAR):
        path = env[HOME_ENV_VAR]
    elif os.name == "nt" and (env.get("LOCALAPPDATA") or env.get("APPDATA")):
        path = os.path.join(env.get("LOCALAPPDATA") or env["APPDATA"], APP_DIR_NAME)
    elif env.get("XDG_DATA_HOME"):
        path = os.path.join(env["XDG_DATA_HOME"], "solcockpit")
    else:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    path = os.path.abspath(os.path.expanduser(path))
    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass
    return path


# -----------------------------------------------------------------------------
# WORKSPACE PATHS
# -----------------------------------------------------------------------------

def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Absolute form of a user supplied directory.

    '~' and environment variables are expanded; a blank input means fallback.
    """
    raw = (path or "").strip() or fallback
    return os.path.abspath(os.path.expandvars(os.path.expanduser(raw)))


def relative_to_workspace(path: str, workspace_root: str) -> str:
    """
    Strip the workspace prefix from an absolute path.

    Relative inputs are returned unchanged. Paths outside the workspace keep
    their absolute form so that no '..' segments leak into the tree.
    """
    if not os.path.isabs(path):
        return path
    root = os.path.abspath(workspace_root)
    try:
        inside = os.path.commonpath([root, os.path.abspath(path)]) == root
    except ValueError:
        # Different drives on Windows
        return path
    return os.path.relpath(path, root) if inside else path
