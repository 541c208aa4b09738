from __future__ import annotations

"""
Workspace File Discovery Service.

Implements the file enumeration collaborator: walks the workspace,
prunes excluded directories early and returns the files matching an
editor-style glob ('**/*.sol', '{a/**,b/*.sol}'), bounded by a hard cap.
"""

import logging
import os
import re
from typing import Iterable, List, Sequence

logger = logging.getLogger(__name__)


# ==============================================================================
# GLOB TRANSLATION
# ==============================================================================

def expand_braces(pattern: str) -> List[str]:
    """
    Expand the first level of '{a,b}' alternation, recursively.

    Example:
        '{**/*_flat.sol,**/flat_*.sol}' -> ['**/*_flat.sol', '**/flat_*.sol']
    """
    start = pattern.find("{")
    if start == -1:
        return [pattern]
    depth = 0
    for end in range(start, len(pattern)):
        if pattern[end] == "{":
            depth += 1
        elif pattern[end] == "}":
            depth -= 1
            if depth == 0:
                break
    else:
        return [pattern]

    head, body, tail = pattern[:start], pattern[start + 1:end], pattern[end + 1:]
    options: List[str] = []
    depth = 0
    piece_start = 0
    for i, ch in enumerate(body + ","):
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        elif ch == "," and depth == 0:
            options.append(body[piece_start:i])
            piece_start = i + 1

    expanded: List[str] = []
    for option in options:
        expanded.extend(expand_braces(head + option + tail))
    return expanded


def glob_to_regex(pattern: str) -> re.Pattern:
    """
    Translate a '/'-separated glob into an anchored regex.

    '**/' matches zero or more directories, '**' anything, '*' and '?'
    stay within one path segment.
    """
    out: List[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile("^" + "".join(out) + "$")


def compile_globs(patterns: Iterable[str]) -> List[re.Pattern]:
    compiled: List[re.Pattern] = []
    for p in patterns:
        for option in expand_braces(p):
            compiled.append(glob_to_regex(option))
    return compiled


def matches_any(rel_path: str, compiled: Sequence[re.Pattern]) -> bool:
    return any(rx.match(rel_path) for rx in compiled)


# ==============================================================================
# FILE FINDER
# ==============================================================================

class WorkspaceFileFinder:
    """
    Filesystem enumeration rooted at a workspace directory.

    Attributes:
        workspace_root: Absolute directory every glob is evaluated against.
    """

    def __init__(self, workspace_root: str) -> None:
        self.workspace_root = os.path.abspath(workspace_root)

    def find_files(
            self,
            glob_pattern: str,
            exclude_globs: Sequence[str] = (),
            max_results: int = 0,
    ) -> List[str]:
        """
        Return absolute paths of files matching glob_pattern.

        Args:
            glob_pattern: Include glob relative to the workspace root.
            exclude_globs: Globs for files or directories to skip.
            max_results: Hard cap on returned paths (0 = unbounded).

        Returns:
            List[str]: Matching absolute paths in sorted walk order.
        """
        include_rx = compile_globs([glob_pattern])
        exclude_rx = compile_globs(exclude_globs)
        results: List[str] = []

        for root, dirs, files in os.walk(self.workspace_root):
            rel_root = os.path.relpath(root, self.workspace_root)
            rel_root = "" if rel_root == "." else rel_root.replace(os.sep, "/")

            # In-place pruning of excluded directories
            dirs[:] = [d for d in dirs if not matches_any(_join(rel_root, d), exclude_rx)]
            dirs.sort()
            files.sort()

            for file_name in files:
                rel_path = _join(rel_root, file_name)
                if matches_any(rel_path, exclude_rx) or not matches_any(rel_path, include_rx):
                    continue
                results.append(os.path.join(root, file_name))
                if max_results and len(results) >= max_results:
                    logger.warning(
                        f"File discovery capped at {max_results} result(s) for '{glob_pattern}'"
                    )
                    return results

        logger.debug(f"Discovered {len(results)} file(s) for '{glob_pattern}' in {self.workspace_root}")
        return results


def _join(rel_root: str, name: str) -> str:
    return f"{rel_root}/{name}" if rel_root else name
