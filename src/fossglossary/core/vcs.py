"""Git helpers: the short revision stamped on exports and older file versions.

Both helpers degrade quietly: outside a repository, without `git` on PATH or
for a revision that does not exist they return ``"unknown"`` / ``None``.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from .contracts.artifact import UNKNOWN_VERSION
from .settings import get_logger

log = get_logger("fossglossary.vcs")

_GIT_TIMEOUT_SECONDS = 10


def _git(*args: str, cwd: Path | None = None) -> str | None:
    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=True,
            timeout=_GIT_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        log.debug("git %s failed: %s", " ".join(args), exc)
        return None
    return completed.stdout


def get_revision(cwd: Path | None = None) -> str:
    """Return the short SHA of ``HEAD``, or ``"unknown"``."""
    out = _git("rev-parse", "--short", "HEAD", cwd=cwd)
    sha = out.strip() if out else ""
    return sha or UNKNOWN_VERSION


def show_file(revision: str, path: str, cwd: Path | None = None) -> str | None:
    """Return the contents of ``path`` at ``revision`` (``git show rev:path``)."""
    return _git("show", f"{revision}:{path}", cwd=cwd)


__all__ = ["get_revision", "show_file"]
