"""Code provenance for saved chains.

A saved chain records the short SHA of the code that produced it, flagged
'-dirty' when the working tree had uncommitted changes.
"""

import subprocess
from pathlib import Path


def get_git_hash(repo_dir: Path | str | None = None) -> str:
    """Short SHA of HEAD, e.g. "a3f9c1d" or "a3f9c1d-dirty".

    Tags are excluded from the description so the result is always a bare
    SHA. Returns "unknown" outside a git checkout or without git installed.

    Args:
        repo_dir: Directory inside the repository; defaults to the cwd.
    """
    cmd = ["git", "describe", "--always", "--dirty", "--abbrev=7", "--exclude=*"]
    try:
        out = subprocess.check_output(
            cmd,
            cwd=str(repo_dir) if repo_dir is not None else None,
            stderr=subprocess.DEVNULL,
        )
    except (subprocess.CalledProcessError, FileNotFoundError, NotADirectoryError):
        return "unknown"
    return out.decode().strip() or "unknown"
