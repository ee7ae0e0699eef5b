"""
Process helpers — run external tools and capture their output.

Failures come back as data (exit code + stderr) rather than exceptions,
so callers decide whether a failed command is fatal or degraded.
"""
from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one captured command."""
    argv: List[str]
    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def run_command(
    argv: Sequence[str],
    cwd: Optional[Path] = None,
    env: Optional[Dict[str, str]] = None,
    timeout: int = 30,
) -> CommandResult:
    """Execute *argv* (no shell) and return stdout, stderr and exit code."""
    argv = list(argv)
    logger.debug("exec: %s (cwd=%s)", " ".join(argv), cwd)
    try:
        result = subprocess.run(
            argv,
            cwd=str(cwd) if cwd is not None else None,
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
        return CommandResult(argv, result.stdout, result.stderr, result.returncode)
    except subprocess.TimeoutExpired:
        return CommandResult(argv, "", f"Command timed out after {timeout}s", -1)
    except OSError as e:
        return CommandResult(argv, "", str(e), -1)


def resolve_executable(name: str, search_path: Sequence[str]) -> Optional[str]:
    """Resolve *name* against an explicit list of directories."""
    if not search_path:
        return None
    return shutil.which(name, path=os.pathsep.join(search_path))


def child_env(search_path: Sequence[str]) -> Dict[str, str]:
    """Caller's environment with PATH pinned to *search_path*."""
    env = dict(os.environ)
    env["PATH"] = os.pathsep.join(search_path)
    return env
