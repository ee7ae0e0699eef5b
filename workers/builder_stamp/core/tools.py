"""
Tools — narrow interfaces to the external programs the builder uses.

Three capabilities, each with a real implementation:

  Compiler                -> GoCompiler     (``go version`` / ``go build``)
  VersionControlProvider  -> GitProvider    (author, short commit, describe)
  HTTPFetcher             -> HttpxFetcher   (release lookup over HTTPS)

Collectors and the runner only talk to the protocols, so tests swap in
fakes without touching PATH or the network.
"""
from __future__ import annotations

import asyncio
import logging
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence

import httpx

from builder_stamp.core.errors import MissingToolError
from builder_stamp.core.ldflags import LinkFlags
from builder_stamp.core.process import child_env, resolve_executable, run_command
from builder_stamp.io.schema import ToolAvailability

logger = logging.getLogger(__name__)


# =============================================================================
# Interfaces
# =============================================================================

@dataclass(frozen=True)
class BuildInvocation:
    """What was run and how it ended."""
    argv: List[str]
    exit_code: int
    duration_ms: int = 0


class Compiler(Protocol):
    name: str

    def available(self) -> bool: ...

    def version(self) -> str: ...

    def build(self, flags: LinkFlags, output: str) -> BuildInvocation: ...


class VersionControlProvider(Protocol):
    name: str

    def available(self) -> bool: ...

    def in_repository(self) -> bool: ...

    def author(self) -> Optional[str]: ...

    def commit(self) -> Optional[str]: ...

    def describe(self) -> Optional[str]: ...


class HTTPFetcher(Protocol):
    name: str

    def available(self) -> bool: ...

    def get(self, url: str, timeout: float) -> Optional[str]: ...


# =============================================================================
# Go toolchain
# =============================================================================

class GoCompiler:
    """``go`` resolved from an explicit search path."""

    name = "go"

    def __init__(
        self,
        executable: Optional[str],
        working_dir: Path,
        env: Optional[Dict[str, str]] = None,
        package: str = ".",
    ):
        self.executable = executable
        self.working_dir = working_dir
        self.env = env
        self.package = package

    @classmethod
    def from_search_path(cls, search_path: Sequence[str], working_dir: Path) -> "GoCompiler":
        return cls(
            executable=resolve_executable("go", search_path),
            working_dir=working_dir,
            env=child_env(search_path),
        )

    def available(self) -> bool:
        return self.executable is not None

    def version(self) -> str:
        """``go version`` output without the leading ``go version `` label."""
        result = run_command(
            [self.executable, "version"], cwd=self.working_dir, env=self.env
        )
        if not result.ok:
            logger.warning("'go version' failed (exit %d): %s",
                           result.exit_code, result.stderr.strip())
            return "unknown"
        raw = result.stdout.strip()
        if raw.startswith("go version "):
            raw = raw[len("go version "):]
        return raw.strip() or "unknown"

    def command(self, flags: LinkFlags, output: str) -> List[str]:
        return [self.executable, "build", *flags.to_args(), "-o", output, self.package]

    def build(self, flags: LinkFlags, output: str) -> BuildInvocation:
        """
        Run ``go build``.  Compiler output is not captured: diagnostics
        reach the terminal unmodified.
        """
        argv = self.command(flags, output)
        logger.debug("exec: %s", argv)

        t0 = time.monotonic()
        try:
            result = subprocess.run(argv, cwd=str(self.working_dir), env=self.env)
            exit_code = result.returncode
            if exit_code < 0:
                # killed by signal N: report 128 + N, as a shell would
                exit_code = 128 - exit_code
        except OSError as e:
            logger.error("Failed to start go build: %s", e)
            exit_code = 1
        duration = int((time.monotonic() - t0) * 1000)

        return BuildInvocation(argv=argv, exit_code=exit_code, duration_ms=duration)


# =============================================================================
# Git
# =============================================================================

class GitProvider:
    """Git metadata for the working tree; every query returns None on failure."""

    name = "git"

    def __init__(
        self,
        executable: Optional[str],
        working_dir: Path,
        env: Optional[Dict[str, str]] = None,
    ):
        self.executable = executable
        self.working_dir = working_dir
        self.env = env

    @classmethod
    def from_search_path(cls, search_path: Sequence[str], working_dir: Path) -> "GitProvider":
        return cls(
            executable=resolve_executable("git", search_path),
            working_dir=working_dir,
            env=child_env(search_path),
        )

    def available(self) -> bool:
        return self.executable is not None

    def _query(self, *args: str) -> Optional[str]:
        if self.executable is None:
            return None
        result = run_command([self.executable, *args], cwd=self.working_dir, env=self.env)
        if not result.ok:
            logger.debug("git %s failed (exit %d): %s",
                         args[0], result.exit_code, result.stderr.strip())
            return None
        return result.stdout.strip() or None

    def in_repository(self) -> bool:
        return self._query("rev-parse", "--git-dir") is not None

    def author(self) -> Optional[str]:
        return self._query("show", "-s", "--format=format:%aN <%ae>", "HEAD")

    def commit(self) -> Optional[str]:
        return self._query("log", "--pretty=format:%h", "-1")

    def describe(self) -> Optional[str]:
        return self._query("describe", "--long", "--tags", "--dirty", "--always")


# =============================================================================
# HTTP
# =============================================================================

class HttpxFetcher:
    """GET a URL with httpx; any failure is logged and returns None."""

    name = "http"

    def __init__(
        self,
        enabled: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.enabled = enabled
        self.transport = transport
        self.headers = headers or {"Accept": "application/vnd.github+json"}

    def available(self) -> bool:
        return self.enabled

    async def _get(self, url: str, timeout: float) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            transport=self.transport,
            headers=self.headers,
        ) as client:
            return await client.get(url)

    def get(self, url: str, timeout: float) -> Optional[str]:
        """
        GET ``url`` with ``timeout`` as a deadline for the whole exchange
        (connect, redirects and body), not just for each read.
        """
        try:
            resp = asyncio.run(asyncio.wait_for(self._get(url, timeout), timeout))
        except asyncio.TimeoutError:
            logger.warning("GET %s timed out after %.1fs", url, timeout)
            return None
        except httpx.HTTPError as e:
            logger.warning("GET %s failed: %s", url, e)
            return None

        logger.debug("GET %s -> %d", url, resp.status_code)
        if not resp.is_success:
            logger.warning("GET %s returned HTTP %d", url, resp.status_code)
            return None
        return resp.text


# =============================================================================
# Probe
# =============================================================================

def probe_tools(
    compiler: Compiler,
    vcs: VersionControlProvider,
    fetcher: HTTPFetcher,
) -> ToolAvailability:
    """
    Check which tools are usable.

    Raises
    ------
    MissingToolError
        If the compiler is not available.  Nothing else is fatal.
    """
    if not compiler.available():
        raise MissingToolError(compiler.name, "Install Go and retry.")

    http_ok = fetcher.available()
    if not http_ok:
        logger.warning("HTTP client unavailable. WebVersion will default to 0.0.0.")

    vcs_ok = vcs.available()
    if not vcs_ok:
        logger.warning("'%s' not found. Git-related fields will use safe defaults.", vcs.name)

    return ToolAvailability(compiler=True, vcs=vcs_ok, http=http_ok)
