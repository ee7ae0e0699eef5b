"""
Metadata collector — build timestamp, toolchain, git identity, web version.

Every field has a deterministic default so the record is always fully
populated: no network, no git, or an untagged tree only degrade the
values, never the build.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Callable, Optional, Tuple

from builder_stamp.core.tools import Compiler, HTTPFetcher, VersionControlProvider
from builder_stamp.io.schema import BuildMetadata, ToolAvailability
from builder_stamp.policy.profile import Profile

logger = logging.getLogger(__name__)

DEFAULT_GIT_AUTHOR = "unknown <unknown>"
DEFAULT_GIT_COMMIT = "unknown"
DEFAULT_VERSION = "v0.0.0"
DEFAULT_WEB_VERSION = "0.0.0"

BUILT_AT_FORMAT = "%Y-%m-%d %H:%M:%S %z"


def local_now() -> datetime:
    return datetime.now().astimezone()


def format_built_at(now: datetime) -> str:
    """Format *now* as ``YYYY-MM-DD HH:MM:SS ±ZZZZ``."""
    if now.tzinfo is None:
        now = now.astimezone()
    return now.strftime(BUILT_AT_FORMAT)


# ── Git ──────────────────────────────────────────────────────────────────────

def collect_git_fields(
    vcs: VersionControlProvider,
    tools: ToolAvailability,
) -> Tuple[str, str, str]:
    """Return (author, commit, version), each falling back independently."""
    if not tools.vcs:
        return DEFAULT_GIT_AUTHOR, DEFAULT_GIT_COMMIT, DEFAULT_VERSION

    if not vcs.in_repository():
        logger.warning("Not inside a git repository. Git-related fields will use safe defaults.")
        return DEFAULT_GIT_AUTHOR, DEFAULT_GIT_COMMIT, DEFAULT_VERSION

    author = vcs.author()
    if author is None:
        logger.warning("Could not read HEAD author, using %r", DEFAULT_GIT_AUTHOR)
        author = DEFAULT_GIT_AUTHOR

    commit = vcs.commit()
    if commit is None:
        logger.warning("Could not read HEAD commit, using %r", DEFAULT_GIT_COMMIT)
        commit = DEFAULT_GIT_COMMIT

    version = vcs.describe()
    if version is None:
        logger.warning("git describe failed, using %r", DEFAULT_VERSION)
        version = DEFAULT_VERSION

    return author, commit, version


# ── Web version ──────────────────────────────────────────────────────────────

def parse_web_version(body: Optional[str]) -> str:
    """
    Extract ``tag_name`` from a release JSON body and drop one leading ``v``.

    A body that is empty, not JSON, or has no usable ``tag_name`` yields
    the default, same as a network failure.
    """
    if not body or not body.strip():
        return DEFAULT_WEB_VERSION
    try:
        payload = json.loads(body)
    except ValueError:
        logger.warning("Release response is not valid JSON")
        return DEFAULT_WEB_VERSION

    tag = payload.get("tag_name") if isinstance(payload, dict) else None
    if not isinstance(tag, str) or not tag.strip():
        logger.warning("Release response has no tag_name")
        return DEFAULT_WEB_VERSION

    tag = tag.strip()
    if tag.startswith("v"):
        tag = tag[1:]
    return tag or DEFAULT_WEB_VERSION


def fetch_web_version(
    fetcher: HTTPFetcher,
    tools: ToolAvailability,
    url: str,
    timeout: float,
) -> str:
    if not tools.http:
        return DEFAULT_WEB_VERSION
    body = fetcher.get(url, timeout)
    if body is None:
        return DEFAULT_WEB_VERSION
    return parse_web_version(body)


# ── Collector ────────────────────────────────────────────────────────────────

def collect_metadata(
    output_path: str,
    tools: ToolAvailability,
    compiler: Compiler,
    vcs: VersionControlProvider,
    fetcher: HTTPFetcher,
    profile: Profile,
    clock: Callable[[], datetime] = local_now,
) -> BuildMetadata:
    """Gather the full metadata record for one build."""
    built_at = format_built_at(clock())
    compiler_version = compiler.version()
    git_author, git_commit, version = collect_git_fields(vcs, tools)
    web_version = fetch_web_version(
        fetcher, tools, profile.web_release_url, profile.http_timeout
    )

    return BuildMetadata(
        output_path=output_path,
        built_at=built_at,
        compiler_version=compiler_version,
        git_author=git_author,
        git_commit=git_commit,
        version=version,
        web_version=web_version,
    )
