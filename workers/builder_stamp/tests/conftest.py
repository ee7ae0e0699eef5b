"""
Shared pytest fixtures for builder_stamp tests.

Fakes for the three tool capabilities (compiler, git, HTTP) so the
pipeline runs without Go, git, or network access, plus a fixed clock.

Tests that exercise the real providers create throwaway executables or
git repositories under tmp_path and are skipped on Windows.
"""
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional

import pytest

from builder_stamp.core.ldflags import LinkFlags
from builder_stamp.core.tools import BuildInvocation
from builder_stamp.io.schema import BuildRequest
from builder_stamp.policy.profile import Profile

FIXED_NOW = datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone(timedelta(hours=2)))
FIXED_BUILT_AT = "2024-05-06 07:08:09 +0200"

RELEASE_BODY = '{"tag_name": "v4.2.1", "name": "v4.2.1", "draft": false}'


class FakeCompiler:
    name = "go"

    def __init__(self, present: bool = True, version: str = "go1.22.3 linux/amd64",
                 exit_code: int = 0):
        self.present = present
        self._version = version
        self.exit_code = exit_code
        self.version_calls = 0
        self.builds: List[tuple] = []

    def available(self) -> bool:
        return self.present

    def version(self) -> str:
        self.version_calls += 1
        return self._version

    def build(self, flags: LinkFlags, output: str) -> BuildInvocation:
        self.builds.append((flags, output))
        argv = ["go", "build", *flags.to_args(), "-o", output, "."]
        return BuildInvocation(argv=argv, exit_code=self.exit_code, duration_ms=5)


class FakeVCS:
    name = "git"

    def __init__(self, present: bool = True, in_repo: bool = True,
                 author: Optional[str] = "Ada Lovelace <ada@example.com>",
                 commit: Optional[str] = "1a2b3c4",
                 describe: Optional[str] = "v4.0.0-3-g1a2b3c4-dirty"):
        self.present = present
        self.in_repo = in_repo
        self._author = author
        self._commit = commit
        self._describe = describe
        self.queries = 0

    def available(self) -> bool:
        return self.present

    def in_repository(self) -> bool:
        self.queries += 1
        return self.in_repo

    def author(self) -> Optional[str]:
        self.queries += 1
        return self._author

    def commit(self) -> Optional[str]:
        self.queries += 1
        return self._commit

    def describe(self) -> Optional[str]:
        self.queries += 1
        return self._describe


class FakeFetcher:
    name = "http"

    def __init__(self, present: bool = True, body: Optional[str] = RELEASE_BODY):
        self.present = present
        self.body = body
        self.calls: List[tuple] = []

    def available(self) -> bool:
        return self.present

    def get(self, url: str, timeout: float) -> Optional[str]:
        self.calls.append((url, timeout))
        return self.body


@pytest.fixture
def profile():
    return Profile.openlist()


@pytest.fixture
def request_obj(tmp_path):
    return BuildRequest(
        output="./openlist",
        working_dir=tmp_path,
        search_path=[str(tmp_path / "bin")],
    )


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


def make_executable(directory: Path, name: str, script: str) -> Path:
    """Write a POSIX shell script named *name* and mark it executable."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text("#!/bin/sh\n" + script)
    path.chmod(0o755)
    return path
