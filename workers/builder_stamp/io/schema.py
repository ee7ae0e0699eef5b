"""
Schema — Pydantic models for the build request, metadata and receipt.

  1. BuildRequest   — explicit inputs (flags, working dir, search path).
  2. BuildMetadata  — the six stamped strings plus the output path.
  3. BuildReceipt   — optional JSON record of what was built and how.
"""
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from builder_stamp import BUILDER_NAME, BUILDER_VERSION, PROFILE_ID


# ── Inputs ───────────────────────────────────────────────────────────────────

class BuildRequest(BaseModel):
    """Everything the pipeline needs from the caller's process."""
    output: str
    working_dir: Path
    search_path: List[str] = Field(default_factory=list)
    verbose: bool = False
    receipt: Optional[Path] = None


# ── Collected state ──────────────────────────────────────────────────────────

class ToolAvailability(BaseModel):
    """Result of the tool probe."""
    compiler: bool
    vcs: bool
    http: bool


class BuildMetadata(BaseModel):
    """
    Stamped build metadata.  Written once by the collector, read once by
    the flag assembler; every field is always populated.
    """
    model_config = ConfigDict(frozen=True)

    output_path: str
    built_at: str            # YYYY-MM-DD HH:MM:SS ±ZZZZ, local time
    compiler_version: str    # e.g. go1.22.3 linux/amd64
    git_author: str          # Name <email>
    git_commit: str          # short hash
    version: str             # git describe --long --tags --dirty --always
    web_version: str         # frontend release, no leading v


# ── Receipt ──────────────────────────────────────────────────────────────────

class BuildStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class BuilderInfo(BaseModel):
    """Identifies the builder package."""
    name: str = BUILDER_NAME
    version: str = BUILDER_VERSION
    profile_id: str = PROFILE_ID


class BuildReceipt(BaseModel):
    """
    Single receipt for one build invocation.

    ``command`` is the exact argv handed to the compiler, so a receipt is
    enough to reproduce the build by hand.
    """
    builder: BuilderInfo = BuilderInfo()
    metadata: BuildMetadata
    tools: ToolAvailability
    working_dir: str
    command: List[str]
    exit_code: int
    started_at: str           # ISO 8601, UTC
    finished_at: str
    duration_ms: int = 0
    status: BuildStatus = BuildStatus.FAILED

    def compute_status(self) -> BuildStatus:
        """Derive status from the compiler exit code."""
        return BuildStatus.SUCCESS if self.exit_code == 0 else BuildStatus.FAILED
