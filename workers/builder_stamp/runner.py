"""
Builder runner — top-level orchestration: flags → metadata → go build.

Linear pipeline:

  1. Parse arguments into a BuildRequest
  2. Probe tools (go mandatory; git and HTTP optional)
  3. Collect metadata (with per-field defaults)
  4. Assemble -ldflags
  5. Print the summary, run go build, optionally write a receipt

Usage (CLI)::

    python -m builder_stamp
    python -m builder_stamp -o ./bin/openlist
    python -m builder_stamp --help
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from pydantic import ValidationError

from builder_stamp.config import Settings
from builder_stamp.core.errors import StampError
from builder_stamp.core.ldflags import assemble_link_flags
from builder_stamp.core.metadata import collect_metadata, local_now
from builder_stamp.core.tools import (
    Compiler,
    GitProvider,
    GoCompiler,
    HTTPFetcher,
    HttpxFetcher,
    VersionControlProvider,
    probe_tools,
)
from builder_stamp.io.schema import BuildMetadata, BuildReceipt, BuildRequest
from builder_stamp.io.writer import write_receipt
from builder_stamp.policy.profile import Profile

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    """Current UTC time as ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


# ── Pipeline ─────────────────────────────────────────────────────────────────

def print_summary(app_name: str, metadata: BuildMetadata) -> None:
    print(f"Building {app_name} -> {metadata.output_path}")
    print(f"  BuiltAt:   {metadata.built_at}")
    print(f"  GoVersion: {metadata.compiler_version}")
    print(f"  GitAuthor: {metadata.git_author}")
    print(f"  GitCommit: {metadata.git_commit}")
    print(f"  Version:   {metadata.version}")
    print(f"  WebVersion:{metadata.web_version}")
    print()


def run_build(
    request: BuildRequest,
    profile: Profile,
    compiler: Compiler,
    vcs: VersionControlProvider,
    fetcher: HTTPFetcher,
    clock: Callable[[], datetime] = local_now,
) -> int:
    """
    Run the whole pipeline once and return the compiler's exit code.

    Raises
    ------
    MissingToolError
        If the compiler is missing (before any metadata is collected).
    LinkFlagError
        If a collected value cannot be quoted for the linker
        (before the compiler runs).
    """
    tools = probe_tools(compiler, vcs, fetcher)

    metadata = collect_metadata(
        output_path=request.output,
        tools=tools,
        compiler=compiler,
        vcs=vcs,
        fetcher=fetcher,
        profile=profile,
        clock=clock,
    )

    flags = assemble_link_flags(metadata, profile.conf_package, profile.strip_flags)
    flags.render()  # fail on unquotable values before anything is printed

    print_summary(profile.app_name, metadata)

    started_at = _now_iso()
    invocation = compiler.build(flags, metadata.output_path)
    finished_at = _now_iso()

    if request.receipt is not None:
        receipt = BuildReceipt(
            metadata=metadata,
            tools=tools,
            working_dir=str(request.working_dir),
            command=invocation.argv,
            exit_code=invocation.exit_code,
            started_at=started_at,
            finished_at=finished_at,
            duration_ms=invocation.duration_ms,
        )
        receipt.status = receipt.compute_status()
        try:
            write_receipt(receipt, request.receipt)
            logger.info("Receipt saved: %s", request.receipt)
        except OSError as e:
            logger.error("Failed to write receipt %s: %s", request.receipt, e)

    if invocation.exit_code != 0:
        logger.error("go build failed with exit code %d", invocation.exit_code)
        return invocation.exit_code

    print(f"Build finished: {metadata.output_path}")
    return 0


# ── CLI ──────────────────────────────────────────────────────────────────────

# Options whose value is always the next token, taken verbatim
_VALUE_OPTIONS = ("-o", "--receipt")
_HELP_OPTIONS = ("-h", "--help")


class _UsageParser(argparse.ArgumentParser):
    """
    Print full usage and exit 1 on any argument error.

    ``-o`` and ``--receipt`` consume the following token as-is, even when
    it starts with a dash.  Attached spellings (``-o/tmp/x``, ``-o=x``,
    ``--receipt=x``) and bundled short flags (``-vo``) are unknown tokens.
    """

    def error(self, message: str):
        self.print_help(sys.stderr)
        self.exit(1, f"\n{self.prog}: error: {message}\n")

    def parse_args(self, args=None, namespace=None):
        tokens = list(sys.argv[1:] if args is None else args)
        values: Dict[str, str] = {}
        rest: List[str] = []

        i = 0
        while i < len(tokens):
            token = tokens[i]
            if token in _VALUE_OPTIONS:
                if i + 1 >= len(tokens):
                    self.error(f"argument {token}: expected one argument")
                values[token] = tokens[i + 1]
                i += 2
                continue
            if token in _HELP_OPTIONS:
                # Tokens before the help flag are still checked first
                super().parse_args(rest)
                self.print_help()
                self.exit(0)
            attached = token.startswith("-") and (
                "=" in token or (not token.startswith("--") and len(token) > 2)
            )
            if attached or token == "--":
                self.error(f"unrecognized arguments: {token}")
            rest.append(token)
            i += 1

        namespace = super().parse_args(rest, namespace)
        if "-o" in values:
            namespace.output = values["-o"]
        if "--receipt" in values:
            namespace.receipt = Path(values["--receipt"])
        return namespace


def build_parser(profile: Profile) -> argparse.ArgumentParser:
    parser = _UsageParser(
        prog="stamp-build",
        description=(
            f"Build {profile.app_name} with build metadata injected via -ldflags"
        ),
        allow_abbrev=False,
    )
    parser.add_argument(
        "-o",
        dest="output",
        metavar="<output>",
        default=profile.default_output,
        help=f"Specify output binary path (default: {profile.default_output})",
    )
    parser.add_argument(
        "--receipt",
        type=Path,
        default=None,
        metavar="<path>",
        help="Write a JSON build receipt to this path",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def parse_args(
    argv: Optional[Sequence[str]],
    profile: Profile,
    working_dir: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
) -> BuildRequest:
    """Turn CLI tokens plus process context into a BuildRequest."""
    args = build_parser(profile).parse_args(argv)

    if environ is None:
        environ = dict(os.environ)
    path_var = environ.get("PATH", os.defpath)
    search_path: List[str] = [p for p in path_var.split(os.pathsep) if p]

    return BuildRequest(
        output=args.output,
        working_dir=working_dir if working_dir is not None else Path.cwd(),
        search_path=search_path,
        verbose=args.verbose,
        receipt=args.receipt,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point."""
    try:
        settings = Settings()
    except ValidationError as e:
        print(f"Error: invalid STAMP_* settings: {e}", file=sys.stderr)
        return 1
    profile = Profile.from_settings(settings)
    request = parse_args(argv, profile)

    logging.basicConfig(
        level=logging.DEBUG if request.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    compiler = GoCompiler.from_search_path(request.search_path, request.working_dir)
    vcs = GitProvider.from_search_path(request.search_path, request.working_dir)
    fetcher = HttpxFetcher(enabled=not settings.OFFLINE)

    try:
        return run_build(request, profile, compiler, vcs, fetcher)
    except StampError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
