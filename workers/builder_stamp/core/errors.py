"""
Fatal conditions that stop a build before the compiler runs.

Degraded conditions (missing git, failed release lookup) are not
exceptions; they are logged and replaced with defaults.
"""


class StampError(RuntimeError):
    """Base class for fatal builder errors."""


class MissingToolError(StampError):
    """A mandatory executable is not on the search path."""

    def __init__(self, tool: str, hint: str = ""):
        self.tool = tool
        self.hint = hint
        message = f"'{tool}' not found in PATH."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)


class LinkFlagError(StampError):
    """A stamped value cannot be quoted for the Go linker."""
