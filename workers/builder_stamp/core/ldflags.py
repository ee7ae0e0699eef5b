"""
Link flags — structured ``-ldflags`` for link-time variable injection.

Bindings are kept as (variable, value) pairs until the very end and
handed to the compiler as a single argv element, so no shell ever
sees them.  The only quoting left is the one the Go toolchain itself
applies when it splits the ``-ldflags`` value into linker arguments:
a field is either bare, or wrapped in single or double quotes with no
escape sequences.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from builder_stamp.core.errors import LinkFlagError
from builder_stamp.io.schema import BuildMetadata

# Same set the Go flag splitter treats as separators
_SPACE_CHARS = frozenset(" \t\n\r")

# Order matters only for readability of the rendered command
STAMPED_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("BuiltAt", "built_at"),
    ("GoVersion", "compiler_version"),
    ("GitAuthor", "git_author"),
    ("GitCommit", "git_commit"),
    ("Version", "version"),
    ("WebVersion", "web_version"),
)


def quote_field(arg: str) -> str:
    """
    Quote one field so the Go toolchain splits it back to *arg*.

    Raises
    ------
    LinkFlagError
        If *arg* holds both single and double quotes.
    """
    saw_space = any(c in _SPACE_CHARS for c in arg)
    saw_single = "'" in arg
    saw_double = '"' in arg

    if arg and not (saw_space or saw_single or saw_double):
        return arg
    if not saw_single:
        return f"'{arg}'"
    if not saw_double:
        return f'"{arg}"'
    raise LinkFlagError(
        f"argument {arg!r} contains both single and double quotes and cannot be quoted"
    )


@dataclass(frozen=True)
class LinkVariable:
    """One ``-X importpath.name=value`` binding."""
    name: str   # fully qualified, e.g. github.com/x/y/conf.Version
    value: str

    def directive(self) -> str:
        return f"{self.name}={self.value}"


@dataclass(frozen=True)
class LinkFlags:
    """Strip flags plus the ordered variable bindings."""
    variables: Tuple[LinkVariable, ...]
    strip: Tuple[str, ...] = ("-w", "-s")

    def render(self) -> str:
        """The value passed after ``-ldflags=``."""
        parts: List[str] = list(self.strip)
        for var in self.variables:
            parts.append("-X")
            parts.append(quote_field(var.directive()))
        return " ".join(parts)

    def to_args(self) -> List[str]:
        """Compiler arguments carrying these flags."""
        return [f"-ldflags={self.render()}"]


def assemble_link_flags(
    metadata: BuildMetadata,
    conf_package: str,
    strip: Tuple[str, ...] = ("-w", "-s"),
) -> LinkFlags:
    """Bind the six stamped metadata strings to variables in *conf_package*."""
    variables = tuple(
        LinkVariable(name=f"{conf_package}.{var_name}", value=getattr(metadata, field))
        for var_name, field in STAMPED_FIELDS
    )
    return LinkFlags(variables=variables, strip=tuple(strip))
