"""
test_ldflags — link-time variable assembly and Go-style field quoting.

Tests verify:
  - Values without whitespace or quotes stay bare.
  - Whitespace forces single quotes; an apostrophe switches to double quotes.
  - A value with both quote kinds raises LinkFlagError.
  - The six bindings come out in a stable order under the conf package.
"""
import pytest

from builder_stamp.core.errors import LinkFlagError
from builder_stamp.core.ldflags import (
    LinkFlags,
    LinkVariable,
    assemble_link_flags,
    quote_field,
)
from builder_stamp.io.schema import BuildMetadata

PKG = "github.com/OpenListTeam/OpenList/v4/internal/conf"


def _metadata(**overrides):
    fields = dict(
        output_path="./openlist",
        built_at="2024-05-06 07:08:09 +0200",
        compiler_version="go1.22.3 linux/amd64",
        git_author="Ada Lovelace <ada@example.com>",
        git_commit="1a2b3c4",
        version="v4.0.0-3-g1a2b3c4",
        web_version="4.2.1",
    )
    fields.update(overrides)
    return BuildMetadata(**fields)


class TestQuoteField:

    def test_plain_value_is_bare(self):
        assert quote_field("pkg.GitCommit=1a2b3c4") == "pkg.GitCommit=1a2b3c4"

    def test_whitespace_uses_single_quotes(self):
        assert quote_field("pkg.BuiltAt=2024-05-06 07:08:09") == "'pkg.BuiltAt=2024-05-06 07:08:09'"

    def test_tab_counts_as_whitespace(self):
        assert quote_field("a\tb") == "'a\tb'"

    def test_apostrophe_uses_double_quotes(self):
        assert quote_field("pkg.GitAuthor=Miles O'Brien <m@x>") == '"pkg.GitAuthor=Miles O\'Brien <m@x>"'

    def test_double_quote_uses_single_quotes(self):
        assert quote_field('say"hi') == "'say\"hi'"

    def test_both_quote_kinds_rejected(self):
        with pytest.raises(LinkFlagError, match="both single and double quotes"):
            quote_field("it's \"quoted\"")

    def test_empty_field_is_quoted(self):
        assert quote_field("") == "''"


class TestAssemble:

    def test_six_bindings_in_order(self):
        flags = assemble_link_flags(_metadata(), PKG)
        names = [v.name for v in flags.variables]
        assert names == [
            f"{PKG}.BuiltAt",
            f"{PKG}.GoVersion",
            f"{PKG}.GitAuthor",
            f"{PKG}.GitCommit",
            f"{PKG}.Version",
            f"{PKG}.WebVersion",
        ]

    def test_values_come_from_metadata(self):
        flags = assemble_link_flags(_metadata(web_version="9.9.9"), PKG)
        values = {v.name.rsplit(".", 1)[1]: v.value for v in flags.variables}
        assert values["WebVersion"] == "9.9.9"
        assert values["GitAuthor"] == "Ada Lovelace <ada@example.com>"
        assert values["BuiltAt"] == "2024-05-06 07:08:09 +0200"

    def test_output_path_is_not_stamped(self):
        flags = assemble_link_flags(_metadata(output_path="/tmp/x"), PKG)
        assert all("/tmp/x" not in v.value for v in flags.variables)

    def test_render(self):
        flags = assemble_link_flags(_metadata(), PKG)
        assert flags.render() == (
            "-w -s"
            f" -X '{PKG}.BuiltAt=2024-05-06 07:08:09 +0200'"
            f" -X '{PKG}.GoVersion=go1.22.3 linux/amd64'"
            f" -X '{PKG}.GitAuthor=Ada Lovelace <ada@example.com>'"
            f" -X {PKG}.GitCommit=1a2b3c4"
            f" -X {PKG}.Version=v4.0.0-3-g1a2b3c4"
            f" -X {PKG}.WebVersion=4.2.1"
        )

    def test_to_args_is_single_argument(self):
        flags = assemble_link_flags(_metadata(), PKG)
        args = flags.to_args()
        assert len(args) == 1
        assert args[0].startswith("-ldflags=-w -s -X ")

    def test_custom_strip_flags(self):
        flags = LinkFlags(variables=(LinkVariable("p.V", "1"),), strip=("-s",))
        assert flags.render() == "-s -X p.V=1"

    def test_unquotable_value_fails_on_render(self):
        flags = assemble_link_flags(_metadata(git_author="a'b\"c <x>"), PKG)
        with pytest.raises(LinkFlagError):
            flags.render()
