"""
Profile — what gets built and where the stamped variables live.

The profile holds every target-specific constant (binary name, Go
package of the stamped variables, release endpoint) so that the core
collectors contain no opinions about which project is being built.
"""
from dataclasses import dataclass
from typing import Tuple

from builder_stamp import PROFILE_ID
from builder_stamp.config import Settings


@dataclass(frozen=True)
class Profile:
    """Describes the Go binary being stamped."""

    # Identity
    profile_id: str
    app_name: str

    # Fully qualified Go package holding the BuiltAt/GoVersion/... vars
    conf_package: str

    # Companion frontend release
    web_release_url: str
    http_timeout: float = 5.0

    # Linker flags dropping the symbol table and DWARF
    strip_flags: Tuple[str, ...] = ("-w", "-s")

    @property
    def default_output(self) -> str:
        """Output path used when ``-o`` is not given."""
        return f"./{self.app_name}"

    @classmethod
    def openlist(cls) -> "Profile":
        """The stock OpenList profile."""
        return cls(
            profile_id=PROFILE_ID,
            app_name="openlist",
            conf_package="github.com/OpenListTeam/OpenList/v4/internal/conf",
            web_release_url=(
                "https://api.github.com/repos/OpenListTeam/OpenList-Frontend/releases/latest"
            ),
            http_timeout=5.0,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Profile":
        return cls(
            profile_id=PROFILE_ID,
            app_name=settings.APP_NAME,
            conf_package=settings.CONF_PACKAGE,
            web_release_url=settings.WEB_RELEASE_URL,
            http_timeout=settings.HTTP_TIMEOUT,
        )
