"""
Builder configuration
"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Builder settings, read from ``STAMP_*`` environment variables."""

    # Target
    APP_NAME: str = "openlist"
    CONF_PACKAGE: str = "github.com/OpenListTeam/OpenList/v4/internal/conf"

    # Frontend release lookup
    WEB_RELEASE_URL: str = (
        "https://api.github.com/repos/OpenListTeam/OpenList-Frontend/releases/latest"
    )
    HTTP_TIMEOUT: float = 5.0  # seconds
    OFFLINE: bool = False

    model_config = SettingsConfigDict(
        env_prefix="STAMP_",
        case_sensitive=True,
    )
