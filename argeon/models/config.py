"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_API_BASE = "http://141.94.37.234:7122"
DEFAULT_FABRIC_META_URL = "https://meta.fabricmc.net/v2/versions/loader"
DEFAULT_FABRIC_MAVEN_URL = "https://maven.fabricmc.net/"


class LauncherKind(str, Enum):
    """The launcher an instance is installed for."""

    GENERIC = "minecraft"
    THIRD_PARTY = "prism"

    @property
    def display_name(self) -> str:
        return LAUNCHER_NAMES[self]


LAUNCHER_NAMES = {
    LauncherKind.GENERIC: "Minecraft Launcher",
    LauncherKind.THIRD_PARTY: "PrismLauncher",
}


class AppConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Backend
    api_base: str = DEFAULT_API_BASE
    request_timeout: float = 60.0

    # Install Settings
    launcher: LauncherKind = LauncherKind.GENERIC
    max_attempts: int = 3
    retry_delay: float = 1.0
    verify_hashes: bool = False

    # Mod-loader metadata
    fabric_meta_url: str = DEFAULT_FABRIC_META_URL
    fabric_maven_url: str = DEFAULT_FABRIC_MAVEN_URL

    # Branding written into launcher files
    export_author: str = "Communivents"
    icon_key: str = "communivents"
    profile_prefix: str = "communivents_"

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    @field_validator("api_base", "fabric_meta_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Ensures the URL is absolute and has no trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"URL must start with http:// or https://, got: {v}")
        return v.rstrip("/")

    @field_validator("fabric_maven_url")
    @classmethod
    def validate_maven_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Maven URL must start with http:// or https://, got: {v}")
        return v if v.endswith("/") else v + "/"

    @field_validator("max_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        """Ensures a reasonable number of download attempts."""
        if v < 1 or v > 10:
            raise ValueError("Max attempts must be between 1 and 10.")
        return v

    @field_validator("retry_delay", "request_timeout")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Delays and timeouts cannot be negative.")
        return v

    @field_validator("icon_key")
    @classmethod
    def validate_icon_key(cls, v: str) -> str:
        if not v or not v.replace("_", "").replace("-", "").isalnum():
            raise ValueError(
                "Icon key may only contain letters, digits, '-' and '_'."
            )
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
