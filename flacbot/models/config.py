"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_API_BASE_URL = "https://qobuz.squid.wtf/api"
LOSSLESS_QUALITY = "27"

# Maps user-friendly codes to API codes and provides metadata
QUALITY_MAP = {
    # User code -> API code
    "1": "5",
    "2": "6",
    "3": "7",
    "4": "27",
    # API code -> Metadata (for internal use)
    "5": {"name": "MP3 320kbps", "short": "MP3 320"},
    "6": {"name": "CD Lossless (16/44.1)", "short": "16/44.1"},
    "7": {"name": "Hi-Res (up to 24/96)", "short": "24/96"},
    "27": {"name": "Hi-Res+ (up to 24/192)", "short": "24/192"},
}


def get_quality_info(quality: str) -> dict[str, str]:
    """Gets display information and the file extension for a quality code."""
    info = QUALITY_MAP.get(quality)
    if not isinstance(info, dict):
        info = {"name": "Unknown", "short": "Unknown"}
    return {**info, "ext": file_extension_for(quality)}


def file_extension_for(quality: str) -> str:
    """Only the lossless code yields FLAC; every other code is served as MP3."""
    return "flac" if str(quality) == LOSSLESS_QUALITY else "mp3"


class BotConfig(BaseModel):
    """A validated configuration model for the bot."""

    # Telegram
    bot_token: str = Field(default="", repr=False)

    # Catalog API
    api_base_url: str = DEFAULT_API_BASE_URL
    quality: str = LOSSLESS_QUALITY
    api_timeout: float = 10.0
    download_timeout: float = 60.0

    # Local storage
    download_dir: Path = Path("downloads")
    log_dir: Path | None = None

    # Sessions (seconds)
    session_max_age: float = 30 * 60
    sweep_interval: float = 10 * 60

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("api_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Requires an http(s) URL and drops any trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"API base URL must start with http:// or https://: {v}")
        return v.rstrip("/")

    @field_validator("quality", mode="before")
    @classmethod
    def validate_quality(cls, v: object) -> str:
        """
        Accepts a user code (1-4) or an API code (5, 6, 7, 27) and returns the
        API code as a string.
        """
        v = str(v).strip()
        mapped = QUALITY_MAP.get(v)
        if isinstance(mapped, str):
            return mapped
        if v not in ("5", "6", "7", "27"):
            raise ValueError(
                "Quality must be one of 1 (MP3), 2 (CD), 3 (Hi-Res), 4 (Hi-Res+)."
            )
        return v

    @field_validator(
        "api_timeout", "download_timeout", "session_max_age", "sweep_interval"
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts and intervals must be positive.")
        return v

    @property
    def file_extension(self) -> str:
        return file_extension_for(self.quality)

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that may appear in the INI file."""
        return {key for key in cls.model_fields if key != "bot_token"}
