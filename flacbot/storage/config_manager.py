"""
Loads and validates the bot configuration from an optional INI file, a .env
file, the process environment and command-line overrides.
"""

import configparser
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import dotenv_values
from pydantic import ValidationError

from flacbot.exceptions import ConfigurationError
from flacbot.models.config import BotConfig

log = logging.getLogger(__name__)

INI_SECTION = "flacbot"

# Config field -> environment variables, highest precedence first.
ENV_VARIABLES = {
    "bot_token": ("BOT_TOKEN",),
    "api_base_url": ("QOBUZ_BASE_URL", "FLACBOT_API_BASE_URL"),
    "quality": ("FLACBOT_QUALITY",),
    "api_timeout": ("FLACBOT_API_TIMEOUT",),
    "download_timeout": ("FLACBOT_DOWNLOAD_TIMEOUT",),
    "download_dir": ("FLACBOT_DOWNLOAD_DIR",),
    "log_dir": ("FLACBOT_LOG_DIR",),
    "session_max_age": ("FLACBOT_SESSION_MAX_AGE",),
    "sweep_interval": ("FLACBOT_SWEEP_INTERVAL",),
}


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "flacbot"


class ConfigManager:
    """Builds a ``BotConfig`` from every configuration source the bot supports."""

    def __init__(
        self,
        config_file_path: Path | None = None,
        env_file: Path | None = Path(".env"),
        environ: Mapping[str, str] | None = None,
    ):
        """
        Args:
            config_file_path: Optional INI file with a [flacbot] section.
            env_file: Optional dotenv file. Real environment variables win over it.
            environ: Environment to read. Defaults to ``os.environ``.
        """
        self.config_file_path = config_file_path
        self.env_file = env_file
        self.environ = os.environ if environ is None else environ

    def load_config(
        self,
        cli_options: dict[str, Any] | None = None,
        require_token: bool = False,
    ) -> BotConfig:
        """
        Loads configuration. Later sources override earlier ones:
        model defaults, INI file, .env file, environment, CLI options.

        Raises:
            ConfigurationError: If a source cannot be read, validation fails, or
            ``require_token`` is set and no bot token is configured.
        """
        settings: dict[str, Any] = {}
        settings.update(self._read_ini())
        settings.update(self._read_env())
        if cli_options:
            settings.update({k: v for k, v in cli_options.items() if v is not None})

        try:
            config = BotConfig(**settings)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

        if require_token and not config.bot_token:
            raise ConfigurationError(
                "BOT_TOKEN environment variable is required. "
                'Set it with: export BOT_TOKEN="your_bot_token_here"'
            )
        log.debug(f"Loaded configuration: {config!r}")
        return config

    def _read_ini(self) -> dict[str, str]:
        """Reads the [flacbot] section of the INI file, if there is one."""
        if self.config_file_path is None or not self.config_file_path.is_file():
            return {}

        parser = configparser.ConfigParser()
        try:
            parser.read(self.config_file_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}") from e

        if not parser.has_section(INI_SECTION):
            log.warning(
                f"[yellow]No [{INI_SECTION}] section in "
                f"{self.config_file_path}, ignoring it.[/yellow]"
            )
            return {}

        allowed = BotConfig.get_ini_keys()
        section = parser[INI_SECTION]
        unknown = set(section) - allowed
        if unknown:
            log.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")
        return {key: section[key] for key in section if key in allowed}

    def _read_env(self) -> dict[str, str]:
        """Collects settings from the .env file and the environment. Blank values count as unset."""
        sources: dict[str, str | None] = {}
        if self.env_file is not None and self.env_file.is_file():
            sources.update(dotenv_values(self.env_file))
        sources.update(self.environ)

        settings = {}
        for field, names in ENV_VARIABLES.items():
            for name in names:
                value = sources.get(name)
                if value is not None and value.strip():
                    settings[field] = value
                    break
        return settings
