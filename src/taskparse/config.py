"""User settings for taskparse."""

import calendar
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional

import yaml

from .language import (
    LanguageConfig, LanguageConfigError, UnknownLanguageError, get_language, register_language,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.taskparse/config.yaml")


@dataclass
class ParserSettings:
    """Settings read from ``~/.taskparse/config.yaml``."""

    default_language: str = "de"
    first_day_of_week: int = 0  # 0=Monday, 6=Sunday

    # Display preferences for the CLI
    date_format: str = "%Y-%m-%d"
    time_format: str = "%H:%M"

    # Extra languages as YAML documents
    language_files: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not 0 <= int(self.first_day_of_week) <= 6:
            logger.warning(f"Invalid first_day_of_week {self.first_day_of_week}, using Monday")
            self.first_day_of_week = 0
        self.first_day_of_week = int(self.first_day_of_week)
        self.language_files = [os.path.expanduser(str(path)) for path in self.language_files or []]

    def to_yaml(self) -> str:
        """Serialize settings to YAML."""
        data = {
            "default_language": self.default_language,
            "first_day_of_week": self.first_day_of_week,
            "date_format": self.date_format,
            "time_format": self.time_format,
            "language_files": list(self.language_files),
        }
        return yaml.dump(data, default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ParserSettings":
        """Deserialize settings from YAML. Unknown keys are ignored."""
        data = yaml.safe_load(yaml_str) or {}
        if not isinstance(data, dict):
            raise ValueError("Settings file must contain a mapping")

        known = {f.name for f in fields(cls)}
        for key in sorted(set(data) - known):
            logger.warning(f"Ignoring unknown setting '{key}'")
        return cls(**{key: value for key, value in data.items() if key in known})

    def make_calendar(self) -> calendar.Calendar:
        """Gregorian calendar starting on the configured weekday."""
        return calendar.Calendar(firstweekday=self.first_day_of_week)

    def language(self) -> LanguageConfig:
        """The configured default language, falling back to German."""
        try:
            return get_language(self.default_language)
        except UnknownLanguageError:
            logger.warning(f"Unknown default language '{self.default_language}', using German")
            return get_language("de")


def load_language_file(path: Path) -> LanguageConfig:
    """Read a YAML language document and register it."""
    with open(path, "r", encoding="utf-8") as f:
        language = LanguageConfig.from_yaml(f.read())
    return register_language(language)


def register_language_files(settings: ParserSettings) -> List[LanguageConfig]:
    """Register every language file named in the settings; broken files are skipped."""
    loaded = []
    for path in settings.language_files:
        try:
            loaded.append(load_language_file(Path(path)))
            logger.info(f"Loaded language file {path}")
        except (OSError, LanguageConfigError) as e:
            logger.warning(f"Failed to load language file {path}: {e}")
    return loaded


class Config:
    """Holds the loaded settings."""

    _instance: Optional[ParserSettings] = None

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> ParserSettings:
        """Load settings from a file, or use defaults.

        Without an explicit path an already loaded instance is reused.
        """
        if config_path is None and cls._instance is not None:
            return cls._instance

        config_path = Path(config_path or DEFAULT_CONFIG_PATH).expanduser()
        settings = ParserSettings()

        if config_path.exists():
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    settings = ParserSettings.from_yaml(f.read())
                logger.debug(f"Loaded configuration from {config_path}")
            except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config from {config_path}: {e}")
                logger.warning("Using default configuration.")
        else:
            logger.debug(f"No configuration at {config_path}, using defaults")

        register_language_files(settings)
        cls._instance = settings
        return settings

    @classmethod
    def save(cls, settings: ParserSettings, config_path: Optional[Path] = None) -> None:
        """Save settings to a file."""
        config_path = Path(config_path or DEFAULT_CONFIG_PATH).expanduser()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            f.write(settings.to_yaml())
        logger.info(f"Configuration saved to {config_path}")

    @classmethod
    def get(cls) -> ParserSettings:
        """Get the current settings, loading them on first use."""
        if cls._instance is None:
            cls._instance = cls.load()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None


def get_config() -> ParserSettings:
    """Get the current settings."""
    return Config.get()


def load_config(config_path: Optional[Path] = None) -> ParserSettings:
    """Load settings from file."""
    return Config.load(config_path)


def save_config(settings: ParserSettings, config_path: Optional[Path] = None) -> None:
    """Save settings to file."""
    Config.save(settings, config_path)
