"""
Theologos - Configuration

Centralized configuration for the library engine and its collaborators.
Uses environment variables (optionally from a .env file) with sensible
defaults.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
from enum import Enum

from dotenv import load_dotenv

from core.errors import InvalidArgumentError, LibraryConfigError
from core.validation import normalize_translation

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Deployment environments."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


def _optional_path(name: str) -> Optional[Path]:
    value = os.getenv(name, "").strip()
    return Path(value) if value else None


@dataclass
class LibraryConfig:
    """Engine-facing settings."""
    # Translation whose text segments are shown with proof texts
    translation: str = field(default_factory=lambda: os.getenv("LIBRARY_TRANSLATION", "WEB"))

    # JSON corpus used by the CLI when no database is configured
    corpus_path: Optional[Path] = field(default_factory=lambda: _optional_path("LIBRARY_CORPUS"))

    # JSON list of {"slug", "title"} pairs replacing the built-in override table
    slug_overrides_path: Optional[Path] = field(
        default_factory=lambda: _optional_path("LIBRARY_SLUG_OVERRIDES")
    )

    # Characters shown in outline labels before truncation
    display_limit: int = field(default_factory=lambda: os.getenv("LIBRARY_DISPLAY_LIMIT", "150"))

    def __post_init__(self):
        try:
            self.translation = normalize_translation(self.translation)
        except InvalidArgumentError as e:
            raise LibraryConfigError(
                f"Invalid LIBRARY_TRANSLATION: {self.translation!r}",
                config_key="LIBRARY_TRANSLATION",
                actual_value=self.translation,
                cause=e,
            ) from e
        try:
            self.display_limit = int(self.display_limit)
        except (TypeError, ValueError) as e:
            raise LibraryConfigError(
                f"Invalid LIBRARY_DISPLAY_LIMIT: {self.display_limit!r}",
                config_key="LIBRARY_DISPLAY_LIMIT",
                actual_value=self.display_limit,
                cause=e,
            ) from e
        if self.display_limit < 1:
            raise LibraryConfigError(
                "LIBRARY_DISPLAY_LIMIT must be >= 1",
                config_key="LIBRARY_DISPLAY_LIMIT",
                actual_value=self.display_limit,
            )


@dataclass
class DatabaseConfig:
    """Relational storage settings."""
    url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", ""))
    echo: bool = field(default_factory=lambda: os.getenv("DATABASE_ECHO", "false").lower() == "true")

    @property
    def is_configured(self) -> bool:
        return bool(self.url)


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    json_format: bool = field(default_factory=lambda: os.getenv("LOG_FORMAT", "console").lower() == "json")


@dataclass
class Config:
    """Main configuration class combining all sub-configs."""
    env: Environment = field(default_factory=lambda: Environment(os.getenv("ENVIRONMENT", "development")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    library: LibraryConfig = field(default_factory=LibraryConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == Environment.PRODUCTION

    def setup_logging(self) -> None:
        """Setup structured logging based on configuration."""
        from observability.logging import LoggingConfig as StructuredLoggingConfig, setup_logging

        setup_logging(StructuredLoggingConfig(
            level=self.logging.level,
            json_format=self.logging.json_format,
            environment=self.env.value,
        ))

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary (excluding sensitive values)."""
        return {
            "env": self.env.value,
            "debug": self.debug,
            "library": {
                "translation": self.library.translation,
                "corpus_path": str(self.library.corpus_path) if self.library.corpus_path else None,
                "slug_overrides_path": (
                    str(self.library.slug_overrides_path) if self.library.slug_overrides_path else None
                ),
                "display_limit": self.library.display_limit,
            },
            "database": {
                "configured": self.database.is_configured,
                "echo": self.database.echo,
            },
            "logging": {
                "level": self.logging.level,
                "json_format": self.logging.json_format,
            },
        }


# Singleton configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create configuration singleton."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment."""
    global _config
    load_dotenv(override=True)
    _config = Config()
    return _config
