"""Configuration settings for vocabkit."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)

# Default chat completions endpoint and model
DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o-mini"

# Values left in deploy templates that must not be treated as a real key
PLACEHOLDER_API_KEYS = ("your-api-key-here",)

CEFR_LEVELS = ("A1", "A2", "B1", "B2", "C1", "C2")


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///vocabkit.db"))
    echo: bool = field(default_factory=lambda: os.getenv("DATABASE_ECHO", "false").lower() == "true")


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


def _is_usable_key(key: Optional[str]) -> bool:
    """Check that a key is set and is not an unexpanded template value."""
    if not key:
        return False
    return key not in PLACEHOLDER_API_KEYS and not key.startswith("$(")


@dataclass
class GenerationSettings:
    """Exercise generation (LLM endpoint) settings."""
    api_url: str = field(default_factory=lambda: os.getenv("GENERATION_API_URL", DEFAULT_API_URL))
    model: str = field(default_factory=lambda: os.getenv("GENERATION_MODEL", DEFAULT_MODEL))
    temperature: float = field(default_factory=lambda: float(os.getenv("GENERATION_TEMPERATURE", "0.7")))
    timeout: float = field(default_factory=lambda: float(os.getenv("GENERATION_TIMEOUT", "120")))
    api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""), repr=False)
    api_key_override: str = field(
        default_factory=lambda: os.getenv("VOCABKIT_API_KEY_OVERRIDE", ""), repr=False
    )
    max_attempts: int = field(default_factory=lambda: int(os.getenv("GENERATION_MAX_ATTEMPTS", "1")))
    retry_delay: float = field(default_factory=lambda: float(os.getenv("GENERATION_RETRY_DELAY", "2.0")))

    def resolve_api_key(self) -> str:
        """Return the configured key, falling back to the user override.

        Returns an empty string when neither source holds a usable key.
        """
        if _is_usable_key(self.api_key):
            return self.api_key
        if _is_usable_key(self.api_key_override):
            return self.api_key_override
        return ""

    @property
    def has_credential(self) -> bool:
        return bool(self.resolve_api_key())


@dataclass
class ImportSettings:
    """CSV import settings."""
    default_level: str = os.getenv("IMPORT_DEFAULT_LEVEL", "B2")


@dataclass
class MonitoringSettings:
    """Prometheus metrics settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_generation_settings() -> GenerationSettings:
    """Get generation settings."""
    return GenerationSettings()


def get_import_settings() -> ImportSettings:
    """Get import settings."""
    return ImportSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    generation: GenerationSettings = field(default_factory=get_generation_settings)
    importing: ImportSettings = field(default_factory=get_import_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if not 0 <= self.generation.temperature <= 2:
            raise ValueError("GENERATION_TEMPERATURE must be between 0 and 2")

        if self.generation.timeout <= 0:
            raise ValueError("GENERATION_TIMEOUT must be positive")

        if self.generation.max_attempts < 1:
            raise ValueError("GENERATION_MAX_ATTEMPTS must be at least 1")

        if self.generation.retry_delay < 0:
            raise ValueError("GENERATION_RETRY_DELAY cannot be negative")

        if self.importing.default_level.upper() not in CEFR_LEVELS:
            raise ValueError(f"IMPORT_DEFAULT_LEVEL must be one of {', '.join(CEFR_LEVELS)}")

        if not 0 < self.monitoring.port < 65536:
            raise ValueError("METRICS_PORT must be a valid port number")


# Create global settings instance
settings = Settings()
settings.validate()
