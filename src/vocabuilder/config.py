"""Configuration settings for the vocabulary builder."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))
EXPORTS_DIR = DATA_DIR / "exports"

# Default storage keys, compatible with the browser version of the app
USERS_KEY = "vocab_users"
CURRENT_USER_KEY = "vocab_current_user"
LEGACY_WORDS_KEY = "vocabularyWords"
QUIZ_COUNT_KEY = "vocabularyQuizCount"

SORT_MODES = ["newest", "oldest", "alphabetical", "reverse"]


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        DATA_DIR,
        EXPORTS_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


@dataclass
class PathSettings:
    """Path configuration settings."""
    data_dir: Path = DATA_DIR
    exports_dir: Path = EXPORTS_DIR


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///vocabuilder.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "WARNING")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class AuthSettings:
    """Registration and login rules."""
    min_username_length: int = field(
        default_factory=lambda: int(os.getenv("AUTH_MIN_USERNAME_LENGTH", "3"))
    )
    min_password_length: int = field(
        default_factory=lambda: int(os.getenv("AUTH_MIN_PASSWORD_LENGTH", "4"))
    )


@dataclass
class StorageSettings:
    """Keys of the key-value store."""
    users_key: str = os.getenv("STORE_USERS_KEY", USERS_KEY)
    session_key: str = os.getenv("STORE_SESSION_KEY", CURRENT_USER_KEY)
    legacy_words_key: str = os.getenv("STORE_LEGACY_WORDS_KEY", LEGACY_WORDS_KEY)
    quiz_count_key: str = os.getenv("STORE_QUIZ_COUNT_KEY", QUIZ_COUNT_KEY)


@dataclass
class WordListSettings:
    """Word list settings."""
    default_sort: str = os.getenv("DEFAULT_SORT", "newest")
    default_status: str = "new"


@dataclass
class MonitoringSettings:
    """Prometheus metrics settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_auth_settings() -> AuthSettings:
    """Get auth settings."""
    return AuthSettings()


def get_storage_settings() -> StorageSettings:
    """Get storage settings."""
    return StorageSettings()


def get_word_list_settings() -> WordListSettings:
    """Get word list settings."""
    return WordListSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    auth: AuthSettings = field(default_factory=get_auth_settings)
    storage: StorageSettings = field(default_factory=get_storage_settings)
    words: WordListSettings = field(default_factory=get_word_list_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if not self.database.url:
            raise ValueError("DATABASE_URL is required")

        if self.auth.min_username_length < 1:
            raise ValueError("AUTH_MIN_USERNAME_LENGTH must be positive")

        if self.auth.min_password_length < 1:
            raise ValueError("AUTH_MIN_PASSWORD_LENGTH must be positive")

        if self.words.default_sort not in SORT_MODES:
            raise ValueError(f"DEFAULT_SORT must be one of {', '.join(SORT_MODES)}")

        keys = [
            self.storage.users_key,
            self.storage.session_key,
            self.storage.legacy_words_key,
            self.storage.quiz_count_key,
        ]
        if len(set(keys)) != len(keys):
            raise ValueError("Storage keys must be distinct")


# Create global settings instance
settings = Settings()
settings.validate()
