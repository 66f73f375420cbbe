"""
Configuration management for LexiconHub.

This module provides environment-based configuration using Pydantic BaseSettings,
so the same binary can run against different data directories and provider
credentials without code changes.

Environment variables are loaded with the LEXICON_ prefix. For example,
LEXICON_YOUDAO_API_ID overrides the youdao_api_id setting.
"""

import os
import threading
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine project root for resolving .env by default
PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
ENV_FILE_OVERRIDE = os.getenv("LEXICON_ENV_FILE")
if ENV_FILE_OVERRIDE:
    env_file_candidate = Path(ENV_FILE_OVERRIDE).expanduser()
    if not env_file_candidate.is_absolute():
        env_file_candidate = PROJECT_ROOT / env_file_candidate
    SETTINGS_ENV_FILE = env_file_candidate
else:
    SETTINGS_ENV_FILE = DEFAULT_ENV_FILE

DEFAULT_DATA_DIR = Path("~/.config/lexicon-hub")


@dataclass(frozen=True)
class ProviderCredentials:
    """
    Immutable snapshot of remote provider credentials.

    Attributes:
        api_id: Application ID issued by the provider.
        api_key: Application secret used for request signing.
    """

    api_id: str = ""
    api_key: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.api_id) and bool(self.api_key)


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Defaults mirror a single-user desktop install: the durable store lives
    under ~/.config/lexicon-hub and logging is quiet unless asked otherwise.
    """

    # Storage
    data_dir: Path = Field(
        default=DEFAULT_DATA_DIR,
        description="Directory holding the durable lookup store and downloads",
    )
    database_filename: str = Field(
        default="kd.db", description="File name of the durable lookup store"
    )
    cache_shards: int = Field(
        default=16, ge=1, description="Lock stripes used by the process cache"
    )

    # Logging
    log_level: str = Field(default="WARNING", description="Logging level")
    log_file: Optional[Path] = Field(
        default=None, description="Append structured logs to this file when set"
    )

    # Youdao remote provider
    youdao_api_id: str = Field(
        default="",
        description="Youdao application ID; loaded from LEXICON_YOUDAO_API_ID",
    )
    youdao_api_key: str = Field(
        default="",
        description="Youdao application secret; loaded from LEXICON_YOUDAO_API_KEY",
    )
    youdao_base_url: str = Field(
        default="https://openapi.youdao.com/api",
        description="Youdao text translation endpoint",
    )
    request_timeout: int = Field(
        default=10, description="HTTP request timeout in seconds"
    )
    http_proxy: Optional[str] = Field(
        default=None, description="Proxy URL used for all outbound HTTP requests"
    )

    # Offline dictionary archive
    archive_url_cn: str = Field(
        default="https://gitee.com/void_kmz/kd/releases/download/v0.0.1/kd_data.zip",
        description="Archive mirror used inside mainland China",
    )
    archive_url_global: str = Field(
        default="https://raw.githubusercontent.com/Karmenzind/static/main/kd/kd_data.zip",
        description="Archive mirror used elsewhere",
    )
    ip_lookup_url: str = Field(
        default="https://ipinfo.io/json",
        description="Endpoint used to pick the closest archive mirror",
    )
    archive_filename: str = Field(
        default="kd_data.zip", description="Local file name of the downloaded archive"
    )

    # Legacy migration
    legacy_tables: List[str] = Field(
        default_factory=lambda: ["en", "ch"],
        description="Legacy tables migrated in order (one per language direction)",
    )
    migration_batch_size: int = Field(
        default=100, ge=1, description="Rows written per migration transaction"
    )

    model_config = SettingsConfigDict(
        env_prefix="LEXICON_",
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        # "WARN" is accepted for compatibility with older config files
        return "WARNING" if level == "WARN" else level

    @field_validator("data_dir")
    @classmethod
    def _expand_data_dir(cls, value: Path) -> Path:
        return Path(value).expanduser()

    @property
    def database_path(self) -> Path:
        """Location of the durable lookup store."""
        return self.data_dir / self.database_filename

    @property
    def archive_path(self) -> Path:
        """Location the offline dictionary archive is downloaded to."""
        return self.data_dir / self.archive_filename

    @property
    def proxies(self) -> Optional[dict]:
        if not self.http_proxy:
            return None
        return {"http": self.http_proxy, "https": self.http_proxy}


class SettingsHolder:
    """
    Shared, replaceable settings reference.

    Readers take short snapshots under the lock; nothing holds the lock
    across an await.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._lock = threading.RLock()

    @property
    def settings(self) -> Settings:
        with self._lock:
            return self._settings

    def replace(self, settings: Settings) -> None:
        with self._lock:
            self._settings = settings

    def credentials(self) -> ProviderCredentials:
        with self._lock:
            return ProviderCredentials(
                api_id=self._settings.youdao_api_id.strip(),
                api_key=self._settings.youdao_api_key.strip(),
            )


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings instance.

    Uses LRU cache to ensure settings are loaded once and reused throughout
    the application lifecycle. Tests call get_settings.cache_clear() after
    changing the environment.

    Returns:
        Configured Settings instance
    """
    return Settings()
