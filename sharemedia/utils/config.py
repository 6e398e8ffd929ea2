"""
Configuration management for sharemedia.

Uses pydantic-settings to load configuration from environment variables
and .env files.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Extension settings loaded from environment."""

    # Identifiers
    extension_identifier: str = "com.example.app.ShareExtension"
    host_identifier: Optional[str] = None
    app_group_id: Optional[str] = None
    scheme_prefix: str = "ShareMedia"

    # Shared storage
    shared_root: Path = Path("~/.local/share/sharemedia")
    preferences_dir: Path = Path("~/.config/sharemedia/preferences")

    # Pipeline behaviour
    auto_redirect: bool = True
    completion_policy: Literal["last_index", "all"] = "last_index"

    # Video thumbnails
    ffmpeg_bin: str = "ffmpeg"
    ffprobe_bin: str = "ffprobe"
    thumbnail_offset_seconds: float = 0.6
    thumbnail_max_size: int = 360

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def resolve_host_identifier(self) -> str:
        """Host identifier, derived from the extension identifier when unset."""
        if self.host_identifier:
            return self.host_identifier
        head, dot, _ = self.extension_identifier.rpartition('.')
        return head if dot else self.extension_identifier

    def resolve_app_group_id(self) -> str:
        """Shared-storage domain name, ``group.<host>`` unless overridden."""
        return self.app_group_id or f"group.{self.resolve_host_identifier()}"

    def shared_container(self) -> Path:
        """Directory both processes read, created on demand."""
        container = self.shared_root.expanduser() / self.resolve_app_group_id()
        container.mkdir(parents=True, exist_ok=True)
        return container.resolve()

    def preferences_file(self) -> Path:
        """JSON file backing the shared preferences domain."""
        return self.preferences_dir.expanduser() / f"{self.resolve_app_group_id()}.json"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
