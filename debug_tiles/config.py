from __future__ import annotations

import os
import subprocess
from importlib import metadata
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DIST_NAME = "debug-tiles"


def _get_project_version() -> str:
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return "0.1.0"


def _get_git_commit() -> str:
    if (value := os.getenv("GIT_COMMIT")):
        return value

    repo_root = Path(__file__).resolve().parent.parent
    if (repo_root / ".git").exists():
        try:
            result = subprocess.run(
                ["git", "rev-parse", "HEAD"],
                cwd=repo_root,
                capture_output=True,
                text=True,
                check=True,
            )
            return result.stdout.strip()
        except (OSError, subprocess.CalledProcessError):
            pass

    return "unknown"


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=False)

    app_name: str = "Debug Tiles"
    version: str = Field(default_factory=_get_project_version)
    environment: str = Field(default="dev", validation_alias="APP_ENV")
    git_commit: str = Field(default_factory=_get_git_commit, validation_alias="GIT_COMMIT")

    # Listener. An unset or empty PORT binds port 0 so the OS picks an ephemeral port.
    host: str = Field(default="", validation_alias="HOST")
    port: int = Field(default=0, ge=0, le=65535, validation_alias="PORT")

    trust_forwarded_headers: bool = Field(default=True, validation_alias="TRUST_FORWARDED_HEADERS")
    max_scale: int = Field(default=4, ge=1, validation_alias="MAX_TILE_SCALE")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @field_validator("port", mode="before")
    @classmethod
    def _empty_port_is_ephemeral(cls, value: Optional[object]) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return 0
        return value

    @property
    def bind_host(self) -> str:
        """Address handed to socket.bind; empty means every IPv4 interface."""
        return self.host or "0.0.0.0"


settings = AppSettings()
