"""Configuration loading for the UniFi CLI."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from unifi_cli.endpoints import ControllerType


class Settings(BaseSettings):
    """Controller settings loaded from environment variables or .env files."""

    model_config = SettingsConfigDict(
        env_prefix="UNIFI_CLI_",
        extra="ignore",
    )

    base_url: str | None = None
    username: str | None = None
    password: str | None = None
    controller_type: ControllerType = ControllerType.DEFAULT
    site: str = "default"
    timeout: float = Field(default=30.0, ge=0)
    verify_ssl: bool = True
    auto_relogin: bool = True
    expiry_margin: float = Field(default=5.0, ge=0)

    @field_validator("controller_type", mode="before")
    @classmethod
    def parse_controller_type(cls, value: object) -> ControllerType:
        if value is None or isinstance(value, str):
            return ControllerType.parse(value)
        raise ValueError(f"Unknown controller type: {value}")

    @classmethod
    def from_env_file(cls, env_file: Path | None = None) -> Settings:
        kwargs: dict[str, Path] = {}
        if env_file is not None:
            kwargs["_env_file"] = env_file
        return cls(**kwargs)
