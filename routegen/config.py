"""Configuration for a generation run."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeneratorSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ROUTEGEN_", case_sensitive=False)

    output_dir: Path = Field(default=Path("generated"))
    handlers_package: str = Field(default="handlers")
    server_module: str = Field(default="lib")
    mount_prefix: str = Field(default="/")
    write_raw: bool = Field(default=True)
    log_level: str = Field(default="INFO")

    @field_validator("handlers_package", "server_module")
    @classmethod
    def _check_identifier(cls, value: str) -> str:
        if not value.isidentifier():
            raise ValueError(f"{value!r} is not a valid module name")
        return value

    @field_validator("mount_prefix")
    @classmethod
    def _check_prefix(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("mount_prefix must start with '/'")
        return value

    @property
    def handlers_dir(self) -> Path:
        return self.output_dir / self.handlers_package


@lru_cache(maxsize=1)
def get_settings() -> GeneratorSettings:
    return GeneratorSettings()
