"""Configuration loading utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from agentcore.utils.logging import DEFAULT_LEVEL, coerce_level


class AgentSection(BaseModel):
    """Agent configuration."""

    name: str = "MyAgent"
    description: str = ""
    result_separator: str = " | "
    allow_tool_overwrite: bool = False
    record_results_in_memory: bool = True
    memory_max_entries: int = 1000


class ToolsSection(BaseModel):
    """Built-in tool configuration."""

    search_corpus: list[str] | None = None
    search_api_url: str | None = None


class LoggingSection(BaseModel):
    """Logging configuration."""

    level: str = DEFAULT_LEVEL
    format: str = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _coerce_level(cls, value: Any) -> str:
        return coerce_level(value)


class AppConfig(BaseModel):
    """Complete application configuration."""

    agent: AgentSection = Field(default_factory=AgentSection)
    tools: ToolsSection = Field(default_factory=ToolsSection)
    logging: LoggingSection = Field(default_factory=LoggingSection)
    inputs: list[str] = Field(default_factory=list)


class Settings(BaseSettings):
    """Environment-based settings."""

    api_key: str = "default_api_key"
    log_level: str = DEFAULT_LEVEL
    agent_name: str = "MyAgent"
    search_api_url: str | None = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @field_validator("log_level", mode="before")
    @classmethod
    def _coerce_log_level(cls, value: Any) -> str:
        return coerce_level(value)


def load_config(config_path: str | Path) -> AppConfig:
    """Load application configuration from YAML file."""
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    return AppConfig.model_validate(data or {})


def get_settings() -> Settings:
    """Get environment-based settings."""
    return Settings()
