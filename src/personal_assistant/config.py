"""Configuration loader with YAML parsing, env-var interpolation, and Pydantic validation."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from personal_assistant.core.types import PersistencePolicy


class AIConfig(BaseModel):
    backend: str = "anthropic"  # "anthropic" | "bedrock"
    model: str = "claude-3-haiku-20240307"
    max_tokens: int = Field(default=1000, gt=0)
    temperature: float = Field(default=0.5, ge=0.0, le=1.0)


class AnthropicConfig(BaseModel):
    api_key: str
    base_url: Optional[str] = None
    timeout: int = 30


class BedrockConfig(BaseModel):
    aws_region: Optional[str] = None
    model: str = "anthropic.claude-3-haiku-20240307-v1:0"
    timeout: int = 30


class StorageConfig(BaseModel):
    db_path: str = "./data/chat_history.db"
    persistence: PersistencePolicy = PersistencePolicy.BEST_EFFORT


class UseCaseConfig(BaseModel):
    id: str
    title: str
    objective: str


class AppConfig(BaseModel):
    log_level: str = "INFO"
    log_json: bool = False
    data_dir: str = "./data"
    identity: Optional[str] = None
    ai: AIConfig = Field(default_factory=AIConfig)
    anthropic: Optional[AnthropicConfig] = None
    bedrock: BedrockConfig = Field(default_factory=BedrockConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    use_cases: list[UseCaseConfig] = Field(default_factory=list)

    @property
    def model_name(self) -> str:
        """Model identifier actually sent to the configured backend."""
        if self.ai.backend == "bedrock":
            return self.bedrock.model
        return self.ai.model


_ENV_VAR_PATTERN = re.compile(r"\$\{(\w+)\}")


def _interpolate_env_vars(text: str, extra: dict[str, str] | None = None) -> str:
    """Replace ${VAR_NAME} patterns with environment variable values."""

    def _replace(match: re.Match) -> str:
        var_name = match.group(1)
        if extra and var_name in extra:
            return extra[var_name]
        value = os.environ.get(var_name)
        if value is None:
            return match.group(0)
        return value

    return _ENV_VAR_PATTERN.sub(_replace, text)


def _drop_unresolved(data: object) -> object:
    """Remove entries whose value is still an unresolved ${VAR}, so defaults apply."""
    if isinstance(data, dict):
        return {k: _drop_unresolved(v) for k, v in data.items() if not _is_unresolved(v)}
    if isinstance(data, list):
        return [_drop_unresolved(v) for v in data if not _is_unresolved(v)]
    return data


def _is_unresolved(value: object) -> bool:
    return isinstance(value, str) and _ENV_VAR_PATTERN.fullmatch(value.strip()) is not None


def load_config(config_path: str | Path = "config.yaml", env_path: str | Path = ".env") -> AppConfig:
    """Load and validate configuration from YAML file with env-var interpolation."""
    env_file = Path(env_path)
    if env_file.exists():
        load_dotenv(env_file)

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    raw_text = config_file.read_text(encoding="utf-8")

    # First pass: extract data_dir for self-referencing
    raw_data = yaml.safe_load(raw_text) or {}
    data_dir = raw_data.get("data_dir", "./data")
    data_dir = _interpolate_env_vars(data_dir)

    # Second pass: interpolate all env vars
    interpolated = _interpolate_env_vars(raw_text, extra={"data_dir": data_dir})
    data = _drop_unresolved(yaml.safe_load(interpolated) or {})

    # An anthropic section whose key never resolved is treated as absent
    anthropic = data.get("anthropic")
    if isinstance(anthropic, dict) and not anthropic.get("api_key"):
        data["anthropic"] = None

    return AppConfig(**data)
