import os
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from toolrelay.config.schema import (
    AgentConfig,
    AppConfig,
    CacheConfig,
    HttpConfig,
    LoggingConfig,
    NewsConfig,
    RegistryConfig,
    ResourceConfig,
    SessionConfig,
    WeatherConfig,
)

_SECTION_CLASSES = {
    "http": HttpConfig,
    "weather": WeatherConfig,
    "news": NewsConfig,
    "registry": RegistryConfig,
    "agent": AgentConfig,
    "session": SessionConfig,
    "cache": CacheConfig,
    "logging": LoggingConfig,
}

_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "OLLAMA_MODEL": ("agent", "model"),
    "AGENT_SYSTEM_PROMPT": ("agent", "system_prompt"),
    "OPENWEATHER_BASE_URL": ("weather", "base_url"),
    "NEWS_API_BASE_URL": ("news", "base_url"),
    "TOOLRELAY_LOG_LEVEL": ("logging", "level"),
}


def _apply_env_overrides(data: dict[str, Any]) -> None:
    """Override YAML values with environment variables where mapped."""
    for env_var, (section, key) in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section] = {**(data.get(section) or {}), key: value}


def _build(cls: type, section_data: Any, where: str) -> Any:
    if not isinstance(section_data, dict):
        raise ValueError(f"Config section '{where}' must be a mapping, got {type(section_data).__name__}")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(section_data) - known)
    if unknown:
        raise ValueError(f"Unknown keys in config section '{where}': {', '.join(unknown)}")
    return cls(**section_data)


def load_config(
    config_path: Path = Path("config.yaml"),
    env_path: Path = Path(".env"),
) -> AppConfig:
    """Load YAML config, merge .env overrides, return frozen AppConfig.

    Unknown keys raise ValueError naming the section they appeared in.
    """
    load_dotenv(env_path)

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

    _apply_env_overrides(data)

    sections: dict[str, Any] = {
        name: _build(cls, data.get(name) or {}, name)
        for name, cls in _SECTION_CLASSES.items()
    }
    sections["resources"] = tuple(
        _build(ResourceConfig, entry, f"resources[{idx}]")
        for idx, entry in enumerate(data.get("resources") or [])
    )

    return AppConfig(**sections)
