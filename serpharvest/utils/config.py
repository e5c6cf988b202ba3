"""
Configuration management for serpharvest.
Loads and validates settings from YAML files and environment variables.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

ENV_PREFIX = "SERPHARVEST_"


class GeneralConfig(BaseModel):
    """General configuration."""

    project_name: str = "serpharvest"
    log_level: str = "INFO"
    logs_dir: str = "logs"
    json_logs: bool = False


class BrowserConfig(BaseModel):
    """Browser launch configuration."""

    model_config = ConfigDict(extra="forbid")

    headless: bool = True
    slow_mo_ms: int = Field(default=50, ge=0)
    viewport_width: int = 1280
    viewport_height: int = 800
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    )
    launch_args: list[str] = Field(
        default_factory=lambda: [
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
        ]
    )

    @field_validator("user_agent")
    @classmethod
    def collapse_whitespace(cls, v: str) -> str:
        """Folded YAML scalars may carry a trailing newline."""
        return " ".join(v.split())


class TimeoutsConfig(BaseModel):
    """Timeouts and settle delays, in seconds."""

    model_config = ConfigDict(extra="forbid")

    navigation: float = 30.0
    settle_after_navigation: float = 1.0
    search_results: float = 15.0
    stabilization: float = 2.0
    organic_results: float = 10.0
    region: float = 5.0
    follow_up_navigation: float = 30.0


class ExtractConfig(BaseModel):
    """Default set of result categories to extract."""

    organic_results: bool = True
    featured_snippets: bool = True
    people_also_ask: bool = True
    related_searches: bool = True
    videos: bool = True
    images: bool = False


class OutputConfig(BaseModel):
    """Output configuration."""

    formats: list[str] = Field(default_factory=lambda: ["json", "text"])
    take_screenshot: bool = True
    follow_up_limit: int = Field(default=0, ge=0)

    @field_validator("formats", mode="before")
    @classmethod
    def split_formats(cls, v: Any) -> Any:
        """Accept a comma-separated string (env override) as well as a list."""
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v


class CrawlerConfig(BaseModel):
    """Multi-URL crawler configuration."""

    concurrency: int = Field(default=2, ge=1)
    timeout: float = 30.0
    acquire_timeout: float = 60.0


class Settings(BaseModel):
    """Main settings container."""

    general: GeneralConfig = Field(default_factory=GeneralConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)
    extract: ExtractConfig = Field(default_factory=ExtractConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    crawler: CrawlerConfig = Field(default_factory=CrawlerConfig)


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary.
        override: Override dictionary.

    Returns:
        Merged dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML mapping, returning an empty dict when the file is missing.

    Args:
        path: YAML file path.

    Returns:
        Parsed mapping.
    """
    if not path.exists():
        return {}

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at top level of {path}")
    return data


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides.

    Environment variables should be prefixed with SERPHARVEST_ and use
    double underscores for nested keys.

    Example:
        SERPHARVEST_GENERAL__LOG_LEVEL=DEBUG

    Args:
        config: Configuration dictionary.

    Returns:
        Configuration with environment overrides.
    """
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue

        key_path = key[len(ENV_PREFIX) :].lower().split("__")
        if len(key_path) < 2:
            # SERPHARVEST_CONFIG_DIR and friends are not settings keys
            continue

        current = config
        for part in key_path[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        final_key = key_path[-1]
        try:
            if value.lower() in ("true", "false"):
                current[final_key] = value.lower() == "true"
            elif "." in value:
                current[final_key] = float(value)
            else:
                current[final_key] = int(value)
        except ValueError:
            current[final_key] = value

    return config


def get_config_dir() -> Path:
    """Get the configuration directory (SERPHARVEST_CONFIG_DIR or ./config)."""
    return Path(os.environ.get(f"{ENV_PREFIX}CONFIG_DIR", "config"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get application settings.

    Settings are loaded from:
    1. Default values
    2. config/settings.yaml
    3. Environment variables (highest priority)

    Returns:
        Settings instance.
    """
    config = load_yaml_file(get_config_dir() / "settings.yaml")
    config = _apply_env_overrides(config)
    return Settings(**config)


def reset_settings() -> None:
    """Drop cached settings so the next get_settings() reloads them."""
    get_settings.cache_clear()
