from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

CONFIG_PATH_ENV = "MOVIEHUB_CONFIG"
DEFAULT_STORAGE_PATH = Path.home() / ".local" / "share" / "moviehub" / "storage.json"


class Settings(BaseModel):
    """Application configuration resolved from env vars and optional TOML files."""

    omdb_api_key: str | None = Field(default=None, alias="OMDB_API_KEY")
    omdb_base_url: str = Field(default="https://www.omdbapi.com/", alias="OMDB_BASE_URL")
    omdb_timeout: float = Field(default=20.0, gt=0, alias="OMDB_TIMEOUT")

    storage_path: Path = Field(default=DEFAULT_STORAGE_PATH, alias="MOVIEHUB_STORAGE_PATH")
    profile: str = Field(default="default", min_length=1, alias="MOVIEHUB_PROFILE")

    min_query_length: int = Field(default=3, ge=1, alias="MOVIEHUB_MIN_QUERY_LENGTH")

    model_config = {
        "populate_by_name": True,
        "str_strip_whitespace": True,
        "extra": "ignore",
    }

    def require_omdb(self) -> None:
        """Ensure the catalog API key is available."""
        if not self.omdb_api_key:
            raise SettingsError(
                "Missing OMDB_API_KEY. Configure environment or TOML file.",
            )


class SettingsError(RuntimeError):
    """Raised when configuration cannot be resolved."""


@dataclass(frozen=True)
class SettingsLoadResult:
    settings: Settings
    source_path: Path | None


def load_settings(config_path: Path | None = None, *, load_env: bool = True) -> SettingsLoadResult:
    """Load settings from .env files, environment variables, and optional TOML configuration."""

    if load_env:
        load_dotenv()

    resolved_path = _determine_config_path(config_path)
    config_data: dict[str, Any] = {}

    if resolved_path and resolved_path.exists():
        try:
            with resolved_path.open("rb") as handle:
                toml_payload = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise SettingsError(f"Invalid TOML in {resolved_path}: {exc}") from exc
        try:
            config_data = _flatten_toml(toml_payload)
        except (TypeError, ValueError) as exc:
            raise SettingsError(f"Invalid value in {resolved_path}: {exc}") from exc

    try:
        env_data = _collect_env_overrides()
    except ValueError as exc:
        raise SettingsError(f"Invalid environment value: {exc}") from exc
    merged = {**config_data, **env_data}

    try:
        settings = Settings.model_validate(merged)
    except ValidationError as exc:  # pragma: no cover - surfaced via CLI messaging
        raise SettingsError(str(exc)) from exc

    return SettingsLoadResult(settings=settings, source_path=resolved_path)


def _determine_config_path(config_path: Path | None) -> Path | None:
    if config_path:
        return config_path

    env_override = os.getenv(CONFIG_PATH_ENV)
    if env_override:
        return Path(env_override).expanduser().resolve()

    default_path = Path.home() / ".config" / "moviehub" / "config.toml"
    return default_path if default_path.exists() else None


def _flatten_toml(payload: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}

    omdb_cfg = payload.get("omdb", {})
    if "api_key" in omdb_cfg:
        result["omdb_api_key"] = omdb_cfg.get("api_key")
    if "base_url" in omdb_cfg:
        result["omdb_base_url"] = omdb_cfg.get("base_url")
    if "timeout" in omdb_cfg:
        result["omdb_timeout"] = float(omdb_cfg.get("timeout"))

    storage_cfg = payload.get("storage", {})
    if "path" in storage_cfg:
        result["storage_path"] = Path(str(storage_cfg.get("path"))).expanduser()
    if "profile" in storage_cfg:
        result["profile"] = storage_cfg.get("profile")

    search_cfg = payload.get("search", {})
    if "min_query_length" in search_cfg:
        result["min_query_length"] = int(search_cfg.get("min_query_length"))

    return result


def _collect_env_overrides() -> dict[str, Any]:
    mapping: dict[str, str] = {
        "OMDB_API_KEY": "omdb_api_key",
        "OMDB_BASE_URL": "omdb_base_url",
        "OMDB_TIMEOUT": "omdb_timeout",
        "MOVIEHUB_STORAGE_PATH": "storage_path",
        "MOVIEHUB_PROFILE": "profile",
        "MOVIEHUB_MIN_QUERY_LENGTH": "min_query_length",
    }

    result: dict[str, Any] = {}
    for env_name, field in mapping.items():
        if env_name not in os.environ:
            continue
        value = os.environ[env_name]
        if field == "min_query_length":
            result[field] = int(value)
        elif field == "omdb_timeout":
            result[field] = float(value)
        elif field == "storage_path":
            result[field] = Path(value).expanduser()
        else:
            result[field] = value
    return result


__all__ = ["Settings", "SettingsError", "SettingsLoadResult", "load_settings"]
