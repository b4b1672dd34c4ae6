"""
Configuration Management.

Loads settings from config/settings/*.yaml and optional overrides from the
environment (or config/.env). Nothing about the engine location is hardcoded.

Settings (YAML):
    application.yaml   - App identity, engine server URI, timeouts
    logging.yaml       - Logging configuration

Overrides (environment, prefix HANLON_):
    HANLON_SERVER_URI  - Replaces server.uri from application.yaml
    HANLON_TIMEOUT     - Replaces timeouts.external_api (seconds)
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from hanlon.core.config_schema import ApplicationSchema, LoggingSchema


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """
    Validate that the project root can be found.

    Raises SystemExit with a clear message if .project_root is not found.
    Use this in entry scripts before any configuration loading.
    """
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Environment overrides for the engine connection."""

    server_uri: str | None = None
    timeout: float | None = None

    model_config = SettingsConfigDict(
        env_prefix="HANLON_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")

    @property
    def application(self) -> ApplicationSchema:
        """Application settings."""
        return self._application

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging


@lru_cache
def get_settings() -> Settings:
    """Get cached override settings. Reads config/.env when it exists."""
    env_path = find_project_root() / "config" / ".env"
    if env_path.exists():
        return Settings(_env_file=str(env_path))
    return Settings()


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def get_server_base_url() -> tuple[str, float]:
    """
    Get the engine's REST root and the request timeout.

    The REST root is server.uri joined with server.websvc_root, e.g.
    http://localhost:8026/hanlon/api/v1. Environment overrides win.

    Returns:
        Tuple of (base_url, timeout_seconds).
    """
    app = get_app_config().application
    settings = get_settings()

    server_uri = settings.server_uri or app.server.uri
    timeout = settings.timeout if settings.timeout is not None else float(app.timeouts.external_api)

    base_url = server_uri.rstrip("/")
    websvc_root = app.server.websvc_root.strip("/")
    if websvc_root:
        base_url = f"{base_url}/{websvc_root}"
    return base_url, timeout
