"""
Application configuration, environment-aware settings.

Values are read from the environment; a local .env file is loaded first.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_DATABASE = str(Path.home() / ".yks_dashboard" / "dashboard.db")


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes", "on")


class BaseConfig:
    DATABASE = os.environ.get("YKS_DATABASE", DEFAULT_DATABASE)

    # Remote store accessor
    API_BASE_URL = os.environ.get("YKS_API_BASE_URL", "http://127.0.0.1:5000")
    REQUEST_TIMEOUT = float(os.environ.get("YKS_REQUEST_TIMEOUT", "10"))

    # Logging
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "text")  # "json" or "text"
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    SEED_SAMPLE_DATA = _env_flag("YKS_SEED_SAMPLE_DATA", "true")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")


class ProductionConfig(BaseConfig):
    DEBUG = False
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json")


class TestingConfig(BaseConfig):
    TESTING = True
    SEED_SAMPLE_DATA = False


config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(name: str | None = None):
    """Config class for name, or for YKS_ENV when name is None (development by default)."""
    env = name or os.environ.get("YKS_ENV", "development")
    return config_by_name.get(env, DevelopmentConfig)
