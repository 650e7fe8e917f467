"""
PodBridge Feed Pipeline Configuration Module

This module implements a hierarchical configuration system:
1. Secrets are retrieved from environment variables (NOT from config files)
2. Other settings are loaded from config.yaml file

Environment Variables (Optional):
    - POLL_CRON_SECRET: Pre-shared bearer credential for the scheduled poll trigger.
      When unset, every poll trigger request is rejected.

Usage:
    export POLL_CRON_SECRET="your_secret_here"
"""
import os
import sys
from pathlib import Path
from typing import Optional

import yaml
from loguru import logger


# ==================== Path Configuration ====================
# Get the project root directory (backend/)
BASE_DIR = Path(__file__).resolve().parent.parent
CONFIG_PATH = BASE_DIR / "config.yaml"


# ==================== Load YAML Configuration ====================
def _load_yaml_config():
    """Load configuration from config.yaml file."""
    if not CONFIG_PATH.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {CONFIG_PATH}\n"
            "Please create config.yaml in the backend directory."
        )

    with open(CONFIG_PATH, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


# Load config at module import time
_config = _load_yaml_config()


def get_config(key: str, default=None):
    """
    Get configuration value by dot-notation key.

    Args:
        key: Dot-separated key path (e.g., 'feeds.fetch_timeout')
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    keys = key.split(".")
    value = _config

    for k in keys:
        if isinstance(value, dict):
            value = value.get(k)
        else:
            return default

    return value if value is not None else default


# ==================== Secrets from Environment Variables ====================
def _get_env_key(key: str, required: bool = True) -> Optional[str]:
    """
    Get secret from environment variable.

    Args:
        key: Environment variable name
        required: If True, raises error when key is not set

    Returns:
        Secret value or None

    Raises:
        ValueError: If required key is not set
    """
    value = os.environ.get(key)
    if required and not value:
        raise ValueError(
            f"Required environment variable '{key}' is not set.\n"
            f"Please export it before starting the service:\n"
            f"  export {key}=\"your_value_here\""
        )
    return value


# ==================== Public Configuration Constants ====================

# Application Settings
APP_NAME = get_config("app.name", "PodBridge-FeedPipeline")
APP_VERSION = get_config("app.version", "1.0.0")
DEBUG = get_config("app.debug", True)
SITE_URL = get_config("app.site_url", "http://localhost:3000")

# Database Settings
DATABASE_PATH = str(BASE_DIR / get_config("database.path", "./data/podbridge.db"))
DATABASE_ECHO = get_config("database.echo", False)

# ==================== Feed Pipeline Configuration ====================
FEED_FETCH_TIMEOUT = get_config("feeds.fetch_timeout", 15)
POLL_MAX_WORKERS = get_config("feeds.poll_max_workers", 8)
FEED_USER_AGENT = get_config("feeds.user_agent", "PodBridge-FeedPipeline/1.0")
INGESTION_CATEGORY = get_config("feeds.ingestion_category", "RSS Imports")
RSS_EXPORT_LIMIT = get_config("feeds.rss_export_limit", 50)

# ==================== Logging Configuration ====================
LOG_LEVEL = get_config("logging.level", "INFO")
LOG_FILE = str(BASE_DIR / get_config("logging.file", "./logs/app.log"))
LOG_ROTATION = get_config("logging.rotation", "10 MB")
LOG_RETENTION = get_config("logging.retention", "7 days")

# ==================== API Server Configuration ====================
API_HOST = get_config("api.host", "127.0.0.1")
API_PORT = get_config("api.port", 8000)
CORS_ORIGINS = get_config("api.cors_origins", ["http://localhost:3000"])


# ==================== Utility Functions ====================
def get_poll_cron_secret() -> Optional[str]:
    """
    Get the poll trigger secret (read at call time).

    The poll endpoint refuses all requests while this is unset.

    Returns:
        The configured secret, or None when unset
    """
    return _get_env_key("POLL_CRON_SECRET", required=False)


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = LOG_FILE) -> None:
    """
    Configure loguru sinks from the logging settings.

    Args:
        level: Override for LOG_LEVEL
        log_file: File sink path; None disables the file sink
    """
    level = level or LOG_LEVEL
    logger.remove()
    logger.add(sys.stderr, level=level)
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=level,
            rotation=LOG_ROTATION,
            retention=LOG_RETENTION,
            encoding="utf-8",
        )


def print_config_summary():
    """Print a summary of current configuration (without exposing secrets)."""
    print(f"\n{'='*60}")
    print(f"Application: {APP_NAME} v{APP_VERSION}")
    print(f"Debug Mode: {DEBUG}")
    print(f"{'='*60}")
    print(f"\n[Database]")
    print(f"  Path: {DATABASE_PATH}")
    print(f"  Echo Queries: {DATABASE_ECHO}")

    print(f"\n[Feeds]")
    print(f"  Fetch Timeout: {FEED_FETCH_TIMEOUT}s")
    print(f"  Poll Workers: {POLL_MAX_WORKERS}")
    print(f"  Ingestion Category: {INGESTION_CATEGORY}")
    print(f"  Poll Secret: {'*** Set ***' if get_poll_cron_secret() else 'NOT SET'}")

    print(f"\n[API Server]")
    print(f"  Host: {API_HOST}")
    print(f"  Port: {API_PORT}")
    print(f"{'='*60}\n")


if __name__ == "__main__":
    # Test configuration loading
    print_config_summary()
