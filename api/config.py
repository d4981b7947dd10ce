"""
Configuration management for RecipeBox.

This module centralizes environment variable loading from .env file at project root.
It should be imported early in the backend (api/main.py) to ensure .env is loaded
before any other code accesses environment variables.

In production, .env will not exist, but load_dotenv() is safe to call and will no-op.
Environment variables from the deployment platform will be used instead.

Environment Variables:
- SPOONACULAR_API_KEY: Required for the Spoonacular provider
- SPOONACULAR_BASE_URL: Optional, defaults to "https://api.spoonacular.com"
- SPOONACULAR_TIMEOUT_SECONDS: Optional, defaults to 10
- DATABASE_URL: Optional, SQLAlchemy URL for the recipe cache (in-memory cache if unset)
- SEARCH_DEFAULT_LIMIT: Optional, defaults to 20
- LOG_LEVEL: Optional, defaults to "INFO"
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def load_env_file() -> None:
    """
    Load environment variables from .env file at project root.

    This function locates the project root by going up from this file's location
    (api/config.py -> project root) and loads .env if it exists.

    Safe to call multiple times. Existing environment variables take precedence.
    """
    this_file = Path(__file__).resolve()
    project_root = this_file.parent.parent
    env_path = project_root / ".env"
    load_dotenv(env_path, override=False)


# Load .env file on module import
load_env_file()


def _get_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Invalid value for %s: %r, using default %r", name, raw, default)
        return default


class SpoonacularConfig:
    """Configuration for the Spoonacular provider."""

    @staticmethod
    def get_api_key() -> Optional[str]:
        """
        Get Spoonacular API key from environment.

        Returns:
            API key string or None if not set

        Note:
            This does not raise an error - the provider validates it.
        """
        return os.getenv("SPOONACULAR_API_KEY")

    @staticmethod
    def get_base_url() -> str:
        return os.getenv("SPOONACULAR_BASE_URL", "https://api.spoonacular.com")

    @staticmethod
    def get_timeout() -> float:
        """Request timeout in seconds (default: 10)."""
        return _get_number("SPOONACULAR_TIMEOUT_SECONDS", 10.0, float)


class StoreConfig:
    """Configuration for the local recipe store."""

    @staticmethod
    def get_database_url() -> Optional[str]:
        """
        Get the SQLAlchemy database URL.

        Returns:
            URL string, or None to use the in-memory store
        """
        return os.getenv("DATABASE_URL") or None


class SearchConfig:
    """Configuration for recipe search."""

    @staticmethod
    def get_default_limit() -> int:
        return _get_number("SEARCH_DEFAULT_LIMIT", 20, int)


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging() -> None:
    """Configure root logging once for the API process."""
    logging.basicConfig(
        level=get_log_level(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def get_required_env_vars() -> dict:
    """
    Get a dictionary of all required environment variables and their status.

    Returns:
        Dictionary with keys:
        - spoonacular_api_key: bool (True if set)
        - database_url: bool (True if set)
    """
    return {
        "spoonacular_api_key": SpoonacularConfig.get_api_key() is not None,
        "database_url": StoreConfig.get_database_url() is not None,
    }


def validate_required_config() -> None:
    """
    Validate that all required environment variables are set.

    Raises:
        RuntimeError: If any required configuration is missing
    """
    missing = []

    if not SpoonacularConfig.get_api_key():
        missing.append("SPOONACULAR_API_KEY (required for recipe search)")

    if missing:
        raise RuntimeError(
            "Missing required environment variables:\n" +
            "\n".join(f"  - {var}" for var in missing) +
            "\n\nPlease create a .env file at the project root with these variables."
        )
