"""
Configuration management for the Recipe Costing application.

This module handles:
- Database path configuration
- Environment-specific configuration (development vs. production)
- Costing defaults (target food cost)
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .constants import (
    DATABASE_FILENAME,
    DEFAULT_TARGET_FOOD_COST,
)

logger = logging.getLogger(__name__)

ENV_VAR_ENVIRONMENT = "RECIPE_COSTING_ENV"
ENV_VAR_DATABASE_URL = "RECIPE_COSTING_DB"
ENV_VAR_TARGET_FOOD_COST = "RECIPE_COSTING_TARGET_FOOD_COST"


class Config:
    """
    Application configuration manager.

    Handles database location, environment mode and costing defaults.
    """

    def __init__(self, environment: str = "production"):
        """
        Initialize configuration.

        Args:
            environment: Environment mode - 'production' or 'development'
        """
        self.environment = environment

        if environment == "development":
            self._base_dir = self._get_project_data_dir()
        else:
            self._base_dir = self._get_user_documents_dir()

        self._database_dir = self._base_dir
        self._database_path = self._database_dir / DATABASE_FILENAME
        self._database_url_override = os.environ.get(ENV_VAR_DATABASE_URL)
        self._target_food_cost = self._read_target_food_cost()

    def _get_project_data_dir(self) -> Path:
        """
        Get the project's data directory for development.

        Returns:
            Path to project data/ directory
        """
        # src/recipe_costing/utils/config.py -> project root
        project_root = Path(__file__).parent.parent.parent.parent
        return project_root / "data"

    def _get_user_documents_dir(self) -> Path:
        """
        Get the user's Documents directory for production.

        Returns:
            Path to user's Documents folder with app subdirectory
        """
        if os.name == "nt":  # Windows
            documents = Path(os.path.expanduser("~")) / "Documents"
        else:  # Linux/Mac
            documents = Path.home() / "Documents"

        return documents / "RecipeCosting"

    def _read_target_food_cost(self) -> float:
        """Read the target food cost override, falling back to the default."""
        raw = os.environ.get(ENV_VAR_TARGET_FOOD_COST)
        if raw is None:
            return DEFAULT_TARGET_FOOD_COST
        try:
            value = float(raw.replace(",", "."))
        except ValueError:
            logger.warning(
                f"Ignoring {ENV_VAR_TARGET_FOOD_COST}={raw!r}: not a number, "
                f"using {DEFAULT_TARGET_FOOD_COST}"
            )
            return DEFAULT_TARGET_FOOD_COST
        return value if value > 0 else DEFAULT_TARGET_FOOD_COST

    def ensure_directories(self):
        """Create the database directory if it doesn't exist."""
        self._database_dir.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        """Full path to the database file."""
        return self._database_path

    @property
    def database_url(self) -> str:
        """
        SQLAlchemy database URL.

        Returns:
            The RECIPE_COSTING_DB override if set, else a SQLite file URL
        """
        if self._database_url_override:
            return self._database_url_override
        db_path_str = str(self._database_path).replace("\\", "/")
        return f"sqlite:///{db_path_str}"

    @property
    def target_food_cost(self) -> float:
        """Default target food cost ratio used for suggested prices."""
        return self._target_food_cost

    def database_exists(self) -> bool:
        """
        Check if database file exists.

        Returns:
            True if database file exists, False otherwise
        """
        if self._database_url_override:
            return True
        return self._database_path.exists()

    def __repr__(self) -> str:
        """String representation of config."""
        return f"Config(environment='{self.environment}', database_url='{self.database_url}')"


_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Get the global configuration instance.

    Once created, the singleton's environment cannot be changed by passing a
    different environment argument, so the database cannot switch mid-session.

    Args:
        environment: Optional environment for initial creation. If None, uses
                    RECIPE_COSTING_ENV or defaults to production. Ignored if
                    singleton already exists.

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        if environment is None:
            environment = os.environ.get(ENV_VAR_ENVIRONMENT, "production")
        _config_instance = Config(environment)
    elif environment is not None and environment != _config_instance.environment:
        logger.warning(
            f"get_config() called with environment='{environment}' but singleton "
            f"already exists with environment='{_config_instance.environment}'. "
            f"Returning existing singleton."
        )

    return _config_instance


def reset_config():
    """
    Reset the global configuration instance.

    Useful for testing.
    """
    global _config_instance
    _config_instance = None


def get_database_url() -> str:
    """
    Get the database URL.

    Returns:
        SQLAlchemy URL for the configured database
    """
    return get_config().database_url
