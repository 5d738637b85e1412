"""Configuration service for loading taskpilot.yml."""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..models import TaskPilotConfig

logger = logging.getLogger(__name__)


class ConfigService:
    """Service for loading, caching and saving project configuration."""

    CONFIG_FILE = "taskpilot.yml"

    def __init__(self, project_root: Path) -> None:
        """Initialize the config service.

        Args:
            project_root: Directory holding taskpilot.yml
        """
        self.project_root = project_root
        self._config: TaskPilotConfig | None = None
        self._config_error: str | None = None

    @property
    def config_path(self) -> Path:
        return self.project_root / self.CONFIG_FILE

    @property
    def has_config_error(self) -> bool:
        """Check if there was an error loading config."""
        return self._config_error is not None

    @property
    def config_error(self) -> str | None:
        """Get the config error message if any."""
        return self._config_error

    def get_config(self) -> TaskPilotConfig:
        """Get configuration, loading from file if not cached."""
        if self._config is None:
            self._config = self._load_config()
        return self._config

    def reload(self) -> None:
        """Clear cached configuration, forcing reload on next access."""
        self._config = None
        self._config_error = None

    def save(self, config: TaskPilotConfig) -> Path:
        """Write ``config`` to taskpilot.yml and cache it."""
        data = config.model_dump(mode="json", exclude_none=True)
        self.project_root.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w") as f:
            yaml.safe_dump(data, f, sort_keys=False, default_flow_style=False)
        logger.info("Saved %s", self.config_path)
        self._config = config
        self._config_error = None
        return self.config_path

    def _load_config(self) -> TaskPilotConfig:
        """Load configuration from file or return default."""
        config_path = self.config_path
        self._config_error = None

        if not config_path.exists():
            logger.debug("No %s found, using defaults", self.CONFIG_FILE)
            return TaskPilotConfig.default()

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            self._config_error = f"Invalid YAML in {self.CONFIG_FILE}: {e}"
            logger.warning(self._config_error)
            return TaskPilotConfig.default()

        if data is None:
            self._config_error = f"{self.CONFIG_FILE} is empty"
            logger.warning(self._config_error)
            return TaskPilotConfig.default()

        if not isinstance(data, dict):
            self._config_error = f"{self.CONFIG_FILE} must contain a mapping"
            logger.warning(self._config_error)
            return TaskPilotConfig.default()

        try:
            config = TaskPilotConfig(**data)
        except ValidationError as e:
            self._config_error = f"Error loading {self.CONFIG_FILE}: {e}"
            logger.warning(self._config_error)
            return TaskPilotConfig.default()

        logger.info(
            "Loaded %s with %d GitHub columns", self.CONFIG_FILE, len(config.github.columns)
        )
        return config
