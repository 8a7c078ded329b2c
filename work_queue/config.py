"""
Configuration management for work-queue.

Handles loading, saving, and updating queue configuration, with
environment overrides from a .env file.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from work_queue.models import QueueConfig, QueueSettings
from work_queue.atomic import AtomicFileWriter


logger = logging.getLogger(__name__)


# Default configuration paths
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "work-queue"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"

# Environment overrides
ENV_MAX_SIZE = "WORK_QUEUE_MAX_SIZE"
ENV_MODEL = "WORK_QUEUE_MODEL"
ENV_PROJECT = "WORK_QUEUE_PROJECT"


class ConfigManager:
    """
    Manages work queue configuration.

    Loads configuration from disk, applies environment overrides,
    and persists changes atomically.
    """

    def __init__(self, config_file: Optional[Path] = None, env_file: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to configuration file. Defaults to ~/.config/work-queue/config.json
            env_file: .env file with overrides. Defaults to searching from the current directory
        """
        self.config_file = Path(config_file) if config_file else DEFAULT_CONFIG_FILE

        if env_file is not None:
            load_dotenv(env_file)
        else:
            load_dotenv()

        self.config = self._load_config()

    def _load_config(self) -> QueueConfig:
        """Load configuration from file or create default."""
        data = AtomicFileWriter.read_json(self.config_file)

        if data is None:
            config = QueueConfig()
        else:
            try:
                config = QueueConfig(**data)
            except (ValidationError, TypeError) as e:
                logger.warning(f"Invalid config file {self.config_file}, using defaults: {e}")
                config = QueueConfig()

        self._apply_env_overrides(config)
        return config

    def _apply_env_overrides(self, config: QueueConfig) -> None:
        """Apply WORK_QUEUE_* environment variables on top of the file settings."""
        max_size = os.environ.get(ENV_MAX_SIZE)
        if max_size:
            try:
                value = int(max_size)
            except ValueError:
                logger.warning(f"Ignoring invalid {ENV_MAX_SIZE}: {max_size}")
            else:
                config.settings.max_size = value if value > 0 else None

        model = os.environ.get(ENV_MODEL)
        if model:
            config.settings.model = model

        project = os.environ.get(ENV_PROJECT)
        if project:
            config.project_workspace = str(Path(project).expanduser().resolve())

    def save_config(self) -> None:
        """Save configuration atomically."""
        AtomicFileWriter.write_json(self.config_file, self.config.model_dump(), indent=2)
        logger.debug(f"Configuration saved: {self.config_file}")

    def reload(self) -> None:
        """Reload configuration from disk."""
        self.config = self._load_config()

    def set_project_workspace(self, path: str) -> None:
        """
        Set the project workspace.

        Raises:
            ValueError: If path doesn't exist or is not a directory
        """
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_dir():
            raise ValueError(f"Project Workspace is not a directory: {path_obj}")
        self.config.project_workspace = str(path_obj)
        self.save_config()

    def update_settings(self, **kwargs) -> None:
        """
        Update queue settings.

        Args:
            **kwargs: Settings to update (max_size, model, system_prompt, ...)

        Raises:
            ValueError: On unknown settings or invalid values
        """
        data = self.config.settings.model_dump()
        for key, value in kwargs.items():
            if key not in data:
                raise ValueError(f"Unknown setting: {key}")
            data[key] = value

        self.config.settings = QueueSettings(**data)
        self.save_config()
