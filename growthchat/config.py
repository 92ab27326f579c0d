"""growthchat Configuration.

Includes:
- InterpreterSettings: classifier/dispatcher settings with environment
  variable support and an optional YAML file

Environment Variables:
    GROWTHCHAT_CONFIDENCE_THRESHOLD: Minimum confidence for dispatch (0-1)
    GROWTHCHAT_MAX_INPUT_LENGTH: Messages longer than this are truncated
    GROWTHCHAT_LOG_DIR: Directory for rotating log files
    GROWTHCHAT_DEBUG: Enable DEBUG logging
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.intent.parser import MAX_INPUT_LENGTH
from .core.intent.taxonomy import IntentConfidence

ENV_PREFIX = "GROWTHCHAT_"
CONFIG_DIR = ".growthchat"
CONFIG_FILE = "config.yaml"

# Keys persisted to the YAML file
FILE_KEYS: tuple[str, ...] = ("confidence_threshold", "max_input_length", "log_dir", "debug")


class InterpreterSettings(BaseSettings):
    """Interpreter settings with environment variable support.

    Configuration is loaded from environment variables with GROWTHCHAT_ prefix.
    For example, GROWTHCHAT_CONFIDENCE_THRESHOLD sets confidence_threshold.

    Precedence (highest to lowest):
        1. Environment variables (GROWTHCHAT_*)
        2. Config file (.growthchat/config.yaml)
        3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        extra="ignore",
        validate_assignment=True,
    )

    project_path: Path = Field(default_factory=Path.cwd)
    confidence_threshold: float = Field(default=IntentConfidence.DISPATCH, ge=0.0, le=1.0)
    max_input_length: int = Field(default=MAX_INPUT_LENGTH, gt=0)
    log_dir: Path = Field(default_factory=lambda: Path("~/.growthchat/logs").expanduser())
    debug: bool = False

    @property
    def config_file(self) -> Path:
        return self.project_path / CONFIG_DIR / CONFIG_FILE

    @classmethod
    def load(cls, path: Path) -> "InterpreterSettings":
        """Load settings from .growthchat/config.yaml if it exists.

        Values from the file are applied only where no GROWTHCHAT_*
        environment variable is set.

        Args:
            path: Project path to load settings for

        Returns:
            InterpreterSettings (defaults if no config exists)
        """
        from ruamel.yaml import YAML

        settings = cls(project_path=path)
        config_file = settings.config_file

        if config_file.exists():
            yaml = YAML()
            with config_file.open() as f:
                data: dict[str, Any] | None = yaml.load(f)

            for key in FILE_KEYS:
                if not data or key not in data:
                    continue
                if f"{ENV_PREFIX}{key.upper()}" in os.environ:
                    continue
                setattr(settings, key, data[key])

        return settings

    def save(self) -> None:
        """Save settings to .growthchat/config.yaml in the project path."""
        from ruamel.yaml import YAML

        config_file = self.config_file
        config_file.parent.mkdir(parents=True, exist_ok=True)

        yaml = YAML()
        yaml.default_flow_style = False

        data = {
            "confidence_threshold": self.confidence_threshold,
            "max_input_length": self.max_input_length,
            "log_dir": str(self.log_dir),
            "debug": self.debug,
        }

        with config_file.open("w") as f:
            yaml.dump(data, f)


__all__ = ["InterpreterSettings"]
