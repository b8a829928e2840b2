"""
config.py

Loads application settings from a YAML file, expands environment variables
written as ``${ENV_VAR_NAME}``, validates the result with Pydantic, and exposes
it through a singleton ``Config`` instance.

The file is ``config.yaml`` at the project root unless the
``FORMATIONS_CONFIG`` environment variable points elsewhere. A missing file
yields the defaults of every section.

Usage Example:

1. Import the config dict:
   from formations.config import config

2. Access a configuration value:
   check = config["repository"]["check_concurrency"]
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

CONFIG_ENV_VAR = "FORMATIONS_CONFIG"
_ENV_REF = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


class LoggingConfig(BaseModel):
    level: str = "INFO"
    logs_dir: Optional[str] = None  # None disables file logging
    filename: str = "formations.log"

    @field_validator("level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return v


class RepositoryConfig(BaseModel):
    check_concurrency: bool = False


class ScheduleStep(BaseModel):
    delay: float = Field(..., ge=0)
    date: str


class DemoConfig(BaseModel):
    formation_id: str = "DDD01"
    name: str = "Introduction to DDD"
    duration_hours: float = 14
    instructor_name: str = "SRE"
    initial_delay: float = Field(default=1.0, ge=0)
    schedules: List[ScheduleStep] = Field(
        default_factory=lambda: [ScheduleStep(delay=2.0, date="2021"), ScheduleStep(delay=0.0, date="2020")]
    )


class ConfigModel(BaseModel):
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    demo: DemoConfig = Field(default_factory=DemoConfig)


def _expand_env(data: Any) -> Any:
    """Replace ``${NAME}`` references in strings with environment values ("" if unset)."""
    if isinstance(data, dict):
        return {k: _expand_env(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_expand_env(item) for item in data]
    if isinstance(data, str):
        return _ENV_REF.sub(lambda m: os.getenv(m.group(1), ""), data)
    return data


def default_config_path() -> Path:
    """Return the config file path, honouring the FORMATIONS_CONFIG override."""
    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return Path(__file__).parent.parent / "config.yaml"


def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Load, expand and validate a configuration file.

    Args:
        config_path: Path to the YAML file; a missing file yields defaults

    Returns:
        Dict[str, Any]: Validated configuration as plain data

    Raises:
        yaml.YAMLError: If the file is not valid YAML
        pydantic.ValidationError: If a value fails validation
    """
    config_dict: Dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as stream:
            config_dict = yaml.safe_load(stream) or {}

    validated = ConfigModel(**_expand_env(config_dict))
    return validated.model_dump()


class Config:
    """
    Singleton holding the loaded configuration.

    Attributes:
        config_path (Path): Path the configuration was loaded from.
        config (dict): The loaded and validated settings.
    """

    _instance = None
    _config: Optional[Dict[str, Any]] = None
    config_path: Path

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance.config_path = default_config_path()
            cls._instance._config = load_config(cls._instance.config_path)
        return cls._instance

    @property
    def config(self) -> Dict[str, Any]:
        if self._config is None:
            raise RuntimeError("Config not loaded")
        return self._config

    def get(self, key, default=None):
        """Return a top-level configuration section, or default if absent."""
        return self.config.get(key, default)

    def __getitem__(self, key):
        return self.config[key]

    def __repr__(self):
        return f"Config(path={self.config_path})"


# Singleton instance
config = Config().config
