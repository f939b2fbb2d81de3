"""
Configuration for the dataset classifier.

Settings come from (lowest to highest priority):
- field defaults
- a YAML file (config.yaml / config.yml)
- CLASSIFIER_* environment variables
- explicit keyword arguments (the CLI passes its arguments this way)
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dataset_classifier.core.exceptions import ConfigurationError
from dataset_classifier.core.schema import DEFAULT_CSV_HEADER, Schema

DEFAULT_TARGET_COLUMN = "Region"
NHS_COLUMN = "NHS_Number"


class Settings(BaseSettings):
    """Run settings loaded from environment variables and YAML."""
    
    model_config = SettingsConfigDict(
        env_prefix="CLASSIFIER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
    
    # Job parameters
    output_location: Optional[str] = None
    target_column: str = DEFAULT_TARGET_COLUMN
    input_path: str = "MedicalFiles.csv"
    encoding: str = "utf-8"
    job_name: str = "dataset classifier"
    
    # Record layout
    csv_header: str = DEFAULT_CSV_HEADER
    nhs_column: str = NHS_COLUMN
    
    # Execution
    max_workers: int = 4
    log_level: str = "INFO"
    
    @field_validator("target_column", mode="before")
    @classmethod
    def default_target_column(cls, value: Any) -> Any:
        # Unset and blank both mean the default column
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_TARGET_COLUMN
        return value
    
    @field_validator("max_workers")
    @classmethod
    def check_max_workers(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_workers must be at least 1")
        return value
    
    @property
    def record_schema(self) -> Schema:
        """Schema built from the configured header."""
        return Schema.from_header(self.csv_header)
    
    @classmethod
    def from_yaml(cls, path: str, **overrides: Any) -> "Settings":
        """
        Load settings from a YAML file, then apply env and explicit overrides.
        
        Raises:
            ConfigurationError: If the file is not valid YAML or not a mapping
        """
        config_path = Path(path)
        
        data: Dict[str, Any] = {}
        if config_path.exists():
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigurationError(
                    f"Config file {config_path} must contain a mapping, "
                    f"got {type(data).__name__}"
                )
        
        data = cls._apply_env_overrides(data)
        data.update({k: v for k, v in overrides.items() if v is not None})
        
        return cls(**data)
    
    @classmethod
    def _apply_env_overrides(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """Let CLASSIFIER_* environment variables win over YAML values."""
        prefix = cls.model_config.get("env_prefix", "")
        for name in cls.model_fields:
            env_value = os.environ.get(f"{prefix}{name}".upper())
            if env_value is not None:
                data[name] = env_value
        return data


# Global settings instance
_settings: Optional[Settings] = None


def _find_config_file() -> Optional[str]:
    """Look for a config file in the working directory."""
    for path in (Path("config.yaml"), Path("config.yml")):
        if path.exists():
            return str(path)
    return None


def get_settings() -> Settings:
    """Get run settings (singleton)."""
    global _settings

    if _settings is None:
        config_path = _find_config_file()
        if config_path:
            _settings = Settings.from_yaml(config_path)
        else:
            _settings = Settings()

    return _settings


def reload_settings(config_path: Optional[str] = None, **overrides: Any) -> Settings:
    """Rebuild settings from a config file plus explicit overrides."""
    global _settings

    config_path = config_path or _find_config_file()
    if config_path:
        _settings = Settings.from_yaml(config_path, **overrides)
    else:
        _settings = Settings(**{k: v for k, v in overrides.items() if v is not None})

    return _settings
