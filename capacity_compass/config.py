"""
Configuration for Sprint Capacity Compass

Loads config/config.yaml and overrides it from the environment.
"""

import os
from typing import Optional

import yaml

from .calculator import CapacityConfig, CapacityModel


DEFAULT_CONFIG_PATH = "config/config.yaml"
DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"


class Config:
    """Load configuration from config.yaml and environment."""

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH):
        self.config = {}

        if os.path.exists(config_path):
            with open(config_path) as f:
                self.config = yaml.safe_load(f) or {}

        # Override with environment variables
        self._load_env()

    def _load_env(self):
        """Load configuration from environment variables."""
        env_mapping = {
            "OPENAI_API_KEY": ("analysis", "api_key"),
            "ANALYSIS_API_KEY": ("analysis", "api_key"),  # wins over OPENAI_API_KEY
            "ANALYSIS_BASE_URL": ("analysis", "base_url"),
            "ANALYSIS_MODEL": ("analysis", "model"),
            "ANALYSIS_TIMEOUT": ("analysis", "timeout"),
            "ANALYSIS_MAX_RETRIES": ("analysis", "max_retries"),
            "CAPACITY_MODEL": ("capacity", "model"),
            "LOG_LEVEL": ("logging", "level"),
        }

        for env_var, (section, key) in env_mapping.items():
            value = os.getenv(env_var)
            if value:
                if section not in self.config:
                    self.config[section] = {}
                self.config[section][key] = value

    def get(self, section: str, key: str, default=None):
        """Get configuration value."""
        return (self.config.get(section) or {}).get(key, default)

    @property
    def analysis_api_key(self) -> Optional[str]:
        return self.get("analysis", "api_key")

    @property
    def analysis_base_url(self) -> str:
        return self.get("analysis", "base_url", DEFAULT_BASE_URL)

    @property
    def analysis_model(self) -> str:
        return self.get("analysis", "model", DEFAULT_MODEL)

    @property
    def analysis_timeout(self) -> float:
        return float(self.get("analysis", "timeout", 30.0))

    @property
    def analysis_max_retries(self) -> int:
        return int(self.get("analysis", "max_retries", 2))

    @property
    def log_level(self) -> str:
        return str(self.get("logging", "level", "INFO")).upper()

    @property
    def capacity_model(self) -> CapacityModel:
        return CapacityModel(self.get("capacity", "model", CapacityModel.PROPORTIONAL.value))

    def capacity_config(self) -> CapacityConfig:
        """Build the calculator configuration from the capacity section."""
        defaults = CapacityConfig()
        return CapacityConfig(
            model=self.capacity_model,
            nominal_working_days=int(self.get("capacity", "nominal_working_days", defaults.nominal_working_days)),
            story_points_per_sprint=float(self.get("capacity", "story_points_per_sprint", defaults.story_points_per_sprint)),
            story_points_per_day=float(self.get("capacity", "story_points_per_day", defaults.story_points_per_day)),
            sprint_length_days=int(self.get("capacity", "sprint_length_days", defaults.sprint_length_days))
        )
