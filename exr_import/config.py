"""
Configuration management for EXR Layer Import
"""
import copy
import json
import os

from app_config import MAIN_CONFIG_FILE
from .conversion import ConversionSettings
from .logger import app_logger

DEFAULT_CONFIG = {
    # Backends
    "decoder": "openexr",   # "openexr" | "array"
    "sink": "directory",    # "directory" | "memory"

    # Tone-mapping knobs (accepted, not applied by the linear conversion)
    "conversion": {
        "gamma": 2.2,
        "exposure": 0.0,     # stops
        "knee_low": 0.0,
        "knee_high": 5.0,
        "defog": 0.0
    },

    # Directory sink settings
    "output": {
        "directory": "",     # Empty = app data Layers folder
        "format": "png"      # "png" | "tiff"
    },

    # Delete the canvas when a later layer fails
    "discard_partial_canvas": False,

    "log_level": "INFO"
}


class Config:
    def __init__(self, config_path=None):
        # Store config in user data directory unless told otherwise
        if config_path is None:
            from utils_paths import get_app_data_dir
            config_path = os.path.join(get_app_data_dir(), MAIN_CONFIG_FILE)

        self.config_path = config_path
        self.data = self.load()

    def load(self):
        """Load configuration from JSON file or return defaults"""
        config = copy.deepcopy(DEFAULT_CONFIG)
        if not os.path.exists(self.config_path):
            return config

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except (OSError, ValueError) as e:
            app_logger.warning(f"Error loading config {self.config_path}: {e}")
            return config

        # Deep merge for nested sections like conversion, output
        for key, value in loaded.items():
            if isinstance(value, dict) and isinstance(config.get(key), dict):
                config[key].update(value)
            else:
                config[key] = value

        return config

    def save(self):
        """Save current configuration to JSON file"""
        try:
            directory = os.path.dirname(self.config_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self.data, f, indent=2)
            return True
        except OSError as e:
            app_logger.error(f"Error saving config: {e}")
            return False

    def get(self, key, default=None):
        """Get configuration value"""
        return self.data.get(key, default)

    def set(self, key, value):
        """Set configuration value"""
        self.data[key] = value

    def get_conversion_settings(self):
        """
        Build ConversionSettings from the 'conversion' section

        Raises:
            ValueError: If a value is not a number or is out of range
        """
        section = self.data.get("conversion") or {}
        defaults = DEFAULT_CONFIG["conversion"]
        values = {}
        for key, default in defaults.items():
            value = section.get(key, default)
            try:
                values[key] = float(value)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Invalid conversion setting '{key}': {value!r}") from e
        return ConversionSettings(**values)

    def set_conversion_settings(self, settings):
        """Store ConversionSettings back into the 'conversion' section"""
        self.data["conversion"] = {
            "gamma": settings.gamma,
            "exposure": settings.exposure,
            "knee_low": settings.knee_low,
            "knee_high": settings.knee_high,
            "defog": settings.defog,
        }
