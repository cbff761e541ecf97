"""
Configuration classes for triangulation and export.

This module provides configuration dataclasses with validation, defaults and
JSON serialization, used by the command line to combine a config file with
explicit options.
"""

import json
import math
import logging
from typing import Any, Dict, Optional
from dataclasses import dataclass, field, asdict, fields

# Set up logging
logger = logging.getLogger(__name__)


@dataclass
class TriangulationConfig:
    """
    Parameters of a greedy insertion run.

    The relaxed threshold for boundary samples is a fixed policy and not
    configurable.
    """
    max_error: float = 1.0
    max_vertices: Optional[int] = None

    # Optional parameters (stored as dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.validate()

    def validate(self) -> None:
        """
        Validate configuration parameters.

        Raises:
            ValueError: If configuration is invalid
        """
        if not isinstance(self.max_error, (int, float)) or not math.isfinite(self.max_error) or self.max_error < 0:
            raise ValueError(f"max_error must be a non-negative number, got {self.max_error}")

        if self.max_vertices is not None and self.max_vertices < 4:
            raise ValueError(f"max_vertices must be at least 4 or None, got {self.max_vertices}")

    def as_dict(self) -> Dict[str, Any]:
        """
        Get configuration as a dictionary.

        Returns:
            Dictionary representation of configuration
        """
        result = asdict(self)
        # Remove extra if empty
        if not result['extra']:
            del result['extra']
        return result

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]):
        """
        Create configuration from a dictionary.

        Args:
            config_dict: Dictionary of configuration parameters

        Returns:
            New configuration instance; unknown keys are kept in extra
        """
        names = [f.name for f in fields(cls)]
        known_params = {k: v for k, v in config_dict.items() if k in names and k != 'extra'}
        extra_params = {k: v for k, v in config_dict.items() if k not in names}
        extra_params.update(config_dict.get('extra') or {})

        config = cls(**known_params)
        config.extra.update(extra_params)
        return config


@dataclass
class ExportConfig(TriangulationConfig):
    """Triangulation parameters plus the options of the mesh writer."""
    format: str = 'obj'
    binary: Optional[bool] = None
    z_scale: float = 1.0
    calculate_normals: bool = True

    def validate(self) -> None:
        """
        Validate configuration parameters.

        Raises:
            ValueError: If configuration is invalid
        """
        # Call parent validation
        super().validate()

        if not self.format:
            raise ValueError("format must not be empty")
        self.format = self.format.lower().lstrip('.')

        if self.z_scale <= 0:
            raise ValueError(f"z_scale must be positive, got {self.z_scale}")


def load_config(config_file: str) -> ExportConfig:
    """
    Load configuration from a JSON file.

    Raises:
        IOError: If the file cannot be read or parsed
        ValueError: If configuration is invalid
    """
    try:
        with open(config_file, 'r') as f:
            config_dict = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise IOError(f"Failed to load configuration from {config_file}: {e}") from e

    if not isinstance(config_dict, dict):
        raise ValueError(f"Configuration in {config_file} must be a JSON object")

    logger.debug(f"Loaded configuration from {config_file}: {config_dict}")
    return ExportConfig.from_dict(config_dict)


def save_config(config: TriangulationConfig, config_file: str) -> None:
    """
    Save configuration to a JSON file.

    Raises:
        IOError: If file cannot be written
    """
    try:
        with open(config_file, 'w') as f:
            json.dump(config.as_dict(), f, indent=2)
    except OSError as e:
        raise IOError(f"Failed to save configuration to {config_file}: {e}") from e
