"""
Configuration management for the texture filters.
Supports TOML and JSON configuration files with validation.
"""

import os
import json
from dataclasses import dataclass
from enum import Enum

# Handle tomllib import for different Python versions
try:
    import tomllib  # Python 3.11+
except ImportError:
    try:
        import tomli as tomllib  # Python < 3.11 with tomli package
    except ImportError:
        tomllib = None
from typing import Dict, List, Optional, Any, Union
from pathlib import Path

from .errors import InvalidArgumentError
from .processing.quantizer import QuantizerConfig


class FilterKind(Enum):
    """The closed set of texture filters, with the pack label and description each ships under."""
    GRAYSCALE = ("grayscale", "Greyscale", "All Textures are Greyscale")
    INVERT = ("invert", "Invert", "All Textures are Inverted")
    SATURATE = ("saturate", "Saturation", "Saturates all textures")
    DITHER = ("dither", "1-bit", "Convert all textures to 1-bit")
    AVERAGE = ("average", "Average", "Averages all textures")
    POSTERIZE = ("posterize", "8bit", "All textures are 8-bit")
    KMEANS = ("kmeans", "K-Means", "K-Means or something")

    def __init__(self, key: str, label: str, description: str):
        self.key = key
        self.label = label
        self.description = description

    @classmethod
    def from_name(cls, name: Union[str, "FilterKind"]) -> "FilterKind":
        """Resolve a filter by key, member name or pack label, ignoring case."""
        if isinstance(name, cls):
            return name

        wanted = str(name).strip().lower()
        for kind in cls:
            if wanted in (kind.key, kind.name.lower(), kind.label.lower()):
                return kind

        valid = ", ".join(kind.key for kind in cls)
        raise InvalidArgumentError(f"Unknown filter '{name}', expected one of: {valid}")


@dataclass
class FilterConfig:
    """Configuration for a single texture filter."""

    kind: Union[FilterKind, str] = FilterKind.GRAYSCALE

    # K-means settings
    k: int = 4
    max_iterations: Optional[int] = None
    seed: Optional[int] = None

    # Saturation settings
    saturation_factor: float = 2.0

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "FilterConfig":
        """Load configuration from TOML or JSON file."""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix.lower() == '.toml':
            return cls._from_toml(config_path)
        elif config_path.suffix.lower() == '.json':
            return cls._from_json(config_path)
        else:
            raise ValueError(f"Unsupported configuration format: {config_path.suffix}")

    @classmethod
    def _from_toml(cls, config_path: Path) -> "FilterConfig":
        """Load configuration from TOML file."""
        if tomllib is None:
            raise ImportError("TOML support not available. Install tomli package for Python < 3.11")

        with open(config_path, 'rb') as f:
            data = tomllib.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_json(cls, config_path: Path) -> "FilterConfig":
        """Load configuration from JSON file."""
        with open(config_path, 'r') as f:
            data = json.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "FilterConfig":
        """Create configuration from dictionary."""
        config_data = {}

        if 'filter' in data:
            config_data['kind'] = data['filter'].get('kind', FilterKind.GRAYSCALE.key)

        if 'kmeans' in data:
            kmeans = data['kmeans']
            config_data['k'] = kmeans.get('k', 4)
            config_data['max_iterations'] = kmeans.get('max_iterations')
            config_data['seed'] = kmeans.get('seed')

        if 'saturate' in data:
            config_data['saturation_factor'] = data['saturate'].get('factor', 2.0)

        return cls(**config_data)

    @classmethod
    def default(cls) -> "FilterConfig":
        """Create default configuration with environment variable overrides."""
        return cls._apply_env_overrides(cls())

    @classmethod
    def from_env(cls) -> "FilterConfig":
        """Create configuration from environment variables only."""
        config = cls()
        return cls._apply_env_overrides(config)

    @classmethod
    def _apply_env_overrides(cls, config: "FilterConfig") -> "FilterConfig":
        """Apply environment variable overrides to configuration."""
        if os.getenv('TEXTURE_PACKS_FILTER'):
            config.kind = os.getenv('TEXTURE_PACKS_FILTER', FilterKind.GRAYSCALE.key)

        if os.getenv('TEXTURE_PACKS_KMEANS_K'):
            config.k = int(os.getenv('TEXTURE_PACKS_KMEANS_K', '4'))

        if os.getenv('TEXTURE_PACKS_KMEANS_MAX_ITERATIONS'):
            config.max_iterations = int(os.getenv('TEXTURE_PACKS_KMEANS_MAX_ITERATIONS'))

        if os.getenv('TEXTURE_PACKS_KMEANS_SEED'):
            config.seed = int(os.getenv('TEXTURE_PACKS_KMEANS_SEED'))

        if os.getenv('TEXTURE_PACKS_SATURATION_FACTOR'):
            config.saturation_factor = float(os.getenv('TEXTURE_PACKS_SATURATION_FACTOR', '2.0'))

        return config

    @property
    def filter_kind(self) -> FilterKind:
        """The configured filter as a FilterKind."""
        return FilterKind.from_name(self.kind)

    def quantizer_config(self) -> QuantizerConfig:
        """Settings for the k-means quantizer."""
        return QuantizerConfig(k=self.k, max_iterations=self.max_iterations, seed=self.seed)

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        try:
            FilterKind.from_name(self.kind)
        except InvalidArgumentError as e:
            errors.append(str(e))

        if self.k < 1:
            errors.append("k must be at least 1")

        if self.max_iterations is not None and self.max_iterations < 1:
            errors.append("max_iterations must be positive when set")

        if self.saturation_factor < 0:
            errors.append("saturation_factor must not be negative")

        return errors
