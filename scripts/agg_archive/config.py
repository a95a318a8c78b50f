"""
Configuration management for the archive reader.
Supports TOML and JSON configuration files with validation.
"""

import os
import json
from dataclasses import dataclass, field
from typing import Dict, List, Any, Union
from pathlib import Path

import toml


LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


@dataclass
class ArchiveConfig:
    """Main configuration class for archive resolution."""

    # Archive format
    max_filename_size: int = 15
    archive_extension: str = ".AGG"

    # Override settings
    sprite_sheet_type: str = "ICN"
    image_extensions: List[str] = field(default_factory=lambda: [".png"])

    # Paths; archives are consulted in order, expansion before base
    data_dir: str = "data"
    archives: List[str] = field(default_factory=lambda: ["HEROES2X.AGG", "HEROES2.AGG"])

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "ArchiveConfig":
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
    def _from_toml(cls, config_path: Path) -> "ArchiveConfig":
        """Load configuration from TOML file."""
        with open(config_path, 'r') as f:
            data = toml.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_json(cls, config_path: Path) -> "ArchiveConfig":
        """Load configuration from JSON file."""
        with open(config_path, 'r') as f:
            data = json.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "ArchiveConfig":
        """Create configuration from dictionary."""
        config_data = {}

        if 'archive' in data:
            archive = data['archive']
            config_data['max_filename_size'] = archive.get('max_filename_size', 15)
            config_data['archive_extension'] = archive.get('extension', '.AGG')

        if 'overrides' in data:
            overrides = data['overrides']
            config_data['sprite_sheet_type'] = overrides.get('sprite_sheet_type', 'ICN')
            if 'image_extensions' in overrides:
                config_data['image_extensions'] = list(overrides['image_extensions'])

        if 'paths' in data:
            paths = data['paths']
            config_data['data_dir'] = paths.get('data_dir', 'data')
            if 'archives' in paths:
                config_data['archives'] = list(paths['archives'])

        if 'logging' in data:
            config_data['log_level'] = data['logging'].get('level', 'INFO')

        return cls(**config_data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to the sectioned layout used by config files."""
        return {
            'archive': {
                'max_filename_size': self.max_filename_size,
                'extension': self.archive_extension,
            },
            'overrides': {
                'sprite_sheet_type': self.sprite_sheet_type,
                'image_extensions': list(self.image_extensions),
            },
            'paths': {
                'data_dir': self.data_dir,
                'archives': list(self.archives),
            },
            'logging': {
                'level': self.log_level,
            },
        }

    def to_toml(self) -> str:
        """Serialize configuration as TOML text."""
        return toml.dumps(self.to_dict())

    @classmethod
    def default(cls) -> "ArchiveConfig":
        """Create default configuration with environment variable overrides."""
        return cls._apply_env_overrides(cls())

    @classmethod
    def from_env(cls) -> "ArchiveConfig":
        """Create configuration from environment variables only."""
        return cls._apply_env_overrides(cls())

    @classmethod
    def _apply_env_overrides(cls, config: "ArchiveConfig") -> "ArchiveConfig":
        """Apply environment variable overrides to configuration."""

        if os.getenv('AGG_ARCHIVE_MAX_FILENAME_SIZE'):
            config.max_filename_size = int(os.getenv('AGG_ARCHIVE_MAX_FILENAME_SIZE', '15'))

        if os.getenv('AGG_ARCHIVE_EXTENSION'):
            config.archive_extension = os.getenv('AGG_ARCHIVE_EXTENSION', '.AGG')

        if os.getenv('AGG_ARCHIVE_SPRITE_SHEET_TYPE'):
            config.sprite_sheet_type = os.getenv('AGG_ARCHIVE_SPRITE_SHEET_TYPE', 'ICN')

        if os.getenv('AGG_ARCHIVE_IMAGE_EXTENSIONS'):
            config.image_extensions = [
                ext.strip() for ext in os.getenv('AGG_ARCHIVE_IMAGE_EXTENSIONS', '.png').split(',')
                if ext.strip()
            ]

        if os.getenv('AGG_ARCHIVE_DATA_DIR'):
            config.data_dir = os.getenv('AGG_ARCHIVE_DATA_DIR', 'data')

        if os.getenv('AGG_ARCHIVE_ARCHIVES'):
            config.archives = [
                name.strip() for name in os.getenv('AGG_ARCHIVE_ARCHIVES', '').split(',')
                if name.strip()
            ]

        if os.getenv('AGG_ARCHIVE_LOG_LEVEL'):
            config.log_level = os.getenv('AGG_ARCHIVE_LOG_LEVEL', 'INFO').upper()

        return config

    def archive_paths(self) -> List[Path]:
        """Get archive paths in lookup order."""
        return [Path(self.data_dir) / name for name in self.archives]

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if self.max_filename_size <= 0:
            errors.append("max_filename_size must be positive")

        if not self.archive_extension.startswith('.') or len(self.archive_extension) < 2:
            errors.append("archive_extension must start with '.' followed by a name")

        if not self.sprite_sheet_type or '.' in self.sprite_sheet_type:
            errors.append("sprite_sheet_type must be a non-empty name without '.'")

        if not self.image_extensions:
            errors.append("image_extensions must not be empty")
        for ext in self.image_extensions:
            if not ext.startswith('.'):
                errors.append(f"image extension '{ext}' must start with '.'")

        if not self.archives:
            errors.append("archives must list at least one archive file")

        if self.log_level.upper() not in LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}")

        return errors
