"""
Configuration management for the scaffolding tool.

Handles loading and merging configuration from JSON files,
providing defaults and validation for scaffold settings.
"""

import json
from pathlib import Path
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass, field, fields, asdict

from .errors import ScaffoldError
from ..logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_FILE = ".plugin-scaffold.json"


class ConfigError(ScaffoldError):
    """Exception raised for configuration-related errors."""
    pass


@dataclass
class ScaffoldConfig:
    """Settings that control where and how plugins are scaffolded."""

    # Project layout
    manifest_file: str = "package.json"
    plugins_dir_name: str = "plugins"

    # Host application configuration file
    config_file_name: str = "vendure-config.ts"
    config_type_name: str = "VendureConfig"

    # Generated plugin metadata
    compatibility: str = "^2.0.0"

    # GraphQL code generation
    codegen_file_name: str = "codegen.ts"
    codegen_schema_url: str = "http://localhost:3000/admin-api"

    # I/O
    encoding: str = "utf-8"
    template_dir: Optional[str] = None

    # Custom settings (unknown keys from config files)
    custom: Dict[str, Any] = field(default_factory=dict)


class ConfigManager:
    """Manages configuration loading and merging."""

    def get_config(self, custom_config: Optional[Dict[str, Any]] = None,
                   config_file: Optional[Union[str, Path]] = None) -> ScaffoldConfig:
        """
        Get complete configuration.

        Args:
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration
        """
        base_config: Dict[str, Any] = {}

        if config_file:
            base_config.update(self._load_config_file(config_file))

        if custom_config:
            base_config.update(custom_config)

        return self._dict_to_config(base_config)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {str(e)}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {str(e)}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        logger.info("Loaded configuration from %s", path)
        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> ScaffoldConfig:
        """Convert dictionary to ScaffoldConfig instance."""
        known_fields = {f.name for f in fields(ScaffoldConfig)}

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        if custom_args:
            existing_custom = dict(config_args.get('custom', {}))
            existing_custom.update(custom_args)
            config_args['custom'] = existing_custom

        return ScaffoldConfig(**config_args)

    def save_config(self, config: ScaffoldConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)

        config_dict = asdict(config)
        custom = config_dict.pop("custom")
        config_dict.update(custom)

        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {str(e)}") from e

    def validate_config(self, config: ScaffoldConfig) -> list[str]:
        """
        Validate configuration.

        Returns:
            List of validation warnings
        """
        warnings = []

        if not config.config_file_name.endswith(".ts"):
            warnings.append(f"config_file_name should be a .ts file: {config.config_file_name}")

        if not config.codegen_file_name.endswith(".ts"):
            warnings.append(f"codegen_file_name should be a .ts file: {config.codegen_file_name}")

        if not config.config_type_name.isidentifier():
            warnings.append(f"Invalid config_type_name: {config.config_type_name}")

        if config.template_dir and not Path(config.template_dir).is_dir():
            warnings.append(f"template_dir does not exist: {config.template_dir}")

        try:
            "".encode(config.encoding)
        except LookupError:
            warnings.append(f"Unknown encoding: {config.encoding}")

        return warnings


# Global configuration manager instance
_config_manager = None

def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def find_config_file(cwd: Optional[Path] = None) -> Optional[Path]:
    """Return the default config file in cwd, if there is one."""
    candidate = Path(cwd or Path.cwd()) / DEFAULT_CONFIG_FILE
    return candidate if candidate.is_file() else None


def load_config(custom_config: Optional[Dict[str, Any]] = None,
                config_file: Optional[Union[str, Path]] = None) -> ScaffoldConfig:
    """
    Convenience function to load configuration.

    Args:
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration
    """
    manager = get_config_manager()
    return manager.get_config(custom_config, config_file)
