"""
Configuration Service - Config management for the build-info reporter
Loads YAML config with environment variable overrides
"""
import os
import sys
import yaml
from typing import Any, Dict, List, Optional
from pathlib import Path


class ConfigService:
    """
    Centralized configuration management with environment overrides.

    Priority order:
    1. Environment variables (highest)
    2. YAML config file
    3. Default values (lowest)
    """

    _instance: Optional['ConfigService'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls):
        """Singleton pattern for global config access"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize only once"""
        if not self._config:
            self.reload()

    def reload(self, config_paths: Optional[List[Path]] = None) -> None:
        """
        Load config from file and environment.

        Args:
            config_paths: Candidate YAML files, first existing one wins
        """
        self._config = self._load_yaml_config(config_paths)
        self._apply_env_overrides()

    def _config_paths(self) -> List[Path]:
        if env_path := os.environ.get('BUILD_INFO_CONFIG'):
            return [Path(env_path)]
        return [
            Path("/data/config.yaml"),  # Production path
            Path("config/default.yaml"),  # Development path
        ]

    def _load_yaml_config(self, config_paths: Optional[List[Path]] = None) -> Dict[str, Any]:
        """Load configuration from YAML file, layered over the defaults"""
        config = self._get_defaults()

        for config_path in config_paths or self._config_paths():
            if config_path.exists():
                try:
                    with open(config_path, 'r') as f:
                        loaded = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    # Logging is configured from this config, so it is not up yet
                    print(f"Warning: Failed to load {config_path}: {e}", file=sys.stderr)
                    continue
                if not isinstance(loaded, dict):
                    print(f"Warning: Ignoring {config_path}: top level is not a mapping", file=sys.stderr)
                    continue
                self._merge(config, loaded)
                break

        return config

    def _merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        for key, value in override.items():
            # An empty section keeps its defaults
            if value is None and isinstance(base.get(key), dict):
                continue
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                self._merge(base[key], value)
            else:
                base[key] = value

    def _section(self, name: str) -> Dict[str, Any]:
        if not isinstance(self._config.get(name), dict):
            self._config[name] = {}
        return self._config[name]

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides"""
        if env_path := os.environ.get('BUILD_INFO_PATH'):
            self._section('build_info')['path'] = env_path

        if env_dist := os.environ.get('BUILD_INFO_DISTRIBUTION'):
            self._section('build_info')['distribution'] = env_dist

        if env_level := os.environ.get('LOG_LEVEL'):
            self._section('logging')['level'] = env_level

    def _get_defaults(self) -> Dict[str, Any]:
        """Return default configuration"""
        return {
            'build_info': {
                'path': '/data/build-info.json',
                'distribution': '',
            },
            'logging': {
                'level': 'WARNING',
            }
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get config value using dot notation
        Example: config.get('build_info.path')
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def get_all(self) -> Dict[str, Any]:
        """Get entire configuration dict"""
        return self._config.copy()

    def set(self, key: str, value: Any) -> None:
        """
        Set config value using dot notation
        Example: config.set('logging.level', 'DEBUG')
        """
        keys = key.split('.')
        target = self._config

        for k in keys[:-1]:
            target = target.setdefault(k, {})

        target[keys[-1]] = value


# Global instance
config = ConfigService()
