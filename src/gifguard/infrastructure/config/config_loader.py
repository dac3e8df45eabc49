"""Configuration loader with support for YAML files and environment variables."""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .config_models import GifGuardConfig

ENV_PREFIX = "GIFGUARD_"


class ConfigLoader:
    """
    Load and manage gifguard configuration.

    Configuration is loaded in the following order (later sources override earlier):
    1. Default configuration (embedded in code)
    2. Global configuration (~/.gifguard/config.yaml)
    3. Project configuration (./gifguard.yaml or .gifguard.yaml)
    4. User-specified configuration file
    5. Environment variables (GIFGUARD_*)
    """

    DEFAULT_CONFIG_PATHS = [
        Path.home() / ".gifguard" / "config.yaml",
        Path("./gifguard.yaml"),
        Path("./.gifguard.yaml"),
    ]

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> GifGuardConfig:
        """
        Load configuration from multiple sources.

        Args:
            config_path: Optional path to configuration file

        Returns:
            Validated GifGuardConfig

        Raises:
            FileNotFoundError: If config_path does not exist
            ValueError: If a file is not valid YAML
            pydantic.ValidationError: If values are out of range
        """
        config_dict = GifGuardConfig().model_dump()

        for path in cls.DEFAULT_CONFIG_PATHS:
            if path.exists():
                config_dict = cls._merge_dicts(config_dict, cls._load_yaml_file(path))

        if config_path:
            user_path = Path(config_path)
            if not user_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            config_dict = cls._merge_dicts(config_dict, cls._load_yaml_file(user_path))

        config_dict = cls._merge_dicts(config_dict, cls._load_from_env(config_dict))

        return GifGuardConfig(**config_dict)

    @staticmethod
    def _load_yaml_file(path: Path) -> Dict[str, Any]:
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Invalid configuration in {path}: expected a mapping")
        return data

    @staticmethod
    def _merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge override into a copy of base."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = ConfigLoader._merge_dicts(result[key], value)
            else:
                result[key] = value

        return result

    @staticmethod
    def _resolve_env_key(parts: List[str], tree: Dict[str, Any]) -> Optional[List[str]]:
        """
        Map underscore-separated words onto a path of existing config keys.

        Keys may themselves contain underscores, so at each level the
        longest matching key wins: ``retry_max_attempts`` resolves to
        ``["retry", "max_attempts"]``.
        """
        for end in range(len(parts), 0, -1):
            key = "_".join(parts[:end])
            if key not in tree:
                continue
            rest = parts[end:]
            if not rest:
                return [key]
            if isinstance(tree[key], dict):
                tail = ConfigLoader._resolve_env_key(rest, tree[key])
                if tail is not None:
                    return [key] + tail
        return None

    @staticmethod
    def _load_from_env(known: Dict[str, Any]) -> Dict[str, Any]:
        """
        Load configuration from GIFGUARD_* environment variables.

        For example:
        - GIFGUARD_RETRY_MAX_ATTEMPTS -> retry.max_attempts
        - GIFGUARD_CIRCUIT_BREAKERS_GIF_SEARCH_FAILURE_THRESHOLD
          -> circuit_breakers.gif_search.failure_threshold

        Variables that do not match a known key are ignored.
        """
        config: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            path = ConfigLoader._resolve_env_key(key[len(ENV_PREFIX):].lower().split('_'), known)
            if path is None:
                continue

            current = config
            for part in path[:-1]:
                current = current.setdefault(part, {})
            current[path[-1]] = ConfigLoader._convert_env_value(value)

        return config

    @staticmethod
    def _convert_env_value(value: str) -> Any:
        """Convert an environment variable string to bool, None, int, float or str."""
        lowered = value.strip().lower()
        if lowered in ('true', 'yes', 'on'):
            return True
        if lowered in ('false', 'no', 'off'):
            return False
        if lowered in ('null', 'none'):
            return None

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    @staticmethod
    def create_default_config(path: Optional[str] = None) -> Path:
        """
        Create a default configuration file.

        Args:
            path: Optional path for config file. If not provided, creates in ~/.gifguard/

        Returns:
            Path to created configuration file
        """
        if path:
            config_path = Path(path)
            config_path.parent.mkdir(parents=True, exist_ok=True)
        else:
            config_dir = Path.home() / ".gifguard"
            config_dir.mkdir(parents=True, exist_ok=True)
            config_path = config_dir / "config.yaml"

        yaml_content = GifGuardConfig().to_yaml()

        config_path.write_text(f"""# gifguard Configuration
#
# Retry and circuit breaker settings for GIF API calls. Override any value
# with GIFGUARD_* environment variables (e.g. GIFGUARD_RETRY_MAX_ATTEMPTS=5)
# or pass --config at runtime.

{yaml_content}""")

        return config_path

    @staticmethod
    def get_config_info() -> Dict[str, Any]:
        """
        Get information about configuration sources.

        Returns:
            Dictionary with default paths, existing files and env overrides
        """
        info = {
            "default_paths": [str(p) for p in ConfigLoader.DEFAULT_CONFIG_PATHS],
            "existing_configs": [],
            "env_overrides": [],
        }

        for path in ConfigLoader.DEFAULT_CONFIG_PATHS:
            if path.exists():
                info["existing_configs"].append(str(path))

        for key in os.environ.keys():
            if key.startswith(ENV_PREFIX):
                info["env_overrides"].append(key)

        return info
