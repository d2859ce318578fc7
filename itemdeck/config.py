"""
Config system - Layered typed configuration with validation.

Merge precedence (later overrides earlier):
defaults < JSON config file < .env file < environment variables < overrides
"""

from typing import Any, Dict, Optional, Type, get_args, get_origin
from dataclasses import dataclass, field, fields, is_dataclass, MISSING
from pathlib import Path
import json
import os
import types

from dotenv import dotenv_values


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


_TRUE_WORDS = ("true", "yes", "on", "1")
_FALSE_WORDS = ("false", "no", "off", "0")


# ============================================================================
# Typed settings
# ============================================================================

@dataclass
class CacheSettings:
    """Primary and secondary cache tiers."""
    use_distributed_cache: bool = False
    redis_url: str = "redis://localhost:6379/0"
    key_prefix: str = "itemdeck:"
    cache_duration_minutes: int = 10
    max_entries: int = 10000
    file_cache_duration_minutes: int = 30
    file_cache_path: str = "FileCache"


@dataclass
class StorageSettings:
    """Backing store selection and document-db connection."""
    backend: str = "memory"          # "memory" or "document-db"
    mongo_url: str = "mongodb://localhost:27017"
    database: str = "itemdeck"
    collection: str = "data_items"


@dataclass
class JwtSettings:
    """Token signing and validation."""
    secret_key: str = ""
    issuer: str = "itemdeck"
    audience: str = "itemdeck-clients"
    expiration_minutes: int = 60


@dataclass
class Settings:
    """Everything the core consumes."""
    cache: CacheSettings = field(default_factory=CacheSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    jwt: JwtSettings = field(default_factory=JwtSettings)


# ============================================================================
# Loader
# ============================================================================

class ConfigLoader:
    """
    Loads and merges configuration from multiple sources.

    Environment keys use a prefix and double underscores for nesting, so
    ``ITEMDECK_CACHE__USE_DISTRIBUTED_CACHE=true`` sets
    ``cache.use_distributed_cache``.
    """

    def __init__(self, env_prefix: str = "ITEMDECK_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        path: Optional[str] = None,
        env_prefix: str = "ITEMDECK_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
        environ: Optional[Dict[str, str]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from every source.

        Args:
            path: Optional JSON config file
            env_prefix: Prefix for environment variables
            env_file: Optional .env file
            overrides: Manual overrides (highest precedence)
            environ: Environment mapping (defaults to ``os.environ``)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        if path:
            loader._load_json_file(Path(path))

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env(os.environ if environ is None else environ)

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load prefixed keys from a .env file."""
        if not Path(path).exists():
            return
        for key, value in dotenv_values(path).items():
            if key.startswith(self.env_prefix) and value is not None:
                self._set_nested(key, value)

    def _load_from_env(self, environ):
        """Load config from environment variables."""
        for key, value in environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert ITEMDECK_CACHE__REDIS_URL to nested dict."""
        key = key[len(self.env_prefix):]
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        # Kept as text; converted by field type when settings are built
        current[parts[-1]] = value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current = self.config_data
        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def settings(self) -> Settings:
        """Build validated, typed settings."""
        return self._instantiate_dataclass(Settings, self.config_data)

    def _instantiate_dataclass(self, config_class: Type, data: dict):
        """Instantiate dataclass config with validation."""
        kwargs = {}

        for field_info in fields(config_class):
            name = field_info.name
            field_type = field_info.type

            if name in data:
                value = data[name]
                if is_dataclass(field_type):
                    if not isinstance(value, dict):
                        raise ConfigError(f"Config section '{name}' must be a mapping")
                    kwargs[name] = self._instantiate_dataclass(field_type, value)
                    continue

                if isinstance(value, str) and field_type is not str:
                    value = self._parse_text(name, value, field_type)
                elif field_type is str and isinstance(value, int) and not isinstance(value, bool):
                    value = str(value)
                elif field_type is bool and value in (0, 1):
                    value = bool(value)

                if not self._check_type(value, field_type):
                    raise ConfigError(
                        f"Config field '{name}' expected {getattr(field_type, '__name__', field_type)}, "
                        f"got {type(value).__name__}"
                    )
                kwargs[name] = value
            elif field_info.default is not MISSING:
                kwargs[name] = field_info.default
            elif field_info.default_factory is not MISSING:
                kwargs[name] = field_info.default_factory()
            else:
                raise ConfigError(f"Required config field '{name}' not provided")

        return config_class(**kwargs)

    def _parse_text(self, name: str, value: str, field_type: Any) -> Any:
        """Convert environment text to a non-string field type."""
        text = value.strip()
        if field_type is bool:
            if text.lower() in _TRUE_WORDS:
                return True
            if text.lower() in _FALSE_WORDS:
                return False
            raise ConfigError(f"Config field '{name}' expected bool, got {value!r}")
        if field_type in (int, float):
            try:
                return field_type(text)
            except ValueError:
                raise ConfigError(
                    f"Config field '{name}' expected {field_type.__name__}, got {value!r}"
                ) from None
        return value

    def _check_type(self, value: Any, expected_type: Any) -> bool:
        """Basic type checking."""
        origin = get_origin(expected_type)
        if origin is types.UnionType or str(origin) == "typing.Union":
            if value is None:
                return True
            args = get_args(expected_type)
            return self._check_type(value, args[0]) if args else True

        if origin:
            return isinstance(value, origin)

        if expected_type is int and isinstance(value, bool):
            return False

        try:
            return isinstance(value, expected_type)
        except TypeError:
            return True

    def to_dict(self) -> dict:
        """Export all config as dictionary."""
        return self.config_data.copy()


def load_settings(
    path: Optional[str] = None,
    env_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Settings:
    """Shortcut: ``ConfigLoader.load(...).settings()``."""
    return ConfigLoader.load(path=path, env_file=env_file, overrides=overrides).settings()
