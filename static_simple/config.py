"""
Config system - Layered configuration resolved into an immutable StaticConfig.

Sources merge with precedence:
overrides > environment variables > .env file > config files (YAML/JSON)

Static options may live in a ``static`` section or at top level:

    root: /srv/app/root
    static:
      dirs: [static, "qr/^(images|css)/"]
      include_path: [/srv/overlay, /srv/app/root]
      mime_types: {jpg: image/jpg}
      use_native: false
      debug: true
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field
from glob import glob
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

import yaml
from dotenv import dotenv_values

from .faults import ConfigInvalidFault
from .matching import DirRule, parse_rule
from .search import DirectoryProvider, DynamicDirectories, StaticDirectories

STATIC_KEYS = ("dirs", "include_path", "mime_types", "use_native", "use_apache", "debug")


@dataclass(frozen=True)
class StaticConfig:
    """
    Process-wide static file configuration, immutable after setup.

    Attributes:
        root: Application root (absolute)
        dirs: Rules forcing paths into static mode, first match wins
        include_path: Ordered search path
        mime_types: Extension to MIME type overrides
        use_native: Delegate eligible files to the embedding server
        debug: Collect and log per-request traces
    """

    root: Path
    dirs: Tuple[DirRule, ...] = ()
    include_path: Tuple[DirectoryProvider, ...] = ()
    mime_types: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    use_native: bool = False
    debug: bool = False

    @classmethod
    def from_mapping(
        cls,
        data: Optional[Mapping[str, Any]] = None,
        *,
        root: Union[str, os.PathLike],
        debug: bool = False,
    ) -> "StaticConfig":
        """
        Validate raw options and compile them once.

        Args:
            data: Raw ``static`` options
            root: Application root; the default include path
            debug: Host debug flag, used when ``debug`` is not configured

        Raises:
            ConfigInvalidFault: malformed rule, unknown entry or wrong type
        """
        data = data or {}
        root_path = Path(root).absolute()

        dirs = data.get("dirs") or []
        if not isinstance(dirs, (list, tuple)):
            raise ConfigInvalidFault("static.dirs", f"expected a list, got {type(dirs).__name__}")

        include_path = data.get("include_path")
        if include_path is None:
            include_path = [root_path]
        elif not isinstance(include_path, (list, tuple)):
            raise ConfigInvalidFault(
                "static.include_path", f"expected a list, got {type(include_path).__name__}"
            )

        mime_types = data.get("mime_types") or {}
        if not isinstance(mime_types, Mapping):
            raise ConfigInvalidFault(
                "static.mime_types", f"expected a mapping, got {type(mime_types).__name__}"
            )
        for ext, mime in mime_types.items():
            if not isinstance(ext, str) or not isinstance(mime, str):
                raise ConfigInvalidFault("static.mime_types", f"invalid entry {ext!r}: {mime!r}")

        use_native = data.get("use_native", data.get("use_apache", False))
        configured_debug = data.get("debug")

        return cls(
            root=root_path,
            dirs=tuple(parse_rule(rule) for rule in dirs),
            include_path=tuple(_parse_include(entry) for entry in include_path),
            mime_types=MappingProxyType(dict(mime_types)),
            use_native=_as_bool("static.use_native", use_native),
            debug=debug if configured_debug is None else _as_bool("static.debug", configured_debug),
        )


def _parse_include(entry: Any) -> DirectoryProvider:
    if isinstance(entry, (StaticDirectories, DynamicDirectories)):
        return entry
    if isinstance(entry, (str, os.PathLike)):
        return StaticDirectories((entry,))
    if callable(entry):
        return DynamicDirectories(entry)
    raise ConfigInvalidFault("static.include_path", f"unsupported entry {entry!r}")


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, (bool, int)):
        return bool(value)
    raise ConfigInvalidFault(key, f"expected a boolean, got {value!r}")


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > .env file > config files
    """

    def __init__(self, env_prefix: str = "STATIC_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "STATIC_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources.

        Args:
            paths: Config file paths (glob patterns supported)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        for pattern in paths or []:
            loader._load_from_files(pattern)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_from_files(self, pattern: str):
        """Load config from JSON or YAML files."""
        matches = sorted(glob(pattern))
        if not matches and not any(ch in pattern for ch in "*?["):
            raise ConfigInvalidFault("config", f"file not found: {pattern}")

        for path_str in matches:
            path = Path(path_str)
            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
        if data:
            self._merge_dict(self.config_data, data)

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ConfigInvalidFault("config", f"{path}: {exc}") from exc
        if data:
            self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load prefixed keys from a .env file."""
        if not Path(path).exists():
            return

        for key, value in dotenv_values(path).items():
            if value is not None and key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert STATIC_STATIC__MIME_TYPES to a nested dict entry."""
        key = key[len(self.env_prefix):]

        # Double underscore separates nesting levels
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes", "1"):
            return True
        if value.lower() in ("false", "no", "0"):
            return False

        if re.fullmatch(r"-?\d+", value):
            return int(value)
        if re.fullmatch(r"-?\d+\.\d*", value):
            return float(value)

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

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

    def static_options(self) -> Dict[str, Any]:
        """Static options: the ``static`` section over top-level keys."""
        options = {key: self.config_data[key] for key in STATIC_KEYS if key in self.config_data}
        section = self.config_data.get("static") or {}
        if not isinstance(section, dict):
            raise ConfigInvalidFault("static", "expected a mapping")
        options.update(section)
        return options

    def static_config(
        self,
        root: Optional[Union[str, os.PathLike]] = None,
        *,
        debug: bool = False,
        generators: Optional[Mapping[str, Callable[[Any], Any]]] = None,
    ) -> StaticConfig:
        """
        Build the immutable StaticConfig.

        Args:
            root: Application root; falls back to the ``root`` key, then cwd
            debug: Host debug flag
            generators: Named include path generators; an include path
                        entry ``"@name"`` refers to ``generators["name"]``
        """
        options = self.static_options()
        include_path = options.get("include_path")
        if include_path is not None and isinstance(include_path, (list, tuple)):
            options["include_path"] = [
                _named_generator(entry, generators or {}) for entry in include_path
            ]
        return StaticConfig.from_mapping(
            options,
            root=root or self.get("root") or Path.cwd(),
            debug=debug,
        )

    def to_dict(self) -> dict:
        """Export all config as dictionary."""
        return self.config_data.copy()


def _named_generator(entry: Any, generators: Mapping[str, Callable[[Any], Any]]) -> Any:
    if isinstance(entry, str) and entry.startswith("@"):
        name = entry[1:]
        if name not in generators:
            raise ConfigInvalidFault("static.include_path", f"unknown generator {entry!r}")
        return generators[name]
    return entry
