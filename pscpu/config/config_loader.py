"""
Configuration manager for the cpu monitor.

This module provides the ConfigLoader class for loading and validating the
monitor configuration from an optional YAML file, with command line values
taking precedence over the file.
"""
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from pscpu.config.monitor_config import MonitorConfig
from pscpu.consts.SamplerBackend import SamplerBackend
from pscpu.errors import ConfigError


class ConfigLoader:

    def __init__(self, config_file: Optional[Path] = None, env: Optional[str] = None):
        self.config_file = Path(config_file) if config_file else None
        self.env = env
        self.file_data = self._load_file()

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return data

    def _load_file(self) -> Dict[str, Any]:
        """
        Load the YAML config file, if any.
        Supports environment-specific overrides via <stem>_<env>.yaml

        Returns:
            Raw key/value pairs, empty when no file was given
        """
        if self.config_file is None:
            if self.env:
                raise ConfigError("--env requires --config")
            return {}

        data = self._read_yaml(self.config_file)

        # Load environment-specific override if specified
        if self.env:
            env_file = self.config_file.with_name(
                f"{self.config_file.stem}_{self.env}{self.config_file.suffix}"
            )
            # dict.update() will overwrite existing keys
            data.update(self._read_yaml(env_file))

        known = {f.name for f in fields(MonitorConfig)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
        return data

    def load(self, overrides: Optional[Dict[str, Any]] = None) -> MonitorConfig:
        """
        Build the MonitorConfig: defaults, then the file, then overrides.

        Args:
            overrides: Values from the command line; None values are ignored

        Returns:
            MonitorConfig: validated configuration
        """
        data = dict(self.file_data)
        for key, value in (overrides or {}).items():
            if value is not None:
                data[key] = value

        config = MonitorConfig()

        # Parse simple fields
        if "pid" in data:
            config.pid = self._positive_int(data["pid"], "pid")
        if "folder" in data:
            config.folder = str(data["folder"] or "")
        if "seconds" in data:
            config.seconds = self._positive_int(data["seconds"], "seconds")
        if "count" in data:
            config.count = self._positive_int(data["count"], "count", allow_zero=True)
        if "ps_command" in data:
            config.ps_command = str(data["ps_command"])
        if "sync" in data:
            config.sync = bool(data["sync"])
        if "log_file" in data:
            config.log_file = str(data["log_file"]) if data["log_file"] else None

        # Parse backend
        if "backend" in data:
            backend = data["backend"]
            try:
                config.backend = backend if isinstance(backend, SamplerBackend) else SamplerBackend(backend)
            except ValueError as e:
                choices = ", ".join(b.value for b in SamplerBackend)
                raise ConfigError(f"Invalid backend: {backend} (choose from {choices})") from e

        if config.pid is None:
            raise ConfigError("Invalid pid: a pid is required")

        return config

    @staticmethod
    def _positive_int(value: Any, name: str, allow_zero: bool = False) -> int:
        if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
            raise ConfigError(f"Invalid {name}: {value}")
        try:
            number = int(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid {name}: {value}") from e
        if number < 0 or (number == 0 and not allow_zero):
            raise ConfigError(f"Invalid {name}: {value}")
        return number
