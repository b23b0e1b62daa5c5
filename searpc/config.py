"""
Configuration management for searpc.

Loads config.yaml from the searpc home directory and builds a Server
with the receivers it lists.

Example config.yaml:
    services:
      - myapp.services:Math
      - myapp.services:math_service
    log_level: INFO
    log_format: pretty
    log_file: ~/.local/state/searpc/searpc.log
    console: true
"""

import importlib
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from searpc.server import Server


LOG_FORMATS = ("structured", "pretty")


class ConfigError(Exception):
    """Configuration validation error."""
    pass


@dataclass
class SearpcConfig:
    """
    searpc configuration.

    Attributes:
        services: Import paths ("module:attr") of receivers to register.
                  A class is instantiated with no arguments; any other
                  object is registered as-is.
        log_level: Logging level name
        log_format: "structured" (JSON) or "pretty" (rich console)
        log_file: Optional log file path
        console: Also log to console
    """
    services: list[str] = field(default_factory=list)
    log_level: str = "INFO"
    log_format: str = "pretty"
    log_file: Optional[str] = None
    console: bool = True

    def validate(self) -> None:
        """Validate field values."""
        if not isinstance(self.services, list) or not all(isinstance(s, str) for s in self.services):
            raise ConfigError("'services' must be a list of 'module:attr' strings")
        for spec in self.services:
            if spec.count(":") != 1 or not all(spec.split(":")):
                raise ConfigError(f"Invalid service import path: {spec!r} (expected 'module:attr')")
        if self.log_format not in LOG_FORMATS:
            raise ConfigError(f"Invalid log_format: {self.log_format!r} (expected one of {LOG_FORMATS})")
        if not isinstance(self.log_level, str) or not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigError(f"Invalid log_level: {self.log_level!r}")

    def get_log_file_path(self) -> Optional[Path]:
        """Log file path with ~ expanded, or None."""
        if not self.log_file:
            return None
        return Path(self.log_file).expanduser()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearpcConfig":
        valid_fields = {f.name for f in fields(cls)}
        unknown = set(data) - valid_fields
        if unknown:
            raise ConfigError(f"Unknown config keys: {sorted(unknown)}")
        config = cls(**data)
        config.validate()
        return config


def get_searpc_home() -> Path:
    """searpc home directory ($SEARPC_HOME or ~/.config/searpc)."""
    env_home = os.environ.get("SEARPC_HOME")
    if env_home:
        return Path(env_home).expanduser()
    return Path("~/.config/searpc").expanduser()


def load_config(config_path: Optional[Path] = None) -> SearpcConfig:
    """
    Load configuration from YAML.

    Args:
        config_path: Path to config file. Defaults to <searpc home>/config.yaml

    Returns:
        SearpcConfig instance

    Raises:
        FileNotFoundError: If the config file does not exist
        ConfigError: If the config is invalid
    """
    if config_path is None:
        config_path = get_searpc_home() / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"searpc config.yaml not found: {config_path}")

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if not isinstance(data, dict):
        raise ConfigError("Configuration file must contain a mapping")

    return SearpcConfig.from_dict(data)


def import_receiver(spec: str) -> Any:
    """
    Import a receiver from a "module:attr" path.

    Classes are instantiated with no arguments.

    Raises:
        ConfigError: If the module or attribute cannot be found
    """
    module_name, _, attr = spec.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import service module {module_name!r}: {e}")
    try:
        target = getattr(module, attr)
    except AttributeError:
        raise ConfigError(f"Module {module_name!r} has no attribute {attr!r}")
    if isinstance(target, type):
        return target()
    return target


def build_server(config: SearpcConfig) -> Server:
    """
    Create a Server and register every configured receiver.

    Raises:
        ConfigError: If a receiver cannot be imported
        RegistrationError: If a receiver cannot be registered
    """
    server = Server()
    for spec in config.services:
        server.register(import_receiver(spec))
    return server
