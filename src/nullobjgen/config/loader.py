"""
Configuration loader for NullObjGen.

Reads YAML into NullObjConfig and writes starter files.
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import NullObjConfig


class ConfigurationError(Exception):
    """Raised when a configuration file cannot be used."""

    pass


def load_config_from_yaml(config_path: Path) -> NullObjConfig:
    """
    Load and validate a YAML configuration file.

    Sections left out of the file keep their defaults.

    Raises:
        ConfigurationError: If the file is missing, empty, not YAML or fails validation
    """
    if not config_path.is_file():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if raw is None:
        raise ConfigurationError(f"Configuration file {config_path} is empty")
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"{config_path} must contain a mapping at the top level, got {type(raw).__name__}"
        )

    try:
        config = NullObjConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed for {config_path}:\n{e}") from e

    _check_async_conventions(config)
    return config


def _check_async_conventions(config: NullObjConfig) -> None:
    # Keys are matched against the simple name of a non-generic return type
    for name, value in config.synthesis.async_conventions.items():
        if not name or "." in name or "<" in name:
            raise ConfigurationError(
                f"Async convention keys must be simple type names, got '{name}'"
            )
        if not value.strip():
            raise ConfigurationError(f"Async convention '{name}' has an empty completed value")


def load_config(config_path: Path | None = None) -> NullObjConfig:
    """Load configuration from YAML when a path is given, otherwise use defaults."""
    if config_path is None:
        return NullObjConfig()
    return load_config_from_yaml(config_path)


def generate_default_config(output_path: Path, source_root: Path = Path("./Assets/Scripts")) -> None:
    """Write a configuration file holding every default, rooted at a Unity scripts folder."""
    config = NullObjConfig()
    config.source.root = source_root
    config.output.directory = source_root / "Generated"

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        yaml.safe_dump(config.model_dump(mode="json"), default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
