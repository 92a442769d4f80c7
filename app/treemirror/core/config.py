"""Mirror configuration and settings.

This module provides the configuration model and I/O functions for the
tree mirror. The only recognized option is the polling interval, which
bounds how stale the mirror can get when nothing mutates it.

Configuration is stored in ~/.config/treemirror/config.toml
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from treemirror.core.errors import TreeMirrorError
from treemirror.core.paths import get_config_path
from treemirror.core.subscriptions import DEFAULT_INTERVAL_MS


class MirrorConfig(BaseModel):
    """Configuration for a TreeMirror.

    Attributes:
        interval: Polling period in milliseconds.
    """

    model_config = ConfigDict(extra="forbid")

    interval: Annotated[
        int,
        Field(gt=0, description="Polling period in milliseconds"),
    ] = DEFAULT_INTERVAL_MS


class MirrorConfigError(TreeMirrorError):
    """Base exception for mirror configuration errors."""


class MirrorConfigNotFoundError(MirrorConfigError):
    """Raised when the config file is not found."""


class MirrorConfigParseError(MirrorConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> MirrorConfig:
    """Load mirror configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated MirrorConfig object.

    Raises:
        MirrorConfigNotFoundError: If the config file doesn't exist.
        MirrorConfigParseError: If the TOML syntax is invalid.
        MirrorConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise MirrorConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise MirrorConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise MirrorConfigError(f"Failed to read config: {e}") from e

    try:
        return MirrorConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise MirrorConfigError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> MirrorConfig:
    """Load configuration, falling back to defaults when no file exists.

    Raises:
        MirrorConfigParseError: If the file exists but is not valid TOML.
        MirrorConfigError: If the file exists but doesn't match the schema.
    """
    try:
        return load_config(path)
    except MirrorConfigNotFoundError:
        return MirrorConfig()


def save_config(config: MirrorConfig, path: Path | None = None) -> Path:
    """Save mirror configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The MirrorConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        MirrorConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(config.model_dump(), f)
        # os.replace() is atomic on POSIX
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise MirrorConfigError(f"Failed to write config: {e}") from e

    return config_path
