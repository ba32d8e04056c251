"""Compiler configuration.

Settings come, in increasing priority, from defaults, ``DECLIENT_*``
environment variables, a ``declient.toml`` / JSON file and explicit
keyword arguments.
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ROOT_NAMESPACE = "declient.generated"
DEFAULT_SOURCE_FILE_PATH = "./declient-generated"
CONFIG_FILE_NAMES = ("declient.toml", ".declientrc")


class CompilerConfig(BaseSettings):
    """Immutable snapshot of the generator options.

    Example:
        >>> config = CompilerConfig(output_source_files=True, source_file_path="build/clients")
        >>> config.root_namespace
        'declient.generated'
    """

    model_config = SettingsConfigDict(
        env_prefix="DECLIENT_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    root_namespace: str = Field(
        default=DEFAULT_ROOT_NAMESPACE,
        description="Module name given to generated client modules",
    )
    source_file_path: str = Field(
        default=DEFAULT_SOURCE_FILE_PATH,
        description="Directory generated sources are written to",
    )
    generate_sealed_classes: bool = Field(
        default=False,
        description="Decorate generated classes with typing.final",
    )
    output_source_files: bool = Field(
        default=False,
        description="Persist generated sources to source_file_path",
    )

    @field_validator("root_namespace", mode="before")
    @classmethod
    def _default_namespace(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_ROOT_NAMESPACE
        return value

    @field_validator("source_file_path", mode="before")
    @classmethod
    def _default_source_path(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_SOURCE_FILE_PATH
        return str(value)


def _read_json_config(path: Path) -> Dict[str, Any]:
    content = path.read_text(encoding="utf-8")
    return json.loads(content)


def _read_toml_config(path: Path) -> Dict[str, Any]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def locate_config_file(root: Path, explicit: Optional[Path] = None) -> Optional[Path]:
    if explicit is not None:
        return explicit if explicit.exists() else None
    for candidate in CONFIG_FILE_NAMES:
        path = root / candidate
        if path.exists():
            return path
    return None


def load_compiler_config(path: Optional[Path] = None, **overrides: Any) -> CompilerConfig:
    """Build a ``CompilerConfig`` from a config file plus keyword overrides.

    The file may hold the options in a ``[declient]`` table or at top level.
    Without an explicit path, ``declient.toml`` and ``.declientrc`` are looked
    up in the working directory. An explicit path that does not exist raises
    ``FileNotFoundError``.
    """
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
    config_path = locate_config_file(Path.cwd(), path)

    data: Dict[str, Any] = {}
    if config_path is not None:
        if config_path.suffix == ".toml":
            raw = _read_toml_config(config_path)
        else:
            raw = _read_json_config(config_path)
        section = raw.get("declient")
        data = dict(section if isinstance(section, dict) else raw)

    data.update({key: value for key, value in overrides.items() if value is not None})
    return CompilerConfig(**data)


__all__ = [
    "CONFIG_FILE_NAMES",
    "CompilerConfig",
    "DEFAULT_ROOT_NAMESPACE",
    "DEFAULT_SOURCE_FILE_PATH",
    "load_compiler_config",
    "locate_config_file",
]
