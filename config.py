"""Configuration file loading and environment overrides."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional, Tuple

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from fieldprop.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "fieldprop.toml"
HOME_CONFIG_FILE_NAME = ".fieldprop.toml"

ENV_PREFIX = "FIELDPROP_"


class PropagationSettings(BaseSettings):
    """
    The ``[propagation]`` section of fieldprop.toml.

    Every field can be overridden by a FIELDPROP_-prefixed environment
    variable; environment values win over file values. FIELDPROP_EXTRA_FIELDS
    is a comma separated list.
    """

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="forbid")

    extra_fields: Annotated[List[str], NoDecode] = Field(default_factory=list)
    debug: bool = False

    @field_validator("extra_fields", mode="before")
    @classmethod
    def split_names(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("extra_fields")
    @classmethod
    def names_not_blank(cls, value: List[str]) -> List[str]:
        for name in value:
            if not name.strip():
                raise ValueError("extra field names must be non-empty")
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # File values arrive as init kwargs; the environment overrides them.
        return env_settings, init_settings


def find_config_file() -> Optional[str]:
    """
    Locate a config file.

    Looks for ./fieldprop.toml first, then ~/.fieldprop.toml.
    """
    candidates = [
        Path.cwd() / CONFIG_FILE_NAME,
        Path.home() / HOME_CONFIG_FILE_NAME,
    ]
    for candidate in candidates:
        if candidate.is_file():
            return str(candidate)
    return None


def load_toml_config(path: str) -> Dict[str, Any]:
    """
    Load a TOML config file.

    Returns an empty dict if the file does not exist; raises ConfigError if
    it cannot be parsed.
    """
    config_path = Path(path)
    if not config_path.is_file():
        return {}
    try:
        with config_path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError("Invalid TOML config file", {"path": path, "error": str(e)}) from e


def load_config(config_file: Optional[str] = None) -> PropagationSettings:
    """
    Load propagation settings from file and environment.

    Priority: environment variables > config file > defaults. Raises
    ConfigError if either source holds an invalid value.
    """
    path = config_file or find_config_file()
    loaded = load_toml_config(path) if path else {}
    if loaded:
        logger.debug(f"Loaded fieldprop config from {path}")

    section = loaded.get("propagation") or {}
    if not isinstance(section, dict):
        raise ConfigError("[propagation] must be a table", {"path": path})

    try:
        return PropagationSettings(**section)
    except ValidationError as e:
        raise ConfigError("Invalid fieldprop configuration", {"errors": e.errors(include_url=False)}) from e
