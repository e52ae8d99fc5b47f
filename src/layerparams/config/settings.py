"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with LAYERPARAMS_ prefix
3. .env file (if LAYERPARAMS_ENV_FILE points at one)
4. Field defaults (lowest precedence)

Example:
  LAYERPARAMS_OUTPUT_FORMAT=json
  LAYERPARAMS_STRICT_ROOT=true
  LAYERPARAMS_DATA_DIR=/srv/params
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import layerparams.codec as codec
import layerparams.constants as constants

ENV_FILE_VAR = "LAYERPARAMS_ENV_FILE"


def _get_env_file() -> str | None:
    """Determine which .env file to load.

    Only an explicit LAYERPARAMS_ENV_FILE is honored. If it is set but the
    file does not exist, nothing is loaded rather than falling back silently.
    """
    if env_file := _os.environ.get(ENV_FILE_VAR):
        if _pathlib.Path(env_file).exists():
            return env_file
    return None


class Settings(_pydantic_settings.BaseSettings):
    """
    Ambient configuration for layerparams.

    Config precedence (highest to lowest):
    1. Constructor arguments
    2. Environment variables (LAYERPARAMS_*)
    3. .env file
    4. Field defaults
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="LAYERPARAMS_",
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> "Settings":
        """Create Settings from environment variables only, without loading .env file.

        Useful for test isolation and for reproducing issues without .env
        interference.
        """
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]

    output_format: codec.OutputFormat = _pydantic.Field(
        default=codec.OutputFormat.YAML,
        description="Format of merged documents (yaml or json)",
    )

    include_comments: bool = _pydantic.Field(
        default=False,
        description="Accepted for compatibility; has no effect on output",
    )

    strict_root: bool = _pydantic.Field(
        default=False,
        description="Fail on documents whose root is not a mapping",
    )

    data_dir: _pathlib.Path = _pydantic.Field(
        default=_pathlib.Path(constants.DEFAULT_DATA_DIR),
        description="Root directory of the scope parameter store",
    )

    default_precedence: int = _pydantic.Field(
        default=constants.DEFAULT_SCOPE_PRECEDENCE,
        description="Precedence assigned to the Default scope",
    )

    node_precedence: int = _pydantic.Field(
        default=constants.NODE_SCOPE_PRECEDENCE,
        description="Precedence assigned to the Node scope",
    )

    log_level: _typing.Literal["DEBUG", "INFO", "WARNING", "ERROR"] = _pydantic.Field(
        default="WARNING",
        description="Log level used by the command line",
    )

    @_pydantic.field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: _typing.Any) -> _typing.Any:
        if isinstance(value, str):
            return value.upper()
        return value
