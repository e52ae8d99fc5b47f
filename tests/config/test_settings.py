"""Tests for configuration settings."""

import os as _os
import pathlib as _pathlib
import unittest.mock as _mock

import pydantic as _pydantic
import pytest as _pytest

import layerparams.codec as codec
import layerparams.config as config


class TestSettingsDefaults:
    """Settings default values when the environment is clean."""

    def test_defaults(self, clean_settings: config.Settings) -> None:
        """Defaults match the documented behavior."""
        assert clean_settings.output_format is codec.OutputFormat.YAML
        assert clean_settings.include_comments is False
        assert clean_settings.strict_root is False
        assert clean_settings.data_dir == _pathlib.Path("data")
        assert clean_settings.default_precedence == 0
        assert clean_settings.node_precedence == 1000
        assert clean_settings.log_level == "WARNING"


class TestSettingsEnvironment:
    """LAYERPARAMS_* environment variables."""

    def test_output_format_from_env(self, clean_env: dict[str, str]) -> None:
        """LAYERPARAMS_OUTPUT_FORMAT selects JSON output."""
        env = {**clean_env, "LAYERPARAMS_OUTPUT_FORMAT": "json"}
        with _mock.patch.dict(_os.environ, env, clear=True):
            settings = config.Settings.construct_without_dotenv()
        assert settings.output_format is codec.OutputFormat.JSON

    def test_flags_and_paths_from_env(self, clean_env: dict[str, str]) -> None:
        """Booleans, integers and paths are parsed from strings."""
        env = {
            **clean_env,
            "LAYERPARAMS_STRICT_ROOT": "true",
            "LAYERPARAMS_DATA_DIR": "/srv/params",
            "LAYERPARAMS_NODE_PRECEDENCE": "500",
        }
        with _mock.patch.dict(_os.environ, env, clear=True):
            settings = config.Settings.construct_without_dotenv()

        assert settings.strict_root is True
        assert settings.data_dir == _pathlib.Path("/srv/params")
        assert settings.node_precedence == 500

    def test_log_level_case_insensitive(self, clean_env: dict[str, str]) -> None:
        """Lowercase level names are accepted."""
        env = {**clean_env, "LAYERPARAMS_LOG_LEVEL": "debug"}
        with _mock.patch.dict(_os.environ, env, clear=True):
            settings = config.Settings.construct_without_dotenv()
        assert settings.log_level == "DEBUG"

    def test_invalid_format_rejected(self, clean_env: dict[str, str]) -> None:
        """Unknown formats fail validation."""
        env = {**clean_env, "LAYERPARAMS_OUTPUT_FORMAT": "toml"}
        with _mock.patch.dict(_os.environ, env, clear=True):
            with _pytest.raises(_pydantic.ValidationError):
                config.Settings.construct_without_dotenv()

    def test_constructor_beats_env(self, clean_env: dict[str, str]) -> None:
        """Explicit arguments take precedence over the environment."""
        env = {**clean_env, "LAYERPARAMS_STRICT_ROOT": "true"}
        with _mock.patch.dict(_os.environ, env, clear=True):
            settings = config.Settings.construct_without_dotenv(strict_root=False)
        assert settings.strict_root is False

    def test_unrelated_env_ignored(self, clean_env: dict[str, str]) -> None:
        """Unknown LAYERPARAMS_* variables do not break loading."""
        env = {**clean_env, "LAYERPARAMS_SOMETHING_ELSE": "x"}
        with _mock.patch.dict(_os.environ, env, clear=True):
            settings = config.Settings.construct_without_dotenv()
        assert settings.output_format is codec.OutputFormat.YAML


class TestEnvFile:
    """.env loading through LAYERPARAMS_ENV_FILE."""

    def test_explicit_env_file(self, tmp_path: _pathlib.Path, clean_env: dict[str, str]) -> None:
        """An env file passed explicitly is read."""
        env_file = tmp_path / "layerparams.env"
        env_file.write_text("LAYERPARAMS_OUTPUT_FORMAT=json\n", encoding="utf-8")

        with _mock.patch.dict(_os.environ, clean_env, clear=True):
            settings = config.Settings(_env_file=env_file)  # type: ignore[call-arg]

        assert settings.output_format is codec.OutputFormat.JSON
