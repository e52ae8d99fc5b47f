"""
Shared pytest fixtures for layerparams tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import pathlib as _pathlib
import textwrap as _textwrap
import unittest.mock as _mock

import pytest as _pytest

import layerparams.config as config
import layerparams.merger as merger

# Environment keys that should be cleared for isolated tests
ENV_PREFIX = "LAYERPARAMS_"


@_pytest.fixture
def clean_env() -> dict[str, str]:
    """
    Return environment dict with layerparams settings removed.

    Use with mock.patch.dict to isolate tests from the actual environment.
    """
    return {k: v for k, v in _os.environ.items() if not k.startswith(ENV_PREFIX)}


@_pytest.fixture
def isolated_env(clean_env: dict[str, str]):
    """
    Context manager that isolates tests from environment variables.

    Usage:
        def test_something(isolated_env):
            with isolated_env:
                settings = config.Settings.construct_without_dotenv()
    """
    return _mock.patch.dict(_os.environ, clean_env, clear=True)


@_pytest.fixture
def clean_settings(isolated_env) -> config.Settings:
    """
    Settings instance isolated from environment and .env file.

    This fixture ensures tests get predictable default settings.
    """
    with isolated_env:
        return config.Settings.construct_without_dotenv()


@_pytest.fixture
def parameter_merger() -> merger.ParameterMerger:
    """A fresh ParameterMerger."""
    return merger.ParameterMerger()


@_pytest.fixture
def make_source():
    """Factory for ParameterSource objects with dedented content."""

    def _make(scope_name: str, precedence: int, content: str) -> merger.ParameterSource:
        return merger.ParameterSource(
            scope_name=scope_name,
            precedence=precedence,
            content=_textwrap.dedent(content),
        )

    return _make


@_pytest.fixture
def store_root(tmp_path: _pathlib.Path) -> _pathlib.Path:
    """
    A data directory with a small scope tree for configuration "web".

    Layout:
        parameters/web/Default/parameters.yaml
        parameters/web/Environment/Production/parameters.yaml
        parameters/web/Region/eu-west/parameters.yaml
        parameters/web/Node/web01.example.com/parameters.yaml
    """
    base = tmp_path / "data" / "parameters" / "web"
    files = {
        base / "Default" / "parameters.yaml": (
            "server:\n  host: localhost\n  port: 8080\nlogLevel: info\n"
        ),
        base / "Environment" / "Production" / "parameters.yaml": (
            "server:\n  host: prod.example.com\nlogLevel: warning\n"
        ),
        base / "Region" / "eu-west" / "parameters.yaml": (
            "server:\n  timezone: Europe/Dublin\n"
        ),
        base / "Node" / "web01.example.com" / "parameters.yaml": (
            "server:\n  port: 9090\n"
        ),
    }
    for path, content in files.items():
        path.parent.mkdir(parents=True)
        path.write_text(content, encoding="utf-8")
    return tmp_path / "data"
