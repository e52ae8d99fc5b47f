"""
CLI module for layerparams.

Provides the command-line interface using Click.
"""

from layerparams.cli.main import cli, main

__all__ = ["main", "cli"]
