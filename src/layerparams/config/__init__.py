"""
Configuration module for layerparams.

Uses pydantic-settings for environment variable loading.
"""

from layerparams.config.settings import Settings

__all__ = ["Settings"]
