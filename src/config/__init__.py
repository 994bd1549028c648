"""
Configuration for the bucket browser.

Bucket credentials, thumbnail parameters and mock switches are read
from the environment (or .env) by Settings.
"""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
