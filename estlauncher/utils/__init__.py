# Est Launcher Utilities Package
"""
Shared utility functions and helpers for the Est launcher.
"""

from .helpers import load_settings, open_url

__all__ = ["load_settings", "open_url"]
