"""Configuration management for pagefetch.

This module provides configuration loading from:
1. Environment variables (PAGEFETCH_ prefix)
2. pagefetch.toml file (multiple locations)
3. Default values
"""

from .config import Backend, Settings, WaitUntil

__all__ = [
    "Backend",
    "Settings",
    "WaitUntil",
]
