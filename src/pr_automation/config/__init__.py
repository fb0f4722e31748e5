"""
Configuration loading for pr_automation.

Settings are read once from an optional JSON file in the user's home
directory plus environment overrides. See
:mod:`pr_automation.config.loader` for implementation details.
"""

from .loader import ConfigError, Settings, load_config  # noqa: F401
