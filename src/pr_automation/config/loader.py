"""
Configuration loader for pr_automation.

Settings come from an optional JSON file named ``config.json`` in the
``~/.pr_automation/`` directory, followed by environment variable
overrides (``GITHUB_TOKEN``, ``GITHUB_API_URL``, ``APP_BASE_URL``). The
overrides may also be kept in a project ``.env`` file, found by searching
upwards from the working directory; variables set in the process
environment take precedence over it. The result is an immutable
:class:`Settings` object that the CLI builds once and hands to every
collaborator.

A missing file simply yields defaults. A malformed file or a value of the
wrong type raises :class:`ConfigError`.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from dotenv import dotenv_values, find_dotenv


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")

ENV_OVERRIDES = {
    "GITHUB_TOKEN": "github_token",
    "GITHUB_API_URL": "api_url",
    "APP_BASE_URL": "app_base_url",
}


class ConfigError(Exception):
    """Raised when the configuration file is malformed or invalid."""

    pass


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the PR workflow.

    Attributes
    ----------
    github_token : str, optional
        Token used for GitHub API calls.
    api_url : str
        Base URL of the GitHub REST API.
    app_base_url : str
        URL of the deployed preview that browser checks run against.
    request_timeout : float
        Timeout in seconds for HTTP requests.
    browser_timeout_ms : int
        Navigation timeout in milliseconds for browser checks.
    browsers : Tuple[str, ...]
        Browser engines to run checks in, in order.
    """

    github_token: Optional[str] = None
    api_url: str = "https://api.github.com"
    app_base_url: str = "http://localhost:3000"
    request_timeout: float = 30.0
    browser_timeout_ms: int = 30000
    browsers: Tuple[str, ...] = SUPPORTED_BROWSERS


def _get_config_directory() -> Path:
    """Return the directory holding the user-level configuration file."""
    return Path.home() / ".pr_automation"


def _validate(data: Dict[str, Any]) -> Dict[str, Any]:
    """Check value types and return the keys understood by :class:`Settings`."""
    for key in ("github_token", "api_url", "app_base_url"):
        if key in data and not isinstance(data[key], str):
            raise ConfigError(f"'{key}' must be a string")
    if "request_timeout" in data and (
        isinstance(data["request_timeout"], bool)
        or not isinstance(data["request_timeout"], (int, float))
    ):
        raise ConfigError("'request_timeout' must be a number")
    if "browser_timeout_ms" in data and (
        isinstance(data["browser_timeout_ms"], bool)
        or not isinstance(data["browser_timeout_ms"], int)
    ):
        raise ConfigError("'browser_timeout_ms' must be an integer")

    values: Dict[str, Any] = {
        key: data[key]
        for key in ("github_token", "api_url", "app_base_url", "browser_timeout_ms")
        if key in data
    }
    if "request_timeout" in data:
        values["request_timeout"] = float(data["request_timeout"])
    if "browsers" in data:
        browsers = data["browsers"]
        if not isinstance(browsers, list) or not all(isinstance(b, str) for b in browsers):
            raise ConfigError("'browsers' must be a list of strings")
        unknown = [b for b in browsers if b not in SUPPORTED_BROWSERS]
        if unknown:
            raise ConfigError(
                f"Unsupported browsers: {', '.join(unknown)}. "
                f"Choose from: {', '.join(SUPPORTED_BROWSERS)}"
            )
        values["browsers"] = tuple(browsers)
    return values


def _read_environment() -> Dict[str, str]:
    """Return the process environment layered over the nearest ``.env`` file."""
    env: Dict[str, str] = {}
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        logger.debug("Reading environment file: %s", dotenv_path)
        env.update((key, value) for key, value in dotenv_values(dotenv_path).items() if value is not None)
    env.update(os.environ)
    return env


def load_config(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Load settings from ``~/.pr_automation/config.json`` and the environment.

    Parameters
    ----------
    environ : Mapping[str, str], optional
        Environment to read overrides from. Defaults to ``os.environ``
        layered over the nearest ``.env`` file.

    Returns
    -------
    Settings
        The validated settings. Environment values win over file values.

    Raises
    ------
    ConfigError
        If the configuration file cannot be read, is not a JSON object,
        or contains values of the wrong type.
    """
    env = _read_environment() if environ is None else environ
    settings = Settings()

    config_path = _get_config_directory() / "config.json"
    if config_path.exists():
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Failed to read or parse configuration file: %s", exc)
            raise ConfigError(f"Invalid JSON in {config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} must contain a JSON object")
        settings = replace(settings, **_validate(data))
        logger.debug("Loaded configuration from: %s", config_path)
    else:
        logger.debug("No configuration file at %s; using defaults", config_path)

    overrides = {field: env[name] for name, field in ENV_OVERRIDES.items() if env.get(name)}
    if overrides:
        logger.debug("Applying environment overrides: %s", sorted(overrides))
        settings = replace(settings, **overrides)
    return settings
