"""
Configuration loader with deep merge.

Precedence (lowest to highest):
1. Defaults (Pydantic schemas)
2. YAML file
3. Environment variables
4. CLI arguments
"""

import os
from pathlib import Path
from typing import Any

import yaml

from .schema import AppConfig


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two dicts. ``override`` wins on leaf conflicts.

    Example:
        >>> deep_merge({"a": {"b": 1, "c": 2}}, {"a": {"b": 99}, "d": 4})
        {'a': {'b': 99, 'c': 2}, 'd': 4}
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_config(config_path: Path | None) -> dict[str, Any]:
    """Load configuration from a YAML file, or {} when no path is given.

    Raises:
        FileNotFoundError: If config_path does not exist
    """
    if not config_path:
        return {}

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
        return data if data else {}


def load_env_overrides() -> dict[str, Any]:
    """Load overrides from environment variables.

    Supported variables:
        FILETREE_LOG_LEVEL: logging.level
        FILETREE_ENTRIES: source.entries
        FILETREE_REMOTE_URL: remote.url
        FILETREE_PORT: server.port
    """
    overrides: dict[str, Any] = {}

    if log_level := os.environ.get("FILETREE_LOG_LEVEL"):
        overrides.setdefault("logging", {})["level"] = log_level.lower()

    if entries := os.environ.get("FILETREE_ENTRIES"):
        overrides.setdefault("source", {})["entries"] = entries

    if remote_url := os.environ.get("FILETREE_REMOTE_URL"):
        overrides.setdefault("remote", {})["url"] = remote_url

    if port := os.environ.get("FILETREE_PORT"):
        overrides.setdefault("server", {})["port"] = port

    return overrides


def apply_cli_overrides(config_dict: dict[str, Any], cli_args: dict[str, Any]) -> dict[str, Any]:
    """Apply overrides from CLI arguments. None values are ignored."""
    overrides: dict[str, Any] = {}

    if cli_args.get("entries"):
        overrides.setdefault("source", {})["entries"] = cli_args["entries"]

    if cli_args.get("remote"):
        overrides.setdefault("remote", {})["url"] = cli_args["remote"]

    if cli_args.get("binary"):
        overrides.setdefault("remote", {})["binary"] = True

    if cli_args.get("host"):
        overrides.setdefault("server", {})["host"] = cli_args["host"]

    if cli_args.get("port") is not None:
        overrides.setdefault("server", {})["port"] = cli_args["port"]

    if cli_args.get("log_level"):
        overrides.setdefault("logging", {})["level"] = cli_args["log_level"]

    if cli_args.get("log_file"):
        overrides.setdefault("logging", {})["file"] = cli_args["log_file"]

    if cli_args.get("verbose"):
        overrides.setdefault("logging", {})["verbose"] = cli_args["verbose"]

    return deep_merge(config_dict, overrides)


def load_config(
    config_path: Path | None = None,
    cli_args: dict[str, Any] | None = None,
) -> AppConfig:
    """Load and validate the full application configuration.

    Raises:
        FileNotFoundError: If config_path does not exist
        ValidationError: If the merged configuration is invalid
    """
    cli_args = cli_args or {}

    merged = deep_merge(load_yaml_config(config_path), load_env_overrides())
    merged = apply_cli_overrides(merged, cli_args)

    return AppConfig(**merged)
