"""Configuration management for assertkit.

Loads and validates assertkit.yaml configuration files.
"""

from __future__ import annotations

import logging
import os
import re
import threading
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from assertkit.diagnostics import ConfigError

logger = logging.getLogger(__name__)

MATCH_ENV_VAR = "ASSERTKIT_MATCH"

CONFIG_FILENAMES = (
    "assertkit.yaml",
    "assertkit.yml",
    ".assertkit.yaml",
    ".assertkit.yml",
)


class AssertionsConfig(BaseModel):
    """Configuration for assertion diagnostics."""

    max_value_length: int = Field(default=1000, ge=0)
    """Rendered values longer than this are truncated in diagnostics (0 disables)."""

    eventually_tick_ms: int = Field(default=10, gt=0)
    """Default tick interval for the eventually family."""


class SuiteConfig(BaseModel):
    """Configuration for the suite runner."""

    match: str | None = None
    """Regular expression selecting which test methods run."""

    test_prefix: str = "test"
    """Method-name prefix that marks a test method."""

    max_workers: int | None = Field(default=None, gt=0)
    """Worker threads used by run_parallel. None lets the executor decide."""

    timeout_ms: int | None = Field(default=None, gt=0)
    """Timeout applied to every test method (None disables)."""

    @field_validator("match")
    @classmethod
    def compile_match(cls, v: str | None) -> str | None:
        if v:
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f"invalid regexp for match: {e}") from e
        return v or None


class AssertkitConfig(BaseModel):
    """Root configuration for assertkit."""

    version: str = "0.1"
    """Config file version."""

    assertions: AssertionsConfig = Field(default_factory=AssertionsConfig)

    suite: SuiteConfig = Field(default_factory=SuiteConfig)

    debug_mode: bool = False
    """Enable verbose debug logging."""


def load_config(config_path: Path | None = None, project_root: Path | None = None) -> AssertkitConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Explicit path to config file. If None, searches for assertkit.yaml.
        project_root: Project root directory. Defaults to cwd.

    Returns:
        Parsed configuration. Returns default config if no file found.

    Raises:
        ConfigError: If the file is not valid YAML or fails validation.
    """
    project_root = project_root or Path.cwd()

    if config_path is None:
        for name in CONFIG_FILENAMES:
            candidate = project_root / name
            if candidate.exists():
                config_path = candidate
                break

    data: dict[str, Any] = {}
    if config_path is not None and config_path.exists():
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
            logger.debug("loaded configuration from %s", config_path)
        except yaml.YAMLError as e:
            raise ConfigError(f"Cannot parse {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} must contain a mapping, got {type(data).__name__}")

    match = os.environ.get(MATCH_ENV_VAR)
    if match:
        suite = data.get("suite") or {}
        if isinstance(suite, dict):
            data["suite"] = {**suite, "match": match}

    try:
        return AssertkitConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid assertkit configuration: {e}") from e


_config: AssertkitConfig | None = None
_config_lock = threading.Lock()


def get_config() -> AssertkitConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = load_config()
    return _config


def set_config(config: AssertkitConfig | None) -> None:
    """Replace the process-wide configuration. None forces a reload on next use."""
    global _config
    with _config_lock:
        _config = config
