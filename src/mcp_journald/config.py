"""Configuration loading for MCP Journald.

Settings come from, in increasing precedence:
1. Built-in defaults
2. A .toml or .json config file in the project root (or given explicitly)
3. JOURNALD_* environment variables
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Any, Mapping, Optional

# Python 3.11+ has tomllib in stdlib; fall back to tomli for older versions
try:
    import tomllib  # Python 3.11+
except ImportError:
    try:
        import tomli as tomllib  # Python <3.11
    except ImportError:  # pragma: no cover
        tomllib = None

from .models import DEFAULT_LINE_LIMIT, resolve_timezone

BACKENDS = ("journalctl", "fake")

ENV_ALLOWED_UNITS = "JOURNALD_ALLOWED_UNITS"
ENV_TIMEZONE = "JOURNALD_TIMEZONE"


class JournalError(Exception):
    """Base exception for journal operations."""
    pass


class ConfigError(JournalError):
    """Raised when configuration values are invalid."""
    pass


@dataclass
class EngineConfig:
    """Settings shared by every query an engine runs.

    Built once at startup and only read afterwards.
    """

    # External tools
    journalctl_path: str = "journalctl"
    systemctl_path: str = "systemctl"
    command_timeout: Optional[float] = None  # Seconds; None waits forever

    # Upper bound on entries per query
    line_limit: int = DEFAULT_LINE_LIMIT

    # Units whose entries may be returned (None = all)
    allowed_units: Optional[list[str]] = None

    # Display timezone: local, utc, GMT+H[:MM], or an IANA name
    timezone: str = "local"

    # "journalctl" or "fake" (synthetic data, no journal needed)
    backend: str = "journalctl"
    fake_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.allowed_units is not None:
            cleaned = [u.strip() for u in self.allowed_units if u and u.strip()]
            self.allowed_units = cleaned or None
        self.validate()

    def validate(self) -> None:
        """Check field values.

        Raises:
            ConfigError: If any value is out of range
        """
        if self.backend not in BACKENDS:
            raise ConfigError(f"Unknown backend '{self.backend}'. Available: {list(BACKENDS)}")
        if self.line_limit <= 0:
            raise ConfigError(f"line_limit must be positive, got {self.line_limit}")
        if self.command_timeout is not None and self.command_timeout <= 0:
            raise ConfigError(f"command_timeout must be positive, got {self.command_timeout}")

    def get_tzinfo(self) -> Optional[tzinfo]:
        """Display timezone; None means local time."""
        return resolve_timezone(self.timezone)


def split_units(value: str) -> list[str]:
    """Split a whitespace- or comma-separated unit list."""
    return [u for u in re.split(r"[\s,]+", value) if u]


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from TOML file."""
    if tomllib is None:
        raise ImportError("tomli required for TOML config: pip install tomli")
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def dict_to_config(data: dict[str, Any]) -> EngineConfig:
    """Convert dictionary to EngineConfig.

    Expected layout::

        [journal]
        journalctl = "journalctl"
        systemctl = "systemctl"
        line_limit = 5000
        timeout = 30

        [access]
        allowed_units = ["nginx", "sshd.service"]

        [display]
        timezone = "utc"

        [backend]
        type = "fake"
        seed = 42

    Raises:
        ConfigError: If a value has the wrong type or is out of range
    """
    try:
        return EngineConfig(**_config_values(data))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def _config_values(data: dict[str, Any]) -> dict[str, Any]:
    values: dict[str, Any] = {}

    if "journal" in data:
        journal = data["journal"]
        if "journalctl" in journal:
            values["journalctl_path"] = journal["journalctl"]
        if "systemctl" in journal:
            values["systemctl_path"] = journal["systemctl"]
        if "line_limit" in journal:
            values["line_limit"] = int(journal["line_limit"])
        if "timeout" in journal:
            values["command_timeout"] = float(journal["timeout"])

    if "access" in data:
        allowed = data["access"].get("allowed_units")
        if isinstance(allowed, str):
            allowed = split_units(allowed)
        if allowed is not None:
            values["allowed_units"] = list(allowed)

    if "display" in data:
        if "timezone" in data["display"]:
            values["timezone"] = data["display"]["timezone"]

    if "backend" in data:
        backend = data["backend"]
        if "type" in backend:
            values["backend"] = backend["type"]
        if "seed" in backend:
            values["fake_seed"] = int(backend["seed"])

    return values


def apply_env_overrides(config: EngineConfig, environ: Optional[Mapping[str, str]] = None) -> EngineConfig:
    """Override config values from JOURNALD_* environment variables."""
    env = os.environ if environ is None else environ

    if ENV_ALLOWED_UNITS in env:
        units = split_units(env[ENV_ALLOWED_UNITS])
        config.allowed_units = units or None

    if env.get(ENV_TIMEZONE, "").strip():
        config.timezone = env[ENV_TIMEZONE].strip()

    return config


def find_config_file(project_root: Path) -> Optional[Path]:
    """Find configuration file in project root.

    Search order:
    1. journald_config.toml
    2. journald_config.json
    3. .journald.toml
    4. .journald.json
    """
    candidates = [
        "journald_config.toml",
        "journald_config.json",
        ".journald.toml",
        ".journald.json",
    ]

    for name in candidates:
        path = project_root / name
        if path.exists():
            return path

    return None


def load_config(
    project_root: Path,
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> EngineConfig:
    """Load engine configuration.

    Args:
        project_root: Directory searched for a config file
        config_path: Optional explicit path to config file
        environ: Environment to read overrides from (default: os.environ)

    Returns:
        EngineConfig instance

    Raises:
        ConfigError: If the file type is unsupported or values are invalid
    """
    if config_path is None:
        config_path = find_config_file(project_root)

    if config_path is None:
        # No config file - use defaults
        config = EngineConfig()
    else:
        suffix = config_path.suffix.lower()
        if suffix == ".toml":
            config = dict_to_config(load_toml_config(config_path))
        elif suffix == ".json":
            config = dict_to_config(load_json_config(config_path))
        else:
            raise ConfigError(f"Unsupported config file type: {suffix}")

    return apply_env_overrides(config, environ)
