"""
Configuration loading for netrole

Search order (later overrides earlier):
1. Built-in defaults
2. /etc/netrole/config.toml (system-wide)
3. ~/.config/netrole/config.toml (user global)
4. ~/.netrole.toml (legacy dotfile)
5. ./.netrole.toml (local directory - adjacent invocation)
6. Environment variables (NETROLE_*)
7. CLI arguments (highest priority)

These are application settings. The AP record itself lives in the
configuration store (see store.py).
"""

from __future__ import annotations

import os
import logging
import tomllib
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any


logger = logging.getLogger(__name__)

# Config file names
CONFIG_FILENAME = "config.toml"
LOCAL_CONFIG_FILENAME = ".netrole.toml"
ALT_LOCAL_CONFIG = "netrole.toml"

# Environment variable prefix
ENV_PREFIX = "NETROLE_"

STRICTNESS_LEVELS = ("exact", "overlap")


def get_config_dir() -> Path:
    """Get user config directory (XDG-compliant)."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / "netrole"
    return Path.home() / ".config" / "netrole"


def get_config_paths() -> list[Path]:
    """
    Return list of config paths to check, in precedence order (lowest first).

    Returns paths that WOULD be checked - caller should verify existence.
    """
    paths: list[Path] = []

    # 1. System-wide config
    paths.append(Path("/etc/netrole") / CONFIG_FILENAME)

    # 2. User global config (XDG)
    paths.append(get_config_dir() / CONFIG_FILENAME)

    # 3. Legacy user config (dotfile in home)
    paths.append(Path.home() / ".netrole.toml")

    # 4. Local directory config (adjacent invocation pattern)
    cwd = Path.cwd()
    paths.append(cwd / LOCAL_CONFIG_FILENAME)
    paths.append(cwd / ALT_LOCAL_CONFIG)  # Also check without leading dot

    return paths


@dataclass
class Settings:
    """
    Merged configuration settings from all sources.

    Attributes represent the final resolved values after merging
    all config files, environment variables, and CLI arguments.
    """
    # Host
    store_path: str = "/etc/netrole/ap.conf"
    # Empty: use WIFI_INTERFACE from the store
    wifi_interface: str = ""

    # Validation
    conflict_strictness: str = "exact"
    probe_timeout: float = 1.0
    allow_boundary_gateway: bool = True

    # Network manager
    nmcli_timeout: int = 30

    # Behavior defaults
    dry_run: bool = False
    skip_confirmation: bool = False

    # Metadata
    config_sources: list[str] = field(default_factory=list)


def _merge_section(settings: Settings, section: dict[str, Any], source: str) -> None:
    """Merge one TOML table into settings, ignoring unknown or mistyped keys."""
    for key, value in section.items():
        if key == "config_sources" or not hasattr(settings, key):
            logger.warning(f"Unknown setting '{key}' in {source}, ignoring")
            continue

        expected = type(getattr(settings, key))
        if expected is float and isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            logger.warning(f"Setting '{key}' in {source} should be {expected.__name__}, ignoring")
            continue

        if key == "conflict_strictness" and value not in STRICTNESS_LEVELS:
            logger.warning(f"Unknown conflict_strictness '{value}' in {source}, ignoring")
            continue

        setattr(settings, key, value)


def _merge_config(settings: Settings, data: dict[str, Any], source: str) -> None:
    """Merge a config dict into settings."""
    settings.config_sources.append(source)

    for section in ("host", "validation", "network_manager", "defaults"):
        table = data.get(section, {})
        if isinstance(table, dict):
            _merge_section(settings, table, source)


def _apply_env_overrides(settings: Settings) -> None:
    """Apply environment variable overrides."""
    env_mappings = {
        f"{ENV_PREFIX}STORE_PATH": "store_path",
        f"{ENV_PREFIX}WIFI_INTERFACE": "wifi_interface",
        f"{ENV_PREFIX}CONFLICT_STRICTNESS": "conflict_strictness",
    }

    number_mappings = {
        f"{ENV_PREFIX}PROBE_TIMEOUT": ("probe_timeout", float),
        f"{ENV_PREFIX}NMCLI_TIMEOUT": ("nmcli_timeout", int),
    }

    bool_mappings = {
        f"{ENV_PREFIX}ALLOW_BOUNDARY_GATEWAY": "allow_boundary_gateway",
        f"{ENV_PREFIX}DRY_RUN": "dry_run",
        f"{ENV_PREFIX}SKIP_CONFIRMATION": "skip_confirmation",
    }

    for env_var, attr in env_mappings.items():
        value = os.environ.get(env_var)
        if value:
            if attr == "conflict_strictness" and value.lower() not in STRICTNESS_LEVELS:
                logger.warning(f"Ignoring {env_var}={value}: expected one of {STRICTNESS_LEVELS}")
                continue
            setattr(settings, attr, value.lower() if attr == "conflict_strictness" else value)
            settings.config_sources.append(f"env:{env_var}")

    for env_var, (attr, convert) in number_mappings.items():
        value = os.environ.get(env_var)
        if value:
            try:
                setattr(settings, attr, convert(value))
            except ValueError:
                logger.warning(f"Ignoring {env_var}={value}: not a number")
                continue
            settings.config_sources.append(f"env:{env_var}")

    for env_var, attr in bool_mappings.items():
        value = os.environ.get(env_var)
        if value is not None:
            setattr(settings, attr, value.lower() in ("1", "true", "yes"))
            settings.config_sources.append(f"env:{env_var}")


def load_settings() -> Settings:
    """
    Load and merge settings from all config sources.

    Returns:
        Merged Settings object with all values resolved.
    """
    settings = Settings()

    # Load from each config path that exists
    for config_path in get_config_paths():
        if config_path.exists():
            try:
                with open(config_path, "rb") as f:
                    data = tomllib.load(f)
                _merge_config(settings, data, str(config_path))
                logger.debug(f"Loaded config from {config_path}")
            except (OSError, tomllib.TOMLDecodeError) as e:
                logger.warning(f"Failed to load {config_path}: {e}")

    # Apply environment overrides
    _apply_env_overrides(settings)

    return settings


def ensure_config_dir() -> Path:
    """Ensure user config directory exists and return its path."""
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_default_config_content() -> str:
    """Return default config file content as a string."""
    return '''# netrole - User Configuration
# Place this file at: ~/.config/netrole/config.toml
# Or use a local override: ./.netrole.toml

[host]
# Where the AP record (AP_SSID, AP_CIDR, ...) is stored
store_path = "/etc/netrole/ap.conf"
# WiFi device; when unset, WIFI_INTERFACE from the store is used (then wlan0)
# wifi_interface = "wlan0"

[validation]
# "exact": only an identical active subnet is a conflict
# "overlap": any active subnet sharing addresses is a conflict
conflict_strictness = "exact"
# Seconds to wait for a reply when probing a candidate gateway
probe_timeout = 1.0
# Accept the network or broadcast address as the AP gateway
allow_boundary_gateway = true

[network_manager]
nmcli_timeout = 30

[defaults]
dry_run = false
skip_confirmation = false
'''


def init_config(force: bool = False) -> Path | None:
    """
    Initialize user config file with defaults.

    Args:
        force: If True, overwrite existing config.

    Returns:
        Path to created config file, or None if it already exists and force=False.
    """
    config_dir = ensure_config_dir()
    config_path = config_dir / CONFIG_FILENAME

    if config_path.exists() and not force:
        return None

    config_path.write_text(get_default_config_content())
    return config_path
