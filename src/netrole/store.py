"""
Persisted AP record stored as shell-style KEY="value" lines
"""

import logging
import re
from pathlib import Path
from typing import Optional

from .config import (
    DEFAULT_AP_CIDR, DEFAULT_AP_GATEWAY, DEFAULT_AP_PASSWORD, DEFAULT_AP_PROFILE_NAME, DEFAULT_AP_SSID,
    ApConfiguration, InterfaceName, ProfileName
)

logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = Path("/etc/netrole/ap.conf")

AP_KEYS = ("AP_SSID", "AP_PASSWORD", "AP_CIDR", "AP_GATEWAY")
STORE_KEYS = ("WIFI_INTERFACE", "AP_PROFILE_NAME", *AP_KEYS, "ENABLE_WIFI")
ENABLED_VALUES = ("y", "yes", "true", "1")

_LINE_PATTERN = re.compile(r"\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)=(.*)")
_SHELL_SPECIAL = re.compile(r'([\\"$`])')


def _quote(value: str) -> str:
    return '"' + _SHELL_SPECIAL.sub(r"\\\1", value) + '"'


def _unquote(raw: str) -> str:
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] == '"':
        return re.sub(r'\\([\\"$`])', r"\1", raw[1:-1])
    if len(raw) >= 2 and raw[0] == raw[-1] == "'":
        return raw[1:-1]
    return raw


class ConfigStore:
    """
    Read and write the AP configuration file.

    The file is also sourced by shell scripts, so values are written
    double-quoted with shell metacharacters escaped. Saving only touches the
    AP keys; comments and other keys are left as they are.

    Attributes:
        path: Location of the configuration file
    """

    def __init__(self, path: Path = DEFAULT_STORE_PATH):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> dict[str, str]:
        """
        Parse every KEY="value" line.

        Returns:
            Mapping of keys to unquoted values (empty if the file is missing)
        """
        if not self.path.exists():
            logger.debug(f"No configuration store at {self.path}")
            return {}

        values: dict[str, str] = {}
        for line in self.path.read_text().splitlines():
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            match = _LINE_PATTERN.fullmatch(line)
            if match:
                values[match.group(1)] = _unquote(match.group(2))
        return values

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.read().get(key, default)

    def ap_profile_name(self) -> ProfileName:
        return self.get("AP_PROFILE_NAME") or DEFAULT_AP_PROFILE_NAME

    def wifi_interface(self) -> Optional[InterfaceName]:
        return self.get("WIFI_INTERFACE") or None

    def enable_wifi(self) -> bool:
        """Whether a disabled radio may be switched on (ENABLE_WIFI, default yes)"""
        return (self.get("ENABLE_WIFI") or "y").strip().lower() in ENABLED_VALUES

    def load(self) -> ApConfiguration:
        """
        Build an ApConfiguration snapshot, filling missing keys with defaults.

        Raises:
            ValueError: If the stored values do not form a valid configuration
        """
        values = self.read()
        return ApConfiguration.from_strings(
            ssid=values.get("AP_SSID", DEFAULT_AP_SSID),
            password=values.get("AP_PASSWORD", DEFAULT_AP_PASSWORD),
            cidr=values.get("AP_CIDR", DEFAULT_AP_CIDR),
            gateway=values.get("AP_GATEWAY", DEFAULT_AP_GATEWAY)
        )

    def save(self, config: ApConfiguration) -> None:
        """Persist the AP fields of a configuration"""
        self.update({
            "AP_SSID": config.ssid,
            "AP_PASSWORD": config.password,
            "AP_CIDR": config.cidr,
            "AP_GATEWAY": config.gateway_ip,
        })
        logger.info(f"[OK] AP configuration saved to {self.path}")

    def update(self, values: dict[str, str]) -> None:
        """
        Rewrite the given keys in place, appending any that are missing.

        Args:
            values: Keys and new values
        """
        lines = self.path.read_text().splitlines() if self.path.exists() else []
        pending = dict(values)

        for index, line in enumerate(lines):
            if line.lstrip().startswith("#"):
                continue
            match = _LINE_PATTERN.fullmatch(line)
            if match and match.group(1) in pending:
                key = match.group(1)
                lines[index] = f"{key}={_quote(pending.pop(key))}"

        for key, value in pending.items():
            lines.append(f"{key}={_quote(value)}")

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("\n".join(lines) + "\n")
        logger.debug(f"Updated {', '.join(values)} in {self.path}")
