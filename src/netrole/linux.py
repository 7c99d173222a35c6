"""
Linux host collaborators built on iproute2, ping and nmcli
"""

import logging
import math
import subprocess
from typing import Optional, Sequence

from .backends import NetworkManagerBackend, NetworkManagerError
from .config import (
    ApConfiguration, IPAddress, InterfaceName, ProfileMode, ProfileName, SSID, WifiNetwork, WifiProfile
)

logger = logging.getLogger(__name__)

WIRELESS_CONNECTION_TYPE = "802-11-wireless"
AP_CHANNEL = 6


def split_terse(line: str) -> list[str]:
    """
    Split one line of `nmcli -t` output into fields.

    nmcli escapes literal colons as "\\:" and backslashes as "\\\\".
    """
    fields: list[str] = []
    current: list[str] = []
    escaped = False
    for char in line:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == ":":
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
    fields.append("".join(current))
    return fields


class IpAddrSubnetEnumerator:
    """
    Active subnet enumeration via `ip -o -f inet addr show`.

    Only globally scoped addresses are reported, as "address/prefix".
    """

    def __init__(self, timeout: int = 10):
        self.timeout = timeout

    def active_subnets(self) -> Sequence[str]:
        try:
            result = subprocess.run(
                ["ip", "-o", "-f", "inet", "addr", "show"],
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout
            )
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as e:
            logger.warning(f"[!] Could not list active subnets: {e}")
            return []

        return self.parse(result.stdout)

    @staticmethod
    def parse(output: str) -> list[str]:
        """Extract address/prefix fields from `ip -o` lines"""
        subnets: list[str] = []
        for line in output.splitlines():
            fields = line.split()
            # 2: wlan0    inet 192.168.1.23/24 brd 192.168.1.255 scope global ...
            if "inet" not in fields or "global" not in fields:
                continue
            index = fields.index("inet") + 1
            if index < len(fields) and "/" in fields[index]:
                subnets.append(fields[index])
        return subnets


class PingProbe:
    """Reachability probe sending a single ICMP echo"""

    def is_reachable(self, address: IPAddress, timeout: float = 1.0) -> bool:
        """
        Ping an address once.

        Args:
            address: Target address; any "/prefix" suffix is ignored
            timeout: Seconds to wait for a reply (rounded up, minimum 1)

        Returns:
            True if a reply was received, False otherwise
        """
        target = address.split("/", 1)[0]
        wait = max(1, math.ceil(timeout))
        try:
            result = subprocess.run(
                ["ping", "-c", "1", "-W", str(wait), target],
                capture_output=True,
                timeout=wait + 5
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            logger.warning(f"[!] Ping to {target} could not complete: {e}")
            return False
        return result.returncode == 0


class NmcliBackend(NetworkManagerBackend):
    """
    NetworkManager access through nmcli.

    Attributes:
        interface: WiFi device to bind scans and connections to (None = any)
        timeout: Per-command timeout in seconds
    """

    def __init__(self, interface: Optional[InterfaceName] = None, timeout: int = 30):
        self.interface = interface
        self.timeout = timeout

    def _run(self, args: Sequence[str]) -> str:
        cmd = ["nmcli", *args]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout
            )
        except FileNotFoundError as e:
            raise NetworkManagerError("nmcli command unavailable") from e
        except subprocess.TimeoutExpired as e:
            raise NetworkManagerError(f"nmcli timed out after {self.timeout} seconds") from e
        except subprocess.CalledProcessError as e:
            message = (e.stderr or "").strip() or (e.stdout or "").strip() or str(e)
            raise NetworkManagerError(message) from e
        return result.stdout

    def _ifname(self) -> list[str]:
        return ["ifname", self.interface] if self.interface else []

    def list_networks(self) -> Sequence[WifiNetwork]:
        output = self._run(
            ["-t", "-f", "SSID,SIGNAL,SECURITY,IN-USE", "--color", "no", "device", "wifi", "list",
             *self._ifname()]
        )

        best: dict[SSID, WifiNetwork] = {}
        for line in output.splitlines():
            fields = split_terse(line)
            if len(fields) < 4 or not fields[0]:
                continue
            ssid, signal, security, in_use = fields[:4]
            try:
                strength = int(signal)
            except ValueError:
                strength = 0
            network = WifiNetwork(
                ssid=ssid,
                signal=strength,
                security=security.strip(),
                in_use=in_use.strip() == "*"
            )
            current = best.get(ssid)
            if current is None or network.signal > current.signal:
                best[ssid] = network

        return sorted(best.values(), key=lambda n: (-n.signal, n.ssid))

    def list_profiles(self) -> Sequence[WifiProfile]:
        output = self._run(["-t", "-f", "NAME,TYPE,AUTOCONNECT-PRIORITY", "connection", "show"])

        profiles: list[WifiProfile] = []
        for line in output.splitlines():
            fields = split_terse(line)
            if len(fields) < 2 or fields[1] != WIRELESS_CONNECTION_TYPE or not fields[0]:
                continue
            name = fields[0]
            try:
                priority = int(fields[2]) if len(fields) > 2 else 0
            except ValueError:
                priority = 0
            ssid, mode = self._profile_details(name)
            profiles.append(WifiProfile(name=name, ssid=ssid or name, mode=mode, priority=priority))
        return profiles

    def _profile_details(self, name: ProfileName) -> tuple[str, ProfileMode]:
        """Read the SSID and mode of a stored profile"""
        try:
            output = self._run(
                ["-t", "-f", "802-11-wireless.ssid,802-11-wireless.mode", "connection", "show", name]
            )
        except NetworkManagerError as e:
            logger.debug(f"Could not read details of profile {name}: {e}")
            return "", ProfileMode.UNKNOWN

        ssid = ""
        mode = ProfileMode.UNKNOWN
        for line in output.splitlines():
            key, _, value = line.partition(":")
            if key == "802-11-wireless.ssid":
                ssid = value
            elif key == "802-11-wireless.mode":
                mode = ProfileMode.parse(value)
        return ssid, mode

    def set_profile_credential(self, name: ProfileName, credential: str) -> None:
        self._run(["connection", "modify", name, "wifi-sec.psk", credential])
        logger.info(f"[OK] Credential updated for profile {name}")

    def activate_profile(self, name: ProfileName) -> None:
        self._run(["connection", "up", name, *self._ifname()])
        logger.info(f"[OK] Profile {name} activated")

    def connect_or_create(self, ssid: SSID, credential: str) -> None:
        self._run(["device", "wifi", "connect", ssid, "password", credential, *self._ifname()])
        logger.info(f"[OK] Connected to {ssid}")

    def delete_profile(self, name: ProfileName) -> None:
        self._run(["connection", "delete", name])
        logger.info(f"[OK] Profile {name} deleted")

    def deactivate_profile(self, name: ProfileName) -> None:
        self._run(["connection", "down", name])
        logger.info(f"[OK] Profile {name} deactivated")

    def radio_enabled(self) -> bool:
        return self._run(["-t", "-f", "WIFI", "radio"]).strip() == "enabled"

    def enable_radio(self) -> None:
        self._run(["radio", "wifi", "on"])
        logger.info("[OK] WiFi radio enabled")

    def active_connection(self) -> Optional[WifiProfile]:
        output = self._run(["-t", "-f", "NAME,DEVICE,TYPE", "connection", "show", "--active"])

        for line in output.splitlines():
            fields = split_terse(line)
            if len(fields) < 3 or fields[2] != WIRELESS_CONNECTION_TYPE:
                continue
            name, device = fields[0], fields[1]
            if self.interface and device != self.interface:
                continue
            ssid, mode = self._profile_details(name)
            return WifiProfile(name=name, ssid=ssid or name, mode=mode)
        return None

    def create_access_point(self, config: ApConfiguration, profile_name: ProfileName) -> None:
        """
        Create the AP profile with `nmcli device wifi hotspot`.

        The hotspot comes up on 2.4 GHz channel 6, then its IPv4 settings are
        replaced with the AP record's address and gateway.
        """
        self._run([
            "device", "wifi", "hotspot", *self._ifname(),
            "con-name", profile_name,
            "ssid", config.ssid,
            "band", "bg",
            "channel", str(AP_CHANNEL),
            "password", config.password
        ])
        self._run([
            "connection", "modify", profile_name,
            "ipv4.method", "shared",
            "ipv4.addresses", config.cidr,
            "ipv4.gateway", config.gateway_ip,
            "802-11-wireless.powersave", "disable"
        ])
        self._run(["connection", "reload"])
        logger.info(f"[OK] Access point profile {profile_name} created for {config.cidr}")
