"""
Configuration models and type definitions
Python 3.12+ with modern type system
"""

from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias

from .addressing import AddressFormatError, CidrBlock, int_to_ip, ip_to_int, parse_cidr
from .credentials import validate_passphrase, validate_ssid
from .subnet import validate_subnet

InterfaceName: TypeAlias = str
IPAddress: TypeAlias = str
CidrString: TypeAlias = str
ProfileName: TypeAlias = str
SSID: TypeAlias = str

DEFAULT_AP_SSID = "AP_Pop-Up"
DEFAULT_AP_PASSWORD = "1234567890"
DEFAULT_AP_CIDR = "192.168.50.5/24"
DEFAULT_AP_GATEWAY = "192.168.50.254"
DEFAULT_AP_PROFILE_NAME = "AP_Pop-Up"
DEFAULT_WIFI_INTERFACE = "wlan0"


class OSType(Enum):
    """Supported operating systems"""
    MACOS = "darwin"
    LINUX = "linux"
    WINDOWS = "win32"


class ProfileMode(Enum):
    """802-11-wireless.mode of a stored profile"""
    INFRASTRUCTURE = "infrastructure"
    ACCESS_POINT = "ap"
    ADHOC = "adhoc"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str) -> "ProfileMode":
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True, slots=True)
class ApConfiguration:
    """
    Immutable access point configuration snapshot.

    Attributes:
        ssid: Network name broadcast by the AP (1-32 printable, no spaces)
        password: WPA passphrase (8-63 printable, no leading/trailing spaces)
        subnet: AP address and prefix (e.g., 192.168.50.5/24)
        gateway: Gateway address as a 32-bit integer

    Raises:
        ValueError: If any field violates its policy or the gateway is
            outside the subnet
    """
    ssid: SSID
    password: str
    subnet: CidrBlock
    gateway: int

    def __post_init__(self) -> None:
        """Validate SSID, password and gateway placement"""
        for outcome in (validate_ssid(self.ssid), validate_passphrase(self.password)):
            if not outcome.is_valid:
                raise ValueError(f"Invalid AP configuration: {outcome.reason}")

        try:
            gateway_ip = int_to_ip(self.gateway)
        except AddressFormatError as e:
            raise ValueError(f"Invalid AP configuration: {e}") from e

        outcome = validate_subnet(str(self.subnet), gateway_ip)
        if not outcome.is_valid:
            raise ValueError(f"Invalid AP configuration: {outcome.reason}")

    @classmethod
    def from_strings(
        cls,
        ssid: SSID,
        password: str,
        cidr: CidrString,
        gateway: IPAddress
    ) -> "ApConfiguration":
        """
        Build a configuration from its textual form.

        Raises:
            ValueError: If any field is malformed or violates its policy
        """
        try:
            subnet = parse_cidr(cidr)
            gateway_int = ip_to_int(gateway)
        except AddressFormatError as e:
            raise ValueError(f"Invalid AP configuration: {e}") from e
        return cls(ssid=ssid, password=password, subnet=subnet, gateway=gateway_int)

    @property
    def cidr(self) -> CidrString:
        return str(self.subnet)

    @property
    def gateway_ip(self) -> IPAddress:
        return int_to_ip(self.gateway)


@dataclass(frozen=True, slots=True)
class WifiProfile:
    """
    A network manager's stored connection profile.

    Attributes:
        name: Profile (connection) name
        ssid: SSID the profile joins
        exists: Whether the profile is present in the manager (False for
            a lookup miss)
        mode: Infrastructure client, access point, ...
        priority: Autoconnect priority; higher is tried first
    """
    name: ProfileName
    ssid: SSID
    exists: bool = True
    mode: ProfileMode = ProfileMode.INFRASTRUCTURE
    priority: int = 0

    @property
    def is_access_point(self) -> bool:
        return self.mode is ProfileMode.ACCESS_POINT

    def matches(self, network_name: str) -> bool:
        """Check whether this profile is for the given network name"""
        return network_name in (self.name, self.ssid)


@dataclass(frozen=True, slots=True)
class WifiNetwork:
    """
    A network seen in a WiFi scan.

    Attributes:
        ssid: Network name
        signal: Signal strength, 0-100
        security: Security description (e.g., WPA2)
        in_use: Whether the host is connected to it
    """
    ssid: SSID
    signal: int
    security: str = ""
    in_use: bool = False

    def __str__(self) -> str:
        marker = "*" if self.in_use else " "
        security = self.security or "open"
        return f"{marker} {self.ssid:32} {self.signal:3d}%  {security}"
