"""
Abstract base classes and protocols for host collaborators
"""

from abc import ABC, abstractmethod
from typing import Optional, Protocol, Sequence

from .config import ApConfiguration, IPAddress, ProfileName, SSID, WifiNetwork, WifiProfile


class SubnetEnumerator(Protocol):
    """
    Protocol for listing the host's active subnets (structural subtyping).

    Implementations return CIDR strings such as "192.168.1.23/24".
    """

    def active_subnets(self) -> Sequence[str]: ...


class ReachabilityProbe(Protocol):
    """Protocol for a bounded liveness check against a single address"""

    def is_reachable(self, address: IPAddress, timeout: float = 1.0) -> bool: ...


class NetworkManagerError(RuntimeError):
    """Raised when a network manager operation does not succeed"""


class NetworkManagerBackend(ABC):
    """
    Abstract base class for the network manager collaborator.

    The reconciler treats these calls as an ordered command sequence and
    does not assume atomicity across them. Every mutating method raises
    NetworkManagerError on failure.
    """

    @abstractmethod
    def list_networks(self) -> Sequence[WifiNetwork]:
        """
        Scan for visible networks.

        Returns:
            One entry per SSID with its strongest signal, strongest first
        """
        ...

    @abstractmethod
    def list_profiles(self) -> Sequence[WifiProfile]:
        """Return every stored WiFi profile, client and access point alike"""
        ...

    @abstractmethod
    def set_profile_credential(self, name: ProfileName, credential: str) -> None:
        """
        Replace the stored passphrase of a profile.

        Raises:
            NetworkManagerError: If the profile could not be modified
        """
        ...

    @abstractmethod
    def activate_profile(self, name: ProfileName) -> None:
        """
        Connect using a stored profile.

        Raises:
            NetworkManagerError: If the connection attempt fails
        """
        ...

    @abstractmethod
    def connect_or_create(self, ssid: SSID, credential: str) -> None:
        """
        Connect to a network by name and passphrase.

        On success the manager persists a new profile as a side effect.

        Raises:
            NetworkManagerError: If the connection attempt fails
        """
        ...

    @abstractmethod
    def delete_profile(self, name: ProfileName) -> None:
        """
        Remove a stored profile.

        Raises:
            NetworkManagerError: If the profile could not be removed
        """
        ...

    @abstractmethod
    def deactivate_profile(self, name: ProfileName) -> None:
        """
        Bring an active profile down without deleting it.

        Raises:
            NetworkManagerError: If the profile could not be deactivated
        """
        ...

    @abstractmethod
    def radio_enabled(self) -> bool:
        """Return True if the WiFi radio is switched on"""
        ...

    @abstractmethod
    def enable_radio(self) -> None:
        """
        Switch the WiFi radio on.

        Raises:
            NetworkManagerError: If the radio could not be enabled
        """
        ...

    @abstractmethod
    def active_connection(self) -> Optional[WifiProfile]:
        """Return the profile currently active on the WiFi device, if any"""
        ...

    @abstractmethod
    def create_access_point(self, config: ApConfiguration, profile_name: ProfileName) -> None:
        """
        Create an access point profile from the AP record.

        The profile shares its connection (`ipv4.method shared`) on the
        record's address and gateway.

        Raises:
            NetworkManagerError: If the profile could not be created
        """
        ...

    def find_profile(self, network_name: str) -> Optional[WifiProfile]:
        """
        Find the client profile for a network.

        Access point profiles are never returned.

        Args:
            network_name: SSID or profile name to look up (exact match)

        Returns:
            Matching profile, or None if there is none
        """
        for profile in self.list_profiles():
            if not profile.is_access_point and profile.matches(network_name):
                return profile
        return None

    def lookup_profile(self, network_name: str) -> WifiProfile:
        """Like find_profile, but a miss yields a placeholder with exists=False"""
        profile = self.find_profile(network_name)
        if profile is None:
            return WifiProfile(name=network_name, ssid=network_name, exists=False)
        return profile
