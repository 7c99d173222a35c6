"""
Factory pattern for creating platform-specific host collaborators
"""

import platform
import logging
from dataclasses import dataclass
from typing import Optional

from .backends import NetworkManagerBackend, ReachabilityProbe, SubnetEnumerator
from .config import InterfaceName, OSType
from .linux import IpAddrSubnetEnumerator, NmcliBackend, PingProbe

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HostBackends:
    """The collaborators one host provides to validators and the reconciler"""
    enumerator: SubnetEnumerator
    probe: ReachabilityProbe
    network_manager: NetworkManagerBackend


class BackendFactory:
    """
    Factory for creating platform-specific host collaborators.

    Example:
        >>> backends = BackendFactory.create(interface="wlan0")
        >>> backends.enumerator.active_subnets()
    """

    @staticmethod
    def create(
        os_type: Optional[OSType] = None,
        interface: Optional[InterfaceName] = None,
        timeout: int = 30
    ) -> HostBackends:
        """
        Create collaborators for the specified or current platform.

        Args:
            os_type: Optional OS type. If None, auto-detect from platform.
            interface: WiFi device to bind nmcli operations to
            timeout: Per-command nmcli timeout in seconds

        Returns:
            HostBackends bundle

        Raises:
            NotImplementedError: If platform is not supported
        """
        if os_type is None:
            os_type = BackendFactory._detect_os()

        match os_type:
            case OSType.LINUX:
                logger.info(f"Creating Linux backends (interface: {interface or 'any'})")
                return HostBackends(
                    enumerator=IpAddrSubnetEnumerator(),
                    probe=PingProbe(),
                    network_manager=NmcliBackend(interface=interface, timeout=timeout)
                )

            case _:
                raise NotImplementedError(
                    f"OS type {os_type.value} not supported; netrole needs Linux with NetworkManager"
                )

    @staticmethod
    def _detect_os() -> OSType:
        """
        Auto-detect current operating system.

        Returns:
            Detected OSType

        Raises:
            NotImplementedError: If OS is not recognized
        """
        system = platform.system().lower()

        if system == "darwin":
            return OSType.MACOS
        elif system == "linux":
            return OSType.LINUX
        elif system in ("win32", "windows"):
            return OSType.WINDOWS
        else:
            raise NotImplementedError(
                f"Platform '{system}' not supported. "
                f"Supported platforms: Linux"
            )

    @staticmethod
    def is_supported(os_type: Optional[OSType] = None) -> bool:
        """
        Check if platform is supported.

        Args:
            os_type: OS type to check, or None for current platform

        Returns:
            True if platform is supported, False otherwise
        """
        try:
            if os_type is None:
                os_type = BackendFactory._detect_os()

            return os_type == OSType.LINUX
        except NotImplementedError:
            return False
