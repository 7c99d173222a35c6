"""
Switch the WiFi device between client and access point roles

Decided from the active connection and a scan for saved networks:

    client active                      ----------------------------> KeptNetwork
    AP active, no saved SSID visible   ----------------------------> KeptAccessPoint
    saved SSID visible                 --(AP down, profile up)----> ConnectedNetwork
    nothing reachable                  --(AP up, recreate once)---> StartedAccessPoint
    AP still down after recreation     ----------------------------> Failed
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .backends import NetworkManagerBackend, NetworkManagerError
from .config import DEFAULT_AP_PROFILE_NAME, ApConfiguration, ProfileMode, ProfileName, WifiProfile

logger = logging.getLogger(__name__)

# Seconds to wait for the radio and the AP to settle
RADIO_DELAY = 5.0
SETTLE_DELAY = 3.0


class SwitchOutcome(Enum):
    """Terminal states of a role switch"""
    KEPT_NETWORK = "kept_network"
    KEPT_ACCESS_POINT = "kept_access_point"
    CONNECTED_NETWORK = "connected_network"
    STARTED_ACCESS_POINT = "started_access_point"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class SwitchResult:
    """
    Result of one role switch.

    Attributes:
        outcome: Terminal state
        message: Human-readable summary
        profile: Profile active afterwards, if known
    """
    outcome: SwitchOutcome
    message: str
    profile: Optional[ProfileName] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is not SwitchOutcome.FAILED


class RoleSwitcher:
    """
    Join a saved WiFi network when one is in range, otherwise run the AP.

    Attributes:
        backend: Network manager collaborator
        config: AP record used when the AP profile has to be created
        ap_profile_name: Connection name of the AP profile
        enable_wifi: Whether a disabled radio may be switched on
    """

    def __init__(
        self,
        backend: NetworkManagerBackend,
        config: ApConfiguration,
        ap_profile_name: ProfileName = DEFAULT_AP_PROFILE_NAME,
        enable_wifi: bool = True
    ):
        self.backend = backend
        self.config = config
        self.ap_profile_name = ap_profile_name
        self.enable_wifi = enable_wifi
        self.radio_delay = RADIO_DELAY
        self.settle_delay = SETTLE_DELAY

    def switch(self, force_access_point: bool = False) -> SwitchResult:
        """
        Pick and activate the right role for the device.

        Args:
            force_access_point: Start the AP without looking for networks

        Returns:
            SwitchResult describing the role the device ended up in

        Raises:
            NetworkManagerError: If the radio, profiles or active connection
                cannot be read
        """
        if not self.ensure_radio():
            return SwitchResult(
                SwitchOutcome.FAILED,
                "WiFi is disabled and ENABLE_WIFI does not allow switching it on."
            )

        if force_access_point:
            logger.info("[*] Forcing Access Point activation.")
            return self.activate_access_point()

        clients, access_points = self.saved_profiles()
        active = self.backend.active_connection()

        if active is not None and not active.is_access_point:
            logger.info(f"[i] Active connection {active.name} is a network.")
            return SwitchResult(SwitchOutcome.KEPT_NETWORK, f"Staying on network {active.name}.", active.name)

        known = self.detect_known_networks(clients) if clients else []

        if active is not None:
            logger.info(f"[i] Active connection {active.name} is an AP.")
            if not known:
                return SwitchResult(
                    SwitchOutcome.KEPT_ACCESS_POINT,
                    f"No saved network in range. Access Point {active.name} stays up.",
                    active.name
                )
            logger.info("[*] Known WiFi SSID detected. Switching to network.")

        return self.connect_to_network_or_ap(known, active, access_points)

    def ensure_radio(self) -> bool:
        """
        Switch the radio on if it is off and that is allowed.

        Returns:
            True if the radio is on
        """
        if self.backend.radio_enabled():
            return True

        if not self.enable_wifi:
            logger.error("[FAIL] WiFi is disabled and ENABLE_WIFI is off")
            return False

        logger.info("[*] WiFi is disabled. Enabling WiFi...")
        self.backend.enable_radio()
        time.sleep(self.radio_delay)
        return True

    def saved_profiles(self) -> tuple[list[WifiProfile], list[WifiProfile]]:
        """
        Split stored profiles into client and AP profiles.

        Returns:
            (clients by descending autoconnect priority, access points)
        """
        profiles = sorted(self.backend.list_profiles(), key=lambda p: -p.priority)
        clients = [p for p in profiles if p.mode is ProfileMode.INFRASTRUCTURE]
        access_points = [p for p in profiles if p.is_access_point]
        return clients, access_points

    def detect_known_networks(self, clients: Sequence[WifiProfile]) -> list[WifiProfile]:
        """Return the client profiles whose SSID is visible in a scan, in priority order"""
        try:
            visible = {network.ssid for network in self.backend.list_networks()}
        except NetworkManagerError as e:
            logger.warning(f"[!] Failed to scan for networks: {e}")
            return []

        if not visible:
            logger.info("[i] No SSIDs found during scan.")
            return []

        logger.info(f"[i] Nearby SSIDs: {', '.join(sorted(visible))}")
        return [profile for profile in clients if profile.ssid in visible]

    def connect_to_network_or_ap(
        self,
        known: Sequence[WifiProfile],
        active: Optional[WifiProfile] = None,
        access_points: Optional[Sequence[WifiProfile]] = None
    ) -> SwitchResult:
        """
        Try each known network in turn and fall back to the AP.

        Args:
            known: Client profiles in range, in the order to try them
            active: Currently active connection (brought down if it is an AP)
            access_points: Stored AP profiles, if already listed
        """
        if known and active is not None and active.is_access_point:
            try:
                self.backend.deactivate_profile(active.name)
            except NetworkManagerError as e:
                logger.warning(f"[!] Failed to bring down AP connection {active.name}: {e}")

        for profile in known:
            try:
                self.backend.activate_profile(profile.name)
            except NetworkManagerError as e:
                logger.warning(f"[!] Could not connect to {profile.name}: {e}")
                continue
            logger.info(f"[OK] Connected to network {profile.name}.")
            return SwitchResult(SwitchOutcome.CONNECTED_NETWORK, f"Connected to network {profile.name}.", profile.name)

        logger.warning("[!] No network available. Starting Access Point.")
        return self.activate_access_point(access_points)

    def activate_access_point(self, access_points: Optional[Sequence[WifiProfile]] = None) -> SwitchResult:
        """
        Bring the AP up, creating it from the AP record when it is missing.

        A profile that fails to come up is deleted, recreated and tried once more.

        Args:
            access_points: Stored AP profiles, if already listed
        """
        name = self.ap_profile_name
        try:
            if access_points is None:
                _, access_points = self.saved_profiles()
            if not any(profile.name == name for profile in access_points):
                logger.info(f"[*] Creating Access Point profile {name}")
                self.backend.create_access_point(self.config, name)

            try:
                self.backend.activate_profile(name)
            except NetworkManagerError as e:
                logger.error(f"[FAIL] Failed to activate AP: {e}. Resetting profile...")
                self._recreate_access_point(name)
                self.backend.activate_profile(name)

            time.sleep(self.settle_delay)
            active = self.backend.active_connection()
        except NetworkManagerError as e:
            logger.error(f"[FAIL] Failed to activate Access Point {name}: {e}")
            return SwitchResult(SwitchOutcome.FAILED, f"Failed to activate Access Point {name}: {e}")

        if active is None or active.name != name:
            logger.error(f"[FAIL] Access Point {name} is not the active connection")
            return SwitchResult(SwitchOutcome.FAILED, f"Failed to activate Access Point {name}.")

        logger.info(f"[OK] Access Point {name} activated at {self.config.cidr}.")
        return SwitchResult(
            SwitchOutcome.STARTED_ACCESS_POINT,
            f"Access Point {name} activated at {self.config.cidr}.",
            name
        )

    def _recreate_access_point(self, name: ProfileName) -> None:
        try:
            self.backend.delete_profile(name)
        except NetworkManagerError as e:
            logger.warning(f"[!] Could not delete profile {name}: {e}")
        self.backend.create_access_point(self.config, name)
