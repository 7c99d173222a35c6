"""
Reconcile a chosen WiFi network with the network manager's stored profiles

Two starting states, decided by a profile lookup:

    ExistingProfile --(no credential / bad credential)--> Unchanged
    ExistingProfile --(modify + activate ok)-----------> Connected
    ExistingProfile --(activate fails, delete profile)--> Failed
    NoProfile       --(bad credential, no attempt)-----> Failed
    NoProfile       --(connect ok, profile created)----> Connected
    NoProfile       --(connect fails, sweep leftovers)--> Failed
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, TypeAlias

from .backends import NetworkManagerBackend, NetworkManagerError
from .config import ProfileName, SSID, WifiProfile
from .credentials import validate_passphrase

logger = logging.getLogger(__name__)

CredentialSource: TypeAlias = Callable[[Optional[WifiProfile]], Optional[str]]


class ReconcileOutcome(Enum):
    """Terminal states of a reconciliation"""
    CONNECTED = "connected"
    FAILED = "failed"
    UNCHANGED = "unchanged"


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    """
    Result of one reconciliation attempt.

    Attributes:
        outcome: Terminal state
        ssid: Network that was reconciled
        message: Human-readable summary
        profile: Profile involved, if any
        connection_attempted: Whether the manager was asked to connect
        profile_deleted: Whether a profile was removed during cleanup
    """
    outcome: ReconcileOutcome
    ssid: SSID
    message: str
    profile: Optional[ProfileName] = None
    connection_attempted: bool = False
    profile_deleted: bool = False

    @property
    def succeeded(self) -> bool:
        return self.outcome is ReconcileOutcome.CONNECTED


class WifiProfileReconciler:
    """
    Create, update or discard a WiFi client profile to match user intent.

    Attributes:
        backend: Network manager collaborator
    """

    def __init__(self, backend: NetworkManagerBackend):
        self.backend = backend

    def reconcile(self, ssid: SSID, credential_source: CredentialSource) -> ReconcileResult:
        """
        Reconcile a network against stored profiles.

        Args:
            ssid: Selected network name
            credential_source: Called once with the existing profile (or None)
                and returns the credential entered by the user, or None

        Returns:
            ReconcileResult in state CONNECTED, FAILED or UNCHANGED
        """
        logger.info(f"[*] Configuring WiFi network: {ssid}")

        try:
            profile = self.backend.lookup_profile(ssid)
        except NetworkManagerError as e:
            logger.error(f"[FAIL] Could not read stored profiles: {e}")
            return ReconcileResult(ReconcileOutcome.FAILED, ssid, f"Could not read stored profiles: {e}")

        credential = credential_source(profile if profile.exists else None)

        if profile.exists:
            logger.info(f"[i] An existing profile for this SSID was found: {profile.name}")
            return self._reconcile_existing(ssid, profile, credential)

        logger.info(f"[i] No existing profile found for {ssid}")
        return self._reconcile_new(ssid, credential)

    def reconcile_with(self, ssid: SSID, credential: Optional[str]) -> ReconcileResult:
        """Non-interactive form of reconcile() with a fixed credential"""
        return self.reconcile(ssid, lambda _profile: credential)

    def _reconcile_existing(
        self,
        ssid: SSID,
        profile: WifiProfile,
        credential: Optional[str]
    ) -> ReconcileResult:
        if not credential:
            logger.info("[i] No password entered. Keeping the existing configuration.")
            return ReconcileResult(
                ReconcileOutcome.UNCHANGED, ssid,
                "No password entered. Keeping the existing configuration.",
                profile=profile.name
            )

        policy = validate_passphrase(credential)
        if not policy.is_valid:
            logger.warning(f"[!] {policy.reason}. No changes were made.")
            return ReconcileResult(
                ReconcileOutcome.UNCHANGED, ssid,
                f"{policy.reason}. No changes were made.",
                profile=profile.name
            )

        try:
            self.backend.set_profile_credential(profile.name, credential)
        except NetworkManagerError as e:
            logger.error(f"[FAIL] Could not update password of {profile.name}: {e}")
            return ReconcileResult(
                ReconcileOutcome.FAILED, ssid,
                f"Could not update password of {profile.name}: {e}",
                profile=profile.name
            )

        logger.info(f"[*] Password updated. Attempting to connect to {profile.name}.")
        try:
            self.backend.activate_profile(profile.name)
        except NetworkManagerError as e:
            logger.error(f"[FAIL] Failed to connect to {ssid}: {e}")
            deleted = self._delete(profile.name)
            suffix = " The profile has been deleted." if deleted else ""
            return ReconcileResult(
                ReconcileOutcome.FAILED, ssid,
                f"Failed to connect to {ssid}: {e}.{suffix}",
                profile=profile.name,
                connection_attempted=True,
                profile_deleted=deleted
            )

        logger.info(f"[OK] Successfully connected to {ssid}.")
        return ReconcileResult(
            ReconcileOutcome.CONNECTED, ssid,
            f"Successfully connected to {ssid}.",
            profile=profile.name,
            connection_attempted=True
        )

    def _reconcile_new(self, ssid: SSID, credential: Optional[str]) -> ReconcileResult:
        policy = validate_passphrase(credential or "")
        if not policy.is_valid:
            logger.warning(f"[!] {policy.reason}. No profile was created.")
            return ReconcileResult(
                ReconcileOutcome.FAILED, ssid,
                f"{policy.reason}. No profile was created."
            )

        logger.info(f"[*] Creating a new profile and attempting to connect to {ssid}.")
        try:
            self.backend.connect_or_create(ssid, credential)
        except NetworkManagerError as e:
            logger.error(f"[FAIL] Failed to connect to {ssid}: {e}")
            leftover = self._find_leftover(ssid)
            deleted = leftover is not None and self._delete(leftover.name)
            return ReconcileResult(
                ReconcileOutcome.FAILED, ssid,
                f"Failed to connect to {ssid}: {e}. The new profile has not been saved.",
                profile=leftover.name if leftover else None,
                connection_attempted=True,
                profile_deleted=deleted
            )

        logger.info(f"[OK] Successfully connected to {ssid} and profile saved.")
        return ReconcileResult(
            ReconcileOutcome.CONNECTED, ssid,
            f"Successfully connected to {ssid} and profile saved.",
            profile=ssid,
            connection_attempted=True
        )

    def _find_leftover(self, ssid: SSID) -> Optional[WifiProfile]:
        """Look for a profile a failed connect may have persisted anyway"""
        try:
            return self.backend.find_profile(ssid)
        except NetworkManagerError as e:
            logger.warning(f"[!] Could not check for a leftover profile for {ssid}: {e}")
            return None

    def _delete(self, name: ProfileName) -> bool:
        try:
            self.backend.delete_profile(name)
        except NetworkManagerError as e:
            logger.error(f"[FAIL] Could not delete profile {name}: {e}")
            return False
        logger.info(f"[i] Profile {name} has been deleted.")
        return True
