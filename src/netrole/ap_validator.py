"""
Access point configuration validation: conflicts, format, and gateway liveness
"""

import logging

from .backends import ReachabilityProbe, SubnetEnumerator
from .config import ApConfiguration, CidrString, IPAddress
from .conflicts import ConflictDetector, ConflictStrictness
from .credentials import validate_passphrase, validate_ssid
from .outcomes import ValidationOutcome
from .subnet import validate_subnet

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 1.0


class ApConfigValidator:
    """
    Decide whether a candidate AP subnet and gateway are safe to activate.

    Checks run in a fixed order and stop at the first failure:
    1. Subnet conflict with an active interface
    2. CIDR/gateway format and gateway membership
    3. Liveness probe of the gateway address

    Attributes:
        conflict_detector: Conflict check bound to the live enumerator
        probe: Reachability collaborator
        probe_timeout: Seconds to wait for a probe reply
        allow_boundary_gateway: Accept network/broadcast addresses as gateways
    """

    def __init__(
        self,
        enumerator: SubnetEnumerator,
        probe: ReachabilityProbe,
        strictness: ConflictStrictness = ConflictStrictness.EXACT,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
        allow_boundary_gateway: bool = True
    ):
        self.conflict_detector = ConflictDetector(enumerator, strictness)
        self.probe = probe
        self.probe_timeout = probe_timeout
        self.allow_boundary_gateway = allow_boundary_gateway

    def validate(self, cidr: CidrString, gateway: IPAddress) -> ValidationOutcome:
        """
        Validate a candidate subnet and gateway.

        Note: the liveness probe is a real network operation and may block
        for up to probe_timeout seconds.

        Args:
            cidr: Candidate AP subnet (e.g., 192.168.50.5/24)
            gateway: Candidate gateway (e.g., 192.168.50.254)

        Returns:
            VALID, SUBNET_CONFLICT, INVALID_FORMAT or GATEWAY_IN_USE
        """
        outcome = self.conflict_detector.check(cidr)
        if not outcome.is_valid:
            logger.error("[FAIL] The selected subnet conflicts with an existing network.")
            return outcome

        outcome = validate_subnet(cidr, gateway, allow_boundary=self.allow_boundary_gateway)
        if not outcome.is_valid:
            logger.error("[FAIL] Invalid subnet or gateway configuration.")
            return outcome

        logger.debug(f"Probing gateway {gateway} (timeout {self.probe_timeout}s)")
        if self.probe.is_reachable(gateway, self.probe_timeout):
            logger.error(f"[FAIL] The selected gateway IP {gateway} is already in use.")
            return ValidationOutcome.gateway_in_use(gateway)

        logger.info("[OK] AP configuration validated successfully.")
        return ValidationOutcome.valid()

    def validate_configuration(self, config: ApConfiguration) -> ValidationOutcome:
        """Validate SSID and password policies, then the addressing of a full configuration"""
        for outcome in (validate_ssid(config.ssid), validate_passphrase(config.password)):
            if not outcome.is_valid:
                logger.error(f"[FAIL] {outcome.reason}")
                return outcome
        return self.validate(config.cidr, config.gateway_ip)
