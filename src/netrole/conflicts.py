"""
Detect collisions between a candidate AP subnet and active interface subnets
"""

import logging
from enum import Enum
from typing import Iterable

from .addressing import AddressFormatError, parse_cidr
from .backends import SubnetEnumerator
from .outcomes import ValidationOutcome

logger = logging.getLogger(__name__)


class ConflictStrictness(Enum):
    """
    How a candidate subnet is compared to active subnets.

    EXACT reports a conflict only on identical CIDR strings, so a /16
    candidate inside an active /8 passes. OVERLAP also reports any
    address-range overlap.
    """
    EXACT = "exact"
    OVERLAP = "overlap"


def _overlaps(candidate: str, active: str) -> bool:
    try:
        return parse_cidr(candidate).overlaps(parse_cidr(active))
    except AddressFormatError:
        logger.debug(f"Cannot compare ranges of {candidate} and {active}, using exact match")
        return False


def detect_subnet_conflict(
    candidate: str,
    active_subnets: Iterable[str],
    strictness: ConflictStrictness = ConflictStrictness.EXACT
) -> ValidationOutcome:
    """
    Compare a candidate subnet against the host's active subnets.

    Args:
        candidate: Candidate AP subnet in CIDR notation
        active_subnets: Active subnets in CIDR notation
        strictness: Comparison mode

    Returns:
        SUBNET_CONFLICT for the first matching active subnet, else VALID
    """
    for active in active_subnets:
        if candidate == active:
            logger.error(f"[FAIL] Conflict detected with active network: {active}")
            return ValidationOutcome.subnet_conflict(active)
        if strictness is ConflictStrictness.OVERLAP and _overlaps(candidate, active):
            logger.error(f"[FAIL] {candidate} overlaps active network: {active}")
            return ValidationOutcome.subnet_conflict(active)

    return ValidationOutcome.valid()


class ConflictDetector:
    """
    Conflict detection bound to a live subnet enumerator.

    Attributes:
        enumerator: Source of active subnets
        strictness: Comparison mode
    """

    def __init__(
        self,
        enumerator: SubnetEnumerator,
        strictness: ConflictStrictness = ConflictStrictness.EXACT
    ):
        self.enumerator = enumerator
        self.strictness = strictness

    def check(self, candidate: str) -> ValidationOutcome:
        """Check a candidate against the subnets active right now"""
        active = list(self.enumerator.active_subnets())
        logger.debug(f"Active subnets: {active}")
        return detect_subnet_conflict(candidate, active, self.strictness)
