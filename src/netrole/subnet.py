"""
Subnet and gateway validation for access point addressing
"""

import logging
from enum import Enum

from .addressing import AddressFormatError, int_to_ip, ip_to_int, parse_cidr
from .outcomes import ValidationOutcome

logger = logging.getLogger(__name__)

AP_PREFIX_LENGTH = 24
AP_GATEWAY_HOST = 254
MAX_THIRD_OCTET = 255
# .254 is reserved for the gateway and .255 is the broadcast address
MAX_FOURTH_OCTET = 253


class AddressBlock(Enum):
    """Private ranges offered when choosing a new AP network"""
    CLASS_C = "192.168."
    CLASS_A = "10.0."


def validate_subnet(
    cidr: str,
    gateway: str,
    *,
    allow_boundary: bool = True
) -> ValidationOutcome:
    """
    Validate CIDR and gateway syntax and gateway membership.

    Args:
        cidr: Subnet in CIDR notation (e.g., 192.168.50.5/24)
        gateway: Gateway address (e.g., 192.168.50.254)
        allow_boundary: Accept the network and broadcast addresses as gateways

    Returns:
        VALID, or INVALID_FORMAT with the reason
    """
    try:
        block = parse_cidr(cidr)
    except AddressFormatError as e:
        logger.warning(f"[!] Invalid subnet: {e}")
        return ValidationOutcome.invalid_format(f"Invalid subnet: {e}")

    try:
        gateway_int = ip_to_int(gateway)
    except AddressFormatError as e:
        logger.warning(f"[!] Invalid gateway: {e}")
        return ValidationOutcome.invalid_format(f"Invalid gateway: {e}")

    if not block.contains(gateway_int):
        reason = (
            f"Gateway {gateway} is outside {block.network_cidr} "
            f"({int_to_ip(block.network)} - {int_to_ip(block.broadcast)})"
        )
        logger.warning(f"[!] {reason}")
        return ValidationOutcome.invalid_format(reason)

    if not allow_boundary and gateway_int in (block.network, block.broadcast):
        reason = f"Gateway {gateway} is the network or broadcast address of {block.network_cidr}"
        logger.warning(f"[!] {reason}")
        return ValidationOutcome.invalid_format(reason)

    return ValidationOutcome.valid()


def parse_host_number(value: str, maximum: int) -> int:
    """
    Parse a single octet typed by the user.

    Leading zeros are accepted and dropped ("007" -> 7).

    Raises:
        AddressFormatError: If value is not a number between 0 and maximum
    """
    value = value.strip()
    if not (value.isascii() and value.isdigit()) or int(value) > maximum:
        raise AddressFormatError(f"Invalid input '{value}'. Must be a number between 0 and {maximum}.")
    return int(value)


def build_ap_subnet(block: AddressBlock, third_octet: int, fourth_octet: int) -> tuple[str, str]:
    """
    Compose an AP address and its gateway from user-chosen octets.

    The AP always gets a /24 and the gateway is host .254 of that /24.

    Returns:
        Tuple of (cidr, gateway), e.g. ("192.168.50.5/24", "192.168.50.254")

    Raises:
        AddressFormatError: If an octet is out of range
    """
    if not 0 <= third_octet <= MAX_THIRD_OCTET:
        raise AddressFormatError(f"Third octet {third_octet} is out of range 0-{MAX_THIRD_OCTET}")
    if not 0 <= fourth_octet <= MAX_FOURTH_OCTET:
        raise AddressFormatError(f"Fourth octet {fourth_octet} is out of range 0-{MAX_FOURTH_OCTET}")

    cidr = f"{block.value}{third_octet}.{fourth_octet}/{AP_PREFIX_LENGTH}"
    gateway = f"{block.value}{third_octet}.{AP_GATEWAY_HOST}"
    return cidr, gateway
