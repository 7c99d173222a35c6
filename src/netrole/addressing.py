"""
IPv4 address arithmetic on 32-bit integers
Pure functions, no I/O
"""

import re
from dataclasses import dataclass

MAX_ADDRESS = 0xFFFFFFFF
MAX_PREFIX = 32

_CIDR_PATTERN = re.compile(r"([0-9.]+)/([0-9]+)")


class AddressFormatError(ValueError):
    """Raised when an address, prefix or CIDR string is malformed"""


def ip_to_int(address: str) -> int:
    """
    Convert a dotted-decimal IPv4 address to its 32-bit integer value.

    Args:
        address: Four dot-separated decimal octets (e.g., 192.168.1.1)

    Returns:
        Integer in the range 0..0xFFFFFFFF

    Raises:
        AddressFormatError: If any octet is non-numeric or outside 0-255
    """
    parts = address.split(".")
    if len(parts) != 4:
        raise AddressFormatError(f"'{address}' is not a four-octet IPv4 address")

    value = 0
    for part in parts:
        # isdigit() alone accepts non-ASCII digits such as superscripts
        if not (part.isascii() and part.isdigit()):
            raise AddressFormatError(f"Octet '{part}' in '{address}' is not numeric")
        octet = int(part)
        if octet > 255:
            raise AddressFormatError(f"Octet {octet} in '{address}' is out of range 0-255")
        value = (value << 8) | octet

    return value


def int_to_ip(value: int) -> str:
    """
    Convert a 32-bit integer to dotted-decimal notation.

    Raises:
        AddressFormatError: If value does not fit in 32 unsigned bits
    """
    if not 0 <= value <= MAX_ADDRESS:
        raise AddressFormatError(f"{value} is not a 32-bit address value")
    return ".".join(str((value >> shift) & 0xFF) for shift in (24, 16, 8, 0))


def mask_from_prefix(prefix_length: int) -> int:
    """
    Build a subnet mask with `prefix_length` leading one-bits.

    Args:
        prefix_length: Prefix length, 0-32

    Returns:
        Mask as a 32-bit integer (0 for /0, 0xFFFFFFFF for /32)

    Raises:
        AddressFormatError: If prefix_length is outside 0-32
    """
    if not 0 <= prefix_length <= MAX_PREFIX:
        raise AddressFormatError(f"Prefix length {prefix_length} is out of range 0-32")
    if prefix_length == 0:
        return 0
    if prefix_length == MAX_PREFIX:
        return MAX_ADDRESS
    return (MAX_ADDRESS << (MAX_PREFIX - prefix_length)) & MAX_ADDRESS


def network_address(base: int, mask: int) -> int:
    """Network address of `base` under `mask`"""
    return base & mask


def broadcast_address(network: int, mask: int) -> int:
    """Broadcast address of `network` under `mask`"""
    return network | (~mask & MAX_ADDRESS)


@dataclass(frozen=True, slots=True)
class CidrBlock:
    """
    An IPv4 address paired with a prefix length.

    The base address keeps its host bits, so a block parsed from
    "192.168.50.5/24" renders back as "192.168.50.5/24". Use `network`
    for the masked value.

    Attributes:
        base_address: Address as a 32-bit integer
        prefix_length: Prefix length, 0-32
    """
    base_address: int
    prefix_length: int

    def __post_init__(self) -> None:
        if not 0 <= self.base_address <= MAX_ADDRESS:
            raise AddressFormatError(f"{self.base_address} is not a 32-bit address value")
        if not 0 <= self.prefix_length <= MAX_PREFIX:
            raise AddressFormatError(f"Prefix length {self.prefix_length} is out of range 0-32")

    def __str__(self) -> str:
        return f"{int_to_ip(self.base_address)}/{self.prefix_length}"

    @property
    def mask(self) -> int:
        return mask_from_prefix(self.prefix_length)

    @property
    def network(self) -> int:
        return network_address(self.base_address, self.mask)

    @property
    def broadcast(self) -> int:
        return broadcast_address(self.network, self.mask)

    @property
    def network_cidr(self) -> str:
        """Canonical network form, e.g. 192.168.50.0/24"""
        return f"{int_to_ip(self.network)}/{self.prefix_length}"

    def contains(self, address: int) -> bool:
        """Check whether address lies within [network, broadcast]"""
        return self.network <= address <= self.broadcast

    def overlaps(self, other: "CidrBlock") -> bool:
        """Check whether the two address ranges share any address"""
        return self.network <= other.broadcast and other.network <= self.broadcast


def parse_cidr(text: str) -> CidrBlock:
    """
    Parse "a.b.c.d/p" into a CidrBlock.

    Raises:
        AddressFormatError: If the text is not an address, a slash and a prefix 0-32
    """
    match = _CIDR_PATTERN.fullmatch(text)
    if not match:
        raise AddressFormatError(f"'{text}' is not in CIDR notation (a.b.c.d/prefix)")

    address, prefix = match.groups()
    prefix_length = int(prefix)
    if prefix_length > MAX_PREFIX:
        raise AddressFormatError(f"Prefix length {prefix_length} is out of range 0-32")

    return CidrBlock(ip_to_int(address), prefix_length)
