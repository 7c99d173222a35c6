"""
SSID and passphrase policies shared by AP validation and WiFi reconciliation
"""

from .outcomes import ValidationOutcome

SSID_MAX_LENGTH = 32
PASSPHRASE_MIN_LENGTH = 8
PASSPHRASE_MAX_LENGTH = 63


def validate_ssid(ssid: str) -> ValidationOutcome:
    """
    Check an access point SSID.

    Rules: 1-32 printable characters with no spaces anywhere.
    """
    if not ssid:
        return ValidationOutcome.invalid_format("SSID cannot be empty")
    if len(ssid) > SSID_MAX_LENGTH:
        return ValidationOutcome.invalid_format(
            f"SSID must be 1-{SSID_MAX_LENGTH} characters (got {len(ssid)})"
        )
    if not ssid.isprintable():
        return ValidationOutcome.invalid_format("SSID must contain only printable characters")
    if " " in ssid:
        return ValidationOutcome.invalid_format("SSID cannot contain spaces")
    return ValidationOutcome.valid()


def validate_passphrase(passphrase: str) -> ValidationOutcome:
    """
    Check a WPA passphrase.

    Rules: 8-63 printable characters, no leading or trailing spaces.
    """
    if not PASSPHRASE_MIN_LENGTH <= len(passphrase) <= PASSPHRASE_MAX_LENGTH:
        return ValidationOutcome.invalid_format(
            f"Password must be {PASSPHRASE_MIN_LENGTH}-{PASSPHRASE_MAX_LENGTH} characters"
        )
    if not passphrase.isprintable():
        return ValidationOutcome.invalid_format("Password must contain only printable characters")
    if passphrase != passphrase.strip(" "):
        return ValidationOutcome.invalid_format("Password cannot have leading or trailing spaces")
    return ValidationOutcome.valid()
