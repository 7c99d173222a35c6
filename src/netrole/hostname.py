"""
Hostname validation and best-effort propagation to system identity stores
"""

import logging
import os
import re
import socket
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, MutableMapping, Optional, Sequence, TypeAlias

from .outcomes import ValidationOutcome

logger = logging.getLogger(__name__)

HOSTNAME_MAX_LENGTH = 63
_HOSTNAME_CHARS = re.compile(r"[a-zA-Z0-9-]+")


def _host_token(name: str) -> re.Pattern:
    """Match a name only where it is not part of a longer hostname label"""
    return re.compile(rf"(?<![A-Za-z0-9-]){re.escape(name)}(?![A-Za-z0-9-])")


CommandRunner: TypeAlias = Callable[[Sequence[str]], object]


def validate_hostname(value: str) -> ValidationOutcome:
    """
    Check a proposed hostname against the single-label rules.

    Args:
        value: Proposed hostname

    Returns:
        VALID or INVALID_FORMAT with the first rule that failed
    """
    if not value:
        return ValidationOutcome.invalid_format("Hostname cannot be empty")
    if len(value) > HOSTNAME_MAX_LENGTH:
        return ValidationOutcome.invalid_format(
            f"Hostname must be between 1 and {HOSTNAME_MAX_LENGTH} characters"
        )
    if value[0] in "-." or value[-1] in "-.":
        return ValidationOutcome.invalid_format("Hostname cannot start or end with a hyphen or period")
    if not _HOSTNAME_CHARS.fullmatch(value):
        return ValidationOutcome.invalid_format(
            "Hostname can only contain alphanumeric characters and hyphens"
        )
    return ValidationOutcome.valid()


@dataclass(frozen=True, slots=True)
class HostnameCandidate:
    """A proposed hostname awaiting validation"""
    value: str

    def validate(self) -> ValidationOutcome:
        return validate_hostname(self.value)


@dataclass(frozen=True, slots=True)
class PropagationStep:
    """
    Result of one propagation step.

    Attributes:
        description: What the step changed
        succeeded: Whether it completed
        detail: Error text when it did not
    """
    description: str
    succeeded: bool
    detail: str = ""


def _run_command(cmd: Sequence[str]) -> subprocess.CompletedProcess:
    return subprocess.run(list(cmd), capture_output=True, text=True, check=True, timeout=30)


class HostnamePropagator:
    """
    Apply a new hostname to every identity store, one independent step at a time.

    A failed step is reported and the remaining steps still run. Nothing is
    rolled back.
    """

    def __init__(
        self,
        hostname_file: Path = Path("/etc/hostname"),
        hosts_file: Path = Path("/etc/hosts"),
        runner: Optional[CommandRunner] = None,
        environ: Optional[MutableMapping[str, str]] = None
    ):
        self.hostname_file = hostname_file
        self.hosts_file = hosts_file
        self.runner = runner or _run_command
        self.environ = os.environ if environ is None else environ

    def propagate(self, new: str, current: Optional[str] = None) -> list[PropagationStep]:
        """
        Propagate a hostname.

        Args:
            new: Hostname to apply
            current: Hostname being replaced (default: socket.gethostname())

        Returns:
            One PropagationStep per store, in execution order

        Raises:
            ValueError: If the hostname is invalid; no step runs in that case
        """
        outcome = validate_hostname(new)
        if not outcome.is_valid:
            raise ValueError(f"Invalid hostname: {outcome.reason}")

        if current is None:
            current = socket.gethostname()

        logger.info(f"[*] Changing hostname from {current} to {new}")

        steps = [
            ("Update hostname via nmcli", lambda: self.runner(["nmcli", "general", "hostname", new])),
            (f"Update {self.hostname_file}", lambda: self.hostname_file.write_text(f"{new}\n")),
            (f"Update {self.hosts_file}", lambda: self._update_hosts(current, new)),
            ("Set hostname with hostnamectl", lambda: self.runner(["hostnamectl", "set-hostname", new])),
            ("Update session HOSTNAME variable", lambda: self.environ.__setitem__("HOSTNAME", new)),
            ("Restart avahi-daemon", lambda: self.runner(["systemctl", "restart", "avahi-daemon"])),
        ]

        results = []
        for description, action in steps:
            results.append(self._execute(description, action))

        failed = [step for step in results if not step.succeeded]
        if failed:
            logger.warning(f"[!] Hostname updated with {len(failed)} failed step(s)")
        else:
            logger.info(f"[OK] Hostname updated to {new}")
        return results

    def _execute(self, description: str, action: Callable[[], object]) -> PropagationStep:
        try:
            action()
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip() if isinstance(e.stderr, str) else ""
            detail = detail or f"exit status {e.returncode}"
            logger.error(f"[FAIL] {description}: {detail}")
            return PropagationStep(description, False, detail)
        except (subprocess.TimeoutExpired, OSError) as e:
            logger.error(f"[FAIL] {description}: {e}")
            return PropagationStep(description, False, str(e))
        logger.info(f"[OK] {description}")
        return PropagationStep(description, True)

    def _update_hosts(self, old: str, new: str) -> None:
        content = self.hosts_file.read_text()
        updated = content
        if old:
            updated = _host_token(old).sub(new, updated)
        if not _host_token(new).search(updated):
            updated = updated.rstrip("\n") + f"\n127.0.1.1\t{new}\n"
        if updated != content:
            self.hosts_file.write_text(updated)
