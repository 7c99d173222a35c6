"""
Interactive workflows tying validation, reconciliation and persistence together
"""

import logging
import socket
import time
from dataclasses import replace
from enum import Enum
from typing import Optional

from rich import box
from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from .addressing import AddressFormatError
from .ap_validator import ApConfigValidator, DEFAULT_PROBE_TIMEOUT
from .backends import NetworkManagerError
from .config import ApConfiguration, CidrString, IPAddress, SSID, WifiNetwork, WifiProfile
from .conflicts import ConflictStrictness
from .credentials import validate_passphrase, validate_ssid
from .factory import BackendFactory, HostBackends
from .hostname import HostnamePropagator, PropagationStep, validate_hostname
from .outcomes import ValidationOutcome
from .reconciler import ReconcileResult, WifiProfileReconciler
from .store import ConfigStore
from .subnet import (
    MAX_FOURTH_OCTET, MAX_THIRD_OCTET, AddressBlock, build_ap_subnet, parse_host_number
)
from .switcher import RoleSwitcher, SwitchResult

logger = logging.getLogger(__name__)
default_console = Console()

SCAN_ATTEMPTS = 5
SCAN_RETRY_DELAY = 2.0


class ActionStatus(Enum):
    """How an interactive action ended"""
    APPLIED = "applied"
    UNCHANGED = "unchanged"
    CANCELED = "canceled"
    DRY_RUN = "dry_run"
    REJECTED = "rejected"
    FAILED = "failed"

    @property
    def ok(self) -> bool:
        """False only when input was rejected or a change failed"""
        return self not in (ActionStatus.REJECTED, ActionStatus.FAILED)


class NetworkRoleConfigurator:
    """
    Menu actions for the AP record, WiFi client profiles, role switching
    and the hostname.

    Each action reads the stored AP record once, validates user input,
    asks for confirmation and writes once at the end.

    Attributes:
        store: Persisted AP record
        backends: Host collaborators (auto-created if not provided)
        validator: AP subnet/gateway validator
        reconciler: WiFi client profile reconciler
        dry_run: If True, show what would be done without making changes
        skip_confirmation: Skip confirmation prompts
    """

    def __init__(
        self,
        store: ConfigStore,
        backends: Optional[HostBackends] = None,
        strictness: ConflictStrictness = ConflictStrictness.EXACT,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
        allow_boundary_gateway: bool = True,
        dry_run: bool = False,
        skip_confirmation: bool = False,
        propagator: Optional[HostnamePropagator] = None,
        console: Optional[Console] = None
    ):
        self.store = store
        self.backends = backends or BackendFactory.create()
        self.validator = ApConfigValidator(
            self.backends.enumerator,
            self.backends.probe,
            strictness=strictness,
            probe_timeout=probe_timeout,
            allow_boundary_gateway=allow_boundary_gateway
        )
        self.reconciler = WifiProfileReconciler(self.backends.network_manager)
        self.propagator = propagator or HostnamePropagator()
        self.dry_run = dry_run
        self.skip_confirmation = skip_confirmation
        self.console = console or default_console
        self.scan_retry_delay = SCAN_RETRY_DELAY

    def _confirm(self, question: str, default: bool = False) -> bool:
        if self.skip_confirmation:
            return True
        return Confirm.ask(question, default=default, console=self.console)

    def show_configuration(self, config: Optional[ApConfiguration] = None) -> None:
        """Display the stored AP record"""
        config = config or self.store.load()

        table = Table(title="Access Point Configuration", box=box.ROUNDED, show_header=False)
        table.add_column("Setting", style="yellow")
        table.add_column("Value", style="green")
        table.add_row("Store", str(self.store.path))
        table.add_row("AP SSID", config.ssid)
        table.add_row("AP Password", config.password)
        table.add_row("AP IP", config.cidr)
        table.add_row("AP Gateway", config.gateway_ip)
        table.add_row("AP Network", config.subnet.network_cidr)
        self.console.print(table)

    def validate_access_point(self, cidr: CidrString, gateway: IPAddress) -> ValidationOutcome:
        """Run the full AP validation for a candidate subnet and gateway"""
        self.console.print("Validating network configuration, this will take a moment.")
        return self.validator.validate(cidr, gateway)

    def update_access_point_ip(self) -> ActionStatus:
        """
        Choose a new AP address block, validate it and store it.

        The AP always gets a /24 with the gateway at host .254.

        Returns:
            APPLIED if a new address was stored
        """
        config = self.store.load()
        self.console.print(f"\n>> [yellow]Current AP IP:[/yellow] [green]{config.cidr}[/green]")
        self.console.print(f">> [yellow]Current AP GW:[/yellow] [green]{config.gateway_ip}[/green]\n")

        self.console.print("Choose a new network:")
        self.console.print("    1) 192.168.xxx.xxx")
        self.console.print("    2) 10.0.xxx.xxx")
        self.console.print("    3) Cancel")
        choice = Prompt.ask("Selection", choices=["1", "2", "3"], default="3", console=self.console)

        match choice:
            case "1":
                block = AddressBlock.CLASS_C
            case "2":
                block = AddressBlock.CLASS_A
            case _:
                logger.info("Changes canceled.")
                return ActionStatus.CANCELED

        try:
            third = parse_host_number(
                Prompt.ask(f"Enter the third octet (0-{MAX_THIRD_OCTET})", console=self.console),
                MAX_THIRD_OCTET
            )
            fourth = parse_host_number(
                Prompt.ask(f"Enter the fourth octet (0-{MAX_FOURTH_OCTET})", console=self.console),
                MAX_FOURTH_OCTET
            )
        except AddressFormatError as e:
            logger.warning(f"[!] {e}")
            return ActionStatus.REJECTED

        cidr, gateway = build_ap_subnet(block, third, fourth)

        outcome = self.validate_access_point(cidr, gateway)
        if not outcome.is_valid:
            self.console.print(f"[red][FAIL] {outcome.reason}[/red]")
            return ActionStatus.REJECTED

        self.console.print(f"\n<< [yellow]New AP IP will be:[/yellow] [green]{cidr}[/green]")
        self.console.print(f"<< [yellow]New AP GW will be:[/yellow] [green]{gateway}[/green]\n")

        updated = ApConfiguration.from_strings(config.ssid, config.password, cidr, gateway)
        return self._persist(updated, "Apply these changes?")

    def update_access_point_credentials(self) -> ActionStatus:
        """
        Prompt for a new AP SSID and password (Enter keeps the current value).

        An invalid SSID aborts the action; an invalid password keeps the
        current one.

        Returns:
            APPLIED if a changed record was stored; REJECTED if the only
            change offered was invalid
        """
        config = self.store.load()

        self.console.print(f"\n>> [yellow]Current AP SSID:[/yellow] [green]{config.ssid}[/green]")
        new_ssid = Prompt.ask(
            "Enter new SSID (1-32 characters, no spaces, Enter to keep current)",
            default="", show_default=False, console=self.console
        ).strip().strip('"')

        ssid = config.ssid
        if new_ssid:
            outcome = validate_ssid(new_ssid)
            if not outcome.is_valid:
                logger.error(f"[FAIL] Invalid SSID: {outcome.reason}")
                return ActionStatus.REJECTED
            ssid = new_ssid
        else:
            self.console.print("Keeping the current SSID.")

        self.console.print(f"\n>> [yellow]Current AP Password:[/yellow] [green]{config.password}[/green]")
        new_password = Prompt.ask(
            "Enter new password (8-63 printable characters, Enter to keep current)",
            default="", show_default=False, password=True, console=self.console
        ).strip()

        password = config.password
        password_rejected = False
        if new_password:
            outcome = validate_passphrase(new_password)
            if outcome.is_valid:
                password = new_password
            else:
                logger.error(f"[FAIL] Invalid password: {outcome.reason}")
                password_rejected = True
        else:
            self.console.print("Keeping the current password.")

        if (ssid, password) == (config.ssid, config.password):
            logger.info("[i] AP credentials unchanged")
            return ActionStatus.REJECTED if password_rejected else ActionStatus.UNCHANGED

        return self._persist(replace(config, ssid=ssid, password=password), "Save the new AP credentials?")

    def _persist(self, config: ApConfiguration, question: str) -> ActionStatus:
        if self.dry_run:
            logger.info(f"[DRY-RUN] Would write {config.ssid} {config.cidr} via {config.gateway_ip} to {self.store.path}")
            return ActionStatus.DRY_RUN

        if not self._confirm(question):
            logger.info("Changes canceled.")
            return ActionStatus.CANCELED

        self.store.save(config)
        self.console.print("[green]Changes applied successfully.[/green]")
        return ActionStatus.APPLIED

    def scan_networks(self, attempts: int = SCAN_ATTEMPTS) -> list[WifiNetwork]:
        """
        Scan for networks, retrying while the radio is busy.

        Args:
            attempts: Maximum number of scans

        Returns:
            Visible networks, strongest first (empty if none were found)
        """
        manager = self.backends.network_manager
        for attempt in range(1, attempts + 1):
            try:
                networks = list(manager.list_networks())
            except NetworkManagerError as e:
                logger.warning(f"[!] Scan attempt {attempt}/{attempts} failed: {e}")
                networks = []
            if networks:
                return networks
            if attempt < attempts:
                logger.info(f"[i] WiFi device is busy or unavailable. Retrying in {self.scan_retry_delay:g} seconds.")
                time.sleep(self.scan_retry_delay)

        logger.error("[FAIL] WiFi device is unavailable. Unable to scan for networks at this time.")
        return []

    def display_networks(self, networks: list[WifiNetwork]) -> None:
        """Display scan results in a numbered table"""
        table = Table(title="Detected WiFi networks", box=box.ROUNDED)
        table.add_column("#", justify="right", style="cyan")
        table.add_column("SSID", style="bold")
        table.add_column("Signal", justify="right")
        table.add_column("Security")
        table.add_column("In use", justify="center")

        for index, network in enumerate(networks, start=1):
            table.add_row(
                str(index),
                network.ssid,
                f"{network.signal}%",
                network.security or "open",
                "*" if network.in_use else ""
            )
        self.console.print(table)

    def select_network(self, networks: list[WifiNetwork]) -> Optional[SSID]:
        """Ask the user to pick a network by number; Enter or the cancel entry returns None"""
        cancel = len(networks) + 1
        self.console.print(f"{cancel}) Cancel")

        while True:
            selection = Prompt.ask(
                "Enter the number of the network you wish to configure",
                default="", show_default=False, console=self.console
            ).strip()
            if not selection:
                self.console.print("No selection, exiting to menu.")
                return None
            if selection.isdigit() and 1 <= int(selection) <= cancel:
                if int(selection) == cancel:
                    self.console.print("Operation canceled.")
                    return None
                return networks[int(selection) - 1].ssid
            logger.warning("[!] Invalid selection. Please try again.")

    def _ask_credential(self, profile: Optional[WifiProfile]) -> Optional[str]:
        if profile is not None:
            question = "Enter the new password for the network (or press Enter to skip updating)"
        else:
            question = "Enter the password for the network (minimum 8 characters)"
        credential = Prompt.ask(question, default="", show_default=False, password=True, console=self.console)
        return credential or None

    def setup_wifi_network(self, ssid: Optional[SSID] = None) -> Optional[ReconcileResult]:
        """
        Add or modify a WiFi client profile.

        Args:
            ssid: Network to configure; scan and prompt when None

        Returns:
            ReconcileResult, or None if the user canceled or in dry-run mode

        Raises:
            NetworkManagerError: If the scan found no networks to choose from
        """
        if ssid is None:
            self.console.print("[bold yellow]Add or modify a WiFi Network[/bold yellow]")
            self.console.print("Scanning for available WiFi networks.")
            networks = self.scan_networks()
            if not networks:
                raise NetworkManagerError("No WiFi networks detected")
            self.display_networks(networks)
            ssid = self.select_network(networks)
            if ssid is None:
                return None

        if self.dry_run:
            logger.info(f"[DRY-RUN] Would reconcile the WiFi profile for {ssid}")
            return None

        result = self.reconciler.reconcile(ssid, self._ask_credential)
        style = "green" if result.succeeded else ("yellow" if not result.connection_attempted else "red")
        self.console.print(f"[{style}]{result.message}[/{style}]")
        return result

    def switch_role(self, force_access_point: bool = False) -> Optional[SwitchResult]:
        """
        Join a saved network in range, or bring up the AP from the stored record.

        Args:
            force_access_point: Start the AP without scanning

        Returns:
            SwitchResult, or None in dry-run mode
        """
        config = self.store.load()
        switcher = RoleSwitcher(
            self.backends.network_manager,
            config,
            ap_profile_name=self.store.ap_profile_name(),
            enable_wifi=self.store.enable_wifi()
        )

        if self.dry_run:
            target = "start" if force_access_point else "switch to a saved network or start"
            logger.info(f"[DRY-RUN] Would {target} Access Point {switcher.ap_profile_name} at {config.cidr}")
            return None

        result = switcher.switch(force_access_point)
        style = "green" if result.succeeded else "red"
        self.console.print(f"[{style}]{result.message}[/{style}]")
        return result

    def update_hostname(self, new: Optional[str] = None, current: Optional[str] = None) -> ActionStatus:
        """
        Validate and propagate a new hostname.

        Args:
            new: Hostname to apply; prompt when None
            current: Hostname being replaced (default: detected)

        Returns:
            APPLIED when every propagation step succeeded, FAILED when any
            step failed
        """
        if current is None:
            current = socket.gethostname()

        if new is None:
            self.console.print(f"\n>> [yellow]Current hostname:[/yellow] [green]{current}[/green]")
            new = Prompt.ask(
                "Enter a new hostname (Enter to keep current)",
                default="", show_default=False, console=self.console
            ).strip()

        if not new or new == current:
            self.console.print("Keeping the current hostname.")
            return ActionStatus.UNCHANGED

        outcome = validate_hostname(new)
        if not outcome.is_valid:
            logger.error(f"[FAIL] Invalid hostname: {outcome.reason}")
            return ActionStatus.REJECTED

        if self.dry_run:
            logger.info(f"[DRY-RUN] Would change hostname from {current} to {new}")
            return ActionStatus.DRY_RUN

        if not self._confirm(f"Change hostname from {current} to {new}?", default=True):
            logger.info("Changes canceled.")
            return ActionStatus.CANCELED

        steps = self.propagator.propagate(new, current)
        self._show_steps(new, steps)
        return ActionStatus.APPLIED if all(step.succeeded for step in steps) else ActionStatus.FAILED

    def _show_steps(self, hostname: str, steps: list[PropagationStep]) -> None:
        table = Table(title=f"Hostname updated to {hostname}", box=box.SIMPLE)
        table.add_column("Step")
        table.add_column("Result")
        for step in steps:
            result = "[green]OK[/green]" if step.succeeded else f"[red]FAILED[/red] {step.detail}"
            table.add_row(step.description, result)
        self.console.print(table)
