"""
CLI interface for the network role configurator
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table
from rich import box

from . import __version__
from .backends import NetworkManagerError
from .config import DEFAULT_WIFI_INTERFACE, InterfaceName
from .configurator import NetworkRoleConfigurator
from .conflicts import ConflictStrictness
from .factory import BackendFactory
from .reconciler import ReconcileOutcome
from .settings import load_settings, init_config, get_config_paths, Settings, STRICTNESS_LEVELS
from .store import ConfigStore

# Subcommands that only touch local files
LOCAL_COMMANDS = ("show-config", "init-config")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='[%(asctime)s] %(levelname)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def create_parser(settings: Settings) -> argparse.ArgumentParser:
    """Create CLI argument parser with defaults from settings."""
    parser = argparse.ArgumentParser(
        prog="netrole",
        description="WiFi client / Access Point network configurator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check a candidate AP subnet without changing anything
  %(prog)s validate-ap 192.168.50.5/24 192.168.50.254

  # Pick a new AP address block
  %(prog)s set-ap-ip

  # Join or update a WiFi network
  %(prog)s wifi --ssid HomeNet

  # Fall back to the Access Point when no saved network is in range
  %(prog)s switch

  # Show current configuration
  %(prog)s show-config
        """
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--store",
        metavar="PATH",
        default=settings.store_path,
        help=f"AP configuration file (default: {settings.store_path})"
    )

    parser.add_argument(
        "--interface",
        metavar="IFNAME",
        default=None,
        help="WiFi interface (default: settings, then WIFI_INTERFACE from the store, "
             f"then {DEFAULT_WIFI_INTERFACE})"
    )

    parser.add_argument(
        "--strictness",
        choices=STRICTNESS_LEVELS,
        default=settings.conflict_strictness,
        help="Subnet conflict check: exact match or any overlap "
             f"(default: {settings.conflict_strictness})"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=settings.dry_run,
        help="Show what would be done without making changes"
    )

    parser.add_argument(
        "-y", "--yes",
        action="store_true",
        default=settings.skip_confirmation,
        help="Do not ask for confirmation"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"netrole {__version__}"
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    commands.add_parser("show-config", help="Show settings and the stored AP configuration")

    init = commands.add_parser("init-config", help="Initialize user config file with defaults")
    init.add_argument("--force", action="store_true", help="Overwrite an existing config file")

    validate = commands.add_parser("validate-ap", help="Validate a candidate AP subnet and gateway")
    validate.add_argument("cidr", help="AP address with prefix, e.g. 192.168.50.5/24")
    validate.add_argument("gateway", help="AP gateway, e.g. 192.168.50.254")

    commands.add_parser("set-ap-ip", help="Choose and store a new AP address block")
    commands.add_parser("set-ap-credentials", help="Change the AP SSID and password")
    commands.add_parser("list-networks", help="Scan and list visible WiFi networks")

    wifi = commands.add_parser("wifi", help="Add or modify a WiFi client profile")
    wifi.add_argument("--ssid", help="Network to configure (scan and prompt when omitted)")

    switch = commands.add_parser("switch", help="Join a saved network in range, otherwise start the AP")
    switch.add_argument("--start-ap", action="store_true", help="Start the Access Point without scanning")

    hostname = commands.add_parser("hostname", help="Validate and apply a new hostname")
    hostname.add_argument("name", nargs="?", help="New hostname (prompt when omitted)")

    return parser


def resolve_interface(requested: Optional[str], settings: Settings, store: ConfigStore) -> InterfaceName:
    """Pick the WiFi device: CLI option, settings, the store's WIFI_INTERFACE, then the default."""
    return requested or settings.wifi_interface or store.wifi_interface() or DEFAULT_WIFI_INTERFACE


def show_config(settings: Settings, store: ConfigStore, interface: InterfaceName) -> None:
    """Display current settings and the stored AP record."""
    console = Console()

    # Show config sources
    console.print("[bold cyan]Configuration Sources[/bold cyan]")
    if settings.config_sources:
        for source in settings.config_sources:
            console.print(f"  [green][OK][/green] {source}")
    else:
        console.print("  [dim]No config files found (using built-in defaults)[/dim]")

    console.print()

    # Show search paths
    console.print("[bold cyan]Config Search Paths[/bold cyan]")
    for path in get_config_paths():
        exists = "[green][OK][/green]" if path.exists() else "[dim]--[/dim]"
        console.print(f"  {exists} {path}")

    console.print()

    # Show current settings
    console.print("[bold cyan]Current Settings[/bold cyan]")
    settings_table = Table(box=box.SIMPLE)
    settings_table.add_column("Setting", style="cyan")
    settings_table.add_column("Value", style="white")

    settings_table.add_row("store_path", str(store.path))
    settings_table.add_row("wifi_interface", interface)
    settings_table.add_row("conflict_strictness", settings.conflict_strictness)
    settings_table.add_row("probe_timeout", f"{settings.probe_timeout:g}")
    settings_table.add_row("allow_boundary_gateway", str(settings.allow_boundary_gateway))
    settings_table.add_row("nmcli_timeout", str(settings.nmcli_timeout))
    settings_table.add_row("dry_run", str(settings.dry_run))

    console.print(settings_table)

    # Show stored AP record
    console.print("[bold cyan]Stored AP Record[/bold cyan]")
    if not store.exists():
        console.print(f"  [dim]{store.path} not found (defaults apply)[/dim]")
    config = store.load()

    record_table = Table(box=box.SIMPLE)
    record_table.add_column("Key", style="cyan")
    record_table.add_column("Value", style="white")
    stored = store.read()
    for key in ("WIFI_INTERFACE", "AP_PROFILE_NAME", "ENABLE_WIFI"):
        if key in stored:
            record_table.add_row(key, stored[key])
    record_table.add_row("AP_SSID", config.ssid)
    record_table.add_row("AP_CIDR", config.cidr)
    record_table.add_row("AP_GATEWAY", config.gateway_ip)
    console.print(record_table)


def list_networks(configurator: NetworkRoleConfigurator) -> int:
    """Scan and print visible networks."""
    networks = configurator.scan_networks()
    if not networks:
        return 1
    configurator.display_networks(networks)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code (0 for success or a canceled or unchanged action,
        1 for failed/rejected operations,
        2 for configuration errors, 3 for unsupported platforms,
        130 when interrupted)
    """
    console = Console()

    # Load settings first (before parsing args, so defaults come from config)
    settings = load_settings()

    # Now create parser with settings-based defaults
    parser = create_parser(settings)
    args = parser.parse_args(argv)

    # Setup logging
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    store = ConfigStore(Path(args.store))

    if args.command is None:
        parser.print_help()
        return 2

    # Handle config management commands first
    if args.command == "init-config":
        config_path = init_config(force=args.force)
        if config_path:
            console.print(f"[green][OK][/green] Config file created: {config_path}")
            console.print("\nEdit this file to adjust validation and store settings.")
        else:
            console.print("[yellow]Config file already exists.[/yellow]")
            console.print("Use show-config to view current settings.")
        return 0

    try:
        interface = resolve_interface(args.interface, settings, store)

        if args.command == "show-config":
            show_config(settings, store, interface)
            return 0

        # Check platform support
        if not BackendFactory.is_supported():
            logger.error("[FAIL] Current platform is not supported")
            logger.error("Supported platforms: Linux with NetworkManager")
            return 3

        backends = BackendFactory.create(
            interface=interface,
            timeout=settings.nmcli_timeout
        )

        configurator = NetworkRoleConfigurator(
            store,
            backends=backends,
            strictness=ConflictStrictness(args.strictness),
            probe_timeout=settings.probe_timeout,
            allow_boundary_gateway=settings.allow_boundary_gateway,
            dry_run=args.dry_run,
            skip_confirmation=args.yes
        )

        match args.command:
            case "validate-ap":
                outcome = configurator.validate_access_point(args.cidr, args.gateway)
                if outcome.is_valid:
                    console.print(f"[green][OK][/green] {args.cidr} via {args.gateway} is safe to use")
                    return 0
                console.print(f"[red][FAIL][/red] {outcome.reason}")
                return 1

            case "set-ap-ip":
                return 0 if configurator.update_access_point_ip().ok else 1

            case "set-ap-credentials":
                return 0 if configurator.update_access_point_credentials().ok else 1

            case "list-networks":
                return list_networks(configurator)

            case "wifi":
                result = configurator.setup_wifi_network(args.ssid)
                if result is None:
                    return 0
                return 1 if result.outcome is ReconcileOutcome.FAILED else 0

            case "switch":
                switched = configurator.switch_role(force_access_point=args.start_ap)
                return 0 if switched is None or switched.succeeded else 1

            case "hostname":
                return 0 if configurator.update_hostname(args.name).ok else 1

            case _:
                parser.error(f"unknown command {args.command}")

    except ValueError as e:
        logger.error(f"[FAIL] Configuration error: {e}")
        return 2
    except NetworkManagerError as e:
        logger.error(f"[FAIL] Network manager error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("\n[!] Configuration cancelled by user")
        return 130
    except Exception as e:
        logger.error(f"[FAIL] Unexpected error: {e}", exc_info=args.verbose)
        return 1

    return 1


if __name__ == "__main__":
    sys.exit(main())
