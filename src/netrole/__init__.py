"""
Network Role Configurator Package
AP subnet validation and WiFi client profile reconciliation for NetworkManager hosts

Version 1.0.0 - Python 3.12+ with modern type system
"""

__version__ = "1.0.0"

from .addressing import AddressFormatError, CidrBlock, parse_cidr
from .outcomes import OutcomeKind, ValidationOutcome
from .config import ApConfiguration, WifiNetwork, WifiProfile
from .backends import NetworkManagerBackend, NetworkManagerError
from .ap_validator import ApConfigValidator
from .conflicts import ConflictStrictness
from .reconciler import ReconcileOutcome, ReconcileResult, WifiProfileReconciler
from .hostname import HostnameCandidate, HostnamePropagator, validate_hostname
from .factory import BackendFactory
from .store import ConfigStore
from .switcher import RoleSwitcher, SwitchOutcome, SwitchResult
from .configurator import ActionStatus, NetworkRoleConfigurator
from .settings import Settings, load_settings, init_config

__all__ = [
    "AddressFormatError",
    "CidrBlock",
    "parse_cidr",
    "OutcomeKind",
    "ValidationOutcome",
    "ApConfiguration",
    "WifiNetwork",
    "WifiProfile",
    "NetworkManagerBackend",
    "NetworkManagerError",
    "ApConfigValidator",
    "ConflictStrictness",
    "ReconcileOutcome",
    "ReconcileResult",
    "WifiProfileReconciler",
    "HostnameCandidate",
    "HostnamePropagator",
    "validate_hostname",
    "BackendFactory",
    "ConfigStore",
    "RoleSwitcher",
    "SwitchOutcome",
    "SwitchResult",
    "ActionStatus",
    "NetworkRoleConfigurator",
    "Settings",
    "load_settings",
    "init_config",
]
