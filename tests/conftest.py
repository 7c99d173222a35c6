"""
Pytest configuration and shared fixtures
"""

import pytest
from unittest.mock import MagicMock

from netrole.backends import NetworkManagerBackend, NetworkManagerError
from netrole.config import ApConfiguration, ProfileMode, WifiNetwork, WifiProfile
from netrole.factory import HostBackends
from netrole.store import ConfigStore


class FakeSubnetEnumerator:
    """In-memory active subnet list"""

    def __init__(self, subnets=None):
        self.subnets = list(subnets or [])

    def active_subnets(self):
        return list(self.subnets)


class FakeProbe:
    """Reachability probe answering from a fixed set of live addresses"""

    def __init__(self, live=None):
        self.live = set(live or [])
        self.calls = []

    def is_reachable(self, address, timeout=1.0):
        self.calls.append((address, timeout))
        return address in self.live


class FakeNetworkManager(NetworkManagerBackend):
    """
    In-memory network manager.

    Connections succeed only for SSIDs whose credential matches `passwords`;
    stored client profiles start out holding the matching secret.
    `persist_failed_connect` simulates a manager that keeps a profile after
    a failed connect. `ap_failures` is the number of access point
    activations that fail before one succeeds.
    """

    def __init__(self, networks=None, profiles=None, passwords=None, active=None):
        self.networks = list(networks or [])
        self.profiles = {profile.name: profile for profile in profiles or []}
        self.passwords = dict(passwords or {})
        self.credentials = {
            profile.name: self.passwords[profile.ssid]
            for profile in self.profiles.values()
            if not profile.is_access_point and profile.ssid in self.passwords
        }
        self.active = active
        self.radio_on = True
        self.ap_failures = 0
        self.access_points = {}
        self.calls = []
        self.persist_failed_connect = False
        self.fail_listing = False

    def list_networks(self):
        self.calls.append(("list_networks",))
        return list(self.networks)

    def list_profiles(self):
        self.calls.append(("list_profiles",))
        if self.fail_listing:
            raise NetworkManagerError("NetworkManager is not running")
        return list(self.profiles.values())

    def set_profile_credential(self, name, credential):
        self.calls.append(("set_profile_credential", name, credential))
        if name not in self.profiles:
            raise NetworkManagerError(f"unknown connection '{name}'")
        self.credentials[name] = credential

    def activate_profile(self, name):
        self.calls.append(("activate_profile", name))
        profile = self.profiles.get(name)
        if profile is None:
            raise NetworkManagerError(f"unknown connection '{name}'")
        if profile.is_access_point:
            if self.ap_failures > 0:
                self.ap_failures -= 1
                raise NetworkManagerError("Connection activation failed: IP configuration could not be reserved")
        elif self.passwords.get(profile.ssid) != self.credentials.get(name):
            raise NetworkManagerError("Secrets were required, but not provided")
        self.active = name

    def connect_or_create(self, ssid, credential):
        self.calls.append(("connect_or_create", ssid, credential))
        if self.passwords.get(ssid) != credential:
            if self.persist_failed_connect:
                self.profiles[ssid] = WifiProfile(name=ssid, ssid=ssid)
            raise NetworkManagerError("Secrets were required, but not provided")
        self.profiles[ssid] = WifiProfile(name=ssid, ssid=ssid)
        self.credentials[ssid] = credential
        self.active = ssid

    def delete_profile(self, name):
        self.calls.append(("delete_profile", name))
        if self.profiles.pop(name, None) is None:
            raise NetworkManagerError(f"unknown connection '{name}'")
        if self.active == name:
            self.active = None

    def deactivate_profile(self, name):
        self.calls.append(("deactivate_profile", name))
        if self.active != name:
            raise NetworkManagerError(f"'{name}' is not an active connection")
        self.active = None

    def radio_enabled(self):
        self.calls.append(("radio_enabled",))
        return self.radio_on

    def enable_radio(self):
        self.calls.append(("enable_radio",))
        self.radio_on = True

    def active_connection(self):
        self.calls.append(("active_connection",))
        return self.profiles.get(self.active)

    def create_access_point(self, config, profile_name):
        self.calls.append(("create_access_point", profile_name))
        self.profiles[profile_name] = WifiProfile(
            name=profile_name, ssid=config.ssid, mode=ProfileMode.ACCESS_POINT
        )
        self.access_points[profile_name] = config

    def call_names(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def enumerator() -> FakeSubnetEnumerator:
    """Host with a single LAN address"""
    return FakeSubnetEnumerator(["192.168.1.23/24"])


@pytest.fixture
def probe() -> FakeProbe:
    """Probe with no live addresses"""
    return FakeProbe()


@pytest.fixture
def home_profile() -> WifiProfile:
    """Stored client profile for HomeNet"""
    return WifiProfile(name="HomeNet", ssid="HomeNet")


@pytest.fixture
def ap_profile() -> WifiProfile:
    """Stored access point profile"""
    return WifiProfile(name="AccessPopup", ssid="AP_Pop-Up", mode=ProfileMode.ACCESS_POINT)


@pytest.fixture
def network_manager(home_profile, ap_profile) -> FakeNetworkManager:
    """Manager with HomeNet and AP profiles and three visible networks"""
    return FakeNetworkManager(
        networks=[
            WifiNetwork(ssid="HomeNet", signal=82, security="WPA2", in_use=True),
            WifiNetwork(ssid="CoffeeShop", signal=55, security="WPA2"),
            WifiNetwork(ssid="Guest", signal=30),
        ],
        profiles=[home_profile, ap_profile],
        passwords={"HomeNet": "correct-horse", "CoffeeShop": "espresso123"}
    )


@pytest.fixture
def backends(enumerator, probe, network_manager) -> HostBackends:
    """Collaborator bundle built from in-memory fakes"""
    return HostBackends(enumerator=enumerator, probe=probe, network_manager=network_manager)


@pytest.fixture
def sample_ap_config() -> ApConfiguration:
    """Default AP configuration"""
    return ApConfiguration.from_strings("AP_Pop-Up", "1234567890", "192.168.50.5/24", "192.168.50.254")


@pytest.fixture
def store_file(tmp_path):
    """AP configuration file as written by the installer"""
    path = tmp_path / "ap.conf"
    path.write_text(
        "# netrole access point settings\n"
        'WIFI_INTERFACE="wlan0"\n'
        'AP_PROFILE_NAME="AccessPopup"\n'
        'AP_SSID="AP_Pop-Up"\n'
        'AP_PASSWORD="1234567890"\n'
        'AP_CIDR="192.168.50.5/24"\n'
        'AP_GATEWAY="192.168.50.254"\n'
        'ENABLE_WIFI="true"\n'
    )
    return path


@pytest.fixture
def store(store_file) -> ConfigStore:
    """Store backed by the sample file"""
    return ConfigStore(store_file)


@pytest.fixture
def mock_runner():
    """Command runner that records calls and always succeeds"""
    return MagicMock(return_value=MagicMock(returncode=0, stdout="", stderr=""))
