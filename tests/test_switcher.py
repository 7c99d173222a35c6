"""
Tests for switching between WiFi client and access point roles
"""

import pytest
from unittest.mock import MagicMock

from netrole.backends import NetworkManagerError
from netrole.config import ProfileMode, WifiNetwork, WifiProfile
from netrole.switcher import RoleSwitcher, SwitchOutcome


@pytest.fixture
def switcher(network_manager, sample_ap_config):
    """Switcher for the AccessPopup profile without settle delays"""
    switcher = RoleSwitcher(network_manager, sample_ap_config, ap_profile_name="AccessPopup")
    switcher.radio_delay = 0
    switcher.settle_delay = 0
    return switcher


class TestKnownNetworkVisible:
    """Test switching to a saved network that is in range"""

    def test_access_point_replaced_by_network(self, switcher, network_manager):
        """Test the AP is brought down and the saved profile brought up"""
        network_manager.active = "AccessPopup"

        result = switcher.switch()

        assert result.outcome is SwitchOutcome.CONNECTED_NETWORK
        assert result.profile == "HomeNet"
        assert network_manager.active == "HomeNet"
        calls = network_manager.calls
        assert calls.index(("deactivate_profile", "AccessPopup")) < calls.index(("activate_profile", "HomeNet"))

    def test_nothing_active_joins_network(self, switcher, network_manager):
        """Test an idle device joins a saved network before considering the AP"""
        result = switcher.switch()

        assert result.outcome is SwitchOutcome.CONNECTED_NETWORK
        assert "deactivate_profile" not in network_manager.call_names()
        assert "create_access_point" not in network_manager.call_names()

    def test_active_client_is_kept(self, switcher, network_manager):
        """Test an active client connection is left alone without scanning"""
        network_manager.active = "HomeNet"

        result = switcher.switch()

        assert result.outcome is SwitchOutcome.KEPT_NETWORK
        assert "list_networks" not in network_manager.call_names()
        assert "activate_profile" not in network_manager.call_names()

    def test_higher_priority_profile_tried_first(self, switcher, network_manager):
        """Test autoconnect priority decides between networks in range"""
        network_manager.profiles["Cafe"] = WifiProfile(name="Cafe", ssid="CoffeeShop", priority=10)
        network_manager.credentials["Cafe"] = "espresso123"

        result = switcher.switch()

        assert result.profile == "Cafe"
        assert ("activate_profile", "HomeNet") not in network_manager.calls

    def test_failing_network_falls_back_to_access_point(self, switcher, network_manager):
        """Test the AP comes back when no saved network connects"""
        network_manager.active = "AccessPopup"
        network_manager.credentials["HomeNet"] = "stale-password"

        result = switcher.switch()

        assert result.outcome is SwitchOutcome.STARTED_ACCESS_POINT
        assert ("activate_profile", "HomeNet") in network_manager.calls
        assert network_manager.active == "AccessPopup"


class TestNoKnownNetwork:
    """Test behaviour when no saved network is in range"""

    def test_access_point_started(self, switcher, network_manager):
        """Test an idle device brings up the existing AP profile"""
        network_manager.networks = [WifiNetwork(ssid="Guest", signal=30)]

        result = switcher.switch()

        assert result.outcome is SwitchOutcome.STARTED_ACCESS_POINT
        assert result.profile == "AccessPopup"
        assert "192.168.50.5/24" in result.message
        assert network_manager.active == "AccessPopup"
        assert "create_access_point" not in network_manager.call_names()

    def test_active_access_point_kept(self, switcher, network_manager):
        """Test a running AP stays up untouched"""
        network_manager.networks = [WifiNetwork(ssid="Guest", signal=30)]
        network_manager.active = "AccessPopup"

        result = switcher.switch()

        assert result.outcome is SwitchOutcome.KEPT_ACCESS_POINT
        assert "deactivate_profile" not in network_manager.call_names()
        assert "activate_profile" not in network_manager.call_names()

    def test_no_saved_clients_skips_scan(self, switcher, network_manager):
        """Test the scan is skipped when there is nothing to look for"""
        del network_manager.profiles["HomeNet"]

        result = switcher.switch()

        assert result.outcome is SwitchOutcome.STARTED_ACCESS_POINT
        assert "list_networks" not in network_manager.call_names()

    def test_scan_error_starts_access_point(self, switcher, network_manager):
        """Test a failed scan counts as no networks in range"""
        network_manager.list_networks = MagicMock(side_effect=NetworkManagerError("Device or resource busy"))

        result = switcher.switch()

        assert result.outcome is SwitchOutcome.STARTED_ACCESS_POINT

    def test_missing_profile_created_from_record(self, switcher, network_manager, sample_ap_config):
        """Test the AP profile is built from the stored AP record"""
        network_manager.networks = []
        del network_manager.profiles["AccessPopup"]

        result = switcher.switch()

        assert result.outcome is SwitchOutcome.STARTED_ACCESS_POINT
        assert network_manager.access_points["AccessPopup"] is sample_ap_config
        assert network_manager.profiles["AccessPopup"].mode is ProfileMode.ACCESS_POINT


class TestAccessPointActivation:
    """Test AP bring-up and recovery"""

    def test_recreated_after_failed_activation(self, switcher, network_manager):
        """Test a profile that fails to come up is deleted, recreated and retried"""
        network_manager.ap_failures = 1

        result = switcher.activate_access_point()

        assert result.outcome is SwitchOutcome.STARTED_ACCESS_POINT
        assert network_manager.call_names()[-5:] == [
            "activate_profile", "delete_profile", "create_access_point", "activate_profile", "active_connection"
        ]
        assert network_manager.active == "AccessPopup"

    def test_second_failure_reported(self, switcher, network_manager):
        """Test the AP is reported failed when recreation does not help"""
        network_manager.ap_failures = 2

        result = switcher.activate_access_point()

        assert result.outcome is SwitchOutcome.FAILED
        assert not result.succeeded
        assert "AccessPopup" in result.message

    def test_forced_access_point(self, switcher, network_manager):
        """Test forcing the AP skips the scan even with a client active"""
        network_manager.active = "HomeNet"

        result = switcher.switch(force_access_point=True)

        assert result.outcome is SwitchOutcome.STARTED_ACCESS_POINT
        assert "list_networks" not in network_manager.call_names()
        assert network_manager.active == "AccessPopup"


class TestRadio:
    """Test WiFi radio handling"""

    def test_disabled_radio_enabled(self, switcher, network_manager):
        """Test the radio is switched on when allowed"""
        network_manager.radio_on = False

        result = switcher.switch()

        assert "enable_radio" in network_manager.call_names()
        assert result.succeeded

    def test_disabled_radio_left_off(self, switcher, network_manager):
        """Test nothing else happens when the radio may not be enabled"""
        network_manager.radio_on = False
        switcher.enable_wifi = False

        result = switcher.switch()

        assert result.outcome is SwitchOutcome.FAILED
        assert "ENABLE_WIFI" in result.message
        assert network_manager.call_names() == ["radio_enabled"]
