"""
Tests for factory pattern
"""

import pytest
from unittest.mock import patch

from netrole.factory import BackendFactory, HostBackends
from netrole.config import OSType
from netrole.linux import IpAddrSubnetEnumerator, NmcliBackend, PingProbe


class TestBackendFactory:
    """Test factory pattern implementation"""

    @patch('platform.system')
    def test_create_linux_backends(self, mock_system):
        """Test factory creates Linux collaborators"""
        mock_system.return_value = "Linux"
        backends = BackendFactory.create()
        assert isinstance(backends, HostBackends)
        assert isinstance(backends.enumerator, IpAddrSubnetEnumerator)
        assert isinstance(backends.probe, PingProbe)
        assert isinstance(backends.network_manager, NmcliBackend)

    def test_create_passes_interface_and_timeout(self):
        """Test nmcli backend receives interface and timeout"""
        backends = BackendFactory.create(OSType.LINUX, interface="wlan1", timeout=45)
        assert backends.network_manager.interface == "wlan1"
        assert backends.network_manager.timeout == 45

    @patch('platform.system')
    def test_create_unsupported_os(self, mock_system):
        """Test factory raises error for unsupported OS"""
        mock_system.return_value = "FreeBSD"
        with pytest.raises(NotImplementedError, match="not supported"):
            BackendFactory.create()

    @pytest.mark.parametrize("os_type", [OSType.MACOS, OSType.WINDOWS])
    def test_create_non_linux_not_implemented(self, os_type):
        """Test every non-Linux platform raises the same NotImplementedError"""
        with pytest.raises(NotImplementedError, match="needs Linux with NetworkManager"):
            BackendFactory.create(os_type)

    @patch('platform.system')
    def test_is_supported_linux(self, mock_system):
        """Test Linux is supported"""
        mock_system.return_value = "Linux"
        assert BackendFactory.is_supported()

    @patch('platform.system')
    def test_is_supported_macos(self, mock_system):
        """Test macOS is not supported"""
        mock_system.return_value = "Darwin"
        assert not BackendFactory.is_supported()

    @patch('platform.system')
    def test_is_supported_unknown_os(self, mock_system):
        """Test unknown OS is not supported"""
        mock_system.return_value = "FreeBSD"
        assert not BackendFactory.is_supported()

    @pytest.mark.parametrize("system,expected", [
        ("Darwin", OSType.MACOS),
        ("Linux", OSType.LINUX),
        ("Windows", OSType.WINDOWS),
    ])
    def test_detect_os(self, system, expected):
        """Test OS detection"""
        with patch('platform.system', return_value=system):
            assert BackendFactory._detect_os() == expected
