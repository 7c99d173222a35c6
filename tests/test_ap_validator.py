"""
Tests for AP configuration validation
"""

import pytest
from unittest.mock import MagicMock

from netrole.ap_validator import ApConfigValidator
from netrole.config import ApConfiguration
from netrole.conflicts import ConflictStrictness
from netrole.outcomes import OutcomeKind

from conftest import FakeProbe, FakeSubnetEnumerator


class TestApConfigValidator:
    """Test ordered AP validation"""

    def test_valid_configuration(self, enumerator, probe):
        """Test free subnet with silent gateway is valid"""
        validator = ApConfigValidator(enumerator, probe)
        outcome = validator.validate("192.168.50.0/24", "192.168.50.254")
        assert outcome.is_valid
        assert probe.calls == [("192.168.50.254", 1.0)]

    def test_subnet_conflict_short_circuits(self, probe):
        """Test a conflicting subnet is rejected before the probe runs"""
        validator = ApConfigValidator(FakeSubnetEnumerator(["192.168.50.0/24"]), probe)
        outcome = validator.validate("192.168.50.0/24", "192.168.50.254")
        assert outcome.kind is OutcomeKind.SUBNET_CONFLICT
        assert probe.calls == []

    def test_conflict_checked_before_format(self, probe):
        """Test conflict wins even when the gateway is malformed"""
        validator = ApConfigValidator(FakeSubnetEnumerator(["192.168.50.0/24"]), probe)
        outcome = validator.validate("192.168.50.0/24", "not-an-ip")
        assert outcome.kind is OutcomeKind.SUBNET_CONFLICT

    def test_invalid_format_skips_probe(self, enumerator, probe):
        """Test format errors stop validation before the probe"""
        validator = ApConfigValidator(enumerator, probe)
        outcome = validator.validate("192.168.50.0/24", "192.168.51.254")
        assert outcome.kind is OutcomeKind.INVALID_FORMAT
        assert probe.calls == []

    def test_gateway_in_use(self, enumerator):
        """Test a reply from the gateway rejects the configuration"""
        probe = FakeProbe(live={"192.168.50.254"})
        validator = ApConfigValidator(enumerator, probe)
        outcome = validator.validate("192.168.50.5/24", "192.168.50.254")
        assert outcome.kind is OutcomeKind.GATEWAY_IN_USE

    def test_probe_timeout_passed(self, enumerator):
        """Test configured probe timeout reaches the probe"""
        probe = MagicMock()
        probe.is_reachable.return_value = False
        validator = ApConfigValidator(enumerator, probe, probe_timeout=2.5)
        validator.validate("10.0.7.1/24", "10.0.7.254")
        probe.is_reachable.assert_called_once_with("10.0.7.254", 2.5)

    def test_overlap_strictness(self, probe):
        """Test overlap mode rejects a subnet inside an active range"""
        enumerator = FakeSubnetEnumerator(["10.0.0.0/8"])
        assert ApConfigValidator(enumerator, probe).validate("10.0.7.1/24", "10.0.7.254").is_valid

        strict = ApConfigValidator(enumerator, probe, strictness=ConflictStrictness.OVERLAP)
        assert strict.validate("10.0.7.1/24", "10.0.7.254").kind is OutcomeKind.SUBNET_CONFLICT

    def test_boundary_gateway_setting(self, enumerator, probe):
        """Test allow_boundary_gateway is honoured"""
        validator = ApConfigValidator(enumerator, probe, allow_boundary_gateway=False)
        outcome = validator.validate("192.168.50.0/24", "192.168.50.255")
        assert outcome.kind is OutcomeKind.INVALID_FORMAT


class TestValidateConfiguration:
    """Test whole-configuration validation"""

    def test_full_configuration(self, enumerator, probe, sample_ap_config):
        """Test a stored configuration passes"""
        validator = ApConfigValidator(enumerator, probe)
        assert validator.validate_configuration(sample_ap_config).is_valid

    def test_configuration_conflict(self, probe, sample_ap_config):
        """Test the configuration's own CIDR is checked for conflicts"""
        validator = ApConfigValidator(FakeSubnetEnumerator([sample_ap_config.cidr]), probe)
        assert validator.validate_configuration(sample_ap_config).kind is OutcomeKind.SUBNET_CONFLICT

    def test_invalid_configuration_cannot_be_built(self):
        """Test policy violations surface at construction"""
        with pytest.raises(ValueError, match="Password must be 8-63"):
            ApConfiguration.from_strings("AP_Pop-Up", "short", "192.168.50.5/24", "192.168.50.254")
