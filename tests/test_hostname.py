"""
Tests for hostname validation and propagation
"""

import subprocess

import pytest
from unittest.mock import MagicMock, call

from netrole.hostname import HostnameCandidate, HostnamePropagator, validate_hostname
from netrole.outcomes import OutcomeKind


class TestValidateHostname:
    """Test hostname syntax rules"""

    @pytest.mark.parametrize("name", ["good-host1", "a", "pi", "A" * 63, "raspberry-pi-4"])
    def test_valid(self, name):
        """Test acceptable hostnames"""
        assert validate_hostname(name).is_valid

    @pytest.mark.parametrize("name,reason", [
        ("", "empty"),
        ("a" * 64, "between 1 and 63"),
        ("-bad-", "start or end"),
        ("bad-", "start or end"),
        (".local", "start or end"),
        ("host.", "start or end"),
        ("my_host", "alphanumeric"),
        ("my.host", "alphanumeric"),
        ("host name", "alphanumeric"),
        ("hôte", "alphanumeric"),
    ])
    def test_invalid(self, name, reason):
        """Test rejected hostnames and their reasons"""
        outcome = validate_hostname(name)
        assert outcome.kind is OutcomeKind.INVALID_FORMAT
        assert reason in outcome.reason

    def test_candidate(self):
        """Test HostnameCandidate delegates to the validator"""
        assert HostnameCandidate("good-host1").validate().is_valid
        assert not HostnameCandidate("-bad-").validate().is_valid


@pytest.fixture
def identity_files(tmp_path):
    """Hostname and hosts files for an 'oldhost' machine"""
    hostname_file = tmp_path / "hostname"
    hostname_file.write_text("oldhost\n")
    hosts_file = tmp_path / "hosts"
    hosts_file.write_text(
        "127.0.0.1\tlocalhost\n"
        "127.0.1.1\toldhost\n"
        "::1\t\tlocalhost ip6-localhost\n"
    )
    return hostname_file, hosts_file


class TestHostnamePropagator:
    """Test ordered, independent propagation steps"""

    def test_all_steps_succeed(self, identity_files, mock_runner):
        """Test every store is updated in order"""
        hostname_file, hosts_file = identity_files
        environ = {}
        propagator = HostnamePropagator(hostname_file, hosts_file, runner=mock_runner, environ=environ)

        steps = propagator.propagate("newhost", current="oldhost")

        assert len(steps) == 6
        assert all(step.succeeded for step in steps)
        assert hostname_file.read_text() == "newhost\n"
        assert "127.0.1.1\tnewhost" in hosts_file.read_text()
        assert "oldhost" not in hosts_file.read_text()
        assert environ["HOSTNAME"] == "newhost"
        assert mock_runner.call_args_list == [
            call(["nmcli", "general", "hostname", "newhost"]),
            call(["hostnamectl", "set-hostname", "newhost"]),
            call(["systemctl", "restart", "avahi-daemon"]),
        ]

    def test_failed_step_does_not_stop_later_steps(self, identity_files):
        """Test a failing command is reported and the rest still run"""
        hostname_file, hosts_file = identity_files
        runner = MagicMock(side_effect=[
            subprocess.CalledProcessError(8, ["nmcli"], stderr="NetworkManager is not running"),
            MagicMock(),
            MagicMock(),
        ])
        propagator = HostnamePropagator(hostname_file, hosts_file, runner=runner, environ={})

        steps = propagator.propagate("newhost", current="oldhost")

        assert not steps[0].succeeded
        assert steps[0].detail == "NetworkManager is not running"
        assert all(step.succeeded for step in steps[1:])
        assert hostname_file.read_text() == "newhost\n"
        assert runner.call_count == 3

    def test_missing_hosts_file_reported(self, tmp_path, mock_runner):
        """Test file errors become failed steps"""
        propagator = HostnamePropagator(
            tmp_path / "hostname", tmp_path / "missing" / "hosts", runner=mock_runner, environ={}
        )

        steps = propagator.propagate("newhost", current="oldhost")

        failed = [step for step in steps if not step.succeeded]
        assert len(failed) == 1
        assert "hosts" in failed[0].description

    def test_hosts_entry_appended_when_absent(self, tmp_path, mock_runner):
        """Test a 127.0.1.1 line is added if no line names the host"""
        hosts_file = tmp_path / "hosts"
        hosts_file.write_text("127.0.0.1\tlocalhost\n")
        propagator = HostnamePropagator(tmp_path / "hostname", hosts_file, runner=mock_runner, environ={})

        propagator.propagate("newhost", current="oldhost")

        assert hosts_file.read_text() == "127.0.0.1\tlocalhost\n127.0.1.1\tnewhost\n"

    def test_hosts_replacement_respects_word_boundaries(self, tmp_path, mock_runner):
        """Test only whole-word occurrences of the old name change"""
        hosts_file = tmp_path / "hosts"
        hosts_file.write_text("127.0.1.1\tpi pi4\n")
        propagator = HostnamePropagator(tmp_path / "hostname", hosts_file, runner=mock_runner, environ={})

        propagator.propagate("node", current="pi")

        assert hosts_file.read_text() == "127.0.1.1\tnode pi4\n"

    def test_hosts_replacement_keeps_hyphenated_aliases(self, tmp_path, mock_runner):
        """Test names that extend the old one with a hyphen are left alone"""
        hosts_file = tmp_path / "hosts"
        hosts_file.write_text("127.0.1.1\tpi\n192.168.1.9\tpi-cam\n192.168.1.10\tcam-pi\n")
        propagator = HostnamePropagator(tmp_path / "hostname", hosts_file, runner=mock_runner, environ={})

        propagator.propagate("node", current="pi")

        assert hosts_file.read_text() == "127.0.1.1\tnode\n192.168.1.9\tpi-cam\n192.168.1.10\tcam-pi\n"

    def test_hosts_entry_appended_when_only_alias_matches(self, tmp_path, mock_runner):
        """Test an alias containing the new name does not count as an entry"""
        hosts_file = tmp_path / "hosts"
        hosts_file.write_text("192.168.1.9\tnode-cam\n")
        propagator = HostnamePropagator(tmp_path / "hostname", hosts_file, runner=mock_runner, environ={})

        propagator.propagate("node", current="pi")

        assert hosts_file.read_text() == "192.168.1.9\tnode-cam\n127.0.1.1\tnode\n"

    def test_invalid_hostname_runs_nothing(self, identity_files, mock_runner):
        """Test validation happens before any step"""
        hostname_file, hosts_file = identity_files
        propagator = HostnamePropagator(hostname_file, hosts_file, runner=mock_runner, environ={})

        with pytest.raises(ValueError, match="Invalid hostname"):
            propagator.propagate("-bad-", current="oldhost")

        mock_runner.assert_not_called()
        assert hostname_file.read_text() == "oldhost\n"

    def test_current_defaults_to_system_hostname(self, identity_files, mock_runner):
        """Test the running hostname is replaced when current is omitted"""
        hostname_file, hosts_file = identity_files
        propagator = HostnamePropagator(hostname_file, hosts_file, runner=mock_runner, environ={})

        with pytest.MonkeyPatch.context() as mp:
            mp.setattr("socket.gethostname", lambda: "oldhost")
            propagator.propagate("newhost")

        assert "oldhost" not in hosts_file.read_text()
