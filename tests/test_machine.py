"""Unit tests for Machine class."""

import subprocess
from unittest.mock import Mock

import pytest

from tbm.exceptions import BinaryNotFoundError, BoreError
from tbm.machine import Machine
from tbm.models import PortForward


@pytest.fixture
def forwards():
    return (
        PortForward(local_port=8080, remote_port=80),
        PortForward(local_port=5432, remote_host="db.internal", remote_port=5432),
    )


class TestMachineCommand:
    def test_command_with_forwards(self, forwards):
        """Machine should build an ssh command with one -L per forward"""
        machine = Machine("gateway.example.com", "deploy", forwards)

        assert machine.command() == [
            "ssh",
            "-N",
            "-o",
            "ExitOnForwardFailure=yes",
            "-L",
            "8080:localhost:80",
            "-L",
            "5432:db.internal:5432",
            "deploy@gateway.example.com",
        ]

    def test_command_without_forwards(self):
        """Machine should still connect when there is nothing to forward"""
        machine = Machine("host", "user")

        assert machine.command("/usr/bin/ssh") == [
            "/usr/bin/ssh",
            "-N",
            "-o",
            "ExitOnForwardFailure=yes",
            "user@host",
        ]


class TestMachineBore:
    def test_bore_runs_ssh(self, forwards, mock_popen, mock_process):
        """bore() should start ssh and wait for it to finish"""
        output = Mock()
        machine = Machine("gateway.example.com", "deploy", forwards, output=output)

        machine.bore()

        mock_popen.assert_called_once_with(machine.command("/usr/bin/ssh"))
        mock_process.wait.assert_called_once_with()
        messages = [c.args[0] for c in output.call_args_list]
        assert any("Starting Tunnel Boring Machine" in m for m in messages)
        assert any("8080:localhost:80" in m for m in messages)
        assert any("Ctrl-C" in m for m in messages)
        assert not machine.is_running()

    def test_bore_failure_raises(self, mock_popen, mock_process):
        """A non-zero ssh exit should raise BoreError with the exit code"""
        mock_process.wait.return_value = 255
        machine = Machine("host", "user", output=Mock())

        with pytest.raises(BoreError) as exc_info:
            machine.bore()

        assert exc_info.value.returncode == 255
        assert "host" in str(exc_info.value)

    def test_bore_start_failure(self, mock_popen):
        """An OSError while spawning ssh should raise BoreError"""
        mock_popen.side_effect = OSError("Permission denied")
        machine = Machine("host", "user", output=Mock())

        with pytest.raises(BoreError, match="Failed to start ssh"):
            machine.bore()

    def test_missing_ssh_binary(self, monkeypatch):
        """bore() should fail clearly when ssh is not installed"""
        monkeypatch.setattr("tbm.machine.shutil.which", lambda name: None)
        popen = Mock()
        monkeypatch.setattr("tbm.machine.subprocess.Popen", popen)
        machine = Machine("host", "user", output=Mock())

        with pytest.raises(BinaryNotFoundError, match="SSH client not found"):
            machine.bore()

        popen.assert_not_called()

    def test_ctrl_c_stops_tunnel(self, mock_popen, mock_process):
        """Ctrl-C should terminate ssh and return normally"""
        mock_process.wait.side_effect = [KeyboardInterrupt, 0]
        output = Mock()
        machine = Machine("host", "user", output=output)

        machine.bore()

        mock_process.terminate.assert_called_once()
        mock_process.kill.assert_not_called()
        output.assert_called_with("Tunnel closed")
        assert not machine.is_running()

    def test_ctrl_c_force_kills_unresponsive_ssh(self, mock_popen, mock_process):
        """ssh should be killed if it ignores terminate"""
        mock_process.wait.side_effect = [
            KeyboardInterrupt,
            subprocess.TimeoutExpired("ssh", 5),
            0,
        ]
        machine = Machine("host", "user", output=Mock())

        machine.bore()

        mock_process.terminate.assert_called_once()
        mock_process.kill.assert_called_once()


class TestMachineLifecycle:
    def test_stop_without_process(self):
        """stop() should be a no-op when nothing is running"""
        machine = Machine("host", "user")

        machine.stop()

        assert not machine.is_running()

    def test_context_manager_stops_process(self, mock_process):
        """Leaving the context should stop a running ssh process"""
        with Machine("host", "user") as machine:
            machine._process = mock_process
            assert machine.is_running()

        mock_process.terminate.assert_called_once()
        assert machine._process is None

    def test_context_manager_propagates_exceptions(self):
        """The context manager should not suppress exceptions"""
        with pytest.raises(ValueError):
            with Machine("host", "user"):
                raise ValueError("boom")
