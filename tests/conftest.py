"""Shared pytest fixtures for tbm tests."""

import logging
from unittest.mock import Mock

import pytest

from tbm.config import Config
from tbm.logging import configure_library_logging, reset_handlers
from tbm.models import PortForward, Target


@pytest.fixture
def make_config():
    """Build an in-memory Config from targets and errors.

    Returns:
        Callable: (targets=(), errors=()) -> Config
    """

    def _make(targets=(), errors=()):
        config = Config()
        for target in targets:
            config.add_target(target)
        for error in errors:
            config.add_error(error)
        return config

    return _make


@pytest.fixture
def make_target():
    """Build a Target with sensible defaults.

    Returns:
        Callable: (name, host="host", username="username", ports=()) -> Target
    """

    def _make(name, host="host", username="username", ports=()):
        forwards = tuple(PortForward(local_port=p, remote_port=p) for p in ports)
        return Target(name=name, host=host, username=username, forwards=forwards)

    return _make


@pytest.fixture
def messages():
    """Collect user-facing output lines.

    Returns:
        list: Lines passed to the output callable
    """
    return []


@pytest.fixture
def machine():
    """Mock machine whose bore() records calls."""
    return Mock()


@pytest.fixture
def machine_factory(machine):
    """Mock machine factory returning the mock machine."""
    return Mock(return_value=machine)


@pytest.fixture
def mock_process():
    """Create a mock ssh process object for testing.

    Returns:
        Mock: Mock process with common attributes
    """
    process = Mock()
    process.pid = 12345
    process.poll.return_value = None  # Process is running
    process.terminate.return_value = None
    process.kill.return_value = None
    process.wait.return_value = 0
    return process


@pytest.fixture
def mock_popen(monkeypatch, mock_process):
    """Mock subprocess.Popen and ssh lookup for the machine module.

    Returns:
        Mock: Mocked Popen class returning mock_process
    """
    popen = Mock(return_value=mock_process)
    monkeypatch.setattr("tbm.machine.subprocess.Popen", popen)
    monkeypatch.setattr("tbm.machine.shutil.which", lambda name: f"/usr/bin/{name}")
    return popen


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration after each test.

    main() installs handlers on the root logger; drop them so later tests do
    not write to a closed capture stream, and go back to library mode.
    """
    yield
    reset_handlers()
    logging.getLogger().setLevel(logging.WARNING)
    configure_library_logging()


def contains(lines, text):
    """Check whether any output line contains ``text``."""
    return any(text in line for line in lines)
