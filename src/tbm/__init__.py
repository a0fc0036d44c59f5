"""Tunnel Boring Machine - open SSH tunnels to configured targets by name."""

from .cli import CommandLineInterface, main, parse_and_run
from .config import Config, ConfigParser
from .exceptions import (
    BinaryNotFoundError,
    BoreError,
    TBMError,
)
from .logging import configure_library_logging, get_logger, setup_logging
from .machine import Machine
from .models import ConnectionProfile, PortForward, Target
from .resolver import (
    IncompatibleTargets,
    NoTargetsRequested,
    Resolved,
    ResolutionResult,
    UnknownTargets,
    resolve,
)

# Quiet, stderr-only logging until main() configures the command
configure_library_logging()

__version__ = "0.1.0"


__all__ = [
    # Entry points
    "CommandLineInterface",
    "parse_and_run",
    "main",
    # Resolution
    "resolve",
    "ResolutionResult",
    "Resolved",
    "UnknownTargets",
    "IncompatibleTargets",
    "NoTargetsRequested",
    # Models
    "Target",
    "PortForward",
    "ConnectionProfile",
    # Collaborators
    "Config",
    "ConfigParser",
    "Machine",
    # Exceptions
    "TBMError",
    "BinaryNotFoundError",
    "BoreError",
    # Utilities
    "configure_library_logging",
    "get_logger",
    "setup_logging",
]
