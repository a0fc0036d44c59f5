"""Command line interface: resolve targets and start the boring machine."""

import os
import sys
from collections.abc import Callable, Iterable, Sequence
from functools import partial

from .config import ConfigParser
from .exceptions import TBMError
from .interfaces import ConfigProtocol, MachineFactory
from .logging import get_logger, setup_logging
from .machine import Machine
from .resolver import (
    IncompatibleTargets,
    NoTargetsRequested,
    UnknownTargets,
    resolve,
)

logger = get_logger(__name__)

PROGRAM_NAME = "tbm"


class CommandLineInterface:
    """Turns command line arguments into a single tunnel session."""

    def __init__(
        self,
        config: ConfigProtocol,
        machine_factory: MachineFactory | None = None,
        output: Callable[[str], None] = print,
    ):
        """Initialize the interface.

        Args:
            config: Parsed configuration
            machine_factory: Builds the machine for a resolved profile;
                defaults to Machine writing to ``output``
            output: Callable receiving user-facing message lines
        """
        self.config = config
        if machine_factory is None:
            machine_factory = partial(Machine, output=output)
        self.machine_factory = machine_factory
        self.output = output

    def parse_and_run(self, args: Sequence[str]) -> None:
        """Resolve ``args`` and bore a tunnel, or report why not."""
        self.run(args)

    def run(self, args: Sequence[str]) -> bool:
        """Resolve ``args`` and bore a tunnel, or report why not.

        Args:
            args: Target names, in command line order

        Returns:
            False if a diagnostic was reported, True otherwise

        Raises:
            TBMError: If the machine fails to bore the tunnel
        """
        if not self.config.valid():
            self.output("Cannot parse config:")
            self._print_list(self.config.errors)
            return False

        result = resolve(list(args), self.config)

        if isinstance(result, NoTargetsRequested):
            self._print_syntax(result.names)
            return True

        if isinstance(result, UnknownTargets):
            self.output(f"Cannot find target: {', '.join(result.names)}")
            self.output("Configured targets:")
            self._print_list(self.config.each_target())
            return False

        if isinstance(result, IncompatibleTargets):
            fields = " and ".join(result.mismatched_fields())
            self.output(f"Can't combine targets with different {fields}:")
            self._print_list(str(target) for target in result.targets)
            return False

        profile = result.profile
        machine = self.machine_factory(profile.host, profile.username, profile.forwards)
        machine.bore()
        return True

    def _print_syntax(self, names: Iterable[str]) -> None:
        self.output(f"SYNTAX: {PROGRAM_NAME} <targets>")
        self.output("")
        self.output("Where <targets> is a space-separated list of:")
        self._print_list(names)

    def _print_list(self, items: Iterable[str]) -> None:
        for item in items:
            self.output(f"  - {item}")


def parse_and_run(
    args: Sequence[str],
    config: ConfigProtocol,
    machine_factory: MachineFactory | None = None,
    output: Callable[[str], None] = print,
) -> None:
    """Run the command line interface for ``args`` against ``config``."""
    CommandLineInterface(config, machine_factory, output).parse_and_run(args)


def main(argv: Sequence[str] | None = None) -> int:
    """Console script entry point.

    Args:
        argv: Arguments without the program name, defaults to sys.argv[1:]

    Returns:
        Process exit code
    """
    setup_logging(
        level=os.environ.get("TBM_LOG_LEVEL"),
        json_format=os.environ.get("TBM_LOG_JSON") == "1",
        log_file=os.environ.get("TBM_LOG_FILE") or None,
    )
    args = sys.argv[1:] if argv is None else list(argv)

    config = ConfigParser.parse()
    try:
        ok = CommandLineInterface(config).run(args)
    except TBMError as e:
        logger.error("Tunnel failed", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0 if ok else 1
