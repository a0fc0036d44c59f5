"""SSH process driving a tunnel session."""

import shutil
import subprocess
from collections.abc import Callable, Sequence
from types import TracebackType
from typing import Literal

from .exceptions import BinaryNotFoundError, BoreError
from .logging import get_logger
from .models import PortForward

logger = get_logger(__name__)

STOP_TIMEOUT = 5.0


class Machine:
    """Tunnel Boring Machine: runs ``ssh`` with port forwards to a gateway"""

    def __init__(
        self,
        host: str,
        username: str,
        forwards: Sequence[PortForward] = (),
        ssh_binary: str = "ssh",
        output: Callable[[str], None] = print,
    ):
        """Initialize Machine for a gateway host and user

        Args:
            host: Gateway host to connect to
            username: Username on the gateway
            forwards: Port forwards to open
            ssh_binary: Name or path of the ssh client
            output: Callable receiving user-facing message lines
        """
        self.host = host
        self.username = username
        self.forwards = tuple(forwards)
        self.ssh_binary = ssh_binary
        self.output = output
        self._process: subprocess.Popen[bytes] | None = None
        logger.debug(
            "Machine initialized",
            host=host,
            username=username,
            forwards=[str(f) for f in self.forwards],
        )

    def _resolve_binary(self) -> str:
        binary = shutil.which(self.ssh_binary)
        if binary is None:
            raise BinaryNotFoundError(f"SSH client not found: {self.ssh_binary}")
        return binary

    def command(self, binary: str | None = None) -> list[str]:
        """Build the ssh command line

        Args:
            binary: Resolved ssh binary path, defaults to ``ssh_binary``

        Returns:
            Argument list for subprocess
        """
        args = [binary or self.ssh_binary, "-N", "-o", "ExitOnForwardFailure=yes"]
        for forward in self.forwards:
            args.extend(["-L", str(forward)])
        args.append(f"{self.username}@{self.host}")
        return args

    def bore(self) -> None:
        """Open the tunnel and block until it closes

        Ctrl-C stops the ssh process and returns normally.

        Raises:
            BinaryNotFoundError: If the ssh client cannot be found
            BoreError: If ssh cannot be started or exits with an error
        """
        args = self.command(self._resolve_binary())

        forwards = ", ".join(str(f) for f in self.forwards) or "no forwards"
        self.output(
            f"Starting Tunnel Boring Machine to {self.username}@{self.host} "
            f"with {forwards}"
        )

        logger.info("Starting ssh", command=args)
        try:
            self._process = subprocess.Popen(args)
        except OSError as e:
            logger.error("Failed to start ssh", error=str(e))
            raise BoreError(f"Failed to start ssh: {e}") from e

        self.output("Press Ctrl-C to stop")
        try:
            returncode = self._process.wait()
        except KeyboardInterrupt:
            logger.info("Interrupted, closing tunnel")
            self.stop()
            self.output("Tunnel closed")
            return

        self._process = None
        if returncode != 0:
            logger.error("ssh exited with error", returncode=returncode)
            raise BoreError(
                f"Tunnel to {self.host} failed (ssh exit code {returncode})",
                returncode=returncode,
            )
        logger.info("Tunnel session ended", host=self.host)

    def is_running(self) -> bool:
        """Check if the ssh process is currently running"""
        if self._process is None:
            return False

        return self._process.poll() is None

    def stop(self) -> None:
        """Stop the ssh process, force killing it if it does not exit"""
        if self._process is None:
            return

        if self.is_running():
            logger.info("Stopping ssh", pid=self._process.pid)
            self._process.terminate()
            try:
                self._process.wait(timeout=STOP_TIMEOUT)
            except subprocess.TimeoutExpired:
                logger.warning(
                    "ssh did not terminate gracefully, force killing",
                    pid=self._process.pid,
                )
                self._process.kill()
                self._process.wait()

        self._process = None

    def __enter__(self) -> "Machine":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> Literal[False]:
        """Context manager exit - stop the ssh process if still running

        Returns:
            False to propagate any exception
        """
        logger.debug("Exiting Machine context")
        self.stop()
        return False
