"""Protocol interfaces for the collaborators of the command line interface."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .models import PortForward, Target


class ConfigProtocol(Protocol):
    """Protocol for target lookup and enumeration."""

    def valid(self) -> bool:
        """Whether the configuration parsed without errors."""
        ...

    @property
    def errors(self) -> list[str]:
        """Validation errors, empty when valid."""
        ...

    def get_target(self, name: str) -> Target | None:
        """Get target by name."""
        ...

    def each_target(self) -> Iterator[str]:
        """Iterate over configured target names in declaration order."""
        ...


class MachineProtocol(Protocol):
    """Protocol for the tunnel transport."""

    def bore(self) -> None:
        """Establish the tunnel and block until the session ends."""
        ...


class MachineFactory(Protocol):
    """Callable building a machine for a connection profile."""

    def __call__(
        self, host: str, username: str, forwards: Sequence[PortForward] = ...
    ) -> MachineProtocol: ...
