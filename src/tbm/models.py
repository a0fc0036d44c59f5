"""Target models using Pydantic for type safety and validation."""

from pydantic import BaseModel, ConfigDict, Field


class PortForward(BaseModel):
    """A single local port forwarded through the gateway."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, extra="forbid")

    local_port: int = Field(ge=1, le=65535, description="Local port to listen on")
    remote_host: str = Field(
        default="localhost",
        min_length=1,
        description="Host to connect to, as seen from the gateway",
    )
    remote_port: int = Field(ge=1, le=65535, description="Port on the remote host")

    def __str__(self) -> str:
        """Forward in the ``local:host:remote`` form used by ``ssh -L``."""
        return f"{self.local_port}:{self.remote_host}:{self.remote_port}"


class Target(BaseModel):
    """Named tunnel endpoint reached through a gateway host."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, extra="forbid")

    name: str = Field(min_length=1, description="Target name used on the command line")
    host: str = Field(min_length=1, description="Gateway host to connect to")
    username: str = Field(min_length=1, description="Username on the gateway host")
    forwards: tuple[PortForward, ...] = Field(
        default=(), description="Port forwards opened for this target"
    )

    def __str__(self) -> str:
        return f"{self.name} ({self.username}@{self.host})"


class ConnectionProfile(BaseModel):
    """Host and username shared by every target in one bore request."""

    model_config = ConfigDict(frozen=True)

    host: str
    username: str
    forwards: tuple[PortForward, ...] = ()

    @classmethod
    def from_targets(cls, targets: list[Target]) -> "ConnectionProfile":
        """Build a profile from compatible targets, merging their forwards.

        Forwards keep request order; exact duplicates are dropped.

        Args:
            targets: Non-empty list of targets sharing host and username

        Returns:
            Connection profile for the first target's host and username
        """
        first = targets[0]
        forwards: list[PortForward] = []
        for target in targets:
            for forward in target.forwards:
                if forward not in forwards:
                    forwards.append(forward)
        return cls(host=first.host, username=first.username, forwards=tuple(forwards))
