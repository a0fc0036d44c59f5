"""Target configuration and the TOML config file parser."""

import getpass
import os
import tomllib
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .logging import get_logger
from .models import PortForward, Target
from .utils import parse_port_spec, validate_non_empty_string

logger = get_logger(__name__)

CONFIG_ENV_VAR = "TBM_CONFIG"
DEFAULT_CONFIG_FILE = "~/.tbm.toml"
DEFAULT_REMOTE_HOST = "localhost"


class Config:
    """Read-only set of targets, keyed by unique name in declaration order."""

    def __init__(self) -> None:
        """Initialize Config with no targets and no errors."""
        self._targets: dict[str, Target] = {}
        self._errors: list[str] = []

    @property
    def errors(self) -> list[str]:
        """Errors recorded while building the configuration."""
        return list(self._errors)

    def valid(self) -> bool:
        """Check if the configuration was built without errors."""
        return not self._errors

    def add_error(self, message: str) -> None:
        """Record a configuration error."""
        logger.debug("Config error recorded", error=message)
        self._errors.append(message)

    def add_target(self, target: Target) -> None:
        """Add a target, recording an error if the name is already taken.

        Args:
            target: Target to add
        """
        if target.name in self._targets:
            self.add_error(f"Target names must be unique: {target.name}")
            return
        self._targets[target.name] = target

    def get_target(self, name: str) -> Target | None:
        """Get target by name, or None if no target has that name."""
        return self._targets.get(name)

    def each_target(self) -> Iterator[str]:
        """Iterate over target names; every call starts a fresh iteration."""
        yield from self._targets

    def __len__(self) -> int:
        return len(self._targets)

    def __repr__(self) -> str:
        return f"Config(targets={list(self._targets)!r}, errors={self._errors!r})"


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"])
        parts.append(f"{location}: {detail['msg']}" if location else detail["msg"])
    return "; ".join(parts)


class ConfigParser:
    """Parser for the TOML configuration file.

    Each top-level table describes a gateway, keyed by its host name, with an
    optional ``username`` and a ``targets`` table::

        ["gateway.example.com"]
        username = "deploy"

        ["gateway.example.com".targets]
        web = 8080
        admin = [8080, "9443:443"]
        db = { host = "db.internal", ports = [5432, "15432:5432"] }

    Problems never raise; they are collected as errors on the returned Config.
    """

    def __init__(self, path: str | Path | None = None):
        """Initialize ConfigParser.

        Args:
            path: Config file path; defaults to $TBM_CONFIG, then ~/.tbm.toml
        """
        if path is None:
            path = os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILE
        self.path = Path(path).expanduser()

    @classmethod
    def parse(cls, path: str | Path | None = None) -> Config:
        """Parse the config file at ``path`` into a Config."""
        return cls(path).load()

    def load(self) -> Config:
        """Read and parse the config file.

        Returns:
            Config holding every target that parsed, plus any errors
        """
        config = Config()
        logger.debug("Loading config file", path=str(self.path))

        try:
            with self.path.open("rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError:
            config.add_error(f"Cannot find config file: {self.path}")
            return config
        except tomllib.TOMLDecodeError as e:
            config.add_error(f"Cannot parse config file {self.path}: {e}")
            return config
        except OSError as e:
            config.add_error(f"Cannot read config file {self.path}: {e}")
            return config

        self.parse_data(data, config)

        logger.info(
            "Config file loaded",
            path=str(self.path),
            targets=len(config),
            errors=len(config.errors),
        )
        return config

    def parse_data(self, data: dict[str, Any], config: Config) -> Config:
        """Parse already-decoded config data into ``config``.

        Args:
            data: Decoded TOML document
            config: Config to add targets and errors to

        Returns:
            The config passed in
        """
        for host, gateway in data.items():
            if not isinstance(gateway, dict):
                config.add_error(f"Gateway '{host}' must be a table")
                continue
            self._parse_gateway(host, gateway, config)

        if config.valid() and len(config) == 0:
            config.add_error("No targets configured")

        return config

    def _parse_gateway(
        self, host: str, gateway: dict[str, Any], config: Config
    ) -> None:
        unknown = set(gateway) - {"username", "targets"}
        if unknown:
            config.add_error(
                f"Gateway '{host}' has unknown settings: {', '.join(sorted(unknown))}"
            )

        username = gateway.get("username")
        if username is None:
            try:
                username = getpass.getuser()
            except (KeyError, OSError) as e:
                logger.debug("Cannot determine current user", error=str(e))
                config.add_error(
                    f"Gateway '{host}': cannot determine the current user, "
                    "set username explicitly"
                )
                return
        if not isinstance(username, str):
            config.add_error(f"Gateway '{host}': username must be a string")
            return
        try:
            username = validate_non_empty_string(username, "Username")
        except ValueError as e:
            config.add_error(f"Gateway '{host}': {e}")
            return

        targets = gateway.get("targets")
        if not isinstance(targets, dict):
            config.add_error(f"Gateway '{host}' must have a targets table")
            return

        for name, value in targets.items():
            try:
                forwards = self._parse_forwards(value)
                target = Target(
                    name=name, host=host, username=username, forwards=forwards
                )
            except ValueError as e:
                # pydantic's ValidationError is a ValueError too
                message = (
                    _format_validation_error(e)
                    if isinstance(e, ValidationError)
                    else str(e)
                )
                config.add_error(f"Target '{name}' on gateway '{host}': {message}")
                continue
            config.add_target(target)

    def _parse_forwards(self, value: Any) -> tuple[PortForward, ...]:
        remote_host = DEFAULT_REMOTE_HOST
        ports = value

        if isinstance(value, dict):
            unknown = set(value) - {"host", "ports"}
            if unknown:
                raise ValueError(f"unknown settings: {', '.join(sorted(unknown))}")
            remote_host = value.get("host", DEFAULT_REMOTE_HOST)
            if not isinstance(remote_host, str):
                raise ValueError("host must be a string")
            ports = value.get("ports", [])

        if not isinstance(ports, list):
            ports = [ports]

        forwards = []
        for spec in ports:
            local_port, remote_port = parse_port_spec(spec)
            forwards.append(
                PortForward(
                    local_port=local_port,
                    remote_host=remote_host,
                    remote_port=remote_port,
                )
            )
        return tuple(forwards)
