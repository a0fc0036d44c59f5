"""Utility functions for tbm."""

from typing import Any

# Port range constants
MIN_PORT = 1
MAX_PORT = 65535


def validate_port(port: int, port_name: str = "Port") -> None:
    """Validate port number range.

    Args:
        port: Port number to validate
        port_name: Name of the port for error messages

    Raises:
        ValueError: If port is not in valid range (1-65535)
    """
    if (
        isinstance(port, bool)
        or not isinstance(port, int)
        or not (MIN_PORT <= port <= MAX_PORT)
    ):
        raise ValueError(f"{port_name} must be between {MIN_PORT} and {MAX_PORT}")


def validate_non_empty_string(value: str, field_name: str) -> str:
    """Validate that a string is not empty or only whitespace.

    Args:
        value: String value to validate
        field_name: Name of the field for error messages

    Returns:
        Stripped string value

    Raises:
        ValueError: If string is empty or only whitespace
    """
    if not value or not value.strip():
        raise ValueError(f"{field_name} cannot be empty")
    return value.strip()


def _to_port(value: Any, port_name: str) -> int:
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            raise ValueError(f"{port_name} is not a number: {value!r}")
        value = int(value)
    validate_port(value, port_name)
    return int(value)


def parse_port_spec(spec: Any) -> tuple[int, int]:
    """Parse a port forward spec into a (local_port, remote_port) pair.

    Accepted forms are a bare port (``8080`` or ``"8080"``), forwarded to the
    same port on the remote side, or a ``"local:remote"`` string.

    Args:
        spec: Port spec from the configuration file

    Returns:
        Tuple of local and remote port

    Raises:
        ValueError: If the spec cannot be parsed or a port is out of range
    """
    if isinstance(spec, str) and ":" in spec:
        local, _, remote = spec.partition(":")
        return _to_port(local, "Local port"), _to_port(remote, "Remote port")

    if isinstance(spec, (int, str)) and not isinstance(spec, bool):
        port = _to_port(spec, "Port")
        return port, port

    raise ValueError(f"Invalid port spec: {spec!r}")
