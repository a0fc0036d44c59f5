"""Custom exceptions for the Tunnel Boring Machine."""


class TBMError(Exception):
    """Base exception for all tbm errors."""
    pass


class BinaryNotFoundError(TBMError):
    """Raised when the ssh binary is not found or not executable."""
    pass


class BoreError(TBMError):
    """Raised when the tunnel cannot be established or dies with an error."""

    def __init__(self, message: str, returncode: int | None = None):
        super().__init__(message)
        self.returncode = returncode
