"""Exceptions for the fantastico topology manager."""


class FantasticoError(Exception):
    """Base exception for fantastico errors."""

    pass


class ConnectionError(FantasticoError):
    """Error establishing or maintaining a connection to a node."""

    pass


class CommandError(FantasticoError):
    """Error reply returned by the server for a command."""

    message: str

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class RoleQueryError(FantasticoError):
    """Role query failed for a known node."""

    address: str
    message: str

    def __init__(self, address: str, message: str) -> None:
        self.address = address
        self.message = message
        super().__init__(f"ROLE failed on {address}: {message}")


class ConfigurationError(FantasticoError, ValueError):
    """Invalid topology configuration."""

    pass
