"""Error types shared by the storage, API and client layers."""


class DashboardError(Exception):
    """Base class for every error raised by the dashboard."""


class ValidationError(DashboardError):
    """A payload failed the record schema before it was sent or stored."""

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid payload")


class TransportError(DashboardError):
    """The server could not be reached."""


class ServerError(DashboardError):
    """The server answered with a non-success status."""

    def __init__(self, status: int, message: str = ""):
        self.status = status
        self.message = message
        super().__init__(f"HTTP {status}: {message}" if message else f"HTTP {status}")


class NotFoundError(DashboardError):
    """No record exists with the requested id."""


class ParseError(DashboardError):
    """A numeric-as-text field could not be read as a non-negative integer."""
