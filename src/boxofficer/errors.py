"""Error taxonomy shared by the clients, aggregation layer and handlers."""


class BoxOfficerError(Exception):
    """Base class for all BoxOfficer errors."""


class UpstreamError(BoxOfficerError):
    """A third-party call returned non-2xx or was unreachable.

    ``status`` is ``None`` when no HTTP response was received at all.
    """

    def __init__(self, service: str, status: int | None, body: str = ""):
        self.service = service
        self.status = status
        self.body = body
        if status is None:
            message = f"{service} unreachable: {body}"
        else:
            message = f"{service} {status}: {body}"
        super().__init__(message)


class ValidationError(BoxOfficerError):
    """A required request parameter is missing or unusable."""

    def __init__(self, parameter: str, message: str | None = None):
        self.parameter = parameter
        super().__init__(message or f"{parameter} required")


class ParseError(BoxOfficerError):
    """A response body or value did not decode into the expected shape."""
