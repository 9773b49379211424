"""Error taxonomy for the drive proxy operations."""


class ProxyError(Exception):
    """Base class for failures surfaced by the proxy operations."""


class MissingParameterError(ProxyError):
    """A required request parameter was absent or blank.

    Raised before any external service is contacted.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UpstreamError(ProxyError):
    """The drive or storage collaborator failed.

    Carries the collaborator's message verbatim; no distinction is made
    between transient and permanent failures.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
