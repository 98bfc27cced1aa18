class UpstreamError(Exception):
    """A provider call failed (transport error or non-200 status)."""

    def __init__(self, message: str, http_status: int | None = None) -> None:
        super().__init__(message)
        self.http_status = http_status


class ProviderPayloadError(UpstreamError):
    """The provider answered, but not in the shape we parse."""
