"""Custom exceptions for the action dependency scanner."""


class ActionScanError(Exception):
    """Base exception for all scanner errors."""


class MalformedReferenceError(ActionScanError):
    """Raised when a string is not an ``owner/repo[/path]@revision`` reference."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Invalid action reference: {raw!r}")


class ManifestUnavailableError(ActionScanError):
    """Raised when an action manifest could not be fetched or parsed."""

    def __init__(self, full_name: str, reason: str):
        self.full_name = full_name
        self.reason = reason
        super().__init__(f"manifest unavailable for {full_name}: {reason}")


class RateLimitError(ActionScanError):
    """Raised when GitHub rate limit is exhausted and we need to wait."""

    def __init__(self, retry_after: int) -> None:
        self.retry_after = retry_after
        super().__init__(f"rate limit exceeded, retry after {retry_after}s")
