from __future__ import annotations


class SkyforgeError(Exception):
    """Base class for every error raised by the reconcilers."""


class ProviderError(SkyforgeError):
    """A provider call failed for a reason other than the resource being absent."""

    def __init__(self, message: str, resource: str) -> None:
        super().__init__(message)
        self.resource = resource


class OperationError(SkyforgeError):
    """The provider accepted a mutation but the operation finished with an error."""

    def __init__(self, resource: str, code: int | None, message: str) -> None:
        super().__init__(f"operation on {resource} failed ({code}): {message}")
        self.resource = resource
        self.code = code
        self.message = message


class OperationTimeoutError(SkyforgeError):
    """An operation did not reach a terminal state in time."""

    def __init__(self, resource: str, timeout: float | None = None) -> None:
        if timeout is None:
            super().__init__(f"timed out waiting for {resource}")
        else:
            super().__init__(f"timed out after {timeout:g}s waiting for {resource}")
        self.resource = resource
        self.timeout = timeout


class CancelledError(OperationTimeoutError):
    """The caller cancelled the cycle while a call or wait was in flight."""

    def __init__(self, resource: str) -> None:
        SkyforgeError.__init__(self, f"cancelled while working on {resource}")
        self.resource = resource
        self.timeout = None


class ConfigurationError(SkyforgeError):
    """The declared configuration cannot be satisfied; retrying will not help."""
