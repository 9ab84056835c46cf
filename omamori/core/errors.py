"""Error taxonomy for remote synchronization failures."""

from enum import StrEnum

import httpx
from pydantic import BaseModel


class SyncErrorKind(StrEnum):
    """Categories of remote-facing failures."""

    UNAUTHENTICATED = "unauthenticated"  # Token refresh also failed
    SERVER_REJECTED = "server_rejected"  # Non-2xx, non-401 response
    NETWORK = "network"  # Transport-level failure
    MISCONFIGURED = "misconfigured"  # Missing URL or keys


class ActivationStatus(StrEnum):
    """Outcome of a task activation, never raised to the caller."""

    NOT_FOUND = "not_found"
    NO_OP = "no_op"
    SYNCED = "synced"
    LOCAL_ONLY = "local_only"  # Optimistic write kept, remote sync failed


class SyncError(BaseModel):
    """A classified remote failure."""

    kind: SyncErrorKind
    message: str
    status_code: int | None = None

    def describe(self) -> str:
        """Render a one-line description for the debug channel."""
        if self.status_code is not None:
            return f"{self.kind}: HTTP {self.status_code}: {self.message}"
        return f"{self.kind}: {self.message}"


def classify_transport_error(exception: Exception) -> SyncError:
    """Classify an exception raised while talking to the backend.

    Args:
        exception: The exception raised by the HTTP layer

    Returns:
        SyncError with NETWORK kind for transport failures, SERVER_REJECTED otherwise
    """
    if isinstance(exception, httpx.TransportError):
        return SyncError(kind=SyncErrorKind.NETWORK, message=f"{type(exception).__name__}: {exception}")
    return SyncError(kind=SyncErrorKind.SERVER_REJECTED, message=f"{type(exception).__name__}: {exception}")


def misconfigured(message: str) -> SyncError:
    """Build a MISCONFIGURED error."""
    return SyncError(kind=SyncErrorKind.MISCONFIGURED, message=message)
