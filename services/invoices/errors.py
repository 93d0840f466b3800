"""Error kinds raised at the portal's operation boundaries.

None of these are fatal: every operation that raises leaves the invoice set
exactly as it found it.
"""


class PortalError(Exception):
    """Base class for recoverable portal errors."""


class NotFound(PortalError):
    """Referenced invoice or supplier id does not exist."""

    def __init__(self, kind: str, identifier: str) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class Forbidden(PortalError):
    """Actor role lacks the capability for the requested operation."""


class InvalidTransition(PortalError):
    """Requested status is not reachable from the invoice's current status."""

    def __init__(self, invoice_id: str, current: str, target: str) -> None:
        self.invoice_id = invoice_id
        self.current = current
        self.target = target
        super().__init__(f"Invoice {invoice_id} cannot move from {current} to {target}")


class ExtractionFailure(PortalError):
    """The extraction collaborator produced no structured result."""

    def __init__(self, reason: str, provider: str | None = None) -> None:
        self.reason = reason
        self.provider = provider
        super().__init__(f"Extraction failed: {reason}")


class UploadInProgress(PortalError):
    """A second extraction was requested while the upload slot was busy."""
