# hr-dashboard/hr_dashboard/core/errors.py
from dataclasses import dataclass


class UpstreamFetchFailure(Exception):
    """
    Raised when the directory or a warehouse source is unreachable or returns
    an envelope that cannot be read. Report generation fails as a whole.
    """

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


@dataclass(frozen=True)
class RowValidationError:
    """One rejected upstream row. A value, never raised."""
    source: str
    index: int
    reason: str


class AccessDenied(Exception):
    """The requester asked for an employee outside their allowed set."""

    def __init__(self, requester_email: str, target_email: str):
        super().__init__(f"{requester_email} may not view {target_email}")
        self.requester_email = requester_email
        self.target_email = target_email
