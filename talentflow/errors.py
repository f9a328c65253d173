"""
Error taxonomy for the scheduling core.

Domain errors are raised before any write and surfaced unchanged to the
caller. Storage failures are translated to StorageError at the transaction
boundary (see talentflow.storage.atomic).
"""
from typing import Any, Dict, Optional


class SchedulingError(Exception):
    """Base class for every error the scheduling core raises on purpose."""

    status_code = 400
    code = "scheduling_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        payload = {"error": self.message, "code": self.code}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class NotFound(SchedulingError):
    """Stage, vacancy, process or holiday missing, or owned by another tenant."""
    status_code = 404
    code = "not_found"


class InvalidTransition(SchedulingError):
    """Vacancy lifecycle does not allow the requested change."""
    status_code = 409
    code = "invalid_transition"


class InvalidDate(SchedulingError):
    status_code = 400
    code = "invalid_date"


class BrokenInvariant(SchedulingError):
    """The stage chain is corrupted or was modified concurrently. Never auto-repaired."""
    status_code = 409
    code = "broken_invariant"


class MissingConfiguration(SchedulingError):
    status_code = 400
    code = "missing_configuration"


class InvalidInput(SchedulingError):
    status_code = 400
    code = "invalid_input"


class DuplicateRecord(SchedulingError):
    status_code = 409
    code = "duplicate_record"


class StorageError(SchedulingError):
    status_code = 500
    code = "storage_error"
