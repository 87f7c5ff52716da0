"""
Domain exceptions

ValidationError, NotFoundError and ConflictError are raised before anything
is written. Bad input may be fixed and retried; a conflict means the room or
order is not in the state the caller assumed. PersistenceError comes
from the storage layer; `partially_applied` tells whether earlier writes of
the same operation could not be undone.
"""


class GameZoneError(Exception):
    """Base class for all domain errors"""
    status_code = 500
    code = "error"
    safe_to_retry = True

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {
            "detail": self.message,
            "error": self.code,
            "safe_to_retry": self.safe_to_retry,
        }


class ValidationError(GameZoneError):
    """Malformed input, rejected before any write"""
    status_code = 422
    code = "validation_error"


class NotFoundError(GameZoneError):
    """Referenced row does not exist"""
    status_code = 404
    code = "not_found"


class ConflictError(GameZoneError):
    """State transition precondition violated"""
    status_code = 409
    code = "conflict"
    safe_to_retry = False


class PersistenceError(GameZoneError):
    """Gateway call failed"""
    status_code = 500
    code = "persistence_error"

    def __init__(self, message: str, partially_applied: bool = False):
        super().__init__(message)
        self.partially_applied = partially_applied

    @property
    def safe_to_retry(self) -> bool:
        return not self.partially_applied

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.partially_applied:
            data["detail"] = (
                f"{self.message}. The operation may be partially applied: "
                "refresh and verify the room and order before retrying."
            )
        else:
            data["detail"] = f"{self.message}. Nothing was saved, it is safe to retry."
        data["partially_applied"] = self.partially_applied
        return data
