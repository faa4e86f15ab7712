"""Custom exceptions for the Reading Quest API."""
from fastapi import HTTPException


class DatabaseError(HTTPException):
    """Database-related errors."""
    def __init__(self, detail: str = "Database operation failed"):
        super().__init__(status_code=500, detail=detail)


class ValidationError(HTTPException):
    """Input validation errors."""
    def __init__(self, detail: str = "Invalid input"):
        super().__init__(status_code=400, detail=detail)


class PlanNotFoundError(HTTPException):
    """The requested reading plan does not exist."""
    def __init__(self, detail: str = "Reading plan not found"):
        super().__init__(status_code=404, detail=detail)


class UserPlanNotFoundError(HTTPException):
    """The requested tracked plan does not exist for this user."""
    def __init__(self, detail: str = "Tracked plan not found"):
        super().__init__(status_code=404, detail=detail)


class InvalidAddressingError(HTTPException):
    """A completion token, section or list that the plan does not resolve to."""
    def __init__(self, detail: str = "Reading unit does not exist in this plan"):
        super().__init__(status_code=422, detail=detail)


class OutOfOrderAdvanceError(HTTPException):
    """Advance requested while the current readings are not all complete."""
    def __init__(self, detail: str = "Complete the current readings before advancing"):
        super().__init__(status_code=409, detail=detail)


class PlanCompletedError(HTTPException):
    """Advance requested on a plan that has already been completed."""
    def __init__(self, detail: str = "Reading plan is already completed"):
        super().__init__(status_code=409, detail=detail)


class StaleStateError(HTTPException):
    """The caller's copy of the position record is out of date."""
    def __init__(self, detail: str = "Plan progress changed, reload and try again"):
        super().__init__(status_code=409, detail=detail)
