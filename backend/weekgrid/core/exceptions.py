class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when the timetable engine cannot produce a grid."""
    def __init__(self, message: str, status_code: int = 400, details: dict = None):
        super().__init__(message, status_code=status_code, details=details)

class CapacityError(SchedulerError):
    """Requested hours exceed the 42-cell week, or placement ran out of free cells."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ConfigurationError(SchedulerError):
    """Raised when a special-hours configuration is malformed."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)

class ReservationConflictError(SchedulerError):
    """Two fixed allocations claim the same grid cell."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)

class PlacementError(SchedulerError):
    """A lab cannot find a contiguous block that honors its preference."""
    def __init__(self, lab_name: str, reason: str, details: dict = None):
        self.lab_name = lab_name
        super().__init__(
            f"Could not place lab {lab_name}: {reason}",
            status_code=422,
            details={"lab": lab_name, **(details or {})},
        )

class GridFormatError(AppError):
    """Raised when a persisted grid is not a 6x7 array of nullable strings."""
    def __init__(self, message: str):
        super().__init__(message, status_code=422)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)
