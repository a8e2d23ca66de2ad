class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when the scheduler receives an invalid request or reaches an invalid state."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class NoVenuesAvailableError(SchedulerError):
    """Raised when a generation run has no venue to place anything into."""
    def __init__(self, message: str = "No venues available for scheduling"):
        super().__init__(message)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)

class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)

class PersistenceError(AppError):
    """Raised when the schedule store cannot be read or written."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=503, details=details)

class GenerationServiceError(AppError):
    """Raised when the remote generation service fails or answers with a malformed body."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=502, details=details)
