class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when the scheduler encounters a logical error or invalid state."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )

class DataIntegrityError(AppError):
    """Raised when assignments reference missing faculty/rooms or repeat an id."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)

class ReferenceInUseError(AppError):
    """Raised when deleting reference data that scheduled assignments or pending requests still use."""
    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        assignment_ids: list[str],
        request_ids: list[str] | None = None,
    ):
        if assignment_ids:
            message = f"{resource_type} with id {resource_id} is referenced by {len(assignment_ids)} assignment(s)"
        else:
            message = (
                f"{resource_type} with id {resource_id} is the target of "
                f"{len(request_ids or [])} pending change request(s)"
            )
        details = {"resource_type": resource_type, "resource_id": resource_id, "assignment_ids": assignment_ids}
        if request_ids:
            details["request_ids"] = request_ids
        super().__init__(message, status_code=409, details=details)

class InvalidTransitionError(AppError):
    """Raised when a change request leaves a terminal state."""
    def __init__(self, request_id: str, current: str, target: str):
        super().__init__(
            f"Change request {request_id} cannot move from {current} to {target}",
            status_code=409,
            details={"request_id": request_id, "current": current, "target": target},
        )

class ChangeRequestRejectedError(AppError):
    """Raised when approving a change request would introduce new conflicts."""
    def __init__(self, request_id: str, conflicting_ids: list[str], reason: str):
        super().__init__(
            reason,
            status_code=409,
            details={"request_id": request_id, "conflicting_ids": conflicting_ids},
        )

class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)

class OptimizerUnavailableError(AppError):
    """Raised when the external optimizer did not produce a usable candidate."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=502, details=details)

class DuplicateResourceError(AppError):
    """Raised when a create or rename collides with an existing resource."""
    def __init__(self, resource_type: str, field: str, value: str):
        super().__init__(
            f"{resource_type} {field} {value} already exists",
            status_code=409,
            details={"resource_type": resource_type, "field": field, "value": value},
        )
