"""Custom exceptions for the Sunstone CRM application."""

class SaasError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv

class BusinessLogicError(SaasError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)

class ValidationError(BusinessLogicError):
    """Raised when a request is missing required fields or carries bad values."""
    def __init__(self, message, payload=None):
        super().__init__(message, 400, payload)

class NotFoundError(SaasError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)

class ConflictError(BusinessLogicError):
    """Raised when a uniqueness rule is violated (duplicate tag, duplicate assignment)."""
    def __init__(self, message, payload=None):
        super().__init__(message, 409, payload)

class UnauthorizedError(SaasError):
    """Raised when a user lacks permission for an action."""
    def __init__(self, message="Unauthorized access"):
        super().__init__(message, 403)

class AuthenticationRequired(SaasError):
    """Raised when no user (or admin) session is present."""
    def __init__(self, message="Unauthorized"):
        super().__init__(message, 401)
