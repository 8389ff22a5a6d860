# services/errors.py
"""
Error taxonomy shared by the visit services.
Each error carries the error code and HTTP status the API reports for it.
"""


class VisitErrorCode:
    """Visit service error codes."""
    VALIDATION_ERROR = 'validation_error'
    NOT_FOUND = 'not_found'
    STORE_ERROR = 'store_error'
    MALFORMED_CREDENTIAL = 'malformed_credential'
    DASHBOARD_LOCKED = 'dashboard_locked'


class VisitServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    error_code = VisitErrorCode.STORE_ERROR
    status_code = 500

    def __init__(self, message, fields=None):
        super().__init__(message)
        self.message = message
        self.fields = fields or {}

    def to_dict(self):
        body = {
            'error': self.message,
            'error_code': self.error_code,
        }
        if self.fields:
            body['fields'] = self.fields
        return body


class ValidationError(VisitServiceError):
    """Missing or invalid required field."""
    error_code = VisitErrorCode.VALIDATION_ERROR
    status_code = 400


class NotFound(VisitServiceError):
    """No visit matches the identifier."""
    error_code = VisitErrorCode.NOT_FOUND
    status_code = 404

    def __init__(self, message='Visit not found', fields=None):
        super().__init__(message, fields)


class StoreError(VisitServiceError):
    """Persistence failure or misconfigured store."""
    error_code = VisitErrorCode.STORE_ERROR
    status_code = 500

    def __init__(self, message='Server error', fields=None):
        super().__init__(message, fields)


class MalformedCredential(VisitServiceError):
    """Scanned text does not identify a visit. Raised before the store is contacted."""
    error_code = VisitErrorCode.MALFORMED_CREDENTIAL
    status_code = 400


class DashboardLocked(VisitServiceError):
    """Dashboard password missing or wrong."""
    error_code = VisitErrorCode.DASHBOARD_LOCKED
    status_code = 401

    def __init__(self, message='Dashboard password required', fields=None):
        super().__init__(message, fields)
