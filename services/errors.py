"""
Error conditions raised by the service layer.

Routes translate these into JSON error responses using ``status_code``.
"""


class ServiceError(Exception):
    """Base class for failures the API reports to the client."""

    status_code = 500
    default_message = 'Request failed'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class NotAuthenticated(ServiceError):
    """Missing or invalid session."""

    status_code = 401
    default_message = 'User not authenticated'


class InvalidInput(ServiceError):
    """Malformed identifier or a violated constraint."""

    status_code = 400
    default_message = 'Invalid request'


class Forbidden(ServiceError):
    status_code = 403
    default_message = 'Not allowed'


class NotFound(ServiceError):
    status_code = 404
    default_message = 'Not found'


class Conflict(ServiceError):
    """Duplicate active couple, duplicate email, or a lost race on a transition."""

    status_code = 409
    default_message = 'Conflict'


class Expired(ServiceError):
    status_code = 410
    default_message = 'Invitation has expired'


class InternalFailure(ServiceError):
    """Store unreachable or timed out. Safe to retry."""

    status_code = 503
    default_message = 'Service temporarily unavailable'
