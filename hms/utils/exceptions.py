# /hms/utils/exceptions.py


class ServiceError(Exception):
    """Business-rule failure raised by the service layer and rendered as JSON."""
    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(ServiceError):
    status_code = 404


class PermissionDeniedError(ServiceError):
    status_code = 403


class ConflictError(ServiceError):
    status_code = 409


class IdentityProviderError(ServiceError):
    """The hosted identity provider rejected a request or could not be reached."""
    status_code = 502

    def __init__(self, message, code='UNKNOWN_ERROR', status_code=None):
        super().__init__(message, status_code)
        self.code = code
