# circularbuild/domain/errors.py


class DomainError(Exception):
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    status_code = 400


class AuthorizationError(DomainError):
    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class InvalidTransitionError(DomainError):
    status_code = 400


class ClosedChatError(DomainError):
    status_code = 409


class UpstreamError(DomainError):
    status_code = 500
