"""Domain errors raised by the service layer.

Each error carries the HTTP status it maps to; ``ciao.main`` turns them
into ``{"detail": message}`` responses.
"""


class CiaoError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationError(CiaoError):
    status_code = 401


class ForbiddenError(CiaoError):
    status_code = 403


class NotFoundError(CiaoError):
    status_code = 404


class InvalidRequestError(CiaoError):
    status_code = 400
