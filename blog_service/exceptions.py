"""
Service-level exceptions.

Services raise these; ``blog_service.main`` registers handlers that turn
them into ``{"message": ..., "error": ...}`` JSON responses with the
matching status code.
"""


class BlogServiceError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, detail: str | None = None, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        self.detail = detail or self.message
        super().__init__(self.detail)


class NotFoundError(BlogServiceError):
    status_code = 404
    message = "Resource not found"


class ForbiddenError(BlogServiceError):
    status_code = 403
    message = "The author and user do not match"


class UnauthorizedError(BlogServiceError):
    status_code = 401
    message = "Could not validate credentials"


class ConflictError(BlogServiceError):
    status_code = 409
    message = "Resource already exists"
