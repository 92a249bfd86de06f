"""Error taxonomy shared by every service.

Services raise these; ``main.py`` turns them into ``{"error": message}``
JSON responses with the matching status code.
"""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequest(ServiceError):
    status_code = 400


class Unauthorized(ServiceError):
    status_code = 401


class Forbidden(ServiceError):
    status_code = 403


class NotFound(ServiceError):
    status_code = 404


def validation_message(error) -> str:
    """Condense a pydantic ``ValidationError`` into one readable line."""
    first = error.errors()[0]
    location = ".".join(str(p) for p in first.get("loc", ()))
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message
