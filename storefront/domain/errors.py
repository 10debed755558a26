# storefront/domain/errors.py
"""Typed service errors.

Every error carries the HTTP status the API layer answers with; services
raise them and the exception handlers in `storefront.api` render the JSON
envelope.
"""


class APIError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(APIError):
    status_code = 404


class InvalidInputError(APIError):
    status_code = 400


class InsufficientStockError(APIError):
    status_code = 400


class InvalidQuantityError(APIError):
    status_code = 400


class InvalidStatusError(APIError):
    status_code = 400


class InvalidTransitionError(APIError):
    status_code = 400


class UnauthorizedError(APIError):
    status_code = 401


class ForbiddenError(APIError):
    status_code = 403


class TooManyRequestsError(APIError):
    status_code = 429
