"""Common application errors, may be raised from the cache, the loader and services"""

from cardregistry.errors.base import ApplicationError


class ValidationError(ApplicationError):
    http_code = 400
    error_code = 1400
    error = "Required reference is missing"


class NotFoundError(ApplicationError):
    http_code = 404
    error_code = 1404
    error = "Not found"


class ConflictError(ApplicationError):
    http_code = 409
    error_code = 1409
    error = "Conflicts with an existing record"
