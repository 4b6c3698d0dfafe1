"""Bootstrap loader errors"""

from cardregistry.errors.base import ApplicationError


class SourceReadError(ApplicationError):
    http_code = 500
    error_code = 4001
    error = "Can't read bootstrap data source"
