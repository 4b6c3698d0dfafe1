from typing import Any


class ApplicationError(Exception):
    """General application error"""

    http_code: int | None = None
    error_code: int
    error: str

    def __init__(self, details: Any | None = None, where: str | None = None):
        self.error = self.error
        if details:
            self.error += f": {details}"
        # component that raised the error, reported back to API clients
        self.where = where
        super().__init__(self.error)
