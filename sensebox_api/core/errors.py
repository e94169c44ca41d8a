"""
Error kinds raised by the box mutation engine
"""

from typing import Optional


class BoxApiError(Exception):
    """Base class for every error the engine reports to its callers"""

    status_code = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(BoxApiError):
    """Malformed or contradictory input; nothing was written"""

    status_code = 400


class NotFoundError(BoxApiError):
    """A box or sensor identifier matched no row"""

    status_code = 404


class StoreError(BoxApiError):
    """Statement execution or connection failure.

    The underlying database exception is chained as ``__cause__`` for
    diagnostics; ``message`` stays generic so it can be shown to clients.
    """

    status_code = 500

    def __init__(self, message: str = "Database operation failed", detail: Optional[str] = None):
        super().__init__(message, detail)


class ConflictError(StoreError):
    """Constraint violation, e.g. a duplicate sensor id"""

    status_code = 409

    def __init__(self, message: str = "Conflicting data", detail: Optional[str] = None):
        super().__init__(message, detail)
