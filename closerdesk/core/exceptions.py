"""
Domain errors raised by the service layer.

Routes let these bubble up; the handler registered in ``closerdesk.main``
turns them into ``{"detail": ..., "error": ...}`` with the matching status.
"""


class CloserDeskError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(CloserDeskError):
    status_code = 404


class ValidationError(CloserDeskError):
    status_code = 400


class ForbiddenError(CloserDeskError):
    status_code = 403
