# Overview: Error taxonomy shared by services and routes.

"""
Every business failure raised by the services derives from ShopTrackError and
carries the HTTP status the router answers with. None of these are transient,
so nothing here is retried automatically.
"""


class ShopTrackError(Exception):
    """Base class for expected, caller-visible failures."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ShopTrackError):
    """400-level input problem (missing identifiers, non-positive quantity)."""
    status_code = 400


class InvalidOrExpiredTokenError(ShopTrackError):
    """
    QR token unknown, expired, or already used.

    The three causes are deliberately merged: callers must not learn which
    one applied.
    """
    status_code = 401

    def __init__(self, message: str = "Invalid or expired QR token"):
        super().__init__(message)


class NotFoundError(ShopTrackError):
    """Referenced request, component, product, user or token does not exist."""
    status_code = 404


class ConflictError(ShopTrackError):
    """409-level state conflict (request not pending, scanned component mismatch)."""
    status_code = 409


class AuditWriteError(ShopTrackError):
    """
    Append-only event/activity write failed.

    Raised inside the recorder only; it is logged and swallowed there so the
    primary operation that triggered the write still succeeds.
    """
    status_code = 500
