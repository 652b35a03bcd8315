"""
Error taxonomy shared by the services and the HTTP layer.

Every error carries the HTTP status it maps to; the handlers in
``storefront.main`` turn them into ``{"error": message}`` responses.
"""


class StorefrontError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StorefrontError):
    status_code = 400


class NotFoundError(StorefrontError):
    status_code = 404


class UserNotFound(NotFoundError):
    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class ConflictError(StorefrontError):
    status_code = 409


class InvalidCredentials(ConflictError):
    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class UpstreamError(StorefrontError):
    """Persistence, payment or analytics collaborator failed."""
    status_code = 502


class InvalidOrExpired(StorefrontError):
    status_code = 400

    def __init__(self, message: str = "Invalid or expired OTP"):
        super().__init__(message)


class NotificationError(StorefrontError):
    status_code = 500
