"""Error taxonomy shared by the order, catalog and chat components.

Every error carries the HTTP status the API layer answers with, so routes
never have to map exceptions one by one.
"""


class StorefrontError(Exception):
    """Base class for all storefront errors."""

    status_code = 500

    def __init__(self, message: str = ""):
        self.message = message or self.__class__.__name__
        super().__init__(self.message)


class ValidationError(StorefrontError):
    """Malformed or incomplete input (missing shipping fields, bad amounts)."""

    status_code = 400


class NotFoundError(StorefrontError):
    """A referenced order, product or settings record does not exist."""

    status_code = 404


class Unauthorized(StorefrontError):
    """Missing, invalid or expired credential."""

    status_code = 401


class InvalidTransitionError(StorefrontError):
    """Order status change forbidden by the current state."""

    status_code = 400


class UpstreamProviderError(StorefrontError):
    """AI provider or mail transport failure."""

    status_code = 502

    def __init__(self, message: str = "", provider: str = None):
        self.provider = provider
        super().__init__(message)


class StoreError(StorefrontError):
    """Backing persistence failure."""

    status_code = 500
