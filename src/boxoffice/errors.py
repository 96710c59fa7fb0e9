"""Error taxonomy shared by the inventory API, the notifier and the hub.

Each mutation-facing error carries the HTTP status it maps to, so the API
layer can render any of them as {"error": message} without a lookup table.
DeliveryError never crosses the notifier boundary.
"""


class BoxOfficeError(Exception):
    """Base class for all domain errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BoxOfficeError):
    """Missing or malformed input. User-correctable."""

    status_code = 400


class NotFoundError(BoxOfficeError):
    """Referenced event or ticket does not exist (or is inactive)."""

    status_code = 404


class InsufficientInventoryError(BoxOfficeError):
    """Requested quantity exceeds what is available."""

    status_code = 409


class StorageError(BoxOfficeError):
    """The database is unreachable or the write itself failed."""

    status_code = 503


class DeliveryError(BoxOfficeError):
    """Notifier could not hand a change to the hub. Always swallowed."""
