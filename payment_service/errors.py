class PaymentServiceError(Exception):
    """Base class for every error raised by the payment service."""


class ValidationError(PaymentServiceError):
    """Input has the wrong shape, e.g. a non-numeric order id."""


class NotFoundError(PaymentServiceError):
    """No payment exists for the requested order."""


class StorageError(PaymentServiceError):
    """The database rejected or failed a read or write."""


class RemoteError(PaymentServiceError):
    """A collaborator answered with an unexpected status or could not be reached.

    ``status_code`` and ``body`` are None for transport failures.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message}: status {self.status_code}, body: {self.body}"


class DecodeError(PaymentServiceError):
    """A collaborator answered with a body that could not be decoded."""


class ConfigError(PaymentServiceError):
    """A required setting is missing."""
