"""Exceptions raised by the logs sink writer."""


class LogsSinkError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(LogsSinkError):
    """Raised when the writer configuration is missing or invalid."""


class TransportError(LogsSinkError):
    """Raised by a transport when the HTTP exchange itself fails."""


class WriteError(LogsSinkError):
    """A failure that stopped a write call part way through.

    Records how much of the call was delivered before it: the index of the
    failing batch, and the batches and records already accepted.
    """

    def __init__(
        self,
        message: str,
        batch_index: int = 0,
        batches_sent: int = 0,
        records_sent: int = 0,
    ):
        super().__init__(message)
        self.batch_index = batch_index
        self.batches_sent = batches_sent
        self.records_sent = records_sent


class SerializationError(WriteError):
    """Raised when a record value cannot be represented as a JSON string."""


class DeliveryError(WriteError):
    """Raised when a batch was not accepted by the intake endpoint."""

    def __init__(
        self,
        message: str,
        batch_index: int = 0,
        batches_sent: int = 0,
        records_sent: int = 0,
        status_code: int | None = None,
    ):
        super().__init__(message, batch_index, batches_sent, records_sent)
        self.status_code = status_code
