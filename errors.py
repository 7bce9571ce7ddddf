"""Exception types raised by the ledger, its importers and its stores."""


class LedgerError(Exception):
    """Base class for all Ledgerly errors."""


class ValidationError(LedgerError, ValueError):
    """A record is missing a required field or carries an invalid value."""


class NotFoundError(LedgerError, LookupError):
    """A transaction or budget that was asked for does not exist."""


class SerializationError(LedgerError):
    """Stored or imported content could not be parsed."""
