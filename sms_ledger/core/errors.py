class LedgerError(Exception):
    """Base class for every failure the ledger reports to its callers."""

    code = "LEDGER_ERROR"
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class InvalidPayload(LedgerError):
    """Ingestion input could not be deserialized into a transaction."""

    code = "INVALID_PAYLOAD"
    status_code = 400


class TransactionNotFound(LedgerError):
    code = "TRANSACTION_NOT_FOUND"
    status_code = 404


class StoreUnavailable(LedgerError):
    """The backing store failed; nothing may be assumed about the write."""

    code = "STORE_UNAVAILABLE"
    status_code = 503
