"""Error taxonomy surfaced to API callers.

Every error is terminal for the request that raised it; none are retried.
Transfer failures are all raised before any balance or ledger mutation.
"""


class BankError(Exception):
    """Base class for errors reported to the caller."""

    code = "BANK_ERROR"
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(BankError):
    """No valid session for the current request."""

    code = "UNAUTHENTICATED"
    status_code = 401
    default_message = "Unauthorized"


class AuthenticationFailed(BankError):
    """Username/credential pair did not match a user."""

    code = "INVALID_CREDENTIALS"
    status_code = 401
    default_message = "Invalid credentials"


class TransferError(BankError):
    """Raised when a transfer is rejected during validation."""

    status_code = 400


class InvalidInput(TransferError):
    code = "INVALID_INPUT"
    default_message = "Invalid transfer data"


class SourceAccountUnauthorized(TransferError):
    code = "SOURCE_ACCOUNT_UNAUTHORIZED"
    default_message = "From account not found or not owned by user"


class DestinationAccountNotFound(TransferError):
    code = "DESTINATION_ACCOUNT_NOT_FOUND"
    default_message = "To account not found"


class InsufficientFunds(TransferError):
    code = "INSUFFICIENT_FUNDS"
    default_message = "Insufficient funds"
