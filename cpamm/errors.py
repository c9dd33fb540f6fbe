"""Exceptions raised by the constant-product AMM."""


class AmmError(Exception):
    """Base class for every error the AMM reports."""

    default_message = "AMM operation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)


class InvalidOwner(AmmError):
    """The signer is not allowed to perform the operation."""

    default_message = "Signer is not the owner or admin"


class InvalidInput(AmmError):
    """An argument is outside the accepted values."""

    default_message = "Invalid input"


class NotApproved(AmmError):
    """The pool does not currently allow the requested operation."""

    default_message = "Operation not approved for this pool"


class ExceededSlippage(AmmError):
    """A trade would move more tokens than the caller allowed."""

    default_message = "Exceeds desired slippage limit"


class AccountError(AmmError):
    """Account data is missing, malformed or of the wrong kind."""

    default_message = "Account data could not be used"