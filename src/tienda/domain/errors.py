class AppError(Exception):
    """Base app error."""


class ValidationError(AppError):
    pass


class NotFoundError(AppError):
    pass


class InsufficientStockError(AppError):
    pass


class InsufficientDebtError(AppError):
    """Payment amount is larger than what the customer owes."""


class CreditLimitError(AppError):
    pass


class DuplicateSaleError(AppError):
    pass


class CheckoutError(AppError):
    """A multi-step write failed; completed steps were rolled back or compensated."""


class StoreError(AppError):
    """The remote data store rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
