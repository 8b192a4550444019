from apps.exchange.domain.exceptions import DomainError


class CurrencyMismatch(DomainError):
    kind = "CurrencyMismatch"
    status_code = 400


class QuoteExpired(DomainError):
    kind = "QuoteExpired"
    status_code = 409


class IllegalTransition(DomainError):
    kind = "IllegalTransition"
    status_code = 409


class NotCancellable(DomainError):
    kind = "NotCancellable"
    status_code = 400


class InvalidPaymentMethod(DomainError):
    kind = "InvalidPaymentMethod"
    status_code = 400


class TransferNotFound(DomainError):
    kind = "NotFound"
    status_code = 404


class RecipientNotFound(DomainError):
    kind = "NotFound"
    status_code = 404


class ReferenceCollision(DomainError):
    """Reference number retries exhausted. Surfaced as an internal error."""

    kind = "InternalError"
    status_code = 500
