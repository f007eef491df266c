"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Validation/Auth
  2xxx: Wallet
  3xxx: Exchange rate
  5xxx: Trade offer
  9xxx: System

Messages are shown to the calling user, so they never carry another user's
identifiers or wallet details.
"""


class AppError(Exception):
    """Base application error."""

    retryable: bool = False

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Validation/Auth ---

class ValidationError(AppError):
    def __init__(self, field: str, detail: str) -> None:
        self.field = field
        super().__init__(1001, f"Invalid {field}: {detail}", 422)


class AuthorizationError(AppError):
    def __init__(self, detail: str = "Operation not permitted") -> None:
        super().__init__(1003, detail, 403)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Invalid or expired token", 401)


# --- 2xxx: Wallet ---

class InsufficientBalanceError(AppError):
    def __init__(self, program: str, required: int, available: int) -> None:
        self.program = program
        self.required = required
        self.available = available
        super().__init__(
            2001,
            f"Insufficient {program} balance: required {required} points, "
            f"available {available} points",
            422,
        )


class WalletNotFoundError(AppError):
    def __init__(self, program: str) -> None:
        super().__init__(2002, f"No {program} wallet found", 404)


# --- 3xxx: Exchange rate ---

class RateUnavailableError(AppError):
    def __init__(self, from_program: str, to_program: str, reason: str = "no rate") -> None:
        self.reason = reason
        super().__init__(
            3001,
            f"Exchange rate unavailable for {from_program} -> {to_program}: {reason}",
            422,
        )


# --- 5xxx: Trade offer ---

class OfferNotFoundError(AppError):
    def __init__(self, offer_id: str) -> None:
        super().__init__(5001, f"Trade offer not found: {offer_id}", 404)


class OfferNotActiveError(AppError):
    def __init__(self, offer_id: str) -> None:
        super().__init__(5002, f"Trade offer {offer_id} is no longer active", 409)


class ExpiredOfferError(AppError):
    def __init__(self, offer_id: str) -> None:
        super().__init__(5003, f"Trade offer {offer_id} has expired", 410)


class SelfTradeError(AppError):
    def __init__(self) -> None:
        super().__init__(5004, "Cannot accept your own trade offer", 422)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class ConcurrencyConflictError(AppError):
    """Transient: the same wallet or offer was busy. Safe to retry."""

    retryable = True

    def __init__(self, detail: str = "Concurrent update conflict, please retry") -> None:
        super().__init__(9003, detail, 409)
