"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Wallet
  3xxx: Wager
  4xxx: Settlement
  5xxx: Prize
  9xxx: System

Category bases (ValidationError, NotFoundError, InvalidStateError, StoreError)
let batch loops decide skip-and-log vs. abort without matching on codes.
"""


class AppError(Exception):
    """Base application error."""

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


# --- Categories ---

class ValidationError(AppError):
    """Request rejected before any state change."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 422)


class NotFoundError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


class InvalidStateError(AppError):
    def __init__(self, code: int, message: str, http_status: int = 409) -> None:
        super().__init__(code, message, http_status)


class ForbiddenError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 403)


class StoreError(AppError):
    """Ledger store failure; the current unit of work has been rolled back."""

    def __init__(self, detail: str = "Ledger store unavailable") -> None:
        super().__init__(9003, detail, 503)


# --- 1xxx: Auth/User ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired token", 401)


class AdminRequiredError(ForbiddenError):
    def __init__(self) -> None:
        super().__init__(1006, "Admin role required")


# --- 2xxx: Wallet ---

class InsufficientBalanceError(InvalidStateError):
    def __init__(self, currency: str, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient {currency} balance: required {required} micro, "
            f"available {available} micro",
            422,
        )


class WalletNotFoundError(NotFoundError):
    def __init__(self, user_id: str) -> None:
        super().__init__(2002, f"Wallet not found for user {user_id}")


class InvalidAmountError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(2003, f"Invalid amount: {detail}")


# --- 3xxx: Wager ---

class WagerNotFoundError(NotFoundError):
    def __init__(self, wager_id: int) -> None:
        super().__init__(3001, f"Wager not found: {wager_id}")


class WagerNotActiveError(InvalidStateError):
    def __init__(self, wager_id: int) -> None:
        super().__init__(3002, f"Wager is not active: {wager_id}", 422)


class WagerAlreadySettledError(InvalidStateError):
    def __init__(self, wager_id: int) -> None:
        super().__init__(3003, f"Wager already settled: {wager_id}")


class InvalidSideError(ValidationError):
    def __init__(self, side: object) -> None:
        super().__init__(3004, f"Side must be 'side1' or 'side2', got {side!r}")


class NotWagerCreatorError(ForbiddenError):
    def __init__(self, wager_id: int) -> None:
        super().__init__(3005, f"Not authorized to settle wager {wager_id}")


class InvalidWagerError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(3006, f"Invalid wager: {detail}")


# --- 4xxx: Settlement ---

class WinningSideRequiredError(ValidationError):
    def __init__(self, wager_id: int) -> None:
        super().__init__(
            4001,
            f"winning_side is required to settle wager {wager_id} "
            "(no default winning side configured)",
        )


class AlreadyCreditedError(InvalidStateError):
    """A payout/prize for this (type, user, reference) is already on the ledger."""

    def __init__(self, tx_type: str, user_id: str, reference_id: str) -> None:
        super().__init__(
            4002, f"{tx_type} already credited: user={user_id} ref={reference_id}"
        )


# --- 5xxx: Prize ---

class InvalidPeriodError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(5001, f"Invalid prize period: {detail}")


class PrizePeriodAlreadyExecutedError(InvalidStateError):
    def __init__(self, period_key: str) -> None:
        super().__init__(5002, f"Prize period already executed: {period_key}")


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
