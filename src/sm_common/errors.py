"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Identity/Auth
  2xxx: Balance
  3xxx: Listing
  4xxx: Transaction
  5xxx: Conversation
  9xxx: System
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


# --- 1xxx: Identity/Auth ---

class PhoneExistsError(AppError):
    def __init__(self, phone: str) -> None:
        super().__init__(1001, f"Phone number already registered: {phone}", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid phone or password", 401)


class UserNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1004, f"User not found: {user_id}", 404)


# --- 2xxx: Balance ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required}, available {available}",
            422,
        )


# --- 3xxx: Listing ---

class ListingNotFoundError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(3001, f"Listing not found: {listing_id}", 404)


class ListingNotActiveError(AppError):
    def __init__(self, listing_id: str, status: str) -> None:
        super().__init__(3002, f"Listing {listing_id} is not active (status={status})", 422)


class InvalidStatusTransitionError(AppError):
    def __init__(self, entity: str, current: str, target: str) -> None:
        super().__init__(3004, f"{entity} cannot move from {current} to {target}", 422)


# --- 4xxx: Transaction ---

class TransactionNotFoundError(AppError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__(4001, f"Transaction not found: {transaction_id}", 404)


class AmountMismatchError(AppError):
    def __init__(self, amount: int, price: int) -> None:
        super().__init__(4005, f"Payment amount {amount} does not match listing price {price}", 422)


class IdempotencyConflictError(AppError):
    def __init__(self, key: str) -> None:
        super().__init__(4006, f"Idempotency key {key} was already used for another payment", 409)


class MissingSettlementError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(4002, f"No settled payment for listing {listing_id}", 422)


# Soft failure: returned inside a success envelope, never raised.
INVALID_VERIFICATION_CODE = 4003


# --- 5xxx: Conversation ---

class ConversationNotFoundError(AppError):
    def __init__(self, conversation_id: str) -> None:
        super().__init__(5001, f"Conversation not found: {conversation_id}", 404)


class SelfConversationError(AppError):
    def __init__(self) -> None:
        super().__init__(5003, "A conversation needs two distinct participants", 422)


# --- 9xxx: System ---

class ForbiddenError(AppError):
    def __init__(self, detail: str = "Not allowed") -> None:
        super().__init__(9003, detail, 403)
