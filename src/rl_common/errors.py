"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Validation (malformed input, rejected before touching storage)
  2xxx: Not found
  3xxx: Conflict
  9xxx: System / storage
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


# --- 1xxx: Validation ---

class ValidationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1001, f"Invalid input: {detail}", 422)


# --- 2xxx: Not found ---

class NotFoundError(AppError):
    def __init__(self, detail: str, code: int = 2001) -> None:
        super().__init__(code, detail, 404)


class CompanionNotFoundError(NotFoundError):
    def __init__(self, companion_id: str) -> None:
        super().__init__(f"Companion not found: {companion_id}", 2002)


class PaymentNotFoundError(NotFoundError):
    def __init__(self, payment_id: str) -> None:
        super().__init__(f"Payment not found: {payment_id}", 2003)


# --- 3xxx: Conflict ---

class ConflictError(AppError):
    def __init__(self, detail: str, code: int = 3001) -> None:
        super().__init__(code, detail, 409)


class CompanionNameExistsError(ConflictError):
    def __init__(self, name: str) -> None:
        super().__init__(f"A companion named '{name}' already exists", 3002)


class CompanionIdExistsError(ConflictError):
    def __init__(self, companion_id: str) -> None:
        super().__init__(f"Companion id already in use: {companion_id}", 3003)


# --- 9xxx: System ---

class StorageError(AppError):
    def __init__(self, detail: str = "Storage failure") -> None:
        super().__init__(9001, f"Storage error: {detail}", 503)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
