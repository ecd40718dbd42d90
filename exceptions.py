# exceptions.py
"""
Typed exceptions for the invoice/payment ledger.

Every error carries a stable machine-readable ``code`` (class attribute),
an ``http_status`` for the API layer, and its context as attributes so it
can be logged and serialized without parsing the message.

    InvoiceDeskError
    +-- ValidationError          400
    +-- NotFoundError            404
    +-- ConflictError            409
    +-- AuthError
    |   +-- UnauthorizedError    401
    |   +-- ForbiddenError       403
    +-- StorageError             503
"""
from decimal import Decimal
from typing import Any, Optional


class InvoiceDeskError(Exception):
     """Base exception for all ledger and API errors."""

     code: str = "INVOICEDESK_ERROR"
     http_status: int = 500

     def __init__(self, message: str, **details: Any):
          super().__init__(message)
          self.message = message
          self.details = details

     def to_dict(self) -> dict:
          return {
               "code": self.code,
               "message": self.message,
               "details": {k: _jsonable(v) for k, v in self.details.items()},
          }


def _jsonable(value: Any) -> Any:
     if isinstance(value, Decimal):
          return str(value)
     if hasattr(value, "isoformat"):
          return value.isoformat()
     if isinstance(value, (list, tuple)):
          return [_jsonable(v) for v in value]
     return value


# ---------------------------------------------------------------------------
# Validation (bad input shape or range)
# ---------------------------------------------------------------------------

class ValidationError(InvoiceDeskError):
     code = "VALIDATION_ERROR"
     http_status = 400


class InvalidAmountError(ValidationError):
     code = "INVALID_AMOUNT"

     def __init__(self, amount: Any, reason: str = "Payment amount must be greater than zero"):
          self.amount = amount
          super().__init__(reason, field="amount", amount=amount)


class InvalidMethodError(ValidationError):
     code = "INVALID_METHOD"

     def __init__(self, method: Any, allowed: list[str]):
          self.method = method
          super().__init__(
               f"Unrecognized payment method: {method!r}",
               field="method",
               method=method,
               allowed=allowed,
          )


class PaymentDateInFutureError(ValidationError):
     code = "PAYMENT_DATE_IN_FUTURE"

     def __init__(self, payment_date, today):
          self.payment_date = payment_date
          super().__init__(
               "Payment date cannot be in the future",
               field="date",
               payment_date=payment_date,
               today=today,
          )


class InvalidInvoiceDatesError(ValidationError):
     code = "INVALID_INVOICE_DATES"

     def __init__(self, invoice_date, due_date):
          super().__init__(
               "Due date must be on or after the invoice date",
               field="due_date",
               invoice_date=invoice_date,
               due_date=due_date,
          )


class InvalidInvoiceItemsError(ValidationError):
     code = "INVALID_INVOICE_ITEMS"

     def __init__(self, reason: str = "Please add at least one invoice item"):
          super().__init__(reason, field="items")


class InvalidTaxRateError(ValidationError):
     code = "INVALID_TAX_RATE"

     def __init__(self, tax_rate):
          super().__init__(
               "Tax rate must be between 0% and 100%",
               field="tax_rate",
               tax_rate=tax_rate,
          )


class InactiveClientError(ValidationError):
     code = "CLIENT_INACTIVE"

     def __init__(self, client_id: int):
          self.client_id = client_id
          super().__init__(f"Client {client_id} is inactive", field="client_id", client_id=client_id)


class ProjectClientMismatchError(ValidationError):
     code = "PROJECT_CLIENT_MISMATCH"

     def __init__(self, project_id: int, client_id: int):
          super().__init__(
               f"Project {project_id} does not belong to client {client_id}",
               field="project_id",
               project_id=project_id,
               client_id=client_id,
          )


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------

class NotFoundError(InvoiceDeskError):
     code = "NOT_FOUND"
     http_status = 404


class InvoiceNotFoundError(NotFoundError):
     code = "INVOICE_NOT_FOUND"

     def __init__(self, invoice_id: Any):
          self.invoice_id = invoice_id
          super().__init__(f"Invoice with ID {invoice_id} not found", invoice_id=invoice_id)


class PaymentNotFoundError(NotFoundError):
     code = "PAYMENT_NOT_FOUND"

     def __init__(self, payment_id: Any):
          self.payment_id = payment_id
          super().__init__(f"Payment with ID {payment_id} not found", payment_id=payment_id)


class ClientNotFoundError(NotFoundError):
     code = "CLIENT_NOT_FOUND"

     def __init__(self, client_id: Any):
          self.client_id = client_id
          super().__init__(f"Client with ID {client_id} not found", client_id=client_id)


class ProjectNotFoundError(NotFoundError):
     code = "PROJECT_NOT_FOUND"

     def __init__(self, project_id: Any):
          self.project_id = project_id
          super().__init__(f"Project with ID {project_id} not found", project_id=project_id)


# ---------------------------------------------------------------------------
# Conflicts (balance / status rules)
# ---------------------------------------------------------------------------

class ConflictError(InvoiceDeskError):
     code = "CONFLICT"
     http_status = 409


class AmountExceedsBalanceError(ConflictError):
     code = "AMOUNT_EXCEEDS_BALANCE"

     def __init__(self, invoice_id: int, amount: Decimal, balance: Decimal):
          self.invoice_id = invoice_id
          self.amount = amount
          self.balance = balance
          super().__init__(
               f"Payment amount {amount} exceeds the outstanding balance of {balance}",
               invoice_id=invoice_id,
               amount=amount,
               balance=balance,
          )


class InvoiceAlreadyPaidError(ConflictError):
     code = "INVOICE_ALREADY_PAID"

     def __init__(self, invoice_id: int):
          self.invoice_id = invoice_id
          super().__init__(f"Invoice {invoice_id} is already fully paid", invoice_id=invoice_id)


class InvoiceCancelledError(ConflictError):
     code = "INVOICE_CANCELLED"

     def __init__(self, invoice_id: int):
          self.invoice_id = invoice_id
          super().__init__(f"Invoice {invoice_id} is cancelled", invoice_id=invoice_id)


class TotalBelowPaidError(ConflictError):
     code = "TOTAL_BELOW_PAID"

     def __init__(self, invoice_id: int, total: Decimal, paid: Decimal):
          super().__init__(
               f"Cannot reduce invoice total below the already paid amount of {paid}",
               invoice_id=invoice_id,
               total_amount=total,
               paid_amount=paid,
          )


class InvoiceHasPaymentsError(ConflictError):
     code = "INVOICE_HAS_PAYMENTS"

     def __init__(self, invoice_id: int, payment_count: int):
          super().__init__(
               f"Invoice {invoice_id} has {payment_count} payment(s) recorded",
               invoice_id=invoice_id,
               payment_count=payment_count,
          )


class InvoiceNumberTakenError(ConflictError):
     code = "INVOICE_NUMBER_TAKEN"

     def __init__(self, invoice_number: str):
          super().__init__(f"Invoice number {invoice_number} is already in use", invoice_number=invoice_number)


class InvalidStatusTransitionError(ConflictError):
     code = "INVALID_STATUS_TRANSITION"

     def __init__(self, invoice_id: int, current: str, requested: str):
          super().__init__(
               f"Cannot move invoice {invoice_id} from {current} to {requested}",
               invoice_id=invoice_id,
               current=current,
               requested=requested,
          )


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

class AuthError(InvoiceDeskError):
     code = "AUTH_ERROR"
     http_status = 401


class UnauthorizedError(AuthError):
     code = "UNAUTHORIZED"
     http_status = 401

     def __init__(self, message: str = "Authentication required"):
          super().__init__(message)


class ForbiddenError(AuthError):
     code = "FORBIDDEN"
     http_status = 403

     def __init__(self, message: str = "Insufficient permissions", role: Optional[str] = None):
          super().__init__(message, role=role)


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

class StorageError(InvoiceDeskError):
     """Transaction or connection failure. Nothing was applied; caller may retry."""

     code = "STORAGE_ERROR"
     http_status = 503

     def __init__(self, operation: str):
          self.operation = operation
          super().__init__(f"Storage failure during {operation}; no changes were applied", operation=operation)
