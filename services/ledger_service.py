# services/ledger_service.py
"""
Ledger Service - the only writer of an invoice's derived payment state.

Recording a payment:
1. Validate the request (amount > 0 in whole cents, known method, date not
   in the future) into a RecordPaymentRequest
2. Lock the invoice row and read its balance inside the same transaction
3. Reject cancelled / already paid invoices and amounts above the balance
4. Insert the payment, update paid_amount, balance_amount, status and
   updated_at, then commit

Any failure rolls the whole transaction back; nothing partial is visible.

Invariant kept by every write here and checked by reconcile_*():
     paid_amount == sum(payments.payment_amount)
     balance_amount == total_amount - paid_amount >= 0
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from exceptions import (
     AmountExceedsBalanceError,
     InvalidAmountError,
     InvalidMethodError,
     InvoiceAlreadyPaidError,
     InvoiceCancelledError,
     InvoiceDeskError,
     InvoiceNotFoundError,
     PaymentDateInFutureError,
     PaymentNotFoundError,
     StorageError,
     TotalBelowPaidError,
     ValidationError,
)
from logging_config import get_logger
from models import Invoice, Payment
from models.invoice import InvoiceStatus
from models.payment import PaymentMethod
from services.status import effective_status, settle_status
from utils.money import ZERO, parse_exact_money, to_money

logger = get_logger("ledger")


@dataclass(frozen=True)
class RecordPaymentRequest:
     """A payment request that has passed input validation."""
     amount: Decimal
     payment_date: date
     method: PaymentMethod
     reference: Optional[str] = None
     notes: Optional[str] = None

     @classmethod
     def build(
          cls,
          amount: Any,
          payment_date: date,
          method: Any,
          reference: Optional[str] = None,
          notes: Optional[str] = None,
          today: Optional[date] = None
     ) -> "RecordPaymentRequest":
          """
          Validate raw input and build the request.

          Raises:
               InvalidAmountError: amount missing, not a number, <= 0 or sub-cent
               InvalidMethodError: method not one of PaymentMethod
               PaymentDateInFutureError: payment_date after today
          """
          parsed = parse_exact_money(amount)
          if parsed is None:
               raise InvalidAmountError(
                    amount, "Payment amount must be a number with at most two decimal places"
               )
          if parsed <= 0:
               raise InvalidAmountError(amount)

          try:
               payment_method = PaymentMethod(method)
          except ValueError:
               raise InvalidMethodError(method, [m.value for m in PaymentMethod]) from None

          if isinstance(payment_date, datetime):
               payment_date = payment_date.date()
          if not isinstance(payment_date, date):
               raise ValidationError("Payment date is required", field="date")
          today = today or date.today()
          if payment_date > today:
               raise PaymentDateInFutureError(payment_date, today)

          return cls(
               amount=parsed,
               payment_date=payment_date,
               method=payment_method,
               reference=(reference or "").strip() or None,
               notes=(notes or "").strip() or None,
          )


@dataclass
class PaymentResult:
     invoice: Invoice
     payment: Payment

     @property
     def payment_id(self) -> int:
          return self.payment.id


@dataclass
class BalanceSnapshot:
     invoice_id: int
     invoice_number: str
     total_amount: Decimal
     paid_amount: Decimal
     balance_amount: Decimal
     status: InvoiceStatus
     due_date: date


@dataclass
class InvoiceReconciliation:
     invoice_id: int
     invoice_number: str
     total_amount: Decimal
     stored_paid_amount: Decimal
     payments_total: Decimal
     stored_balance_amount: Decimal
     expected_balance_amount: Decimal
     stored_status: InvoiceStatus
     expected_status: InvoiceStatus
     issues: List[str] = field(default_factory=list)

     @property
     def consistent(self) -> bool:
          return not self.issues


@dataclass
class LedgerReconciliation:
     checked: int
     discrepancies: List[InvoiceReconciliation]

     @property
     def consistent(self) -> bool:
          return not self.discrepancies


def _now() -> datetime:
     return datetime.now(timezone.utc).replace(tzinfo=None)


def _lock_invoice(db: Session, invoice_id: int) -> Optional[Invoice]:
     """Load the invoice row for update, overwriting any stale identity-map copy."""
     return (
          db.query(Invoice)
          .filter(Invoice.id == invoice_id)
          .with_for_update()
          .populate_existing()
          .one_or_none()
     )


def _sum_payments(db: Session, invoice_id: int) -> Decimal:
     total = (
          db.query(func.coalesce(func.sum(Payment.payment_amount), 0))
          .filter(Payment.invoice_id == invoice_id)
          .scalar()
     )
     return to_money(total or 0)


def _apply_paid_amount(invoice: Invoice, paid_amount: Decimal) -> None:
     """Write paid/balance/status for ``paid_amount``. Caller holds the row lock."""
     total = to_money(invoice.total_amount)
     invoice.paid_amount = paid_amount
     invoice.balance_amount = total - paid_amount
     invoice.status = settle_status(invoice.status, total, paid_amount)
     invoice.updated_at = _now()


def lock_invoice(db: Session, invoice_id: int) -> Invoice:
     invoice = _lock_invoice(db, invoice_id)
     if invoice is None:
          raise InvoiceNotFoundError(invoice_id)
     return invoice


def reprice_invoice(
     invoice: Invoice,
     subtotal: Decimal,
     tax_rate: Decimal,
     tax_amount: Decimal,
     total_amount: Decimal
) -> None:
     """
     Change an invoice's total and re-derive balance and status.

     The caller must hold the row lock (lock_invoice) and commit.

     Raises:
          TotalBelowPaidError: new total is less than what was already paid
     """
     paid = to_money(invoice.paid_amount)
     if total_amount < paid:
          raise TotalBelowPaidError(invoice.id, total_amount, paid)

     invoice.subtotal = subtotal
     invoice.tax_rate = tax_rate
     invoice.tax_amount = tax_amount
     invoice.total_amount = total_amount
     _apply_paid_amount(invoice, paid)


def record_payment(
     db: Session,
     invoice_id: int,
     amount: Any,
     payment_date: date,
     method: Any,
     reference: Optional[str] = None,
     notes: Optional[str] = None,
     actor_id: Optional[int] = None,
     today: Optional[date] = None
) -> PaymentResult:
     """
     Record a payment against an invoice as one atomic unit.

     Returns:
          PaymentResult with the updated invoice and the created payment

     Raises:
          ValidationError subclasses for bad input or a missing actor_id (nothing is read or written)
          InvoiceNotFoundError, InvoiceCancelledError, InvoiceAlreadyPaidError,
          AmountExceedsBalanceError after rollback
          StorageError if the transaction fails in the database
     """
     request = RecordPaymentRequest.build(
          amount, payment_date, method, reference, notes, today=today
     )
     if actor_id is None:
          raise ValidationError("The recording user is required", field="created_by")

     try:
          invoice = _lock_invoice(db, invoice_id)
          if invoice is None:
               raise InvoiceNotFoundError(invoice_id)

          if invoice.status == InvoiceStatus.CANCELLED:
               raise InvoiceCancelledError(invoice.id)

          balance = to_money(invoice.balance_amount)
          if balance <= ZERO or invoice.status == InvoiceStatus.PAID:
               raise InvoiceAlreadyPaidError(invoice.id)

          if request.amount > balance:
               raise AmountExceedsBalanceError(invoice.id, request.amount, balance)

          payment = Payment(
               invoice_id=invoice.id,
               payment_amount=request.amount,
               payment_date=request.payment_date,
               payment_method=request.method,
               payment_reference=request.reference,
               notes=request.notes,
               created_by=actor_id,
          )
          db.add(payment)
          _apply_paid_amount(invoice, to_money(invoice.paid_amount) + request.amount)

          db.flush()
          db.refresh(payment)
          db.refresh(invoice)
          db.commit()
     except InvoiceDeskError as exc:
          db.rollback()
          logger.info(
               "payment_rejected",
               extra={"invoice_id": invoice_id, "amount": request.amount, "reason": exc.code},
          )
          raise
     except SQLAlchemyError as exc:
          db.rollback()
          logger.exception("payment_storage_failure", extra={"invoice_id": invoice_id})
          raise StorageError("record_payment") from exc

     logger.info(
          "payment_recorded",
          extra={
               "invoice_id": invoice.id,
               "payment_id": payment.id,
               "amount": request.amount,
               "paid_amount": invoice.paid_amount,
               "balance_amount": invoice.balance_amount,
               "status": invoice.status.value,
          },
     )
     return PaymentResult(invoice=invoice, payment=payment)


def delete_payment(db: Session, payment_id: int, actor_id: Optional[int] = None) -> Invoice:
     """
     Administrative correction: delete a payment and recompute its invoice
     from the remaining payments, in one transaction.
     """
     try:
          payment = db.query(Payment).filter(Payment.id == payment_id).one_or_none()
          if payment is None:
               raise PaymentNotFoundError(payment_id)

          invoice = _lock_invoice(db, payment.invoice_id)
          # re-read under the lock; a concurrent correction may have removed it
          payment = (
               db.query(Payment)
               .filter(Payment.id == payment_id)
               .populate_existing()
               .one_or_none()
          )
          if invoice is None or payment is None:
               raise PaymentNotFoundError(payment_id)

          amount = payment.payment_amount
          db.delete(payment)
          db.flush()

          _apply_paid_amount(invoice, _sum_payments(db, invoice.id))
          db.flush()
          db.refresh(invoice)
          db.commit()
     except InvoiceDeskError:
          db.rollback()
          raise
     except SQLAlchemyError as exc:
          db.rollback()
          logger.exception("payment_delete_storage_failure", extra={"payment_id": payment_id})
          raise StorageError("delete_payment") from exc

     logger.warning(
          "payment_deleted",
          extra={
               "payment_id": payment_id,
               "invoice_id": invoice.id,
               "amount": amount,
               "deleted_by": actor_id,
               "paid_amount": invoice.paid_amount,
               "balance_amount": invoice.balance_amount,
               "status": invoice.status.value,
          },
     )
     return invoice


def recompute_invoice(db: Session, invoice_id: int) -> Invoice:
     """Force paid/balance/status to be rebuilt from the payment rows."""
     try:
          invoice = _lock_invoice(db, invoice_id)
          if invoice is None:
               raise InvoiceNotFoundError(invoice_id)

          before = (to_money(invoice.paid_amount), invoice.status)
          _apply_paid_amount(invoice, _sum_payments(db, invoice.id))
          db.flush()
          db.refresh(invoice)
          db.commit()
     except InvoiceDeskError:
          db.rollback()
          raise
     except SQLAlchemyError as exc:
          db.rollback()
          logger.exception("recompute_storage_failure", extra={"invoice_id": invoice_id})
          raise StorageError("recompute_invoice") from exc

     logger.info(
          "invoice_recomputed",
          extra={
               "invoice_id": invoice.id,
               "paid_before": before[0],
               "paid_after": invoice.paid_amount,
               "status_before": before[1].value,
               "status_after": invoice.status.value,
          },
     )
     return invoice


def get_outstanding_balance(db: Session, invoice_id: int) -> Decimal:
     """Persisted balance_amount; reflects the latest committed payment."""
     balance = db.query(Invoice.balance_amount).filter(Invoice.id == invoice_id).scalar()
     if balance is None:
          raise InvoiceNotFoundError(invoice_id)
     return to_money(balance)


def get_balance_snapshot(
     db: Session,
     invoice_id: int,
     as_of: Optional[date] = None
) -> BalanceSnapshot:
     invoice = db.query(Invoice).filter(Invoice.id == invoice_id).populate_existing().one_or_none()
     if invoice is None:
          raise InvoiceNotFoundError(invoice_id)

     balance = to_money(invoice.balance_amount)
     return BalanceSnapshot(
          invoice_id=invoice.id,
          invoice_number=invoice.invoice_number,
          total_amount=to_money(invoice.total_amount),
          paid_amount=to_money(invoice.paid_amount),
          balance_amount=balance,
          status=effective_status(invoice.status, balance, invoice.due_date, as_of or date.today()),
          due_date=invoice.due_date,
     )


def _check_invoice(invoice: Invoice, payments_total: Decimal) -> InvoiceReconciliation:
     total = to_money(invoice.total_amount)
     paid = to_money(invoice.paid_amount)
     balance = to_money(invoice.balance_amount)
     expected_status = settle_status(invoice.status, total, payments_total)

     result = InvoiceReconciliation(
          invoice_id=invoice.id,
          invoice_number=invoice.invoice_number,
          total_amount=total,
          stored_paid_amount=paid,
          payments_total=payments_total,
          stored_balance_amount=balance,
          expected_balance_amount=total - payments_total,
          stored_status=invoice.status,
          expected_status=expected_status,
     )
     if paid != payments_total:
          result.issues.append(f"paid_amount {paid} != sum of payments {payments_total}")
     if balance != total - paid:
          result.issues.append(f"balance_amount {balance} != total {total} - paid {paid}")
     if balance < ZERO:
          result.issues.append(f"balance_amount {balance} is negative")
     if invoice.status != expected_status:
          result.issues.append(f"status {invoice.status.value} should be {expected_status.value}")
     return result


def reconcile_invoice(db: Session, invoice_id: int) -> InvoiceReconciliation:
     """Check one invoice against its payment rows without changing anything."""
     invoice = db.query(Invoice).filter(Invoice.id == invoice_id).one_or_none()
     if invoice is None:
          raise InvoiceNotFoundError(invoice_id)

     result = _check_invoice(invoice, _sum_payments(db, invoice.id))
     if not result.consistent:
          logger.error("ledger_drift_detected", extra={"invoice_id": invoice.id, "issues": result.issues})
     return result


def reconcile_all(db: Session) -> LedgerReconciliation:
     """Check every invoice; returns the ones whose stored state has drifted."""
     sums = (
          db.query(
               Payment.invoice_id.label("invoice_id"),
               func.sum(Payment.payment_amount).label("payments_total"),
          )
          .group_by(Payment.invoice_id)
          .subquery()
     )
     rows = (
          db.query(Invoice, sums.c.payments_total)
          .outerjoin(sums, sums.c.invoice_id == Invoice.id)
          .order_by(Invoice.id)
          .all()
     )

     discrepancies = []
     for invoice, payments_total in rows:
          result = _check_invoice(invoice, to_money(payments_total or 0))
          if not result.consistent:
               discrepancies.append(result)

     if discrepancies:
          logger.error(
               "ledger_drift_detected",
               extra={"invoice_ids": [d.invoice_id for d in discrepancies], "checked": len(rows)},
          )
     return LedgerReconciliation(checked=len(rows), discrepancies=discrepancies)
