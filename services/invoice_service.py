# services/invoice_service.py
"""
Invoice Service - Business logic layer for invoice operations.

This service handles invoice creation, edits, status changes and the
client-level summaries, separate from the API layer. Methods flush but do
not commit; the router owns the transaction.

Amounts that depend on payments (paid_amount, balance_amount, status after
a payment) are never written here directly: total changes go through
ledger_service.reprice_invoice under the invoice row lock.
"""
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Tuple

from sqlalchemy import and_, func, not_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from exceptions import (
     ClientNotFoundError,
     InactiveClientError,
     InvalidInvoiceDatesError,
     InvalidInvoiceItemsError,
     InvalidStatusTransitionError,
     InvalidTaxRateError,
     InvoiceCancelledError,
     InvoiceHasPaymentsError,
     InvoiceNotFoundError,
     InvoiceNumberTakenError,
     ProjectClientMismatchError,
     ValidationError,
)
from logging_config import get_logger
from models import Client, Invoice, InvoiceItem, Payment
from models.invoice import InvoiceStatus
from schemas.invoice import InvoiceCreate, InvoiceUpdate
from services import ledger_service
from services.client_service import ClientService
from services.status import can_transition, effective_status
from utils.money import ZERO, to_money

logger = get_logger("invoices")

DEFAULT_PAYMENT_TERMS_DAYS = 30
_HUNDRED = Decimal("100")


def _overdue_clause(as_of: date):
     """SQL form of services.status.is_overdue."""
     return and_(
          Invoice.status.in_([InvoiceStatus.SENT, InvoiceStatus.PARTIALLY_PAID, InvoiceStatus.OVERDUE]),
          Invoice.balance_amount > 0,
          Invoice.due_date < as_of,
     )


def _status_clause(status: InvoiceStatus, as_of: date):
     """SQL filter matching invoices whose effective status is ``status``."""
     overdue = _overdue_clause(as_of)
     if status == InvoiceStatus.OVERDUE:
          return overdue
     if status == InvoiceStatus.SENT:
          return and_(Invoice.status.in_([InvoiceStatus.SENT, InvoiceStatus.OVERDUE]), not_(overdue))
     if status == InvoiceStatus.PARTIALLY_PAID:
          return and_(Invoice.status == InvoiceStatus.PARTIALLY_PAID, not_(overdue))
     return Invoice.status == status


class InvoiceService:
     """Service class for invoice-related business logic."""

     @staticmethod
     def compute_totals(items: Iterable, tax_rate: Decimal) -> Tuple[list, Decimal, Decimal, Decimal]:
          """
          Build line items and the invoice amounts.

          Returns:
               (line items, subtotal, tax_amount, total_amount), all in cents
          """
          lines = []
          subtotal = ZERO
          for item in items:
               description = (item.description or "").strip()
               if not description:
                    raise InvalidInvoiceItemsError("Every invoice item needs a description")
               quantity = Decimal(item.quantity)
               unit_price = to_money(item.unit_price)
               if quantity <= 0 or unit_price < 0:
                    raise InvalidInvoiceItemsError("Item quantity must be positive and unit price non-negative")
               line_total = to_money(quantity * unit_price)
               lines.append(InvoiceItem(
                    description=description,
                    quantity=quantity,
                    unit_price=unit_price,
                    line_total=line_total,
               ))
               subtotal += line_total

          if not lines:
               raise InvalidInvoiceItemsError()

          tax_amount = to_money(subtotal * tax_rate / _HUNDRED)
          return lines, subtotal, tax_amount, subtotal + tax_amount

     @staticmethod
     def _check_tax_rate(tax_rate) -> Decimal:
          rate = to_money(tax_rate if tax_rate is not None else 0)
          if rate < 0 or rate > _HUNDRED:
               raise InvalidTaxRateError(tax_rate)
          return rate

     @staticmethod
     def next_invoice_number(db: Session, year: int) -> str:
          """Next INV-<YYYY>-<NNNN> number within ``year``."""
          prefix = f"INV-{year}-"
          numbers = (
               db.query(Invoice.invoice_number)
               .filter(Invoice.invoice_number.like(f"{prefix}%"))
               .all()
          )
          last = 0
          for (number,) in numbers:
               suffix = number[len(prefix):]
               if suffix.isdigit():
                    last = max(last, int(suffix))
          return f"{prefix}{last + 1:04d}"

     @staticmethod
     def get_invoice(db: Session, invoice_id: int) -> Invoice:
          invoice = db.query(Invoice).filter(Invoice.id == invoice_id).first()
          if not invoice:
               raise InvoiceNotFoundError(invoice_id)
          return invoice

     @staticmethod
     def create_invoice(
          db: Session,
          data: InvoiceCreate,
          actor_id: Optional[int] = None,
          today: Optional[date] = None
     ) -> Invoice:
          """
          Create an invoice with its line items.

          The client must exist and be active. When a project is given it must
          belong to that client; if only the project is given, its client is used.

          Raises:
               ClientNotFoundError, ProjectNotFoundError, InactiveClientError,
               ProjectClientMismatchError, InvalidInvoiceItemsError,
               InvalidTaxRateError, InvalidInvoiceDatesError, InvoiceNumberTakenError
          """
          today = today or date.today()

          project = None
          if data.project_id is not None:
               project = ClientService.get_project(db, data.project_id)

          client_id = data.client_id
          if client_id is None:
               if project is None:
                    raise ValidationError("Please select a client", field="client_id")
               client_id = project.client_id

          client = ClientService.get_client(db, client_id)
          if not client.is_active:
               raise InactiveClientError(client_id)
          if project is not None and project.client_id != client.id:
               raise ProjectClientMismatchError(project.id, client.id)

          tax_rate = InvoiceService._check_tax_rate(data.tax_rate)
          lines, subtotal, tax_amount, total = InvoiceService.compute_totals(data.items, tax_rate)

          invoice_date = data.invoice_date or today
          due_date = data.due_date or invoice_date + timedelta(days=DEFAULT_PAYMENT_TERMS_DAYS)
          if due_date < invoice_date:
               raise InvalidInvoiceDatesError(invoice_date, due_date)

          invoice = Invoice(
               invoice_number=InvoiceService.next_invoice_number(db, invoice_date.year),
               client_id=client.id,
               project_id=project.id if project else None,
               created_by=actor_id,
               invoice_date=invoice_date,
               due_date=due_date,
               subtotal=subtotal,
               tax_rate=tax_rate,
               tax_amount=tax_amount,
               total_amount=total,
               paid_amount=ZERO,
               balance_amount=total,
               status=InvoiceStatus(data.status.value),
               notes=(data.notes or "").strip() or None,
               items=lines,
          )
          db.add(invoice)
          try:
               db.flush()  # Flush to get the ID and claim the number
          except IntegrityError as exc:
               db.rollback()
               raise InvoiceNumberTakenError(invoice.invoice_number) from exc

          logger.info(
               "invoice_created",
               extra={
                    "invoice_id": invoice.id,
                    "invoice_number": invoice.invoice_number,
                    "client_id": client.id,
                    "total_amount": total,
                    "status": invoice.status.value,
               },
          )
          return invoice

     @staticmethod
     def update_invoice(db: Session, invoice_id: int, data: InvoiceUpdate) -> Invoice:
          """
          Edit dates, items, tax rate, notes or draft -> sent.

          A changed total is applied through the ledger so balance and status
          are re-derived, and it may never fall below what was already paid.
          """
          invoice = ledger_service.lock_invoice(db, invoice_id)
          if invoice.status == InvoiceStatus.CANCELLED:
               raise InvoiceCancelledError(invoice.id)

          invoice_date = data.invoice_date or invoice.invoice_date
          due_date = data.due_date or invoice.due_date
          if due_date < invoice_date:
               raise InvalidInvoiceDatesError(invoice_date, due_date)
          invoice.invoice_date = invoice_date
          invoice.due_date = due_date

          if data.notes is not None:
               invoice.notes = data.notes.strip() or None

          if data.items is not None or data.tax_rate is not None:
               tax_rate = InvoiceService._check_tax_rate(
                    data.tax_rate if data.tax_rate is not None else invoice.tax_rate
               )
               if data.items is not None:
                    lines, subtotal, tax_amount, total = InvoiceService.compute_totals(data.items, tax_rate)
               else:
                    lines = None
                    subtotal = to_money(invoice.subtotal)
                    tax_amount = to_money(subtotal * tax_rate / _HUNDRED)
                    total = subtotal + tax_amount

               ledger_service.reprice_invoice(invoice, subtotal, tax_rate, tax_amount, total)
               if lines is not None:
                    invoice.items = lines

          if data.status is not None:
               requested = InvoiceStatus(data.status.value)
               if requested != invoice.status:
                    if not can_transition(invoice.status, requested):
                         raise InvalidStatusTransitionError(invoice.id, invoice.status.value, requested.value)
                    invoice.status = requested

          db.flush()
          db.refresh(invoice)
          return invoice

     @staticmethod
     def send_invoice(db: Session, invoice_id: int) -> Invoice:
          """Mark a draft invoice as sent."""
          invoice = ledger_service.lock_invoice(db, invoice_id)
          if invoice.status != InvoiceStatus.DRAFT:
               raise InvalidStatusTransitionError(invoice.id, invoice.status.value, InvoiceStatus.SENT.value)
          invoice.status = InvoiceStatus.SENT
          db.flush()
          return invoice

     @staticmethod
     def cancel_invoice(db: Session, invoice_id: int, actor_id: Optional[int] = None) -> Invoice:
          """
          Cancel an invoice. Paid invoices cannot be cancelled; cancelling a
          cancelled invoice is a no-op. Recorded payments are kept.
          """
          invoice = ledger_service.lock_invoice(db, invoice_id)
          if invoice.status == InvoiceStatus.CANCELLED:
               return invoice
          if not can_transition(invoice.status, InvoiceStatus.CANCELLED):
               raise InvalidStatusTransitionError(
                    invoice.id, invoice.status.value, InvoiceStatus.CANCELLED.value
               )

          previous = invoice.status
          invoice.status = InvoiceStatus.CANCELLED
          db.flush()

          logger.warning(
               "invoice_cancelled",
               extra={
                    "invoice_id": invoice.id,
                    "previous_status": previous.value,
                    "paid_amount": invoice.paid_amount,
                    "cancelled_by": actor_id,
               },
          )
          return invoice

     @staticmethod
     def delete_invoice(
          db: Session,
          invoice_id: int,
          purge_payments: bool = False,
          actor_id: Optional[int] = None
     ) -> None:
          """
          Delete an invoice and its items.

          Refused while payments exist unless ``purge_payments`` is set, in
          which case the payments are removed with it.
          """
          invoice = ledger_service.lock_invoice(db, invoice_id)
          payment_count = (
               db.query(func.count(Payment.id))
               .filter(Payment.invoice_id == invoice.id)
               .scalar()
          )
          if payment_count and not purge_payments:
               raise InvoiceHasPaymentsError(invoice.id, payment_count)

          db.delete(invoice)
          db.flush()

          logger.warning(
               "invoice_deleted",
               extra={
                    "invoice_id": invoice_id,
                    "invoice_number": invoice.invoice_number,
                    "purged_payments": payment_count,
                    "deleted_by": actor_id,
               },
          )

     @staticmethod
     def list_invoices(
          db: Session,
          client_id: Optional[int] = None,
          project_id: Optional[int] = None,
          status: Optional[InvoiceStatus] = None,
          overdue_only: bool = False,
          page: int = 1,
          page_size: int = 50,
          as_of: Optional[date] = None
     ) -> Tuple[list, int]:
          """
          List invoices, newest first. ``status`` filters on the effective status.

          Returns:
               (invoices on the requested page, total matching count)
          """
          as_of = as_of or date.today()
          query = db.query(Invoice)

          if client_id:
               query = query.filter(Invoice.client_id == client_id)
          if project_id:
               query = query.filter(Invoice.project_id == project_id)
          if status is not None:
               query = query.filter(_status_clause(status, as_of))
          if overdue_only:
               query = query.filter(_overdue_clause(as_of))

          total = query.count()
          invoices = (
               query.order_by(Invoice.invoice_date.desc(), Invoice.id.desc())
               .offset((page - 1) * page_size)
               .limit(page_size)
               .all()
          )
          return invoices, total

     @staticmethod
     def client_account_summary(db: Session, client_id: int, as_of: Optional[date] = None) -> dict:
          """
          Totals across a client's invoices. Cancelled invoices are counted
          by status but left out of the invoiced/outstanding amounts.
          """
          as_of = as_of or date.today()
          client = db.query(Client).filter(Client.id == client_id).first()
          if not client:
               raise ClientNotFoundError(client_id)

          invoices = db.query(Invoice).filter(Invoice.client_id == client_id).all()

          status_counts = {s.value: 0 for s in InvoiceStatus}
          total_invoiced = ZERO
          total_paid = ZERO
          outstanding = ZERO
          for invoice in invoices:
               balance = to_money(invoice.balance_amount)
               shown = effective_status(invoice.status, balance, invoice.due_date, as_of)
               status_counts[shown.value] += 1
               total_paid += to_money(invoice.paid_amount)
               if invoice.status == InvoiceStatus.CANCELLED:
                    continue
               total_invoiced += to_money(invoice.total_amount)
               outstanding += balance

          return {
               "client_id": client.id,
               "company_name": client.company_name,
               "is_active": client.is_active,
               "invoice_count": len(invoices),
               "total_invoiced": total_invoiced,
               "total_paid": total_paid,
               "outstanding": outstanding,
               "status_counts": status_counts,
          }
