# services/payment_service.py
"""
Read-only payment queries. All payment writes go through ledger_service.
"""
from datetime import date
from typing import Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from exceptions import InvalidMethodError, PaymentNotFoundError
from models import Client, Invoice, Payment
from models.payment import PaymentMethod


def get_payment(db: Session, payment_id: int) -> Payment:
     payment = (
          db.query(Payment)
          .options(joinedload(Payment.invoice).joinedload(Invoice.client))
          .filter(Payment.id == payment_id)
          .first()
     )
     if not payment:
          raise PaymentNotFoundError(payment_id)
     return payment


def list_payments(
     db: Session,
     invoice_id: Optional[int] = None,
     client_id: Optional[int] = None,
     method: Optional[str] = None,
     date_from: Optional[date] = None,
     date_to: Optional[date] = None,
     search: Optional[str] = None,
     page: int = 1,
     page_size: int = 20
) -> Tuple[list, int]:
     """
     Payments, most recent first (payment_date desc, id desc).

     ``search`` matches the payment reference, invoice number or client name.

     Returns:
          (payments on the requested page, total matching count)
     """
     query = (
          db.query(Payment)
          .join(Invoice, Payment.invoice_id == Invoice.id)
          .join(Client, Invoice.client_id == Client.id)
          .options(joinedload(Payment.invoice).joinedload(Invoice.client))
     )

     if invoice_id:
          query = query.filter(Payment.invoice_id == invoice_id)
     if client_id:
          query = query.filter(Invoice.client_id == client_id)
     if method:
          try:
               query = query.filter(Payment.payment_method == PaymentMethod(method))
          except ValueError:
               raise InvalidMethodError(method, [m.value for m in PaymentMethod]) from None
     if date_from:
          query = query.filter(Payment.payment_date >= date_from)
     if date_to:
          query = query.filter(Payment.payment_date <= date_to)
     if search:
          pattern = f"%{search.strip()}%"
          query = query.filter(or_(
               Payment.payment_reference.ilike(pattern),
               Invoice.invoice_number.ilike(pattern),
               Client.company_name.ilike(pattern),
          ))

     total = query.count()
     payments = (
          query.order_by(Payment.payment_date.desc(), Payment.id.desc())
          .offset((page - 1) * page_size)
          .limit(page_size)
          .all()
     )
     return payments, total
