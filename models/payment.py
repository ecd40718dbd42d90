# models/payment.py
"""
Payment model - money received against exactly one invoice.

Rows are append-only: the application never updates a payment. A mistaken
payment is corrected by an administrative delete followed by recomputation
of the invoice's derived amounts from the remaining rows.
"""
import enum

from sqlalchemy import (
     Column, Integer, String, Text, Numeric, Date, DateTime, ForeignKey, CheckConstraint, func,
)
from sqlalchemy.orm import relationship
from .base import Base, value_enum


class PaymentMethod(str, enum.Enum):
     CASH = "cash"
     BANK_TRANSFER = "bank_transfer"
     CHECK = "check"
     CARD = "card"
     ONLINE = "online"
     OTHER = "other"


class Payment(Base):
     __tablename__ = "payments"
     __table_args__ = (
          CheckConstraint("payment_amount > 0", name="ck_payments_amount_positive"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     invoice_id = Column(
          Integer,
          ForeignKey("invoices.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     payment_amount = Column(Numeric(12, 2), nullable=False)
     payment_date = Column(Date, nullable=False, index=True)
     payment_method = Column(value_enum(PaymentMethod, "payment_method"), nullable=False)
     payment_reference = Column(String(255), nullable=True)
     notes = Column(Text, nullable=True)
     created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     invoice = relationship("Invoice", back_populates="payments")

     def __repr__(self):
          return (
               f"<Payment(id={self.id}, invoice_id={self.invoice_id}, amount={self.payment_amount}, "
               f"method='{self.payment_method.value}')>"
          )
