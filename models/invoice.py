# models/invoice.py
import enum
from sqlalchemy import (
     Column, Integer, String, Text, Numeric, Date, DateTime, ForeignKey, CheckConstraint, func,
)
from sqlalchemy.orm import relationship
from .base import Base, value_enum


class InvoiceStatus(str, enum.Enum):
     """
     Invoice lifecycle status.

     OVERDUE is a display status computed on read from due_date; the ledger
     never persists it.
     """
     DRAFT = "draft"
     SENT = "sent"
     PARTIALLY_PAID = "partially_paid"
     PAID = "paid"
     OVERDUE = "overdue"
     CANCELLED = "cancelled"


class Invoice(Base):
     """
     Invoice model - a billable document for a client.

     total_amount is fixed at creation/edit time. paid_amount, balance_amount
     and status are owned by the ledger service and are only written inside
     its payment transactions.
     """
     __tablename__ = "invoices"
     __table_args__ = (
          CheckConstraint("total_amount >= 0", name="ck_invoices_total_non_negative"),
          CheckConstraint("paid_amount >= 0", name="ck_invoices_paid_non_negative"),
          CheckConstraint("balance_amount >= 0", name="ck_invoices_balance_non_negative"),
          CheckConstraint("paid_amount <= total_amount", name="ck_invoices_paid_within_total"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     invoice_number = Column(String(50), unique=True, nullable=False, index=True)

     # Foreign keys
     client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
     project_id = Column(Integer, ForeignKey("projects.id"), nullable=True, index=True)
     created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

     # Dates
     invoice_date = Column(Date, nullable=False)
     due_date = Column(Date, nullable=False, index=True)

     # Amounts
     subtotal = Column(Numeric(12, 2), nullable=False, default=0)
     tax_rate = Column(Numeric(5, 2), nullable=False, default=0)
     tax_amount = Column(Numeric(12, 2), nullable=False, default=0)
     total_amount = Column(Numeric(12, 2), nullable=False)
     paid_amount = Column(Numeric(12, 2), nullable=False, default=0)
     balance_amount = Column(Numeric(12, 2), nullable=False)

     status = Column(
          value_enum(InvoiceStatus, "invoice_status"),
          default=InvoiceStatus.DRAFT,
          nullable=False,
          index=True
     )
     notes = Column(Text, nullable=True)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     # Relationships
     client = relationship("Client", back_populates="invoices")
     project = relationship("Project", back_populates="invoices")
     items = relationship(
          "InvoiceItem",
          back_populates="invoice",
          cascade="all, delete-orphan",
          order_by="InvoiceItem.id",
     )
     payments = relationship(
          "Payment",
          back_populates="invoice",
          cascade="all, delete-orphan",
          order_by="Payment.id",
     )

     def __repr__(self):
          return (
               f"<Invoice(id={self.id}, number='{self.invoice_number}', total={self.total_amount}, "
               f"paid={self.paid_amount}, balance={self.balance_amount}, status='{self.status.value}')>"
          )


class InvoiceItem(Base):
     """Line item; line_total = quantity * unit_price, in cents."""
     __tablename__ = "invoice_items"

     id = Column(Integer, primary_key=True, autoincrement=True)
     invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
     description = Column(String(500), nullable=False)
     quantity = Column(Numeric(10, 2), nullable=False)
     unit_price = Column(Numeric(12, 2), nullable=False)
     line_total = Column(Numeric(12, 2), nullable=False)

     invoice = relationship("Invoice", back_populates="items")

     def __repr__(self):
          return f"<InvoiceItem(id={self.id}, invoice_id={self.invoice_id}, total={self.line_total})>"
