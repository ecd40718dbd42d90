# services/status.py
"""
Invoice status derivation.

    draft -> sent -> {partially_paid, paid, overdue, cancelled}

Two views of the status exist:

- settled status: what the ledger persists after every write. It depends
  only on amounts (and on draft/sent/cancelled, which are set explicitly).
- effective status: what readers see. It adds OVERDUE, computed from
  due_date at read time, so no job has to sweep invoices at midnight.

PAID wins over OVERDUE whenever the balance is zero.
"""
from datetime import date
from decimal import Decimal

from models.invoice import InvoiceStatus

# Statuses that can be displayed as overdue once due_date has passed
_OVERDUE_ELIGIBLE = {InvoiceStatus.SENT, InvoiceStatus.PARTIALLY_PAID}

# Manual transitions allowed outside the payment flow
_MANUAL_TRANSITIONS = {
     InvoiceStatus.DRAFT: {InvoiceStatus.SENT, InvoiceStatus.CANCELLED},
     InvoiceStatus.SENT: {InvoiceStatus.CANCELLED},
     InvoiceStatus.PARTIALLY_PAID: {InvoiceStatus.CANCELLED},
     InvoiceStatus.OVERDUE: {InvoiceStatus.CANCELLED},
     InvoiceStatus.PAID: set(),
     InvoiceStatus.CANCELLED: set(),
}


def settle_status(
     current: InvoiceStatus,
     total_amount: Decimal,
     paid_amount: Decimal
) -> InvoiceStatus:
     """
     Status to persist after the invoice's amounts changed.

     - cancelled stays cancelled
     - any payment covering the total -> paid
     - some payment -> partially_paid
     - no payment -> the finalization state (draft or sent); a stored
       overdue/partially_paid/paid with nothing paid falls back to sent
     """
     if current == InvoiceStatus.CANCELLED:
          return InvoiceStatus.CANCELLED

     if paid_amount > 0:
          if paid_amount >= total_amount:
               return InvoiceStatus.PAID
          return InvoiceStatus.PARTIALLY_PAID

     if current == InvoiceStatus.DRAFT:
          return InvoiceStatus.DRAFT
     return InvoiceStatus.SENT


def effective_status(
     stored: InvoiceStatus,
     balance_amount: Decimal,
     due_date: date,
     as_of: date
) -> InvoiceStatus:
     """Display status as of ``as_of``; overdue is never read from storage."""
     if stored == InvoiceStatus.OVERDUE:
          # legacy cached value; recompute from the amounts instead
          stored = InvoiceStatus.SENT

     if stored == InvoiceStatus.PAID:
          return InvoiceStatus.PAID

     if stored in _OVERDUE_ELIGIBLE and balance_amount > 0 and due_date < as_of:
          return InvoiceStatus.OVERDUE

     return stored


def is_overdue(stored: InvoiceStatus, balance_amount: Decimal, due_date: date, as_of: date) -> bool:
     return effective_status(stored, balance_amount, due_date, as_of) == InvoiceStatus.OVERDUE


def can_transition(current: InvoiceStatus, requested: InvoiceStatus) -> bool:
     """Whether an explicit (non-payment) status change is allowed."""
     return requested in _MANUAL_TRANSITIONS.get(current, set())
