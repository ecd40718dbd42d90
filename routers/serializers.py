# routers/serializers.py
"""
ORM -> response schema builders shared by the routers.

Invoice responses always carry the effective status, computed for today.
"""
from datetime import date
from typing import Optional

from models import Invoice, Payment
from schemas.invoice import (
     InvoiceItemResponse,
     InvoiceReconciliationResponse,
     InvoiceResponse,
     LedgerReconciliationResponse,
)
from schemas.payment import PaymentResponse
from services.ledger_service import InvoiceReconciliation, LedgerReconciliation
from services.status import effective_status


def build_invoice_response(invoice: Invoice, as_of: Optional[date] = None) -> InvoiceResponse:
     """Build InvoiceResponse with effective status and client/project names."""
     as_of = as_of or date.today()
     shown = effective_status(invoice.status, invoice.balance_amount, invoice.due_date, as_of)
     return InvoiceResponse(
          id=invoice.id,
          invoice_number=invoice.invoice_number,
          client_id=invoice.client_id,
          project_id=invoice.project_id,
          invoice_date=invoice.invoice_date,
          due_date=invoice.due_date,
          subtotal=invoice.subtotal,
          tax_rate=invoice.tax_rate,
          tax_amount=invoice.tax_amount,
          total_amount=invoice.total_amount,
          paid_amount=invoice.paid_amount,
          balance_amount=invoice.balance_amount,
          status=shown.value,
          is_overdue=shown.value == "overdue",
          notes=invoice.notes,
          created_at=invoice.created_at,
          updated_at=invoice.updated_at,
          items=[InvoiceItemResponse.model_validate(item) for item in invoice.items],
          client_name=invoice.client.company_name if invoice.client else None,
          project_name=invoice.project.project_name if invoice.project else None,
     )


def build_payment_response(payment: Payment) -> PaymentResponse:
     invoice = payment.invoice
     return PaymentResponse(
          id=payment.id,
          invoice_id=payment.invoice_id,
          payment_amount=payment.payment_amount,
          payment_date=payment.payment_date,
          payment_method=payment.payment_method.value,
          payment_reference=payment.payment_reference,
          notes=payment.notes,
          created_by=payment.created_by,
          created_at=payment.created_at,
          invoice_number=invoice.invoice_number if invoice else None,
          client_name=invoice.client.company_name if invoice and invoice.client else None,
     )


def build_reconciliation_response(result: InvoiceReconciliation) -> InvoiceReconciliationResponse:
     return InvoiceReconciliationResponse(
          invoice_id=result.invoice_id,
          invoice_number=result.invoice_number,
          consistent=result.consistent,
          total_amount=result.total_amount,
          stored_paid_amount=result.stored_paid_amount,
          payments_total=result.payments_total,
          stored_balance_amount=result.stored_balance_amount,
          expected_balance_amount=result.expected_balance_amount,
          stored_status=result.stored_status.value,
          expected_status=result.expected_status.value,
          issues=list(result.issues),
     )


def build_ledger_reconciliation_response(result: LedgerReconciliation) -> LedgerReconciliationResponse:
     return LedgerReconciliationResponse(
          consistent=result.consistent,
          checked=result.checked,
          discrepancies=[build_reconciliation_response(d) for d in result.discrepancies],
     )
