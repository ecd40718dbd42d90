# routers/invoices.py
"""
Invoice API routes.

Provides invoice CRUD, status changes, and the ledger endpoints (record a
payment, balance, recompute, reconcile).
Role-based access:
- Any signed-in user: view invoices, payments and balances
- PAYMENT_ROLES: create, edit and send invoices; record payments
- ADMIN_ROLES: cancel, delete, recompute and reconcile
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import ActorContext, get_actor, require_admin, require_payment_recorder
from models.invoice import InvoiceStatus
from services import ledger_service, payment_service
from services.invoice_service import InvoiceService
from schemas.invoice import (
     InvoiceCreate,
     InvoiceUpdate,
     InvoiceResponse,
     InvoiceListResponse,
     InvoiceBalanceResponse,
     InvoiceStatusEnum,
     InvoiceReconciliationResponse,
     LedgerReconciliationResponse,
)
from schemas.payment import PaymentCreate, PaymentListResponse, RecordPaymentResponse
from routers.serializers import (
     build_invoice_response,
     build_ledger_reconciliation_response,
     build_payment_response,
     build_reconciliation_response,
)

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.post(
     "",
     response_model=InvoiceResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Create a new invoice"
)
def create_invoice(
     invoice_data: InvoiceCreate,
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(require_payment_recorder)
):
     """
     Create a new invoice for a client.

     - **client_id**: client being billed (or give **project_id** and its client is used)
     - **items**: at least one line item
     - **tax_rate**: percent, 0-100
     - **status**: draft (default) or sent
     """
     invoice = InvoiceService.create_invoice(db, invoice_data, actor_id=actor.user_id)
     db.commit()
     db.refresh(invoice)
     return build_invoice_response(invoice)


@router.get(
     "",
     response_model=InvoiceListResponse,
     summary="List invoices"
)
def list_invoices(
     client_id: Optional[int] = Query(None, description="Filter by client ID"),
     project_id: Optional[int] = Query(None, description="Filter by project ID"),
     status_filter: Optional[InvoiceStatusEnum] = Query(None, alias="status", description="Filter by effective status"),
     overdue_only: bool = Query(False, description="Only invoices past due with a balance"),
     page: int = Query(1, ge=1, description="Page number"),
     page_size: int = Query(50, ge=1, le=100, description="Items per page"),
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(get_actor)
):
     today = date.today()
     invoices, total = InvoiceService.list_invoices(
          db,
          client_id=client_id,
          project_id=project_id,
          status=InvoiceStatus(status_filter.value) if status_filter else None,
          overdue_only=overdue_only,
          page=page,
          page_size=page_size,
          as_of=today,
     )
     return InvoiceListResponse(
          invoices=[build_invoice_response(inv, today) for inv in invoices],
          total=total,
          page=page,
          page_size=page_size,
     )


@router.get(
     "/ledger/reconcile",
     response_model=LedgerReconciliationResponse,
     summary="Check every invoice against its payments"
)
def reconcile_ledger(
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(require_admin)
):
     """Read-only. Lists invoices whose stored amounts or status drifted from their payments."""
     return build_ledger_reconciliation_response(ledger_service.reconcile_all(db))


@router.get(
     "/{invoice_id}",
     response_model=InvoiceResponse,
     summary="Get invoice by ID"
)
def get_invoice(
     invoice_id: int,
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(get_actor)
):
     return build_invoice_response(InvoiceService.get_invoice(db, invoice_id))


@router.put(
     "/{invoice_id}",
     response_model=InvoiceResponse,
     summary="Update an invoice"
)
def update_invoice(
     invoice_id: int,
     invoice_data: InvoiceUpdate,
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(require_payment_recorder)
):
     """
     Edit an invoice. Only provided fields are changed.

     The total may not drop below the amount already paid; balance and
     status are re-derived from the payments.
     """
     invoice = InvoiceService.update_invoice(db, invoice_id, invoice_data)
     db.commit()
     db.refresh(invoice)
     return build_invoice_response(invoice)


@router.patch(
     "/{invoice_id}/send",
     response_model=InvoiceResponse,
     summary="Mark a draft invoice as sent"
)
def send_invoice(
     invoice_id: int,
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(require_payment_recorder)
):
     invoice = InvoiceService.send_invoice(db, invoice_id)
     db.commit()
     db.refresh(invoice)
     return build_invoice_response(invoice)


@router.patch(
     "/{invoice_id}/cancel",
     response_model=InvoiceResponse,
     summary="Cancel an invoice"
)
def cancel_invoice(
     invoice_id: int,
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(require_admin)
):
     invoice = InvoiceService.cancel_invoice(db, invoice_id, actor_id=actor.user_id)
     db.commit()
     db.refresh(invoice)
     return build_invoice_response(invoice)


@router.delete(
     "/{invoice_id}",
     status_code=status.HTTP_204_NO_CONTENT,
     summary="Delete invoice"
)
def delete_invoice(
     invoice_id: int,
     purge_payments: bool = Query(False, description="Also delete recorded payments"),
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(require_admin)
):
     """
     Delete an invoice by ID.

     Refused while payments are recorded unless **purge_payments** is set.
     """
     InvoiceService.delete_invoice(db, invoice_id, purge_payments=purge_payments, actor_id=actor.user_id)
     db.commit()
     return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------

@router.post(
     "/{invoice_id}/payments",
     response_model=RecordPaymentResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Record a payment against an invoice"
)
def record_payment(
     invoice_id: int,
     body: PaymentCreate,
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(require_payment_recorder)
):
     """
     Record money received. The payment row and the invoice's paid amount,
     balance and status are written in one transaction.

     - 400: invalid amount, method or date
     - 404: invoice not found
     - 409: invoice cancelled, already paid, or amount above the balance
     """
     result = ledger_service.record_payment(
          db,
          invoice_id,
          amount=body.amount,
          payment_date=body.payment_date,
          method=body.method,
          reference=body.reference,
          notes=body.notes,
          actor_id=actor.user_id,
     )
     return RecordPaymentResponse(
          payment_id=result.payment_id,
          invoice=build_invoice_response(result.invoice),
     )


@router.get(
     "/{invoice_id}/payments",
     response_model=PaymentListResponse,
     summary="List payments for an invoice"
)
def list_invoice_payments(
     invoice_id: int,
     page: int = Query(1, ge=1),
     page_size: int = Query(50, ge=1, le=100),
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(get_actor)
):
     InvoiceService.get_invoice(db, invoice_id)
     payments, total = payment_service.list_payments(
          db, invoice_id=invoice_id, page=page, page_size=page_size
     )
     return PaymentListResponse(
          payments=[build_payment_response(p) for p in payments],
          total=total,
          page=page,
          page_size=page_size,
     )


@router.get(
     "/{invoice_id}/balance",
     response_model=InvoiceBalanceResponse,
     summary="Outstanding balance"
)
def get_invoice_balance(
     invoice_id: int,
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(get_actor)
):
     snapshot = ledger_service.get_balance_snapshot(db, invoice_id)
     return InvoiceBalanceResponse(
          invoice_id=snapshot.invoice_id,
          invoice_number=snapshot.invoice_number,
          total_amount=snapshot.total_amount,
          paid_amount=snapshot.paid_amount,
          balance_amount=snapshot.balance_amount,
          status=snapshot.status.value,
          due_date=snapshot.due_date,
     )


@router.post(
     "/{invoice_id}/recompute",
     response_model=InvoiceResponse,
     summary="Rebuild paid amount, balance and status from payments"
)
def recompute_invoice(
     invoice_id: int,
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(require_admin)
):
     invoice = ledger_service.recompute_invoice(db, invoice_id)
     return build_invoice_response(invoice)


@router.get(
     "/{invoice_id}/reconcile",
     response_model=InvoiceReconciliationResponse,
     summary="Check one invoice against its payments"
)
def reconcile_invoice(
     invoice_id: int,
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(require_admin)
):
     return build_reconciliation_response(ledger_service.reconcile_invoice(db, invoice_id))
