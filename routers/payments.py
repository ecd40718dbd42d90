# routers/payments.py
"""
Payment API routes.

Payments are created through POST /api/invoices/{id}/payments. This router
lists them and lets an administrator delete a mistaken one, which
recomputes the invoice in the same transaction.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_session
from dependencies import ActorContext, get_actor, require_admin
from services import ledger_service, payment_service
from schemas.invoice import InvoiceResponse
from schemas.payment import PaymentListResponse, PaymentResponse
from routers.serializers import build_invoice_response, build_payment_response

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.get(
     "",
     response_model=PaymentListResponse,
     summary="List payments"
)
def list_payments(
     invoice_id: Optional[int] = Query(None, description="Filter by invoice ID"),
     client_id: Optional[int] = Query(None, description="Filter by client ID"),
     method: Optional[str] = Query(None, description="Filter by payment method"),
     date_from: Optional[date] = Query(None),
     date_to: Optional[date] = Query(None),
     search: Optional[str] = Query(None, description="Reference, invoice number or client name"),
     page: int = Query(1, ge=1, description="Page number"),
     page_size: int = Query(20, ge=1, le=100, description="Items per page"),
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(get_actor)
):
     payments, total = payment_service.list_payments(
          db,
          invoice_id=invoice_id,
          client_id=client_id,
          method=method,
          date_from=date_from,
          date_to=date_to,
          search=search,
          page=page,
          page_size=page_size,
     )
     return PaymentListResponse(
          payments=[build_payment_response(p) for p in payments],
          total=total,
          page=page,
          page_size=page_size,
     )


@router.get(
     "/{payment_id}",
     response_model=PaymentResponse,
     summary="Get payment by ID"
)
def get_payment(
     payment_id: int,
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(get_actor)
):
     return build_payment_response(payment_service.get_payment(db, payment_id))


@router.delete(
     "/{payment_id}",
     response_model=InvoiceResponse,
     summary="Delete a payment (administrative correction)"
)
def delete_payment(
     payment_id: int,
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(require_admin)
):
     """Returns the invoice with paid amount, balance and status recomputed."""
     invoice = ledger_service.delete_payment(db, payment_id, actor_id=actor.user_id)
     return build_invoice_response(invoice)
