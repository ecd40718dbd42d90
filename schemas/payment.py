# schemas/payment.py
"""
Pydantic schemas for the payment recording API.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from .invoice import InvoiceResponse


class PaymentCreate(BaseModel):
     """
     Request body for POST /invoices/{id}/payments.

     Only the shape is checked here; amount range, method and date rules are
     enforced by the ledger so they come back with their own error codes.
     """
     amount: Decimal = Field(..., description="Amount received, at most two decimal places")
     payment_date: date = Field(..., alias="date", description="Date the money was received")
     method: str = Field(..., description="cash, bank_transfer, check, card, online or other")
     reference: Optional[str] = Field(None, max_length=255, description="Cheque number, transfer id, ...")
     notes: Optional[str] = None

     model_config = ConfigDict(
          populate_by_name=True,
          json_schema_extra={
               "example": {
                    "amount": "400.00",
                    "date": "2026-02-10",
                    "method": "bank_transfer",
                    "reference": "TRX-20260210-001",
               }
          }
     )


class PaymentResponse(BaseModel):
     id: int
     invoice_id: int
     payment_amount: Decimal
     payment_date: date
     payment_method: str
     payment_reference: Optional[str] = None
     notes: Optional[str] = None
     created_by: Optional[int] = None
     created_at: Optional[datetime] = None

     # Optional related data
     invoice_number: Optional[str] = None
     client_name: Optional[str] = None


class RecordPaymentResponse(BaseModel):
     """Response for POST /invoices/{id}/payments: the recomputed invoice and new payment id."""
     payment_id: int
     invoice: InvoiceResponse

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "payment_id": 17,
                    "invoice": {
                         "id": 1,
                         "invoice_number": "INV-2026-0001",
                         "total_amount": "1000.00",
                         "paid_amount": "400.00",
                         "balance_amount": "600.00",
                         "status": "partially_paid",
                    },
               }
          }
     )


class PaymentListResponse(BaseModel):
     payments: List[PaymentResponse]
     total: int
     page: int = 1
     page_size: int = 20
