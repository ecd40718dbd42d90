# schemas/invoice.py
"""
Pydantic schemas for Invoice API request/response validation.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict
from enum import Enum


class InvoiceStatusEnum(str, Enum):
     """Invoice lifecycle status as shown to API clients."""
     DRAFT = "draft"
     SENT = "sent"
     PARTIALLY_PAID = "partially_paid"
     PAID = "paid"
     OVERDUE = "overdue"
     CANCELLED = "cancelled"


class InitialStatusEnum(str, Enum):
     """Statuses an invoice may be created or edited into."""
     DRAFT = "draft"
     SENT = "sent"


class InvoiceItemIn(BaseModel):
     description: str = Field(..., min_length=1, max_length=500)
     quantity: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
     unit_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)


class InvoiceItemResponse(BaseModel):
     id: int
     description: str
     quantity: Decimal
     unit_price: Decimal
     line_total: Decimal

     model_config = ConfigDict(from_attributes=True)


class InvoiceCreate(BaseModel):
     """Schema for creating a new invoice."""
     client_id: Optional[int] = Field(None, gt=0, description="Client being billed (required unless project_id is given)")
     project_id: Optional[int] = Field(None, gt=0, description="Optional project; its client is used")
     invoice_date: Optional[date] = Field(None, description="Defaults to today")
     due_date: Optional[date] = Field(None, description="Defaults to 30 days after invoice_date")
     tax_rate: Decimal = Field(default=Decimal("0"), description="Percent, 0-100")
     notes: Optional[str] = None
     status: InitialStatusEnum = Field(default=InitialStatusEnum.DRAFT)
     items: List[InvoiceItemIn] = Field(default_factory=list)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "client_id": 1,
                    "invoice_date": "2026-01-31",
                    "due_date": "2026-02-28",
                    "tax_rate": "0.00",
                    "status": "sent",
                    "items": [
                         {"description": "Website redesign", "quantity": "1", "unit_price": "1000.00"}
                    ]
               }
          }
     )


class InvoiceUpdate(BaseModel):
     """Schema for editing an invoice. Only provided fields are changed."""
     invoice_date: Optional[date] = None
     due_date: Optional[date] = None
     tax_rate: Optional[Decimal] = None
     notes: Optional[str] = None
     status: Optional[InitialStatusEnum] = None
     items: Optional[List[InvoiceItemIn]] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "due_date": "2026-03-15",
                    "status": "sent"
               }
          }
     )


class InvoiceResponse(BaseModel):
     """Schema for invoice response. ``status`` is the effective (read-time) status."""
     id: int
     invoice_number: str
     client_id: int
     project_id: Optional[int] = None
     invoice_date: date
     due_date: date
     subtotal: Decimal
     tax_rate: Decimal
     tax_amount: Decimal
     total_amount: Decimal
     paid_amount: Decimal
     balance_amount: Decimal
     status: InvoiceStatusEnum
     is_overdue: bool = False
     notes: Optional[str] = None
     created_at: Optional[datetime] = None
     updated_at: Optional[datetime] = None
     items: List[InvoiceItemResponse] = Field(default_factory=list)

     # Optional related data
     client_name: Optional[str] = None
     project_name: Optional[str] = None

     model_config = ConfigDict(
          from_attributes=True,
          json_schema_extra={
               "example": {
                    "id": 1,
                    "invoice_number": "INV-2026-0001",
                    "client_id": 1,
                    "invoice_date": "2026-01-31",
                    "due_date": "2026-02-28",
                    "total_amount": "1000.00",
                    "paid_amount": "400.00",
                    "balance_amount": "600.00",
                    "status": "partially_paid",
                    "client_name": "Acme Trading"
               }
          }
     )


class InvoiceListResponse(BaseModel):
     """Schema for paginated invoice list response."""
     invoices: List[InvoiceResponse]
     total: int
     page: int = 1
     page_size: int = 50


class InvoiceBalanceResponse(BaseModel):
     """Response for GET /invoices/{id}/balance."""
     invoice_id: int
     invoice_number: str
     total_amount: Decimal
     paid_amount: Decimal
     balance_amount: Decimal
     status: InvoiceStatusEnum
     due_date: date

     model_config = ConfigDict(from_attributes=True)


class InvoiceReconciliationResponse(BaseModel):
     invoice_id: int
     invoice_number: str
     consistent: bool
     total_amount: Decimal
     stored_paid_amount: Decimal
     payments_total: Decimal
     stored_balance_amount: Decimal
     expected_balance_amount: Decimal
     stored_status: InvoiceStatusEnum
     expected_status: InvoiceStatusEnum
     issues: List[str] = Field(default_factory=list)

     model_config = ConfigDict(from_attributes=True)


class LedgerReconciliationResponse(BaseModel):
     consistent: bool
     checked: int
     discrepancies: List[InvoiceReconciliationResponse]

     model_config = ConfigDict(from_attributes=True)
