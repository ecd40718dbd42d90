# schemas/__init__.py
from .invoice import (
     InvoiceCreate,
     InvoiceUpdate,
     InvoiceResponse,
     InvoiceListResponse,
     InvoiceBalanceResponse,
     InvoiceStatusEnum,
)
from .payment import PaymentCreate, PaymentResponse, PaymentListResponse, RecordPaymentResponse
from .client import ClientCreate, ClientResponse, ClientAccountSummary
from .auth import LoginRequest, TokenResponse, ActorResponse

__all__ = [
     "InvoiceCreate",
     "InvoiceUpdate",
     "InvoiceResponse",
     "InvoiceListResponse",
     "InvoiceBalanceResponse",
     "InvoiceStatusEnum",
     "PaymentCreate",
     "PaymentResponse",
     "PaymentListResponse",
     "RecordPaymentResponse",
     "ClientCreate",
     "ClientResponse",
     "ClientAccountSummary",
     "LoginRequest",
     "TokenResponse",
     "ActorResponse",
]
