# services/__init__.py
from . import ledger_service, payment_service
from .invoice_service import InvoiceService
from .client_service import ClientService
from .ledger_service import (
     record_payment,
     delete_payment,
     recompute_invoice,
     get_outstanding_balance,
     get_balance_snapshot,
     reconcile_invoice,
     reconcile_all,
)

__all__ = [
     "ledger_service",
     "payment_service",
     "InvoiceService",
     "ClientService",
     "record_payment",
     "delete_payment",
     "recompute_invoice",
     "get_outstanding_balance",
     "get_balance_snapshot",
     "reconcile_invoice",
     "reconcile_all",
]
