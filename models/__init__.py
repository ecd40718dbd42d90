# models/__init__.py
from .base import Base
from .user import User, UserRole
from .client import Client
from .project import Project, ProjectStatus
from .invoice import Invoice, InvoiceItem, InvoiceStatus
from .payment import Payment, PaymentMethod

__all__ = [
     "Base",
     "User",
     "UserRole",
     "Client",
     "Project",
     "ProjectStatus",
     "Invoice",
     "InvoiceItem",
     "InvoiceStatus",
     "Payment",
     "PaymentMethod",
]
