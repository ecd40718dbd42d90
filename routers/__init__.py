# routers/__init__.py
from . import auth, clients, invoices, payments

__all__ = ["auth", "clients", "invoices", "payments"]
