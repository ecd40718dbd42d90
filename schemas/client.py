# schemas/client.py
from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional

from pydantic import BaseModel, Field, ConfigDict


class ClientCreate(BaseModel):
     company_name: str = Field(..., min_length=1, max_length=255)
     contact_person: Optional[str] = Field(None, max_length=200)
     mobile_number: Optional[str] = Field(None, max_length=50)
     address: Optional[str] = None
     city: Optional[str] = Field(None, max_length=100)


class ClientResponse(BaseModel):
     id: int
     company_name: str
     contact_person: Optional[str] = None
     mobile_number: Optional[str] = None
     address: Optional[str] = None
     city: Optional[str] = None
     is_active: bool
     created_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class ClientAccountSummary(BaseModel):
     """Client aggregate across all of the client's invoices."""
     client_id: int
     company_name: str
     is_active: bool
     invoice_count: int
     total_invoiced: Decimal
     total_paid: Decimal
     outstanding: Decimal
     status_counts: Dict[str, int]
