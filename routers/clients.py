# routers/clients.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import ActorContext, get_actor, require_admin, require_payment_recorder
from services.client_service import ClientService
from services.invoice_service import InvoiceService
from schemas.client import ClientAccountSummary, ClientCreate, ClientResponse

router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.post(
     "",
     response_model=ClientResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Create a client"
)
def create_client(
     client_data: ClientCreate,
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(require_payment_recorder)
):
     client = ClientService.create_client(db, client_data)
     db.commit()
     db.refresh(client)
     return client


@router.get("/{client_id}", response_model=ClientResponse, summary="Get client by ID")
def get_client(
     client_id: int,
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(get_actor)
):
     return ClientService.get_client(db, client_id)


@router.patch(
     "/{client_id}/deactivate",
     response_model=ClientResponse,
     summary="Deactivate a client"
)
def deactivate_client(
     client_id: int,
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(require_admin)
):
     """New invoices are refused for inactive clients; existing ones can still be paid."""
     client = ClientService.deactivate_client(db, client_id)
     db.commit()
     db.refresh(client)
     return client


@router.get(
     "/{client_id}/summary",
     response_model=ClientAccountSummary,
     summary="Client account summary"
)
def get_client_summary(
     client_id: int,
     db: Session = Depends(get_session),
     actor: ActorContext = Depends(get_actor)
):
     """
     Totals across the client's invoices:
     - invoice count, total invoiced, total paid, outstanding
     - invoice count per effective status
     """
     return InvoiceService.client_account_summary(db, client_id)
