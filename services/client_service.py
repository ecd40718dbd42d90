# services/client_service.py
"""
Client Service - clients and their projects.

Clients are soft-deactivated, never deleted: their invoices and payments
stay in the ledger, but no new invoice can be raised for them.
"""
from typing import Optional
from sqlalchemy.orm import Session

from exceptions import ClientNotFoundError, InactiveClientError, ProjectNotFoundError, ValidationError
from logging_config import get_logger
from models import Client, Project
from models.project import ProjectStatus
from schemas.client import ClientCreate

logger = get_logger("clients")


class ClientService:
     """Service class for client-related business logic."""

     @staticmethod
     def create_client(db: Session, data: ClientCreate) -> Client:
          company_name = data.company_name.strip()
          if not company_name:
               raise ValidationError("Company name is required", field="company_name")

          client = Client(
               company_name=company_name,
               contact_person=data.contact_person,
               mobile_number=data.mobile_number,
               address=data.address,
               city=data.city,
               is_active=True,
          )
          db.add(client)
          db.flush()
          logger.info("client_created", extra={"client_id": client.id})
          return client

     @staticmethod
     def get_client(db: Session, client_id: int) -> Client:
          client = db.query(Client).filter(Client.id == client_id).first()
          if not client:
               raise ClientNotFoundError(client_id)
          return client

     @staticmethod
     def deactivate_client(db: Session, client_id: int) -> Client:
          """Flag the client inactive. Existing invoices can still be paid."""
          client = ClientService.get_client(db, client_id)
          if client.is_active:
               client.is_active = False
               db.flush()
               logger.info("client_deactivated", extra={"client_id": client.id})
          return client

     @staticmethod
     def create_project(
          db: Session,
          client_id: int,
          project_name: str,
          status: ProjectStatus = ProjectStatus.PLANNING
     ) -> Project:
          client = ClientService.get_client(db, client_id)
          if not client.is_active:
               raise InactiveClientError(client_id)

          project = Project(client_id=client.id, project_name=project_name, status=status)
          db.add(project)
          db.flush()
          return project

     @staticmethod
     def get_project(db: Session, project_id: int, client_id: Optional[int] = None) -> Project:
          query = db.query(Project).filter(Project.id == project_id)
          if client_id is not None:
               query = query.filter(Project.client_id == client_id)
          project = query.first()
          if not project:
               raise ProjectNotFoundError(project_id)
          return project
