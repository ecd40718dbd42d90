# models/project.py
import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base, value_enum


class ProjectStatus(str, enum.Enum):
     PLANNING = "planning"
     IN_PROGRESS = "in_progress"
     ON_HOLD = "on_hold"
     COMPLETED = "completed"
     CANCELLED = "cancelled"


class Project(Base):
     """
     Project model - optional grouping for a client's invoices.
     Only used for display joins; carries no ledger state.
     """
     __tablename__ = "projects"

     id = Column(Integer, primary_key=True, autoincrement=True)
     client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
     project_name = Column(String(255), nullable=False)
     status = Column(value_enum(ProjectStatus, "project_status"), default=ProjectStatus.PLANNING, nullable=False)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     client = relationship("Client", back_populates="projects")
     invoices = relationship("Invoice", back_populates="project")

     def __repr__(self):
          return f"<Project(id={self.id}, name='{self.project_name}')>"
