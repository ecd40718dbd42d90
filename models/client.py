# models/client.py
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, func
from sqlalchemy.orm import relationship
from .base import Base


class Client(Base):
     """
     Client model - a billable party.
     Deactivation is a soft flag; clients are never deleted while invoiced.
     """
     __tablename__ = "clients"

     id = Column(Integer, primary_key=True, autoincrement=True)
     company_name = Column(String(255), nullable=False, index=True)
     contact_person = Column(String(200), nullable=True)
     mobile_number = Column(String(50), nullable=True)
     address = Column(Text, nullable=True)
     city = Column(String(100), nullable=True)
     is_active = Column(Boolean, default=True, nullable=False)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     projects = relationship("Project", back_populates="client")
     invoices = relationship("Invoice", back_populates="client")

     def __repr__(self):
          return f"<Client(id={self.id}, company_name='{self.company_name}', active={self.is_active})>"
