# models/user.py
import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from .base import Base, value_enum


class UserRole(str, enum.Enum):
     """Back-office roles. Admins may also run ledger corrections."""
     ADMIN = "admin"
     EMPLOYEE = "employee"


class User(Base):
     """
     User model - staff accounts that sign in to the back office.
     """
     __tablename__ = "users"

     id = Column(Integer, primary_key=True, autoincrement=True)
     username = Column(String(100), unique=True, nullable=False, index=True)
     email = Column(String(255), unique=True, nullable=False, index=True)
     password = Column(String(255), nullable=False)  # bcrypt hash
     full_name = Column(String(200), nullable=False)
     role = Column(value_enum(UserRole, "user_role"), default=UserRole.EMPLOYEE, nullable=False)
     is_active = Column(Boolean, default=True, nullable=False)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     def __repr__(self):
          return f"<User(id={self.id}, username='{self.username}', role='{self.role.value}')>"
