# models/base.py
import enum

from sqlalchemy import Enum
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
     """Base class for all SQLAlchemy models."""


def value_enum(enum_cls: type[enum.Enum], name: str) -> Enum:
     """Enum column type that stores member values (e.g. 'partially_paid'), not names."""
     return Enum(
          enum_cls,
          name=name,
          create_constraint=True,
          native_enum=False,
          length=32,
          values_callable=lambda members: [m.value for m in members],
          validate_strings=True,
     )
