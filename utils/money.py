# utils/money.py
"""Fixed-point helpers: every amount in the ledger is a Decimal in cents."""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Any) -> Decimal:
     """Convert to Decimal rounded half-up to two places. Floats go through str()."""
     if isinstance(value, float):
          value = str(value)
     return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_exact_money(value: Any) -> Optional[Decimal]:
     """
     Parse ``value`` as an amount with at most two decimal places.

     Returns None when the value is not a finite number or carries sub-cent
     precision, so the caller can report it instead of silently rounding.
     """
     if isinstance(value, bool):
          return None
     if isinstance(value, float):
          value = str(value)
     try:
          amount = Decimal(value)
          if not amount.is_finite():
               return None
          exact = amount.quantize(CENT)
     except (InvalidOperation, TypeError, ValueError):
          return None
     if amount != exact:
          return None
     return exact
