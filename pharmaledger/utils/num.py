# pharmaledger/utils/num.py
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

Q2 = Decimal("0.01")
Q4 = Decimal("0.0001")
HUNDRED = Decimal("100")


def D(v) -> Decimal:
    try:
        if v is None:
            return Decimal("0")
        if isinstance(v, Decimal):
            return v
        return Decimal(str(v).strip())
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def money2(v) -> Decimal:
    return D(v).quantize(Q2, rounding=ROUND_HALF_UP)


def qty4(v) -> Decimal:
    return D(v).quantize(Q4, rounding=ROUND_HALF_UP)
