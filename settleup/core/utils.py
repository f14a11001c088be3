from decimal import Decimal, ROUND_HALF_UP, getcontext
from datetime import datetime, timezone
from uuid import uuid4

getcontext().prec = 28
CENTS = Decimal("0.01")
ZERO = Decimal("0")


def qround(d: Decimal) -> Decimal:
    return d.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_decimal(value) -> Decimal:
    """Normalise ints, floats and numeric strings to Decimal.

    Floats go through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def is_zero(amount: Decimal, tolerance: Decimal) -> bool:
    return abs(amount) <= tolerance


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
