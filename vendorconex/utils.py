from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple

import bleach


def sanitize_input(value: Optional[str]) -> str:
    """Sanitize a user-supplied search term.

    - Strips every HTML tag using bleach.clean(..., tags=set(), strip=True)
    - Removes NULL bytes
    - Trims whitespace

    LIKE wildcards are escaped by the store, not here.
    """
    if value is None:
        return ""
    # remove NULL bytes
    val = value.replace("\x00", "")
    # strip tags
    val = bleach.clean(val, tags=set(), strip=True)
    return val.strip()


def clean_text(value: Optional[str]) -> str:
    """Strip markup from free text (review comments, descriptions) but keep punctuation."""
    if value is None:
        return ""
    return bleach.clean(value.replace("\x00", ""), tags=set(), strip=True).strip()


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


# Business rule: money stored rounded to 2 decimals

def round_amount(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def order_total(lines: Iterable[Tuple[float, int]]) -> float:
    """Sum ``price * quantity`` pairs exactly, then round half up to cents."""
    total = sum((Decimal(str(price)) * quantity for price, quantity in lines), Decimal("0"))
    return float(round_amount(total))
