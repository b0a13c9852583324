"""
Derived values for the catalog: average ratings and pagination.

Nothing here touches the database; the services feed these helpers
with rows they have already fetched.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

BOOKS_PER_PAGE = 5


def average_rating(ratings: Iterable[int]) -> float:
    """Arithmetic mean of ``ratings``; ``0.0`` when there are none."""
    values = list(ratings)
    if not values:
        return 0.0
    return sum(values) / len(values)


def display_rating(mean: float) -> float:
    """The mean with one decimal of precision, as shown next to the stars.

    Halves round up (4.25 -> 4.3), which the built-in ``round`` does not
    guarantee for binary floats.
    """
    return float(Decimal(repr(mean)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def star_rating(mean: float) -> int:
    """Nearest whole star, halves rounding up (3.5 -> 4)."""
    return int(math.floor(mean + 0.5))


def page_offset(page: int, page_size: int = BOOKS_PER_PAGE) -> int:
    """Row offset of a 1‑indexed page."""
    return (page - 1) * page_size


def total_pages(total: int, page_size: int = BOOKS_PER_PAGE) -> int:
    return math.ceil(total / page_size) if total else 0
