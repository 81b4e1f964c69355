"""
Tuition and fee computation for a new assessment.
"""
from typing import Iterable, Iterator, List, Optional

from config import Config
from schemas.payments import FeeItem


def is_scholar(scholarship_status: Optional[str]) -> bool:
    return (scholarship_status or "").strip().lower() == "scholar"


def unit_rate(scholarship_status: Optional[str]) -> int:
    """Per-unit rate; anything other than "scholar" (including blank) pays the regular rate."""
    if is_scholar(scholarship_status):
        return Config.SCHOLAR_UNIT_RATE
    return Config.REGULAR_UNIT_RATE


def compute_tuition(total_units: int, scholarship_status: Optional[str]) -> int:
    if total_units is None:
        total_units = 0
    if total_units < 0:
        raise ValueError("total_units must not be negative")
    return unit_rate(scholarship_status) * total_units


def valid_fees(fees: Iterable[FeeItem]) -> Iterator[FeeItem]:
    # Non-positive amounts are dropped, not rejected
    for fee in fees:
        if fee.amount > 0:
            yield fee


def other_fees_total(fees: Iterable[FeeItem]) -> int:
    return sum(fee.amount for fee in valid_fees(fees))


def assessment_total(tuition: int, fees: List[FeeItem]) -> int:
    return tuition + other_fees_total(fees)
