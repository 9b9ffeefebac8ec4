"""
recurrence.py — Next payment date for a billing day-of-month

Short months clamp to their last day: a subscription billed on the 31st is
due on Feb 29 in 2024, Apr 30 in April, and back on the 31st in May.
"""

from datetime import date, datetime

from dateutil.relativedelta import relativedelta

from exceptions import InvalidPaymentDayError

MIN_PAYMENT_DAY = 1
MAX_PAYMENT_DAY = 31


def next_cycle(d: date, is_annual: bool, anchor_day: int) -> date:
    """Advance `d` by one billing cycle, keeping `anchor_day` where the month allows it."""
    if is_annual:
        return d + relativedelta(years=1, day=anchor_day)
    return d + relativedelta(months=1, day=anchor_day)


def compute_next_payment(day: int, is_annual: bool, reference: date) -> date:
    """
    Return the next date that falls on billing day `day` after `reference`.

    If this month's billing day is still ahead, it is returned as-is. If it is
    today or already passed, the date moves forward by one cycle (a month for
    monthly billing, a year for annual billing). `reference` may be a date or
    a datetime; only its calendar date is used.
    """
    if not MIN_PAYMENT_DAY <= day <= MAX_PAYMENT_DAY:
        raise InvalidPaymentDayError(
            f"Payment day must be between {MIN_PAYMENT_DAY} and {MAX_PAYMENT_DAY}, got {day}."
        )

    today = reference.date() if isinstance(reference, datetime) else reference
    candidate = today + relativedelta(day=day)
    if today.day >= candidate.day:
        return next_cycle(candidate, is_annual, day)
    return candidate
