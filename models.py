"""
models.py — Subscription record, sort orders and input validation

A subscription is created once from raw form/API input and never edited.
Validation failures raise a ValidationError; callers treat that as an input
rejection and store nothing.
"""

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from exceptions import InvalidAmountError, InvalidPaymentDayError, MissingFieldError
from recurrence import MAX_PAYMENT_DAY, MIN_PAYMENT_DAY, compute_next_payment


# ── Sort orders ───────────────────────────────────────────────────────────────
class SortOrder(str, Enum):
    NEWEST_FIRST = "date-newest"
    OLDEST_FIRST = "date-oldest"
    HIGHEST_AMOUNT = "amount-highest"
    LOWEST_AMOUNT = "amount-lowest"

    @property
    def label(self) -> str:
        return SORT_LABELS[self]


SORT_LABELS = {
    SortOrder.NEWEST_FIRST: "Newest first",
    SortOrder.OLDEST_FIRST: "Oldest first",
    SortOrder.HIGHEST_AMOUNT: "Highest amount",
    SortOrder.LOWEST_AMOUNT: "Lowest amount",
}


# ── Record ────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Subscription:
    id: str
    name: str
    amount: Decimal
    payment_method: str
    is_annual: bool
    payment_day: int
    next_payment: date
    created_at: datetime

    @property
    def cycle(self) -> str:
        return "year" if self.is_annual else "month"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "amount": str(self.amount),
            "payment_method": self.payment_method,
            "is_annual": self.is_annual,
            "payment_day": self.payment_day,
            "next_payment": self.next_payment.isoformat(),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Subscription":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            amount=Decimal(str(data["amount"])),
            payment_method=data.get("payment_method", ""),
            is_annual=bool(data.get("is_annual", False)),
            payment_day=int(data["payment_day"]),
            next_payment=date.fromisoformat(data["next_payment"]),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


# ── Input parsing ─────────────────────────────────────────────────────────────
def parse_amount(raw) -> Decimal:
    """Parse a cost per billing cycle; it must be a finite number above zero."""
    if isinstance(raw, Decimal):
        amount = raw
    else:
        try:
            amount = Decimal(str(raw).strip())
        except (InvalidOperation, ValueError):
            raise InvalidAmountError(f"Amount {raw!r} is not a number.") from None
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError(f"Amount must be a positive number, got {raw!r}.")
    return amount


def parse_payment_day(raw) -> int:
    """Parse a day-of-month and clamp it into 1..31."""
    if isinstance(raw, bool):
        raise InvalidPaymentDayError(f"Payment day {raw!r} is not a whole number.")
    try:
        day = int(str(raw).strip())
    except ValueError:
        raise InvalidPaymentDayError(f"Payment day {raw!r} is not a whole number.") from None
    return min(max(day, MIN_PAYMENT_DAY), MAX_PAYMENT_DAY)


def _required(value: Optional[str], field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise MissingFieldError(f"{field} is required.")
    return text


def create_subscription(
    name: str,
    amount,
    payment_method: str,
    is_annual: bool,
    payment_day,
    now: Optional[datetime] = None,
) -> Subscription:
    """
    Validate raw input and build a new Subscription.

    `next_payment` is computed from `now` (local time by default) and
    `created_at` is `now` itself.
    """
    name = _required(name, "Subscription name")
    payment_method = _required(payment_method, "Payment method")
    parsed_amount = parse_amount(amount)
    day = parse_payment_day(payment_day)

    now = now or datetime.now().astimezone()
    return Subscription(
        id=uuid.uuid4().hex[:16],
        name=name,
        amount=parsed_amount,
        payment_method=payment_method,
        is_annual=bool(is_annual),
        payment_day=day,
        next_payment=compute_next_payment(day, bool(is_annual), now),
        created_at=now,
    )
