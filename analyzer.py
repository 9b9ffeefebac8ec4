"""
analyzer.py — Subscription totals, sorting and dashboard report

Normalizes annual subscriptions into a monthly equivalent, produces sorted
views of the collection, lists payments due soon, and assembles the report
shared by the API and the dashboard.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from models import SortOrder, Subscription

log = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12
UPCOMING_WINDOW_DAYS = 30


# ── Monthly normalization ─────────────────────────────────────────────────────
def monthly_cost(sub: Subscription) -> Decimal:
    """Monthly equivalent of a subscription: annual amounts are spread over 12 months."""
    if sub.is_annual:
        return sub.amount / MONTHS_PER_YEAR
    return sub.amount


def monthly_total(subs: Iterable[Subscription]) -> Decimal:
    """Sum of monthly costs. Not rounded; formatting is up to the caller."""
    return sum((monthly_cost(s) for s in subs), Decimal(0))


def yearly_total(subs: Iterable[Subscription]) -> Decimal:
    return monthly_total(subs) * MONTHS_PER_YEAR


# ── Sorting ───────────────────────────────────────────────────────────────────
def sorted_view(subs: Sequence[Subscription], order: SortOrder) -> list[Subscription]:
    """
    Return a new list of `subs` in the requested order.

    Amount orders compare the raw stored amount, so a yearly plan is ranked by
    its yearly price rather than its monthly equivalent. The sort is stable:
    entries with equal keys keep their existing relative order.
    """
    order = SortOrder(order)
    if order is SortOrder.NEWEST_FIRST:
        return sorted(subs, key=lambda s: s.created_at, reverse=True)
    if order is SortOrder.OLDEST_FIRST:
        return sorted(subs, key=lambda s: s.created_at)
    if order is SortOrder.HIGHEST_AMOUNT:
        return sorted(subs, key=lambda s: s.amount, reverse=True)
    if order is SortOrder.LOWEST_AMOUNT:
        return sorted(subs, key=lambda s: s.amount)
    raise ValueError(f"Unsupported sort order: {order!r}")


# ── Upcoming payments ─────────────────────────────────────────────────────────
def upcoming_payments(
    subs: Iterable[Subscription],
    today: date,
    days: int = UPCOMING_WINDOW_DAYS,
) -> list[dict]:
    """Return subscriptions whose next payment falls within `days` days of `today`."""
    horizon = today + timedelta(days=days)
    upcoming = []
    for s in subs:
        if today <= s.next_payment <= horizon:
            upcoming.append({
                "id": s.id,
                "name": s.name,
                "amount": s.amount,
                "payment_date": s.next_payment.isoformat(),
                "days_until": (s.next_payment - today).days,
            })
    upcoming.sort(key=lambda x: x["days_until"])
    return upcoming


# ── Report ────────────────────────────────────────────────────────────────────
def money(amount: Decimal) -> str:
    """Two-decimal display string for an amount."""
    return f"{amount:.2f}"


def run_analysis(
    subs: Sequence[Subscription],
    order: SortOrder = SortOrder.NEWEST_FIRST,
    today: Optional[date] = None,
) -> dict:
    """
    Build the report shown by the API and the dashboard.

    Report structure:
    {
        "generated_at": "...",
        "sort": "date-newest",
        "subscription_count": N,
        "total_monthly": "X.XX",
        "total_yearly": "X.XX",
        "subscriptions": [...],            # in the requested order
        "upcoming_payments_30d": [...],
    }
    """
    today = today or date.today()
    total = monthly_total(subs)
    renewals = upcoming_payments(subs, today)

    rows = []
    for s in sorted_view(subs, order):
        row = s.to_dict()
        row["monthly_cost"] = money(monthly_cost(s))
        rows.append(row)

    report = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "sort": SortOrder(order).value,
        "subscription_count": len(subs),
        "total_monthly": money(total),
        "total_yearly": money(total * MONTHS_PER_YEAR),
        "subscriptions": rows,
        "upcoming_payments_30d": [
            {**r, "amount": money(r["amount"])} for r in renewals
        ],
    }

    log.info(
        f"Analysis complete: {len(subs)} subscriptions | "
        f"${report['total_monthly']}/mo | {len(renewals)} payments in 30d"
    )
    return report
