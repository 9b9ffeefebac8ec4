"""Shared pytest fixtures for the test suite."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from config import Settings
from models import Subscription


@pytest.fixture
def now() -> datetime:
    """A fixed timestamp for deterministic testing."""
    return datetime(2024, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_sub(now: datetime):
    """Factory for subscriptions created `minutes` after the fixed timestamp."""
    counter = iter(range(1, 1000))

    def _make(name="Netflix", amount="15.49", is_annual=False, minutes=0,
              payment_day=15, next_payment=date(2024, 3, 15)):
        return Subscription(
            id=f"sub-{next(counter)}",
            name=name,
            amount=Decimal(amount),
            payment_method="Visa",
            is_annual=is_annual,
            payment_day=payment_day,
            next_payment=next_payment,
            created_at=now + timedelta(minutes=minutes),
        )

    return _make


@pytest.fixture
def settings(tmp_path, monkeypatch) -> Settings:
    """Settings rooted in a temporary data directory, mirrored into the environment."""
    monkeypatch.setenv("SUBTRACK_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", "whsec_test")
    monkeypatch.setenv("SUBTRACK_DISABLE_SCHEDULER", "1")
    return Settings(data_dir=tmp_path, stripe_webhook_secret="whsec_test", run_scheduler=False)
