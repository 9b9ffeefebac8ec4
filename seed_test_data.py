"""
seed_test_data.py — writes realistic mock subscriptions for testing.
Run this to try the API and dashboard without entering data by hand.
"""
from datetime import datetime, timedelta

from config import load_settings
from models import create_subscription
from store import SubscriptionStore

SUBS = [
    # (name, amount, payment_method, is_annual, payment_day, days_ago)
    ("Netflix",       "15.49", "Visa •• 4242",  False, 12, 200),
    ("Spotify",        "9.99", "MBWay",         False,  3, 150),
    ("iCloud+",        "2.99", "Apple Pay",     False, 28, 120),
    ("Adobe CC",      "54.99", "Visa •• 4242",  False, 20,  90),
    ("Amazon Prime",  "139.00", "Bank transfer", True,  5,  60),
    ("NordVPN",        "59.88", "PayPal",        True, 31,  30),
    ("Gym",            "35.00", "Direct debit",  False,  1,   7),
]


def make_records():
    now = datetime.now().astimezone()
    return [
        create_subscription(name, amount, method, is_annual, day, now=now - timedelta(days=days_ago))
        for name, amount, method, is_annual, day, days_ago in SUBS
    ]


if __name__ == "__main__":
    store = SubscriptionStore(load_settings().subscriptions_file)
    records = make_records()
    for r in records:
        store.append(r)
    print(f"Wrote {len(records)} mock subscriptions to {store.path}")
