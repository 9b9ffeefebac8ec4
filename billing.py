"""
billing.py — Pro status from Stripe webhook events

A completed checkout turns a profile's `is_pro` flag on; a deleted Stripe
subscription turns it off. Profiles are matched by Stripe customer id. Every
other event type is acknowledged without changes.
"""

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import stripe

log = logging.getLogger(__name__)

CHECKOUT_COMPLETED   = "checkout.session.completed"
SUBSCRIPTION_DELETED = "customer.subscription.deleted"

PRO_STATUS_BY_EVENT = {
    CHECKOUT_COMPLETED: True,
    SUBSCRIPTION_DELETED: False,
}


@dataclass
class Profile:
    id: str
    email: str
    is_pro: bool = False
    stripe_customer_id: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""


class ProfileStore:
    """Billing profiles persisted as a JSON list."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> list[Profile]:
        if not self.path.exists():
            return []
        return [Profile(**p) for p in json.loads(self.path.read_text())]

    def save(self, profiles: list[Profile]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps([asdict(p) for p in profiles], indent=2))

    def upsert(self, profile: Profile):
        now = datetime.now(timezone.utc).isoformat()
        profile.created_at = profile.created_at or now
        profile.updated_at = profile.updated_at or now
        profiles = [p for p in self.load() if p.id != profile.id]
        profiles.append(profile)
        self.save(profiles)

    def get_by_customer(self, customer_id: str) -> Optional[Profile]:
        for p in self.load():
            if customer_id and p.stripe_customer_id == customer_id:
                return p
        return None

    def set_pro_status(self, customer_id: Optional[str], is_pro: bool) -> int:
        """Set `is_pro` on every profile linked to `customer_id`. Returns rows updated."""
        if not customer_id:
            return 0
        profiles = self.load()
        now = datetime.now(timezone.utc).isoformat()
        updated = 0
        for p in profiles:
            if p.stripe_customer_id == customer_id:
                p.is_pro = is_pro
                p.updated_at = now
                updated += 1
        if updated:
            self.save(profiles)
        return updated


# ── Event handling ────────────────────────────────────────────────────────────
def verify_event(payload: bytes, signature: str, secret: str) -> stripe.Event:
    """Check the Stripe-Signature header and return the decoded event."""
    return stripe.Webhook.construct_event(payload, signature, secret)


def handle_event(event, profiles: ProfileStore) -> int:
    """Apply one event to the profile store. Returns rows updated."""
    event_type = event["type"]
    if event_type not in PRO_STATUS_BY_EVENT:
        log.info(f"Ignoring Stripe event {event_type}")
        return 0

    is_pro = PRO_STATUS_BY_EVENT[event_type]
    customer_id = event["data"]["object"]["customer"]
    updated = profiles.set_pro_status(customer_id, is_pro)
    log.info(f"{event_type}: customer {customer_id} is_pro={is_pro} ({updated} profile(s) updated)")
    return updated


def process_webhook(payload: bytes, signature: Optional[str], secret: str,
                    profiles: ProfileStore) -> tuple[int, dict]:
    """Verify and apply a webhook request. Returns (HTTP status, JSON body)."""
    if not signature:
        return 400, {"error": "No signature"}
    try:
        event = verify_event(payload, signature, secret)
        handle_event(event, profiles)
    except Exception as exc:
        log.warning(f"Webhook rejected: {exc}")
        return 400, {"error": f"Webhook Error: {exc}"}
    return 200, {"received": True}
