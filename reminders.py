"""
reminders.py — Payment reminders

Adding a subscription queues a reminder for three days before its next
payment. A daily job delivers every due reminder over Telegram and marks it
sent, so each reminder goes out once.

Usage:
    python reminders.py           # deliver due reminders now, then daily at 09:00
    python reminders.py --once    # deliver due reminders once, then exit
"""

import json
import logging
import sys
import time
import urllib.request
import uuid
from datetime import date, datetime, timedelta
from datetime import time as dt_time
from pathlib import Path
from typing import Optional, Protocol

import schedule

from config import Settings, load_settings, telegram_credentials
from models import Subscription

log = logging.getLogger(__name__)

REMINDER_LEAD_DAYS = 3
REMINDER_TIME      = dt_time(9, 0)
REMINDER_TITLE     = "Upcoming Subscription Payment"


class Notifier(Protocol):
    def schedule_reminder(self, fire_at: datetime, title: str, body: str,
                          subscription: Optional[Subscription] = None) -> None: ...


# ── Reminder queue ────────────────────────────────────────────────────────────
class ReminderQueue:
    """Reminders waiting to be delivered, persisted as a JSON list."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> list[dict]:
        if self.path.exists():
            try:
                return json.loads(self.path.read_text())
            except (OSError, json.JSONDecodeError) as exc:
                log.warning(f"Could not read {self.path}: {exc}")
        return []

    def save(self, items: list[dict]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(items, indent=2))

    def schedule_reminder(self, fire_at: datetime, title: str, body: str,
                          subscription: Optional[Subscription] = None) -> None:
        """
        Queue a reminder. With `subscription`, the entry also keeps the payment
        it announces so the text can be rebuilt when it is sent, and so it can
        be cancelled when the subscription is removed.
        """
        item = {
            "id": uuid.uuid4().hex[:16],
            "fire_at": fire_at.isoformat(),
            "title": title,
            "body": body,
            "sent_at": None,
        }
        if subscription is not None:
            item.update({
                "subscription_id": subscription.id,
                "name": subscription.name,
                "amount": str(subscription.amount),
                "due_on": subscription.next_payment.isoformat(),
            })
        items = self.load()
        items.append(item)
        self.save(items)
        log.info(f"Reminder queued for {fire_at.isoformat()}: {title}")

    def due(self, now: datetime) -> list[dict]:
        return [
            r for r in self.load()
            if not r.get("sent_at") and datetime.fromisoformat(r["fire_at"]) <= now
        ]

    def mark_sent(self, reminder_ids: set, now: datetime):
        items = self.load()
        for r in items:
            if r["id"] in reminder_ids:
                r["sent_at"] = now.isoformat()
        self.save(items)

    def cancel(self, subscription_id: str) -> int:
        """Drop unsent reminders for a subscription. Returns how many were removed."""
        items = self.load()
        kept = [
            r for r in items
            if r.get("sent_at") or r.get("subscription_id") != subscription_id
        ]
        removed = len(items) - len(kept)
        if removed:
            self.save(kept)
            log.info(f"Cancelled {removed} reminder(s) for subscription {subscription_id}")
        return removed


# ── Scheduling from a new subscription ────────────────────────────────────────
def reminder_fire_at(sub: Subscription) -> datetime:
    return datetime.combine(sub.next_payment - timedelta(days=REMINDER_LEAD_DAYS), REMINDER_TIME)


def payment_body(name: str, amount, days_left: int) -> str:
    if days_left == 0:
        when = "today"
    elif days_left == 1:
        when = "tomorrow"
    else:
        when = f"in {days_left} days"
    return f"{name} payment of ${amount} is due {when}"


def reminder_body(sub: Subscription) -> str:
    return payment_body(sub.name, sub.amount, REMINDER_LEAD_DAYS)


def schedule_payment_reminder(sub: Subscription, notifier: Notifier) -> bool:
    """
    Ask `notifier` for a reminder three days before the next payment.

    Failures are logged and reported as False; the subscription is kept either way.
    """
    try:
        notifier.schedule_reminder(reminder_fire_at(sub), REMINDER_TITLE, reminder_body(sub), sub)
        return True
    except Exception as exc:
        log.warning(f"Could not schedule reminder for {sub.name}: {exc}")
        return False


# ── Telegram ──────────────────────────────────────────────────────────────────
def send_telegram(token: str, chat_id: str, text: str) -> bool:
    try:
        url     = f"https://api.telegram.org/bot{token.strip()}/sendMessage"
        payload = json.dumps({"chat_id": chat_id.strip(), "text": text, "parse_mode": "Markdown"}).encode()
        req     = urllib.request.Request(url, data=payload, headers={"Content-Type": "application/json"})
        with urllib.request.urlopen(req, timeout=10) as resp:
            return json.loads(resp.read()).get("ok", False)
    except Exception as exc:
        log.warning(f"Telegram send failed: {exc}")
        return False


def fire_due_reminders(queue: ReminderQueue, token: str, chat_id: str,
                       now: Optional[datetime] = None) -> int:
    """
    Send every due, unsent reminder. Returns how many were delivered.

    Reminders tied to a payment are worded from the days left at send time;
    once that payment date has passed they are closed without sending.
    """
    now = now or datetime.now()
    delivered, expired = set(), set()
    for r in queue.due(now):
        body = r["body"]
        if r.get("due_on"):
            days_left = (date.fromisoformat(r["due_on"]) - now.date()).days
            if days_left < 0:
                expired.add(r["id"])
                log.info(f"Skipping reminder for {r['name']}, payment on {r['due_on']} has passed")
                continue
            body = payment_body(r["name"], r["amount"], days_left)
        if send_telegram(token, chat_id, f"*{r['title']}*\n\n{body}"):
            delivered.add(r["id"])
            log.info(f"Reminder sent: {body}")
    if delivered or expired:
        queue.mark_sent(delivered | expired, now)
    return len(delivered)


# ── Jobs ──────────────────────────────────────────────────────────────────────
def run_reminders(settings: Settings) -> int:
    token, chat_id = telegram_credentials(settings)
    if not token or not chat_id:
        log.warning("No Telegram credentials configured, skipping reminders.")
        return 0
    sent = fire_due_reminders(ReminderQueue(settings.reminders_file), token, chat_id)
    log.info(f"Reminder check done, {sent} reminder(s) sent.")
    return sent


def run_scheduler(settings: Settings):
    """Blocking loop: deliver due reminders now, then every day at 09:00."""
    schedule.every().day.at(REMINDER_TIME.strftime("%H:%M")).do(run_reminders, settings)
    log.info("Scheduler started, daily reminders at 09:00")

    try:
        run_reminders(settings)
    except Exception as exc:
        log.warning(f"Startup reminder check failed: {exc}")

    while True:
        schedule.run_pending()
        time.sleep(30)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    settings = load_settings()
    if "--once" in sys.argv[1:]:
        run_reminders(settings)
    else:
        run_scheduler(settings)
