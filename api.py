from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Any, Dict, Union
import logging
import threading
from pydantic import BaseModel
from analyzer import run_analysis
from billing import ProfileStore, process_webhook
from config import Settings, load_settings
from exceptions import ValidationError
from models import SortOrder, create_subscription
from reminders import ReminderQueue, run_scheduler, schedule_payment_reminder
from store import SubscriptionStore

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
log = logging.getLogger("api")

app = FastAPI(title="SubTrack API")

# Allow requests from the Vite frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:5174", "http://localhost:5175", "*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Dependencies ──────────────────────────────────────────────────────────────
def get_settings() -> Settings:
    return load_settings()


def get_store(settings: Settings = Depends(get_settings)) -> SubscriptionStore:
    return SubscriptionStore(settings.subscriptions_file)


def get_reminders(settings: Settings = Depends(get_settings)) -> ReminderQueue:
    return ReminderQueue(settings.reminders_file)


def get_profiles(settings: Settings = Depends(get_settings)) -> ProfileStore:
    return ProfileStore(settings.profiles_file)


# ── Scheduled background jobs ─────────────────────────────────────────────────
@app.on_event("startup")
def on_startup():
    """Start the reminder scheduler thread when the API server boots."""
    settings = load_settings()
    if not settings.run_scheduler:
        log.info("Reminder scheduler disabled.")
        return
    t = threading.Thread(target=run_scheduler, args=(settings,), daemon=True)
    t.start()
    log.info("Background scheduler thread launched.")


# ── Subscriptions ─────────────────────────────────────────────────────────────
class NewSubscription(BaseModel):
    name: str
    amount: Union[str, float]
    payment_method: str
    is_annual: bool = False
    payment_day: Union[str, int] = "1"


@app.get("/api/subscriptions")
def list_subscriptions(
    sort: SortOrder = SortOrder.NEWEST_FIRST,
    store: SubscriptionStore = Depends(get_store),
) -> Dict[str, Any]:
    return run_analysis(store.load(), sort)


@app.post("/api/subscriptions")
def add_subscription(
    sub: NewSubscription,
    store: SubscriptionStore = Depends(get_store),
    reminders: ReminderQueue = Depends(get_reminders),
):
    """Validate and store a subscription, then queue its payment reminder."""
    try:
        record = create_subscription(
            sub.name, sub.amount, sub.payment_method, sub.is_annual, sub.payment_day,
        )
    except ValidationError as e:
        return {"status": "error", "message": str(e)}

    store.append(record)
    schedule_payment_reminder(record, reminders)
    return {"status": "success", "subscription": record.to_dict()}


@app.delete("/api/subscriptions/{sub_id}")
def remove_subscription(
    sub_id: str,
    store: SubscriptionStore = Depends(get_store),
    reminders: ReminderQueue = Depends(get_reminders),
):
    if not store.delete(sub_id):
        raise HTTPException(status_code=404, detail=f"Subscription {sub_id} not found.")
    reminders.cancel(sub_id)
    return {"status": "success"}


# ── Stripe webhook ────────────────────────────────────────────────────────────
@app.post("/webhooks/stripe")
async def stripe_webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    profiles: ProfileStore = Depends(get_profiles),
):
    payload = await request.body()
    status, body = process_webhook(
        payload, request.headers.get("stripe-signature"), settings.stripe_webhook_secret, profiles,
    )
    return JSONResponse(content=body, status_code=status)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
