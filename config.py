"""
config.py — Settings for the API, dashboard and reminder scheduler

File locations and the Stripe webhook secret come from environment
variables. Telegram alert credentials live in alerts_config.json inside the
data directory, the same file the dashboard writes.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger(__name__)

ALERT_CONFIG_NAME   = "alerts_config.json"
SUBSCRIPTIONS_NAME  = "subscriptions.jsonl"
PROFILES_NAME       = "profiles.json"
REMINDERS_NAME      = "scheduled_reminders.json"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    stripe_webhook_secret: str = ""
    run_scheduler: bool = True

    @property
    def subscriptions_file(self) -> Path:
        return self.data_dir / SUBSCRIPTIONS_NAME

    @property
    def profiles_file(self) -> Path:
        return self.data_dir / PROFILES_NAME

    @property
    def reminders_file(self) -> Path:
        return self.data_dir / REMINDERS_NAME

    @property
    def alert_config_file(self) -> Path:
        return self.data_dir / ALERT_CONFIG_NAME


def load_settings() -> Settings:
    """Read settings from the environment."""
    return Settings(
        data_dir=Path(os.environ.get("SUBTRACK_DATA_DIR", ".")),
        stripe_webhook_secret=os.environ.get("STRIPE_WEBHOOK_SECRET", ""),
        run_scheduler=not os.environ.get("SUBTRACK_DISABLE_SCHEDULER"),
    )


# ── Alert config file ─────────────────────────────────────────────────────────
def load_config(settings: Settings) -> dict:
    path = settings.alert_config_file
    if path.exists():
        try:
            return json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as exc:
            log.warning(f"Could not read {path}: {exc}")
    return {}


def save_config(settings: Settings, cfg: dict):
    settings.alert_config_file.write_text(json.dumps(cfg, indent=2))


def telegram_credentials(settings: Settings) -> tuple[str, str]:
    cfg = load_config(settings)
    return cfg.get("telegram_token", "").strip(), cfg.get("telegram_chat_id", "").strip()
