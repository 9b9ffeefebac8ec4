"""
app.py — Streamlit Dashboard for SubTrack

Design system: Stripe-inspired
  Background:      #f6f9fc
  Surface:         #ffffff
  Border:          #e3e8ee
  Text primary:    #32325d
  Text muted:      #8898aa
  Accent:          #635bff
"""

import html
from datetime import date

import streamlit as st

from analyzer import monthly_total, sorted_view, upcoming_payments
from config import load_settings
from exceptions import ValidationError
from models import SortOrder, Subscription, create_subscription
from reminders import ReminderQueue, schedule_payment_reminder
from store import SubscriptionStore

st.set_page_config(
    page_title="SubTrack — Subscriptions",
    page_icon="💳",
    layout="centered",
    initial_sidebar_state="collapsed",
)

st.markdown("""
<style>
#MainMenu, header, footer { display: none !important; }
.stDeployButton, [data-testid="stToolbar"] { display: none !important; }

html, body, [data-testid="stAppViewContainer"], [data-testid="stMain"] {
    background: #f6f9fc !important;
    color: #32325d;
    font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", sans-serif;
}
.block-container { padding-top: 2.5rem !important; max-width: 760px !important; }

.app-title { font-size: 1.6rem; font-weight: 700; color: #32325d; letter-spacing: -0.3px; }
.app-subtitle { color: #8898aa; font-size: 0.88rem; margin-bottom: 1.5rem; }

.stat-card {
    background: #ffffff;
    border: 1px solid #e3e8ee;
    border-top: 3px solid #635bff;
    border-radius: 12px;
    padding: 1.25rem 1.4rem;
    margin-bottom: 1.5rem;
    box-shadow: 0 2px 5px rgba(50,50,93,.07), 0 1px 2px rgba(0,0,0,.04);
}
.stat-label {
    font-size: 0.72rem; font-weight: 600; color: #8898aa;
    text-transform: uppercase; letter-spacing: 0.06em; margin-bottom: 0.5rem;
}
.stat-value { font-size: 1.9rem; font-weight: 700; color: #635bff; line-height: 1; }
.stat-sub { font-size: 0.75rem; color: #8898aa; margin-top: 0.3rem; }

.sub-name { font-size: 0.98rem; font-weight: 600; color: #32325d; }
.sub-amount { font-size: 0.9rem; color: #525f7f; }
.sub-meta { font-size: 0.78rem; color: #8898aa; margin-bottom: 0.9rem; }
</style>
""", unsafe_allow_html=True)


settings  = load_settings()
store     = SubscriptionStore(settings.subscriptions_file)
reminders = ReminderQueue(settings.reminders_file)

# ── Session state defaults ────────────────────────────────────────────────────
if "sort_order" not in st.session_state:
    st.session_state.sort_order = SortOrder.NEWEST_FIRST


# ── Helpers ───────────────────────────────────────────────────────────────────
def fmt(amount) -> str:
    return f"${amount:,.2f}"


def fmt_date(d: date) -> str:
    return f"{d:%b} {d.day}, {d.year}"


def render_header():
    st.markdown(
        '<div class="app-title">💳 Subscriptions</div>'
        '<div class="app-subtitle">Recurring payments, monthly totals and reminders</div>',
        unsafe_allow_html=True,
    )


def render_subscription(sub: Subscription):
    info_col, remove_col = st.columns([6, 1])
    with info_col:
        st.markdown(
            f'<div class="sub-name">{html.escape(sub.name)}</div>'
            f'<div class="sub-amount">{fmt(sub.amount)}/{sub.cycle}</div>'
            f'<div class="sub-meta">💳 {html.escape(sub.payment_method)} &nbsp; 🔔 Next: {fmt_date(sub.next_payment)}</div>',
            unsafe_allow_html=True,
        )
    with remove_col:
        if st.button("✕", key=f"rm_{sub.id}", help=f"Remove {sub.name}"):
            store.delete(sub.id)
            reminders.cancel(sub.id)
            st.rerun()


# ── Dialogs (modals) ──────────────────────────────────────────────────────────
@st.dialog("➕ Add Subscription", width="large")
def dialog_add_subscription():
    c1, c2 = st.columns(2)
    with c1:
        name   = st.text_input("Subscription name")
        amount = st.text_input("Amount", placeholder="9.99")
    with c2:
        method = st.text_input("Payment method", placeholder="e.g. Bank transfer, MBWay")
        day    = st.text_input("Payment day (1-31)", value="1")
    is_annual = st.toggle("Annual billing", value=False)

    if st.button("Add Subscription", type="primary", use_container_width=True):
        try:
            sub = create_subscription(name, amount, method, is_annual, day)
        except ValidationError as e:
            st.error(str(e))
            return
        store.append(sub)
        schedule_payment_reminder(sub, reminders)
        st.rerun()


# ── Page ──────────────────────────────────────────────────────────────────────
subscriptions = store.load()
total = monthly_total(subscriptions)
due_soon = upcoming_payments(subscriptions, date.today(), days=7)

render_header()

st.markdown(f"""
<div class="stat-card">
  <div class="stat-label">Monthly total</div>
  <div class="stat-value">{fmt(total)}</div>
  <div class="stat-sub">{len(subscriptions)} subscription{'s' if len(subscriptions) != 1 else ''} · {len(due_soon)} due this week</div>
</div>
""", unsafe_allow_html=True)

sort_col, add_col = st.columns([3, 1])
with sort_col:
    st.selectbox(
        "Sort by",
        list(SortOrder),
        format_func=lambda o: o.label,
        key="sort_order",
    )
with add_col:
    if st.button("➕ Add", key="btn_add", type="primary", use_container_width=True):
        dialog_add_subscription()

if not subscriptions:
    st.info("No subscriptions yet. Add one to start tracking.")

for sub in sorted_view(subscriptions, st.session_state.sort_order):
    render_subscription(sub)
