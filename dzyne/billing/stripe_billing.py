"""Stripe customers, metered subscriptions and webhook handling."""

import logging
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import stripe

from ..auth.users import UserRepository
from ..config import Config
from ..database import get_db_connection
from ..errors import BillingError

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ("active", "trialing")


def _client_ready() -> None:
    if not Config.STRIPE_SECRET_KEY:
        raise BillingError("STRIPE_SECRET_KEY is not configured")
    stripe.api_key = Config.STRIPE_SECRET_KEY


def create_stripe_customer(
    user_id: str,
    email: str,
    name: Optional[str] = None,
    db_path: Optional[Path] = None,
) -> str:
    """Create a Stripe customer and store its id on the user."""
    _client_ready()
    try:
        customer = stripe.Customer.create(
            email=email,
            name=name,
            metadata={"dzyne_user_id": user_id},
        )
    except stripe.StripeError as e:
        raise BillingError(f"Failed to create customer: {e}") from e

    UserRepository(db_path).set_stripe_customer(user_id, customer.id)
    logger.info(f"Created Stripe customer {customer.id} for user {user_id}")
    return customer.id


def create_metered_subscription(customer_id: str, price_id: str) -> str:
    _client_ready()
    try:
        subscription = stripe.Subscription.create(
            customer=customer_id,
            items=[{"price": price_id}],
            payment_behavior="default_incomplete",
            payment_settings={"save_default_payment_method": "on_subscription"},
        )
    except stripe.StripeError as e:
        raise BillingError(f"Failed to create subscription: {e}") from e
    return subscription.id


def report_usage(customer_id: str, quantity: int = 1, timestamp: Optional[int] = None) -> None:
    """Send a billing meter event for `quantity` API calls."""
    _client_ready()
    try:
        stripe.billing.MeterEvent.create(
            event_name=Config.STRIPE_METER_EVENT,
            payload={
                "value": str(quantity or 1),
                "stripe_customer_id": customer_id,
            },
            timestamp=timestamp or int(time.time()),
        )
    except stripe.StripeError as e:
        raise BillingError(f"Failed to report usage: {e}") from e


def create_portal_session(customer_id: str, return_url: str) -> str:
    """Billing portal URL for a customer."""
    _client_ready()
    try:
        session = stripe.billing_portal.Session.create(
            customer=customer_id,
            return_url=return_url,
        )
    except stripe.StripeError as e:
        raise BillingError(f"Failed to create portal session: {e}") from e
    return session.url


def _as_dict(obj) -> dict:
    # StripeObject no longer subclasses dict, so there is no .get on it
    to_dict = getattr(obj, "to_dict", None)
    return to_dict() if callable(to_dict) else dict(obj)


def _period_end(value) -> Optional[str]:
    if not value:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc).isoformat()


def upsert_subscription(
    customer_id: str,
    status: str,
    tier: str,
    subscription_id: Optional[str] = None,
    current_period_end: Optional[str] = None,
    user_id: Optional[str] = None,
    db_path: Optional[Path] = None,
) -> None:
    """Insert or update the subscription row for a Stripe customer."""
    if not user_id:
        user = UserRepository(db_path).get_by_stripe_customer(customer_id)
        user_id = user["id"] if user else None

    with get_db_connection(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(
            """
            INSERT INTO subscriptions
            (id, user_id, stripe_customer_id, stripe_subscription_id, status, tier,
             current_period_end, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(stripe_customer_id) DO UPDATE SET
                user_id = COALESCE(excluded.user_id, subscriptions.user_id),
                stripe_subscription_id = COALESCE(excluded.stripe_subscription_id,
                                                  subscriptions.stripe_subscription_id),
                status = excluded.status,
                tier = excluded.tier,
                current_period_end = COALESCE(excluded.current_period_end,
                                              subscriptions.current_period_end),
                updated_at = excluded.updated_at
            """,
            (str(uuid.uuid4()), user_id, customer_id, subscription_id, status, tier,
             current_period_end, datetime.now(timezone.utc).isoformat())
        )
        conn.commit()


def get_subscription(customer_id: str, db_path: Optional[Path] = None) -> Optional[dict]:
    with get_db_connection(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT * FROM subscriptions WHERE stripe_customer_id = ?",
            (customer_id,)
        )
        row = cursor.fetchone()
        return dict(row) if row else None


def handle_webhook(
    payload: bytes,
    signature: Optional[str],
    db_path: Optional[Path] = None,
) -> dict:
    """Verify and apply a Stripe webhook event.

    Handles checkout completion (upgrade to pro), subscription updates
    and subscription deletion (downgrade to free). Other event types
    are acknowledged and ignored.

    Raises:
        BillingError: Missing signature or secret, or verification failure
    """
    if not signature:
        raise BillingError("Missing stripe-signature header")
    if not Config.STRIPE_WEBHOOK_SECRET:
        raise BillingError("STRIPE_WEBHOOK_SECRET is not configured")

    try:
        event = stripe.Webhook.construct_event(payload, signature, Config.STRIPE_WEBHOOK_SECRET)
    except (ValueError, stripe.SignatureVerificationError) as e:
        raise BillingError(f"Webhook verification failed: {e}") from e

    event_type = event["type"]
    obj = _as_dict(event["data"]["object"])
    logger.info(f"Stripe webhook: {event_type}")

    if event_type == "checkout.session.completed":
        metadata = _as_dict(obj.get("metadata") or {})
        upsert_subscription(
            obj["customer"],
            status="active",
            tier="pro",
            subscription_id=obj.get("subscription"),
            user_id=metadata.get("dzyne_user_id") or obj.get("client_reference_id"),
            db_path=db_path,
        )
    elif event_type == "customer.subscription.updated":
        status = obj.get("status") or "active"
        upsert_subscription(
            obj["customer"],
            status=status,
            tier="pro" if status in ACTIVE_STATUSES else "free",
            subscription_id=obj.get("id"),
            current_period_end=_period_end(obj.get("current_period_end")),
            db_path=db_path,
        )
    elif event_type == "customer.subscription.deleted":
        upsert_subscription(
            obj["customer"],
            status="canceled",
            tier="free",
            subscription_id=obj.get("id"),
            db_path=db_path,
        )

    return {"received": True, "type": event_type}
