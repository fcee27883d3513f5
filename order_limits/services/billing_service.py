"""
Billing service for the app's recurring subscription.

Creates, checks and cancels the Shopify app subscription of a shop and
decides whether a shop may use the app (active subscription or trial).
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from order_limits.core.config import get_settings
from order_limits.db.models import Shop, as_utc
from order_limits.db.repositories import ShopRepository
from order_limits.db.shopify_clients import ShopifyBillingClient
from order_limits.utils.error_handler import (
    AuthenticationException,
    NotFoundException,
    ShopifyAPIException,
    SubscriptionRequiredException,
)

logger = logging.getLogger(__name__)

STATUS_ACTIVE = "ACTIVE"


class BillingService:
    """
    Wraps the Shopify billing client with persistence of the subscription state.
    """

    def __init__(self, shop_repository: Optional[ShopRepository] = None):
        self.settings = get_settings()
        self.shop_repository = shop_repository or ShopRepository()

    async def _get_installed_shop(self, shop: str) -> Shop:
        """
        Raises:
            AuthenticationException: If the shop has no stored access token
        """
        record = await self.shop_repository.get(shop)
        if record is None or not record.access_token:
            raise AuthenticationException(f"Shop {shop} is not installed or has no access token")
        return record

    def _client(self, record: Shop) -> ShopifyBillingClient:
        return ShopifyBillingClient(record.id, record.access_token)

    def return_url(self, shop: str) -> str:
        return f"{self.settings.SHOPIFY_APP_URL}/api/billing/callback?shop={shop}"

    async def create_recurring_charge(self, shop: str) -> str:
        """
        Create the recurring subscription and store its id/status.

        Args:
            shop: myshopify domain

        Returns:
            str: Confirmation URL the merchant must visit to approve the charge

        Raises:
            ShopifyAPIException: If Shopify returns userErrors
        """
        record = await self._get_installed_shop(shop)

        async with self._client(record) as client:
            payload = await client.create_subscription(
                name=self.settings.BILLING_PLAN_NAME,
                amount=self.settings.BILLING_AMOUNT,
                currency_code=self.settings.BILLING_CURRENCY,
                interval=self.settings.BILLING_INTERVAL,
                return_url=self.return_url(shop),
                trial_days=self.settings.FREE_TRIAL_DAYS,
                test=self.settings.billing_test_mode,
            )

        subscription = payload.get("appSubscription") or {}
        await self.shop_repository.update_subscription(shop, subscription.get("id"), subscription.get("status"))

        confirmation_url = payload.get("confirmationUrl")
        if not confirmation_url:
            raise ShopifyAPIException("appSubscriptionCreate returned no confirmation URL")
        return confirmation_url

    async def check_subscription_status(self, shop: str, record: Optional[Shop] = None) -> Dict[str, Any]:
        """
        Query the active subscriptions and persist the first one.

        Returns:
            Dict: ``{"hasActiveSubscription": bool, "subscription": dict | None}``
        """
        record = record or await self._get_installed_shop(shop)

        async with self._client(record) as client:
            subscriptions = await client.get_active_subscriptions()

        if not subscriptions:
            return {"hasActiveSubscription": False, "subscription": None}

        subscription = subscriptions[0]
        await self.shop_repository.update_subscription(shop, subscription.get("id"), subscription.get("status"))

        return {
            "hasActiveSubscription": subscription.get("status") == STATUS_ACTIVE,
            "subscription": subscription,
        }

    async def cancel_subscription(self, shop: str, subscription_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Cancel a subscription (the stored one by default) and persist its status.

        Raises:
            NotFoundException: If no subscription id is given or stored
        """
        record = await self._get_installed_shop(shop)
        subscription_id = subscription_id or record.subscription_id
        if not subscription_id:
            raise NotFoundException("No subscription to cancel", resource="subscription")

        async with self._client(record) as client:
            subscription = await client.cancel_subscription(subscription_id)

        await self.shop_repository.update_subscription(
            shop, subscription.get("id") or subscription_id, subscription.get("status")
        )
        return subscription

    # === SUBSCRIPTION GATE ===

    def trial_ends_at(self, record: Shop) -> datetime:
        return as_utc(record.created_at) + timedelta(days=self.settings.FREE_TRIAL_DAYS)

    def is_in_trial(self, record: Shop, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now <= self.trial_ends_at(record)

    async def ensure_active_subscription(self, shop: str) -> None:
        """
        Allow the request if the shop has an active subscription or is in its trial.

        Unknown shops pass: they start their trial when first stored. The
        remote status is used when a token is stored; if Shopify cannot be
        reached the stored status is used instead.

        Raises:
            SubscriptionRequiredException: Trial over and no active subscription
        """
        if not self.settings.BILLING_ENFORCED:
            return

        record = await self.shop_repository.get(shop)
        if record is None:
            return

        has_active: Optional[bool] = None
        if record.access_token:
            try:
                status = await self.check_subscription_status(shop, record)
                has_active = status["hasActiveSubscription"]
            except ShopifyAPIException as e:
                logger.warning(f"⚠️ Could not check subscription for {shop}, using stored status: {e}")

        if has_active is None:
            has_active = record.subscription_status == STATUS_ACTIVE

        if has_active or self.is_in_trial(record):
            return

        logger.info(f"🔒 Subscription required for {shop} (trial ended {self.trial_ends_at(record).isoformat()})")
        raise SubscriptionRequiredException(shop=shop, trial_ends_at=self.trial_ends_at(record))
