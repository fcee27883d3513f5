"""
Shopify GraphQL client for app billing operations.

Wraps the app subscription mutations and the active subscription lookup
of the current app installation.
"""

import logging
from typing import Any, Dict, List

from order_limits.db.queries import (
    ACTIVE_SUBSCRIPTIONS_QUERY,
    APP_SUBSCRIPTION_CANCEL_MUTATION,
    APP_SUBSCRIPTION_CREATE_MUTATION,
)

from .base_client import BaseShopifyGraphQLClient

logger = logging.getLogger(__name__)


class ShopifyBillingClient(BaseShopifyGraphQLClient):
    """
    Specialized client for Shopify app subscriptions.
    """

    async def create_subscription(
        self,
        name: str,
        amount: float,
        currency_code: str,
        interval: str,
        return_url: str,
        trial_days: int,
        test: bool,
    ) -> Dict[str, Any]:
        """
        Create a recurring app subscription.

        Args:
            name: Plan name shown to the merchant
            amount: Recurring price
            currency_code: ISO currency code
            interval: EVERY_30_DAYS or ANNUAL
            return_url: Where Shopify sends the merchant after approval
            trial_days: Trial length in days
            test: Create a test charge

        Returns:
            Dict with ``appSubscription`` ({id, status}) and ``confirmationUrl``

        Raises:
            ShopifyAPIException: If Shopify returns userErrors
        """
        variables = {
            "name": name,
            "returnUrl": return_url,
            "test": test,
            "trialDays": trial_days,
            "lineItems": [
                {
                    "plan": {
                        "appRecurringPricingDetails": {
                            "price": {"amount": amount, "currencyCode": currency_code},
                            "interval": interval,
                        }
                    }
                }
            ],
        }

        payload = await self._execute_mutation(
            APP_SUBSCRIPTION_CREATE_MUTATION, variables, "appSubscriptionCreate"
        )
        subscription = payload.get("appSubscription") or {}
        logger.info(
            f"💳 Subscription created for {self.shop_domain}: {subscription.get('id')} "
            f"({subscription.get('status')}, test={test})"
        )
        return payload

    async def get_active_subscriptions(self) -> List[Dict[str, Any]]:
        """
        List the active subscriptions of the current app installation.

        Returns:
            List of subscription dicts (id, name, status, test, trialDays, currentPeriodEnd)
        """
        result = await self._execute_query(ACTIVE_SUBSCRIPTIONS_QUERY)
        installation = result.get("currentAppInstallation") or {}
        return installation.get("activeSubscriptions") or []

    async def cancel_subscription(self, subscription_id: str) -> Dict[str, Any]:
        """
        Cancel an app subscription.

        Returns:
            Dict: appSubscription ({id, status})
        """
        payload = await self._execute_mutation(
            APP_SUBSCRIPTION_CANCEL_MUTATION, {"id": subscription_id}, "appSubscriptionCancel"
        )
        subscription = payload.get("appSubscription") or {}
        logger.info(f"🛑 Subscription {subscription_id} cancelled for {self.shop_domain}")
        return subscription
