"""
Billing GraphQL queries and mutations.

This module contains the app subscription operations:
- Recurring subscription creation
- Active subscription lookup for the current installation
- Subscription cancellation
"""

# =============================================
# SUBSCRIPTION MUTATIONS
# =============================================

APP_SUBSCRIPTION_CREATE_MUTATION = """
mutation AppSubscriptionCreate(
  $name: String!
  $lineItems: [AppSubscriptionLineItemInput!]!
  $returnUrl: URL!
  $test: Boolean
  $trialDays: Int
) {
  appSubscriptionCreate(
    name: $name
    lineItems: $lineItems
    returnUrl: $returnUrl
    test: $test
    trialDays: $trialDays
  ) {
    appSubscription {
      id
      status
    }
    confirmationUrl
    userErrors {
      field
      message
    }
  }
}
"""

APP_SUBSCRIPTION_CANCEL_MUTATION = """
mutation AppSubscriptionCancel($id: ID!) {
  appSubscriptionCancel(id: $id) {
    appSubscription {
      id
      status
    }
    userErrors {
      field
      message
    }
  }
}
"""

# =============================================
# SUBSCRIPTION QUERIES
# =============================================

ACTIVE_SUBSCRIPTIONS_QUERY = """
query ActiveSubscriptions {
  currentAppInstallation {
    activeSubscriptions {
      id
      name
      status
      test
      trialDays
      currentPeriodEnd
    }
  }
}
"""
