"""
Core GraphQL queries used across multiple domains.
"""

# Shop information, stored on the shop row after OAuth
SHOP_INFO_QUERY = """
query GetShopInfo {
  shop {
    id
    name
    email
    myshopifyDomain
    currencyCode
  }
}
"""
