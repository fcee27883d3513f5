"""
Product-related GraphQL queries.

Used by the admin UI to pick products and variants when building rules.
"""

# Product search using Shopify search syntax (title:*, sku:*, tag:*...)
PRODUCTS_SEARCH_QUERY = """
query SearchProducts($first: Int!, $query: String) {
  products(first: $first, query: $query) {
    edges {
      node {
        id
        title
        handle
        variants(first: 100) {
          edges {
            node {
              id
              title
              sku
            }
          }
        }
      }
    }
  }
}
"""
