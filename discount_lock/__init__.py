"""Sale Discount Lock: Shopify checkout extension core and app backend."""
