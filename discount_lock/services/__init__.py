"""Service components shared by the routers and the checkout extension."""
