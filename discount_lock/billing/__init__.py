"""Shopify app billing: plan table and the /api/billing routes."""

from .plans import BILLING_PLANS, BillingPlan, get_plan

__all__ = ["BILLING_PLANS", "BillingPlan", "get_plan"]
