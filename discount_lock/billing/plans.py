from decimal import Decimal

from pydantic import BaseModel


class BillingPlan(BaseModel):
    name: str
    amount: Decimal
    currency_code: str = "USD"
    interval: str = "EVERY_30_DAYS"
    trial_days: int = 14

    def to_line_item(self) -> dict:
        """``AppSubscriptionLineItemInput`` for appSubscriptionCreate."""
        return {
            "plan": {
                "appRecurringPricingDetails": {
                    "price": {
                        "amount": str(self.amount),
                        "currencyCode": self.currency_code,
                    },
                    "interval": self.interval,
                }
            }
        }


BILLING_PLANS: dict[str, BillingPlan] = {
    "Basic Plan": BillingPlan(name="Basic Plan", amount=Decimal("2.99")),
    "Pro Plan": BillingPlan(name="Pro Plan", amount=Decimal("4.99")),
}


def get_plan(name: str | None) -> BillingPlan | None:
    if not name:
        return None
    return BILLING_PLANS.get(name)
