"""Loyalty-tier pricing for carts."""
from typing import Dict, Any, Optional

from stylist.analytics.logger import logger

# Share of the cart total a tier may redeem with points
TIER_RATES = {
    "Gold": 0.30,
    "Silver": 0.20,
    "Bronze": 0.10,
}
DEFAULT_RATE = TIER_RATES["Bronze"]


class LoyaltyPricing:
    """Compute loyalty discounts and final totals."""

    def __init__(self, rates: Optional[Dict[str, float]] = None):
        self.rates = dict(rates or TIER_RATES)

    def rate_for(self, tier: Optional[str]) -> float:
        """Redemption rate for a tier; unknown tiers behave as Bronze."""
        return self.rates.get(tier or "", DEFAULT_RATE)

    def loyalty_discount(self, tier: Optional[str], points: int, cart_total: float) -> float:
        """Points redeemable against ``cart_total``.

        The discount is capped both by the shopper's points and by the tier's
        share of the total, and is never negative.
        """
        cap = max(0.0, cart_total) * self.rate_for(tier)
        discount = min(max(0, points or 0), cap)
        return round(max(0.0, discount), 2)

    def price_cart(self, tier: Optional[str], points: int, cart_total: float) -> Dict[str, Any]:
        """Breakdown of a cart total after the loyalty discount.

        Returns:
            Dictionary with: total, discount, final_total, rate
        """
        discount = self.loyalty_discount(tier, points, cart_total)
        final_total = round(max(0.0, cart_total - discount), 2)
        logger.debug(
            f"Priced cart for tier {tier}: total={cart_total} discount={discount} final={final_total}"
        )
        return {
            "total": round(cart_total, 2),
            "discount": discount,
            "final_total": final_total,
            "rate": self.rate_for(tier),
        }


# Global loyalty pricing instance
loyalty_pricing = LoyaltyPricing()


def loyalty_discount(tier: Optional[str], points: int, cart_total: float) -> float:
    return loyalty_pricing.loyalty_discount(tier, points, cart_total)
