"""Cross-brand recommendation engine with scripted demo pairings."""

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from stylist.analytics.logger import logger
from stylist.database.schemas import Product, RecommendationConfig, RecommendedProduct, Shopper
from stylist.services.brand_affinity import collaborative_brands_of
from stylist.services.segment import filter_by_segment, infer_segment
from stylist.utils.config import settings

MAX_RECOMMENDATIONS = 3

# Either direction of each pair is compatible
COMPLEMENTARY_CATEGORIES: Tuple[Tuple[str, str], ...] = (
    ("tee", "pant"),
    ("shirt", "pant"),
    ("top", "bottom"),
    ("kurta", "palazzo"),
)

TIER_OFFER_DISCOUNTS = {"Gold": 30, "Silver": 20, "Bronze": 20}
PREMIUM_PAIRING_DISCOUNTS = {"Gold": 30, "Silver": 20, "Bronze": 10}
BROWSE_FALLBACK_REASONS = ("AI Recommended for you", "Picked for your style", "You might also like this")


def _mentions(product: Product, *fragments: str) -> bool:
    """True if the brand or name contains any fragment (case-insensitive)."""
    brand = (product.brand or "").lower()
    name = (product.name or "").lower()
    return any(f in brand or f in name for f in fragments)


def _name_has(product: Product, *words: str) -> bool:
    name = (product.name or "").lower()
    return any(w in name for w in words)


@dataclass(frozen=True)
class Pairing:
    """One hand-picked item a scripted scenario recommends."""

    matches: Callable[[Product], bool]
    discount_percent: float
    expires_in: int
    reason: str


@dataclass(frozen=True)
class ScriptedScenario:
    """A curated (shopper, source product) pairing returned ahead of the general matcher."""

    name: str
    shopper_fragment: str
    source_fragments: Tuple[str, ...]
    pairings: Tuple[Pairing, ...] = field(default_factory=tuple)

    def applies_to(self, shopper: Shopper, source: Product) -> bool:
        if self.shopper_fragment not in (shopper.name or "").lower():
            return False
        return _mentions(source, *self.source_fragments)

    def resolve(self, source: Product, catalog: Sequence[Product]) -> List[RecommendedProduct]:
        results: List[RecommendedProduct] = []
        used_ids = {source.id}
        for pairing in self.pairings:
            match = next(
                (p for p in catalog if p.id not in used_ids and pairing.matches(p)), None
            )
            if match is None:
                continue
            used_ids.add(match.id)
            results.append(
                RecommendedProduct.from_product(
                    match,
                    discount_percent=pairing.discount_percent,
                    expires_in=pairing.expires_in,
                    reason=pairing.reason,
                )
            )
        return results


SCRIPTED_SCENARIOS: Tuple[ScriptedScenario, ...] = (
    ScriptedScenario(
        name="aarav_bewakoof_to_souled_store",
        shopper_fragment="aarav",
        source_fragments=("bewakoof", "oversized", "graphic"),
        pairings=(
            Pairing(
                matches=lambda p: _mentions(p, "souled"),
                discount_percent=20,
                expires_in=120,
                reason="Perfect pair with your Bewakoof style!",
            ),
        ),
    ),
    ScriptedScenario(
        name="rohan_allen_solly_to_louis_philippe",
        shopper_fragment="rohan",
        source_fragments=("allen solly",),
        pairings=(
            Pairing(
                matches=lambda p: (
                    _mentions(p, "louis philippe")
                    and _name_has(p, "black", "trouser", "pant")
                    and _name_has(p, "slim", "fit", "trouser")
                ),
                discount_percent=20,
                expires_in=120,
                reason="Perfect pair with your Allen Solly shirt!",
            ),
        ),
    ),
    ScriptedScenario(
        name="priya_floral_top_to_bag_and_kurta",
        shopper_fragment="priya",
        source_fragments=("white floral",),
        pairings=(
            Pairing(
                matches=lambda p: (
                    _mentions(p, "forever glam")
                    and _name_has(p, "bag", "shoulder", "off-white", "white")
                ),
                discount_percent=30,
                expires_in=240,
                reason="Perfect accessory to complete your look!",
            ),
            Pairing(
                matches=lambda p: (
                    _mentions(p, "aurelia") and _name_has(p, "kurta", "floral", "embroidered")
                ),
                discount_percent=30,
                expires_in=240,
                reason="Perfect pair with your ethnic style!",
            ),
        ),
    ),
)

SCRIPTED_SHOPPER_FRAGMENTS = tuple(s.shopper_fragment for s in SCRIPTED_SCENARIOS)


def is_scripted_shopper(name: Optional[str]) -> bool:
    """True for the demo shoppers that have curated scenarios."""
    lowered = (name or "").lower()
    return any(fragment in lowered for fragment in SCRIPTED_SHOPPER_FRAGMENTS)


def categories_compatible(source: Optional[str], candidate: Optional[str], gold: bool) -> bool:
    """Same category, a complementary pair, or any accessory for Gold shoppers."""
    if source == candidate:
        return True
    src = (source or "").lower()
    cand = (candidate or "").lower()
    for a, b in COMPLEMENTARY_CATEGORIES:
        if (a in src and b in cand) or (b in src and a in cand):
            return True
    return gold and "accessor" in cand


def favors_brand(shopper: Shopper, brand: str) -> bool:
    brand = (brand or "").lower()
    return any(b.lower() in brand for b in shopper.favorite_brands if b)


def tier_offer_config(tier: Optional[str], expires_in: Optional[int] = None) -> RecommendationConfig:
    """Upsell offer config used on the WhatsApp channel."""
    return RecommendationConfig(
        cross_brand=True,
        time_limited=True,
        discount_percent=TIER_OFFER_DISCOUNTS.get(tier or "", 20),
        expires_in=expires_in or settings.default_offer_minutes,
    )


def premium_pairing_config(tier: Optional[str]) -> RecommendationConfig:
    """Longer-lived, tier-scaled config for premium cross-brand pairings."""
    return RecommendationConfig(
        cross_brand=True,
        time_limited=True,
        discount_percent=PREMIUM_PAIRING_DISCOUNTS.get(tier or "", 10),
        expires_in=240,
    )


class RecommendationEngine:
    """Select and rank complementary products for a shopper."""

    def __init__(self, scenarios: Iterable[ScriptedScenario] = SCRIPTED_SCENARIOS):
        self.scenarios: Tuple[ScriptedScenario, ...] = tuple(scenarios)

    def recommend(
        self,
        source: Product,
        catalog: Sequence[Product],
        shopper: Shopper,
        config: Optional[RecommendationConfig] = None,
    ) -> List[RecommendedProduct]:
        """Return up to three recommendations; never raises.

        Scripted scenarios are tried first, in order, against the unfiltered
        catalog. The first one that yields anything wins. Otherwise the
        general cross-brand matcher runs on the segment-filtered catalog.
        """
        config = config or RecommendationConfig()
        try:
            scripted = self.scripted_recommendations(source, catalog, shopper)
            if scripted:
                return scripted[:MAX_RECOMMENDATIONS]
            return self.cross_brand_recommendations(source, catalog, shopper, config)
        except Exception as e:
            logger.error(
                f"Recommendation failed for source {getattr(source, 'id', 'unknown')}: {e}",
                exc_info=True,
            )
            return []

    def scripted_recommendations(
        self, source: Product, catalog: Sequence[Product], shopper: Shopper
    ) -> List[RecommendedProduct]:
        for scenario in self.scenarios:
            if not scenario.applies_to(shopper, source):
                continue
            results = scenario.resolve(source, catalog)
            if results:
                logger.info(
                    f"Scripted scenario {scenario.name} matched: "
                    f"{', '.join(r.name for r in results)}"
                )
                return results
            logger.debug(f"Scripted scenario {scenario.name} found no catalog match")
        return []

    def cross_brand_recommendations(
        self,
        source: Product,
        catalog: Sequence[Product],
        shopper: Shopper,
        config: RecommendationConfig,
    ) -> List[RecommendedProduct]:
        segment = infer_segment(shopper.name)
        candidates_pool = filter_by_segment(catalog, segment)
        cluster = collaborative_brands_of(source.brand)
        gold = shopper.loyalty_tier == "Gold"

        seen = set()
        candidates: List[Product] = []
        for p in candidates_pool:
            if p.id == source.id or p.id in seen:
                continue
            if p.brand not in cluster:
                continue
            if config.cross_brand and p.brand == source.brand:
                continue
            if not categories_compatible(source.category, p.category, gold):
                continue
            seen.add(p.id)
            candidates.append(p)

        preferred = [p for p in candidates if favors_brand(shopper, p.brand)]
        chosen = (preferred or candidates)[:MAX_RECOMMENDATIONS]

        discount, expires_in = None, None
        if config.time_limited and config.discount_percent is not None:
            discount = config.discount_percent
            expires_in = config.expires_in or settings.default_offer_minutes

        return [
            RecommendedProduct.from_product(
                p,
                discount_percent=discount,
                expires_in=expires_in,
                reason=f"Perfect pair with your {source.brand} style!",
            )
            for p in chosen
        ]

    def recommendation_reason(
        self,
        product: RecommendedProduct,
        shopper: Shopper,
        source: Optional[Product] = None,
    ) -> str:
        """Human-readable reason for an offered product."""
        if product.recommendation_reason:
            return product.recommendation_reason
        if favors_brand(shopper, product.brand):
            return f"Matches your {product.brand} favorites"
        if source is not None and product.brand != source.brand:
            return f"Perfect pair with your {source.brand} style"
        if product.is_time_limited:
            return f"{product.discount_percent:g}% OFF - Limited time!"
        return "AI Recommended"

    def _browse_candidates(self, product: Product, shopper: Shopper) -> List[str]:
        candidates = []
        if favors_brand(shopper, product.brand):
            candidates.append(f"Matches your {product.brand} favorites")
        if shopper.style_preference and product.category == shopper.style_preference:
            candidates.append(f"Perfect for {shopper.style_preference}")
        if 0 < product.stock_count < 10:
            candidates.append(f"Only {product.stock_count} left!")
        if shopper.size and shopper.size in product.sizes:
            candidates.append(f"Trending in your size ({shopper.size})")
        candidates.extend(BROWSE_FALLBACK_REASONS)
        candidates.append(f"New from {product.brand}")
        return candidates

    def browse_reason(self, product: Product, shopper: Shopper) -> str:
        """Reason shown next to products suggested while browsing."""
        return self._browse_candidates(product, shopper)[0]

    def browse_reasons(self, products: Sequence[Product], shopper: Shopper) -> List[str]:
        """One reason per product, never repeating a reason within the same reply."""
        used = set()
        reasons = []
        for product in products:
            candidates = self._browse_candidates(product, shopper)
            reason = next((r for r in candidates if r not in used), f"Pick {len(reasons) + 1} for you")
            used.add(reason)
            reasons.append(reason)
        return reasons


# Global recommendation engine instance
recommendation_engine = RecommendationEngine()
