"""Tests for cross-brand recommendations and scripted pairings."""
import pytest

from stylist.database.schemas import RecommendationConfig, RecommendedProduct
from stylist.services.recommendation_engine import (
    RecommendationEngine,
    categories_compatible,
    is_scripted_shopper,
    premium_pairing_config,
    recommendation_engine,
    tier_offer_config,
)


def _by_id(catalog, product_id):
    return next(p for p in catalog if p.id == product_id)


def test_rohan_allen_solly_pairs_with_louis_philippe_trousers(catalog, shoppers):
    source = _by_id(catalog, "prod-as-blue-shirt")
    results = recommendation_engine.recommend(
        source, catalog, shoppers["rohan"], tier_offer_config("Silver")
    )

    assert [r.id for r in results] == ["prod-lp-black-trousers"]
    assert results[0].discount_percent == 20
    assert results[0].expires_in == 120
    assert results[0].recommendation_reason == "Perfect pair with your Allen Solly shirt!"


def test_priya_floral_top_pairs_with_bag_then_kurta(catalog, shoppers):
    source = _by_id(catalog, "prod-w-white-floral-top")
    results = recommendation_engine.recommend(source, catalog, shoppers["priya"])

    assert [r.id for r in results] == ["prod-fg-shoulder-bag", "prod-aurelia-kurta"]
    assert all(r.discount_percent == 30 and r.expires_in == 240 for r in results)


def test_aarav_bewakoof_pairs_with_souled_store(catalog, shoppers):
    source = _by_id(catalog, "prod-bwk-oversized-tee")
    results = recommendation_engine.recommend(source, catalog, shoppers["aarav"])

    assert [r.id for r in results] == ["prod-tss-cargo"]
    assert results[0].recommendation_reason == "Perfect pair with your Bewakoof style!"


def test_scripted_scenario_falls_back_to_general_matcher(make_product, shoppers):
    source = make_product("as-1", "Allen Solly", "Allen Solly Blue Formal Shirt", "Shirts")
    lp_shirt = make_product("lp-1", "Louis Philippe", "Louis Philippe Grey Formal Shirt", "Shirts")
    catalog = [source, lp_shirt]

    results = recommendation_engine.recommend(
        source, catalog, shoppers["rohan"], tier_offer_config("Silver")
    )

    assert [r.id for r in results] == ["lp-1"]
    assert results[0].recommendation_reason == "Perfect pair with your Allen Solly style!"
    assert results[0].discount_percent == 20


def test_general_matcher_crosses_brands_within_cluster(catalog, shoppers):
    source = _by_id(catalog, "prod-pantaloons-top")
    results = recommendation_engine.recommend(
        source, catalog, shoppers["sneha"], tier_offer_config("Silver")
    )

    assert [r.id for r in results] == ["prod-f21-jeans"]
    assert results[0].is_time_limited


def test_general_matcher_skips_incompatible_categories(catalog, make_shopper):
    shopper = make_shopper("Rahul Verma", loyalty_tier="Silver")
    source = _by_id(catalog, "prod-as-blue-shirt")

    results = recommendation_engine.recommend(source, catalog, shopper)

    # The blazer shares the cluster but not a compatible category
    assert [r.id for r in results] == ["prod-lp-black-trousers"]


def test_results_exclude_source_and_duplicates(make_product, make_shopper):
    shopper = make_shopper("Rahul Verma")
    source = make_product("bwk-1", "Bewakoof", "Bewakoof Tee", "T-Shirts")
    pants = [
        make_product(f"tss-{i}", "The Souled Store", f"Cargo {i}", "Pants") for i in range(4)
    ]
    catalog = [source, pants[0], pants[0], source] + pants[1:]

    results = recommendation_engine.recommend(source, catalog, shopper)
    ids = [r.id for r in results]

    assert len(ids) == 3
    assert len(set(ids)) == 3
    assert source.id not in ids


def test_favorite_brands_narrow_candidates(make_product, make_shopper):
    shopper = make_shopper("Rahul Verma", favorite_brands=["Flying Machine"])
    source = make_product("bwk-1", "Bewakoof", "Bewakoof Tee", "T-Shirts")
    catalog = [
        source,
        make_product("tss-1", "The Souled Store", "Cargo", "Pants"),
        make_product("fm-1", "Flying Machine", "Chinos", "Pants"),
    ]

    results = recommendation_engine.recommend(source, catalog, shopper)

    assert [r.id for r in results] == ["fm-1"]


def test_same_brand_allowed_without_cross_brand(make_product, make_shopper):
    shopper = make_shopper("Rahul Verma")
    source = make_product("bwk-1", "Bewakoof", "Bewakoof Tee", "T-Shirts")
    joggers = make_product("bwk-2", "Bewakoof", "Bewakoof Joggers", "Pants")
    config = RecommendationConfig(cross_brand=False, time_limited=False)

    results = recommendation_engine.recommend(source, [source, joggers], shopper, config)

    assert [r.id for r in results] == ["bwk-2"]
    assert results[0].discount_percent is None
    assert results[0].expires_in is None


def test_recommend_never_raises(catalog, make_shopper):
    assert recommendation_engine.recommend(None, catalog, make_shopper("Rahul Verma")) == []


def test_engine_without_scenarios(catalog, shoppers):
    engine = RecommendationEngine(scenarios=())
    source = _by_id(catalog, "prod-as-blue-shirt")

    results = engine.recommend(source, catalog, shoppers["rohan"])

    assert [r.id for r in results] == ["prod-lp-black-trousers"]
    assert results[0].recommendation_reason == "Perfect pair with your Allen Solly style!"


@pytest.mark.parametrize(
    "source,candidate,gold,expected",
    [
        ("Shirts", "Shirts", False, True),
        ("T-Shirts", "Pants", False, True),
        ("Pants", "T-Shirts", False, True),
        ("Tops", "Bottoms", False, True),
        ("Kurta", "Palazzo", False, True),
        ("Shirts", "Blazers", False, False),
        ("Tops", "Accessories", False, False),
        ("Tops", "Accessories", True, True),
        (None, None, False, True),
    ],
)
def test_categories_compatible(source, candidate, gold, expected):
    assert categories_compatible(source, candidate, gold) is expected


def test_recommendation_reason(catalog, shoppers):
    priya = shoppers["priya"]
    source = _by_id(catalog, "prod-w-white-floral-top")
    kurta = RecommendedProduct.from_product(_by_id(catalog, "prod-aurelia-kurta"))
    bag = RecommendedProduct.from_product(_by_id(catalog, "prod-fg-shoulder-bag"))
    same_brand = RecommendedProduct.from_product(source, discount_percent=20, expires_in=120)
    plain = RecommendedProduct.from_product(source)
    own = RecommendedProduct.from_product(source, reason="Hand picked")

    assert recommendation_engine.recommendation_reason(own, priya, source) == "Hand picked"
    assert recommendation_engine.recommendation_reason(kurta, priya, source) == (
        "Matches your Aurelia favorites"
    )
    assert recommendation_engine.recommendation_reason(bag, priya, source) == (
        "Perfect pair with your W style"
    )
    sneha = shoppers["sneha"]
    assert recommendation_engine.recommendation_reason(same_brand, sneha, source) == (
        "20% OFF - Limited time!"
    )
    assert recommendation_engine.recommendation_reason(plain, sneha) == "AI Recommended"


def test_browse_reason(catalog, shoppers, make_product):
    engine = recommendation_engine
    assert engine.browse_reason(_by_id(catalog, "prod-w-white-floral-top"), shoppers["priya"]) == (
        "Matches your W favorites"
    )
    assert engine.browse_reason(_by_id(catalog, "prod-w-white-floral-top"), shoppers["sneha"]) == (
        "Perfect for Tops"
    )
    assert engine.browse_reason(_by_id(catalog, "prod-fm-denim"), shoppers["aarav"]) == (
        "Only 6 left!"
    )
    sized = make_product("x-1", "Zara", "Chinos", "Pants", sizes=["40"], stock_count=20)
    assert engine.browse_reason(sized, shoppers["rohan"]) == "Trending in your size (40)"
    assert engine.browse_reason(_by_id(catalog, "prod-lp-black-trousers"), shoppers["rohan"]) == (
        "AI Recommended for you"
    )


def test_browse_reasons_differ_within_a_reply(catalog, shoppers, make_product):
    plain = [
        make_product(f"x-{n}", "Zara", f"Plain Chinos {n}", "Pants", sizes=[], stock_count=20)
        for n in range(5)
    ]
    reasons = recommendation_engine.browse_reasons(plain, shoppers["rohan"])

    assert reasons[:3] == ["AI Recommended for you", "Picked for your style", "You might also like this"]
    assert reasons[3] == "New from Zara"
    assert len(set(reasons)) == 5

    favorites = [_by_id(catalog, "prod-as-blue-shirt"), _by_id(catalog, "prod-as-white-shirt")]
    first, second = recommendation_engine.browse_reasons(favorites, shoppers["rohan"])
    assert first == "Matches your Allen Solly favorites"
    assert second != first


def test_tier_offer_config():
    assert tier_offer_config("Gold").discount_percent == 30
    assert tier_offer_config("Silver").discount_percent == 20
    assert tier_offer_config("Bronze").discount_percent == 20
    assert tier_offer_config(None).discount_percent == 20
    assert tier_offer_config("Gold").expires_in == 120
    assert tier_offer_config("Gold", expires_in=30).expires_in == 30


def test_premium_pairing_config():
    assert premium_pairing_config("Gold").discount_percent == 30
    assert premium_pairing_config("Silver").discount_percent == 20
    assert premium_pairing_config("Bronze").discount_percent == 10
    assert premium_pairing_config("Gold").expires_in == 240


def test_is_scripted_shopper():
    assert is_scripted_shopper("Rohan Kapoor")
    assert is_scripted_shopper("priya")
    assert not is_scripted_shopper("Sneha Reddy")
    assert not is_scripted_shopper(None)


def test_discount_requires_expiry(catalog):
    with pytest.raises(ValueError):
        RecommendedProduct.from_product(catalog[0], discount_percent=20)
