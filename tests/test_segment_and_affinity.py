"""Tests for shopper segments and brand affinity clusters."""
from stylist.services.brand_affinity import (
    DEFAULT_CLUSTER,
    PREMIUM,
    PROFESSIONAL,
    YOUTH_CASUAL,
    collaborative_brands_of,
)
from stylist.services.segment import Segment, filter_by_segment, infer_segment


def test_cluster_by_exact_brand():
    assert collaborative_brands_of("Bewakoof") == YOUTH_CASUAL
    assert collaborative_brands_of("The Souled Store") == YOUTH_CASUAL
    assert collaborative_brands_of("Forever 21") == PREMIUM


def test_allen_solly_resolves_to_professional():
    """Allen Solly is in two clusters; its own lookup is the professional one."""
    assert collaborative_brands_of("Allen Solly") == PROFESSIONAL
    assert "Allen Solly" in PREMIUM


def test_cluster_by_first_word():
    assert collaborative_brands_of("Pantaloons Junior") == PREMIUM
    assert collaborative_brands_of("  Bewakoof  ") == YOUTH_CASUAL


def test_unknown_brand_gets_default_cluster():
    assert collaborative_brands_of("Zara") == DEFAULT_CLUSTER
    assert collaborative_brands_of("") == DEFAULT_CLUSTER
    assert collaborative_brands_of(None) == DEFAULT_CLUSTER


def test_infer_segment():
    assert infer_segment("Priya Sharma") == Segment.FEMALE
    assert infer_segment("Aarav Mehta") == Segment.MALE
    assert infer_segment("ROHAN") == Segment.MALE
    assert infer_segment("Alex Doe") == Segment.UNKNOWN
    assert infer_segment(None) == Segment.UNKNOWN


def test_filter_by_segment(make_product):
    men = make_product("m1", "Bewakoof", "Tee", gender="men")
    women = make_product("w1", "W", "Top", gender="women")
    pathless = make_product("x1", "Zara", "Scarf", image_url=None)
    products = [men, women, pathless]

    assert filter_by_segment(products, Segment.MALE) == [men]
    assert filter_by_segment(products, Segment.FEMALE) == [women]
    # Unknown segment keeps everything, including products without a path
    assert filter_by_segment(products, Segment.UNKNOWN) == products


def test_women_path_does_not_match_men_segment(catalog):
    filtered = filter_by_segment(catalog, Segment.MALE)
    assert filtered
    assert all("/women/" not in p.image_url for p in filtered)
