"""Brand affinity clusters for cross-brand suggestions."""
from typing import Dict, FrozenSet

YOUTH_CASUAL = frozenset({"Bewakoof", "The Souled Store", "Flying Machine"})
PROFESSIONAL = frozenset({"Louis Philippe", "Van Heusen", "Allen Solly"})
PREMIUM = frozenset({"Pantaloons", "Forever 21", "Allen Solly"})
DEFAULT_CLUSTER = frozenset({"Bewakoof", "Van Heusen", "Allen Solly"})

# Allen Solly sits in two clusters; its own lookup resolves to the professional one.
BRAND_CLUSTERS: Dict[str, FrozenSet[str]] = {
    "Bewakoof": YOUTH_CASUAL,
    "The Souled Store": YOUTH_CASUAL,
    "Flying Machine": YOUTH_CASUAL,
    "Louis Philippe": PROFESSIONAL,
    "Van Heusen": PROFESSIONAL,
    "Allen Solly": PROFESSIONAL,
    "Pantaloons": PREMIUM,
    "Forever 21": PREMIUM,
}


def collaborative_brands_of(brand: str) -> FrozenSet[str]:
    """Cluster containing ``brand``.

    Matched by exact name, then by the first word of the name, then the
    default cluster.
    """
    normalized = (brand or "").strip()
    if normalized in BRAND_CLUSTERS:
        return BRAND_CLUSTERS[normalized]
    first_word = normalized.split(" ")[0] if normalized else ""
    return BRAND_CLUSTERS.get(first_word, DEFAULT_CLUSTER)
