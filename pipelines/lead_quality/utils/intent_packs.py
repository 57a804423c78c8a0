"""
Vertical intent keyword packs for audience targeting.

A lead request is matched against each pack's patterns in a fixed order
(most specific vertical first) and the matched pack's high-intent
keywords are appended to the request when building a provider payload.
"""

from typing import Dict, List, Tuple, TypedDict


class IntentPack(TypedDict):
    id: str
    name: str
    keywords: Tuple[str, ...]
    match_patterns: Tuple[str, ...]


INTENT_PACKS: Dict[str, IntentPack] = {
    "remodeling": {
        "id": "remodeling",
        "name": "Remodeling & Renovation",
        "keywords": (
            "kitchen remodel estimate",
            "bathroom remodel estimate",
            "home renovation contractor",
            "remodeling contractor near me",
            "general contractor estimate",
            "renovation quote",
            "kitchen remodel cost",
            "bathroom renovation contractor",
            "home improvement contractor",
            "kitchen renovation near me",
            "bathroom remodel near me",
            "home remodel cost",
            "renovation cost estimate",
            "remodel financing",
        ),
        "match_patterns": (
            "remodel",
            "renov",
            "kitchen",
            "bathroom",
            "home improvement",
            "general contractor",
        ),
    },
    "roofing": {
        "id": "roofing",
        "name": "Roofing Services",
        "keywords": (
            "roof repair estimate",
            "roof replacement cost",
            "roofing contractor near me",
            "roof inspection",
            "roof leak repair",
            "new roof estimate",
            "roofing quote",
            "shingle repair",
            "metal roof installation",
            "roof damage repair",
            "emergency roof repair",
            "roof replacement near me",
        ),
        "match_patterns": ("roof", "shingle", "gutter"),
    },
    "hvac": {
        "id": "hvac",
        "name": "HVAC Services",
        "keywords": (
            "ac repair near me",
            "hvac installation cost",
            "furnace repair estimate",
            "air conditioning replacement",
            "heating repair near me",
            "hvac contractor",
            "ac unit cost",
            "central air installation",
            "heat pump installation",
            "hvac maintenance",
        ),
        "match_patterns": (
            "hvac",
            "air condition",
            "ac repair",
            "ac install",
            "furnace",
            "heating",
            "cooling",
            "heat pump",
        ),
    },
    "plumbing": {
        "id": "plumbing",
        "name": "Plumbing Services",
        "keywords": (
            "plumber near me",
            "plumbing repair estimate",
            "water heater installation",
            "drain cleaning",
            "pipe repair",
            "emergency plumber",
            "sewer line repair",
            "water heater replacement cost",
            "bathroom plumbing",
            "kitchen plumbing repair",
        ),
        "match_patterns": (
            "plumb",
            "water heater",
            "drain",
            "pipe",
            "sewer",
            "leak",
            "faucet",
        ),
    },
    "electrical": {
        "id": "electrical",
        "name": "Electrical Services",
        "keywords": (
            "electrician near me",
            "electrical repair",
            "panel upgrade cost",
            "wiring repair",
            "outlet installation",
            "lighting installation",
            "electrical inspection",
            "generator installation",
            "ev charger installation",
        ),
        "match_patterns": (
            "electric",
            "wiring",
            "outlet",
            "panel",
            "circuit",
            "lighting install",
        ),
    },
    "home_services": {
        "id": "home_services",
        "name": "General Home Services",
        "keywords": (
            "home repair estimate",
            "handyman near me",
            "home maintenance",
            "contractor estimate",
            "home service quote",
            "repair estimate",
            "home contractor",
        ),
        "match_patterns": (
            "home repair",
            "handyman",
            "contractor",
            "home service",
            "maintenance",
        ),
    },
}

# Most specific vertical first
PACK_ORDER = ("remodeling", "roofing", "hvac", "plumbing", "electrical", "home_services")

DEFAULT_PACK_ID = "home_services"

INTENT_STRENGTH_BY_TIER = {
    "hot": ["high"],
    "balanced": ["high", "medium"],
    "scale": ["medium", "low"],
}
DEFAULT_INTENT_STRENGTH = ["high", "medium"]

KEYWORD_SEPARATOR = "\n"


def resolve_intent_pack(lead_request: str) -> IntentPack:
    """
    Resolve the best intent pack for a lead request.

    Examples:
        >>> resolve_intent_pack("Kitchen remodel leads")["id"]
        'remodeling'
        >>> resolve_intent_pack("dog walkers")["id"]
        'home_services'
    """
    normalized = (lead_request or "").lower().strip()

    for pack_id in PACK_ORDER:
        pack = INTENT_PACKS[pack_id]
        if any(pattern in normalized for pattern in pack["match_patterns"]):
            return pack

    return INTENT_PACKS[DEFAULT_PACK_ID]


def build_packed_keywords(lead_request: str, pack: IntentPack) -> str:
    """Newline-joined keywords: the request itself first, then the pack, deduplicated."""
    keywords: List[str] = []
    for keyword in (lead_request.strip(),) + tuple(pack["keywords"]):
        if keyword and keyword not in keywords:
            keywords.append(keyword)
    return KEYWORD_SEPARATOR.join(keywords)


def map_tier_to_intent_strength(tier: str) -> List[str]:
    return list(INTENT_STRENGTH_BY_TIER.get(tier, DEFAULT_INTENT_STRENGTH))
