"""Match accuracy classification from the provider's match-method descriptor."""

from typing import Any, Mapping, Optional

from core.contracts.leads import EffectiveScope, MatchTier
from pipelines.lead_quality.utils.field_access import get_field

B2B_MATCH_BY_FIELD = "SKIPTRACE_B2B_MATCH_BY"
B2C_MATCH_BY_FIELD = "SKIPTRACE_MATCH_BY"

TOKEN_ADDRESS = "ADDRESS"
TOKEN_EMAIL = "EMAIL"
TOKEN_NAME = "NAME"

TIER_NUMERIC_SCORES = {
    "high": 3,
    "medium": 2,
    "low": 1,
}
ABSENT_TIER_SCORE = 0


def match_by_field(scope: EffectiveScope) -> str:
    return B2B_MATCH_BY_FIELD if scope == "commercial" else B2C_MATCH_BY_FIELD


def classify_match_descriptor(descriptor: Optional[str]) -> MatchTier:
    """
    Classify a match-method descriptor such as "ADDRESS,EMAIL,NAME".

    Token tests are substring checks on the uppercased descriptor, so
    COMPANY_ADDRESS counts as ADDRESS. First matching rule wins:
    ADDRESS + EMAIL is high, NAME + ADDRESS is medium, anything else low.
    """
    matched_by = (descriptor or "").upper()
    if not matched_by:
        return "low"

    has_address = TOKEN_ADDRESS in matched_by
    has_email = TOKEN_EMAIL in matched_by
    has_name = TOKEN_NAME in matched_by

    if has_address and has_email:
        return "high"
    if has_name and has_address:
        return "medium"
    return "low"


def evaluate_match_by_tier(contact: Mapping[str, Any], scope: EffectiveScope) -> MatchTier:
    """Read the scope-appropriate descriptor from the contact and classify it."""
    return classify_match_descriptor(get_field(contact, match_by_field(scope)))


def tier_to_numeric_score(tier: Optional[str]) -> int:
    """Map a tier to 0-3. None or an unknown tier scores 0."""
    if tier is None:
        return ABSENT_TIER_SCORE
    return TIER_NUMERIC_SCORES.get(tier, ABSENT_TIER_SCORE)
