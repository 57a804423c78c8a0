"""
Lead Scoring Agent for the Lead Quality pipeline.

Computes a 0-100 quality score per lead from contact completeness and
match accuracy, stamps the requested quality tier, and orders leads best
first. Pure function implementation with no I/O side effects.

CRITICAL INVARIANTS:
- Scoring is deterministic (same input → same output)
- All weights are module-level constants
- No implicit truthiness (explicit presence checks)
- Scores are clamped to 0..100
- Input leads are never mutated; ordering is a stable descending sort

Integration Position:
    RecipeEngineAgent
           ↓
    LeadScoringAgent           ← THIS AGENT
           ↓
    ComplianceAgent

Input: recipe_leads, quality_tier
Output: scored_leads, quality_stats
"""

import re
from typing import Any, Dict, List, Mapping, Tuple, TypedDict

from core.contracts.leads import Lead
from core.logger import get_logger, log_counts
from pipelines.core.base_agent import BaseAgent
from pipelines.lead_quality.agents.lead_formatter_agent import finalize_lead
from pipelines.lead_quality.config import DEFAULT_QUALITY_TIER

logger = get_logger(__name__)


# =============================================================================
# SCORING WEIGHT CONSTANTS (DETERMINISTIC)
# =============================================================================

BASE_SCORE = 50
MIN_SCORE = 0
MAX_SCORE = 100

# Match score bonus, checked top-down. Scores above 3 are not produced
# by the classifier today.
MATCH_SCORE_BONUSES = (
    (7, 20),
    (5, 15),
    (3, 10),
    (1, 5),
)

BONUS_WIRELESS_PHONE = 20
BONUS_ANY_PHONE = 10
PENALTY_NO_PHONE = -40

BONUS_FULL_ADDRESS = 10
BONUS_CITY_STATE = 5
MIN_STREET_CHARS = 5
ZIP_PREFIX_PATTERN = re.compile(r"^\d{5}")

BONUS_VALIDATED_EMAIL = 10
BONUS_ANY_EMAIL = 5

PENALTY_SUPPRESSED = -25

# Quality buckets for aggregate stats
HIGH_QUALITY_MIN = 70
MEDIUM_QUALITY_MIN = 50

TOP_DECILE_FRACTION = 0.1


# =============================================================================
# TYPE DEFINITIONS
# =============================================================================

class QualityScoreBreakdown(TypedDict):
    """Per-component contributions to a lead's quality score."""
    base: int
    match_score_bonus: int
    phone_bonus: int
    address_bonus: int
    email_bonus: int
    suppression_penalty: int
    total: int


class QualityStats(TypedDict):
    """Aggregate quality statistics for a batch of scored leads."""
    avg_quality_score: float
    max_quality_score: int
    min_quality_score: int
    top_decile_score: int
    high_quality_count: int
    medium_quality_count: int
    low_quality_count: int


# =============================================================================
# PURE SCORING FUNCTIONS
# =============================================================================

def _has_value(value: Any) -> bool:
    """
    Check if a value is present and non-empty.

    Explicit presence check - no implicit truthiness.

    Args:
        value: Any field value.

    Returns:
        True if value is present and non-empty string/non-None.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return len(value.strip()) > 0
    return True


def _match_score_bonus(match_score: int) -> int:
    for threshold, bonus in MATCH_SCORE_BONUSES:
        if match_score >= threshold:
            return bonus
    return 0


def _phone_bonus(lead: Mapping[str, Any]) -> int:
    if _has_value(lead.get("wireless_phones")):
        return BONUS_WIRELESS_PHONE
    if _has_value(lead.get("best_phone")):
        return BONUS_ANY_PHONE
    if not _has_value(lead.get("phone")):
        return PENALTY_NO_PHONE
    return 0


def _address_bonus(lead: Mapping[str, Any]) -> int:
    address = lead.get("address") or ""
    zip_code = lead.get("zip") or ""

    has_street = len(address.strip()) > MIN_STREET_CHARS
    has_zip = bool(ZIP_PREFIX_PATTERN.match(zip_code))
    if has_street and has_zip:
        return BONUS_FULL_ADDRESS
    if _has_value(lead.get("city")) and _has_value(lead.get("state")):
        return BONUS_CITY_STATE
    return 0


def _email_bonus(lead: Mapping[str, Any]) -> int:
    status = (lead.get("email_validation_status") or "").lower()
    if "valid" in status:
        return BONUS_VALIDATED_EMAIL
    if "@" in (lead.get("email") or ""):
        return BONUS_ANY_EMAIL
    return 0


def calculate_quality_score_breakdown(
    lead: Mapping[str, Any],
    suppressed: bool = False,
) -> QualityScoreBreakdown:
    """
    Compute the quality score with each component exposed.

    Args:
        lead: Lead record to score.
        suppressed: Apply the suppression penalty.

    Returns:
        QualityScoreBreakdown whose total is clamped to 0..100.
    """
    match_score = lead.get("match_score") or 0

    breakdown: QualityScoreBreakdown = {
        "base": BASE_SCORE,
        "match_score_bonus": _match_score_bonus(match_score),
        "phone_bonus": _phone_bonus(lead),
        "address_bonus": _address_bonus(lead),
        "email_bonus": _email_bonus(lead),
        "suppression_penalty": PENALTY_SUPPRESSED if suppressed else 0,
        "total": 0,
    }

    raw_total = (
        breakdown["base"]
        + breakdown["match_score_bonus"]
        + breakdown["phone_bonus"]
        + breakdown["address_bonus"]
        + breakdown["email_bonus"]
        + breakdown["suppression_penalty"]
    )
    breakdown["total"] = max(MIN_SCORE, min(MAX_SCORE, raw_total))
    return breakdown


def calculate_quality_score(lead: Mapping[str, Any], suppressed: bool = False) -> int:
    """Quality score (0-100) for a single lead."""
    return calculate_quality_score_breakdown(lead, suppressed)["total"]


def calculate_quality_stats(leads: List[Mapping[str, Any]]) -> QualityStats:
    """
    Compute aggregate quality statistics.

    Args:
        leads: Scored leads.

    Returns:
        QualityStats. All zeros for an empty batch.
    """
    if not leads:
        return {
            "avg_quality_score": 0.0,
            "max_quality_score": 0,
            "min_quality_score": 0,
            "top_decile_score": 0,
            "high_quality_count": 0,
            "medium_quality_count": 0,
            "low_quality_count": 0,
        }

    scores = [lead.get("quality_score") or 0 for lead in leads]
    sorted_scores = sorted(scores, reverse=True)

    top_decile_index = int(len(sorted_scores) * TOP_DECILE_FRACTION)

    return {
        "avg_quality_score": round(sum(scores) / len(scores), 1),
        "max_quality_score": sorted_scores[0],
        "min_quality_score": sorted_scores[-1],
        "top_decile_score": sorted_scores[top_decile_index],
        "high_quality_count": sum(1 for s in scores if s >= HIGH_QUALITY_MIN),
        "medium_quality_count": sum(
            1 for s in scores if MEDIUM_QUALITY_MIN <= s < HIGH_QUALITY_MIN
        ),
        "low_quality_count": sum(1 for s in scores if s < MEDIUM_QUALITY_MIN),
    }


def assign_quality_score(
    lead: Mapping[str, Any],
    tier: str,
    suppressed: bool = False,
) -> Lead:
    """
    Return a copy of `lead` with quality_score and quality_tier set.

    Args:
        lead: Lead to score.
        tier: Quality tier the batch was requested at.
        suppressed: Apply the suppression penalty.

    Returns:
        New Lead dict.
    """
    scored = finalize_lead(lead)
    scored["quality_score"] = calculate_quality_score(scored, suppressed)
    scored["quality_tier"] = tier
    return scored


def process_leads_with_quality(
    leads: List[Mapping[str, Any]],
    tier: str,
) -> Tuple[List[Lead], QualityStats]:
    """
    Score a batch, order it best first and compute stats.

    Ties keep their incoming order.

    Args:
        leads: Leads from the recipe engine.
        tier: Quality tier the batch was requested at.

    Returns:
        Tuple of (scored leads sorted by quality_score desc, stats).
    """
    scored = [assign_quality_score(lead, tier) for lead in leads]
    scored.sort(key=lambda lead: lead["quality_score"], reverse=True)
    return scored, calculate_quality_stats(scored)


# =============================================================================
# LEAD SCORING AGENT
# =============================================================================

class LeadScoringAgent(BaseAgent):
    """
    Agent that computes quality scores for recipe leads.

    Contract:
        Input: recipe_leads (from RecipeEngineAgent), quality_tier
        Output: scored_leads, quality_stats

    Invariants:
        - Deterministic (same input → same scores)
        - Every lead field preserved; only quality_score/quality_tier set
        - No I/O, no side effects
    """

    output_keys = ("scored_leads", "quality_stats")

    def __init__(self) -> None:
        """Initialize the Lead Scoring Agent."""
        super().__init__(name="LeadScoringAgent")

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Score recipe leads with quality metrics.

        Args:
            input_data: Dict with 'recipe_leads' from RecipeEngineAgent.

        Returns:
            Dict with 'scored_leads' and 'quality_stats'.

        Raises:
            ValueError: If recipe_leads is missing (contract violation).
        """
        recipe_leads = self.require(input_data, "recipe_leads", list, "RecipeEngineAgent")
        tier = input_data.get("quality_tier") or DEFAULT_QUALITY_TIER

        logger.info(f"Scoring {len(recipe_leads)} leads (tier={tier})")

        scored_leads, stats = process_leads_with_quality(recipe_leads, tier)

        if scored_leads:
            logger.info(
                f"Scoring complete: avg={stats['avg_quality_score']}, "
                f"max={stats['max_quality_score']}, min={stats['min_quality_score']}"
            )
            log_counts(logger, "Quality buckets", {
                "high": stats["high_quality_count"],
                "medium": stats["medium_quality_count"],
                "low": stats["low_quality_count"],
            })
        else:
            logger.info("No leads to score")

        return {
            "scored_leads": scored_leads,
            "quality_stats": stats,
        }
