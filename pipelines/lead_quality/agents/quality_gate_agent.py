"""
Quality Gate Agent for the Lead Quality pipeline.

Filters scored, compliant leads against tier-specific thresholds and
builds the delivery quality report. Never pads a shortfall with rejected
leads.

CRITICAL INVARIANTS:
- Every input lead lands in exactly one of passed / rejected
- Passed leads are ordered by quality_score desc (stable)
- A shortfall yields a warning, never an exception

Integration Position:
    ComplianceAgent
           ↓
    QualityGateAgent           ← THIS AGENT
           ↓
    LeadFormatterAgent

Input: compliant_leads, scope_context, quality_tier
Output: delivered_leads, quality_gate_result, quality_report
"""

from typing import Any, Dict, List, Mapping, Optional, TypedDict

from core.logger import get_logger, log_counts
from pipelines.core.base_agent import BaseAgent
from pipelines.lead_quality.config import DEFAULT_QUALITY_TIER

logger = get_logger(__name__)


# =============================================================================
# THRESHOLDS
# =============================================================================

class QualityGateThreshold(TypedDict):
    min_quality_score: int
    min_match_score: int
    require_wireless_phone: bool


# hot's min_match_score of 5 is above what the classifier emits (0-3),
# so hot currently delivers nothing.
QUALITY_GATE_THRESHOLDS: Dict[str, QualityGateThreshold] = {
    "hot": {"min_quality_score": 70, "min_match_score": 5, "require_wireless_phone": True},
    "balanced": {"min_quality_score": 50, "min_match_score": 3, "require_wireless_phone": False},
    "scale": {"min_quality_score": 30, "min_match_score": 3, "require_wireless_phone": False},
}

P90_FRACTION = 0.9


class QualityGateResult(TypedDict):
    passed_leads: List[Dict[str, Any]]
    rejected_leads: List[Dict[str, Any]]
    delivered_count: int
    rejected_by_quality_count: int
    min_quality_score_used: int
    warning: Optional[str]


class QualityReport(TypedDict):
    delivered_count: int
    rejected_by_quality_count: int
    min_quality_score_used: int
    avg_quality_score: int
    p90_quality_score: int
    pct_wireless: int
    pct_with_address: int
    match_score_distribution: Dict[str, int]
    warning: Optional[str]


# =============================================================================
# PURE GATE FUNCTIONS
# =============================================================================

def _round_half_up(numerator: int, denominator: int) -> int:
    """Integer ratio, half rounded up. Zero denominator gives 0."""
    if denominator == 0:
        return 0
    return (numerator * 2 + denominator) // (denominator * 2)


def _has_wireless(lead: Mapping[str, Any]) -> bool:
    return bool((lead.get("wireless_phones") or "").strip())


def get_tier_label(tier: str) -> str:
    """
    Human-readable tier label.

    Examples:
        >>> get_tier_label("balanced")
        'Balanced (≥50)'
    """
    threshold = QUALITY_GATE_THRESHOLDS[tier]
    return f"{tier.capitalize()} (≥{threshold['min_quality_score']})"


def build_shortfall_warning(
    delivered_count: int,
    requested_count: int,
    rejected_count: int,
    tier: str,
) -> Optional[str]:
    """Warning text when fewer leads were delivered than requested."""
    if delivered_count >= requested_count:
        return None
    return (
        f"Quality Gate: Delivered {delivered_count} of {requested_count} requested. "
        f"{rejected_count} leads rejected (below {get_tier_label(tier)} threshold)."
    )


def apply_quality_gate(
    leads: List[Dict[str, Any]],
    tier: str,
    requested_count: int,
    is_call_campaign: bool = False,
) -> QualityGateResult:
    """
    Split leads into passed and rejected by tier thresholds.

    Args:
        leads: Leads after compliance suppression.
        tier: Quality tier (hot, balanced, scale).
        requested_count: Number of leads the caller asked for.
        is_call_campaign: Enforce the tier's wireless requirement.

    Returns:
        QualityGateResult.

    Raises:
        KeyError: If tier is unknown.
    """
    threshold = QUALITY_GATE_THRESHOLDS[tier]

    passed: List[Dict[str, Any]] = []
    rejected: List[Dict[str, Any]] = []

    for lead in leads:
        meets_quality = (lead.get("quality_score") or 0) >= threshold["min_quality_score"]
        meets_match = (lead.get("match_score") or 0) >= threshold["min_match_score"]
        meets_wireless = (
            not threshold["require_wireless_phone"]
            or not is_call_campaign
            or _has_wireless(lead)
        )

        if meets_quality and meets_match and meets_wireless:
            passed.append(lead)
        else:
            rejected.append(lead)

    passed.sort(key=lambda lead: lead.get("quality_score") or 0, reverse=True)

    return {
        "passed_leads": passed,
        "rejected_leads": rejected,
        "delivered_count": len(passed),
        "rejected_by_quality_count": len(rejected),
        "min_quality_score_used": threshold["min_quality_score"],
        "warning": build_shortfall_warning(len(passed), requested_count, len(rejected), tier),
    }


def calculate_p90_quality_score(leads: List[Mapping[str, Any]]) -> int:
    """Score at ascending index floor(n * 0.9), clamped to the last lead."""
    if not leads:
        return 0
    scores = sorted(lead.get("quality_score") or 0 for lead in leads)
    index = min(int(len(scores) * P90_FRACTION), len(scores) - 1)
    return scores[index]


def calculate_pct_wireless(leads: List[Mapping[str, Any]]) -> int:
    return _round_half_up(100 * sum(1 for lead in leads if _has_wireless(lead)), len(leads))


def calculate_pct_with_address(leads: List[Mapping[str, Any]]) -> int:
    """Percentage of leads with street, city, state and zip all present."""
    complete = sum(
        1 for lead in leads
        if all(lead.get(key) for key in ("address", "city", "state", "zip"))
    )
    return _round_half_up(100 * complete, len(leads))


def calculate_match_score_distribution(leads: List[Mapping[str, Any]]) -> Dict[str, int]:
    distribution = {
        "score_0": 0,
        "score_1": 0,
        "score_2": 0,
        "score_3": 0,
        "score_4": 0,
        "score_5_plus": 0,
    }
    for lead in leads:
        score = lead.get("match_score") or 0
        key = "score_5_plus" if score >= 5 else f"score_{max(score, 0)}"
        distribution[key] += 1
    return distribution


def generate_quality_report(
    delivered_leads: List[Mapping[str, Any]],
    rejected_count: int,
    min_quality_score_used: int,
    requested_count: int,
    tier: str,
) -> QualityReport:
    """
    Build the delivery quality report.

    Args:
        delivered_leads: Leads that passed the gate.
        rejected_count: Leads the gate rejected.
        min_quality_score_used: Tier threshold that was applied.
        requested_count: Number of leads the caller asked for.
        tier: Quality tier.

    Returns:
        QualityReport with aggregates only.
    """
    delivered_count = len(delivered_leads)
    total_score = sum(lead.get("quality_score") or 0 for lead in delivered_leads)

    return {
        "delivered_count": delivered_count,
        "rejected_by_quality_count": rejected_count,
        "min_quality_score_used": min_quality_score_used,
        "avg_quality_score": _round_half_up(total_score, delivered_count),
        "p90_quality_score": calculate_p90_quality_score(delivered_leads),
        "pct_wireless": calculate_pct_wireless(delivered_leads),
        "pct_with_address": calculate_pct_with_address(delivered_leads),
        "match_score_distribution": calculate_match_score_distribution(delivered_leads),
        "warning": build_shortfall_warning(delivered_count, requested_count, rejected_count, tier),
    }


# =============================================================================
# QUALITY GATE AGENT
# =============================================================================

class QualityGateAgent(BaseAgent):
    """
    Agent that enforces tier thresholds on compliant leads.

    Contract:
        Input: compliant_leads (from ComplianceAgent), scope_context, quality_tier
        Output: delivered_leads, quality_gate_result, quality_report

    Invariants:
        - Zero delivered leads is a normal outcome (delivered_count == 0)
        - No I/O, no side effects
    """

    output_keys = ("delivered_leads", "quality_gate_result", "quality_report")

    def __init__(self) -> None:
        """Initialize the Quality Gate Agent."""
        super().__init__(name="QualityGateAgent")

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Gate compliant leads by tier.

        Args:
            input_data: Dict with 'compliant_leads', 'scope_context' and
                optional 'quality_tier'.

        Returns:
            Dict with 'delivered_leads', 'quality_gate_result' (counts and
            warning only) and 'quality_report'.

        Raises:
            ValueError: If an input key is missing or the tier is unknown.
        """
        leads = self.require(input_data, "compliant_leads", list, "ComplianceAgent")
        context = self.require(input_data, "scope_context", dict, "RequestValidationAgent")
        tier = input_data.get("quality_tier") or DEFAULT_QUALITY_TIER

        if tier not in QUALITY_GATE_THRESHOLDS:
            raise ValueError(
                f"Pipeline contract violation: unknown quality_tier '{tier}'. "
                f"Expected one of: {', '.join(QUALITY_GATE_THRESHOLDS)}"
            )

        requested_count = context["requested_count"]
        gate = apply_quality_gate(
            leads, tier, requested_count, is_call_campaign=context["use_case"] == "call"
        )
        report = generate_quality_report(
            gate["passed_leads"],
            gate["rejected_by_quality_count"],
            gate["min_quality_score_used"],
            requested_count,
            tier,
        )

        log_counts(logger, f"Quality gate ({get_tier_label(tier)})", {
            "delivered": gate["delivered_count"],
            "rejected": gate["rejected_by_quality_count"],
            "requested": requested_count,
        })
        if gate["warning"]:
            logger.warning(gate["warning"])

        return {
            "delivered_leads": gate["passed_leads"],
            "quality_gate_result": {
                "delivered_count": gate["delivered_count"],
                "rejected_by_quality_count": gate["rejected_by_quality_count"],
                "min_quality_score_used": gate["min_quality_score_used"],
                "warning": gate["warning"],
            },
            "quality_report": report,
        }
