"""
Compliance Agent for the Lead Quality pipeline.

State-level suppression for call campaigns. This is a technical guardrail
only; callers remain responsible for telemarketing rules (TCPA, state DNC
lists, time-of-day restrictions).

Integration Position:
    LeadScoringAgent
           ↓
    ComplianceAgent            ← THIS AGENT
           ↓
    QualityGateAgent

Input: scored_leads, scope_context
Output: compliant_leads, compliance_result
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, TypedDict

from core.logger import get_logger
from pipelines.core.base_agent import BaseAgent
from pipelines.lead_quality.config import DEFAULT_SUPPRESS_STATES

logger = get_logger(__name__)

SUPPRESSED_USE_CASE = "call"


class ComplianceFilterResult(TypedDict):
    filtered_leads: List[Dict[str, Any]]
    suppressed_count: int
    suppressed_states: List[str]


def filter_leads_by_state_compliance(
    leads: List[Dict[str, Any]],
    use_case: str,
    suppress_states: Optional[Sequence[str]] = None,
) -> ComplianceFilterResult:
    """
    Drop call-campaign leads located in suppressed states.

    Args:
        leads: Scored leads.
        use_case: Campaign use case. Only "call" is filtered.
        suppress_states: State codes to drop. None uses the default list,
            an empty sequence disables suppression.

    Returns:
        ComplianceFilterResult. suppressed_states lists only the states
        that actually dropped a lead, in first-seen order.

    Examples:
        >>> result = filter_leads_by_state_compliance(
        ...     [{"state": "tx"}, {"state": "FL"}], "call")
        >>> result["suppressed_count"], result["suppressed_states"]
        (1, ['TX'])
    """
    if use_case != SUPPRESSED_USE_CASE:
        return {"filtered_leads": list(leads), "suppressed_count": 0, "suppressed_states": []}

    states = DEFAULT_SUPPRESS_STATES if suppress_states is None else suppress_states
    suppress_set = {s.strip().upper() for s in states if s.strip()}

    if not suppress_set:
        return {"filtered_leads": list(leads), "suppressed_count": 0, "suppressed_states": []}

    filtered: List[Dict[str, Any]] = []
    triggered: Dict[str, None] = {}

    for lead in leads:
        state = (lead.get("state") or "").strip().upper()
        if state and state in suppress_set:
            triggered[state] = None
        else:
            filtered.append(lead)

    return {
        "filtered_leads": filtered,
        "suppressed_count": len(leads) - len(filtered),
        "suppressed_states": list(triggered),
    }


class ComplianceAgent(BaseAgent):
    """
    Agent that applies state suppression to scored leads.

    Contract:
        Input: scored_leads (from LeadScoringAgent), scope_context
        Output: compliant_leads, compliance_result

    Invariants:
        - Non-call campaigns pass through untouched
        - Lead order preserved
    """

    output_keys = ("compliant_leads", "compliance_result")

    def __init__(self, suppress_states: Optional[Sequence[str]] = None) -> None:
        """
        Initialize the Compliance Agent.

        Args:
            suppress_states: State codes to suppress (None → default list).
        """
        super().__init__(name="ComplianceAgent")
        self.suppress_states = None if suppress_states is None else list(suppress_states)

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Filter scored leads by state.

        Args:
            input_data: Dict with 'scored_leads' and 'scope_context'.

        Returns:
            Dict with 'compliant_leads' and 'compliance_result' (counts only).

        Raises:
            ValueError: If an input key is missing (contract violation).
        """
        scored_leads = self.require(input_data, "scored_leads", list, "LeadScoringAgent")
        context: Mapping[str, Any] = self.require(
            input_data, "scope_context", dict, "RequestValidationAgent"
        )

        result = filter_leads_by_state_compliance(
            scored_leads, context["use_case"], self.suppress_states
        )

        if result["suppressed_count"]:
            logger.info(
                f"Suppressed {result['suppressed_count']} leads in states: "
                f"{', '.join(result['suppressed_states'])}"
            )
        else:
            logger.info(f"No leads suppressed ({len(scored_leads)} passed)")

        return {
            "compliant_leads": result["filtered_leads"],
            "compliance_result": {
                "suppressed_count": result["suppressed_count"],
                "suppressed_states": result["suppressed_states"],
            },
        }
