"""Lead formatting agent for the Lead Quality pipeline."""

from typing import Any, Dict, List, Mapping

from core.contracts.leads import (
    LEAD_FIELDS,
    LEAD_INT_FIELDS,
    LEAD_STRING_FIELDS,
    Lead,
    ParsedPhones,
)
from core.logger import get_logger, log_counts
from pipelines.core.base_agent import BaseAgent
from pipelines.lead_quality.utils.phones import join_phones

logger = get_logger(__name__)


# =============================================================================
# OUTPUT MAPPER (PURE)
# =============================================================================

def build_lead(
    first_name: str,
    last_name: str,
    location: Mapping[str, str],
    phones: ParsedPhones,
    email: str,
    lead_type: str,
    tags: str,
    source: str,
    match_score: int,
    dnc_status: str = "",
    email_validation_status: str = "",
) -> Lead:
    """
    Assemble a Lead from resolved contact parts.

    Every declared field is present; scores not yet computed are 0 and
    the quality tier is empty until the scorer fills it in.
    """
    lead: Lead = {
        "first_name": first_name,
        "last_name": last_name,
        "address": location.get("address", ""),
        "city": location.get("city", ""),
        "state": location.get("state", ""),
        "zip": location.get("zip", ""),
        "phone": phones["best"],
        "email": email,
        "lead_type": lead_type,
        "tags": tags,
        "source": source,
        "best_phone": phones["best"],
        "phones_all": join_phones(phones["all"]),
        "wireless_phones": join_phones(phones["wireless"]),
        "landline_phones": join_phones(phones["landline"]),
        "match_score": match_score,
        "quality_score": 0,
        "quality_tier": "",
        "dnc_status": dnc_status,
        "email_validation_status": email_validation_status,
    }
    return finalize_lead(lead)


def finalize_lead(lead: Mapping[str, Any]) -> Lead:
    """
    Return a copy of `lead` with every declared field populated.

    Missing or None strings become "", missing or invalid ints become 0.
    Keys outside the Lead contract (e.g. rank) are kept as-is.
    """
    finalized: Dict[str, Any] = dict(lead)

    for field in LEAD_STRING_FIELDS:
        value = finalized.get(field)
        finalized[field] = "" if value is None else str(value)

    for field in LEAD_INT_FIELDS:
        value = finalized.get(field)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            finalized[field] = 0
        else:
            finalized[field] = int(value)

    return finalized  # type: ignore[return-value]


def format_leads(leads: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Finalize leads and attach a 1-based rank in delivery order."""
    formatted: List[Dict[str, Any]] = []
    for idx, lead in enumerate(leads):
        record = {"rank": idx + 1}
        final = finalize_lead(lead)
        for field in LEAD_FIELDS:
            record[field] = final[field]
        formatted.append(record)
    return formatted


def build_summary(input_data: Mapping[str, Any], delivered: int) -> Dict[str, Any]:
    """
    Collect the per-request diagnostics bundle.

    Only counters and derived statistics from upstream stages are read,
    so no contact field value can end up in the summary.
    """
    context = input_data.get("scope_context") or {}
    compliance = input_data.get("compliance_result") or {}
    gate = input_data.get("quality_gate_result") or {}

    return {
        "scope": context.get("scope", ""),
        "use_case": context.get("use_case", ""),
        "zip_count": len(context.get("zips", [])),
        "requested_count": context.get("requested_count", 0),
        "quality_tier": input_data.get("quality_tier", ""),
        "delivered_count": delivered,
        "diagnostics": input_data.get("lead_diagnostics"),
        "field_coverage": input_data.get("field_coverage"),
        "quality_stats": input_data.get("quality_stats"),
        "quality_report": input_data.get("quality_report"),
        "suppressed_count": compliance.get("suppressed_count", 0),
        "suppressed_states": list(compliance.get("suppressed_states", [])),
        "rejected_by_quality_count": gate.get("rejected_by_quality_count", 0),
        "warning": gate.get("warning"),
    }


# =============================================================================
# LEAD FORMATTER AGENT
# =============================================================================

class LeadFormatterAgent(BaseAgent):
    """
    Agent that formats gated leads into final lead structure.

    Prepares leads for export with every declared field present and a
    rank in delivery order, and assembles the PII-free summary.

    Input: delivered_leads (from QualityGateAgent), upstream diagnostics
    Output: formatted_leads, summary

    Contract:
        - Order of delivered_leads is preserved
        - No filtering, no scoring
    """

    output_keys = ("formatted_leads", "summary")

    def __init__(self) -> None:
        """Initialize the lead formatter agent."""
        super().__init__(name="LeadFormatterAgent")

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Format delivered leads into final lead structure.

        Args:
            input_data: Dict with 'delivered_leads' from QualityGateAgent.

        Returns:
            Dict with 'formatted_leads' and 'summary'.

        Raises:
            ValueError: If delivered_leads is missing (contract violation).
        """
        delivered = self.require(input_data, "delivered_leads", list, "QualityGateAgent")

        formatted_leads = format_leads(delivered)
        summary = build_summary(input_data, len(formatted_leads))

        log_counts(logger, "Formatted leads", {
            "delivered": len(formatted_leads),
            "suppressed": summary["suppressed_count"],
            "rejected_by_quality": summary["rejected_by_quality_count"],
        })

        return {"formatted_leads": formatted_leads, "summary": summary}
