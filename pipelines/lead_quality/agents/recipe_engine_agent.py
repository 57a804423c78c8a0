"""
Recipe Engine Agent for the Lead Quality pipeline.

Derives a filtering policy ("recipe") per (effective scope, use case) and
classifies every raw provider contact as accepted or rejected with
exactly one reason. Pure function implementation with no I/O side effects.

CRITICAL INVARIANTS:
- Rejections are returned values, never raised
- Exactly one of lead / excluded_reason is set per contact
- Check order is fixed: match score → DNC → email → phone → any contact
- Raw contacts are never mutated
- Diagnostics and coverage carry counts only

Integration Position:
    ContactFetchAgent
           ↓
    RecipeEngineAgent          ← THIS AGENT
           ↓
    LeadScoringAgent

Input: raw_contacts, scope_context
Output: recipe_leads, lead_diagnostics, field_coverage
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from dateutil import parser as date_parser

from core.contracts.leads import (
    MATCH_TIERS,
    ContactMappingResult,
    EffectiveScope,
    FieldCoverage,
    Lead,
    LeadQualityDiagnostics,
    RawContact,
    RecipeConfig,
    ScopeContext,
    UseCase,
)
from core.logger import get_logger, log_counts
from pipelines.core.base_agent import BaseAgent
from pipelines.lead_quality.agents.lead_formatter_agent import build_lead
from pipelines.lead_quality.config import SOURCE_IDENTIFIER
from pipelines.lead_quality.utils.coverage import (
    compute_contacts_coverage,
    compute_leads_coverage,
)
from pipelines.lead_quality.utils.field_access import get_field
from pipelines.lead_quality.utils.identity import (
    is_missing_name_or_address,
    resolve_location,
    resolve_name,
    select_quality_email,
)
from pipelines.lead_quality.utils.match_accuracy import (
    evaluate_match_by_tier,
    tier_to_numeric_score,
)
from pipelines.lead_quality.utils.phones import parse_all_phones
from pipelines.lead_quality.utils.scope import resolve_effective_scope

logger = get_logger(__name__)


# =============================================================================
# RECIPE CONSTANTS
# =============================================================================

# Default minimum match score per use case (0 disables the check)
DEFAULT_MIN_MATCH_SCORE = {
    "call": 3,
    "email": 0,
    "both": 0,
}

# LAST_SEEN window for email campaigns (0 = disabled)
EMAIL_FRESHNESS_DAYS = 30

DNC_FIELD = "DNC"
DNC_FLAGGED = "Y"
LAST_SEEN_FIELD = "LAST_SEEN"

SECONDS_PER_DAY = 86400

# Exclusion reason → diagnostics counter
EXCLUSION_COUNTERS = {
    "dnc": "filtered_dnc",
    "invalid_email": "filtered_invalid_email",
    "invalid_email_esp": "filtered_invalid_email_esp",
    "email_too_old": "filtered_email_too_old",
    "missing_phone": "filtered_missing_phone",
    "missing_contact": "filtered_missing_phone",
    "low_match_score": "filtered_low_match_score",
}

# Kept leads are ordered high → medium → low, provider order within a tier
TIER_ORDER = {tier: position for position, tier in enumerate(MATCH_TIERS)}


# =============================================================================
# RECIPE DERIVATION (PURE)
# =============================================================================

def build_recipe(
    scope: EffectiveScope,
    use_case: UseCase,
    min_match_score_override: Optional[int] = None,
) -> RecipeConfig:
    """
    Derive the filtering policy for one effective scope and use case.

    Args:
        scope: Effective scope of the contact (never "both").
        use_case: Campaign use case.
        min_match_score_override: Replaces the use-case default when given.

    Returns:
        RecipeConfig.

    Examples:
        >>> build_recipe("residential", "call")["exclude_dnc"]
        True
        >>> build_recipe("commercial", "call")["exclude_dnc"]
        False
        >>> build_recipe("residential", "email", 2)["min_match_score"]
        2
    """
    is_call = use_case == "call"
    is_email = use_case == "email"

    if min_match_score_override is not None:
        min_match_score = min_match_score_override
    else:
        min_match_score = DEFAULT_MIN_MATCH_SCORE.get(use_case, 0)

    return {
        "require_email_valid_esp": is_email,
        "require_phone": is_call,
        "exclude_dnc": scope == "residential" and use_case in ("call", "both"),
        "freshness_days": EMAIL_FRESHNESS_DAYS if is_email else 0,
        "min_match_score": min_match_score,
        "use_case": use_case,
    }


# =============================================================================
# FRESHNESS (PURE)
# =============================================================================

def parse_timestamp(raw: Optional[str], now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Parse a provider timestamp as an aware UTC datetime.

    Accepts ISO-8601, US-style and RFC 2822 dates. Missing date parts
    default to the current day. Naive values are taken as UTC.
    Unparseable input returns None.
    """
    if not raw:
        return None

    current = now or datetime.now(timezone.utc)
    default = current.replace(hour=0, minute=0, second=0, microsecond=0, tzinfo=None)

    try:
        parsed = date_parser.parse(raw.strip(), default=default)
    except (ValueError, OverflowError):
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def is_within_freshness_window(
    last_seen: Optional[str],
    window_days: int,
    now: Optional[datetime] = None,
) -> bool:
    """
    True when the contact was seen within `window_days`.

    A disabled window and an absent timestamp count as fresh. A timestamp
    that is present but unparseable counts as stale.
    """
    if not last_seen or window_days <= 0:
        return True

    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)

    seen_at = parse_timestamp(last_seen, current)
    if seen_at is None:
        return False

    age_days = (current - seen_at).total_seconds() / SECONDS_PER_DAY
    return age_days <= window_days


# =============================================================================
# PER-CONTACT MAPPING (PURE)
# =============================================================================

def _rejected(reason: str, tier: str, match_score: int) -> ContactMappingResult:
    return {
        "lead": None,
        "excluded_reason": reason,  # type: ignore[typeddict-item]
        "missing_name_or_address": False,
        "tier": tier,  # type: ignore[typeddict-item]
        "match_score": match_score,
    }


def map_contact_to_lead(
    contact: RawContact,
    context: ScopeContext,
    index: int,
    min_match_score_override: Optional[int] = None,
    now: Optional[datetime] = None,
    source: str = SOURCE_IDENTIFIER,
) -> ContactMappingResult:
    """
    Run one raw contact through its recipe.

    Args:
        contact: Raw provider contact (read-only).
        context: Validated request.
        index: Position of the contact in the batch (drives "both" scope).
        min_match_score_override: Overrides the context's override when set.
        now: Clock for the freshness check. Defaults to the current UTC time.
        source: Provider identifier stamped on the lead.

    Returns:
        ContactMappingResult with either a lead or an excluded_reason.
    """
    scope = resolve_effective_scope(context["scope"], index)
    use_case = context["use_case"]

    override = min_match_score_override
    if override is None:
        override = context.get("min_match_score_override")
    recipe = build_recipe(scope, use_case, override)

    tier = evaluate_match_by_tier(contact, scope)
    match_score = tier_to_numeric_score(tier)

    # 1. Match accuracy
    if recipe["min_match_score"] > 0 and match_score < recipe["min_match_score"]:
        return _rejected("low_match_score", tier, match_score)

    # 2. Do Not Call
    dnc_flag = (get_field(contact, DNC_FIELD) or "").strip().upper()
    if recipe["exclude_dnc"] and dnc_flag == DNC_FLAGGED:
        return _rejected("dnc", tier, match_score)

    # 3. Email
    email_selection = select_quality_email(contact, scope)
    email = email_selection["email"]

    if recipe["require_email_valid_esp"]:
        if not email:
            return _rejected("invalid_email", tier, match_score)
        if not email_selection["is_valid_esp"]:
            return _rejected("invalid_email_esp", tier, match_score)
        last_seen = get_field(contact, LAST_SEEN_FIELD)
        if not is_within_freshness_window(last_seen, recipe["freshness_days"], now):
            return _rejected("email_too_old", tier, match_score)
    elif email and not email_selection["is_valid"]:
        return _rejected("invalid_email", tier, match_score)

    # 4. Phone
    phones = parse_all_phones(contact, scope)
    if recipe["require_phone"] and not phones["best"]:
        return _rejected("missing_phone", tier, match_score)

    # 5. Any contact point
    if use_case == "both" and not phones["best"] and not email:
        return _rejected("missing_contact", tier, match_score)

    first_name, last_name = resolve_name(contact)
    location = resolve_location(contact, scope)

    lead = build_lead(
        first_name=first_name,
        last_name=last_name,
        location=location,
        phones=phones,
        email=email,
        lead_type=scope,
        tags=context["lead_request"],
        source=source,
        match_score=match_score,
        dnc_status=dnc_flag,
        email_validation_status=email_selection["validation_status"] or "",
    )

    return {
        "lead": lead,
        "excluded_reason": None,
        "missing_name_or_address": is_missing_name_or_address(
            first_name, last_name, location["address"]
        ),
        "tier": tier,
        "match_score": match_score,
    }


# =============================================================================
# BATCH FILTERING (PURE)
# =============================================================================

def empty_diagnostics(total_fetched: int = 0) -> LeadQualityDiagnostics:
    return {
        "total_fetched": total_fetched,
        "kept": 0,
        "filtered_missing_phone": 0,
        "filtered_invalid_email": 0,
        "filtered_invalid_email_esp": 0,
        "filtered_email_too_old": 0,
        "filtered_dnc": 0,
        "filtered_low_match_score": 0,
        "missing_name_or_address_count": 0,
        "match_by_tier": {tier: 0 for tier in MATCH_TIERS},  # type: ignore[typeddict-item]
        "match_score_distribution": {"score0": 0, "score1": 0, "score2": 0, "score3": 0},
    }


def filter_contacts(
    contacts: Sequence[RawContact],
    context: ScopeContext,
    now: Optional[datetime] = None,
    source: str = SOURCE_IDENTIFIER,
) -> Dict[str, Any]:
    """
    Map a whole batch, tallying diagnostics and field coverage.

    Leads are stably sorted by match tier (high first), so provider
    order holds within a tier. Tier, score distribution and the
    missing-name-or-address count cover accepted leads only.

    Args:
        contacts: Raw contact batch.
        context: Validated request.
        now: Clock for the freshness check.
        source: Provider identifier stamped on leads.

    Returns:
        Dict with 'leads', 'diagnostics' and 'field_coverage'.
    """
    diagnostics = empty_diagnostics(len(contacts))
    kept: List[Tuple[Lead, str]] = []

    for index, contact in enumerate(contacts):
        result = map_contact_to_lead(contact, context, index, now=now, source=source)

        if result["lead"] is None:
            counter = EXCLUSION_COUNTERS[result["excluded_reason"]]
            diagnostics[counter] += 1  # type: ignore[literal-required]
            continue

        kept.append((result["lead"], result["tier"]))
        diagnostics["match_by_tier"][result["tier"]] += 1
        score_key = f"score{result['match_score']}"
        diagnostics["match_score_distribution"][score_key] += 1  # type: ignore[literal-required]
        if result["missing_name_or_address"]:
            diagnostics["missing_name_or_address_count"] += 1

    kept.sort(key=lambda pair: TIER_ORDER[pair[1]])
    leads: List[Lead] = [lead for lead, _ in kept]
    diagnostics["kept"] = len(leads)

    field_coverage: FieldCoverage = {
        "coverage_fetched": compute_contacts_coverage(contacts, context["scope"]),
        "coverage_kept": compute_leads_coverage(leads),
    }

    return {
        "leads": leads,
        "diagnostics": diagnostics,
        "field_coverage": field_coverage,
    }


# =============================================================================
# RECIPE ENGINE AGENT
# =============================================================================

class RecipeEngineAgent(BaseAgent):
    """
    Agent that applies the per-contact recipe to the raw batch.

    Contract:
        Input: raw_contacts (from ContactFetchAgent), scope_context
        Output: recipe_leads, lead_diagnostics, field_coverage

    Invariants:
        - Deterministic for a fixed clock
        - One exclusion reason per rejected contact
        - No I/O, no side effects
    """

    output_keys = ("recipe_leads", "lead_diagnostics", "field_coverage")

    def __init__(self, source: str = SOURCE_IDENTIFIER, now: Optional[datetime] = None) -> None:
        """
        Initialize the Recipe Engine Agent.

        Args:
            source: Provider identifier stamped on leads.
            now: Optional fixed clock for freshness checks.
        """
        super().__init__(name="RecipeEngineAgent")
        self.source = source
        self.now = now

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Filter raw contacts into leads.

        Args:
            input_data: Dict with 'raw_contacts' and 'scope_context'.

        Returns:
            Dict with 'recipe_leads', 'lead_diagnostics', 'field_coverage'.

        Raises:
            ValueError: If an input key is missing (contract violation).
        """
        contacts = self.require(input_data, "raw_contacts", list, "ContactFetchAgent")
        context = self.require(input_data, "scope_context", dict, "RequestValidationAgent")

        logger.info(
            f"Applying recipes to {len(contacts)} contacts "
            f"(scope={context['scope']}, use_case={context['use_case']})"
        )

        result = filter_contacts(contacts, context, now=self.now, source=self.source)
        diagnostics = result["diagnostics"]

        log_counts(logger, "Recipe results", diagnostics)
        log_counts(logger, "Match tiers (kept)", diagnostics["match_by_tier"])

        return {
            "recipe_leads": result["leads"],
            "lead_diagnostics": diagnostics,
            "field_coverage": result["field_coverage"],
        }
