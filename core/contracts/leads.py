"""
Lead Quality Contracts.

Defines the provider-agnostic record shapes that flow between the stages
of the lead quality pipeline. Pure schema definitions only.

CRITICAL INVARIANTS:
- Raw contacts are read-only mappings; no stage mutates them
- Every Lead carries every key in LEAD_FIELDS (empty-string / zero defaults)
- Diagnostics and coverage blocks contain integers only, never field values
"""

from typing import Any, Dict, List, Literal, Mapping, Optional, TypedDict


# =============================================================================
# ENUMERATIONS
# =============================================================================

LeadScope = Literal["residential", "commercial", "both"]

EffectiveScope = Literal["residential", "commercial"]

UseCase = Literal["call", "email", "both"]

QualityTier = Literal["hot", "balanced", "scale"]

MatchTier = Literal["high", "medium", "low"]

ExclusionReason = Literal[
    "dnc",
    "invalid_email",
    "invalid_email_esp",
    "email_too_old",
    "missing_phone",
    "missing_contact",
    "low_match_score",
]

LEAD_SCOPES = ("residential", "commercial", "both")
USE_CASES = ("call", "email", "both")
QUALITY_TIERS = ("hot", "balanced", "scale")
MATCH_TIERS = ("high", "medium", "low")

# Loosely-structured provider record
RawContact = Mapping[str, Any]


# =============================================================================
# REQUEST CONTEXT
# =============================================================================

class ScopeContext(TypedDict):
    """Immutable targeting request consumed by the whole pipeline."""
    lead_request: str
    zips: List[str]
    scope: LeadScope
    use_case: UseCase
    requested_count: int
    min_match_score_override: Optional[int]


class RecipeConfig(TypedDict):
    """Per-(scope, use case) filtering policy. Derived, never persisted."""
    require_email_valid_esp: bool
    require_phone: bool
    exclude_dnc: bool
    freshness_days: int
    min_match_score: int
    use_case: UseCase


# =============================================================================
# LEAD RECORD
# =============================================================================

class ParsedPhones(TypedDict):
    """E.164 phones of one contact, grouped by line type."""
    all: List[str]
    wireless: List[str]
    landline: List[str]
    best: str


class Lead(TypedDict, total=False):
    """Canonical exported lead record."""
    # Identity
    first_name: str
    last_name: str
    # Address
    address: str
    city: str
    state: str
    zip: str
    # Contact
    phone: str
    email: str
    best_phone: str
    phones_all: str
    wireless_phones: str
    landline_phones: str
    # Classification / provenance
    lead_type: str
    tags: str
    source: str
    # Quality
    match_score: int
    quality_score: int
    quality_tier: str
    dnc_status: str
    email_validation_status: str


# Declared Lead keys in export order, with their defaults
LEAD_STRING_FIELDS = (
    "first_name",
    "last_name",
    "address",
    "city",
    "state",
    "zip",
    "phone",
    "email",
    "lead_type",
    "tags",
    "source",
    "best_phone",
    "phones_all",
    "wireless_phones",
    "landline_phones",
    "quality_tier",
    "dnc_status",
    "email_validation_status",
)
LEAD_INT_FIELDS = ("match_score", "quality_score")
LEAD_FIELDS = LEAD_STRING_FIELDS + LEAD_INT_FIELDS


class ContactMappingResult(TypedDict):
    """Outcome of running one raw contact through the recipe engine."""
    lead: Optional[Lead]
    excluded_reason: Optional[ExclusionReason]
    missing_name_or_address: bool
    tier: MatchTier
    match_score: int


# =============================================================================
# DIAGNOSTICS (COUNTS ONLY)
# =============================================================================

CoverageFieldName = Literal[
    "first_name", "last_name", "address", "city", "state", "zip", "phone", "email"
]

COVERAGE_FIELDS = (
    "first_name", "last_name", "address", "city", "state", "zip", "phone", "email"
)


class MatchByTierCounts(TypedDict):
    high: int
    medium: int
    low: int


class MatchScoreDistribution(TypedDict):
    score0: int
    score1: int
    score2: int
    score3: int


class LeadQualityDiagnostics(TypedDict):
    """Per-request counters of the recipe stage. Never contains PII."""
    total_fetched: int
    kept: int
    filtered_missing_phone: int
    filtered_invalid_email: int
    filtered_invalid_email_esp: int
    filtered_email_too_old: int
    filtered_dnc: int
    filtered_low_match_score: int
    missing_name_or_address_count: int
    match_by_tier: MatchByTierCounts
    match_score_distribution: MatchScoreDistribution


class FieldCoverageBlock(TypedDict):
    """Field presence statistics for one batch of contacts or leads."""
    total: int
    present: Dict[str, int]
    pct: Dict[str, int]


class FieldCoverage(TypedDict):
    coverage_fetched: FieldCoverageBlock
    coverage_kept: FieldCoverageBlock
