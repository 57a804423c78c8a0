"""
Request Validation Agent for the Lead Quality pipeline.

Turns an untrusted targeting payload (camelCase keys, as posted by the
web front end) into an immutable ScopeContext. Pure function
implementation with no I/O side effects.

Integration Position:
    RequestValidationAgent     ← THIS AGENT (first)
           ↓
    ContactFetchAgent

Input: request
Output: scope_context, quality_tier
"""

import re
from typing import Any, Dict, List, Mapping, Optional

from core.contracts.leads import LEAD_SCOPES, QUALITY_TIERS, USE_CASES, ScopeContext
from core.logger import get_logger
from pipelines.core.base_agent import BaseAgent
from pipelines.lead_quality.config import DEFAULT_QUALITY_TIER, DEFAULT_REQUESTED_COUNT

logger = get_logger(__name__)


# =============================================================================
# VALIDATION LIMITS
# =============================================================================

LEAD_REQUEST_MIN_CHARS = 3
LEAD_REQUEST_MAX_CHARS = 200
MIN_ZIPS = 1
MAX_ZIPS = 200
MIN_MATCH_SCORE = 0
MAX_MATCH_SCORE = 3
MIN_REQUESTED_COUNT = 1
MAX_REQUESTED_COUNT = 1000
DEFAULT_USE_CASE = "both"

ZIP_SPLIT_PATTERN = re.compile(r"[\s,]+")
ZIP_PATTERN = re.compile(r"^[0-9]{5}$")


class RequestValidationError(ValueError):
    """Payload rejected. `details` holds counts or echoed enum input only."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


# =============================================================================
# PURE VALIDATION FUNCTIONS
# =============================================================================

def parse_zip_codes(raw: Any) -> List[str]:
    """
    Extract unique 5-digit ZIP codes, preserving first-seen order.

    Accepts a whitespace/comma separated string or a list of values.
    Malformed entries are dropped.

    Examples:
        >>> parse_zip_codes("33101, 33130 33101 9021")
        ['33101', '33130']
    """
    if isinstance(raw, (list, tuple)):
        raw = " ".join(str(item) for item in raw)
    if not isinstance(raw, str):
        return []

    zips: List[str] = []
    for part in ZIP_SPLIT_PATTERN.split(raw):
        part = part.strip()
        if ZIP_PATTERN.match(part) and part not in zips:
            zips.append(part)
    return zips


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def _parse_int(value: Any) -> Optional[int]:
    """Integer from an int or a numeric string; None for anything else."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        match = re.match(r"^\s*(-?\d+)", value)
        if match:
            return int(match.group(1))
    return None


def _parse_choice(body: Mapping[str, Any], key: str, default: Optional[str] = None) -> str:
    value = body.get(key)
    if not isinstance(value, str):
        return default or ""
    return value.strip().lower()


def validate_payload(body: Mapping[str, Any]) -> ScopeContext:
    """
    Validate a targeting payload into a ScopeContext.

    Args:
        body: Raw request dict with leadRequest, zipCodes, leadScope and
            optional useCase, minMatchScore, requestedCount.

    Returns:
        Validated ScopeContext.

    Raises:
        RequestValidationError: On the first violated rule.
    """
    if not isinstance(body, Mapping):
        raise RequestValidationError(
            "invalid_payload",
            "Request body must be an object.",
            {"received_type": type(body).__name__},
        )

    raw_request = body.get("leadRequest")
    lead_request = raw_request.strip() if isinstance(raw_request, str) else ""
    if not LEAD_REQUEST_MIN_CHARS <= len(lead_request) <= LEAD_REQUEST_MAX_CHARS:
        raise RequestValidationError(
            "invalid_lead_request",
            f"leadRequest must be {LEAD_REQUEST_MIN_CHARS}-{LEAD_REQUEST_MAX_CHARS} characters.",
            {"lead_request_length": len(lead_request)},
        )

    zips = parse_zip_codes(body.get("zipCodes", ""))
    if not MIN_ZIPS <= len(zips) <= MAX_ZIPS:
        raise RequestValidationError(
            "invalid_zip_codes",
            f"Provide {MIN_ZIPS}-{MAX_ZIPS} valid ZIP codes (5 digits).",
            {"count": len(zips)},
        )

    scope = _parse_choice(body, "leadScope")
    if scope not in LEAD_SCOPES:
        raise RequestValidationError(
            "invalid_scope",
            f"leadScope must be one of: {'|'.join(LEAD_SCOPES)}.",
            {"received": scope},
        )

    use_case = _parse_choice(body, "useCase", DEFAULT_USE_CASE)
    if use_case not in USE_CASES:
        raise RequestValidationError(
            "invalid_use_case",
            f"useCase must be one of: {'|'.join(USE_CASES)}.",
            {"received": use_case},
        )

    min_match_score: Optional[int] = None
    raw_score = body.get("minMatchScore")
    if not _is_blank(raw_score):
        min_match_score = _parse_int(raw_score)
        if min_match_score is None or not MIN_MATCH_SCORE <= min_match_score <= MAX_MATCH_SCORE:
            raise RequestValidationError(
                "invalid_min_match_score",
                f"minMatchScore must be a number between {MIN_MATCH_SCORE} and {MAX_MATCH_SCORE}.",
                {"received_type": type(raw_score).__name__},
            )

    requested_count = DEFAULT_REQUESTED_COUNT
    raw_count = body.get("requestedCount")
    if not _is_blank(raw_count):
        parsed_count = _parse_int(raw_count)
        if parsed_count is None or not MIN_REQUESTED_COUNT <= parsed_count <= MAX_REQUESTED_COUNT:
            raise RequestValidationError(
                "invalid_requested_count",
                f"requestedCount must be a number between {MIN_REQUESTED_COUNT} and {MAX_REQUESTED_COUNT}.",
                {"received_type": type(raw_count).__name__},
            )
        requested_count = parsed_count

    return {
        "lead_request": lead_request,
        "zips": zips,
        "scope": scope,
        "use_case": use_case,
        "requested_count": requested_count,
        "min_match_score_override": min_match_score,
    }


def validate_quality_tier(raw: Any, default: str = DEFAULT_QUALITY_TIER) -> str:
    """Resolve the optional qualityTier field against hot/balanced/scale."""
    if _is_blank(raw):
        return default
    tier = raw.strip().lower() if isinstance(raw, str) else ""
    if tier not in QUALITY_TIERS:
        raise RequestValidationError(
            "invalid_quality_tier",
            f"qualityTier must be one of: {'|'.join(QUALITY_TIERS)}.",
            {"received": tier},
        )
    return tier


# =============================================================================
# REQUEST VALIDATION AGENT
# =============================================================================

class RequestValidationAgent(BaseAgent):
    """
    Agent that validates the raw targeting payload.

    Contract:
        Input: request (dict payload)
        Output: scope_context, quality_tier

    Invariants:
        - Raises RequestValidationError on bad input, never returns partial context
        - No I/O, no side effects
    """

    output_keys = ("scope_context", "quality_tier")

    def __init__(self, default_quality_tier: str = DEFAULT_QUALITY_TIER) -> None:
        """Initialize the Request Validation Agent."""
        super().__init__(name="RequestValidationAgent")
        self.default_quality_tier = default_quality_tier

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate the request payload.

        Args:
            input_data: Dict with 'request' payload.

        Returns:
            Dict with 'scope_context' and 'quality_tier'.

        Raises:
            ValueError: If 'request' is missing (contract violation).
            RequestValidationError: If the payload is invalid.
        """
        request = self.require(input_data, "request", dict, "the caller")

        context = validate_payload(request)
        quality_tier = validate_quality_tier(
            request.get("qualityTier"), self.default_quality_tier
        )

        logger.info(
            f"Request validated: scope={context['scope']}, use_case={context['use_case']}, "
            f"zips={len(context['zips'])}, requested={context['requested_count']}, "
            f"tier={quality_tier}"
        )

        return {
            "scope_context": context,
            "quality_tier": quality_tier,
        }
