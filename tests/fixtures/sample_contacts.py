"""
Sample provider contacts and leads for pipeline testing.

Provides reusable generators for:
- Raw residential and commercial provider contacts
- Validated scope contexts
- Mapped leads for scorer / compliance / gate tests

Default contacts pass every recipe: high match tier, wireless phone,
"Valid (Esp)" email seen recently, no DNC flag.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

# Fixed clock for freshness checks
FIXED_NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)
RECENT_SEEN = "2026-10-10T08:30:00Z"
STALE_SEEN = "2026-08-01T08:30:00Z"


def make_residential_contact(index: int = 0, **overrides: Any) -> Dict[str, Any]:
    """
    Generate a raw B2C contact.

    Args:
        index: Varies names, phones and emails between contacts.
        **overrides: Field values to replace. A value of None removes the field.

    Returns:
        Raw contact dict.
    """
    contact: Dict[str, Any] = {
        "SKIPTRACE_NAME": f"Jane{index} Doe",
        "SKIPTRACE_ADDRESS": f"{100 + index} Main St",
        "SKIPTRACE_CITY": "Miami",
        "SKIPTRACE_STATE": "FL",
        "SKIPTRACE_ZIP": "33101",
        "SKIPTRACE_WIRELESS_NUMBERS": f"(305) 555-{1000 + index:04d}",
        "SKIPTRACE_LANDLINE_NUMBERS": f"305-555-{2000 + index:04d}",
        "PERSONAL_EMAIL": f"jane{index}@example.com",
        "PERSONAL_EMAIL_VALIDATION_STATUS": "Valid (Esp)",
        "SKIPTRACE_MATCH_BY": "ADDRESS,EMAIL,NAME",
        "DNC": "N",
        "LAST_SEEN": RECENT_SEEN,
    }
    return _apply_overrides(contact, overrides)


def make_commercial_contact(index: int = 0, **overrides: Any) -> Dict[str, Any]:
    """
    Generate a raw B2B contact.

    Args:
        index: Varies names, phones and emails between contacts.
        **overrides: Field values to replace. A value of None removes the field.

    Returns:
        Raw contact dict.
    """
    contact: Dict[str, Any] = {
        "FIRST_NAME": f"Omar{index}",
        "LAST_NAME": "Reyes",
        "COMPANY_ADDRESS": f"{500 + index} Commerce Blvd",
        "COMPANY_CITY": "Dallas",
        "COMPANY_STATE": "TX",
        "COMPANY_ZIP": "75201",
        "SKIPTRACE_B2B_WIRELESS": f"214-555-{3000 + index:04d}",
        "SKIPTRACE_B2B_LANDLINE": f"214-555-{4000 + index:04d}",
        "BUSINESS_EMAIL": f"omar{index}@acme.example",
        "BUSINESS_EMAIL_VALIDATION_STATUS": "Valid (Esp)",
        "SKIPTRACE_B2B_MATCH_BY": "COMPANY_ADDRESS,EMAIL",
        "LAST_SEEN": RECENT_SEEN,
    }
    return _apply_overrides(contact, overrides)


def make_scope_context(
    scope: str = "residential",
    use_case: str = "both",
    requested_count: int = 10,
    min_match_score_override: Optional[int] = None,
    lead_request: str = "kitchen remodeling",
) -> Dict[str, Any]:
    """Generate a validated ScopeContext."""
    return {
        "lead_request": lead_request,
        "zips": ["33101", "75201"],
        "scope": scope,
        "use_case": use_case,
        "requested_count": requested_count,
        "min_match_score_override": min_match_score_override,
    }


def make_lead(**overrides: Any) -> Dict[str, Any]:
    """
    Generate a mapped lead with every Lead field populated.

    Defaults score 100 (match 3, wireless, full address, valid email).
    """
    lead: Dict[str, Any] = {
        "first_name": "Jane",
        "last_name": "Doe",
        "address": "123 Main St",
        "city": "Miami",
        "state": "FL",
        "zip": "33101",
        "phone": "+13055551000",
        "email": "jane@example.com",
        "lead_type": "residential",
        "tags": "kitchen remodeling",
        "source": "audiencelab",
        "best_phone": "+13055551000",
        "phones_all": "+13055551000|+13055552000",
        "wireless_phones": "+13055551000",
        "landline_phones": "+13055552000",
        "match_score": 3,
        "quality_score": 0,
        "quality_tier": "",
        "dnc_status": "N",
        "email_validation_status": "Valid (Esp)",
    }
    lead.update(overrides)
    return lead


def make_scored_leads(scores: List[int], match_score: int = 3) -> List[Dict[str, Any]]:
    """Generate leads with the given quality scores, tagged by position."""
    return [
        make_lead(quality_score=score, match_score=match_score, first_name=f"Lead{i}")
        for i, score in enumerate(scores)
    ]


def _apply_overrides(contact: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in overrides.items():
        if value is None:
            contact.pop(key, None)
        else:
            contact[key] = value
    return contact
