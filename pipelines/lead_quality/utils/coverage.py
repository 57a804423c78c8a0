"""
Field coverage statistics over contact and lead batches.

CRITICAL INVARIANT:
- Output blocks hold integers only. Field values are tested for presence
  and immediately discarded, so no value can reach a diagnostics payload.
"""

from typing import Any, Callable, Dict, List, Mapping, Sequence

from core.contracts.leads import (
    COVERAGE_FIELDS,
    EffectiveScope,
    FieldCoverageBlock,
    LeadScope,
)
from pipelines.lead_quality.utils.field_access import get_first_field
from pipelines.lead_quality.utils.identity import (
    GENERIC_EMAIL_FIELD,
    resolve_location,
    resolve_name,
    scoped_email_field,
)
from pipelines.lead_quality.utils.phones import (
    B2B_LANDLINE_FIELDS,
    B2B_WIRELESS_FIELDS,
    B2C_LANDLINE_FIELDS,
    B2C_WIRELESS_FIELDS,
    GENERIC_OTHER_FIELDS,
    GENERIC_WIRELESS_FIELDS,
)
from pipelines.lead_quality.utils.scope import resolve_effective_scope


def percentage(count: int, total: int) -> int:
    """Whole-number percentage rounded half up; 0 for an empty batch."""
    if total <= 0:
        return 0
    return (count * 200 + total) // (total * 2)


def empty_coverage_block() -> FieldCoverageBlock:
    return {
        "total": 0,
        "present": {field: 0 for field in COVERAGE_FIELDS},
        "pct": {field: 0 for field in COVERAGE_FIELDS},
    }


def _build_block(total: int, counts: Dict[str, int]) -> FieldCoverageBlock:
    if total == 0:
        return empty_coverage_block()
    return {
        "total": total,
        "present": {field: counts[field] for field in COVERAGE_FIELDS},
        "pct": {field: percentage(counts[field], total) for field in COVERAGE_FIELDS},
    }


def _phone_fields(scope: EffectiveScope) -> tuple:
    if scope == "commercial":
        scoped = B2B_WIRELESS_FIELDS + B2B_LANDLINE_FIELDS
    else:
        scoped = B2C_WIRELESS_FIELDS + B2C_LANDLINE_FIELDS
    return scoped + GENERIC_WIRELESS_FIELDS + GENERIC_OTHER_FIELDS


def contact_field_presence(
    contact: Mapping[str, Any],
    scope: EffectiveScope,
) -> Dict[str, bool]:
    """
    Which coverage fields COULD be extracted from a raw contact.

    Uses the same cascades as lead mapping. Phones count on raw presence,
    before normalization, so malformed numbers still show up as present.
    """
    first_name, last_name = resolve_name(contact)
    location = resolve_location(contact, scope)
    phone = get_first_field(contact, _phone_fields(scope))
    email = get_first_field(contact, (scoped_email_field(scope), GENERIC_EMAIL_FIELD))

    return {
        "first_name": bool(first_name),
        "last_name": bool(last_name),
        "address": bool(location["address"]),
        "city": bool(location["city"]),
        "state": bool(location["state"]),
        "zip": bool(location["zip"]),
        "phone": phone is not None,
        "email": email is not None,
    }


def _tally(
    records: Sequence[Any],
    presence: Callable[[int, Any], Dict[str, bool]],
) -> FieldCoverageBlock:
    counts = {field: 0 for field in COVERAGE_FIELDS}
    for index, record in enumerate(records):
        flags = presence(index, record)
        for field in COVERAGE_FIELDS:
            if flags[field]:
                counts[field] += 1
    return _build_block(len(records), counts)


def compute_contacts_coverage(
    contacts: Sequence[Mapping[str, Any]],
    scope: LeadScope,
) -> FieldCoverageBlock:
    """
    Field coverage over raw provider contacts.

    Args:
        contacts: Raw contact batch in provider order.
        scope: Requested scope; "both" resolves per index like lead mapping.

    Returns:
        FieldCoverageBlock of counts and percentages.
    """
    return _tally(
        contacts,
        lambda index, contact: contact_field_presence(
            contact, resolve_effective_scope(scope, index)
        ),
    )


def _lead_has(lead: Mapping[str, Any], field: str) -> bool:
    value = lead.get(field)
    return isinstance(value, str) and bool(value.strip())


def compute_leads_coverage(leads: List[Mapping[str, Any]]) -> FieldCoverageBlock:
    """Field coverage over mapped leads using simple presence checks."""
    return _tally(
        leads,
        lambda _index, lead: {field: _lead_has(lead, field) for field in COVERAGE_FIELDS},
    )
