"""
Phone normalization for provider contacts.

All phones leave this module in E.164 form ("+" followed by digits).
Values that cannot be normalized are dropped, never guessed at.
"""

import re
from typing import Any, List, Mapping, Optional, Tuple

from core.contracts.leads import EffectiveScope, ParsedPhones
from pipelines.lead_quality.utils.field_access import get_field

# NANP numbers without country code
NANP_LOCAL_LENGTH = 10
NANP_COUNTRY_CODE = "1"
MIN_PHONE_DIGITS = 10

PHONE_LIST_SEPARATORS = re.compile(r"[,|;]")
NON_DIGITS = re.compile(r"\D")

# Phone source fields per scope, in priority order
B2B_WIRELESS_FIELDS = ("SKIPTRACE_B2B_WIRELESS", "SKIPTRACE_B2B_WIRELESS_NUMBERS")
B2B_LANDLINE_FIELDS = ("SKIPTRACE_B2B_LANDLINE", "SKIPTRACE_B2B_LANDLINE_NUMBERS")
B2C_WIRELESS_FIELDS = ("SKIPTRACE_WIRELESS_NUMBERS",)
B2C_LANDLINE_FIELDS = ("SKIPTRACE_LANDLINE_NUMBERS",)
GENERIC_WIRELESS_FIELDS = ("mobile_phone",)
GENERIC_OTHER_FIELDS = ("phone",)

PHONE_JOIN_SEPARATOR = "|"


def normalize_phone(raw: Optional[str]) -> str:
    """
    Normalize a single phone value to E.164.

    Args:
        raw: Raw phone text in any formatting.

    Returns:
        "+1XXXXXXXXXX" for 10-digit NANP numbers, "+" plus digits for
        longer numbers, or "" when fewer than 10 digits remain.

    Examples:
        >>> normalize_phone("(305) 555-1234")
        '+13055551234'
        >>> normalize_phone("1-305-555-1234")
        '+13055551234'
        >>> normalize_phone("555-1234")
        ''
    """
    if not raw:
        return ""

    digits = NON_DIGITS.sub("", str(raw))

    if len(digits) < MIN_PHONE_DIGITS:
        return ""
    if len(digits) == NANP_LOCAL_LENGTH:
        return f"+{NANP_COUNTRY_CODE}{digits}"
    return f"+{digits}"


def split_phone_list(raw: Optional[str]) -> List[str]:
    """Split a provider phone list on ',', '|' or ';' dropping blanks."""
    if not raw:
        return []
    return [part.strip() for part in PHONE_LIST_SEPARATORS.split(raw) if part.strip()]


def _phone_sources(scope: EffectiveScope) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """Return (wireless_fields, landline_fields) for the effective scope."""
    if scope == "commercial":
        return (
            B2B_WIRELESS_FIELDS + GENERIC_WIRELESS_FIELDS,
            B2B_LANDLINE_FIELDS,
        )
    return (
        B2C_WIRELESS_FIELDS + GENERIC_WIRELESS_FIELDS,
        B2C_LANDLINE_FIELDS,
    )


def _collect(
    contact: Mapping[str, Any],
    field_names: Tuple[str, ...],
    seen: set,
) -> List[str]:
    collected: List[str] = []
    for field_name in field_names:
        for item in split_phone_list(get_field(contact, field_name)):
            phone = normalize_phone(item)
            if phone and phone not in seen:
                seen.add(phone)
                collected.append(phone)
    return collected


def parse_all_phones(contact: Mapping[str, Any], scope: EffectiveScope) -> ParsedPhones:
    """
    Gather every phone of a contact, grouped by line type.

    Deduplication is by normalized value across all categories; the first
    category to see a number keeps it (wireless, then landline, then other).

    Args:
        contact: Raw provider contact.
        scope: Effective scope deciding which skiptrace fields apply.

    Returns:
        ParsedPhones with best = first wireless, else landline, else other.
    """
    wireless_fields, landline_fields = _phone_sources(scope)
    seen: set = set()

    wireless = _collect(contact, wireless_fields, seen)
    landline = _collect(contact, landline_fields, seen)
    other = _collect(contact, GENERIC_OTHER_FIELDS, seen)

    best = ""
    for group in (wireless, landline, other):
        if group:
            best = group[0]
            break

    return {
        "all": wireless + landline + other,
        "wireless": wireless,
        "landline": landline,
        "best": best,
    }


def join_phones(phones: List[str]) -> str:
    """Pipe-join a phone list for the flat Lead record."""
    return PHONE_JOIN_SEPARATOR.join(phones)
