"""
Identity resolution for provider contacts: name, location and email.

Name and location follow a priority cascade: verified-offline skiptrace
fields first, then (for commercial contacts) company fields, then
self-reported online fields. The first non-empty value wins per field.
Email prefers the scope's validated family (business or personal) and
falls back to the generic unvalidated field.
"""

from typing import Any, Mapping, Optional, Tuple, TypedDict

from core.contracts.leads import EffectiveScope
from pipelines.lead_quality.utils.field_access import get_field, get_first_field

# =============================================================================
# FIELD CASCADES
# =============================================================================

FULL_NAME_FIELD = "SKIPTRACE_NAME"

FIRST_NAME_FIELDS = ("SKIPTRACE_FIRST_NAME", "FIRST_NAME", "first_name")
LAST_NAME_FIELDS = ("SKIPTRACE_LAST_NAME", "LAST_NAME", "last_name")

SKIPTRACE_LOCATION_FIELDS = {
    "address": ("SKIPTRACE_ADDRESS",),
    "city": ("SKIPTRACE_CITY",),
    "state": ("SKIPTRACE_STATE",),
    "zip": ("SKIPTRACE_ZIP",),
}

COMPANY_LOCATION_FIELDS = {
    "address": ("COMPANY_ADDRESS",),
    "city": ("COMPANY_CITY",),
    "state": ("COMPANY_STATE",),
    "zip": ("COMPANY_ZIP",),
}

ONLINE_LOCATION_FIELDS = {
    "address": ("address", "street_address"),
    "city": ("city",),
    "state": ("state",),
    "zip": ("zip", "postal_code"),
}

LOCATION_KEYS = ("address", "city", "state", "zip")


class ResolvedLocation(TypedDict):
    address: str
    city: str
    state: str
    zip: str


# =============================================================================
# NAME RESOLUTION
# =============================================================================

def parse_name(full_name: str) -> Tuple[str, str]:
    """
    Split a full name into (first, last).

    The last whitespace-delimited token is the last name; everything
    before it is the first name. A single token is a first name only.

    Examples:
        >>> parse_name("John Michael Doe")
        ('John Michael', 'Doe')
        >>> parse_name("  Cher ")
        ('Cher', '')
    """
    tokens = (full_name or "").split()
    if not tokens:
        return "", ""
    if len(tokens) == 1:
        return tokens[0], ""
    return " ".join(tokens[:-1]), tokens[-1]


def resolve_name(contact: Mapping[str, Any]) -> Tuple[str, str]:
    """Resolve (first_name, last_name) via the full-name field or the per-field cascade."""
    full_name = get_field(contact, FULL_NAME_FIELD)
    if full_name is not None:
        first, last = parse_name(full_name)
        if first or last:
            return first, last

    first = get_first_field(contact, FIRST_NAME_FIELDS) or ""
    last = get_first_field(contact, LAST_NAME_FIELDS) or ""
    return first.strip(), last.strip()


# =============================================================================
# LOCATION RESOLUTION
# =============================================================================

def location_cascade(key: str, scope: EffectiveScope) -> Tuple[str, ...]:
    """Ordered field names consulted for one location component."""
    cascade = SKIPTRACE_LOCATION_FIELDS[key]
    if scope == "commercial":
        cascade = cascade + COMPANY_LOCATION_FIELDS[key]
    return cascade + ONLINE_LOCATION_FIELDS[key]


def resolve_location(contact: Mapping[str, Any], scope: EffectiveScope) -> ResolvedLocation:
    """
    Resolve address, city, state and zip independently per component.

    Args:
        contact: Raw provider contact.
        scope: Effective scope; company fields only count for commercial.

    Returns:
        ResolvedLocation with empty strings for unresolved components.
    """
    resolved = {
        key: (get_first_field(contact, location_cascade(key, scope)) or "").strip()
        for key in LOCATION_KEYS
    }
    return ResolvedLocation(**resolved)


def is_missing_name_or_address(first_name: str, last_name: str, address: str) -> bool:
    """Diagnostic flag only: both name tokens empty, or no street address."""
    return (not first_name and not last_name) or not address


# =============================================================================
# EMAIL RESOLUTION
# =============================================================================

BUSINESS_EMAIL_FIELD = "BUSINESS_EMAIL"
PERSONAL_EMAIL_FIELD = "PERSONAL_EMAIL"
VALIDATION_STATUS_SUFFIX = "_VALIDATION_STATUS"
GENERIC_EMAIL_FIELD = "email"

VALID_ESP_STATUSES = ("valid (esp)", "valid(esp)")
VALID_STATUS_PREFIX = "valid"


class EmailSelection(TypedDict):
    """Best email for a contact plus its provider validation status."""
    email: str
    validation_status: Optional[str]
    is_valid: bool
    is_valid_esp: bool


def scoped_email_field(scope: EffectiveScope) -> str:
    return BUSINESS_EMAIL_FIELD if scope == "commercial" else PERSONAL_EMAIL_FIELD


def is_email_valid_esp(status: Optional[str]) -> bool:
    """True only for the "Valid (Esp)" status, spacing and case ignored."""
    if not status:
        return False
    return status.strip().lower() in VALID_ESP_STATUSES


def is_email_at_least_valid(status: Optional[str]) -> bool:
    """A missing status is assumed valid; otherwise it must start with "valid"."""
    if not status:
        return True
    return status.strip().lower().startswith(VALID_STATUS_PREFIX)


def select_quality_email(contact: Mapping[str, Any], scope: EffectiveScope) -> EmailSelection:
    """
    Pick the scope-appropriate email with its validation status.

    Commercial contacts read BUSINESS_EMAIL, residential ones PERSONAL_EMAIL,
    each paired with its *_VALIDATION_STATUS field. Without one, the generic
    'email' field is used with no status.
    """
    field_name = scoped_email_field(scope)
    email = get_field(contact, field_name)
    if email is not None:
        status = get_field(contact, field_name + VALIDATION_STATUS_SUFFIX)
        return {
            "email": email.strip(),
            "validation_status": status.strip() if status else None,
            "is_valid": is_email_at_least_valid(status),
            "is_valid_esp": is_email_valid_esp(status),
        }

    generic = get_field(contact, GENERIC_EMAIL_FIELD)
    return {
        "email": generic.strip() if generic else "",
        "validation_status": None,
        "is_valid": True,
        "is_valid_esp": False,
    }
