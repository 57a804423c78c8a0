"""
Field access helpers for loosely-structured provider contacts.

Provider records carry the same logical field either at the root or
inside one of a few nested containers. Lookup walks an explicit ordered
container list and the first non-empty value wins.
"""

from typing import Any, Iterable, Mapping, Optional

# Nested containers checked after the record root, in order
NESTED_CONTAINERS = ("fields", "data", "profile")

# Separator used when a provider sends a list of scalars
LIST_JOIN_SEPARATOR = ","


def _coerce_value(value: Any) -> Optional[str]:
    """
    Convert a raw field value to a non-empty string or None.

    Nested mappings are never treated as values.
    """
    if value is None or isinstance(value, Mapping):
        return None

    if isinstance(value, (list, tuple)):
        parts = [_coerce_value(item) for item in value]
        joined = LIST_JOIN_SEPARATOR.join(p for p in parts if p is not None)
        return joined or None

    text = value if isinstance(value, str) else str(value)
    if not text.strip():
        return None
    return text


def get_field(contact: Mapping[str, Any], name: str) -> Optional[str]:
    """
    Read a field from a contact, checking the root then nested containers.

    Args:
        contact: Raw provider contact. Never mutated.
        name: Exact field name.

    Returns:
        The value as a string, or None when absent or empty.

    Examples:
        >>> get_field({"FIRST_NAME": "Ann"}, "FIRST_NAME")
        'Ann'
        >>> get_field({"data": {"zip": 33101}}, "zip")
        '33101'
        >>> get_field({"email": ""}, "email") is None
        True
    """
    if not isinstance(contact, Mapping):
        return None

    value = _coerce_value(contact.get(name))
    if value is not None:
        return value

    for container_name in NESTED_CONTAINERS:
        container = contact.get(container_name)
        if not isinstance(container, Mapping):
            continue
        value = _coerce_value(container.get(name))
        if value is not None:
            return value

    return None


def get_first_field(
    contact: Mapping[str, Any],
    names: Iterable[str],
) -> Optional[str]:
    """Return the first present value from an ordered cascade of field names."""
    for name in names:
        value = get_field(contact, name)
        if value is not None:
            return value
    return None
