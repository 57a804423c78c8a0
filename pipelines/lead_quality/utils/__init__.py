"""Utility functions for the Lead Quality pipeline."""

from pipelines.lead_quality.utils.field_access import get_field, get_first_field
from pipelines.lead_quality.utils.helpers import (
    ensure_export_dir,
    sanitize_filename,
    get_timestamp,
    guard_formula,
)
from pipelines.lead_quality.utils.phones import normalize_phone, parse_all_phones
from pipelines.lead_quality.utils.scope import resolve_effective_scope

__all__ = [
    "get_field",
    "get_first_field",
    "ensure_export_dir",
    "sanitize_filename",
    "get_timestamp",
    "guard_formula",
    "normalize_phone",
    "parse_all_phones",
    "resolve_effective_scope",
]
