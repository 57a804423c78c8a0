"""Helper utilities for the Lead Quality pipeline."""

import re
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

# Leading characters spreadsheet apps evaluate as a formula
FORMULA_TRIGGER_CHARS = ("=", "+", "-", "@", "\t", "\r")


def ensure_export_dir(path: Path) -> Path:
    """
    Ensure export directory exists, creating it if necessary.

    Args:
        path: Path to the export directory.

    Returns:
        The path object (for chaining).
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def sanitize_filename(name: str, max_length: int = 50) -> str:
    """
    Sanitize a string for use as a filename.

    Args:
        name: Raw string to sanitize.
        max_length: Maximum length of output string.

    Returns:
        Sanitized filename-safe string.
    """
    sanitized = re.sub(r'[^\w\-]', '_', name)
    sanitized = re.sub(r'_+', '_', sanitized)
    sanitized = sanitized.strip('_')
    return sanitized[:max_length]


def get_timestamp(format_str: Optional[str] = None) -> str:
    """
    Get current timestamp as formatted string.

    Args:
        format_str: Optional strftime format string.
            Defaults to '%Y-%m-%d_%H%M%S'.

    Returns:
        Formatted timestamp string.
    """
    fmt = format_str or '%Y-%m-%d_%H%M%S'
    return datetime.now().strftime(fmt)


# =============================================================================
# Spreadsheet-safe cell values
# =============================================================================

def guard_formula(value: Any) -> str:
    """
    Make a cell value safe to open in a spreadsheet.

    E.164 phones start with '+', which spreadsheet apps would evaluate as a
    formula. Any value starting with a formula trigger gets a single leading
    apostrophe to force text interpretation.

    Examples:
        >>> guard_formula("+13055551234")
        "'+13055551234"
        >>> guard_formula("=1+1")
        "'=1+1"
        >>> guard_formula(None)
        ''
        >>> guard_formula(42)
        '42'
    """
    if value is None:
        return ""

    text = str(value)
    if text.startswith(FORMULA_TRIGGER_CHARS):
        return f"'{text}"
    return text
