"""Configuration constants for the Lead Quality pipeline."""

import os
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, TypedDict

from dotenv import load_dotenv

from core.config_loader import load_section
from core.contracts.leads import QUALITY_TIERS

# Pipeline identification
PIPELINE_NAME = "LEAD_QUALITY_PIPELINE"

# Source identifier stamped on every lead
SOURCE_IDENTIFIER = "audiencelab"

# Export configuration (created lazily by the exporter)
EXPORT_PATH = Path("exports/lead_quality/")

# Request defaults
DEFAULT_QUALITY_TIER = "balanced"
DEFAULT_REQUESTED_COUNT = 200

# States suppressed for call campaigns unless configured otherwise
DEFAULT_SUPPRESS_STATES = ("TX",)

# Sentinel that disables state suppression
SUPPRESSION_DISABLED_TOKEN = "none"

# Section read from an optional YAML config file
CONFIG_SECTION = "lead_quality"

# Environment variable names
ENV_SUPPRESS_STATES = "CALL_SUPPRESS_STATES"
ENV_QUALITY_TIER = "LEAD_QUALITY_TIER"
ENV_SOURCE = "LEAD_SOURCE"
ENV_EXPORT_PATH = "LEAD_EXPORT_PATH"


class EngineConfig(TypedDict):
    """Explicit configuration struct handed to the pipeline entry points."""
    suppress_states: List[str]
    quality_tier: str
    source: str
    export_path: Path


def parse_suppress_states(raw: Optional[str]) -> List[str]:
    """
    Turn the external suppression setting into a list of state codes.

    Args:
        raw: Raw setting value. None means "not configured".

    Returns:
        Uppercased state codes. The default list when unset, an empty
        list when set to "" or "none" (any case).

    Examples:
        >>> parse_suppress_states(None)
        ['TX']
        >>> parse_suppress_states(" ny , ca,,")
        ['NY', 'CA']
        >>> parse_suppress_states("None")
        []
    """
    if raw is None:
        return list(DEFAULT_SUPPRESS_STATES)

    if raw.strip().lower() in ("", SUPPRESSION_DISABLED_TOKEN):
        return []

    return [part.strip().upper() for part in raw.split(",") if part.strip()]


def _normalize_states(value: object) -> List[str]:
    """Accept either a comma string or a YAML list for suppress_states."""
    if value is None:
        return list(DEFAULT_SUPPRESS_STATES)
    if isinstance(value, str):
        return parse_suppress_states(value)
    if isinstance(value, Sequence):
        return [str(v).strip().upper() for v in value if str(v).strip()]
    raise ValueError(
        f"suppress_states must be a string or list, got {type(value).__name__}"
    )


def load_engine_config(
    config_path: Optional[str | Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> EngineConfig:
    """
    Build the engine configuration.

    Priority order (highest first):
        1. Environment variables (CALL_SUPPRESS_STATES, LEAD_QUALITY_TIER,
           LEAD_SOURCE, LEAD_EXPORT_PATH)
        2. The 'lead_quality' section of an optional YAML file
        3. Module defaults

    Args:
        config_path: Optional YAML file path.
        env: Environment mapping. Defaults to os.environ after loading .env.

    Returns:
        Populated EngineConfig.

    Raises:
        ValueError: If the configured quality tier is unknown.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    file_config = load_section(config_path, CONFIG_SECTION) if config_path else {}

    if ENV_SUPPRESS_STATES in env:
        suppress_states = parse_suppress_states(env[ENV_SUPPRESS_STATES])
    else:
        suppress_states = _normalize_states(file_config.get("suppress_states"))

    quality_tier = (
        env.get(ENV_QUALITY_TIER)
        or file_config.get("quality_tier")
        or DEFAULT_QUALITY_TIER
    ).strip().lower()
    if quality_tier not in QUALITY_TIERS:
        raise ValueError(
            f"Invalid quality tier: '{quality_tier}'. "
            f"Allowed tiers: {list(QUALITY_TIERS)}"
        )

    source = env.get(ENV_SOURCE) or file_config.get("source") or SOURCE_IDENTIFIER
    export_path = Path(
        env.get(ENV_EXPORT_PATH) or file_config.get("export_path") or EXPORT_PATH
    )

    return {
        "suppress_states": suppress_states,
        "quality_tier": quality_tier,
        "source": str(source),
        "export_path": export_path,
    }
