#!/usr/bin/env python
"""
CLI entry point for the Lead Quality Pipeline.

Run this script directly:
    python pipelines/lead_quality/cli.py -r "kitchen remodeling" -z "33101 33130" -s residential

Options via environment variables:
    AUDIENCELAB_API_KEY      Provider API key (required unless mocked or --contacts)
    AUDIENCELAB_BASE_URL     Provider base URL (default: https://api.audiencelab.io)
    MOCK_PROVIDER=1          Use a synthetic contact batch instead of the provider
    CALL_SUPPRESS_STATES     Comma-separated states to drop for call campaigns
                             (default: TX; "" or "none" disables)
    LEAD_QUALITY_TIER        Default quality tier: hot | balanced | scale
    LEAD_SOURCE              Source identifier stamped on leads
    LEAD_EXPORT_PATH         Export directory (default: exports/lead_quality/)
    LEAD_ENGINE_LOG_LEVEL    Log level (default: INFO)

Command line arguments:
    --lead-request, -r       What the leads should be interested in (required)
    --zips, -z               ZIP codes, space or comma separated (required)
    --scope, -s              residential | commercial | both (default: residential)
    --use-case, -u           call | email | both (default: both)
    --count, -n              Requested lead count (default: 200)
    --tier, -t               Quality tier (default: LEAD_QUALITY_TIER or balanced)
    --min-match-score        Override the recipe's minimum match score (0-3)
    --contacts               JSON file of raw contacts (skips the provider)
    --config                 YAML file with a 'lead_quality' section
    --output-dir, -o         Export directory override
    --no-export              Skip CSV/JSON export
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add project root to path for direct script execution
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from core.contracts.leads import LEAD_SCOPES, QUALITY_TIERS, USE_CASES
from core.logger import get_logger
from pipelines.lead_quality.agents.request_validation_agent import RequestValidationError
from pipelines.lead_quality.config import DEFAULT_REQUESTED_COUNT, load_engine_config
from pipelines.lead_quality.pipeline import PIPELINE_NAME, build_pipeline

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Lead Quality Pipeline - Fetch, filter and score audience leads",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Residential call campaign in two Miami ZIPs
  python cli.py -r "roof repair" -z "33101,33130" -s residential -u call

  # Score a saved provider batch without calling the API
  python cli.py -r "hvac install" -z 75201 -s both --contacts contacts.json --no-export
        """,
    )

    parser.add_argument(
        "-r", "--lead-request",
        required=True,
        help="What the leads should be interested in (3-200 characters)",
    )
    parser.add_argument(
        "-z", "--zips",
        required=True,
        help="ZIP codes, space or comma separated",
    )
    parser.add_argument(
        "-s", "--scope",
        choices=LEAD_SCOPES,
        default="residential",
        help="Lead scope (default: residential)",
    )
    parser.add_argument(
        "-u", "--use-case",
        choices=USE_CASES,
        default="both",
        help="Campaign use case (default: both)",
    )
    parser.add_argument(
        "-n", "--count",
        type=int,
        default=DEFAULT_REQUESTED_COUNT,
        help=f"Requested lead count (default: {DEFAULT_REQUESTED_COUNT})",
    )
    parser.add_argument(
        "-t", "--tier",
        choices=QUALITY_TIERS,
        default=None,
        help="Quality tier (default: LEAD_QUALITY_TIER env or balanced)",
    )
    parser.add_argument(
        "--min-match-score",
        type=int,
        default=None,
        help="Override the recipe's minimum match score (0-3)",
    )
    parser.add_argument(
        "--contacts",
        default=None,
        help="JSON file of raw contacts; skips the provider fetch",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML config file with a 'lead_quality' section",
    )
    parser.add_argument(
        "-o", "--output-dir",
        default=None,
        help="Export directory (default: LEAD_EXPORT_PATH or exports/lead_quality/)",
    )
    parser.add_argument(
        "--no-export",
        action="store_true",
        help="Skip CSV/JSON export",
    )

    return parser.parse_args(argv)


def load_contacts_file(path: str) -> List[Dict[str, Any]]:
    """
    Load raw contacts from a JSON file.

    Accepts either a top-level list or an object with a 'contacts' list.

    Raises:
        ValueError: If the file holds neither shape.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("contacts")
    if not isinstance(data, list):
        raise ValueError(f"Contacts file must hold a list of contacts: {path}")
    return data


def build_request(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate CLI arguments into the request payload shape."""
    request: Dict[str, Any] = {
        "leadRequest": args.lead_request,
        "zipCodes": args.zips,
        "leadScope": args.scope,
        "useCase": args.use_case,
        "requestedCount": args.count,
    }
    if args.min_match_score is not None:
        request["minMatchScore"] = args.min_match_score
    if args.tier:
        request["qualityTier"] = args.tier
    return request


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the pipeline.

    Returns:
        Process exit code: 0 on success, 1 when nothing was delivered,
        2 on invalid input.
    """
    args = parse_args(argv)

    try:
        config = load_engine_config(args.config)
    except ValueError as e:
        logger.error(str(e))
        return 2

    if args.output_dir:
        config["export_path"] = Path(args.output_dir)

    context: Dict[str, Any] = {"request": build_request(args)}
    if args.contacts:
        try:
            context["raw_contacts"] = load_contacts_file(args.contacts)
        except (OSError, ValueError) as e:
            logger.error(f"Could not load contacts: {e}")
            return 2

    # Print startup banner
    logger.info("=" * 60)
    logger.info(f"Running {PIPELINE_NAME}")
    logger.info(f"  Scope: {args.scope}")
    logger.info(f"  Use Case: {args.use_case}")
    logger.info(f"  Quality Tier: {args.tier or config['quality_tier']}")
    logger.info(f"  Contacts: {'file' if args.contacts else 'provider'}")
    logger.info(f"  Export: {not args.no_export}")
    logger.info("=" * 60)

    pipeline = build_pipeline(
        config,
        fetch=args.contacts is None,
        export=not args.no_export,
    )

    try:
        result = pipeline.run(context)
    except RuntimeError as e:
        if isinstance(e.__cause__, RequestValidationError):
            logger.error(f"✗ Invalid request [{e.__cause__.code}]: {e.__cause__.message}")
            return 2
        logger.error(f"✗ Pipeline failed: {e}")
        raise

    _print_summary(result)
    delivered = result["summary"]["delivered_count"]
    return 0 if delivered > 0 else 1


def _print_summary(result: Dict[str, Any]) -> None:
    """Print counts-only run summary."""
    summary = result.get("summary", {})
    diagnostics = summary.get("diagnostics") or {}

    logger.info("-" * 60)
    logger.info("PIPELINE RESULTS:")
    logger.info(f"  Fetched: {diagnostics.get('total_fetched', 0)}")
    logger.info(f"  Kept by Recipe: {diagnostics.get('kept', 0)}")
    logger.info(f"  Suppressed: {summary.get('suppressed_count', 0)}")
    logger.info(f"  Rejected by Quality: {summary.get('rejected_by_quality_count', 0)}")
    logger.info(f"  Delivered: {summary.get('delivered_count', 0)}")

    if summary.get("warning"):
        logger.warning(f"  {summary['warning']}")

    export_status = result.get("export_status")
    if export_status:
        logger.info(f"  CSV: {export_status['csv_path']}")
        logger.info(f"  Summary: {export_status['summary_path']}")

    logger.info("-" * 60)
    logger.info("✓ Pipeline completed")


if __name__ == "__main__":
    sys.exit(main())
