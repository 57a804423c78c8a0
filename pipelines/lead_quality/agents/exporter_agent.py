"""Export agent for the Lead Quality pipeline."""

import csv
import json
import uuid
from pathlib import Path
from typing import Any, Dict, List, Mapping

from core.logger import get_logger
from pipelines.core.base_agent import BaseAgent
from pipelines.lead_quality.config import EXPORT_PATH
from pipelines.lead_quality.utils.helpers import (
    ensure_export_dir,
    get_timestamp,
    guard_formula,
    sanitize_filename,
)

logger = get_logger(__name__)

# Fixed CSV column order for delivered leads
CSV_COLUMNS = (
    "first_name",
    "last_name",
    "address",
    "city",
    "state",
    "zip",
    "phone",
    "email",
    "lead_type",
    "tags",
    "source",
    "best_phone",
    "phones_all",
    "wireless_phones",
    "landline_phones",
    "match_score",
    "quality_score",
    "quality_tier",
)


def lead_to_csv_row(lead: Mapping[str, Any]) -> List[str]:
    """Project a lead onto CSV_COLUMNS with every cell formula-guarded."""
    return [guard_formula(lead.get(column)) for column in CSV_COLUMNS]


class ExporterAgent(BaseAgent):
    """
    Agent that exports formatted leads to files.

    Writes the leads as CSV and the run summary as a JSON sidecar.
    Creates timestamped files in the configured export directory.

    Input: formatted_leads, summary, scope_context
    Output: export_status with file paths and counts
    """

    output_keys = ("export_status",)

    def __init__(self, export_path: Path = EXPORT_PATH) -> None:
        """
        Initialize the exporter agent.

        Args:
            export_path: Directory path for exports.
        """
        super().__init__(name="ExporterAgent")
        self.export_path = Path(export_path)

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Export formatted leads to CSV and the summary to JSON.

        Args:
            input_data: Dict with 'formatted_leads', 'summary' and
                'scope_context'.

        Returns:
            Dict with 'export_status' containing file paths and counts.

        Raises:
            ValueError: If formatted_leads is missing (contract violation).
        """
        leads = self.require(input_data, "formatted_leads", list, "LeadFormatterAgent")
        summary = input_data.get("summary", {})
        context = input_data.get("scope_context") or {}

        # Ensure export directory exists
        ensure_export_dir(self.export_path)

        # Generate filename base with UUID for collision safety
        timestamp = get_timestamp()
        run_id = uuid.uuid4().hex[:8]
        request_safe = sanitize_filename(context.get("lead_request", "")) or "leads"
        scope_safe = sanitize_filename(context.get("scope", "")) or "unknown"
        filename_base = f"{request_safe}_{scope_safe}_{timestamp}_{run_id}"

        csv_path = self.export_path / f"{filename_base}.csv"
        self._export_csv(leads, csv_path)

        json_path = self.export_path / f"{filename_base}.summary.json"
        self._export_summary(summary, json_path)

        export_status = {
            "total_exported": len(leads),
            "csv_path": str(csv_path),
            "summary_path": str(json_path),
            "export_directory": str(self.export_path),
        }

        logger.info(f"Export created successfully: {len(leads)} leads")
        logger.info(f"  CSV: {csv_path}")
        logger.info(f"  Summary: {json_path}")

        return {"export_status": export_status}

    def _export_csv(self, leads: List[Dict[str, Any]], path: Path) -> None:
        """Export leads to CSV file (header row only when empty)."""
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(CSV_COLUMNS)
            for lead in leads:
                writer.writerow(lead_to_csv_row(lead))

    def _export_summary(self, summary: Dict[str, Any], path: Path) -> None:
        """Export the run summary to a JSON file."""
        with open(path, "w", encoding="utf-8") as f:
            json.dump(summary, f, indent=2, ensure_ascii=False)
