"""Lead Quality Pipeline - Recipe filtering and quality scoring for audience leads."""

from pipelines.lead_quality.pipeline import build_pipeline, run_quality_engine, PIPELINE_NAME
from pipelines.lead_quality.config import EXPORT_PATH, load_engine_config

__all__ = ["build_pipeline", "run_quality_engine", "PIPELINE_NAME", "EXPORT_PATH", "load_engine_config"]
