"""Agents for the Lead Quality Pipeline."""

from pipelines.lead_quality.agents.request_validation_agent import RequestValidationAgent
from pipelines.lead_quality.agents.contact_fetch_agent import ContactFetchAgent
from pipelines.lead_quality.agents.recipe_engine_agent import RecipeEngineAgent
from pipelines.lead_quality.agents.lead_scoring_agent import LeadScoringAgent
from pipelines.lead_quality.agents.compliance_agent import ComplianceAgent
from pipelines.lead_quality.agents.quality_gate_agent import QualityGateAgent
from pipelines.lead_quality.agents.lead_formatter_agent import LeadFormatterAgent
from pipelines.lead_quality.agents.exporter_agent import ExporterAgent

__all__ = [
    "RequestValidationAgent",
    "ContactFetchAgent",
    "RecipeEngineAgent",
    "LeadScoringAgent",
    "ComplianceAgent",
    "QualityGateAgent",
    "LeadFormatterAgent",
    "ExporterAgent",
]
