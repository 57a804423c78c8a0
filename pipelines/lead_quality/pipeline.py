"""Lead Quality Pipeline construction.

Stages:
    RequestValidationAgent → scope_context, quality_tier
    ContactFetchAgent      → raw_contacts, fetch_metadata       (optional)
    RecipeEngineAgent      → recipe_leads, lead_diagnostics, field_coverage
    LeadScoringAgent       → scored_leads, quality_stats
    ComplianceAgent        → compliant_leads, compliance_result
    QualityGateAgent       → delivered_leads, quality_gate_result, quality_report
    LeadFormatterAgent     → formatted_leads, summary
    ExporterAgent          → export_status                      (optional)
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from core.contracts.leads import ScopeContext
from core.logger import get_logger
from pipelines.core.base_agent import BaseAgent
from pipelines.core.runner import PipelineRunner
from pipelines.lead_quality.agents.compliance_agent import ComplianceAgent
from pipelines.lead_quality.agents.contact_fetch_agent import ContactFetchAgent
from pipelines.lead_quality.agents.exporter_agent import ExporterAgent
from pipelines.lead_quality.agents.lead_formatter_agent import LeadFormatterAgent
from pipelines.lead_quality.agents.lead_scoring_agent import LeadScoringAgent
from pipelines.lead_quality.agents.quality_gate_agent import QualityGateAgent
from pipelines.lead_quality.agents.recipe_engine_agent import RecipeEngineAgent
from pipelines.lead_quality.agents.request_validation_agent import RequestValidationAgent
from pipelines.lead_quality.config import PIPELINE_NAME, EngineConfig

logger = get_logger(__name__)


__all__ = [
    "build_pipeline",
    "build_core_agents",
    "run_quality_engine",
    "PIPELINE_NAME",
]


def build_core_agents(
    config: EngineConfig,
    now: Optional[datetime] = None,
) -> List[BaseAgent]:
    """
    Build the pure (no I/O) stages, from raw contacts to formatted leads.

    Args:
        config: Engine configuration.
        now: Optional fixed clock for the freshness check.

    Returns:
        Ordered agent list.
    """
    return [
        RecipeEngineAgent(source=config["source"], now=now),
        LeadScoringAgent(),
        ComplianceAgent(suppress_states=config["suppress_states"]),
        QualityGateAgent(),
        LeadFormatterAgent(),
    ]


def build_pipeline(
    config: EngineConfig,
    fetch: bool = True,
    export: bool = True,
    mock: Optional[bool] = None,
    now: Optional[datetime] = None,
) -> PipelineRunner:
    """
    Build the full Lead Quality pipeline.

    Pipeline flow:
        Input (request, [raw_contacts])
        ┌─────────────────────────────────────────────┐
        │  RequestValidationAgent                     │
        │  → scope_context, quality_tier              │
        ├─────────────────────────────────────────────┤
        │  ContactFetchAgent            (fetch=True)  │
        │  → raw_contacts, fetch_metadata             │
        ├─────────────────────────────────────────────┤
        │  RecipeEngine → Scoring → Compliance →      │
        │  QualityGate → LeadFormatter                │
        │  → formatted_leads, summary                 │
        ├─────────────────────────────────────────────┤
        │  ExporterAgent               (export=True)  │
        │  → export_status                            │
        └─────────────────────────────────────────────┘

    Args:
        config: Engine configuration.
        fetch: Include the provider fetch stage. When False the caller
            must supply 'raw_contacts' in the initial context.
        export: Include the file export stage.
        mock: Force provider mock mode on/off (default: MOCK_PROVIDER).
        now: Optional fixed clock for the freshness check.

    Returns:
        Configured PipelineRunner instance.
    """
    agents: List[BaseAgent] = [
        RequestValidationAgent(default_quality_tier=config["quality_tier"]),
    ]
    if fetch:
        agents.append(ContactFetchAgent(mock=mock))
    agents.extend(build_core_agents(config, now=now))
    if export:
        agents.append(ExporterAgent(export_path=config["export_path"]))

    logger.info(
        f"Building {PIPELINE_NAME} (fetch={fetch}, export={export}, "
        f"tier={config['quality_tier']})"
    )

    return PipelineRunner(name=PIPELINE_NAME, agents=agents)


def run_quality_engine(
    raw_contacts: List[Dict[str, Any]],
    context: ScopeContext,
    config: EngineConfig,
    quality_tier: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Run the core stages over an already-fetched contact batch.

    No network and no file I/O. Safe to call concurrently.

    Args:
        raw_contacts: Provider contacts.
        context: Validated request.
        config: Engine configuration.
        quality_tier: Overrides config['quality_tier'] when given.
        now: Optional fixed clock for the freshness check.

    Returns:
        Final pipeline context, including 'formatted_leads' and 'summary'.

    Raises:
        RuntimeError: If a stage fails (chained from the original error).
    """
    runner = PipelineRunner(
        name=f"{PIPELINE_NAME}_CORE",
        agents=build_core_agents(config, now=now),
    )
    return runner.run({
        "raw_contacts": raw_contacts,
        "scope_context": context,
        "quality_tier": quality_tier or config["quality_tier"],
    })
