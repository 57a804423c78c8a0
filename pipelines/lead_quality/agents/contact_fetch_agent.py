"""Contact fetch agent for the Lead Quality pipeline."""

from typing import Any, Dict, Optional

from core.logger import get_logger
from pipelines.core.base_agent import BaseAgent
from pipelines.lead_quality.providers.audiencelab import (
    DEFAULT_MAX_CONTACTS,
    AudienceLabError,
    ProviderConfigError,
    fetch_contacts,
)

logger = get_logger(__name__)


class ContactFetchAgent(BaseAgent):
    """
    Agent that pulls raw audience contacts from the provider.

    Contacts already present in the context (e.g. loaded from a file)
    are passed through untouched and the provider is not called.

    Input: scope_context, quality_tier, raw_contacts (optional)
    Output: raw_contacts, fetch_metadata
    """

    output_keys = ("raw_contacts", "fetch_metadata")

    def __init__(
        self,
        max_contacts: int = DEFAULT_MAX_CONTACTS,
        mock: Optional[bool] = None,
    ) -> None:
        """
        Initialize the contact fetch agent.

        Args:
            max_contacts: Cap on fetched provider members.
            mock: Force provider mock mode on/off (default: MOCK_PROVIDER).
        """
        super().__init__(name="ContactFetchAgent")
        self.max_contacts = max_contacts
        self.mock = mock

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Fetch raw contacts for the validated request.

        Args:
            input_data: Dict with 'scope_context' and 'quality_tier'.

        Returns:
            Dict with 'raw_contacts' list and 'fetch_metadata'.

        Raises:
            ValueError: If scope_context is missing (contract violation).
            AudienceLabError: Typed provider failure.
            ProviderConfigError: Missing provider credentials.
        """
        context = self.require(input_data, "scope_context", dict, "RequestValidationAgent")
        tier = input_data.get("quality_tier", "balanced")

        preloaded = input_data.get("raw_contacts")
        if preloaded is not None:
            if not isinstance(preloaded, list):
                raise ValueError(
                    f"Pipeline contract violation: 'raw_contacts' must be a list, "
                    f"got {type(preloaded).__name__}"
                )
            logger.info(f"Using {len(preloaded)} preloaded contacts (provider skipped)")
            return {
                "raw_contacts": preloaded,
                "fetch_metadata": {
                    "total_fetched": len(preloaded),
                    "audience_id": None,
                    "request_id": None,
                    "mock_mode": False,
                    "preloaded": True,
                },
            }

        try:
            result = fetch_contacts(
                context, tier, max_contacts=self.max_contacts, mock=self.mock
            )
        except (AudienceLabError, ProviderConfigError) as e:
            logger.error(f"Provider fetch failed: {e.to_safe_context()}")
            raise

        contacts = result["contacts"]
        logger.info(f"Fetched {len(contacts)} raw contacts")

        return {
            "raw_contacts": contacts,
            "fetch_metadata": {
                "total_fetched": len(contacts),
                "audience_id": result["audience_id"],
                "request_id": result["request_id"],
                "mock_mode": result["mock_mode"],
                "preloaded": False,
            },
        }
