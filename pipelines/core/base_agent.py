"""Abstract base class for all pipeline agents."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple, Type, Union


class BaseAgent(ABC):
    """
    Abstract base class that all agents must inherit from.

    Agents are the primary execution units in pipelines. Each agent
    receives the accumulated pipeline context, reads the keys it depends
    on, and returns a dict of new keys to merge into the context.

    Subclasses list the context keys they produce in `output_keys` so the
    runner can report what each stage contributed.
    """

    output_keys: Tuple[str, ...] = ()

    def __init__(self, name: str) -> None:
        """
        Initialize the agent.

        Args:
            name: Unique identifier for this agent.
        """
        self.name = name

    @abstractmethod
    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Execute the agent's main logic.

        Args:
            input_data: Dictionary containing the pipeline context.

        Returns:
            Dictionary containing output results.
        """
        pass

    def require(
        self,
        input_data: Dict[str, Any],
        key: str,
        expected_type: Union[Type[Any], Tuple[Type[Any], ...]],
        producer: str,
    ) -> Any:
        """
        Read a mandatory context key, failing fast on contract violations.

        Args:
            input_data: Pipeline context.
            key: Context key this agent depends on.
            expected_type: Type (or tuple of types) the value must have.
            producer: Name of the upstream stage expected to provide the key.

        Returns:
            The context value.

        Raises:
            ValueError: If the key is missing or has the wrong type.
        """
        value = input_data.get(key)

        if value is None:
            raise ValueError(
                f"Pipeline contract violation: '{key}' key missing. "
                f"{self.name} requires input from {producer}."
            )

        if not isinstance(value, expected_type):
            raise ValueError(
                f"Pipeline contract violation: '{key}' must be "
                f"{_type_label(expected_type)}, got {type(value).__name__}"
            )

        return value

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


def _type_label(expected_type: Union[Type[Any], Tuple[Type[Any], ...]]) -> str:
    if isinstance(expected_type, tuple):
        return " or ".join(t.__name__ for t in expected_type)
    return f"a {expected_type.__name__}"
