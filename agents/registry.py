"""Agent registry for looking up agents by name."""

from typing import Dict, Type
from agents.base import BaseAgent


class AgentRegistry:
    """Registry holding agent classes and one shared instance per name."""

    def __init__(self):
        self._agents: Dict[str, Type[BaseAgent]] = {}
        self._instances: Dict[str, BaseAgent] = {}

    def register(self, name: str, agent_class: Type[BaseAgent]):
        """Register an agent class.

        Args:
            name: Agent name
            agent_class: Agent class
        """
        self._agents[name] = agent_class

    def get(self, name: str) -> BaseAgent:
        """Get or create the shared agent instance.

        Args:
            name: Agent name

        Returns:
            Agent instance

        Raises:
            KeyError: no agent registered under ``name``
        """
        if name not in self._instances:
            if name not in self._agents:
                raise KeyError(f"Agent '{name}' not registered")
            self._instances[name] = self._agents[name]()
        return self._instances[name]

    def override(self, name: str, instance: BaseAgent):
        """Replace the shared instance, e.g. with one built on a fake client."""
        self._instances[name] = instance

    def reset(self):
        """Drop cached instances so the next ``get`` builds fresh agents."""
        self._instances.clear()

    def list_agents(self) -> list[str]:
        return list(self._agents.keys())


# Global registry instance
registry = AgentRegistry()


def register_agent(name: str):
    """Decorator to register an agent.

    Args:
        name: Agent name
    """
    def decorator(cls: Type[BaseAgent]):
        registry.register(name, cls)
        return cls
    return decorator
