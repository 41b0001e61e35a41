from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cart_pilot.agent.service import Agent
    from cart_pilot.agent.settings import AgentSettings
    from cart_pilot.agent.state import AgentStatus, TaskOutcome

_LAZY_IMPORTS = {
    "Agent": ("cart_pilot.agent.service", "Agent"),
    "AgentSettings": ("cart_pilot.agent.settings", "AgentSettings"),
    "AgentStatus": ("cart_pilot.agent.state", "AgentStatus"),
    "TaskOutcome": ("cart_pilot.agent.state", "TaskOutcome"),
}


def __getattr__(name: str):
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        from importlib import import_module

        attr = getattr(import_module(module_path), attr_name)
        globals()[name] = attr
        return attr
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = ["Agent", "AgentSettings", "AgentStatus", "TaskOutcome"]
