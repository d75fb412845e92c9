"""Agent orchestration layer.

This package provides the ChatOrchestrator that runs the tool-calling
conversation loop.
"""

from stick_gpt.agents.orchestrator import ChatOrchestrator, OrchestratorState

__all__ = ["ChatOrchestrator", "OrchestratorState"]
