"""Model backends for stick-gpt.

This package provides the abstract ModelClient contract and async wrappers
for the Ollama and OpenAI chat APIs.
"""

from stick_gpt.llm.base import ModelClient, ModelReply
from stick_gpt.llm.ollama_client import OllamaClient
from stick_gpt.llm.openai_client import OpenAIClient

__all__ = ["ModelClient", "ModelReply", "OllamaClient", "OpenAIClient"]
