"""Completion collaborator client, settings and format agent."""

from .config import LlmSettings
from .format_agent import FormatAgent
from .openrouter import CompletionClient, CompletionRequestError

__all__ = ["CompletionClient", "CompletionRequestError", "FormatAgent", "LlmSettings"]
