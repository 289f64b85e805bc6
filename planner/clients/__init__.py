"""Clients for external HTTP services."""

from planner.clients.gemini import GeminiAPIError, GeminiClient

__all__ = ["GeminiAPIError", "GeminiClient"]
