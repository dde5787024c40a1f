"""
Application services module.
"""

from propvest.services.genai import GenAIService, get_genai_service

__all__ = ["GenAIService", "get_genai_service"]
