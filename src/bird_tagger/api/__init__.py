"""
Vision API integrations.

This module provides a unified interface for the supported AI vision services
through client classes that turn an image into a list of bird detections.
"""

from .base import VisionClient, ClassificationServiceError, parse_detections
from .clients import CLIENTS, OpenAIClient, ClaudeClient, GeminiClient, get_client
from .prompt import PROMPT_TEMPLATE, BirdDetection, BirdsResponse

__all__ = [
    # Main classes
    "VisionClient",
    "ClassificationServiceError",
    "OpenAIClient",
    "ClaudeClient",
    "GeminiClient",
    "CLIENTS",
    "get_client",

    # Schema and parsing
    "PROMPT_TEMPLATE",
    "BirdDetection",
    "BirdsResponse",
    "parse_detections",
]
