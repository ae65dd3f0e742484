"""
Bird Tagger

Identifies the birds in a folder of photos with AI vision models, keeps a life
list of every species seen, and organizes or XMP-tags the photos.
"""

__version__ = "0.1.0"

from .core.scan_engine import BirdTaggerEngine
from .api import (
    VisionClient,
    ClassificationServiceError,
    OpenAIClient,
    ClaudeClient,
    GeminiClient,
    get_client,
)
