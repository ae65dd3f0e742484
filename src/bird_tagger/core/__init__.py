"""
Core functionality for classifying, tracking and filing bird photos.
"""

from .models import Detection, ClassificationResult, ReviewStatus
from .routing import RoutingPolicy, needs_escalation
from .life_list import LifeListStore
from .stats import ImageRecord, RunContext, RunStats
from .file_operations import OutputApplier, OutputMode, OutputAction, OutputResult
from .preview import PreviewExtractor
from .scan_engine import BirdTaggerEngine, ImageOutcome, ImageStatus
from .report import write_report

__all__ = [
    "Detection",
    "ClassificationResult",
    "ReviewStatus",
    "RoutingPolicy",
    "needs_escalation",
    "LifeListStore",
    "ImageRecord",
    "RunContext",
    "RunStats",
    "OutputApplier",
    "OutputMode",
    "OutputAction",
    "OutputResult",
    "PreviewExtractor",
    "BirdTaggerEngine",
    "ImageOutcome",
    "ImageStatus",
    "write_report",
]
