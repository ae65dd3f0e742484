"""
Two-tier routing policy for bird classification.

A cheap model classifies every image first. When its answer is empty, unsure,
or names an unknown species, the whole image is re-run on the stronger model.
Anything the stronger model still cannot settle is turned into a manual-review
detection.
"""

from typing import Iterable, List, Optional

from ..api.base import VisionClient
from ..utils.log_utils import get_logger
from .models import UNKNOWN_SPECIES, ClassificationResult, Detection

logger = get_logger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = 0.60


def is_uncertain(detection: Detection, threshold: float = DEFAULT_CONFIDENCE_THRESHOLD) -> bool:
    return detection.confidence < threshold or detection.species == UNKNOWN_SPECIES


def needs_escalation(detections: List[Detection], threshold: float = DEFAULT_CONFIDENCE_THRESHOLD) -> bool:
    """True if a first-pass answer must be re-run on the stronger model."""
    if not detections:
        return True
    return any(is_uncertain(d, threshold) for d in detections)


def flag_for_review(detections: Iterable[Detection], threshold: float = DEFAULT_CONFIDENCE_THRESHOLD) -> List[Detection]:
    """Replace every still-uncertain detection with the manual-review detection."""
    return [
        Detection.manual_review(d.confidence) if is_uncertain(d, threshold) else d
        for d in detections
    ]


class RoutingPolicy:
    """Classify an image with tier-1 and, when needed, tier-2 models."""

    def __init__(
        self,
        client: VisionClient,
        tier1_model: Optional[str] = None,
        tier2_model: Optional[str] = None,
        threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    ):
        self.client = client
        self.tier1_model = tier1_model or client.default_models[0]
        self.tier2_model = tier2_model or client.default_models[1]
        self.threshold = threshold

    def classify(self, image_b64: str, label: str = "image") -> ClassificationResult:
        """Return the final detections for one image.

        Errors raised by the client (ClassificationServiceError) are not caught
        here and abort the caller.
        """
        tier1 = self.client.detect_birds(image_b64, self.tier1_model)
        if not needs_escalation(tier1, self.threshold):
            return ClassificationResult(tier1, model=self.tier1_model, escalated=False)

        logger.info("Low confidence or unknown for %s, routing to %s", label, self.tier2_model)
        tier2 = self.client.detect_birds(image_b64, self.tier2_model)
        return ClassificationResult(
            flag_for_review(tier2, self.threshold),
            model=self.tier2_model,
            escalated=True,
        )
