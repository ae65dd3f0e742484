"""
Base functionality for bird classification through vision APIs.

This module defines the VisionClient interface shared by all providers and the
parsing of their structured JSON answers into Detection objects.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple, Union

from pydantic import ValidationError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..core.models import Detection
from ..utils.log_utils import get_logger
from .prompt import BirdDetection

logger = get_logger(__name__)


class ClassificationServiceError(RuntimeError):
    """Raised when the classification service itself fails (transport, auth, quota)."""


def parse_detections(payload: Union[str, bytes, dict, None]) -> List[Detection]:
    """Parse a raw model answer into detections.

    Malformed answers never raise. Non-JSON, a non-object or a non-list
    "birds" value yields zero detections; entries that do not match
    BirdDetection are logged and dropped individually.
    """
    if payload is None:
        logger.warning("Empty response from vision model")
        return []
    data: Any = payload
    if isinstance(payload, (str, bytes)):
        try:
            data = json.loads(payload)
        except json.JSONDecodeError:
            logger.warning("Failed to parse JSON response: %s", payload)
            return []
    if not isinstance(data, dict):
        logger.warning("Response is not a JSON object: %s", payload)
        return []
    birds = data.get("birds", [])
    if not isinstance(birds, list):
        logger.warning("Response 'birds' is not a list: %s", payload)
        return []

    # Invalid entries are dropped one by one; the rest keep their order
    detections: List[Detection] = []
    for index, entry in enumerate(birds):
        try:
            bird = BirdDetection.model_validate(entry)
        except ValidationError as err:
            logger.warning("Dropping invalid bird entry %d: %s", index, err)
            continue
        detections.append(
            Detection(
                family=bird.family,
                genus=bird.genus,
                species=bird.species,
                confidence=bird.confidence,
            )
        )
    return detections


class VisionClient(ABC):
    """Abstract base class for vision API clients."""

    # (tier-1 model, tier-2 model)
    default_models: Tuple[str, str] = ("", "")

    def __init__(self, api_key: Optional[str] = None, max_retries: int = 0):
        """Initialize the API client.

        Args:
            api_key: API key for the service. If None, will try to get from environment.
            max_retries: Extra attempts on ClassificationServiceError (0 = fail fast).
        """
        self.api_key = api_key
        self.max_retries = max_retries
        self._validate_api_key()

    @abstractmethod
    def _validate_api_key(self) -> None:
        """Validate that the API key is available and properly configured."""
        pass

    @abstractmethod
    def _call_api(self, image_b64: str, model: str) -> Union[str, dict]:
        """Make the actual API call and return the raw answer.

        Args:
            image_b64: Base64-encoded JPEG image data
            model: Model identifier to invoke

        Returns:
            Response text (JSON) or an already-decoded dict

        Raises:
            ClassificationServiceError: If the service call fails
        """
        pass

    def detect_birds(self, image_b64: str, model: str) -> List[Detection]:
        """Classify an image with the given model.

        Returns:
            Detections in the order the model listed them; empty on malformed output

        Raises:
            ClassificationServiceError: If the API call keeps failing
        """
        for attempt in Retrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=1, min=4, max=10),
            retry=retry_if_exception_type(ClassificationServiceError),
            reraise=True,
        ):
            with attempt:
                raw = self._call_api(image_b64, model)
        detections = parse_detections(raw)
        logger.debug("%s returned %d detection(s)", model, len(detections))
        return detections
