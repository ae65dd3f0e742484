"""
Data model for bird detections and classification results.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator, List, Optional

# Species name the classifier is told to use when it cannot identify a bird
UNKNOWN_SPECIES = "unknown"

MANUAL_REVIEW_SPECIES = "[needs manual review]"
MANUAL_REVIEW_FAMILY = "00_needs_manual_review"
MANUAL_REVIEW_GENUS = "unknown"


class ReviewStatus(str, Enum):
    RESOLVED = "resolved"
    MANUAL_REVIEW = "manual_review"


@dataclass(frozen=True)
class Detection:
    """A single bird identified in a photo.

    Attributes:
        family: Taxonomic family (e.g. "Anatidae").
        genus: Taxonomic genus (e.g. "Anas").
        species: Species name as returned by the classifier (e.g. "Mallard").
        confidence: Classifier confidence between 0.0 and 1.0.
        is_new_lifer: True if this detection added the species to the life list.
        review_status: RESOLVED, or MANUAL_REVIEW when the identity could not be settled.
    """

    family: str
    genus: str
    species: str
    confidence: float
    is_new_lifer: bool = False
    review_status: ReviewStatus = ReviewStatus.RESOLVED

    def __post_init__(self):
        if self.is_new_lifer and self.needs_review:
            raise ValueError("A manual-review detection cannot be a new lifer")

    @classmethod
    def manual_review(cls, confidence: float) -> "Detection":
        """Build the fixed manual-review detection, keeping the original confidence."""
        return cls(
            family=MANUAL_REVIEW_FAMILY,
            genus=MANUAL_REVIEW_GENUS,
            species=MANUAL_REVIEW_SPECIES,
            confidence=confidence,
            review_status=ReviewStatus.MANUAL_REVIEW,
        )

    @property
    def needs_review(self) -> bool:
        return (
            self.review_status is ReviewStatus.MANUAL_REVIEW
            or self.species == MANUAL_REVIEW_SPECIES
        )

    def as_lifer(self) -> "Detection":
        return replace(self, is_new_lifer=True)

    def to_dict(self) -> dict:
        return {
            "family": self.family,
            "genus": self.genus,
            "species": self.species,
            "confidence": self.confidence,
            "is_new_lifer": self.is_new_lifer,
            "review_status": self.review_status.value,
        }


@dataclass(frozen=True)
class ClassificationResult:
    """Ordered detections from one routing decision; the first one is the primary."""

    detections: List[Detection] = field(default_factory=list)
    model: str = ""
    escalated: bool = False

    def __len__(self) -> int:
        return len(self.detections)

    def __iter__(self) -> Iterator[Detection]:
        return iter(self.detections)

    def __getitem__(self, index: int) -> Detection:
        return self.detections[index]

    @property
    def primary(self) -> Optional[Detection]:
        return self.detections[0] if self.detections else None

    @property
    def manual_review_count(self) -> int:
        return sum(1 for d in self.detections if d.needs_review)
