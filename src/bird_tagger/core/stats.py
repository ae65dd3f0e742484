"""
Per-run bookkeeping: statistics for the report and the explicit run context
that carries the life list through the batch.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .life_list import LifeListStore
from .models import ClassificationResult, Detection


@dataclass
class ImageRecord:
    """What happened to one photo."""
    filename: str
    detections: List[Detection]
    new_lifers: List[str]
    escalated: bool = False
    action: Optional[str] = None
    output_path: Optional[Path] = None


@dataclass
class RunStats:
    """Aggregates for a single run; never persisted."""
    mode: str = ""
    start_time: datetime = field(default_factory=datetime.now)
    total_processed: int = 0
    lifers: List[str] = field(default_factory=list)
    species_seen: List[str] = field(default_factory=list)
    manual_review_count: int = 0
    extraction_failures: int = 0
    no_detection_count: int = 0
    output_failures: int = 0
    images: List[ImageRecord] = field(default_factory=list)


@dataclass
class RunContext:
    """State shared by every image of a run."""
    life_list: LifeListStore
    stats: RunStats = field(default_factory=RunStats)

    def record(self, path: Path, result: ClassificationResult) -> ImageRecord:
        """Update the life list and stats with one image's final detections.

        Membership is checked against the life list as it stands now, so a
        species first seen earlier in the run is not a lifer again.
        """
        stats = self.stats
        stats.total_processed += 1

        detections: List[Detection] = []
        new_lifers: List[str] = []
        for detection in result:
            if detection.needs_review:
                stats.manual_review_count += 1
                detections.append(detection)
                continue

            if detection.species not in stats.species_seen:
                stats.species_seen.append(detection.species)
            if self.life_list.record_observation(detection.species):
                detection = detection.as_lifer()
                stats.lifers.append(detection.species)
                new_lifers.append(detection.species)
            detections.append(detection)

        record = ImageRecord(
            filename=path.name,
            detections=detections,
            new_lifers=new_lifers,
            escalated=result.escalated,
        )
        stats.images.append(record)
        return record
