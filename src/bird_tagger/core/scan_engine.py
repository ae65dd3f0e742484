#!/usr/bin/env python3
"""
scan_engine.py: Core scanning and tagging logic for bird-tagger.

Provides BirdTaggerEngine, which scans a directory for photos and runs each one
through the pipeline: preview extraction, tiered classification, life list
update and output action. Photos are processed one at a time, in name order.
Optional callbacks can be attached to monitor progress.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from ..utils.log_utils import get_logger
from ..utils.utils import iter_image_files
from .file_operations import OutputApplier, OutputResult
from .life_list import LifeListStore
from .models import ClassificationResult
from .preview import PreviewExtractor
from .routing import RoutingPolicy
from .stats import ImageRecord, RunContext, RunStats

logger = get_logger(__name__)


class ImageStatus(str, Enum):
    PROCESSED = "processed"
    EXTRACTION_FAILED = "extraction_failed"
    NO_DETECTIONS = "no_detections"
    OUTPUT_FAILED = "output_failed"


@dataclass
class ImageOutcome:
    """Result of running one photo through the pipeline."""
    path: Path
    status: ImageStatus
    result: Optional[ClassificationResult] = None
    record: Optional[ImageRecord] = None
    output: Optional[OutputResult] = None


class BirdTaggerEngine:
    """
    Core engine for classifying photos and applying the output action.
    Callbacks can be attached to monitor progress.
    """

    def __init__(
        self,
        target_dir: Path,
        routing: RoutingPolicy,
        applier: OutputApplier,
        life_list: LifeListStore,
        preview: Optional[PreviewExtractor] = None,
        persist_every: int = 0,
    ):
        self.target_dir = target_dir
        self.routing = routing
        self.applier = applier
        self.life_list = life_list
        self.preview = preview or PreviewExtractor()
        self.persist_every = persist_every
        self.image_paths: List[Path] = []
        self.on_scan_complete: Optional[Callable[[int], None]] = None
        self.on_image_start: Optional[Callable[[Path, int, int], None]] = None
        self.on_image_complete: Optional[Callable[[ImageOutcome, int, int], None]] = None

    def scan_files(self) -> List[Path]:
        """Collect the photos directly under the target directory."""
        self.image_paths = list(iter_image_files(self.target_dir))
        logger.info("Found %d images to process in %s", len(self.image_paths), self.target_dir)
        if self.on_scan_complete:
            self.on_scan_complete(len(self.image_paths))
        return self.image_paths

    def process_image(self, path: Path, context: RunContext) -> ImageOutcome:
        """Run one photo through every stage; skips are returned, not raised."""
        logger.debug("Processing %s", path.name)

        image_b64 = self.preview.load_and_encode(path)
        if image_b64 is None:
            context.stats.extraction_failures += 1
            return ImageOutcome(path, ImageStatus.EXTRACTION_FAILED)

        result = self.routing.classify(image_b64, label=path.name)
        if not result:
            logger.info("No birds detected in %s", path.name)
            context.stats.no_detection_count += 1
            return ImageOutcome(path, ImageStatus.NO_DETECTIONS, result=result)

        record = context.record(path, result)
        logger.info("Identified in %s: %s", path.name, ", ".join(d.species for d in record.detections))
        for lifer in record.new_lifers:
            logger.info("New lifer: %s", lifer)

        try:
            output = self.applier.apply(path, result)
        except OSError as err:
            logger.error("Failed to apply %s output for %s: %s", self.applier.mode.value, path.name, err)
            context.stats.output_failures += 1
            return ImageOutcome(path, ImageStatus.OUTPUT_FAILED, result=result, record=record)

        record.action = output.action.value
        record.output_path = output.path
        return ImageOutcome(path, ImageStatus.PROCESSED, result=result, record=record, output=output)

    def run(self, image_paths: Optional[List[Path]] = None) -> RunStats:
        """Process every photo and persist the life list.

        ClassificationServiceError from the vision client aborts the batch;
        in that case the life list is only saved if a periodic flush already ran.
        """
        if image_paths is None:
            image_paths = self.scan_files()

        self.life_list.load()
        context = RunContext(life_list=self.life_list, stats=RunStats(mode=self.applier.mode.value))
        total = len(image_paths)

        for index, path in enumerate(image_paths, 1):
            if self.on_image_start:
                self.on_image_start(path, index, total)
            outcome = self.process_image(path, context)
            if self.on_image_complete:
                self.on_image_complete(outcome, index, total)
            if (
                self.persist_every
                and outcome.record is not None
                and context.stats.total_processed % self.persist_every == 0
            ):
                self.life_list.persist()

        self.life_list.persist()
        return context.stats
