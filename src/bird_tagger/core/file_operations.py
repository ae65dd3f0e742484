#!/usr/bin/env python3
"""
file_operations.py: Apply the per-photo output action once a photo is classified.

Two modes, chosen once per run:
- organize: move the photo into <target>/<family>/<genus>/<species>/ based on the
  primary (first) detection. Name collisions get a timestamp suffix; nothing is
  ever overwritten.
- tag: write a Lightroom-compatible XMP sidecar next to the photo. An existing
  sidecar is left untouched, so repeated runs are no-ops.
"""

import re
import shutil
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..utils.log_utils import get_logger
from ..utils.templates import render
from .models import ClassificationResult, Detection

logger = get_logger(__name__)

HIERARCHY_ROOT = "Birds"
HIERARCHY_SEPARATOR = "|"
SIDECAR_TEMPLATE = "sidecar.xmp"

_UNSAFE_CHARS = re.compile(r'[\\/\x00]')


class OutputMode(str, Enum):
    ORGANIZE = "organize"
    TAG = "tag"

    @classmethod
    def parse(cls, value: str) -> "OutputMode":
        value = (value or "").strip().lower()
        if value == "xmp":
            return cls.TAG
        return cls(value)


class OutputAction(str, Enum):
    MOVED = "moved"
    TAGGED = "tagged"
    SKIPPED_EXISTING = "skipped_existing"


@dataclass(frozen=True)
class OutputResult:
    action: OutputAction
    path: Path


def safe_component(name: str) -> str:
    """Make a model-provided name usable as a single directory name."""
    cleaned = _UNSAFE_CHARS.sub("_", name or "").strip().strip(".").strip()
    return cleaned or "unknown"


def destination_dir(target_dir: Path, primary: Detection) -> Path:
    return (
        target_dir
        / safe_component(primary.family)
        / safe_component(primary.genus)
        / safe_component(primary.species)
    )


def timestamp_suffix(now: Optional[datetime] = None) -> str:
    """Sortable timestamp used to disambiguate colliding file names."""
    return (now or datetime.now()).strftime("%Y%m%dT%H%M%S%f")


def unique_destination(dest_dir: Path, name: str) -> Path:
    """Return a path in `dest_dir` for `name` that does not exist yet."""
    dest_path = dest_dir / name
    if not dest_path.exists():
        return dest_path

    stem, suffix = dest_path.stem, dest_path.suffix
    candidate = dest_dir / f"{stem}_{timestamp_suffix()}{suffix}"
    counter = 1
    while candidate.exists():
        candidate = dest_dir / f"{stem}_{timestamp_suffix()}_{counter}{suffix}"
        counter += 1
    return candidate


def sidecar_path(target_dir: Path, src_path: Path) -> Path:
    return target_dir / f"{src_path.stem}.xmp"


def build_keywords(detections: List[Detection]) -> dict:
    """Flat and hierarchical keyword lists, in detection order."""
    subjects: List[str] = []
    hierarchical: List[str] = []
    for d in detections:
        subjects.extend([d.family, d.species])
        hierarchical.append(HIERARCHY_SEPARATOR.join([HIERARCHY_ROOT, d.family, d.genus, d.species]))
    return {"subjects": subjects, "hierarchical": hierarchical}


def render_sidecar(detections: List[Detection]) -> str:
    return render(SIDECAR_TEMPLATE, **build_keywords(detections))


def organize_image(src_path: Path, target_dir: Path, result: ClassificationResult) -> OutputResult:
    """Move `src_path` into the folder of its primary detection."""
    dest_dir = destination_dir(target_dir, result.primary)
    dest_dir.mkdir(parents=True, exist_ok=True)
    dest_path = unique_destination(dest_dir, src_path.name)
    shutil.move(str(src_path), str(dest_path))
    logger.info("Moved %s to %s", src_path.name, dest_path)
    return OutputResult(OutputAction.MOVED, dest_path)


def tag_image(src_path: Path, target_dir: Path, result: ClassificationResult) -> OutputResult:
    """Write the XMP sidecar for `src_path` unless one already exists."""
    xmp_path = sidecar_path(target_dir, src_path)
    if xmp_path.exists():
        logger.info("XMP already exists, skipping tag injection for %s", src_path.name)
        return OutputResult(OutputAction.SKIPPED_EXISTING, xmp_path)

    content = render_sidecar(list(result))
    try:
        with open(xmp_path, "x", encoding="utf-8") as f:
            f.write(content)
    except FileExistsError:
        logger.info("XMP appeared meanwhile, skipping tag injection for %s", src_path.name)
        return OutputResult(OutputAction.SKIPPED_EXISTING, xmp_path)
    logger.info("Generated XMP sidecar at %s", xmp_path)
    return OutputResult(OutputAction.TAGGED, xmp_path)


class OutputApplier:
    """Apply the run's output mode to classified photos."""

    def __init__(self, mode: OutputMode, target_dir: Path):
        self.mode = OutputMode(mode)
        self.target_dir = target_dir

    def apply(self, src_path: Path, result: ClassificationResult) -> OutputResult:
        if not result:
            raise ValueError(f"No detections to apply for {src_path.name}")
        if self.mode is OutputMode.ORGANIZE:
            return organize_image(src_path, self.target_dir, result)
        return tag_image(src_path, self.target_dir, result)
