import os
from pathlib import Path
from typing import Iterator

JPEG_EXTS = {'.jpg', '.jpeg'}
RAW_EXTS = {'.cr2', '.cr3', '.arw', '.nef', '.dng', '.raf', '.orf', '.rw2'}
# Opened directly with Pillow (HEIC/HEIF need pillow-heif)
PILLOW_EXTS = {'.png', '.heic', '.heif'}
IMAGE_EXTS = JPEG_EXTS | RAW_EXTS | PILLOW_EXTS


def is_image_file(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_EXTS


def iter_image_files(root: Path) -> Iterator[Path]:
    """
    Yield image files directly under `root` (non-recursive), sorted by name.

    Subdirectories are ignored so that files already organized into
    family/genus/species folders are not picked up again.
    """
    entries = []
    with os.scandir(root) as it:
        for entry in it:
            if entry.name.startswith("._") or entry.name == ".DS_Store":
                continue
            if entry.is_file(follow_symlinks=False):
                entries.append(Path(entry.path))
    for path in sorted(entries, key=lambda p: p.name):
        if is_image_file(path):
            yield path
