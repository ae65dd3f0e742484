#!/usr/bin/env python3
"""
preview.py: Extract a JPEG preview from a photo and encode it as base64 for the vision models.

JPEG files are used as-is. Raw files (CR2, CR3, NEF, ARW, ...) carry an embedded
preview that is pulled out with exiftool, falling back to the smaller thumbnail.
PNG and HEIC files are re-encoded to JPEG with Pillow.

Dependencies:
    pip install pillow pillow-heif
    exiftool must be on PATH for raw files
"""

import base64
import io
import os
import shutil
import subprocess
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

try:
    from pillow_heif import register_heif_opener
    register_heif_opener()
except ImportError:
    pass

from PIL import Image, UnidentifiedImageError

from ..utils.log_utils import get_logger
from ..utils.utils import JPEG_EXTS, PILLOW_EXTS

logger = get_logger(__name__)

DEFAULT_PREVIEW_SIZE = 1024
EXIFTOOL = "exiftool"


def _exiftool_extract(src: Path, dest: Path, tag: str) -> None:
    """Write the binary value of `tag` (e.g. PreviewImage) from `src` into `dest`."""
    with open(dest, "wb") as out:
        subprocess.run(
            [EXIFTOOL, "-b", f"-{tag}", str(src)],
            stdout=out,
            stderr=subprocess.DEVNULL,
            check=True,
        )


def _has_content(path: Path) -> bool:
    return path.exists() and path.stat().st_size > 0


class PreviewExtractor:
    """Produce base64 JPEG previews for classification."""

    def __init__(self, max_size: int = DEFAULT_PREVIEW_SIZE, tmp_dir: Optional[Path] = None):
        """
        Args:
            max_size: Longest side of the encoded preview in pixels (0 keeps the original size).
            tmp_dir: Where transient previews are written (default: system temp dir).
        """
        self.max_size = max_size
        self.tmp_dir = tmp_dir

    @contextmanager
    def preview_file(self, path: Path) -> Iterator[Optional[Path]]:
        """Yield a temporary JPEG preview of `path`, or None if none can be extracted.

        The temporary file is removed when the context exits, whatever the outcome.
        """
        fd, tmp_name = tempfile.mkstemp(prefix="bird_tagger_", suffix=".jpg", dir=self.tmp_dir)
        os.close(fd)
        tmp_path = Path(tmp_name)
        try:
            yield tmp_path if self._extract(path, tmp_path) else None
        finally:
            tmp_path.unlink(missing_ok=True)

    def _extract(self, path: Path, dest: Path) -> bool:
        ext = path.suffix.lower()
        try:
            if ext in JPEG_EXTS:
                shutil.copyfile(path, dest)
            elif ext in PILLOW_EXTS:
                with Image.open(path) as img:
                    img.convert("RGB").save(dest, format="JPEG")
            else:
                _exiftool_extract(path, dest, "PreviewImage")
                if not _has_content(dest):
                    _exiftool_extract(path, dest, "ThumbnailImage")
        except FileNotFoundError as err:
            logger.error("Failed to extract preview for %s: %s", path.name, err)
            return False
        except (OSError, subprocess.CalledProcessError, UnidentifiedImageError, Image.DecompressionBombError) as err:
            logger.warning("Failed to extract preview for %s: %s", path.name, err)
            return False

        if not _has_content(dest):
            logger.warning("No preview image could be extracted for %s", path.name)
            return False
        return True

    def encode(self, preview: Path) -> Optional[str]:
        """Downscale the preview to `max_size` and return it as a base64 JPEG string."""
        try:
            with Image.open(preview) as img:
                if self.max_size and max(img.size) > self.max_size:
                    try:
                        resample_filter = Image.Resampling.LANCZOS
                    except AttributeError:
                        resample_filter = Image.LANCZOS
                    img.thumbnail((self.max_size, self.max_size), resample=resample_filter)
                if img.mode != "RGB":
                    img = img.convert("RGB")
                buffer = io.BytesIO()
                img.save(buffer, format="JPEG")
        except (OSError, UnidentifiedImageError, Image.DecompressionBombError) as err:
            logger.warning("Preview %s could not be decoded: %s", preview, err)
            return None
        return base64.b64encode(buffer.getvalue()).decode("utf-8")

    def load_and_encode(self, path: Path) -> Optional[str]:
        """Extract and encode the preview of `path`; None if unavailable."""
        with self.preview_file(path) as preview:
            if preview is None:
                return None
            return self.encode(preview)
