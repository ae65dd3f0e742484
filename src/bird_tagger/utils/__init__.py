"""
Utility functions and helpers.
"""

from .log_utils import configure_logging, get_logger
from .utils import IMAGE_EXTS, iter_image_files, is_image_file

__all__ = ["configure_logging", "get_logger", "IMAGE_EXTS", "iter_image_files", "is_image_file"]
