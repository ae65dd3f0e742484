"""
HTML report for a finished run.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from ..utils.log_utils import get_logger
from ..utils.templates import render
from .file_operations import OutputMode
from .models import MANUAL_REVIEW_SPECIES
from .stats import RunStats

logger = get_logger(__name__)

REPORT_TEMPLATE = "report.html"

MODE_LABELS = {
    OutputMode.ORGANIZE: "Folder organization",
    OutputMode.TAG: "XMP tagging",
}


def render_report(stats: RunStats, target_dir: Path, generated_at: Optional[datetime] = None) -> str:
    generated_at = generated_at or datetime.now()
    try:
        mode_label = MODE_LABELS[OutputMode.parse(stats.mode)]
    except ValueError:
        mode_label = stats.mode
    return render(
        REPORT_TEMPLATE,
        stats=stats,
        target_dir=str(target_dir),
        mode_label=mode_label,
        manual_review_label=MANUAL_REVIEW_SPECIES,
        generated_at=generated_at.strftime("%Y-%m-%d %H:%M:%S"),
    )


def write_report(stats: RunStats, target_dir: Path, generated_at: Optional[datetime] = None) -> Path:
    """Render the report into `target_dir` and return its path."""
    generated_at = generated_at or datetime.now()
    report_path = target_dir / f"bird_report_{generated_at.strftime('%Y%m%dT%H%M%S')}.html"
    report_path.write_text(render_report(stats, target_dir, generated_at), encoding="utf-8")
    logger.info("Report generated at %s", report_path)
    return report_path
