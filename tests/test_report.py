"""Tests for the HTML run report."""

from datetime import datetime

from bird_tagger.core.models import Detection
from bird_tagger.core.report import render_report, write_report
from bird_tagger.core.stats import ImageRecord, RunStats


def _stats():
    mallard = Detection("Anatidae", "Anas", "Mallard", 0.92, is_new_lifer=True)
    review = Detection.manual_review(0.41)
    return RunStats(
        mode="organize",
        total_processed=2,
        lifers=["Mallard"],
        species_seen=["Mallard", "Blue Tit"],
        manual_review_count=1,
        images=[
            ImageRecord("duck.jpg", [mallard], ["Mallard"], action="moved"),
            ImageRecord("blur.jpg", [review], [], escalated=True, action="moved"),
        ],
    )


def test_report_lists_lifers_species_and_review_count(tmp_path):
    html = render_report(_stats(), tmp_path)
    assert "Folder organization" in html
    assert "Mallard" in html
    assert "Blue Tit" in html
    assert "Needs manual review" in html
    assert "duck.jpg" in html
    assert "0.92" in html


def test_report_without_lifers_or_review(tmp_path):
    html = render_report(RunStats(mode="tag"), tmp_path)
    assert "XMP tagging" in html
    assert "New lifers" not in html
    assert "Needs manual review" not in html
    assert "No species identified" in html


def test_report_escapes_species_names(tmp_path):
    stats = RunStats(mode="tag", total_processed=1, species_seen=["<script>alert(1)</script>"])
    html = render_report(stats, tmp_path)
    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html


def test_write_report_uses_timestamped_name(tmp_path):
    path = write_report(_stats(), tmp_path, generated_at=datetime(2026, 5, 1, 7, 30, 0))
    assert path == tmp_path / "bird_report_20260501T073000.html"
    assert "2026-05-01 07:30:00" in path.read_text(encoding="utf-8")
