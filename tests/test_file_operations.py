"""Tests for the organize and tag output modes."""

import xml.etree.ElementTree as ET

import pytest

from bird_tagger.core.file_operations import (
    OutputAction,
    OutputApplier,
    OutputMode,
    safe_component,
    unique_destination,
)
from bird_tagger.core.models import ClassificationResult, Detection

from conftest import make_jpeg

RDF = "{http://www.w3.org/1999/02/22-rdf-syntax-ns#}"
DC = "{http://purl.org/dc/elements/1.1/}"
LR = "{http://ns.adobe.com/lightroom/1.0/}"


def _result(*detections):
    return ClassificationResult(list(detections), model="tier1-model")


MALLARD = Detection("Anatidae", "Anas", "Mallard", 0.92)
HERON = Detection("Ardeidae", "Ardea", "Grey Heron", 0.81)


# ---------------------------------------------------------------------------
# Organize mode
# ---------------------------------------------------------------------------


def test_organize_moves_file_into_taxonomy_folder(target_dir):
    src = make_jpeg(target_dir / "IMG_0001.jpg")
    applier = OutputApplier(OutputMode.ORGANIZE, target_dir)

    out = applier.apply(src, _result(MALLARD))

    assert out.action is OutputAction.MOVED
    assert out.path == target_dir / "Anatidae" / "Anas" / "Mallard" / "IMG_0001.jpg"
    assert out.path.is_file()
    assert not src.exists()


def test_organize_uses_primary_detection_only(target_dir):
    src = make_jpeg(target_dir / "pair.jpg")
    out = OutputApplier(OutputMode.ORGANIZE, target_dir).apply(src, _result(HERON, MALLARD))
    assert out.path.parent == target_dir / "Ardeidae" / "Ardea" / "Grey Heron"


def test_organize_collision_never_overwrites(target_dir, tmp_path):
    applier = OutputApplier(OutputMode.ORGANIZE, target_dir)
    first = make_jpeg(target_dir / "IMG_0001.jpg", color=(255, 0, 0))
    first_out = applier.apply(first, _result(MALLARD))
    first_bytes = first_out.path.read_bytes()

    second = make_jpeg(target_dir / "IMG_0001.jpg", color=(0, 0, 255))
    second_bytes = second.read_bytes()
    second_out = applier.apply(second, _result(MALLARD))

    assert first_out.path != second_out.path
    assert first_out.path.read_bytes() == first_bytes
    assert second_out.path.read_bytes() == second_bytes
    assert second_out.path.name.startswith("IMG_0001_")
    assert second_out.path.suffix == ".jpg"


def test_unique_destination_keeps_looking_until_free(tmp_path, monkeypatch):
    monkeypatch.setattr(
        "bird_tagger.core.file_operations.timestamp_suffix", lambda now=None: "20260101T000000000000"
    )
    (tmp_path / "a.jpg").write_bytes(b"1")
    (tmp_path / "a_20260101T000000000000.jpg").write_bytes(b"2")
    assert unique_destination(tmp_path, "a.jpg").name == "a_20260101T000000000000_1.jpg"


@pytest.mark.parametrize("raw, expected", [
    ("Anatidae", "Anatidae"),
    ("../../etc", "_.._etc"),
    ("..", "unknown"),
    ("", "unknown"),
    ("Grey/Heron", "Grey_Heron"),
    ("  Mallard  ", "Mallard"),
])
def test_safe_component(raw, expected):
    assert safe_component(raw) == expected


def test_organize_stays_inside_target(target_dir):
    src = make_jpeg(target_dir / "x.jpg")
    sneaky = Detection("..", "../..", "/etc", 0.9)
    out = OutputApplier(OutputMode.ORGANIZE, target_dir).apply(src, _result(sneaky))
    assert target_dir in out.path.parents


# ---------------------------------------------------------------------------
# Tag mode
# ---------------------------------------------------------------------------


def test_tag_writes_sidecar_with_flat_and_hierarchical_subjects(target_dir):
    src = make_jpeg(target_dir / "IMG_0002.CR3")
    out = OutputApplier(OutputMode.TAG, target_dir).apply(src, _result(MALLARD, HERON))

    assert out.action is OutputAction.TAGGED
    assert out.path == target_dir / "IMG_0002.xmp"
    assert src.exists()

    root = ET.fromstring(out.path.read_text(encoding="utf-8").split("?>", 1)[1].rsplit("<?xpacket", 1)[0])
    description = root.find(f"{RDF}RDF/{RDF}Description")
    flat = [li.text for li in description.find(f"{DC}subject/{RDF}Bag")]
    hierarchical = [li.text for li in description.find(f"{LR}hierarchicalSubject/{RDF}Bag")]
    assert flat == ["Anatidae", "Mallard", "Ardeidae", "Grey Heron"]
    assert hierarchical == ["Birds|Anatidae|Anas|Mallard", "Birds|Ardeidae|Ardea|Grey Heron"]


def test_tag_escapes_xml(target_dir):
    src = make_jpeg(target_dir / "odd.jpg")
    out = OutputApplier(OutputMode.TAG, target_dir).apply(
        src, _result(Detection("A&B", "<g>", "Tit & \"Co\"", 0.9))
    )
    text = out.path.read_text(encoding="utf-8")
    assert "A&amp;B" in text
    assert "&lt;g&gt;" in text


def test_tag_existing_sidecar_is_left_untouched(target_dir):
    src = make_jpeg(target_dir / "IMG_0003.jpg")
    sidecar = target_dir / "IMG_0003.xmp"
    sidecar.write_text("manual tags", encoding="utf-8")

    out = OutputApplier(OutputMode.TAG, target_dir).apply(src, _result(MALLARD))

    assert out.action is OutputAction.SKIPPED_EXISTING
    assert sidecar.read_text(encoding="utf-8") == "manual tags"


def test_tag_mode_is_idempotent(target_dir):
    applier = OutputApplier(OutputMode.TAG, target_dir)
    src = make_jpeg(target_dir / "IMG_0004.jpg")
    applier.apply(src, _result(MALLARD))
    before = {p.name: p.read_bytes() for p in target_dir.glob("*.xmp")}

    out = applier.apply(src, _result(HERON))

    after = {p.name: p.read_bytes() for p in target_dir.glob("*.xmp")}
    assert out.action is OutputAction.SKIPPED_EXISTING
    assert after == before


def test_empty_result_is_rejected(target_dir):
    src = make_jpeg(target_dir / "none.jpg")
    with pytest.raises(ValueError):
        OutputApplier(OutputMode.TAG, target_dir).apply(src, _result())


def test_mode_parse_accepts_xmp_alias():
    assert OutputMode.parse("xmp") is OutputMode.TAG
    assert OutputMode.parse("Organize") is OutputMode.ORGANIZE
    with pytest.raises(ValueError):
        OutputMode.parse("copy")
