"""Tests for the persistent life list."""

import json

from bird_tagger.core.life_list import LifeListStore
from bird_tagger.core.models import MANUAL_REVIEW_SPECIES


def _write(path, content):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_missing_file_starts_empty(life_list_path):
    store = LifeListStore(life_list_path)
    assert store.load() == set()
    assert len(store) == 0


def test_corrupt_file_starts_empty(life_list_path, caplog):
    _write(life_list_path, "{not json")
    store = LifeListStore(life_list_path)
    assert store.load() == set()
    assert "starting fresh" in caplog.text


def test_wrong_shape_starts_empty(life_list_path):
    _write(life_list_path, json.dumps({"species": ["Mallard"]}))
    assert LifeListStore(life_list_path).load() == set()
    _write(life_list_path, json.dumps(["Mallard"]))
    assert LifeListStore(life_list_path).load() == set()


def test_non_string_entries_are_dropped(life_list_path):
    _write(life_list_path, json.dumps({"species_list": ["Mallard", 3, None, "Mallard"]}))
    store = LifeListStore(life_list_path)
    assert store.load() == {"Mallard"}
    assert list(store) == ["Mallard"]


def test_record_observation_only_once(life_list_path):
    store = LifeListStore(life_list_path)
    store.load()
    assert store.record_observation("Mallard") is True
    assert store.record_observation("Mallard") is False
    assert store.contains("Mallard")
    assert "Mallard" in store
    assert store.new_species == ["Mallard"]


def test_manual_review_sentinel_is_never_recorded(life_list_path):
    store = LifeListStore(life_list_path)
    store.load()
    assert store.record_observation(MANUAL_REVIEW_SPECIES) is False
    assert not store.contains(MANUAL_REVIEW_SPECIES)
    assert len(store) == 0


def test_persist_preserves_existing_order_and_appends(life_list_path):
    _write(life_list_path, json.dumps({"species_list": ["Robin", "Blue Tit"]}, ensure_ascii=False))
    store = LifeListStore(life_list_path)
    store.load()
    store.record_observation("Blue Tit")
    store.record_observation("Grey Heron")
    store.persist()

    data = json.loads(life_list_path.read_text(encoding="utf-8"))
    assert data == {"species_list": ["Robin", "Blue Tit", "Grey Heron"]}


def test_persist_creates_parent_directory(life_list_path):
    store = LifeListStore(life_list_path)
    store.load()
    store.record_observation("Mallard")
    store.persist()
    assert life_list_path.is_file()


def test_persist_keeps_non_ascii_names(life_list_path):
    store = LifeListStore(life_list_path)
    store.load()
    store.record_observation("绿头鸭")
    store.persist()
    assert "绿头鸭" in life_list_path.read_text(encoding="utf-8")


def test_life_list_never_shrinks_across_runs(life_list_path):
    sizes = []
    for run in (["Mallard", "Robin"], ["Robin"], [], ["Heron", "Mallard"]):
        store = LifeListStore(life_list_path)
        store.load()
        for species in run:
            store.record_observation(species)
        store.persist()
        sizes.append(len(LifeListStore(life_list_path).load()))
    assert sizes == sorted(sizes)
    assert sizes[-1] == 3
