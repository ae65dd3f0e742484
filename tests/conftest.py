# tests/conftest.py
"""
Shared fixtures: a scripted vision client and small real JPEG files.
"""

from pathlib import Path
from typing import Dict, List, Union

import pytest
from PIL import Image

from bird_tagger.api.base import VisionClient


class FakeVisionClient(VisionClient):
    """VisionClient returning canned answers per model, recording every call."""

    default_models = ("tier1-model", "tier2-model")

    def __init__(self, responses: Dict[str, Union[str, dict, List, Exception]] = None, **kwargs):
        self.responses = responses or {}
        self.calls: List[str] = []
        super().__init__(api_key="test-key", **kwargs)

    def _validate_api_key(self) -> None:
        pass

    def _call_api(self, image_b64: str, model: str):
        self.calls.append(model)
        response = self.responses.get(model, '{"birds": []}')
        if isinstance(response, list):
            response = response.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def birds_json(*birds: tuple) -> dict:
    """Build a response payload from (family, genus, species, confidence) tuples."""
    return {
        "birds": [
            {"family": f, "genus": g, "species": s, "confidence": c}
            for f, g, s, c in birds
        ]
    }


MALLARD = ("Anatidae", "Anas", "Mallard", 0.92)
ROBIN = ("Turdidae", "Turdus", "American Robin", 0.88)


def make_jpeg(path: Path, size=(64, 48), color=(120, 160, 200)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path, format="JPEG")
    return path


@pytest.fixture
def target_dir(tmp_path):
    d = tmp_path / "photos"
    d.mkdir()
    return d


@pytest.fixture
def life_list_path(tmp_path):
    return tmp_path / "state" / "life_list.json"
