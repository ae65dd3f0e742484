"""
life_list.py - persistent, deduplicated list of every species ever observed.

The life list is a JSON file of the form {"species_list": [...]}. It is loaded
once when a run starts, updated in memory while images are processed, and
written back when the run ends. Species are never removed.

Example:
    life_list = LifeListStore(Path("life_list.json"))
    life_list.load()
    if life_list.record_observation("Mallard"):
        print("New lifer!")
    life_list.persist()
"""

import json
from pathlib import Path
from typing import Iterator, List, Set

from ..utils.log_utils import get_logger
from .models import MANUAL_REVIEW_SPECIES

logger = get_logger(__name__)

# One life list per user, independent of the working directory
DEFAULT_LIFE_LIST_FILE = Path.home() / '.bird_tagger' / 'life_list.json'


def load_species(life_list_file: Path) -> List[str]:
    """Load the species list from disk, or return an empty list on failure."""
    if not life_list_file.is_file():
        return []
    try:
        data = json.loads(life_list_file.read_text(encoding='utf-8'))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to parse {life_list_file}, starting fresh: {e}")
        return []

    species = data.get("species_list") if isinstance(data, dict) else None
    if not isinstance(species, list):
        logger.warning(f"{life_list_file} has no species_list array, starting fresh")
        return []

    valid = [s for s in species if isinstance(s, str)]
    if len(valid) != len(species):
        logger.warning(f"Ignoring {len(species) - len(valid)} non-string entries in {life_list_file}")
    return valid


def save_species(species: List[str], life_list_file: Path) -> None:
    """Persist the species list to disk as JSON."""
    life_list_file.parent.mkdir(parents=True, exist_ok=True)
    life_list_file.write_text(
        json.dumps({"species_list": species}, ensure_ascii=False, indent=2),
        encoding='utf-8'
    )


class LifeListStore:
    """In-memory life list backed by a JSON file."""

    def __init__(self, life_list_file: Path = DEFAULT_LIFE_LIST_FILE):
        self.life_list_file = life_list_file
        self._species: List[str] = []
        self._known: Set[str] = set()
        self._loaded_count = 0
        self._dirty = False

    def load(self) -> Set[str]:
        """Read the persisted species set. Never raises; corrupt files yield an empty set."""
        self._species = []
        self._known = set()
        for name in load_species(self.life_list_file):
            if name not in self._known:
                self._known.add(name)
                self._species.append(name)
        self._loaded_count = len(self._species)
        self._dirty = False
        logger.debug(f"Loaded {len(self._species)} species from {self.life_list_file}")
        return set(self._known)

    def contains(self, species: str) -> bool:
        return species in self._known

    def __contains__(self, species: str) -> bool:
        return self.contains(species)

    def __len__(self) -> int:
        return len(self._species)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._species))

    @property
    def new_species(self) -> List[str]:
        """Species added since the last load, in order of first observation."""
        return self._species[self._loaded_count:]

    def record_observation(self, species: str) -> bool:
        """Add a species if it is not known yet.

        Returns:
            True if the species is a new lifer, False if it was already listed
            or is the manual-review placeholder.
        """
        if species == MANUAL_REVIEW_SPECIES:
            return False
        if species in self._known:
            return False
        self._known.add(species)
        self._species.append(species)
        self._dirty = True
        return True

    def persist(self) -> None:
        """Write the full species list back to disk if it changed."""
        if not self._dirty:
            logger.debug("Life list unchanged, nothing to write")
            return
        save_species(self._species, self.life_list_file)
        self._dirty = False
        logger.info(f"Saved life list with {len(self._species)} species to {self.life_list_file}")
