"""
Palette Store
Persisted list of saved palettes with in-memory and JSON-file backends.
"""
import json
import os
import random
import re
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, asdict, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from palette_service.config import config
from palette_service.utils.ids import generate_palette_id
from palette_service.utils.logging import get_logger

HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")

DEMO_PALETTES = [
    ("1", "Vivid Tones", 5),
    ("2", "Sunset Glow", 4),
    ("3", "Ocean Dreams", 3),
    ("4", "Warm Memories", 5),
]


class PaletteNotFoundError(KeyError):
    """Raised when a palette id is not in the store."""


@dataclass
class SavedPalette:
    """A palette saved by the user."""
    id: str
    colors: List[str] = field(default_factory=list)
    name: str = config.DEFAULT_PALETTE_NAME

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _copy(palette: SavedPalette) -> SavedPalette:
    return replace(palette, colors=list(palette.colors))


def validate_colors(colors: Sequence[str]) -> List[str]:
    """Check every entry is a #RRGGBB string and return a copied list."""
    if isinstance(colors, str):
        raise ValueError("colors must be a list of hex strings")
    for color in colors:
        if not isinstance(color, str) or not HEX_COLOR_RE.match(color):
            raise ValueError(f"Invalid hex color: {color!r}")
    return list(colors)


def generate_random_hex_colors(amount: int, rng: Optional[random.Random] = None) -> List[str]:
    """Random #rrggbb colors, used to seed demo palettes."""
    rng = rng or random.Random()
    return [f"#{rng.randrange(0xFFFFFF):06x}" for _ in range(amount)]


class PaletteStore(ABC):
    """Abstract store for saved palettes; every mutation is persisted via _save()."""

    def __init__(self):
        self._lock = threading.RLock()
        self._palettes: List[SavedPalette] = []
        self._last_id: Optional[str] = None

    @abstractmethod
    def _save(self, palettes: List[SavedPalette]) -> None:
        """Persist the given palette list."""
        pass

    def _commit(self, palettes: List[SavedPalette]) -> None:
        # Memory only changes once the new list has been persisted
        self._save(palettes)
        self._palettes = palettes

    def _next_id(self) -> str:
        new_id = generate_palette_id()
        existing = {p.id for p in self._palettes}
        # Two saves inside the same millisecond would otherwise collide
        while new_id in existing or new_id == self._last_id:
            new_id = str(int(new_id) + 1)
        self._last_id = new_id
        return new_id

    def _index_of(self, palette_id: str) -> int:
        for index, palette in enumerate(self._palettes):
            if palette.id == palette_id:
                return index
        raise PaletteNotFoundError(palette_id)

    def add(self, colors: Sequence[str], name: Optional[str] = None) -> str:
        """Save a palette and return its new id."""
        colors = validate_colors(colors)
        with self._lock:
            palette = SavedPalette(
                id=self._next_id(),
                colors=colors,
                name=name if name is not None else config.DEFAULT_PALETTE_NAME,
            )
            self._commit(self._palettes + [palette])
        get_logger().info("Palette saved", extra={"palette_id": palette.id, "colors": len(colors)})
        return palette.id

    def get(self, palette_id: str) -> SavedPalette:
        with self._lock:
            return _copy(self._palettes[self._index_of(palette_id)])

    def update(self, palette_id: str, colors: Optional[Sequence[str]] = None,
               name: Optional[str] = None) -> SavedPalette:
        """Merge the given fields into an existing palette."""
        changes: Dict[str, Any] = {}
        if colors is not None:
            changes["colors"] = validate_colors(colors)
        if name is not None:
            changes["name"] = name

        with self._lock:
            index = self._index_of(palette_id)
            if changes:
                palettes = list(self._palettes)
                palettes[index] = replace(palettes[index], **changes)
                self._commit(palettes)
            updated = _copy(self._palettes[index])
        get_logger().debug("Palette updated", extra={"palette_id": palette_id, "fields": sorted(changes)})
        return updated

    def delete(self, palette_id: str) -> None:
        with self._lock:
            index = self._index_of(palette_id)
            self._commit(self._palettes[:index] + self._palettes[index + 1:])
        get_logger().info("Palette deleted", extra={"palette_id": palette_id})

    def list(self) -> List[SavedPalette]:
        """All palettes in insertion order."""
        with self._lock:
            return [_copy(p) for p in self._palettes]

    def clear(self) -> None:
        with self._lock:
            self._commit([])
        get_logger().info("Palette list cleared")

    def seed_demo(self, rng: Optional[random.Random] = None) -> List[SavedPalette]:
        """Replace the list with four demo palettes of random colors."""
        with self._lock:
            self._commit([
                SavedPalette(id=palette_id, colors=generate_random_hex_colors(amount, rng), name=name)
                for palette_id, name, amount in DEMO_PALETTES
            ])
        return self.list()

    def __len__(self) -> int:
        with self._lock:
            return len(self._palettes)


class InMemoryPaletteStore(PaletteStore):
    """Store that keeps palettes for the lifetime of the process."""

    def _save(self, palettes: List[SavedPalette]) -> None:
        pass


class StoreFileError(ValueError):
    """Raised when a palette file cannot be read as a saved palette list."""


class JsonFilePaletteStore(PaletteStore):
    """Store backed by a single JSON file, rewritten after every mutation."""

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self._path = Path(path)
        self._palettes = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> List[SavedPalette]:
        if not self._path.exists():
            return []
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(payload, dict) or not isinstance(payload.get("palettes", []), list):
                raise ValueError('expected an object with a "palettes" list')
            palettes = []
            for entry in payload.get("palettes", []):
                if not isinstance(entry, dict) or "id" not in entry:
                    raise ValueError(f"palette entry without an id: {entry!r}")
                name = entry.get("name", config.DEFAULT_PALETTE_NAME)
                if not isinstance(name, str):
                    raise ValueError(f"palette name must be a string: {name!r}")
                palettes.append(SavedPalette(
                    id=str(entry["id"]),
                    colors=validate_colors(entry.get("colors", [])),
                    name=name,
                ))
        except (ValueError, TypeError) as e:
            raise StoreFileError(f"Invalid palette file {self._path}: {e}") from e
        get_logger().info(f"Loaded {len(palettes)} palettes", extra={"path": str(self._path)})
        return palettes

    def _save(self, palettes: List[SavedPalette]) -> None:
        body = json.dumps(
            {"palettes": [p.to_dict() for p in palettes]},
            ensure_ascii=False,
            indent=2,
        )
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # Write to a sibling temp file then swap it in
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(body)
            os.replace(tmp_name, self._path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


def create_store(path: Optional[Union[str, Path]] = None) -> PaletteStore:
    """Build a JSON-file store when a path is given, otherwise an in-memory one."""
    if path:
        return JsonFilePaletteStore(path)
    return InMemoryPaletteStore()
