"""
JSON Card Store: persists cards and daily activity to a single JSON file.

Every mutation rewrites the file through a temporary sibling followed by an
atomic replace, so a crash mid-write leaves the previous document intact.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from benkyo.domain.errors import BenkyoError, StoreError
from benkyo.domain.models import Card

from .memory_store import MemoryCardStore
from .serialization import activity_from_dict, activity_to_dict, card_from_dict, card_to_dict

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


class JsonCardStore(MemoryCardStore):
    def __init__(self, path: Path):
        self.path = Path(path)
        self._loading = True
        super().__init__()
        self._load()
        self._loading = False

    def _load(self) -> None:
        if not self.path.exists():
            logger.info(f"No card store at {self.path}; starting empty")
            return

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            cards: list[Card] = [card_from_dict(c) for c in data.get("cards", [])]
            activity = [activity_from_dict(a) for a in data.get("activity", [])]
        except (OSError, ValueError, KeyError, TypeError, BenkyoError) as e:
            raise StoreError(f"Could not read card store {self.path}: {e}") from e

        for card in cards:
            self.add(card)
        for entry in activity:
            self._activity[entry.day] = entry
        logger.debug(f"Loaded {len(cards)} cards from {self.path}")

    def _changed(self) -> None:
        if self._loading:
            return

        document = {
            "format": FORMAT_VERSION,
            "cards": [card_to_dict(c) for c in self._cards.values()],
            "activity": [activity_to_dict(a) for a in self.get_activity()],
        }

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(document, fh, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"Failed to write card store {self.path}: {e}")
            raise StoreError(f"Could not write card store {self.path}: {e}") from e
