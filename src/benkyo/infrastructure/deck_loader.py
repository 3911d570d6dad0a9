"""
Deck loader: seeds cards from a YAML deck file.

Expected layout:

    deck: JLPT N5 vocabulary      # optional, added as a tag
    kind: vocabulary              # optional default for every card
    cards:
      - front: 水
        back: water
        tags: [nature]
      - id: card_01J...           # optional, generated when missing
        front: 〜ている
        back: ongoing action
        kind: grammar
"""

import logging
from pathlib import Path
from typing import Any

import yaml
import yaml.constructor

from benkyo.application.id_service import generate_card_id
from benkyo.domain.errors import InvalidArgument
from benkyo.domain.models import Card, CardKind

logger = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that forbids duplicate keys."""

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if key in seen:
                raise yaml.constructor.ConstructorError(
                    None, None, f"Duplicate key {key!r}", key_node.start_mark
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _parse_kind(value: Any, where: str) -> CardKind:
    try:
        return CardKind(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(k.value for k in CardKind)
        raise InvalidArgument(f"{where}: unknown kind {value!r}; expected one of: {allowed}") from None


def parse_deck(text: str, source: str = "<deck>") -> list[Card]:
    """
    Parse deck YAML text into new cards with default review state.

    Raises:
        InvalidArgument: If the YAML is malformed or an entry lacks a front.
    """
    # Fix tabs (common user error)
    if "\t" in text:
        text = text.replace("\t", "  ")

    try:
        meta = yaml.load(text, Loader=UniqueKeyLoader) or {}
    except yaml.YAMLError as e:
        raise InvalidArgument(f"{source}: invalid YAML: {e}") from e

    if not isinstance(meta, dict) or not isinstance(meta.get("cards"), list):
        raise InvalidArgument(f"{source}: expected a mapping with a 'cards' list")

    default_kind = _parse_kind(meta.get("kind", CardKind.VOCABULARY.value), source)
    deck_tag = meta.get("deck")

    cards: list[Card] = []
    for index, entry in enumerate(meta["cards"]):
        where = f"{source}: card #{index + 1}"
        if not isinstance(entry, dict):
            raise InvalidArgument(f"{where}: expected a mapping")

        front = entry.get("front")
        if front is None or not str(front).strip():
            raise InvalidArgument(f"{where}: missing 'front'")

        raw_tags = entry.get("tags")
        if raw_tags is None:
            raw_tags = []
        elif isinstance(raw_tags, str):
            raw_tags = [raw_tags]
        elif not isinstance(raw_tags, list):
            raise InvalidArgument(f"{where}: 'tags' must be a list or a single tag")
        tags = [str(t) for t in raw_tags]
        if deck_tag and str(deck_tag) not in tags:
            tags.insert(0, str(deck_tag))

        cards.append(
            Card(
                id=str(entry.get("id") or generate_card_id()),
                front=str(front).strip(),
                back=str(entry.get("back") or "").strip(),
                kind=_parse_kind(entry["kind"], where) if "kind" in entry else default_kind,
                tags=tuple(tags),
            )
        )

    return cards


def load_deck(path: Path) -> list[Card]:
    """Read and parse a deck file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise InvalidArgument(f"Could not read deck {path}: {e}") from e

    cards = parse_deck(text, source=path.name)
    logger.info(f"Loaded {len(cards)} cards from {path}")
    return cards
