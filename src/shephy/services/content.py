from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from shephy.engine.rules import CARD_HANDLERS
from shephy.engine.types import EventName


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int):
        raise ContentError(f"Expected int for {key}")
    return v


@dataclass(frozen=True)
class EventCatalog:
    """Event card names with their number of copies, in deck-building order."""

    entries: tuple[tuple[EventName, int], ...]
    deck_size: int

    @property
    def total(self) -> int:
        return sum(count for _, count in self.entries)


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_event_catalog(self) -> EventCatalog:
        path = self._data_dir / "cards.json"
        schema = _load_json(self._schema_dir / "cards.schema.json")
        raw = _load_json(path)
        validate_json(raw, schema, context=str(path))

        if not isinstance(raw, dict):
            raise ContentError("cards.json must be an object")
        raw_events = raw.get("events")
        if not isinstance(raw_events, list):
            raise ContentError("cards.json.events must be a list")
        deck_size = _require_int(raw, "deck_size")

        seen: set[str] = set()
        entries: list[tuple[EventName, int]] = []
        for item in raw_events:
            if not isinstance(item, dict):
                continue
            name = _require_str(item, "name")
            count = _require_int(item, "count")
            if name in seen:
                raise ContentError(f"Duplicate event card: {name}")
            if name not in CARD_HANDLERS:
                raise ContentError(f"Unknown event card: {name}")
            seen.add(name)
            entries.append((name, count))  # type: ignore[arg-type]

        catalog = EventCatalog(entries=tuple(entries), deck_size=deck_size)
        if catalog.total != deck_size:
            raise ContentError(f"Catalog holds {catalog.total} cards, expected {deck_size}.")
        return catalog

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_event_catalog()
