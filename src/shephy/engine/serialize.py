from __future__ import annotations

from .ranks import RANKS
from .rules import GameTree, Move
from .types import EventCard, InteractionState, RegionRef, SheepCard
from .world import World


def _card_to_dict(c: SheepCard | EventCard) -> dict[str, object]:
    if isinstance(c, SheepCard):
        return {"kind": "sheep", "uid": c.uid, "rank": c.rank}
    return {"kind": "event", "uid": c.uid, "name": c.name}


def _cards(cs: list) -> list[dict[str, object]]:
    return [_card_to_dict(c) for c in cs]


def snapshot(world: World) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of a World."""
    return {
        "sheep_stock": {str(rank): _cards(world.sheep_stock[rank]) for rank in RANKS},
        "field": _cards(world.field),
        "hand": _cards(world.hand),
        "deck": _cards(world.deck),
        "discard_pile": _cards(world.discard_pile),
        "exile": _cards(world.exile),
        "enemy_sheep_count": world.enemy_sheep_count,
    }


def state_to_dict(state: InteractionState | None) -> dict[str, object] | None:
    if state is None:
        return None
    d: dict[str, object] = {"type": type(state).__name__, "step": state.step}
    for key in ("rank", "chosen", "rest"):
        if hasattr(state, key):
            v = getattr(state, key)
            d[key] = list(v) if isinstance(v, tuple) else v
    return d


def _highlight_to_dict(h: RegionRef | None) -> dict[str, object] | None:
    if h is None:
        return None
    return {"region": h.region, "index": h.index}


def move_to_dict(m: Move) -> dict[str, object]:
    return {
        "description": m.description,
        "highlight": _highlight_to_dict(m.highlight),
        "automatic": m.automatic,
    }


def tree_to_dict(tree: GameTree) -> dict[str, object]:
    return {
        "world": snapshot(tree.world),
        "state": state_to_dict(tree.state),
        "moves": [move_to_dict(m) for m in tree.moves],
    }
