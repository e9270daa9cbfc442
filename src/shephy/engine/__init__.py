"""Rules engine for Shephy, the solitaire sheep card game.

Every state is a plain World; every legal continuation is a lazily built
GameTree node. Nothing here renders, prompts or persists.
"""

from .lazy import Lazy, delay, force
from .ranks import RANKS, composite_ranks, drop_rank, raise_rank
from .rules import CARD_HANDLERS, GameTree, Judgement, Move, build_tree, is_over, judge, list_moves
from .types import EventCard, RegionRef, RulesError, SheepCard
from .world import EVENT_CATALOG, GameConfig, World, new_world

__all__ = [
    "CARD_HANDLERS",
    "EVENT_CATALOG",
    "EventCard",
    "GameConfig",
    "GameTree",
    "Judgement",
    "Lazy",
    "Move",
    "RANKS",
    "RegionRef",
    "RulesError",
    "SheepCard",
    "World",
    "build_tree",
    "composite_ranks",
    "delay",
    "drop_rank",
    "force",
    "is_over",
    "judge",
    "list_moves",
    "new_world",
    "raise_rank",
]
