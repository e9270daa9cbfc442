from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .rules import GameTree, Judgement, build_tree, is_over, judge
from .serialize import move_to_dict, snapshot
from .types import EventName, RulesError
from .world import GameConfig, new_world

Event = dict[str, object]


@dataclass
class PlayoutResult:
    tree: GameTree
    choices: list[int]
    judgement: Judgement | None
    event_log: list[Event] = field(default_factory=list)


def auto_advance(tree: GameTree, log: list[Event] | None = None) -> GameTree:
    """Force moves that leave the player no real choice."""
    while len(tree.moves) == 1 and tree.moves[0].automatic:
        if log is not None:
            log.append({"type": "MOVE_FORCED", "move": move_to_dict(tree.moves[0])})
        tree = tree.moves[0].force()
    return tree


def choose(tree: GameTree, choice: int) -> GameTree:
    if choice < 0 or choice >= len(tree.moves):
        raise RulesError(f"Invalid move index {choice}; {len(tree.moves)} moves available.")
    return tree.moves[choice].force()


def replay(
    seed: int,
    choices: Iterable[int],
    config: GameConfig | None = None,
    catalog: Sequence[tuple[EventName, int]] | None = None,
) -> GameTree:
    """Rebuild a game from its seed and the indices of the chosen moves.

    Automatic moves are taken between choices and are not counted.
    """
    tree = auto_advance(build_tree(new_world(seed=seed, config=config, catalog=catalog)))
    for choice in choices:
        tree = auto_advance(choose(tree, choice))
    return tree


def random_playout(
    seed: int,
    max_moves: int = 1000,
    config: GameConfig | None = None,
    catalog: Sequence[tuple[EventName, int]] | None = None,
) -> PlayoutResult:
    """Play uniformly random legal moves until the game ends or `max_moves` is hit.

    A second generator seeded from `seed` picks the moves, so a playout is
    reproducible and `replay(seed, result.choices)` reaches the same tree.
    """
    picker = random.Random(seed)
    log: list[Event] = []
    world = new_world(seed=seed, config=config, catalog=catalog)
    log.append({"type": "GAME_STARTED", "seed": seed, "world": snapshot(world)})

    tree = auto_advance(build_tree(world), log)
    choices: list[int] = []
    while tree.moves and len(choices) < max_moves:
        choice = picker.randrange(len(tree.moves))
        log.append({"type": "MOVE_CHOSEN", "index": choice, "move": move_to_dict(tree.moves[choice])})
        choices.append(choice)
        tree = auto_advance(choose(tree, choice), log)

    judgement = None
    if tree.state is None and is_over(tree.world):
        judgement = judge(tree.world)
        log.append(
            {
                "type": "GAME_ENDED",
                "outcome": judgement.outcome,
                "description": judgement.description,
                "world": snapshot(tree.world),
            }
        )
    return PlayoutResult(tree=tree, choices=choices, judgement=judgement, event_log=log)
