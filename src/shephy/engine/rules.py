from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal

from .lazy import Lazy, delay
from .ranks import HIGHEST_RANK, LOWEST_RANK, composite_ranks, drop_rank, raise_rank
from .types import (
    InteractionState,
    Picked,
    RankChosen,
    RegionRef,
    Releasing,
    Resolving,
    RulesError,
    Selecting,
)
from .world import (
    World,
    discard,
    draw,
    exile,
    gain,
    pick_from_deck,
    release,
    remake_deck,
    should_draw,
    shuffle_deck,
)

Outcome = Literal["win", "lose"]


@dataclass(frozen=True)
class Move:
    description: str
    promise: Lazy["GameTree"]
    highlight: RegionRef | None = None
    automatic: bool = False

    def force(self) -> "GameTree":
        return self.promise.force()


@dataclass(frozen=True)
class GameTree:
    world: World
    state: InteractionState | None
    moves: tuple[Move, ...]


@dataclass(frozen=True)
class Judgement:
    outcome: Outcome
    description: str


Handler = Callable[[World, InteractionState], list[Move]]


def build_tree(world: World, state: InteractionState | None = None) -> GameTree:
    return GameTree(world=world, state=state, moves=tuple(list_moves(world, state)))


def list_moves(world: World, state: InteractionState | None = None) -> list[Move]:
    if state is None:
        return _basic_rule_moves(world)
    return _card_moves(world, state)


def is_over(world: World) -> bool:
    if any(c.rank == HIGHEST_RANK for c in world.field):
        return True
    if world.enemy_sheep_count >= HIGHEST_RANK:
        return True
    return len(world.field) == 0


def judge(world: World) -> Judgement:
    """Classify a finished game. The win check comes before the losses."""
    if any(c.rank == HIGHEST_RANK for c in world.field):
        return Judgement(outcome="win", description="You win!")
    if world.enemy_sheep_count >= HIGHEST_RANK:
        return Judgement(outcome="lose", description="Enemies reached 1000 sheep - you lose.")
    if len(world.field) == 0:
        return Judgement(outcome="lose", description="You lost all your sheep - you lose.")
    raise RulesError("Cannot judge a game which is still in progress.")


# Move builders


def _then(world: World, mutate: Callable[[World], None], state: InteractionState | None = None) -> Lazy[GameTree]:
    """Apply `mutate` to a clone of `world` when forced."""

    def thunk() -> GameTree:
        wn = world.clone()
        mutate(wn)
        return build_tree(wn, state)

    return delay(thunk)


def _stay(world: World, state: InteractionState | None = None) -> Lazy[GameTree]:
    """Continue with the same World, only the interaction state changes."""
    return delay(lambda: build_tree(world, state))


def _nothing(world: World, description: str = "Nothing happened") -> list[Move]:
    return [Move(description=description, promise=_stay(world), automatic=True)]


def _draw_up(wn: World) -> None:
    while should_draw(wn):
        draw(wn)


# Basic rules


def _basic_rule_moves(world: World) -> list[Move]:
    if is_over(world):
        return []

    if not world.hand and not world.deck:

        def remake(wn: World) -> None:
            remake_deck(wn)
            _draw_up(wn)
            wn.enemy_sheep_count *= wn.config.enemy_growth

        return [
            Move(
                description="Remake Deck then fill Hand",
                promise=_then(world, remake),
                automatic=True,
            )
        ]

    if should_draw(world):
        missing = world.config.hand_capacity - len(world.hand)
        return [
            Move(
                description="Draw a card" if missing == 1 else "Draw cards",
                promise=_then(world, _draw_up),
                highlight=RegionRef.deck(len(world.deck) - 1),
                automatic=True,
            )
        ]

    moves: list[Move] = []
    for i, c in enumerate(world.hand):
        moves.append(
            Move(
                description=f"Play {c.name}",
                promise=_then(world, lambda wn, i=i: discard(wn, i), Resolving(step=c.name)),
                highlight=RegionRef.hand(i),
            )
        )
    return moves


def _card_moves(world: World, state: InteractionState) -> list[Move]:
    handler = CARD_HANDLERS.get(state.step, _unimplemented)
    return handler(world, state)


# Card handlers. Each returns the moves for one step of resolving a card and
# never mutates `world` itself.


def _highest_rank(world: World) -> int:
    return max(c.rank for c in world.field)


def _release_one_of(
    world: World,
    indices: list[int],
    next_state: InteractionState | None,
    before: Callable[[World], None] | None = None,
) -> list[Move]:
    moves: list[Move] = []
    for i in indices:
        c = world.field[i]

        def release_it(wn: World, i: int = i) -> None:
            if before is not None:
                before(wn)
            release(wn, i)

        moves.append(
            Move(
                description=f"Release {c.rank} Sheep card",
                promise=_then(world, release_it, next_state),
                highlight=RegionRef.field(i),
            )
        )
    return moves


def _release_repeatedly(world: World, step: str, rest: int) -> list[Move]:
    n = min(rest, len(world.field))
    if n <= 0:
        return _nothing(world)
    next_state = None if n == 1 else Releasing(step=step, rest=n - 1)
    return _release_one_of(world, list(range(len(world.field))), next_state)


def _all_purpose_sheep(world: World, state: InteractionState) -> list[Move]:
    if not world.hand:
        return _nothing(world)
    return [
        Move(
            description=f"Copy {c.name}",
            promise=_stay(world, Resolving(step=c.name)),
            highlight=RegionRef.hand(i),
        )
        for i, c in enumerate(world.hand)
    ]


def _be_fruitful(world: World, state: InteractionState) -> list[Move]:
    if isinstance(state, RankChosen):
        rank = state.rank
        if not world.sheep_stock[rank]:
            return _nothing(world, "Gain nothing")
        return [
            Move(
                description=f"Gain a {rank} Sheep card",
                promise=_then(world, lambda wn: gain(wn, rank)),
                automatic=True,
            )
        ]
    if world.field_room <= 0:
        return _nothing(world)
    return [
        Move(
            description=f"Copy {c.rank} Sheep card",
            promise=_stay(world, RankChosen(step=state.step, rank=c.rank)),
            highlight=RegionRef.field(i),
        )
        for i, c in enumerate(world.field)
    ]


def _crowding(world: World, state: InteractionState) -> list[Move]:
    if len(world.field) <= 2:
        return _nothing(world)
    next_state = None if len(world.field) == 3 else Resolving(step=state.step)
    return _release_one_of(world, list(range(len(world.field))), next_state)


def _choose_many(
    world: World,
    state: InteractionState,
    candidates: list[int],
    finish: str,
    resolve: Callable[[World, tuple[int, ...]], None],
) -> list[Move]:
    chosen = state.chosen if isinstance(state, Selecting) else ()
    moves: list[Move] = []
    for i in candidates:
        if i in chosen:
            continue
        c = world.field[i]
        moves.append(
            Move(
                description=f"Choose {c.rank} Sheep card",
                promise=_stay(world, Selecting(step=state.step, chosen=tuple(sorted(chosen + (i,))))),
                highlight=RegionRef.field(i),
            )
        )
    if chosen:
        moves.append(Move(description=finish, promise=_then(world, lambda wn: resolve(wn, chosen))))
    else:
        moves.append(Move(description="Cancel", promise=_stay(world)))
    return moves


def _dominion(world: World, state: InteractionState) -> list[Move]:
    def combine(wn: World, chosen: tuple[int, ...]) -> None:
        ranks = [wn.field[i].rank for i in chosen]
        for i in reversed(chosen):
            release(wn, i)
        gain(wn, composite_ranks(ranks))

    return _choose_many(
        world, state, list(range(len(world.field))), "Combine chosen Sheep cards", combine
    )


def _falling_rock(world: World, state: InteractionState) -> list[Move]:
    return _release_one_of(world, list(range(len(world.field))), None)


def _fill_the_earth(world: World, state: InteractionState) -> list[Move]:
    moves: list[Move] = []
    if world.field_room > 0 and world.sheep_stock[LOWEST_RANK]:
        moves.append(
            Move(
                description=f"Gain a {LOWEST_RANK} Sheep card",
                promise=_then(world, lambda wn: gain(wn, LOWEST_RANK), state),
            )
        )
    moves.append(Move(description="Cancel", promise=_stay(world)))
    return moves


def _flourish(world: World, state: InteractionState) -> list[Move]:
    if not isinstance(state, RankChosen):
        if world.field_room <= 0:
            return _nothing(world)
        return [
            Move(
                description=f"Choose {c.rank} Sheep card",
                promise=_stay(world, RankChosen(step=state.step, rank=c.rank)),
                highlight=RegionRef.field(i),
            )
            for i, c in enumerate(world.field)
        ]

    lower = drop_rank(state.rank)
    if lower is None:
        return _nothing(world, "Gain nothing")
    n = min(3, world.field_room, len(world.sheep_stock[lower]))
    if n <= 0:
        return _nothing(world, "Gain nothing")

    def gain_lower(wn: World) -> None:
        for _ in range(n):
            gain(wn, lower)

    return [
        Move(
            description=f"Gain a {lower} Sheep card" if n == 1 else f"Gain {n} cards of {lower} Sheep",
            promise=_then(world, gain_lower),
            automatic=True,
        )
    ]


def _golden_hooves(world: World, state: InteractionState) -> list[Move]:
    highest = _highest_rank(world)

    def raise_chosen(wn: World, chosen: tuple[int, ...]) -> None:
        # Highest index first so the remaining indices stay valid.
        for i in reversed(chosen):
            c = wn.field[i]
            release(wn, i)
            raised = raise_rank(c.rank)
            if raised is not None:
                gain(wn, raised)

    candidates = [i for i, c in enumerate(world.field) if c.rank < highest]
    return _choose_many(world, state, candidates, "Raise ranks of chosen Sheep cards", raise_chosen)


def _inspiration(world: World, state: InteractionState) -> list[Move]:
    if isinstance(state, Picked):
        return [
            Move(
                description="Shuffle the deck",
                promise=_then(world, shuffle_deck),
                automatic=True,
            )
        ]
    if not world.deck:
        return _nothing(world)
    return [
        Move(
            description=f"Put {c.name} into your hand",
            promise=_then(world, lambda wn, i=i: pick_from_deck(wn, i), Picked(step=state.step)),
            highlight=RegionRef.deck(i),
        )
        for i, c in enumerate(world.deck)
    ]


def _lightning(world: World, state: InteractionState) -> list[Move]:
    highest = _highest_rank(world)
    return _release_one_of(world, [i for i, c in enumerate(world.field) if c.rank == highest], None)


def _meteor(world: World, state: InteractionState) -> list[Move]:
    if isinstance(state, Releasing):
        return _release_repeatedly(world, state.step, state.rest)

    # The played card sits on top of the discard pile.
    def exile_played(wn: World) -> None:
        exile(wn, wn.discard_pile, len(wn.discard_pile) - 1)

    n = min(3, len(world.field))
    if n == 0:
        return [Move(description="Exile Meteor", promise=_then(world, exile_played), automatic=True)]
    next_state = None if n == 1 else Releasing(step=state.step, rest=n - 1)
    return _release_one_of(world, list(range(len(world.field))), next_state, before=exile_played)


def _multiply(world: World, state: InteractionState) -> list[Move]:
    if world.field_room <= 0 or not world.sheep_stock[3]:
        return _nothing(world)
    return [
        Move(
            description="Gain a 3 Sheep card",
            promise=_then(world, lambda wn: gain(wn, 3)),
            automatic=True,
        )
    ]


def _plague(world: World, state: InteractionState) -> list[Move]:
    moves: list[Move] = []
    for i, c in enumerate(world.field):

        def release_rank(wn: World, rank: int = c.rank) -> None:
            for j in range(len(wn.field) - 1, -1, -1):
                if wn.field[j].rank == rank:
                    release(wn, j)

        moves.append(
            Move(
                description=f"Release all {c.rank} Sheep cards",
                promise=_then(world, release_rank),
                highlight=RegionRef.field(i),
            )
        )
    return moves


def _planning_sheep(world: World, state: InteractionState) -> list[Move]:
    if not world.hand:
        return _nothing(world)
    return [
        Move(
            description=f"Exile {c.name}",
            promise=_then(world, lambda wn, i=i: exile(wn, wn.hand, i)),
            highlight=RegionRef.hand(i),
        )
        for i, c in enumerate(world.hand)
    ]


def _sheep_dog(world: World, state: InteractionState) -> list[Move]:
    if not world.hand:
        return _nothing(world)
    return [
        Move(
            description=f"Discard {c.name}",
            promise=_then(world, lambda wn, i=i: discard(wn, i)),
            highlight=RegionRef.hand(i),
        )
        for i, c in enumerate(world.hand)
    ]


def _shephion(world: World, state: InteractionState) -> list[Move]:
    def release_all(wn: World) -> None:
        while wn.field:
            release(wn, len(wn.field) - 1)

    return [
        Move(
            description="Release all Sheep cards",
            promise=_then(world, release_all),
            automatic=True,
        )
    ]


def _slump(world: World, state: InteractionState) -> list[Move]:
    if isinstance(state, Releasing):
        return _release_repeatedly(world, state.step, state.rest)
    return _release_repeatedly(world, state.step, len(world.field) // 2)


def _storm(world: World, state: InteractionState) -> list[Move]:
    rest = state.rest if isinstance(state, Releasing) else 2
    return _release_repeatedly(world, state.step, rest)


def _wolves(world: World, state: InteractionState) -> list[Move]:
    highest = _highest_rank(world)
    if highest == LOWEST_RANK:
        return _lightning(world, state)
    lower = drop_rank(highest)
    assert lower is not None
    moves: list[Move] = []
    for i, c in enumerate(world.field):
        if c.rank != highest:
            continue

        def reduce(wn: World, i: int = i) -> None:
            release(wn, i)
            gain(wn, lower)

        moves.append(
            Move(
                description=f"Reduce the rank of {c.rank} Sheep card",
                promise=_then(world, reduce),
                highlight=RegionRef.field(i),
            )
        )
    return moves


def _unimplemented(world: World, state: InteractionState) -> list[Move]:
    return _nothing(world, "Nothing happened (not implemented yet)")


CARD_HANDLERS: dict[str, Handler] = {
    "All-purpose Sheep": _all_purpose_sheep,
    "Be Fruitful": _be_fruitful,
    "Crowding": _crowding,
    "Dominion": _dominion,
    "Falling Rock": _falling_rock,
    "Fill the Earth": _fill_the_earth,
    "Flourish": _flourish,
    "Golden Hooves": _golden_hooves,
    "Inspiration": _inspiration,
    "Lightning": _lightning,
    "Meteor": _meteor,
    "Multiply": _multiply,
    "Plague": _plague,
    "Planning Sheep": _planning_sheep,
    "Sheep Dog": _sheep_dog,
    "Shephion": _shephion,
    "Slump": _slump,
    "Storm": _storm,
    "Wolves": _wolves,
}
