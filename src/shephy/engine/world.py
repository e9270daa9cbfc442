from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Sequence

from .ranks import RANKS
from .types import EventCard, EventName, SheepCard

# Default deck for new_world(). data/cards.json carries the same catalog for
# ContentService; tests/test_schema_validation.py checks the two agree.
EVENT_CATALOG: tuple[tuple[EventName, int], ...] = (
    ("All-purpose Sheep", 1),
    ("Be Fruitful", 3),
    ("Crowding", 1),
    ("Dominion", 2),
    ("Falling Rock", 1),
    ("Fill the Earth", 1),
    ("Flourish", 1),
    ("Golden Hooves", 1),
    ("Inspiration", 1),
    ("Lightning", 1),
    ("Meteor", 1),
    ("Multiply", 1),
    ("Plague", 1),
    ("Planning Sheep", 1),
    ("Sheep Dog", 1),
    ("Shephion", 1),
    ("Slump", 1),
    ("Storm", 1),
    ("Wolves", 1),
)


@dataclass(frozen=True)
class GameConfig:
    field_capacity: int = 7
    hand_capacity: int = 5
    stock_size: int = 7
    enemy_growth: int = 10
    initial_enemy_count: int = 1


@dataclass
class World:
    """Complete game state.

    The last element of `deck` is the top of the deck. Other piles grow at
    the end too, so `discard_pile[-1]` is the most recently discarded card.
    """

    sheep_stock: dict[int, list[SheepCard]]
    field: list[SheepCard]
    hand: list[EventCard]
    deck: list[EventCard]
    discard_pile: list[EventCard] = field(default_factory=list)
    exile: list[SheepCard | EventCard] = field(default_factory=list)
    enemy_sheep_count: int = 1
    config: GameConfig = field(default_factory=GameConfig)
    rng: random.Random = field(default_factory=random.Random, compare=False, repr=False)

    def clone(self) -> "World":
        # Cards are frozen, so copying the containers is enough.
        rng = random.Random()
        rng.setstate(self.rng.getstate())
        return World(
            sheep_stock={rank: list(cards) for rank, cards in self.sheep_stock.items()},
            field=list(self.field),
            hand=list(self.hand),
            deck=list(self.deck),
            discard_pile=list(self.discard_pile),
            exile=list(self.exile),
            enemy_sheep_count=self.enemy_sheep_count,
            config=self.config,
            rng=rng,
        )

    @property
    def field_room(self) -> int:
        return self.config.field_capacity - len(self.field)

    def all_cards(self) -> list[SheepCard | EventCard]:
        cards: list[SheepCard | EventCard] = []
        for rank in RANKS:
            cards.extend(self.sheep_stock[rank])
        cards.extend(self.field)
        cards.extend(self.hand)
        cards.extend(self.deck)
        cards.extend(self.discard_pile)
        cards.extend(self.exile)
        return cards


def _shuffle(rng: random.Random, items: list) -> None:
    # random.shuffle is a Fisher-Yates shuffle.
    rng.shuffle(items)


def new_world(
    seed: int | None = None,
    config: GameConfig | None = None,
    catalog: Sequence[tuple[EventName, int]] | None = None,
) -> World:
    """Build the starting World: one 1 Sheep in the field and a shuffled deck."""
    cfg = config or GameConfig()
    rng = random.Random(seed)
    uid = 0

    sheep_stock: dict[int, list[SheepCard]] = {}
    for rank in RANKS:
        pile: list[SheepCard] = []
        for _ in range(cfg.stock_size):
            pile.append(SheepCard(rank=rank, uid=uid))
            uid += 1
        sheep_stock[rank] = pile

    deck: list[EventCard] = []
    for name, count in catalog or EVENT_CATALOG:
        for _ in range(count):
            deck.append(EventCard(name=name, uid=uid))
            uid += 1
    _shuffle(rng, deck)

    first = sheep_stock[RANKS[0]].pop()
    return World(
        sheep_stock=sheep_stock,
        field=[first],
        hand=[],
        deck=deck,
        enemy_sheep_count=cfg.initial_enemy_count,
        config=cfg,
        rng=rng,
    )


# Region mutators. All of them work in place and quietly do nothing when
# their guard fails.


def gain(world: World, rank: int) -> None:
    if not world.sheep_stock[rank]:
        return
    if world.field_room <= 0:
        return
    world.field.append(world.sheep_stock[rank].pop())


def release(world: World, field_index: int) -> None:
    if not 0 <= field_index < len(world.field):
        return
    c = world.field.pop(field_index)
    world.sheep_stock[c.rank].append(c)


def discard(world: World, hand_index: int) -> None:
    if not 0 <= hand_index < len(world.hand):
        return
    world.discard_pile.append(world.hand.pop(hand_index))


def exile(world: World, region: list, index: int) -> None:
    if not 0 <= index < len(region):
        return
    world.exile.append(region.pop(index))


def should_draw(world: World) -> bool:
    return len(world.hand) < world.config.hand_capacity and len(world.deck) > 0


def draw(world: World) -> None:
    if not should_draw(world):
        return
    world.hand.append(world.deck.pop())


def pick_from_deck(world: World, deck_index: int) -> None:
    if not 0 <= deck_index < len(world.deck):
        return
    if len(world.hand) >= world.config.hand_capacity:
        return
    world.hand.append(world.deck.pop(deck_index))


def shuffle_deck(world: World) -> None:
    _shuffle(world.rng, world.deck)


def remake_deck(world: World) -> None:
    world.deck.extend(world.discard_pile)
    world.discard_pile = []
    shuffle_deck(world)
