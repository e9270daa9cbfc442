from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

EventName = Literal[
    "All-purpose Sheep",
    "Be Fruitful",
    "Crowding",
    "Dominion",
    "Falling Rock",
    "Fill the Earth",
    "Flourish",
    "Golden Hooves",
    "Inspiration",
    "Lightning",
    "Meteor",
    "Multiply",
    "Plague",
    "Planning Sheep",
    "Sheep Dog",
    "Shephion",
    "Slump",
    "Storm",
    "Wolves",
]

RegionName = Literal["sheep_stock", "field", "hand", "deck", "discard_pile", "exile"]


class RulesError(RuntimeError):
    pass


@dataclass(frozen=True)
class SheepCard:
    """A Sheep card instance.

    `uid` keeps two cards of the same rank distinct from each other.
    """

    rank: int
    uid: int

    @property
    def name(self) -> str:
        return str(self.rank)


@dataclass(frozen=True)
class EventCard:
    name: EventName
    uid: int


Card = SheepCard | EventCard


@dataclass(frozen=True)
class RegionRef:
    region: RegionName
    index: int

    @staticmethod
    def field(index: int) -> "RegionRef":
        return RegionRef(region="field", index=index)

    @staticmethod
    def hand(index: int) -> "RegionRef":
        return RegionRef(region="hand", index=index)

    @staticmethod
    def deck(index: int) -> "RegionRef":
        return RegionRef(region="deck", index=index)


# Interaction states. Each carries the name of the card being resolved in
# `step` plus whatever that card's handler accumulates between moves.


@dataclass(frozen=True)
class Resolving:
    step: str


@dataclass(frozen=True)
class RankChosen:
    step: str
    rank: int


@dataclass(frozen=True)
class Selecting:
    step: str
    chosen: tuple[int, ...] = ()


@dataclass(frozen=True)
class Releasing:
    step: str
    rest: int


@dataclass(frozen=True)
class Picked:
    step: str


InteractionState = Resolving | RankChosen | Selecting | Releasing | Picked
