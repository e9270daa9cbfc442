from __future__ import annotations

from typing import Sequence

from shephy.engine.rules import GameTree, Move, build_tree
from shephy.engine.types import Picked, RankChosen, RegionRef, Releasing, Resolving, Selecting
from shephy.engine.world import World, gain, new_world, release


def _make_world(field_ranks: Sequence[int], hand: Sequence[str] = (), seed: int = 21) -> World:
    w = new_world(seed=seed)
    release(w, 0)
    for r in field_ranks:
        gain(w, r)
    for name in hand:
        idx = next(i for i, c in enumerate(w.deck) if c.name == name)
        w.hand.append(w.deck.pop(idx))
    return w


def _resolve(w: World, name: str) -> GameTree:
    """Put `name` on the discard pile as if just played and start resolving it."""
    idx = next(i for i, c in enumerate(w.deck) if c.name == name)
    w.discard_pile.append(w.deck.pop(idx))
    return build_tree(w, Resolving(step=name))


def _descriptions(tree: GameTree) -> list[str]:
    return [m.description for m in tree.moves]


def _ranks(tree: GameTree) -> list[int]:
    return [c.rank for c in tree.world.field]


def _on_field(tree: GameTree, index: int) -> Move:
    return next(m for m in tree.moves if m.highlight == RegionRef.field(index))


def _uids(w: World) -> list[int]:
    return sorted(c.uid for c in w.all_cards())


def test_dominion_combines_chosen_cards() -> None:
    w = _make_world([1, 3, 3, 3, 3, 30])
    assert len(w.sheep_stock[3]) == 3
    tree = _resolve(w, "Dominion")
    assert _descriptions(tree)[-1] == "Cancel"
    assert len(tree.moves) == 7

    for i in (1, 2, 3, 4):
        tree = _on_field(tree, i).force()
    assert tree.state == Selecting(step="Dominion", chosen=(1, 2, 3, 4))
    assert _descriptions(tree) == [
        "Choose 1 Sheep card",
        "Choose 30 Sheep card",
        "Combine chosen Sheep cards",
    ]

    done = tree.moves[-1].force()
    assert done.state is None
    assert sorted(_ranks(done)) == [1, 10, 30]
    assert len(done.world.sheep_stock[3]) == 7
    assert len(done.world.sheep_stock[10]) == 6
    assert _uids(done.world) == _uids(w)


def test_dominion_cancel_changes_nothing() -> None:
    w = _make_world([1, 3])
    tree = _resolve(w, "Dominion")
    done = tree.moves[-1].force()
    assert done.state is None
    assert done.world == w


def test_be_fruitful_copies_chosen_rank() -> None:
    tree = _resolve(_make_world([1, 3]), "Be Fruitful")
    assert _descriptions(tree) == ["Copy 1 Sheep card", "Copy 3 Sheep card"]
    chosen = tree.moves[1].force()
    assert chosen.state == RankChosen(step="Be Fruitful", rank=3)
    assert _descriptions(chosen) == ["Gain a 3 Sheep card"]
    assert chosen.moves[0].automatic
    done = chosen.moves[0].force()
    assert _ranks(done) == [1, 3, 3]
    assert done.state is None


def test_be_fruitful_on_full_field() -> None:
    tree = _resolve(_make_world([1, 1, 1, 3, 3, 3, 10]), "Be Fruitful")
    assert _descriptions(tree) == ["Nothing happened"]


def test_flourish_gains_three_of_lower_rank() -> None:
    tree = _resolve(_make_world([10]), "Flourish")
    chosen = tree.moves[0].force()
    assert _descriptions(chosen) == ["Gain 3 cards of 3 Sheep"]
    assert _ranks(chosen.moves[0].force()) == [10, 3, 3, 3]


def test_flourish_is_capped_by_field_room() -> None:
    tree = _resolve(_make_world([3, 3, 3, 3, 3, 10]), "Flourish")
    chosen = _on_field(tree, 5).force()
    assert _descriptions(chosen) == ["Gain a 3 Sheep card"]
    assert len(chosen.moves[0].force().world.field) == 7


def test_flourish_on_lowest_rank_gains_nothing() -> None:
    tree = _resolve(_make_world([1]), "Flourish")
    chosen = tree.moves[0].force()
    assert _descriptions(chosen) == ["Gain nothing"]


def test_golden_hooves_raises_all_but_highest() -> None:
    tree = _resolve(_make_world([1, 3, 10]), "Golden Hooves")
    assert _descriptions(tree) == ["Choose 1 Sheep card", "Choose 3 Sheep card", "Cancel"]
    tree = _on_field(tree, 0).force()
    tree = _on_field(tree, 1).force()
    assert _descriptions(tree) == ["Raise ranks of chosen Sheep cards"]
    done = tree.moves[0].force()
    assert sorted(_ranks(done)) == [3, 10, 10]


def test_multiply() -> None:
    tree = _resolve(_make_world([1]), "Multiply")
    assert _descriptions(tree) == ["Gain a 3 Sheep card"]
    assert _ranks(tree.moves[0].force()) == [1, 3]

    full = _resolve(_make_world([1, 1, 1, 1, 1, 1, 3]), "Multiply")
    assert _descriptions(full) == ["Nothing happened"]


def test_falling_rock_releases_one() -> None:
    tree = _resolve(_make_world([1, 3]), "Falling Rock")
    assert _descriptions(tree) == ["Release 1 Sheep card", "Release 3 Sheep card"]
    done = tree.moves[1].force()
    assert _ranks(done) == [1]
    assert done.state is None


def test_crowding_releases_down_to_two() -> None:
    tree = _resolve(_make_world([1, 3, 10, 30]), "Crowding")
    assert len(tree.moves) == 4
    tree = tree.moves[0].force()
    assert tree.state == Resolving(step="Crowding")
    tree = tree.moves[0].force()
    assert tree.state is None
    assert _ranks(tree) == [10, 30]

    small = _resolve(_make_world([1, 3]), "Crowding")
    assert _descriptions(small) == ["Nothing happened"]


def test_slump_releases_half() -> None:
    tree = _resolve(_make_world([1, 3, 10, 30, 100]), "Slump")
    tree = tree.moves[4].force()
    assert tree.state == Releasing(step="Slump", rest=1)
    tree = tree.moves[0].force()
    assert tree.state is None
    assert _ranks(tree) == [3, 10, 30]

    alone = _resolve(_make_world([3]), "Slump")
    assert _descriptions(alone) == ["Nothing happened"]


def test_storm_releases_two() -> None:
    tree = _resolve(_make_world([1, 3, 10]), "Storm")
    tree = tree.moves[0].force()
    assert tree.state == Releasing(step="Storm", rest=1)
    tree = tree.moves[0].force()
    assert tree.state is None
    assert _ranks(tree) == [10]


def test_storm_on_single_sheep_empties_the_field() -> None:
    tree = _resolve(_make_world([3]), "Storm")
    done = tree.moves[0].force()
    assert done.state is None
    assert done.world.field == []
    assert done.moves == ()


def test_meteor_exiles_itself_then_releases_three() -> None:
    w = _make_world([1, 3, 10, 30])
    tree = _resolve(w, "Meteor")
    assert len(tree.moves) == 4
    tree = tree.moves[0].force()
    assert [c.name for c in tree.world.exile] == ["Meteor"]
    assert all(c.name != "Meteor" for c in tree.world.discard_pile)
    assert tree.state == Releasing(step="Meteor", rest=2)

    tree = tree.moves[0].force()
    tree = tree.moves[0].force()
    assert tree.state is None
    assert _ranks(tree) == [30]
    assert len(tree.world.exile) == 1
    assert _uids(tree.world) == _uids(w)


def test_lightning_targets_highest_rank() -> None:
    tree = _resolve(_make_world([1, 30, 3, 30]), "Lightning")
    assert [m.highlight for m in tree.moves] == [RegionRef.field(1), RegionRef.field(3)]
    assert _ranks(tree.moves[1].force()) == [1, 30, 3]


def test_wolves_reduces_highest_rank() -> None:
    tree = _resolve(_make_world([1, 30, 3]), "Wolves")
    assert _descriptions(tree) == ["Reduce the rank of 30 Sheep card"]
    done = tree.moves[0].force()
    assert sorted(_ranks(done)) == [1, 3, 10]
    assert len(done.world.sheep_stock[30]) == 7


def test_wolves_release_when_only_ones_remain() -> None:
    tree = _resolve(_make_world([1, 1]), "Wolves")
    assert _descriptions(tree) == ["Release 1 Sheep card", "Release 1 Sheep card"]
    assert _ranks(tree.moves[0].force()) == [1]


def test_plague_releases_every_card_of_a_rank() -> None:
    tree = _resolve(_make_world([1, 3, 3, 10]), "Plague")
    assert len(tree.moves) == 4
    assert _ranks(_on_field(tree, 1).force()) == [1, 10]
    assert _ranks(_on_field(tree, 2).force()) == [1, 10]


def test_planning_sheep_exiles_from_hand() -> None:
    tree = _resolve(_make_world([1], hand=["Storm", "Plague"]), "Planning Sheep")
    assert _descriptions(tree) == ["Exile Storm", "Exile Plague"]
    done = tree.moves[0].force()
    assert [c.name for c in done.world.hand] == ["Plague"]
    assert [c.name for c in done.world.exile] == ["Storm"]

    empty = _resolve(_make_world([1]), "Planning Sheep")
    assert _descriptions(empty) == ["Nothing happened"]


def test_sheep_dog_discards_from_hand() -> None:
    tree = _resolve(_make_world([1], hand=["Storm"]), "Sheep Dog")
    done = tree.moves[0].force()
    assert done.world.hand == []
    assert [c.name for c in done.world.discard_pile] == ["Sheep Dog", "Storm"]


def test_shephion_releases_everything() -> None:
    tree = _resolve(_make_world([1, 3, 10]), "Shephion")
    assert len(tree.moves) == 1
    assert tree.moves[0].automatic
    done = tree.moves[0].force()
    assert done.world.field == []
    assert len(done.world.sheep_stock[1]) == 7


def test_inspiration_picks_from_deck_then_shuffles() -> None:
    w = _make_world([1])
    tree = _resolve(w, "Inspiration")
    assert len(tree.moves) == len(w.deck)
    target = w.deck[0]
    picked = tree.moves[0].force()
    assert picked.state == Picked(step="Inspiration")
    assert picked.world.hand == [target]
    assert _descriptions(picked) == ["Shuffle the deck"]
    done = picked.moves[0].force()
    assert done.state is None
    assert sorted(c.uid for c in done.world.deck) == sorted(c.uid for c in picked.world.deck)


def test_fill_the_earth_repeats_until_cancelled() -> None:
    tree = _resolve(_make_world([3, 3, 3, 3, 3]), "Fill the Earth")
    assert _descriptions(tree) == ["Gain a 1 Sheep card", "Cancel"]
    tree = tree.moves[0].force()
    assert tree.state == Resolving(step="Fill the Earth")
    tree = tree.moves[0].force()
    assert _descriptions(tree) == ["Cancel"]
    done = tree.moves[0].force()
    assert done.state is None
    assert sorted(_ranks(done)) == [1, 1, 3, 3, 3, 3, 3]


def test_all_purpose_sheep_copies_a_hand_card() -> None:
    tree = _resolve(_make_world([1], hand=["Multiply"]), "All-purpose Sheep")
    assert _descriptions(tree) == ["Copy Multiply"]
    copied = tree.moves[0].force()
    assert copied.state == Resolving(step="Multiply")
    done = copied.moves[0].force()
    assert _ranks(done) == [1, 3]
    assert [c.name for c in done.world.hand] == ["Multiply"]

    empty = _resolve(_make_world([1]), "All-purpose Sheep")
    assert _descriptions(empty) == ["Nothing happened"]


def _drain_stock(w: World, rank: int) -> None:
    # Park the stock in exile so card conservation still holds.
    w.exile.extend(w.sheep_stock[rank])
    w.sheep_stock[rank] = []


def test_inspiration_with_empty_deck() -> None:
    w = _make_world([1])
    _resolve(w, "Inspiration")
    w.exile.extend(w.deck)
    w.deck = []
    tree = build_tree(w, Resolving(step="Inspiration"))
    assert _descriptions(tree) == ["Nothing happened"]
    assert tree.moves[0].force().state is None


def test_fill_the_earth_with_empty_stock_only_cancels() -> None:
    w = _make_world([3])
    _drain_stock(w, 1)
    tree = _resolve(w, "Fill the Earth")
    assert _descriptions(tree) == ["Cancel"]


def test_be_fruitful_with_empty_stock_gains_nothing() -> None:
    w = _make_world([1, 3])
    _drain_stock(w, 3)
    _resolve(w, "Be Fruitful")
    chosen = build_tree(w, RankChosen(step="Be Fruitful", rank=3))
    assert _descriptions(chosen) == ["Gain nothing"]
    done = chosen.moves[0].force()
    assert done.state is None
    assert _ranks(done) == [1, 3]


def test_wolves_with_empty_lower_stock_just_releases() -> None:
    w = _make_world([1, 30])
    _drain_stock(w, 10)
    tree = _resolve(w, "Wolves")
    done = tree.moves[0].force()
    assert _ranks(done) == [1]
    assert len(done.world.sheep_stock[30]) == 7
    assert _uids(done.world) == _uids(w)


def test_dominion_with_empty_composite_stock_just_releases() -> None:
    w = _make_world([1, 3, 3, 3, 3])
    _drain_stock(w, 10)
    tree = _resolve(w, "Dominion")
    for i in (1, 2, 3, 4):
        tree = _on_field(tree, i).force()
    done = tree.moves[-1].force()
    assert _ranks(done) == [1]
    assert len(done.world.sheep_stock[3]) == 7
    assert _uids(done.world) == _uids(w)


def test_golden_hooves_with_empty_raised_stock_just_releases() -> None:
    w = _make_world([1, 10])
    _drain_stock(w, 3)
    tree = _resolve(w, "Golden Hooves")
    tree = _on_field(tree, 0).force()
    done = tree.moves[-1].force()
    assert _ranks(done) == [10]
    assert len(done.world.sheep_stock[1]) == 7
    assert _uids(done.world) == _uids(w)


def test_golden_hooves_cancel_changes_nothing() -> None:
    w = _make_world([1, 3, 10])
    tree = _resolve(w, "Golden Hooves")
    assert tree.moves[-1].description == "Cancel"
    done = tree.moves[-1].force()
    assert done.state is None
    assert done.world == w


def test_all_purpose_sheep_copying_meteor_exiles_itself() -> None:
    w = _make_world([1, 3, 10, 30], hand=["Meteor"])
    tree = _resolve(w, "All-purpose Sheep")
    copied = tree.moves[0].force()
    assert copied.state == Resolving(step="Meteor")
    released = copied.moves[0].force()
    assert [c.name for c in released.world.exile] == ["All-purpose Sheep"]
    assert [c.name for c in released.world.hand] == ["Meteor"]
    assert released.state == Releasing(step="Meteor", rest=2)
    assert _uids(released.world) == _uids(w)
