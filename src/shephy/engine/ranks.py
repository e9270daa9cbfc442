from __future__ import annotations

from typing import Sequence

from .types import RulesError

RANKS: tuple[int, ...] = (1, 3, 10, 30, 100, 300, 1000)
LOWEST_RANK = RANKS[0]
HIGHEST_RANK = RANKS[-1]


def drop_rank(rank: int) -> int | None:
    """One step down the ladder, or None below 1."""
    if rank == LOWEST_RANK:
        return None
    if rank % 3 == 0:
        return rank // 3
    return rank * 3 // 10


def raise_rank(rank: int) -> int | None:
    """One step up the ladder, or None above 1000."""
    if rank == HIGHEST_RANK:
        return None
    if rank % 3 == 0:
        return rank * 10 // 3
    return rank * 3


def composite_ranks(ranks: Sequence[int]) -> int:
    """Greatest ladder rank not exceeding the sum of `ranks`."""
    if not ranks:
        raise RulesError("Cannot composite an empty list of ranks.")
    total = sum(ranks)
    return max(r for r in RANKS if r <= total)
