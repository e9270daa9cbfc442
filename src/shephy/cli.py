from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from shephy.engine.rules import is_over, judge
from shephy.engine.session import random_playout, replay
from shephy.engine.types import RulesError
from shephy.paths import get_paths
from shephy.services.content import ContentError, ContentService
from shephy.services.telemetry import TelemetryService


def _parse_choices(raw: str) -> list[int]:
    if not raw.strip():
        return []
    try:
        return [int(part) for part in raw.split(",")]
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid choice list: {raw}") from e


def _cmd_simulate(args: argparse.Namespace, content: ContentService) -> int:
    catalog = content.load_event_catalog()
    result = random_playout(args.seed, max_moves=args.max_moves, catalog=catalog.entries)
    if args.telemetry is not None:
        TelemetryService(Path(args.telemetry), context={"seed": args.seed}).log_events(result.event_log)

    outcome = result.judgement.outcome if result.judgement else "unfinished"
    print(
        f"seed={args.seed} choices={len(result.choices)} outcome={outcome} "
        f"enemies={result.tree.world.enemy_sheep_count}"
    )
    return 0


def _cmd_replay(args: argparse.Namespace, content: ContentService) -> int:
    catalog = content.load_event_catalog()
    try:
        tree = replay(args.seed, args.choices, catalog=catalog.entries)
    except RulesError as e:
        print(f"error: {e}")
        return 1
    if not tree.moves and tree.state is None and is_over(tree.world):
        print(judge(tree.world).description)
    else:
        print(f"{len(tree.moves)} moves available: " + "; ".join(m.description for m in tree.moves))
    return 0


def _cmd_validate(args: argparse.Namespace, content: ContentService) -> int:
    try:
        content.validate_all()
    except ContentError as e:
        print(e)
        return 1
    print("Content OK.")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="shephy")
    sub = parser.add_subparsers(dest="command", required=True)

    sim = sub.add_parser("simulate", help="play random legal moves until the game ends")
    sim.add_argument("--seed", type=int, default=0)
    sim.add_argument("--max-moves", type=int, default=1000)
    sim.add_argument("--telemetry", type=str, default=None, help="JSONL file to append events to")
    sim.set_defaults(func=_cmd_simulate)

    rep = sub.add_parser("replay", help="rebuild a game from a seed and chosen move indices")
    rep.add_argument("--seed", type=int, required=True)
    rep.add_argument("--choices", type=_parse_choices, default=[])
    rep.set_defaults(func=_cmd_replay)

    val = sub.add_parser("validate", help="check the card catalog against its schema")
    val.set_defaults(func=_cmd_validate)

    args = parser.parse_args(argv)
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    return args.func(args, content)


if __name__ == "__main__":
    raise SystemExit(main())
