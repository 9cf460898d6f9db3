"""Command-line interface for valuing players from stat history."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from pricetrack.board import (
    BoardCriteria,
    export_trajectory_to_csv,
    export_valuations_to_csv,
    filter_board,
)
from pricetrack.config import get_policy, policy_from_env
from pricetrack.config_loader import MappingProfile
from pricetrack.engine import IneligiblePlayer
from pricetrack.ingest import load_registry_csv, load_stats_csv
from pricetrack.valuation import value_player, value_players


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Derive player prices from performance history")
    parser.add_argument("stats", type=Path, help="Path to player stats CSV")
    parser.add_argument("--registry", type=Path, required=True, help="Path to player registry CSV")
    parser.add_argument(
        "--stats-column",
        action="append",
        default=[],
        help="Mapping for stats CSV columns (e.g., score=fantasyPoints)",
    )
    parser.add_argument(
        "--registry-column",
        action="append",
        default=[],
        help="Mapping for registry CSV columns (e.g., player_name=First Name|Last Name)",
    )
    parser.add_argument("--load-profile", type=Path, help="Load column mapping JSON", default=None)
    parser.add_argument("--save-profile", type=Path, help="Save column mapping JSON", default=None)
    parser.add_argument("--policy", default="DEFAULT", help="Named pricing policy")
    parser.add_argument("--magic-number", type=float, default=None, help="Market value scale factor")
    parser.add_argument("--weight-old", type=float, default=None, help="Weight of the previous price")
    parser.add_argument("--weight-new", type=float, default=None, help="Weight of the market value")
    parser.add_argument("--min-games", type=int, default=None, help="Qualifying games required")
    parser.add_argument("--window", type=int, default=None, help="Rolling form window size")
    parser.add_argument("--jobs", type=int, default=None, help="Worker processes for batch valuation")
    parser.add_argument("--player", default=None, help="Value a single player by name")
    parser.add_argument("--team", default=None, help="Team of --player, or team filter for the board")
    parser.add_argument(
        "--trajectory",
        action="store_true",
        help="With --player, write the per-game trajectory instead of the summary",
    )
    parser.add_argument(
        "--sort-by",
        default="price_change",
        choices=["price_change", "new_price", "price", "rolling_average", "market_value", "games_played", "name", "team"],
        help="Board sort column",
    )
    parser.add_argument("--ascending", action="store_true", help="Sort ascending")
    parser.add_argument("--limit", type=int, default=None, help="Maximum rows to write")
    parser.add_argument("--output", type=Path, default=Path("valuations.csv"), help="Output CSV path")
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Optional path to write ingest and exclusion summary JSON",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log diagnostics")
    return parser.parse_args(argv)


def _parse_mapping(entries: list[str]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for entry in entries:
        if "=" not in entry:
            raise ValueError(f"Invalid mapping entry '{entry}', expected key=value")
        key, value = entry.split("=", 1)
        mapping[key.strip()] = value.strip()
    return mapping


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    stats_mapping = _parse_mapping(args.stats_column)
    registry_mapping = _parse_mapping(args.registry_column)
    overrides: dict[str, object] = {}

    if args.load_profile:
        profile = MappingProfile.load(args.load_profile)
        stats_mapping = profile.stats_mapping | stats_mapping
        registry_mapping = profile.registry_mapping | registry_mapping
        overrides = dict(profile.policy_overrides)

    overrides.update(
        {
            key: value
            for key, value in {
                "magic_number": args.magic_number,
                "smoothing_weight_old": args.weight_old,
                "smoothing_weight_new": args.weight_new,
                "min_qualifying_games": args.min_games,
                "window_size": args.window,
            }.items()
            if value is not None
        }
    )
    policy = policy_from_env(get_policy(args.policy)).with_overrides(**overrides)

    if args.save_profile:
        MappingProfile(stats_mapping, registry_mapping, overrides).save(args.save_profile)
        print(f"Saved mapping profile to {args.save_profile}")

    records, report = load_stats_csv(args.stats, mapping=stats_mapping or None)
    players = load_registry_csv(args.registry, mapping=registry_mapping or None, policy=policy)
    print(
        f"Loaded {report.accepted_rows}/{report.total_rows} stat rows "
        f"({report.partial_period_rows} partial-period, {report.malformed_rows} malformed)"
    )

    if args.player:
        matches = [
            player
            for player in players
            if player.key.matches_identity(args.player)
            and (args.team is None or player.key.matches_team(args.team))
        ]
        if not matches:
            print(f"Player {args.player!r} not found in registry")
            return 1
        try:
            valuation = value_player(matches[0], records, policy=policy)
        except IneligiblePlayer as exc:
            print(f"Player omitted: {exc.message}")
            return 2
        if args.trajectory:
            content = export_trajectory_to_csv(valuation.trajectory)
        else:
            content = export_valuations_to_csv([valuation])
        args.output.write_text(content, encoding="utf-8")
        print(
            f"{valuation.player.identity}: {valuation.price_before} -> {valuation.new_price} "
            f"({valuation.price_change:+d}, {valuation.value_rating})"
        )
        return 0

    batch = value_players(players, records, policy=policy, parallel_jobs=args.jobs)
    board = filter_board(
        batch.valuations,
        BoardCriteria(
            team=args.team,
            sort_by=args.sort_by,
            sort_direction="asc" if args.ascending else "desc",
            limit=args.limit,
        ),
    )
    args.output.write_text(
        export_valuations_to_csv([row.valuation for row in board.rows]),
        encoding="utf-8",
    )
    print(f"Valued {len(batch.valuations)} players, omitted {len(batch.exclusions)}")

    if args.report:
        report_payload = {
            "total_rows": report.total_rows,
            "accepted_rows": report.accepted_rows,
            "partial_period_rows": report.partial_period_rows,
            "malformed_rows": [issue.message for issue in report.malformed],
            "exclusions": [
                {"player": e.identity, "team": e.team, "reason": e.reason}
                for e in batch.exclusions
            ],
            "diagnostics": batch.diagnostics,
        }
        args.report.write_text(json.dumps(report_payload, indent=2), encoding="utf-8")
        print(f"Wrote report to {args.report}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
