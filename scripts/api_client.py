"""Lightweight REST client for the pricetrack API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx


def build_mapping(name: str) -> dict[str, str]:
    if not name:
        return {}
    try:
        return json.loads(name)
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid mapping JSON: {exc}") from exc


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the pricetrack REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("stats", type=Path, help="Player stats CSV")
    parser.add_argument("registry", type=Path, help="Player registry CSV")
    parser.add_argument("--stats-mapping", default="", help="JSON mapping for stats columns")
    parser.add_argument("--registry-mapping", default="", help="JSON mapping for registry columns")
    parser.add_argument("--team", default=None, help="Only show players from this team")
    parser.add_argument("--limit", type=int, default=None, help="Maximum players to return")
    parser.add_argument("--export-path", type=Path, help="Download the valuation board as CSV")
    args = parser.parse_args()

    def make_files() -> dict[str, tuple[str, bytes, str]]:
        return {
            "stats": (args.stats.name, args.stats.read_bytes(), "text/csv"),
            "registry": (args.registry.name, args.registry.read_bytes(), "text/csv"),
        }

    valuation_request = {"team": args.team, "limit": args.limit}
    data = {
        "stats_mapping": json.dumps(build_mapping(args.stats_mapping)) if args.stats_mapping else None,
        "registry_mapping": json.dumps(build_mapping(args.registry_mapping)) if args.registry_mapping else None,
        "valuation_request": json.dumps(valuation_request),
    }

    with httpx.Client(base_url=args.base_url) as client:
        if args.export_path:
            resp = client.post("/valuations/export.csv", files=make_files(), data=data)
            resp.raise_for_status()
            args.export_path.write_text(resp.text)
            print(f"CSV export saved to {args.export_path}")
            return

        resp = client.post("/valuations", files=make_files(), data=data)
        resp.raise_for_status()
        payload = resp.json()
        print("Ingest report:", json.dumps(payload["report"], indent=2))
        print(f"Received {len(payload['valuations'])} valuations, {len(payload['exclusions'])} omitted")
        if payload["valuations"]:
            print(json.dumps(payload["valuations"][0], indent=2))


if __name__ == "__main__":
    main()
