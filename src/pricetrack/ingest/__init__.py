"""Input adapters that normalize raw stat and registry data."""

from .stats import (
    DEFAULT_REGISTRY_MAPPING,
    DEFAULT_STATS_MAPPING,
    IngestReport,
    RegistryRow,
    StatRow,
    load_registry_csv,
    load_stats_csv,
    parse_scope,
    players_from_rows,
    records_from_rows,
    registry_rows_to_players,
    rows_to_records,
)

__all__ = [
    "DEFAULT_REGISTRY_MAPPING",
    "DEFAULT_STATS_MAPPING",
    "IngestReport",
    "RegistryRow",
    "StatRow",
    "load_registry_csv",
    "load_stats_csv",
    "parse_scope",
    "players_from_rows",
    "records_from_rows",
    "registry_rows_to_players",
    "rows_to_records",
]
