"""Price trajectory recompute engine."""

from .errors import AmbiguousOrdering, IneligiblePlayer, MalformedRecord, ValuationError
from .filtering import filter_records, is_eligible
from .pricing import market_value, next_price, round_currency
from .rolling import rolling_average, window_bounds
from .sequencing import parse_round, sequence_records
from .trajectory import (
    apply_latest,
    assemble,
    build_state,
    current_price,
    ensure_eligible,
    fold_record,
    initial_state,
)

__all__ = [
    "AmbiguousOrdering",
    "IneligiblePlayer",
    "MalformedRecord",
    "ValuationError",
    "apply_latest",
    "assemble",
    "build_state",
    "current_price",
    "ensure_eligible",
    "filter_records",
    "fold_record",
    "initial_state",
    "is_eligible",
    "market_value",
    "next_price",
    "parse_round",
    "rolling_average",
    "round_currency",
    "sequence_records",
    "window_bounds",
]
