"""Valuation board utilities (filtering, export, etc.)."""

from .filtering import BoardCriteria, BoardResult, BoardRow, BoardSummary, filter_board
from .export import export_trajectory_to_csv, export_valuations_to_csv

__all__ = [
    "BoardCriteria",
    "BoardResult",
    "BoardRow",
    "BoardSummary",
    "filter_board",
    "export_trajectory_to_csv",
    "export_valuations_to_csv",
]
