"""History and alias loaders for the station dashboard."""

from .history import load_history, save_history, parse_history
from .history import load_aliases, save_aliases
from .history import upsert_record, delete_record, prune_before

__all__ = [
    "load_history",
    "save_history",
    "parse_history",
    "load_aliases",
    "save_aliases",
    "upsert_record",
    "delete_record",
    "prune_before",
]
