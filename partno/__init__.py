# Purchase-order part-number reconciliation
from .catalog import Catalog, CatalogColumns, load_catalog, load_catalog_or_empty
from .catalog_matcher import CatalogMatch, find_best_match, DEFAULT_THRESHOLD
from .config import PartNoConfig, load_config
from .line_parser import ParsedItem, parse_ocr_text
from .normalize import normalize_str
from .reconcile import (
    MatchedItem,
    UnmatchedItem,
    ReconcileResult,
    reconcile_items,
    reconcile_text,
    match_described_items,
)

__all__ = [
    "Catalog",
    "CatalogColumns",
    "load_catalog",
    "load_catalog_or_empty",
    "CatalogMatch",
    "find_best_match",
    "DEFAULT_THRESHOLD",
    "PartNoConfig",
    "load_config",
    "ParsedItem",
    "parse_ocr_text",
    "normalize_str",
    "MatchedItem",
    "UnmatchedItem",
    "ReconcileResult",
    "reconcile_items",
    "reconcile_text",
    "match_described_items",
]
