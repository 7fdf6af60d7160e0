"""
Catalog Matcher - fuzzy lookup of parsed items in the parts catalog

Every item is scored against every row of every sheet. The best row wins
on strict ">" (the first row reaching a score keeps it), and the winner is
accepted only if it reaches the threshold.
"""

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .catalog import (
    Catalog, CatalogColumns, CatalogRow, DEFAULT_COLUMNS, row_comparison_text, row_value,
)
from .line_parser import ParsedItem
from .normalize import normalize_str
from .similarity import Scorer, dice_coefficient

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.40


@dataclass(frozen=True)
class CatalogMatch:
    """Best catalog row for an item."""
    sheet_name: str
    row: CatalogRow
    score: float  # 0.0 to 1.0

    def __repr__(self):
        return f"CatalogMatch(sheet={self.sheet_name!r}, score={self.score:.3f})"


def item_key(item: ParsedItem) -> str:
    """Normalized comparison key for a parsed item."""
    return normalize_str(item.comparison_text)


def row_key(row: CatalogRow, columns: CatalogColumns = DEFAULT_COLUMNS) -> str:
    """Normalized comparison key for a catalog row."""
    return normalize_str(row_comparison_text(row, columns))


def score_row(
    key: str,
    row: CatalogRow,
    scorer: Scorer = dice_coefficient,
    columns: CatalogColumns = DEFAULT_COLUMNS
) -> float:
    if not key:
        return 0.0
    return scorer(key, row_key(row, columns))


def _best_in_sheet(
    key: str,
    rows: Sequence[CatalogRow],
    scorer: Scorer,
    columns: CatalogColumns
) -> Tuple[Optional[CatalogRow], float]:
    best_row = None
    best_score = 0.0
    for row in rows:
        score = score_row(key, row, scorer, columns)
        if score > best_score:
            best_score = score
            best_row = row
    return best_row, best_score


def scan_catalog(
    key: str,
    catalog: Catalog,
    scorer: Scorer = dice_coefficient,
    columns: CatalogColumns = DEFAULT_COLUMNS,
    workers: int = 1,
    executor: Optional[Executor] = None
) -> Optional[CatalogMatch]:
    """
    Find the best-scoring row for a normalized key, ignoring the threshold.

    Sheets are scored on executor when one is given; otherwise, with
    workers > 1, a pool is created for this scan only. Per-sheet winners
    are merged in catalog order with the same strict ">" rule, so the
    result matches the sequential scan.
    """
    sheets = list(catalog.items())
    if executor is None and workers > 1 and len(sheets) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return scan_catalog(key, catalog, scorer, columns, executor=pool)

    if executor is not None and len(sheets) > 1:
        per_sheet = list(executor.map(
            lambda entry: _best_in_sheet(key, entry[1], scorer, columns),
            sheets
        ))
    else:
        per_sheet = [_best_in_sheet(key, rows, scorer, columns) for _, rows in sheets]

    best: Optional[CatalogMatch] = None
    for (sheet_name, _), (row, score) in zip(sheets, per_sheet):
        if row is None:
            continue
        if best is None or score > best.score:
            best = CatalogMatch(sheet_name=sheet_name, row=row, score=score)
    return best


def find_best_match(
    item: ParsedItem,
    catalog: Catalog,
    threshold: float = DEFAULT_THRESHOLD,
    scorer: Scorer = dice_coefficient,
    columns: Optional[CatalogColumns] = None,
    workers: int = 1,
    executor: Optional[Executor] = None
) -> Optional[CatalogMatch]:
    """
    Match one parsed item against the whole catalog.

    Args:
        item: A valid (non parse-error) ParsedItem
        catalog: Loaded catalog
        threshold: Minimum score to accept, on the 0-1 scale
        scorer: Similarity function over normalized keys
        columns: Catalog column names (defaults to DEFAULT_COLUMNS)
        workers: Threads used to score sheets when no executor is given
        executor: Shared pool for scoring sheets (see reconcile_items)

    Returns:
        CatalogMatch, or None when the best score is below threshold
    """
    columns = columns or DEFAULT_COLUMNS
    best = scan_catalog(item_key(item), catalog, scorer, columns, workers, executor)

    if best is None or best.score < threshold:
        logger.debug(
            f"No match for {item.name!r}: best score "
            f"{best.score if best else 0.0:.3f} < {threshold:.2f}"
        )
        return None
    return best


def find_best_name_match(
    description: str,
    catalog: Catalog,
    threshold: float = DEFAULT_THRESHOLD,
    scorer: Scorer = dice_coefficient,
    columns: Optional[CatalogColumns] = None
) -> Optional[CatalogMatch]:
    """
    Compare a free-text description against the name column only.

    Both sides are lower-cased rather than normalized, and rows with an
    empty name are skipped.
    """
    columns = columns or DEFAULT_COLUMNS
    needle = (description or '').lower()

    best: Optional[CatalogMatch] = None
    for sheet_name, rows in catalog.items():
        for row in rows:
            name = row_value(row, columns.name)
            if not name:
                continue
            score = scorer(needle, name.lower()) if needle else 0.0
            if score > (best.score if best else 0.0):
                best = CatalogMatch(sheet_name=sheet_name, row=row, score=score)

    if best is None or best.score < threshold:
        return None
    return best
