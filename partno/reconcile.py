"""
Batch reconciliation of parsed items against the parts catalog.

Every input item lands in exactly one of two lists: matched or unmatched.
Sequence numbers are 1-based input positions and are shared by both lists.
"""

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Sequence

from .catalog import Catalog, CatalogColumns, DEFAULT_COLUMNS, part_number_of, row_value
from .catalog_matcher import DEFAULT_THRESHOLD, find_best_match, find_best_name_match
from .config import PartNoConfig
from .line_parser import ParsedItem, parse_ocr_text
from .similarity import Scorer, dice_coefficient

logger = logging.getLogger(__name__)

NO_PART_NUMBER = "(no part number)"
REASON_PARSE_ERROR = "parse error"
REASON_BELOW_THRESHOLD = "below similarity threshold"
PLACEHOLDER = "-"


def format_percent(score: float, places: int = 0) -> str:
    """Score (0-1) as a percentage string; halves round up, so 0.625 -> "63%"."""
    exponent = Decimal(1).scaleb(-places)
    return f"{Decimal(score * 100).quantize(exponent, rounding=ROUND_HALF_UP)}%"


@dataclass
class MatchedItem:
    """An item resolved to a catalog row."""
    seq: int
    pn: str
    name: str
    spec: str
    quantity: str
    score: float   # 0.0 to 1.0
    sheet: str = ""

    @property
    def match_rate(self) -> str:
        """Score as a rounded percentage string, e.g. "87%"."""
        return format_percent(self.score)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'seq': self.seq,
            'pn': self.pn,
            'name': self.name,
            'spec': self.spec,
            'quantity': self.quantity,
            'matchRate': self.match_rate,
            'sheet': self.sheet,
        }


@dataclass
class UnmatchedItem:
    """An item that failed to parse or scored below the threshold."""
    seq: int
    name: str
    spec: str
    quantity: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'seq': self.seq,
            'name': self.name,
            'spec': self.spec,
            'quantity': self.quantity,
            'reason': self.reason,
        }


@dataclass
class ReconcileResult:
    matched: List[MatchedItem] = field(default_factory=list)
    unmatched: List[UnmatchedItem] = field(default_factory=list)
    threshold: float = DEFAULT_THRESHOLD

    @property
    def total(self) -> int:
        return len(self.matched) + len(self.unmatched)

    @property
    def match_ratio(self) -> float:
        """Share of items matched, 0.0 for an empty batch."""
        return len(self.matched) / self.total if self.total else 0.0

    def summary(self) -> Dict[str, Any]:
        return {
            'total': self.total,
            'matched': len(self.matched),
            'unmatched': len(self.unmatched),
            'threshold': self.threshold,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'matchedItems': [m.to_dict() for m in self.matched],
            'unmatchedItems': [u.to_dict() for u in self.unmatched],
        }


def _parse_error_reason(item: ParsedItem) -> str:
    if item.reason:
        return f"{REASON_PARSE_ERROR} ({item.reason})"
    return REASON_PARSE_ERROR


def reconcile_items(
    items: Sequence[ParsedItem],
    catalog: Catalog,
    threshold: float = DEFAULT_THRESHOLD,
    scorer: Scorer = dice_coefficient,
    columns: Optional[CatalogColumns] = None,
    workers: int = 1
) -> ReconcileResult:
    """
    Classify parsed items into matched and unmatched records.

    Never raises for individual items: parse errors and low scores both
    become UnmatchedItem records with a reason.

    Args:
        items: Parser output, in source order
        catalog: Loaded catalog (may be empty)
        threshold: Minimum score to count as matched (0-1 scale)
        scorer: Similarity function
        columns: Catalog column names
        workers: Threads used to scan sheets; one pool serves the whole batch

    Returns:
        ReconcileResult covering every item exactly once
    """
    columns = columns or DEFAULT_COLUMNS
    executor = ThreadPoolExecutor(max_workers=workers) if workers > 1 and len(catalog) > 1 else None
    try:
        result = _classify_items(items, catalog, threshold, scorer, columns, executor)
    finally:
        if executor is not None:
            executor.shutdown()

    logger.info(
        f"Reconciled {result.total} items: {len(result.matched)} matched, "
        f"{len(result.unmatched)} unmatched (threshold {threshold:.2f})"
    )
    return result


def _classify_items(
    items: Sequence[ParsedItem],
    catalog: Catalog,
    threshold: float,
    scorer: Scorer,
    columns: CatalogColumns,
    executor: Optional[Executor]
) -> ReconcileResult:
    result = ReconcileResult(threshold=threshold)
    for seq, item in enumerate(items, start=1):
        if item.parse_error:
            result.unmatched.append(UnmatchedItem(
                seq=seq,
                name=item.raw_line,
                spec=PLACEHOLDER,
                quantity=PLACEHOLDER,
                reason=_parse_error_reason(item),
            ))
            continue

        best = find_best_match(item, catalog, threshold, scorer, columns, executor=executor)
        if best is None:
            result.unmatched.append(UnmatchedItem(
                seq=seq,
                name=item.name,
                spec=item.spec,
                quantity=item.quantity,
                reason=REASON_BELOW_THRESHOLD,
            ))
            continue

        result.matched.append(MatchedItem(
            seq=seq,
            pn=part_number_of(best.row, columns) or NO_PART_NUMBER,
            name=item.name,
            spec=item.spec,
            quantity=item.quantity,
            score=best.score,
            sheet=best.sheet_name,
        ))
    return result


def match_described_items(
    items: Any,
    catalog: Catalog,
    threshold: float = DEFAULT_THRESHOLD,
    scorer: Scorer = dice_coefficient,
    columns: Optional[CatalogColumns] = None
) -> List[Dict[str, Any]]:
    """
    Match pre-structured items by description against catalog names.

    Items look like {"description": "HEX BOLT", "qty": 5, "spec": "M10 x 30"}.
    Only matched items are returned; each carries the whole catalog row and
    the similarity as a two-decimal percentage string.

    Raises:
        ValueError: items is not a list
    """
    if not isinstance(items, list):
        raise ValueError("Invalid data: items must be a list")

    columns = columns or DEFAULT_COLUMNS
    matched = []
    for item in items:
        if not isinstance(item, dict):
            logger.warning(f"Skipping non-object item: {item!r}")
            continue
        description = str(item.get('description') or '')
        best = find_best_name_match(description, catalog, threshold, scorer, columns)
        if best is None:
            continue
        matched.append({
            'description': description,
            'qty': item.get('qty'),
            'spec': item.get('spec'),
            'excelItem': {key: row_value(best.row, key) for key in best.row},
            'similarity': format_percent(best.score, places=2),
        })

    logger.info(f"Matched {len(matched)}/{len(items)} described items")
    return matched


def reconcile_text(text: str, catalog: Catalog, config: Optional[PartNoConfig] = None) -> ReconcileResult:
    """
    Parse raw OCR text and reconcile it in one call.

    Args:
        text: Raw OCR output
        catalog: Loaded catalog
        config: PartNoConfig (defaults when None)
    """
    config = config or PartNoConfig()
    items = parse_ocr_text(
        text,
        substitutions=config.parsing.substitutions,
        header_keywords=config.parsing.header_keywords,
        noise_markers=config.parsing.noise_markers,
    )
    return reconcile_items(
        items,
        catalog,
        threshold=config.matching.threshold,
        scorer=config.matching.scorer_fn,
        columns=config.catalog.columns,
        workers=config.matching.workers,
    )
