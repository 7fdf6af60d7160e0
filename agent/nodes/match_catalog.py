"""
Node 3: Catalog Matching
Reconciles parsed items against the parts catalog.
"""

import logging
from typing import Dict, Any

from partno.catalog import Catalog
from partno.config import PartNoConfig
from partno.reconcile import reconcile_items

from ..state import ReconcileState

logger = logging.getLogger(__name__)


def match_catalog_node(state: ReconcileState, catalog: Catalog, settings: PartNoConfig) -> Dict[str, Any]:
    """
    Match parsed items to catalog rows.

    Args:
        state: Current workflow state
        catalog: Catalog loaded before the run (read-only)
        settings: Matching threshold, scorer, workers and column names

    Returns:
        State updates with result
    """
    items = state.get("parsed_items") or []

    if catalog.is_empty():
        logger.warning("Catalog is empty, every item will be unmatched")

    result = reconcile_items(
        items,
        catalog,
        threshold=settings.matching.threshold,
        scorer=settings.matching.scorer_fn,
        columns=settings.catalog.columns,
        workers=settings.matching.workers,
    )

    return {"result": result}
