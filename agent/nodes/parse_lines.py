"""
Node 2: Line Parsing
Turns the raw table text into item records.
"""

import logging
from typing import Dict, Any

from partno.config import ParsingConfig
from partno.line_parser import parse_ocr_text

from ..state import ReconcileState

logger = logging.getLogger(__name__)


def parse_lines_node(state: ReconcileState, parsing: ParsingConfig) -> Dict[str, Any]:
    """
    Parse item lines from the loaded text.

    Malformed lines come back as parse-error items rather than failures,
    so this node never sets last_error.

    Args:
        state: Current workflow state
        parsing: Substitution table and noise-line settings

    Returns:
        State updates with parsed_items
    """
    raw_text = state.get("raw_text") or ""

    items = parse_ocr_text(
        raw_text,
        substitutions=parsing.substitutions,
        header_keywords=parsing.header_keywords,
        noise_markers=parsing.noise_markers,
    )

    errors = sum(1 for item in items if item.parse_error)
    logger.info(f"Parsed {len(items)} items ({errors} parse errors)")

    return {"parsed_items": items}
