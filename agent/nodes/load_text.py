"""
Node 1: Text Loading
Reads the raw table text for the current input, running OCR on images.
"""

import logging
from pathlib import Path
from typing import Dict, Any

from partno.ocr_reader import OCRReader

from ..state import ReconcileState

logger = logging.getLogger(__name__)


def load_text_node(state: ReconcileState, reader: OCRReader) -> Dict[str, Any]:
    """
    Load raw OCR text for the current input.

    Args:
        state: Current workflow state
        reader: OCR reader (shared across inputs so the model loads once)

    Returns:
        State updates with raw_text or last_error
    """
    current_file = state.get("current_file")

    if not current_file:
        return {"raw_text": None, "last_error": "No current input"}

    logger.info(f"Loading text from {Path(current_file).name}")

    try:
        text = reader.read(current_file)
    except (OSError, ValueError, RuntimeError) as e:
        logger.error(f"Text loading failed for {current_file}: {e}")
        return {"raw_text": None, "last_error": f"Text loading failed: {e}"}

    if not text.strip():
        logger.warning(f"No text recognized in {current_file}")

    return {"raw_text": text, "last_error": None}
