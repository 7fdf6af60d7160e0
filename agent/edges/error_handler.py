"""
Error Handling Edges
Conditional routing logic for failed inputs and batch progression.
"""

import logging
from typing import Literal
from pathlib import Path

from ..state import ReconcileState, InputResult, reset_input_state

logger = logging.getLogger(__name__)


def route_after_scan(state: ReconcileState) -> Literal["load", "summary"]:
    """
    Route after scanning: process the first input, or go straight to the
    summary when nothing was found.
    """
    if state.get("current_file"):
        return "load"
    logger.error(f"No inputs to process: {state.get('last_error')}")
    return "summary"


def route_after_load(state: ReconcileState) -> Literal["parse", "skip"]:
    """
    Route after text loading based on success/failure.

    Decision logic:
    - If text was loaded (even empty): continue to parse
    - If loading raised: skip to the next input

    Args:
        state: Current workflow state

    Returns:
        Next node: "parse" or "skip"
    """
    if state.get("raw_text") is not None and not state.get("last_error"):
        logger.debug("Text loaded, routing to parse")
        return "parse"

    logger.error(f"Skipping input: {state.get('last_error')}")
    return "skip"


def route_after_report(state: ReconcileState) -> Literal["next_file", "summary"]:
    """
    Route after report generation to next input or batch summary.

    Args:
        state: Current workflow state

    Returns:
        Next node: "next_file" or "summary"
    """
    files_pending = state.get("files_pending", [])

    if len(files_pending) > 1:
        # Current input is still at the head of the list
        logger.info(f"{len(files_pending) - 1} inputs remaining")
        return "next_file"

    logger.info("All inputs processed, generating summary")
    return "summary"


def mark_input_failed(state: ReconcileState) -> dict:
    """
    Mark current input as failed and prepare for the next one.

    Args:
        state: Current workflow state

    Returns:
        State updates with input added to failed list
    """
    current_file = state.get("current_file") or ""
    last_error = state.get("last_error") or "Unknown error"
    files_pending = state.get("files_pending", [])

    failed_result = InputResult(
        filename=Path(current_file).name if current_file else "Unknown",
        filepath=current_file,
        success=False,
        items_count=0,
        matched_count=0,
        unmatched_count=0,
        report_paths={},
        errors=[last_error],
    )

    new_pending = [f for f in files_pending if f != current_file]

    logger.warning(f"Input marked as failed: {current_file}")

    updates = {
        "files_failed": state.get("files_failed", []) + [failed_result],
        "files_pending": new_pending,
        "current_file": new_pending[0] if new_pending else None,
    }
    updates.update(reset_input_state())
    return updates


def advance_to_next_input(state: ReconcileState) -> dict:
    """
    Move to the next input in the pending list.

    Totals and files_completed are already updated by generate_report_node.
    """
    current_file = state.get("current_file")
    new_pending = [f for f in state.get("files_pending", []) if f != current_file]

    logger.info(f"Input completed: {current_file}")

    updates = {
        "files_pending": new_pending,
        "current_file": new_pending[0] if new_pending else None,
    }
    updates.update(reset_input_state())
    return updates
