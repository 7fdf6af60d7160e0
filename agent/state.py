"""
Workflow State Schema for the part-number reconciliation agent
Defines the state that flows through the LangGraph workflow.
"""

from typing import TypedDict, List, Optional, Dict, Any
from datetime import datetime

from partno.line_parser import ParsedItem
from partno.reconcile import ReconcileResult


class InputResult(TypedDict):
    """Result from processing a single input (image or OCR text dump)."""
    filename: str
    filepath: str
    success: bool
    items_count: int
    matched_count: int
    unmatched_count: int
    report_paths: Dict[str, str]
    errors: List[str]


class ReconcileState(TypedDict):
    """
    State schema for the reconciliation workflow.

    The catalog is not part of the state: it is loaded once and bound into
    the match node when the graph is built.
    """

    # ========================
    # Input Configuration
    # ========================
    input_path: str                    # Image, .txt OCR dump, or folder
    output_path: Optional[str]         # Report directory (None = no files written)
    output_format: str                 # json, csv or both

    # ========================
    # Progress Tracking
    # ========================
    current_file: Optional[str]        # Input being processed
    files_pending: List[str]           # Inputs not yet processed (current first)
    files_completed: List[InputResult]
    files_failed: List[InputResult]
    results: List[Dict[str, Any]]     # Response-shaped result per completed input

    # ========================
    # Per-Input Intermediate Data
    # ========================
    raw_text: Optional[str]                   # From load_text node
    parsed_items: Optional[List[ParsedItem]]  # From parse_lines node
    result: Optional[ReconcileResult]         # From match_catalog node
    report_paths: Optional[Dict[str, str]]    # From generate_report node

    # ========================
    # Error Handling
    # ========================
    last_error: Optional[str]

    # ========================
    # Batch Summary
    # ========================
    total_items: int
    total_matched: int
    total_unmatched: int
    master_summary: Optional[Dict[str, Any]]

    # ========================
    # Timing
    # ========================
    start_time: Optional[str]
    end_time: Optional[str]


def create_initial_state(
    input_path: str,
    output_path: Optional[str] = None,
    output_format: str = "json"
) -> ReconcileState:
    """
    Create initial state for a new workflow run.

    Args:
        input_path: Image, OCR text dump, or folder of them
        output_path: Directory for reports (None to skip writing files)
        output_format: json, csv or both

    Returns:
        Initialized ReconcileState
    """
    return ReconcileState(
        # Input
        input_path=input_path,
        output_path=output_path,
        output_format=output_format,

        # Progress
        current_file=None,
        files_pending=[],
        files_completed=[],
        files_failed=[],
        results=[],

        # Per-input data
        raw_text=None,
        parsed_items=None,
        result=None,
        report_paths=None,

        # Error handling
        last_error=None,

        # Batch summary
        total_items=0,
        total_matched=0,
        total_unmatched=0,
        master_summary=None,

        # Timing
        start_time=datetime.now().isoformat(),
        end_time=None,
    )


def reset_input_state() -> Dict[str, Any]:
    """Per-input fields cleared before moving to the next input."""
    return {
        "raw_text": None,
        "parsed_items": None,
        "result": None,
        "report_paths": None,
        "last_error": None,
    }
