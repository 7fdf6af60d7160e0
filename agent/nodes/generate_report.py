"""
Node 4: Report Generation
Writes the per-input report and rolls the counts into batch totals.
"""

import logging
from pathlib import Path
from typing import Dict, Any

from partno.reconcile import ReconcileResult
from partno.report import build_report, write_reports

from ..state import ReconcileState, InputResult

logger = logging.getLogger(__name__)


def generate_report_node(state: ReconcileState) -> Dict[str, Any]:
    """
    Generate JSON/CSV reports for the current input.

    Args:
        state: Current workflow state

    Returns:
        State updates with report_paths and either files_completed plus
        totals, or files_failed when writing the reports failed
    """
    current_file = state.get("current_file") or ""
    output_path = state.get("output_path")
    result = state.get("result") or ReconcileResult()

    report_paths: Dict[str, str] = {}
    errors = []
    if output_path:
        try:
            report_paths = write_reports(
                result,
                output_path,
                stem=Path(current_file).stem or "result",
                output_format=state.get("output_format", "json"),
                source=current_file,
            )
        except (OSError, ValueError) as e:
            logger.error(f"Report generation failed: {e}")
            errors.append(f"Report generation failed: {e}")

    file_result = InputResult(
        filename=Path(current_file).name,
        filepath=current_file,
        success=not errors,
        items_count=result.total,
        matched_count=len(result.matched),
        unmatched_count=len(result.unmatched),
        report_paths=report_paths,
        errors=errors,
    )

    if errors:
        # An input whose reports could not be written counts as failed
        return {
            "report_paths": report_paths,
            "files_failed": state.get("files_failed", []) + [file_result],
            "last_error": errors[0],
        }

    return {
        "report_paths": report_paths,
        "files_completed": state.get("files_completed", []) + [file_result],
        "results": state.get("results", []) + [build_report(result, source=current_file)],
        "total_items": state.get("total_items", 0) + result.total,
        "total_matched": state.get("total_matched", 0) + len(result.matched),
        "total_unmatched": state.get("total_unmatched", 0) + len(result.unmatched),
    }
