"""
Batch scanning and summary nodes.
Finds the inputs to process and aggregates results once all are done.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Any

from partno.ocr_reader import is_supported_input

from ..state import ReconcileState

logger = logging.getLogger(__name__)


def scan_inputs_node(state: ReconcileState) -> Dict[str, Any]:
    """
    Scan input path and identify all inputs to process.

    This is the START node that initializes the file list. A single file
    is taken as-is; a folder contributes every image and .txt file in it,
    sorted by name.

    Args:
        state: Current workflow state

    Returns:
        State updates with files_pending, current_file
    """
    input_path = state.get("input_path", "")

    if not input_path:
        return {
            "last_error": "No input path specified",
            "files_pending": []
        }

    path = Path(input_path)

    if path.is_file():
        if not is_supported_input(path):
            return {
                "last_error": f"Unsupported input file: {path}",
                "files_pending": []
            }
        logger.info(f"Single file mode: {path.name}")
        return {
            "files_pending": [str(path)],
            "current_file": str(path),
            "last_error": None
        }

    if path.is_dir():
        inputs = sorted(
            (p for p in path.iterdir() if p.is_file() and is_supported_input(p)),
            key=lambda p: p.name.lower()
        )
        if not inputs:
            return {
                "last_error": f"No images or text files found in: {path}",
                "files_pending": []
            }

        file_paths = [str(p) for p in inputs]
        logger.info(f"Found {len(file_paths)} inputs in {path}")
        return {
            "files_pending": file_paths,
            "current_file": file_paths[0],
            "last_error": None
        }

    return {
        "last_error": f"Path does not exist: {input_path}",
        "files_pending": []
    }


def batch_summary_node(state: ReconcileState) -> Dict[str, Any]:
    """
    Generate master summary for the batch.

    Writes batch_summary.json when an output directory is configured.

    Args:
        state: Current workflow state

    Returns:
        State updates with master_summary, end_time
    """
    output_path = state.get("output_path")
    files_completed = state.get("files_completed", [])
    files_failed = state.get("files_failed", [])
    start_time = state.get("start_time")

    logger.info(f"Generating batch summary: {len(files_completed)} successful, {len(files_failed)} failed")

    end_time = datetime.now()
    start_dt = datetime.fromisoformat(start_time) if start_time else end_time
    processing_time = (end_time - start_dt).total_seconds()

    summary_data = {
        "run_datetime": start_time or end_time.isoformat(),
        "input_path": state.get("input_path", ""),
        "output_path": output_path or "",
        "statistics": {
            "total_files": len(files_completed) + len(files_failed),
            "successful_files": len(files_completed),
            "failed_files": len(files_failed),
            "total_items": state.get("total_items", 0),
            "total_matched": state.get("total_matched", 0),
            "total_unmatched": state.get("total_unmatched", 0),
            "processing_time_seconds": round(processing_time, 2)
        },
        "files_completed": files_completed,
        "files_failed": files_failed
    }

    if not output_path:
        return {
            "master_summary": summary_data,
            "end_time": end_time.isoformat(),
        }

    try:
        output_dir = Path(output_path)
        output_dir.mkdir(parents=True, exist_ok=True)
        json_path = output_dir / "batch_summary.json"
        with open(json_path, 'w', encoding='utf-8') as f:
            json.dump(summary_data, f, ensure_ascii=False, indent=2)

        logger.info(f"Batch summary saved: {json_path}")

        return {
            "master_summary": summary_data,
            "end_time": end_time.isoformat(),
        }

    except OSError as e:
        logger.error(f"Batch summary failed: {e}")
        return {
            "master_summary": summary_data,
            "end_time": end_time.isoformat(),
            "last_error": f"Batch summary generation failed: {str(e)}"
        }
