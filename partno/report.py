"""
Report writers for reconciliation results (JSON and CSV).
"""

import csv
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .reconcile import ReconcileResult

logger = logging.getLogger(__name__)

CSV_FIELDNAMES = [
    'Seq',
    'Part No',
    'Name',
    'Spec',
    'Quantity',
    'Match Rate',
    'Sheet',
    'Reason',
    'Matched',
]


def build_report(result: ReconcileResult, source: Optional[str] = None) -> Dict[str, Any]:
    """Response-shaped dict plus a summary block."""
    report = result.to_dict()
    report['summary'] = dict(
        result.summary(),
        source=source or '',
        generated_at=datetime.now().isoformat(timespec='seconds'),
    )
    return report


def write_json_report(result: ReconcileResult, path: Union[str, Path],
                      source: Optional[str] = None) -> str:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(build_report(result, source), f, ensure_ascii=False, indent=2)
    logger.info(f"JSON report saved: {path}")
    return str(path)


def _csv_rows(result: ReconcileResult) -> List[Dict[str, Any]]:
    rows = []
    for item in result.matched:
        rows.append({
            'Seq': item.seq,
            'Part No': item.pn,
            'Name': item.name,
            'Spec': item.spec,
            'Quantity': item.quantity,
            'Match Rate': item.match_rate,
            'Sheet': item.sheet,
            'Reason': '',
            'Matched': 'Yes',
        })
    for item in result.unmatched:
        rows.append({
            'Seq': item.seq,
            'Part No': '',
            'Name': item.name,
            'Spec': item.spec,
            'Quantity': item.quantity,
            'Match Rate': '',
            'Sheet': '',
            'Reason': item.reason,
            'Matched': 'No',
        })
    rows.sort(key=lambda r: r['Seq'])
    return rows


def write_csv_report(result: ReconcileResult, path: Union[str, Path]) -> str:
    """One row per input item, ordered by sequence number."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    # utf-8-sig so Excel opens Korean names correctly
    with open(path, 'w', newline='', encoding='utf-8-sig') as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDNAMES)
        writer.writeheader()
        writer.writerows(_csv_rows(result))
    logger.info(f"CSV report saved: {path}")
    return str(path)


def write_reports(result: ReconcileResult, output_dir: Union[str, Path], stem: str,
                  output_format: str = 'json', source: Optional[str] = None) -> Dict[str, str]:
    """
    Write the requested report formats.

    Returns:
        Mapping of format -> written path
    """
    if output_format not in ('json', 'csv', 'both'):
        raise ValueError(f"Unknown output format: {output_format}")

    output_dir = Path(output_dir)
    written = {}
    if output_format in ('json', 'both'):
        written['json'] = write_json_report(result, output_dir / f"{stem}_partno.json", source)
    if output_format in ('csv', 'both'):
        written['csv'] = write_csv_report(result, output_dir / f"{stem}_partno.csv")
    return written
