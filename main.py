#!/usr/bin/env python3
"""
PartNoDoctor - CLI Entry Point

Reads purchase-order table photos (or OCR text dumps), parses the item
lines and looks up each item's part number in a reference workbook.

Usage:
    # Single photo, print JSON
    python main.py ./orders/po_0412.png --catalog ./mydata.xlsx

    # Folder of photos, write reports
    python main.py ./orders/ ./output --catalog ./mydata.xlsx --format both

    # Pre-structured items ({description, qty, spec} JSON list)
    python main.py ./items.json --items-json --catalog ./mydata.xlsx

    # Show workflow visualization
    python main.py --show-graph
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from datetime import datetime

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from version import __version__, APP_NAME
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=f"{APP_NAME} - Look up part numbers for items in purchase-order photos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s ./orders/po_0412.png --catalog ./mydata.xlsx
  %(prog)s ./orders/ ./output --catalog ./mydata.xlsx --format both
  %(prog)s ./items.json --items-json --catalog ./mydata.xlsx --threshold 0.45
  %(prog)s --show-graph
        """
    )

    parser.add_argument(
        "input_path",
        nargs="?",
        help="Image, OCR text dump (.txt) or folder of them"
    )

    parser.add_argument(
        "output_path",
        nargs="?",
        help="Directory for reports (omit to print JSON to stdout)"
    )

    parser.add_argument(
        "--catalog", "-c",
        default=None,
        help="Reference workbook (.xlsx, .csv or .json); overrides config and PARTNO_CATALOG"
    )

    parser.add_argument(
        "--config",
        default=None,
        help="YAML config file (default: ./config/partno_config.yaml if present)"
    )

    parser.add_argument(
        "--threshold", "-t",
        type=float,
        default=None,
        help="Minimum similarity to count as matched, 0-1 (default: 0.40)"
    )

    parser.add_argument(
        "--scorer",
        choices=["dice", "sequence"],
        default=None,
        help="Similarity measure: dice (bigram, default) or sequence (difflib)"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Threads used to scan catalog sheets per item (default: 1)"
    )

    parser.add_argument(
        "--format", "-f",
        dest="output_format",
        choices=["json", "csv", "both"],
        default=None,
        help="Report format when an output directory is given (default: json)"
    )

    parser.add_argument(
        "--items-json",
        action="store_true",
        help="Treat input as a JSON list of {description, qty, spec} items"
    )

    parser.add_argument(
        "--show-graph",
        action="store_true",
        help="Show workflow graph visualization and exit"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose/debug logging"
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def apply_overrides(settings, args) -> None:
    """Command-line values win over config file and environment."""
    from partno.config import MatchingConfig

    if args.catalog:
        settings.catalog.path = args.catalog
    if args.output_format:
        settings.report.output_format = args.output_format

    matching = settings.matching
    settings.matching = MatchingConfig(
        threshold=args.threshold if args.threshold is not None else matching.threshold,
        scorer=args.scorer or matching.scorer,
        workers=args.workers if args.workers is not None else matching.workers,
    )


def run_items_json(input_path: Path, catalog, settings) -> int:
    from partno.reconcile import match_described_items

    try:
        with open(input_path, 'r', encoding='utf-8') as f:
            payload = json.load(f)
        items = payload.get("items") if isinstance(payload, dict) else payload
        matched = match_described_items(
            items,
            catalog,
            threshold=settings.matching.threshold,
            scorer=settings.matching.scorer_fn,
            columns=settings.catalog.columns,
        )
    except (OSError, ValueError) as e:
        logger.error(f"Could not match items from {input_path}: {e}")
        return 1

    print(json.dumps({"matchedResults": matched}, ensure_ascii=False, indent=2))
    return 0


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.show_graph:
        from agent import get_workflow_visualization
        print(get_workflow_visualization())
        return 0

    if not args.input_path:
        parser.error("input_path is required (unless using --show-graph)")

    if args.threshold is not None and not 0.0 <= args.threshold <= 1.0:
        parser.error(f"threshold must be between 0 and 1, got {args.threshold}")
    if args.workers is not None and args.workers < 1:
        parser.error(f"workers must be at least 1, got {args.workers}")

    input_path = Path(args.input_path).resolve()
    if not input_path.exists():
        logger.error(f"Input path does not exist: {input_path}")
        return 1

    from partno.catalog import load_catalog_or_empty
    from partno.config import load_config

    try:
        settings = load_config(args.config)
        apply_overrides(settings, args)
    except (FileNotFoundError, ValueError, TypeError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    # Loaded once; every input in the run shares this catalog
    catalog = load_catalog_or_empty(settings.catalog.path)

    if args.items_json:
        return run_items_json(input_path, catalog, settings)

    output_path = Path(args.output_path).resolve() if args.output_path else None
    if output_path:
        output_path.mkdir(parents=True, exist_ok=True)

    try:
        from agent import run_reconcile_workflow

        start_time = datetime.now()

        final_state = run_reconcile_workflow(
            input_path=str(input_path),
            catalog=catalog,
            output_path=str(output_path) if output_path else None,
            settings=settings,
        )

        duration = (datetime.now() - start_time).total_seconds()

    except ImportError as e:
        logger.error(f"Missing dependency: {e}")
        logger.error("Run: pip install -e .")
        return 1
    except Exception as e:
        logger.exception(f"Workflow failed: {e}")
        return 1

    files_completed = final_state.get("files_completed", [])
    files_failed = final_state.get("files_failed", [])

    if output_path is None:
        results = final_state.get("results", [])
        payload = results[0] if len(results) == 1 else results
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print("\n" + "=" * 60)
        print("  PROCESSING COMPLETE")
        print("=" * 60)
        print(f"  Inputs Processed: {len(files_completed) + len(files_failed)}")
        print(f"  Successful:       {len(files_completed)}")
        print(f"  Failed:           {len(files_failed)}")
        print(f"  Items:            {final_state.get('total_items', 0)}")
        print(f"  Matched:          {final_state.get('total_matched', 0)}")
        print(f"  Unmatched:        {final_state.get('total_unmatched', 0)}")
        print(f"  Duration:         {duration:.1f} seconds")
        print("=" * 60)
        print(f"\n  Reports saved to: {output_path}\n")

    if files_failed:
        for f in files_failed:
            logger.warning(f"Failed: {f.get('filename', 'Unknown')}: {f.get('errors', ['Unknown error'])[0]}")

    if not files_completed and not files_failed and final_state.get("last_error"):
        logger.error(final_state["last_error"])
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
