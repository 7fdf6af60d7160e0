# Workflow nodes
from .batch_summary import batch_summary_node, scan_inputs_node
from .load_text import load_text_node
from .parse_lines import parse_lines_node
from .match_catalog import match_catalog_node
from .generate_report import generate_report_node

__all__ = [
    "batch_summary_node",
    "scan_inputs_node",
    "load_text_node",
    "parse_lines_node",
    "match_catalog_node",
    "generate_report_node",
]
