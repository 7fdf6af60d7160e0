"""
LangGraph Workflow Definition
Wires together nodes and edges for the part-number reconciliation agent.
"""

import logging
from functools import partial
from typing import Dict, Any, Optional, Iterator, Tuple

from langgraph.graph import StateGraph, END
from langgraph.checkpoint.memory import MemorySaver

from partno.catalog import Catalog
from partno.config import PartNoConfig
from partno.ocr_reader import OCRReader

from .state import ReconcileState, create_initial_state
from .nodes import (
    scan_inputs_node,
    load_text_node,
    parse_lines_node,
    match_catalog_node,
    generate_report_node,
    batch_summary_node,
)
from .edges import (
    route_after_scan,
    route_after_load,
    route_after_report,
    mark_input_failed,
    advance_to_next_input,
)

logger = logging.getLogger(__name__)

# Each input passes through ~5 nodes
RECURSION_LIMIT = 500


def create_reconcile_graph(
    catalog: Catalog,
    settings: Optional[PartNoConfig] = None,
    reader: Optional[OCRReader] = None,
    checkpointer: Optional[MemorySaver] = None
):
    """
    Create the LangGraph workflow for part-number reconciliation.

    Graph structure:
    ```
    START (scan_inputs)
        │
        ▼
    load_text ◄───────────┐
        │                 │
    [route_after_load]    │
        │ parse   │ skip  │
        ▼         ▼       │
    parse_lines  mark_failed ─┤
        │                 │
        ▼                 │
    match_catalog         │
        │                 │
        ▼                 │
    generate_report       │
        │                 │
    [route_after_report]  │
        │ next_file       │
        ▼                 │
    advance_input ────────┘
        │ summary
        ▼
    batch_summary
        │
        ▼
       END
    ```

    Args:
        catalog: Catalog loaded once before the run; bound by reference
        settings: Parsing and matching configuration
        reader: OCR reader shared by every input
        checkpointer: Optional checkpointer for state persistence

    Returns:
        Compiled StateGraph
    """
    settings = settings or PartNoConfig()
    reader = reader or OCRReader()

    workflow = StateGraph(ReconcileState)

    # ========================
    # Add Nodes
    # ========================
    workflow.add_node("scan_inputs", scan_inputs_node)
    workflow.add_node("load_text", partial(load_text_node, reader=reader))
    workflow.add_node("parse_lines", partial(parse_lines_node, parsing=settings.parsing))
    workflow.add_node("match_catalog", partial(match_catalog_node, catalog=catalog, settings=settings))
    workflow.add_node("generate_report", generate_report_node)
    workflow.add_node("mark_failed", mark_input_failed)
    workflow.add_node("advance_input", advance_to_next_input)
    workflow.add_node("batch_summary", batch_summary_node)

    # ========================
    # Add Edges
    # ========================
    workflow.set_entry_point("scan_inputs")

    workflow.add_conditional_edges(
        "scan_inputs",
        route_after_scan,
        {
            "load": "load_text",
            "summary": "batch_summary"
        }
    )

    workflow.add_conditional_edges(
        "load_text",
        route_after_load,
        {
            "parse": "parse_lines",
            "skip": "mark_failed"
        }
    )

    # After marking failed, check if more inputs
    workflow.add_conditional_edges(
        "mark_failed",
        lambda state: "next_file" if state.get("current_file") else "summary",
        {
            "next_file": "load_text",
            "summary": "batch_summary"
        }
    )

    workflow.add_edge("parse_lines", "match_catalog")
    workflow.add_edge("match_catalog", "generate_report")

    workflow.add_conditional_edges(
        "generate_report",
        route_after_report,
        {
            "next_file": "advance_input",
            "summary": "batch_summary"
        }
    )

    workflow.add_edge("advance_input", "load_text")
    workflow.add_edge("batch_summary", END)

    if checkpointer:
        return workflow.compile(checkpointer=checkpointer)
    return workflow.compile()


def _run_config(enable_checkpoints: bool, thread_id: str) -> Dict[str, Any]:
    if enable_checkpoints:
        return {
            "configurable": {"thread_id": thread_id},
            "recursion_limit": RECURSION_LIMIT
        }
    return {"recursion_limit": RECURSION_LIMIT}


def run_reconcile_workflow(
    input_path: str,
    catalog: Catalog,
    output_path: Optional[str] = None,
    settings: Optional[PartNoConfig] = None,
    reader: Optional[OCRReader] = None,
    enable_checkpoints: bool = False
) -> Dict[str, Any]:
    """
    Run the complete reconciliation workflow.

    Args:
        input_path: Image, OCR text dump, or folder of them
        catalog: Loaded catalog (may be empty)
        output_path: Directory for reports (None to keep results in memory only)
        settings: Configuration (defaults when None)
        reader: OCR reader (a default PaddleOCR reader when None)
        enable_checkpoints: Keep per-node state in a MemorySaver

    Returns:
        Final workflow state with results
    """
    settings = settings or PartNoConfig()
    checkpointer = MemorySaver() if enable_checkpoints else None
    graph = create_reconcile_graph(catalog, settings, reader, checkpointer)

    initial_state = create_initial_state(
        input_path=input_path,
        output_path=output_path,
        output_format=settings.report.output_format
    )

    logger.info(f"Starting reconciliation workflow: {input_path} -> {output_path or '(memory)'}")

    try:
        final_state = graph.invoke(initial_state, _run_config(enable_checkpoints, "partno-1"))
        logger.info("Workflow completed successfully")
        return final_state
    except Exception as e:
        logger.error(f"Workflow failed: {e}")
        raise


def stream_reconcile_workflow(
    input_path: str,
    catalog: Catalog,
    output_path: Optional[str] = None,
    settings: Optional[PartNoConfig] = None,
    reader: Optional[OCRReader] = None
) -> Iterator[Tuple[str, Dict[str, Any]]]:
    """
    Stream the workflow, yielding (node_name, state_update) after each node.
    """
    settings = settings or PartNoConfig()
    graph = create_reconcile_graph(catalog, settings, reader)

    initial_state = create_initial_state(
        input_path=input_path,
        output_path=output_path,
        output_format=settings.report.output_format
    )

    for update in graph.stream(initial_state, _run_config(False, "partno-stream-1"), stream_mode="updates"):
        if update:
            node_name = list(update.keys())[0]
            yield (node_name, update[node_name])


def get_workflow_visualization() -> str:
    """
    Get ASCII visualization of the workflow graph.
    """
    return """
    Part-Number Reconciliation Workflow
    ===================================

              ┌──────────────┐
              │ scan_inputs  │
              │   (START)    │
              └──────┬───────┘
                     │
              ┌──────▼───────┐
              │  load_text   │◄──────────────┐
              │ (OCR / .txt) │               │
              └──────┬───────┘               │
                     │                       │
            ┌────────┴────────┐              │
         success            skip             │
            │                 │              │
            ▼                 ▼              │
      ┌───────────┐     ┌───────────┐        │
      │  parse    │     │   mark    │────────┤
      │  lines    │     │  failed   │        │
      └─────┬─────┘     └───────────┘        │
            ▼                                │
      ┌───────────┐                          │
      │  match    │  (threshold, best row)   │
      │  catalog  │                          │
      └─────┬─────┘                          │
            ▼                                │
      ┌───────────┐                          │
      │ generate  │                          │
      │  report   │                          │
      └─────┬─────┘                          │
            │                                │
      ┌─────┴──────┐                         │
  next_file     summary                      │
      │            │                         │
      ▼            │                         │
 ┌──────────┐      │                         │
 │ advance  │──────┼─────────────────────────┘
 │  input   │      │
 └──────────┘      ▼
            ┌──────────────┐
            │    batch     │
            │   summary    │
            └──────┬───────┘
                   ▼
                ┌─────┐
                │ END │
                └─────┘
    """
