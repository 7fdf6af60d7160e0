# Part-number reconciliation agent
from .graph import (
    create_reconcile_graph,
    run_reconcile_workflow,
    stream_reconcile_workflow,
    get_workflow_visualization,
)
from .state import ReconcileState, create_initial_state

__all__ = [
    "create_reconcile_graph",
    "run_reconcile_workflow",
    "stream_reconcile_workflow",
    "get_workflow_visualization",
    "ReconcileState",
    "create_initial_state",
]
