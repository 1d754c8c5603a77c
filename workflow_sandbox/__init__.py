"""Workflow Sandbox: validate workflow graphs and simulate their execution."""

from .models import (
    NodeKind,
    WorkflowNode,
    WorkflowEdge,
    WorkflowGraph,
    ValidationResult,
    ExecutionStep,
    ExecutionTrace,
)
from .core import validate_workflow, simulate_workflow, export_workflow, import_workflow

__version__ = "1.0.0"

__all__ = [
    "NodeKind",
    "WorkflowNode",
    "WorkflowEdge",
    "WorkflowGraph",
    "ValidationResult",
    "ExecutionStep",
    "ExecutionTrace",
    "validate_workflow",
    "simulate_workflow",
    "export_workflow",
    "import_workflow",
]
