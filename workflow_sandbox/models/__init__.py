"""Data models for the workflow sandbox."""

from .core import (
    NodeKind,
    StepStatus,
    EntryAttributes,
    TaskAttributes,
    ApprovalAttributes,
    AutomatedAttributes,
    CompletionAttributes,
    NodeAttributes,
    ATTRIBUTE_MODELS,
    Position,
    WorkflowNode,
    WorkflowEdge,
    WorkflowGraph,
    GraphIndex,
    ValidationResult,
    ExecutionStep,
    ExecutionTrace,
    SandboxResult,
    AutomationAction,
)

__all__ = [
    "NodeKind",
    "StepStatus",
    "EntryAttributes",
    "TaskAttributes",
    "ApprovalAttributes",
    "AutomatedAttributes",
    "CompletionAttributes",
    "NodeAttributes",
    "ATTRIBUTE_MODELS",
    "Position",
    "WorkflowNode",
    "WorkflowEdge",
    "WorkflowGraph",
    "GraphIndex",
    "ValidationResult",
    "ExecutionStep",
    "ExecutionTrace",
    "SandboxResult",
    "AutomationAction",
]
