"""Pytest configuration and fixtures."""

from datetime import datetime, timezone
from typing import List, Optional, Tuple

import pytest

from workflow_sandbox.config import get_testing_config, reset_config
from workflow_sandbox.models.core import NodeKind, WorkflowEdge, WorkflowGraph, WorkflowNode


FIXED_TIME = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)


def make_node(node_id: str, kind: NodeKind, label: Optional[str] = None, **attributes) -> WorkflowNode:
    """Build a node, using the ID as label when none is given."""
    return WorkflowNode(id=node_id, kind=kind, label=label or node_id, attributes=attributes)


def make_graph(nodes: List[WorkflowNode], edges: List[Tuple[str, str]]) -> WorkflowGraph:
    """Build a graph from nodes and (source, target) pairs."""
    return WorkflowGraph(
        nodes=nodes,
        edges=[WorkflowEdge(id=f"e{index}", source=source, target=target)
               for index, (source, target) in enumerate(edges, start=1)]
    )


@pytest.fixture
def fixed_clock():
    """Clock that always returns the same instant."""
    return lambda: FIXED_TIME


@pytest.fixture
def onboarding_graph() -> WorkflowGraph:
    """A valid onboarding workflow touching every node kind."""
    nodes = [
        make_node("start", NodeKind.ENTRY, "Start Onboarding", metadata={"department": "Engineering"}),
        make_node("collect", NodeKind.TASK, "Collect Documents", assignee="Alice", due_date="2024-02-01"),
        make_node("approve", NodeKind.APPROVAL, "Manager Approval", approver_role="Manager",
                  auto_approve_threshold=3),
        make_node("account", NodeKind.AUTOMATED, "Create Account", action_id="create_user_account",
                  action_params={"username": "alice", "department": "Engineering"}),
        make_node("done", NodeKind.COMPLETION, "Onboarding Complete", end_message="Welcome aboard",
                  is_summary=True),
    ]
    edges = [("start", "collect"), ("collect", "approve"), ("approve", "account"), ("account", "done")]
    return make_graph(nodes, edges)


@pytest.fixture
def testing_config():
    """Configuration preset used by API tests."""
    reset_config()
    yield get_testing_config()
    reset_config()


@pytest.fixture
def client(testing_config):
    """Create a test client."""
    from fastapi.testclient import TestClient
    from workflow_sandbox.factory import create_app

    return TestClient(create_app(testing_config))
