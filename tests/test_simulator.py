"""Tests for the workflow execution simulator."""

import asyncio
import time

import pytest

from workflow_sandbox.core.exceptions import SimulationTimeoutError
from workflow_sandbox.core.graph_validator import validate_workflow
from workflow_sandbox.core.simulator import MESSAGE_FORMATTERS, WorkflowSimulator, simulate_workflow
from workflow_sandbox.models.core import NodeKind, StepStatus, WorkflowEdge, WorkflowGraph

from conftest import FIXED_TIME, make_graph, make_node


@pytest.fixture
def simulator(fixed_clock):
    """Create a WorkflowSimulator with a fixed clock."""
    return WorkflowSimulator(clock=fixed_clock)


class TestSimulationTrace:
    """Test cases for trace contents."""

    def test_simple_chain(self, simulator):
        """Test entry -> task -> completion."""
        graph = make_graph(
            [make_node("E", NodeKind.ENTRY, "Start"), make_node("T", NodeKind.TASK, "Collect", assignee="Alice"),
             make_node("C", NodeKind.COMPLETION, "Done")],
            [("E", "T"), ("T", "C")]
        )
        trace = simulator.simulate(graph)

        assert trace.success is True
        assert [step.step_id for step in trace.steps] == [1, 2, 3]
        assert [step.message for step in trace.steps] == [
            "Executed Start",
            "Task assigned to Alice",
            "Executed Done",
        ]
        assert all(step.status == StepStatus.SUCCESS for step in trace.steps)
        assert all(step.timestamp == FIXED_TIME for step in trace.steps)

    def test_onboarding_messages(self, simulator, onboarding_graph):
        """Test one message per node kind."""
        trace = simulator.simulate(onboarding_graph)
        assert trace.visited_node_ids == ["start", "collect", "approve", "account", "done"]
        assert [step.node_kind for step in trace.steps] == [
            NodeKind.ENTRY, NodeKind.TASK, NodeKind.APPROVAL, NodeKind.AUTOMATED, NodeKind.COMPLETION
        ]
        assert trace.steps[2].message == "Approval request sent to Manager"
        assert trace.steps[3].message == "Triggered automation: create_user_account"
        assert trace.steps[4].node_label == "Onboarding Complete"

    def test_placeholders_for_missing_attributes(self, simulator):
        """Test fallback text when attributes are unset."""
        graph = make_graph(
            [make_node("E", NodeKind.ENTRY), make_node("T", NodeKind.TASK), make_node("A", NodeKind.APPROVAL),
             make_node("X", NodeKind.AUTOMATED), make_node("C", NodeKind.COMPLETION)],
            [("E", "T"), ("T", "A"), ("A", "X"), ("X", "C")]
        )
        messages = [step.message for step in simulator.simulate(graph).steps]
        assert messages[1:4] == [
            "Task assigned to Unassigned",
            "Approval request sent to Admin",
            "Triggered automation: None",
        ]

    def test_every_kind_has_a_formatter(self):
        """Test that no node kind is left without a message."""
        assert set(MESSAGE_FORMATTERS) == set(NodeKind)


class TestTraversalOrder:
    """Test cases for breadth-first walking."""

    def test_cycle_visits_each_node_once(self, simulator):
        """Test E -> A -> B -> A with B -> C."""
        graph = make_graph(
            [make_node("E", NodeKind.ENTRY), make_node("A", NodeKind.TASK), make_node("B", NodeKind.APPROVAL),
             make_node("C", NodeKind.COMPLETION)],
            [("E", "A"), ("A", "B"), ("B", "A"), ("B", "C")]
        )
        trace = simulator.simulate(graph)
        assert trace.success is True
        assert trace.visited_node_ids == ["E", "A", "B", "C"]

    def test_breadth_first_follows_edge_order(self, simulator):
        """Test that siblings run before grandchildren, in edge order."""
        graph = make_graph(
            [make_node("E", NodeKind.ENTRY), make_node("L", NodeKind.TASK), make_node("R", NodeKind.TASK),
             make_node("LL", NodeKind.TASK), make_node("C", NodeKind.COMPLETION)],
            [("E", "R"), ("E", "L"), ("L", "LL"), ("R", "C"), ("LL", "C")]
        )
        assert simulator.simulate(graph).visited_node_ids == ["E", "R", "L", "C", "LL"]

    def test_duplicate_edges_do_not_repeat_steps(self, simulator):
        """Test that parallel edges produce a single step."""
        graph = make_graph(
            [make_node("E", NodeKind.ENTRY), make_node("C", NodeKind.COMPLETION)],
            [("E", "C"), ("E", "C")]
        )
        assert simulator.simulate(graph).visited_node_ids == ["E", "C"]

    def test_unreached_nodes_are_not_in_trace(self, simulator):
        """Test that nodes off the entry's path are skipped."""
        graph = make_graph(
            [make_node("E", NodeKind.ENTRY), make_node("C", NodeKind.COMPLETION), make_node("Z", NodeKind.TASK)],
            [("E", "C"), ("Z", "C")]
        )
        assert simulator.simulate(graph).visited_node_ids == ["E", "C"]

    def test_dangling_edge_is_ignored(self, simulator):
        """Test that an edge to a missing node is not walked."""
        graph = make_graph(
            [make_node("E", NodeKind.ENTRY), make_node("C", NodeKind.COMPLETION)],
            [("E", "ghost"), ("E", "C")]
        )
        trace = simulator.simulate(graph)
        assert trace.success is True
        assert trace.visited_node_ids == ["E", "C"]

    def test_first_entry_wins(self, simulator):
        """Test that simulation starts at the first entry in node order."""
        graph = make_graph(
            [make_node("E2", NodeKind.ENTRY), make_node("E1", NodeKind.ENTRY), make_node("C", NodeKind.COMPLETION)],
            [("E1", "C"), ("E2", "C")]
        )
        assert simulator.simulate(graph).visited_node_ids == ["E2", "C"]


class TestSimulationFailures:
    """Test cases for the no-entry abort."""

    def test_no_entry_point(self, simulator):
        """Test that a workflow without entry produces one failure step."""
        graph = make_graph([make_node("T", NodeKind.TASK), make_node("C", NodeKind.COMPLETION)], [("T", "C")])
        trace = simulator.simulate(graph)

        assert trace.success is False
        assert len(trace.steps) == 1
        step = trace.steps[0]
        assert step.step_id == 1
        assert step.node_id is None
        assert step.node_kind is None
        assert step.node_label == "System"
        assert step.status == StepStatus.FAILURE
        assert "no entry point" in step.message
        assert trace.visited_node_ids == []

    def test_empty_graph(self, simulator):
        """Test that an empty graph aborts the same way."""
        assert simulator.simulate(WorkflowGraph()).success is False

    def test_simulate_workflow_helper(self, fixed_clock, onboarding_graph):
        """Test the module-level convenience function."""
        trace = simulate_workflow(onboarding_graph, clock=fixed_clock)
        assert trace == WorkflowSimulator(clock=fixed_clock).simulate(onboarding_graph)

    def test_default_clock_is_timezone_aware(self, onboarding_graph):
        """Test that timestamps carry UTC by default."""
        trace = WorkflowSimulator().simulate(onboarding_graph)
        assert trace.steps[0].timestamp.tzinfo is not None


class TestAsyncSimulation:
    """Test cases for simulations run off the event loop."""

    def test_simulate_async_returns_trace(self, simulator, onboarding_graph):
        """Test that the async path produces the same trace."""
        trace = asyncio.run(simulator.simulate_async(onboarding_graph, timeout=5.0))
        assert trace == simulator.simulate(onboarding_graph)

    def test_simulate_async_times_out(self, onboarding_graph):
        """Test that a slow simulation raises SimulationTimeoutError."""
        def slow_clock():
            time.sleep(0.2)
            return FIXED_TIME

        slow_simulator = WorkflowSimulator(clock=slow_clock)
        with pytest.raises(SimulationTimeoutError) as exc_info:
            asyncio.run(slow_simulator.simulate_async(onboarding_graph, timeout=0.05))

        assert exc_info.value.details["timeout"] == 0.05
        assert exc_info.value.context["node_count"] == 5
        assert exc_info.value.recoverable is True


class TestExampleWorkflow:
    """Test cases for the bundled onboarding example."""

    def test_example_is_valid_and_runs(self, simulator):
        """Test that the example passes validation and visits every node."""
        from example_workflow import create_onboarding_workflow

        workflow = create_onboarding_workflow()
        assert validate_workflow(workflow).valid
        trace = simulator.simulate(workflow)
        assert trace.visited_node_ids == [
            "start", "collect_documents", "manager_approval", "create_account", "done"
        ]


class TestSimulationAfterEdits:
    """Test cases for simulating the same graph object across edits."""

    def test_trace_follows_edited_edges(self, simulator):
        """Test that an edge added after construction is walked."""
        graph = make_graph(
            [make_node("E", NodeKind.ENTRY), make_node("T", NodeKind.TASK), make_node("C", NodeKind.COMPLETION)],
            [("E", "C")]
        )
        assert simulator.simulate(graph).visited_node_ids == ["E", "C"]

        graph.edges.insert(0, WorkflowEdge(source="E", target="T"))
        assert simulator.simulate(graph).visited_node_ids == ["E", "T", "C"]
