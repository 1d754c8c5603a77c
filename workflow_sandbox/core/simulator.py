"""Simulator producing execution traces for validated workflows."""

import asyncio
from collections import deque
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Set

from ..models.core import (
    ExecutionStep, ExecutionTrace, NodeKind, StepStatus, WorkflowGraph, WorkflowNode
)
from .exceptions import SimulationTimeoutError
from .logging import get_logger

logger = get_logger(__name__)

Clock = Callable[[], datetime]
MessageFormatter = Callable[[WorkflowNode], str]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _executed_message(node: WorkflowNode) -> str:
    return f"Executed {node.label}"


def _task_message(node: WorkflowNode) -> str:
    return f"Task assigned to {node.attributes.assignee or 'Unassigned'}"


def _approval_message(node: WorkflowNode) -> str:
    return f"Approval request sent to {node.attributes.approver_role or 'Admin'}"


def _automated_message(node: WorkflowNode) -> str:
    return f"Triggered automation: {node.attributes.action_id or 'None'}"


# Must cover every NodeKind
MESSAGE_FORMATTERS: Dict[NodeKind, MessageFormatter] = {
    NodeKind.ENTRY: _executed_message,
    NodeKind.TASK: _task_message,
    NodeKind.APPROVAL: _approval_message,
    NodeKind.AUTOMATED: _automated_message,
    NodeKind.COMPLETION: _executed_message,
}


class WorkflowSimulator:
    """Walks a workflow breadth-first from its entry node and logs each step.

    The simulator assumes the graph has been accepted by the validator. It
    only guards against a missing entry node, which it reports as a single
    failed step instead of raising.
    """

    def __init__(self, clock: Optional[Clock] = None):
        """Initialize the simulator.

        Args:
            clock: Optional timestamp source, defaults to the current UTC time
        """
        self._clock = clock or _utc_now

    def simulate(self, graph: WorkflowGraph) -> ExecutionTrace:
        """
        Simulate a workflow and return its execution trace.

        Args:
            graph: Snapshot of a validated workflow

        Returns:
            ExecutionTrace: Steps in first-arrival order
        """
        index = graph.index()
        entry_nodes = index.nodes_of_kind(NodeKind.ENTRY)
        if not entry_nodes:
            logger.warning("Simulation aborted: workflow has no entry node")
            return ExecutionTrace(success=False, steps=[self._no_entry_step()])

        steps: List[ExecutionStep] = []
        visited: Set[str] = set()
        queue = deque([entry_nodes[0].id])

        while queue:
            node_id = queue.popleft()
            if node_id in visited:
                continue
            visited.add(node_id)

            node = index.node_by_id(node_id)
            steps.append(self._build_step(len(steps) + 1, node))

            for edge in index.outgoing_edges(node_id):
                # Dangling targets are reported by the validator, not walked
                if index.node_by_id(edge.target) is not None:
                    queue.append(edge.target)

        logger.debug(f"Simulation finished after {len(steps)} steps "
                     f"({len(graph.nodes) - len(visited)} nodes not reached)")

        return ExecutionTrace(success=True, steps=steps)

    async def simulate_async(self, graph: WorkflowGraph, timeout: Optional[float] = None) -> ExecutionTrace:
        """
        Run a simulation in a worker thread with an optional timeout.

        Args:
            graph: Snapshot of a validated workflow
            timeout: Seconds to wait before giving up, None to wait indefinitely

        Returns:
            ExecutionTrace: The trace produced by simulate()

        Raises:
            SimulationTimeoutError: If the simulation does not finish in time
        """
        try:
            return await asyncio.wait_for(asyncio.to_thread(self.simulate, graph), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error(f"Simulation timed out after {timeout}s for {len(graph.nodes)} nodes")
            raise SimulationTimeoutError(
                f"Simulation did not finish within {timeout} seconds",
                timeout=timeout,
                node_count=len(graph.nodes)
            )

    def _build_step(self, step_id: int, node: WorkflowNode) -> ExecutionStep:
        return ExecutionStep(
            step_id=step_id,
            node_id=node.id,
            node_kind=node.kind,
            node_label=node.label,
            message=MESSAGE_FORMATTERS[node.kind](node),
            status=StepStatus.SUCCESS,
            timestamp=self._clock()
        )

    def _no_entry_step(self) -> ExecutionStep:
        return ExecutionStep(
            step_id=1,
            node_id=None,
            node_kind=None,
            node_label="System",
            message="Simulation aborted: no entry point found.",
            status=StepStatus.FAILURE,
            timestamp=self._clock()
        )


def simulate_workflow(graph: WorkflowGraph, clock: Optional[Clock] = None) -> ExecutionTrace:
    """Simulate a workflow with a simulator using the given clock."""
    return WorkflowSimulator(clock=clock).simulate(graph)
