"""Structural validation of workflow graphs."""

from typing import List, Set, Union

from ..models.core import GraphIndex, NodeKind, ValidationResult, WorkflowGraph
from .logging import get_logger

logger = get_logger(__name__)


class WorkflowValidator:
    """Checks whether a workflow graph is a well-formed, executable process.

    Every rule runs on every call so a single validation reports all
    problems at once. Graph defects are returned as diagnostics, never raised.
    """

    def validate(self, graph: WorkflowGraph) -> ValidationResult:
        """
        Validate a workflow graph for structural correctness.

        Args:
            graph: Snapshot of the workflow to validate

        Returns:
            ValidationResult: Verdict, errors in reporting order, offending node IDs and warnings
        """
        logger.debug(f"Validating workflow with {len(graph.nodes)} nodes and {len(graph.edges)} edges")

        # Built per call, the graph may have changed since the last one
        index = graph.index()
        errors: List[str] = []
        invalid_node_ids: List[str] = []
        warnings: List[str] = []

        self._validate_entry_points(index, errors, invalid_node_ids)
        self._validate_unreachable_nodes(index, errors, invalid_node_ids)
        self._validate_completion_nodes(index, errors)
        self._validate_dead_ends(index, errors, invalid_node_ids)
        self._validate_edge_references(index, errors)

        self._warn_self_loops(index, warnings)
        self._warn_duplicate_edges(index, warnings)
        self._warn_disconnected_nodes(index, warnings)

        result = ValidationResult(
            valid=len(errors) == 0,
            errors=errors,
            invalid_node_ids=_deduplicate(invalid_node_ids),
            warnings=warnings,
        )

        logger.debug(f"Workflow validation completed. Valid: {result.valid}, "
                     f"Errors: {len(result.errors)}, Warnings: {len(result.warnings)}")

        return result

    def _validate_entry_points(self, graph: GraphIndex, errors: List[str], invalid_node_ids: List[str]):
        """
        Require exactly one entry node.

        Args:
            graph: The graph to validate
            errors: List to append errors to
            invalid_node_ids: List to append offending node IDs to
        """
        entry_nodes = graph.nodes_of_kind(NodeKind.ENTRY)
        if not entry_nodes:
            errors.append("Workflow is missing entry point: add an Entry node.")
        elif len(entry_nodes) > 1:
            errors.append(
                f"Workflow has {len(entry_nodes)} Entry nodes: multiple entry points not allowed."
            )
            invalid_node_ids.extend(node.id for node in entry_nodes)

    def _validate_unreachable_nodes(self, graph: GraphIndex, errors: List[str], invalid_node_ids: List[str]):
        """
        Require an incoming connection on every node except entry nodes.

        Args:
            graph: The graph to validate
            errors: List to append errors to
            invalid_node_ids: List to append offending node IDs to
        """
        for node in graph.nodes:
            if node.kind == NodeKind.ENTRY:
                continue
            if not graph.incoming_edges(node.id):
                errors.append(f'Node "{node.label}" is unreachable (no incoming connections).')
                invalid_node_ids.append(node.id)

    def _validate_completion_nodes(self, graph: GraphIndex, errors: List[str]):
        """
        Require at least one completion node. This is a graph-level defect
        and flags no node.

        Args:
            graph: The graph to validate
            errors: List to append errors to
        """
        if not graph.nodes_of_kind(NodeKind.COMPLETION):
            errors.append("Workflow is missing completion node: add at least one Completion node.")

    def _validate_dead_ends(self, graph: GraphIndex, errors: List[str], invalid_node_ids: List[str]):
        """
        Require an outgoing connection on every node except completion nodes.

        Args:
            graph: The graph to validate
            errors: List to append errors to
            invalid_node_ids: List to append offending node IDs to
        """
        for node in graph.nodes:
            if node.kind == NodeKind.COMPLETION:
                continue
            if not graph.outgoing_edges(node.id):
                errors.append(
                    f'Node "{node.label}" is a dead end. Connect it to another node or a Completion node.'
                )
                invalid_node_ids.append(node.id)

    def _validate_edge_references(self, graph: GraphIndex, errors: List[str]):
        """
        Report edges whose endpoints reference non-existent nodes.

        Args:
            graph: The graph to validate
            errors: List to append errors to
        """
        node_ids = graph.node_ids()
        for edge in graph.edges:
            if edge.source not in node_ids:
                errors.append(
                    f"Malformed graph: edge {edge.describe()} references non-existent source node '{edge.source}'."
                )
            if edge.target not in node_ids:
                errors.append(
                    f"Malformed graph: edge {edge.describe()} references non-existent target node '{edge.target}'."
                )

    def _warn_self_loops(self, graph: GraphIndex, warnings: List[str]):
        for edge in graph.edges:
            if edge.is_self_loop:
                node = graph.node_by_id(edge.source)
                name = node.label if node else edge.source
                warnings.append(f'Node "{name}" is connected to itself.')

    def _warn_duplicate_edges(self, graph: GraphIndex, warnings: List[str]):
        seen: Set[tuple] = set()
        reported: Set[tuple] = set()
        for edge in graph.edges:
            pair = (edge.source, edge.target)
            if pair in seen and pair not in reported:
                warnings.append(f"Multiple edges connect {edge.source} -> {edge.target}.")
                reported.add(pair)
            seen.add(pair)

    def _warn_disconnected_nodes(self, graph: GraphIndex, warnings: List[str]):
        """
        Warn about nodes that have incoming edges but no path from the single
        entry node, e.g. a cycle fed by nothing else. Nodes without incoming
        edges are already reported as unreachable.
        """
        entry_nodes = graph.nodes_of_kind(NodeKind.ENTRY)
        if len(entry_nodes) != 1:
            return

        reachable = find_reachable_node_ids(graph, entry_nodes[0].id)
        for node in graph.nodes:
            if node.id not in reachable and graph.incoming_edges(node.id):
                warnings.append(f'Node "{node.label}" cannot be reached from the entry point.')


def find_reachable_node_ids(graph: Union[WorkflowGraph, GraphIndex], start_id: str) -> Set[str]:
    """Find all node IDs reachable from the given node."""
    reachable = {start_id}
    queue = [start_id]
    while queue:
        current = queue.pop(0)
        for edge in graph.outgoing_edges(current):
            if edge.target not in reachable:
                reachable.add(edge.target)
                queue.append(edge.target)
    return reachable


def _deduplicate(node_ids: List[str]) -> List[str]:
    return list(dict.fromkeys(node_ids))


_default_validator = WorkflowValidator()


def validate_workflow(graph: WorkflowGraph) -> ValidationResult:
    """Validate a workflow graph with the default validator."""
    return _default_validator.validate(graph)
