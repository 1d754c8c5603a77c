"""JSON interchange format for workflow graphs.

The exchanged document is the open object ``{"nodes": [...], "edges": [...]}``
with camelCase keys. Fields the sandbox does not know about, such as editor
layout data, are carried through unchanged.

Node kinds are normalised: the legacy kinds ``start`` and ``end`` are read as
ENTRY and COMPLETION and written back as ``entry`` and ``completion``.
"""

import json
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from ..models.core import WorkflowGraph
from .exceptions import WorkflowFormatError
from .logging import get_logger

logger = get_logger(__name__)


def export_workflow(graph: WorkflowGraph) -> str:
    """Serialize a workflow graph to interchange JSON."""
    return json.dumps(graph.model_dump(mode="json", by_alias=True), indent=2)


def import_workflow(text: Union[str, bytes], source: str = "<string>") -> WorkflowGraph:
    """
    Parse interchange JSON into a workflow graph.

    Args:
        text: JSON document
        source: Where the document came from, used in error context

    Returns:
        WorkflowGraph: The parsed graph

    Raises:
        WorkflowFormatError: If the document is not valid JSON or not a workflow
    """
    try:
        payload = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise WorkflowFormatError(f"Invalid workflow JSON: {e}", source=source)

    if not isinstance(payload, dict):
        raise WorkflowFormatError(
            f"Workflow JSON must be an object with 'nodes' and 'edges', got {type(payload).__name__}",
            source=source
        )

    try:
        graph = WorkflowGraph.model_validate(payload)
    except ValidationError as e:
        format_errors = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        raise WorkflowFormatError(
            f"Workflow JSON does not describe a valid workflow: {'; '.join(format_errors)}",
            format_errors=format_errors,
            source=source
        )

    logger.debug(f"Imported workflow from {source}: {len(graph.nodes)} nodes, {len(graph.edges)} edges")
    return graph


def load_workflow(path: Union[str, Path]) -> WorkflowGraph:
    """Read a workflow graph from a JSON file.

    Raises:
        WorkflowFormatError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise WorkflowFormatError(f"Cannot read workflow file {path}: {e}", source=str(path))
    return import_workflow(text, source=str(path))


def save_workflow(graph: WorkflowGraph, path: Union[str, Path]) -> None:
    """Write a workflow graph to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(export_workflow(graph), encoding="utf-8")
    logger.info(f"Exported workflow with {len(graph.nodes)} nodes to {path}")
