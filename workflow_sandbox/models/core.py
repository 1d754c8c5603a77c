"""Core Pydantic models for the workflow sandbox."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class NodeKind(str, Enum):
    """Enumeration of workflow step kinds."""
    ENTRY = "entry"
    TASK = "task"
    APPROVAL = "approval"
    AUTOMATED = "automated"
    COMPLETION = "completion"

    @classmethod
    def _missing_(cls, value):
        # Wire values written by older editor versions
        legacy = {"start": cls.ENTRY, "end": cls.COMPLETION}
        if isinstance(value, str):
            return legacy.get(value.strip().lower())
        return None


class StepStatus(str, Enum):
    """Enumeration of execution step outcomes."""
    SUCCESS = "success"
    FAILURE = "failure"


class WireModel(BaseModel):
    """Base model serialized with camelCase keys on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OpenWireModel(WireModel):
    """Wire model that keeps fields it does not know about."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class EntryAttributes(OpenWireModel):
    """Configuration of an entry step."""
    metadata: Dict[str, str] = Field(default_factory=dict, description="Free-form key/value metadata")


class TaskAttributes(OpenWireModel):
    """Configuration of a human task step."""
    description: Optional[str] = Field(None, description="What the assignee has to do")
    assignee: Optional[str] = Field(None, description="Person or role the task is assigned to")
    due_date: Optional[str] = Field(None, description="Due date as entered in the editor")
    custom_fields: Dict[str, str] = Field(default_factory=dict, description="Additional task fields")


class ApprovalAttributes(OpenWireModel):
    """Configuration of an approval step."""
    approver_role: Optional[str] = Field(None, description="Role that must approve")
    auto_approve_threshold: Optional[float] = Field(None, description="Threshold for automatic approval")


class AutomatedAttributes(OpenWireModel):
    """Configuration of an automated action step."""
    action_id: Optional[str] = Field(None, description="Identifier of the automation to trigger")
    action_params: Dict[str, Any] = Field(default_factory=dict, description="Parameter name to value mapping")


class CompletionAttributes(OpenWireModel):
    """Configuration of a completion step."""
    end_message: Optional[str] = Field(None, description="Message shown when the branch completes")
    is_summary: bool = Field(False, description="Whether a summary is produced on completion")


NodeAttributes = Union[
    EntryAttributes,
    TaskAttributes,
    ApprovalAttributes,
    AutomatedAttributes,
    CompletionAttributes,
]

ATTRIBUTE_MODELS = {
    NodeKind.ENTRY: EntryAttributes,
    NodeKind.TASK: TaskAttributes,
    NodeKind.APPROVAL: ApprovalAttributes,
    NodeKind.AUTOMATED: AutomatedAttributes,
    NodeKind.COMPLETION: CompletionAttributes,
}


class Position(OpenWireModel):
    """Canvas coordinates owned by the editor."""
    x: float = 0.0
    y: float = 0.0


class WorkflowNode(OpenWireModel):
    """A single step of a workflow."""
    id: str = Field(..., description="Unique identifier for the node")
    kind: NodeKind = Field(..., description="Kind of step")
    label: str = Field("", description="Display name of the node")
    attributes: NodeAttributes = Field(..., description="Kind-specific configuration")
    position: Optional[Position] = Field(None, description="Layout metadata owned by the editor")

    @model_validator(mode='before')
    @classmethod
    def build_attributes_for_kind(cls, data):
        """Pick the attribute model that belongs to the node kind."""
        if not isinstance(data, dict):
            return data
        raw_kind = data.get("kind")
        try:
            kind = NodeKind(raw_kind)
        except ValueError:
            # Let field validation report the bad kind
            return data
        attributes = data.get("attributes")
        if attributes is None:
            attributes = {}
        if isinstance(attributes, dict):
            data = {**data, "kind": kind, "attributes": ATTRIBUTE_MODELS[kind].model_validate(attributes)}
        return data

    @field_validator('id')
    @classmethod
    def validate_id(cls, id_value):
        """Ensure node ID is not blank."""
        if not id_value or not id_value.strip():
            raise ValueError("Node ID cannot be empty")
        return id_value

    @model_validator(mode='after')
    def validate_attributes_match_kind(self):
        """Ensure the attributes carried are the ones of the node kind."""
        expected = ATTRIBUTE_MODELS[self.kind]
        if type(self.attributes) is not expected:
            raise ValueError(
                f"Node '{self.id}' of kind '{self.kind.value}' requires {expected.__name__}, "
                f"got {type(self.attributes).__name__}"
            )
        return self


class WorkflowEdge(OpenWireModel):
    """Directed connection between two workflow nodes."""
    source: str = Field(..., description="Source node ID")
    target: str = Field(..., description="Target node ID")
    id: Optional[str] = Field(None, description="Edge identifier assigned by the editor")

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target

    def describe(self) -> str:
        """Short human-readable name used in diagnostics."""
        if self.id:
            return f"'{self.id}' ({self.source} -> {self.target})"
        return f"{self.source} -> {self.target}"


class WorkflowGraph(OpenWireModel):
    """Snapshot of a workflow definition handed over by the editor.

    The node and edge lists belong to the editor and may be edited in place,
    so every query reads the current lists. Callers that run many queries
    against one state of the graph take an index() first.
    """
    nodes: List[WorkflowNode] = Field(default_factory=list, description="Steps of the workflow")
    edges: List[WorkflowEdge] = Field(default_factory=list, description="Connections between steps")

    @field_validator('nodes')
    @classmethod
    def validate_unique_node_ids(cls, nodes):
        """Ensure all node IDs are unique."""
        seen: Set[str] = set()
        duplicates = []
        for node in nodes:
            if node.id in seen:
                duplicates.append(node.id)
            seen.add(node.id)
        if duplicates:
            raise ValueError(f"All node IDs must be unique, duplicated: {', '.join(sorted(set(duplicates)))}")
        return nodes

    def index(self) -> "GraphIndex":
        """Build lookup tables from the current node and edge lists."""
        return GraphIndex(self.nodes, self.edges)

    def node_by_id(self, node_id: str) -> Optional[WorkflowNode]:
        """Return the node with the given ID, or None when it does not exist."""
        return self.index().node_by_id(node_id)

    def node_ids(self) -> Set[str]:
        return {node.id for node in self.nodes}

    def nodes_of_kind(self, kind: NodeKind) -> List[WorkflowNode]:
        """Return nodes of the given kind in definition order."""
        return [node for node in self.nodes if node.kind == kind]

    def incoming_edges(self, node_id: str) -> List[WorkflowEdge]:
        """Return edges whose target is the given node, in edge order."""
        return [edge for edge in self.edges if edge.target == node_id]

    def outgoing_edges(self, node_id: str) -> List[WorkflowEdge]:
        """Return edges whose source is the given node, in edge order."""
        return [edge for edge in self.edges if edge.source == node_id]


class GraphIndex:
    """Lookup tables over one state of a workflow graph.

    The index copies the lists it is built from. Edits made to the graph
    afterwards are not seen, so build a new index after every edit.
    """

    def __init__(self, nodes: List[WorkflowNode], edges: List[WorkflowEdge]):
        self.nodes: List[WorkflowNode] = list(nodes)
        self.edges: List[WorkflowEdge] = list(edges)
        self._nodes_by_id: Dict[str, WorkflowNode] = {}
        self._incoming: Dict[str, List[WorkflowEdge]] = {}
        self._outgoing: Dict[str, List[WorkflowEdge]] = {}
        for node in self.nodes:
            # First definition wins if an edit introduced a duplicate ID
            self._nodes_by_id.setdefault(node.id, node)
        for edge in self.edges:
            self._outgoing.setdefault(edge.source, []).append(edge)
            self._incoming.setdefault(edge.target, []).append(edge)

    def node_by_id(self, node_id: str) -> Optional[WorkflowNode]:
        return self._nodes_by_id.get(node_id)

    def node_ids(self) -> Set[str]:
        return set(self._nodes_by_id)

    def nodes_of_kind(self, kind: NodeKind) -> List[WorkflowNode]:
        return [node for node in self.nodes if node.kind == kind]

    def incoming_edges(self, node_id: str) -> List[WorkflowEdge]:
        return list(self._incoming.get(node_id, []))

    def outgoing_edges(self, node_id: str) -> List[WorkflowEdge]:
        return list(self._outgoing.get(node_id, []))


class ValidationResult(WireModel):
    """Result of workflow validation."""
    valid: bool = Field(..., description="Whether the workflow is valid")
    errors: List[str] = Field(default_factory=list, description="Validation errors in reporting order")
    invalid_node_ids: List[str] = Field(default_factory=list, description="Deduplicated IDs of offending nodes")
    warnings: List[str] = Field(default_factory=list, description="Non-fatal observations")

    def error_markers(self, graph: WorkflowGraph) -> Dict[str, bool]:
        """Map every node of the graph to its error marker for this result.

        Nodes not flagged get False so markers from a previous run are cleared.
        """
        flagged = set(self.invalid_node_ids)
        return {node.id: node.id in flagged for node in graph.nodes}


class ExecutionStep(WireModel):
    """One entry of a simulated execution trace."""
    step_id: int = Field(..., ge=1, description="Position of the step in the trace, starting at 1")
    node_id: Optional[str] = Field(None, description="ID of the executed node")
    node_kind: Optional[NodeKind] = Field(None, description="Kind of the executed node")
    node_label: str = Field(..., description="Label of the executed node")
    message: str = Field(..., description="Human-readable log text")
    status: StepStatus = Field(..., description="Outcome of the step")
    timestamp: datetime = Field(..., description="When the step was recorded")


class ExecutionTrace(WireModel):
    """Ordered log produced by simulating a workflow."""
    success: bool = Field(..., description="Whether the simulation ran to completion")
    steps: List[ExecutionStep] = Field(default_factory=list, description="Steps in execution order")

    @property
    def visited_node_ids(self) -> List[str]:
        return [step.node_id for step in self.steps if step.node_id is not None]


class SandboxResult(WireModel):
    """Outcome of testing a workflow: validation first, simulation when valid."""
    validation: ValidationResult = Field(..., description="Validation verdict and diagnostics")
    trace: Optional[ExecutionTrace] = Field(None, description="Execution trace, present only when valid")


class AutomationAction(WireModel):
    """An automated action an AUTOMATED node can trigger."""
    id: str = Field(..., description="Unique identifier of the action")
    label: str = Field(..., description="Display name of the action")
    params: List[str] = Field(default_factory=list, description="Names of the parameters the action takes")

    @field_validator('id')
    @classmethod
    def validate_id(cls, id_value):
        """Ensure action ID is not blank."""
        if not id_value or not id_value.strip():
            raise ValueError("Action ID cannot be empty")
        return id_value.strip()
