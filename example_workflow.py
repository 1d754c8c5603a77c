"""Example onboarding workflow demonstrating the workflow sandbox capabilities."""

from workflow_sandbox.core import WorkflowValidator, WorkflowSimulator, export_workflow
from workflow_sandbox.models import NodeKind, WorkflowEdge, WorkflowGraph, WorkflowNode


def create_onboarding_workflow() -> WorkflowGraph:
    """
    Create an example employee onboarding workflow.

    This workflow:
    1. Starts onboarding for a new hire
    2. Asks HR to collect documents
    3. Sends the paperwork to a manager for approval
    4. Creates the IT account automatically, or loops back for missing documents
    5. Completes onboarding
    """

    nodes = [
        WorkflowNode(
            id="start",
            kind=NodeKind.ENTRY,
            label="Start Onboarding",
            attributes={"metadata": {"department": "Engineering"}}
        ),
        WorkflowNode(
            id="collect_documents",
            kind=NodeKind.TASK,
            label="Collect Documents",
            attributes={"assignee": "HR Team", "description": "ID, tax forms and bank details", "dueDate": "2024-02-01"}
        ),
        WorkflowNode(
            id="manager_approval",
            kind=NodeKind.APPROVAL,
            label="Manager Approval",
            attributes={"approverRole": "Manager", "autoApproveThreshold": 3}
        ),
        WorkflowNode(
            id="create_account",
            kind=NodeKind.AUTOMATED,
            label="Create IT Account",
            attributes={"actionId": "create_user_account", "actionParams": {"department": "Engineering"}}
        ),
        WorkflowNode(
            id="done",
            kind=NodeKind.COMPLETION,
            label="Onboarding Complete",
            attributes={"endMessage": "Welcome aboard!", "isSummary": True}
        ),
    ]

    edges = [
        WorkflowEdge(id="e1", source="start", target="collect_documents"),
        WorkflowEdge(id="e2", source="collect_documents", target="manager_approval"),
        WorkflowEdge(id="e3", source="manager_approval", target="create_account"),
        # Rejected paperwork goes back to HR
        WorkflowEdge(id="e4", source="manager_approval", target="collect_documents"),
        WorkflowEdge(id="e5", source="create_account", target="done"),
    ]

    return WorkflowGraph(nodes=nodes, edges=edges)


def main():
    """Validate, simulate and export the example workflow."""
    workflow = create_onboarding_workflow()

    print("Workflow Sandbox - Example Workflow")
    print("=" * 50)
    print(f"Number of Nodes: {len(workflow.nodes)}")
    print(f"Number of Edges: {len(workflow.edges)}")
    print()

    result = WorkflowValidator().validate(workflow)
    print(f"Valid: {result.valid}")
    for error in result.errors:
        print(f"  error: {error}")
    for warning in result.warnings:
        print(f"  warning: {warning}")
    print()

    if result.valid:
        print("Execution Trace:")
        for step in WorkflowSimulator().simulate(workflow).steps:
            print(f"  {step.step_id}. {step.node_label}: {step.message}")
        print()

    print("Interchange JSON:")
    print(export_workflow(workflow))


if __name__ == "__main__":
    main()
