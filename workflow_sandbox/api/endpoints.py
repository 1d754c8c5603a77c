"""FastAPI REST endpoints for the workflow sandbox."""

from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, status

from ..config import AppConfig
from ..core.automation_catalog import AutomationCatalog
from ..core.exceptions import APIError
from ..core.sandbox import SandboxService
from ..models.core import (
    AutomationAction,
    ExecutionTrace,
    SandboxResult,
    ValidationResult,
    WorkflowGraph,
)
from ..core.logging import get_logger

logger = get_logger(__name__)

# Create router
router = APIRouter(prefix="/api/v1", tags=["workflow"])

# Global instances (initialized by the application factory)
_sandbox_service: Optional[SandboxService] = None
_automation_catalog: Optional[AutomationCatalog] = None
_config: Optional[AppConfig] = None


def init_dependencies(
    sandbox_service: SandboxService,
    automation_catalog: AutomationCatalog,
    config: AppConfig
):
    """Initialize the global dependencies."""
    global _sandbox_service, _automation_catalog, _config
    _sandbox_service = sandbox_service
    _automation_catalog = automation_catalog
    _config = config


def get_sandbox_service() -> SandboxService:
    """Dependency to get the sandbox service."""
    if _sandbox_service is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Sandbox service not initialized"
        )
    return _sandbox_service


def get_automation_catalog() -> AutomationCatalog:
    """Dependency to get the automation catalog."""
    if _automation_catalog is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Automation catalog not initialized"
        )
    return _automation_catalog


def get_app_config() -> AppConfig:
    """Dependency to get the application configuration."""
    if _config is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Configuration not initialized"
        )
    return _config


def _check_graph_size(graph: WorkflowGraph, config: AppConfig, endpoint: str) -> None:
    if len(graph.nodes) > config.max_graph_nodes:
        raise APIError(
            f"Workflow has {len(graph.nodes)} nodes, the limit is {config.max_graph_nodes}",
            status_code=413,
            endpoint=endpoint
        )


# Endpoints

@router.post(
    "/workflows/validate",
    response_model=ValidationResult,
    summary="Validate a workflow",
    description="Check the structural rules of a workflow and return all diagnostics"
)
async def validate_workflow(
    graph: WorkflowGraph,
    sandbox_service: SandboxService = Depends(get_sandbox_service),
    config: AppConfig = Depends(get_app_config)
) -> ValidationResult:
    """
    Validate a workflow graph.

    Args:
        graph: Workflow snapshot sent by the editor
        sandbox_service: Sandbox service dependency
        config: Configuration dependency

    Returns:
        Validation verdict, errors, offending node IDs and warnings
    """
    _check_graph_size(graph, config, "/workflows/validate")
    result = sandbox_service.validator.validate(graph)
    logger.info(f"Validated workflow: valid={result.valid}, errors={len(result.errors)}")
    return result


@router.post(
    "/workflows/simulate",
    response_model=ExecutionTrace,
    summary="Simulate a workflow",
    description="Produce an execution trace. The workflow is expected to have passed validation."
)
async def simulate_workflow(
    graph: WorkflowGraph,
    sandbox_service: SandboxService = Depends(get_sandbox_service),
    config: AppConfig = Depends(get_app_config)
) -> ExecutionTrace:
    """
    Simulate a workflow graph without validating it first.

    Raises:
        SimulationTimeoutError: If the simulation exceeds the configured timeout
    """
    _check_graph_size(graph, config, "/workflows/simulate")
    trace = await sandbox_service.simulator.simulate_async(graph, timeout=config.simulation_timeout)
    logger.info(f"Simulated workflow: success={trace.success}, steps={len(trace.steps)}")
    return trace


@router.post(
    "/workflows/test",
    response_model=SandboxResult,
    summary="Test a workflow",
    description="Validate a workflow and, when it is valid, simulate it"
)
async def test_workflow(
    graph: WorkflowGraph,
    sandbox_service: SandboxService = Depends(get_sandbox_service),
    config: AppConfig = Depends(get_app_config)
) -> SandboxResult:
    """Run the sandbox test of a workflow graph."""
    _check_graph_size(graph, config, "/workflows/test")
    return await sandbox_service.test_workflow_async(graph)


@router.get(
    "/automations",
    response_model=List[AutomationAction],
    summary="List automations",
    description="List the automated actions an automated step can trigger"
)
async def list_automations(
    catalog: AutomationCatalog = Depends(get_automation_catalog)
) -> List[AutomationAction]:
    return catalog.list_actions()


@router.get(
    "/automations/{action_id}",
    response_model=AutomationAction,
    summary="Get an automation",
    description="Retrieve one automated action by ID"
)
async def get_automation(
    action_id: str,
    catalog: AutomationCatalog = Depends(get_automation_catalog)
) -> AutomationAction:
    """
    Get an automated action.

    Raises:
        AutomationNotFoundError: If the action does not exist (mapped to 404)
    """
    return catalog.get_action(action_id)
