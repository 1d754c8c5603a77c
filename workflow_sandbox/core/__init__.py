"""Core workflow sandbox components."""

from .exceptions import (
    WorkflowSandboxError,
    WorkflowFormatError,
    AutomationCatalogError,
    AutomationNotFoundError,
    SimulationTimeoutError,
    ConfigurationError,
    APIError,
)
from .logging import setup_logging, get_logger
from .graph_validator import WorkflowValidator, validate_workflow
from .simulator import WorkflowSimulator, simulate_workflow
from .automation_catalog import AutomationCatalog
from .sandbox import SandboxService
from .serialization import export_workflow, import_workflow, load_workflow, save_workflow

__all__ = [
    "WorkflowSandboxError",
    "WorkflowFormatError",
    "AutomationCatalogError",
    "AutomationNotFoundError",
    "SimulationTimeoutError",
    "ConfigurationError",
    "APIError",
    "setup_logging",
    "get_logger",
    "WorkflowValidator",
    "validate_workflow",
    "WorkflowSimulator",
    "simulate_workflow",
    "AutomationCatalog",
    "SandboxService",
    "export_workflow",
    "import_workflow",
    "load_workflow",
    "save_workflow",
]
