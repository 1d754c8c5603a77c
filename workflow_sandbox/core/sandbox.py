"""Sandbox service running the validate-then-simulate test of a workflow."""

from typing import Optional

from ..models.core import SandboxResult, WorkflowGraph
from .graph_validator import WorkflowValidator
from .simulator import WorkflowSimulator
from .logging import get_logger

logger = get_logger(__name__)


class SandboxService:
    """Tests a workflow the way the editor's sandbox panel does.

    The workflow is validated first. Only a valid workflow is simulated;
    an invalid one returns its diagnostics without a trace.
    """

    def __init__(
        self,
        validator: Optional[WorkflowValidator] = None,
        simulator: Optional[WorkflowSimulator] = None,
        simulation_timeout: Optional[float] = None
    ):
        """Initialize the sandbox service.

        Args:
            validator: Validator to use, a default one if not provided
            simulator: Simulator to use, a default one if not provided
            simulation_timeout: Timeout in seconds for async simulations
        """
        self.validator = validator or WorkflowValidator()
        self.simulator = simulator or WorkflowSimulator()
        self.simulation_timeout = simulation_timeout

    def test_workflow(self, graph: WorkflowGraph) -> SandboxResult:
        """Validate a workflow and simulate it when valid."""
        validation = self.validator.validate(graph)
        if not validation.valid:
            self._log_rejection(validation.errors)
            return SandboxResult(validation=validation)

        trace = self.simulator.simulate(graph)
        logger.info(f"Workflow test completed: {len(trace.steps)} steps, success={trace.success}")
        return SandboxResult(validation=validation, trace=trace)

    async def test_workflow_async(self, graph: WorkflowGraph) -> SandboxResult:
        """Validate a workflow and simulate it off the event loop when valid.

        Raises:
            SimulationTimeoutError: If the simulation exceeds simulation_timeout
        """
        validation = self.validator.validate(graph)
        if not validation.valid:
            self._log_rejection(validation.errors)
            return SandboxResult(validation=validation)

        trace = await self.simulator.simulate_async(graph, timeout=self.simulation_timeout)
        logger.info(f"Workflow test completed: {len(trace.steps)} steps, success={trace.success}")
        return SandboxResult(validation=validation, trace=trace)

    def _log_rejection(self, errors):
        logger.warning(f"Workflow test rejected by validation: {'; '.join(errors)}")
