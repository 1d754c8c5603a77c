"""Tests for the REST API endpoints."""

import json
import time

import pytest
from fastapi.testclient import TestClient

from workflow_sandbox.api.endpoints import init_dependencies
from workflow_sandbox.config import AppConfig, LogLevel
from workflow_sandbox.core.automation_catalog import AutomationCatalog
from workflow_sandbox.core.sandbox import SandboxService
from workflow_sandbox.core.serialization import export_workflow
from workflow_sandbox.core.simulator import WorkflowSimulator
from workflow_sandbox.factory import create_app, get_app_state
from workflow_sandbox.models.core import NodeKind

from conftest import FIXED_TIME, make_graph, make_node


def as_payload(graph):
    """Convert a graph to the JSON body the editor sends."""
    return json.loads(export_workflow(graph))


@pytest.fixture
def onboarding_payload(onboarding_graph):
    return as_payload(onboarding_graph)


@pytest.fixture
def broken_payload():
    return as_payload(make_graph([make_node("E", NodeKind.ENTRY), make_node("T", NodeKind.TASK)], [("E", "T")]))


class TestHealthEndpoints:
    """Test cases for health endpoints."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "running" in response.json()["message"]

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "workflow-sandbox"


class TestValidateEndpoint:
    """Test cases for POST /api/v1/workflows/validate."""

    def test_valid_workflow(self, client, onboarding_payload):
        """Test validating a correct workflow."""
        response = client.post("/api/v1/workflows/validate", json=onboarding_payload)
        assert response.status_code == 200
        assert response.json() == {"valid": True, "errors": [], "invalidNodeIds": [], "warnings": []}

    def test_invalid_workflow_is_not_an_http_error(self, client, broken_payload):
        """Test that validation failures are reported in the body."""
        response = client.post("/api/v1/workflows/validate", json=broken_payload)
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert len(data["errors"]) == 2
        assert data["invalidNodeIds"] == ["T"]

    def test_malformed_body(self, client):
        """Test that a body which is not a workflow is rejected."""
        response = client.post("/api/v1/workflows/validate", json={"nodes": [{"id": "x", "kind": "decision"}]})
        assert response.status_code == 422

    def test_graph_size_limit(self, client):
        """Test that graphs above max_graph_nodes are refused."""
        nodes = [{"id": f"n{index}", "kind": "task", "label": f"Task {index}"} for index in range(51)]
        response = client.post("/api/v1/workflows/validate", json={"nodes": nodes, "edges": []})
        assert response.status_code == 413
        data = response.json()
        assert data["error"] == "APIError"
        assert "limit is 50" in data["message"]


class TestSimulateEndpoint:
    """Test cases for POST /api/v1/workflows/simulate."""

    def test_simulate(self, client, onboarding_payload):
        """Test simulating a workflow."""
        response = client.post("/api/v1/workflows/simulate", json=onboarding_payload)
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert [step["nodeId"] for step in data["steps"]] == ["start", "collect", "approve", "account", "done"]
        assert data["steps"][1]["message"] == "Task assigned to Alice"
        assert data["steps"][0]["stepId"] == 1
        assert data["steps"][0]["status"] == "success"

    def test_simulate_without_entry(self, client):
        """Test that a missing entry is a failed trace, not an HTTP error."""
        payload = as_payload(make_graph([make_node("T", NodeKind.TASK)], []))
        response = client.post("/api/v1/workflows/simulate", json=payload)
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["steps"][0]["nodeLabel"] == "System"
        assert data["steps"][0]["nodeId"] is None

    def test_simulation_timeout(self, onboarding_payload):
        """Test that a simulation exceeding the timeout returns 504."""
        def slow_clock():
            time.sleep(0.2)
            return FIXED_TIME

        config = AppConfig(simulation_timeout=0.05, enable_performance_monitoring=False,
                           log_level=LogLevel.WARNING)
        app = create_app(config)
        init_dependencies(
            sandbox_service=SandboxService(simulator=WorkflowSimulator(clock=slow_clock), simulation_timeout=0.05),
            automation_catalog=AutomationCatalog(),
            config=config
        )

        response = TestClient(app).post("/api/v1/workflows/simulate", json=onboarding_payload)
        assert response.status_code == 504
        data = response.json()
        assert data["error"] == "SimulationTimeoutError"
        assert data["details"]["recoverable"] is True


class TestTestEndpoint:
    """Test cases for POST /api/v1/workflows/test."""

    def test_valid_workflow_has_trace(self, client, onboarding_payload):
        response = client.post("/api/v1/workflows/test", json=onboarding_payload)
        assert response.status_code == 200
        data = response.json()
        assert data["validation"]["valid"] is True
        assert len(data["trace"]["steps"]) == 5

    def test_invalid_workflow_has_no_trace(self, client, broken_payload):
        response = client.post("/api/v1/workflows/test", json=broken_payload)
        assert response.status_code == 200
        data = response.json()
        assert data["validation"]["valid"] is False
        assert data["trace"] is None


class TestAutomationEndpoints:
    """Test cases for the automation catalog endpoints."""

    def test_list_automations(self, client):
        response = client.get("/api/v1/automations")
        assert response.status_code == 200
        ids = [action["id"] for action in response.json()]
        assert ids == ["send_email", "generate_contract", "notify_slack", "create_user_account"]

    def test_get_automation(self, client):
        response = client.get("/api/v1/automations/notify_slack")
        assert response.status_code == 200
        assert response.json() == {"id": "notify_slack", "label": "Notify Slack Channel",
                                   "params": ["channel", "message"]}

    def test_get_unknown_automation(self, client):
        response = client.get("/api/v1/automations/fax")
        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "AutomationNotFoundError"
        assert data["context"]["action_id"] == "fax"


class TestApplicationSetup:
    """Test cases for application wiring."""

    def test_app_state_is_populated(self, client, testing_config):
        state = get_app_state()
        assert state.config is testing_config
        assert state.sandbox_service is not None
        assert state.automation_catalog is not None

    def test_monitoring_headers(self):
        """Test that monitoring middleware tags responses."""
        app = create_app(AppConfig(log_level=LogLevel.WARNING, enable_performance_monitoring=True))
        response = TestClient(app).get("/health")
        assert response.status_code == 200
        assert "X-Request-ID" in response.headers
        assert response.headers["X-Response-Time"].endswith("s")

    def test_monitoring_keeps_error_status(self):
        """Test that errors map to the same status through the middleware."""
        app = create_app(AppConfig(log_level=LogLevel.WARNING, enable_performance_monitoring=True))
        response = TestClient(app).get("/api/v1/automations/fax")
        assert response.status_code == 404
        assert "X-Request-ID" in response.headers
        assert response.json()["error"] == "AutomationNotFoundError"

    def test_monitoring_keeps_size_limit_status(self, onboarding_payload):
        """Test that an APIError raised by an endpoint keeps its status through the middleware."""
        config = AppConfig(log_level=LogLevel.WARNING, enable_performance_monitoring=True, max_graph_nodes=2)
        response = TestClient(create_app(config)).post("/api/v1/workflows/validate", json=onboarding_payload)
        assert response.status_code == 413
        assert response.json()["error"] == "APIError"
        assert "X-Request-ID" in response.headers
