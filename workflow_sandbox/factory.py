"""Application factory for creating FastAPI instances."""

from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .config import AppConfig, get_config, validate_config
from .core.logging import setup_logging, get_logger
from .core.automation_catalog import AutomationCatalog
from .core.exceptions import WorkflowSandboxError, create_error_response
from .core.middleware import get_status_code_for_error
from .core.sandbox import SandboxService
from .api.endpoints import router, init_dependencies


class ApplicationState:
    """Container for application state and components."""

    def __init__(self):
        self.config: Optional[AppConfig] = None
        self.sandbox_service: Optional[SandboxService] = None
        self.automation_catalog: Optional[AutomationCatalog] = None


# Global application state
app_state = ApplicationState()


def initialize_core_components(config: AppConfig, logger) -> tuple:
    """Initialize core application components and wire the API dependencies."""
    sandbox_service = SandboxService(simulation_timeout=config.simulation_timeout)
    automation_catalog = AutomationCatalog()

    app_state.config = config
    app_state.sandbox_service = sandbox_service
    app_state.automation_catalog = automation_catalog

    init_dependencies(
        sandbox_service=sandbox_service,
        automation_catalog=automation_catalog,
        config=config
    )

    logger.info(f"Core components initialized with {len(automation_catalog.list_actions())} automations")
    return sandbox_service, automation_catalog


def create_lifespan_handler(config: AppConfig):
    """Create application lifespan handler."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(
            level=config.log_level.value,
            log_file=config.log_file,
            log_format=config.log_format,
            structured=config.structured_logging,
            max_size=config.log_max_size,
            backup_count=config.log_backup_count
        )
        logger = get_logger(__name__)
        logger.info(f"Starting {config.app_name} v{config.app_version}")

        yield

        logger.info(f"Shutting down {config.app_name}")

    return lifespan


async def handle_sandbox_error(request: Request, error: WorkflowSandboxError) -> JSONResponse:
    """Render a WorkflowSandboxError raised by an endpoint."""
    get_logger(__name__).warning(
        f"{error.error_code} on {request.method} {request.url.path}: {error.message}",
        extra={"extra_fields": {"error_details": error.to_dict()}}
    )
    return JSONResponse(
        status_code=get_status_code_for_error(error),
        content=create_error_response(error)
    )


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Create and configure FastAPI application instance."""

    if config is None:
        config = get_config()

    validate_config(config)

    app = FastAPI(
        title=config.app_name,
        description="Validate workflow graphs and simulate their execution",
        version=config.app_version,
        debug=config.debug,
        lifespan=create_lifespan_handler(config)
    )

    # Components are wired eagerly so the app works without running its lifespan
    initialize_core_components(config, get_logger(__name__))

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=config.cors_methods,
            allow_headers=["*"],
        )

    if config.enable_performance_monitoring:
        from .core.middleware import ErrorHandlingMiddleware, PerformanceMonitoringMiddleware

        app.add_middleware(ErrorHandlingMiddleware)
        app.add_middleware(PerformanceMonitoringMiddleware, slow_request_threshold=config.slow_request_threshold)

    app.add_exception_handler(WorkflowSandboxError, handle_sandbox_error)

    app.include_router(router)

    add_health_endpoints(app, config)

    return app


def add_health_endpoints(app: FastAPI, config: AppConfig) -> None:
    """Add health check endpoints to the application."""

    @app.get("/")
    async def root():
        """Root endpoint for basic health check."""
        return {"message": f"{config.app_name} is running", "version": config.app_version}

    @app.get("/health")
    async def health_check():
        """Basic health check endpoint."""
        return {
            "status": "healthy",
            "service": config.app_name.lower().replace(" ", "-"),
            "version": config.app_version
        }


def get_app_state() -> ApplicationState:
    """Get the current application state."""
    return app_state
