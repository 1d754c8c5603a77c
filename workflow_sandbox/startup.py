"""Application startup script and CLI interface."""

import sys
import argparse
from typing import List, Optional

from workflow_sandbox.config import (
    AppConfig,
    LogLevel,
    load_config,
    get_development_config,
    get_production_config,
    get_testing_config,
    validate_config
)
from workflow_sandbox.core.exceptions import WorkflowSandboxError, WorkflowFormatError
from workflow_sandbox.core.graph_validator import WorkflowValidator
from workflow_sandbox.core.logging import setup_logging, get_logger
from workflow_sandbox.core.sandbox import SandboxService
from workflow_sandbox.core.serialization import load_workflow
from workflow_sandbox.core.simulator import WorkflowSimulator
from workflow_sandbox.models.core import ExecutionTrace, ValidationResult

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BAD_INPUT = 2


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        prog="workflow-sandbox",
        description="Workflow Sandbox - validate workflow graphs and simulate their execution"
    )

    parser.add_argument(
        "--env",
        choices=["development", "production", "testing"],
        help="Environment configuration preset"
    )

    parser.add_argument(
        "--config",
        help="Path to a .env configuration file"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level"
    )

    parser.add_argument(
        "--log-file",
        help="Path to log file"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the workflow sandbox API server")
    serve_parser.add_argument("--host", help="Host to bind the server to")
    serve_parser.add_argument("--port", type=int, help="Port to bind the server to")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")

    for name, help_text in (
        ("validate", "Validate a workflow JSON file"),
        ("simulate", "Simulate a workflow JSON file without validating it"),
        ("test", "Validate a workflow JSON file and simulate it when valid"),
    ):
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument("file", help="Path to the workflow JSON file")
        command_parser.add_argument(
            "--json",
            action="store_true",
            help="Print the result as JSON instead of text"
        )

    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="config_command", help="Config commands")

    config_subparsers.add_parser("show", help="Show current configuration")
    config_subparsers.add_parser("validate", help="Validate configuration")

    return parser


def load_configuration(args: argparse.Namespace) -> AppConfig:
    """Load configuration based on command line arguments."""

    if args.env == "development":
        config = get_development_config()
    elif args.env == "production":
        config = get_production_config()
    elif args.env == "testing":
        config = get_testing_config()
    else:
        config = load_config(args.config)

    # Override with command line arguments
    if getattr(args, "host", None):
        config.host = args.host
    if getattr(args, "port", None):
        config.port = args.port
    if getattr(args, "reload", False):
        config.reload = True
        config.debug = True
    if args.log_level:
        config.log_level = LogLevel(args.log_level)
    if args.log_file:
        config.log_file = args.log_file
    if args.debug:
        config.debug = True

    return config


def run_server(config: AppConfig):
    """Run the workflow sandbox server."""
    import uvicorn
    from workflow_sandbox.factory import create_app

    logger = get_logger(__name__)
    logger.info(f"Starting server on {config.host}:{config.port}")

    app = create_app(config)
    uvicorn.run(app, **config.get_uvicorn_config())


def print_validation(result: ValidationResult) -> None:
    if result.valid:
        print("Workflow is valid.")
    else:
        print(f"Workflow is invalid ({len(result.errors)} errors):")
        for error in result.errors:
            print(f"  - {error}")
        print(f"Invalid nodes: {', '.join(result.invalid_node_ids) or 'none'}")
    for warning in result.warnings:
        print(f"  warning: {warning}")


def print_trace(trace: ExecutionTrace) -> None:
    for step in trace.steps:
        kind = step.node_kind.value if step.node_kind else "system"
        print(f"{step.step_id:>3}. [{step.status.value}] {kind:<10} {step.node_label}: {step.message}")
    print("Simulation succeeded." if trace.success else "Simulation failed.")


def run_workflow_command(command: str, path: str, as_json: bool, config: AppConfig) -> int:
    """Run validate, simulate or test on a workflow file and return the exit code."""
    logger = get_logger(__name__)

    try:
        graph = load_workflow(path)
    except WorkflowFormatError as e:
        logger.error(f"Cannot load workflow: {e.message}")
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_BAD_INPUT

    if command == "validate":
        result = WorkflowValidator().validate(graph)
        if as_json:
            print(result.model_dump_json(by_alias=True, indent=2))
        else:
            print_validation(result)
        return EXIT_OK if result.valid else EXIT_FAILED

    if command == "simulate":
        trace = WorkflowSimulator().simulate(graph)
        if as_json:
            print(trace.model_dump_json(by_alias=True, indent=2))
        else:
            print_trace(trace)
        return EXIT_OK if trace.success else EXIT_FAILED

    sandbox = SandboxService(simulation_timeout=config.simulation_timeout)
    outcome = sandbox.test_workflow(graph)
    if as_json:
        print(outcome.model_dump_json(by_alias=True, indent=2))
    else:
        print_validation(outcome.validation)
        if outcome.trace is not None:
            print_trace(outcome.trace)
    if outcome.trace is None or not outcome.trace.success:
        return EXIT_FAILED
    return EXIT_OK


def show_configuration(config: AppConfig):
    """Show current configuration."""
    print("Current Configuration:")
    print(f"  App Name: {config.app_name}")
    print(f"  Version: {config.app_version}")
    print(f"  Debug: {config.debug}")
    print(f"  Host: {config.host}")
    print(f"  Port: {config.port}")
    print(f"  Log Level: {config.log_level.value}")
    print(f"  Simulation Timeout: {config.simulation_timeout}s")
    print(f"  Max Graph Nodes: {config.max_graph_nodes}")


def validate_configuration_command(config: AppConfig) -> int:
    """Validate configuration and show results."""
    try:
        validate_config(config)
        print("Configuration validation: PASSED")
        print("All configuration settings are valid.")
        return EXIT_OK
    except WorkflowSandboxError as e:
        print("Configuration validation: FAILED")
        print(f"Error: {e.message}")
        return EXIT_FAILED


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command line interface."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        config = load_configuration(args)
    except (WorkflowSandboxError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED

    setup_logging(
        level=config.log_level.value,
        log_file=config.log_file,
        structured=config.structured_logging,
        # Keep stdout for command output
        stream=sys.stderr
    )

    if args.command == "serve" or args.command is None:
        if validate_configuration_command(config) != EXIT_OK:
            return EXIT_FAILED
        run_server(config)
        return EXIT_OK

    if args.command in ("validate", "simulate", "test"):
        return run_workflow_command(args.command, args.file, args.json, config)

    if args.command == "config":
        if args.config_command == "show":
            show_configuration(config)
            return EXIT_OK
        if args.config_command == "validate":
            return validate_configuration_command(config)
        print("Configuration command required. Use --help for options.")
        return EXIT_FAILED

    parser.print_help()
    return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
