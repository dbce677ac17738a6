"""Main module entrypoint for local runtime execution.

This module validates startup configuration, bootstraps the controller and
either serves the HTTP surface, runs the reconcile loop, or reconciles once.
"""

import argparse
import logging
import threading

import uvicorn

from jhipster_operator.bootstrap import (
    bootstrap_create_application,
    bootstrap_create_controller,
    bootstrap_run_reconcile_loop,
    bootstrap_start_reconcile_thread,
)
from jhipster_operator.config import OperatorSettings, config_load_settings

logger = logging.getLogger(__name__)


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        SystemExit: Raised with status 1 when bootstrap or a one-shot reconcile fails.
    """

    argument_parser = argparse.ArgumentParser(description="JHipster K8s Operator runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "run", "reconcile-once"),
        help="Runtime command: `api` serves HTTP with scheduled reconcile, `run` reconciles on a timer "
        "without HTTP, `reconcile-once` bootstraps and reconciles a single time",
        type=str,
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    main_configure_logging(settings)

    if parsed_arguments.command == "reconcile-once":
        controller = bootstrap_create_controller(settings=settings)
        if not controller.controller_bootstrap():
            raise SystemExit(1)
        result = controller.controller_reconcile()
        if result.failed:
            raise SystemExit(1)
        return

    if parsed_arguments.command == "run":
        controller = bootstrap_create_controller(settings=settings)
        if not controller.controller_bootstrap():
            logger.error("Operator not initialized, check that the custom resource definitions are installed")
            raise SystemExit(1)
        bootstrap_run_reconcile_loop(
            controller=controller,
            interval_seconds=settings.reconcile_interval_seconds,
            stop_event=threading.Event(),
        )
        return

    application, controller = bootstrap_create_application(settings=settings)
    if not controller.controller_bootstrap():
        logger.error("Operator not initialized; toggle DELETE /status twice to retry bootstrap")
    _, stop_event = bootstrap_start_reconcile_thread(
        controller=controller,
        interval_seconds=settings.reconcile_interval_seconds,
    )
    try:
        uvicorn.run(
            application,
            host=settings.application_host,
            port=settings.application_port,
        )
    finally:
        stop_event.set()


def main_configure_logging(settings: OperatorSettings) -> None:
    """Configure root logging from settings."""

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s",
    )


if __name__ == "__main__":
    main()
