"""
CLI command implementations.

This module wires the CLI options to the configuration loader and the
pipeline orchestrator.
"""

import logging
import signal
import threading

from rich.console import Console

from logship.application.orchestrator import PipelineOrchestrator
from logship.cli.output import render_configuration, render_stats
from logship.config.loader import load_configuration
from logship.core.exceptions import LogshipError

__all__ = ["run_command", "check_command"]

logger = logging.getLogger(__name__)

_SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _install_signal_handlers(cancel_event: threading.Event) -> dict:
    """Route SIGINT/SIGTERM to the cancel event; returns the previous handlers."""
    def request_shutdown(signum, frame):
        logger.info("Received %s, shutting down", signal.Signals(signum).name)
        cancel_event.set()

    previous = {}
    if threading.current_thread() is not threading.main_thread():
        return previous
    for signum in _SHUTDOWN_SIGNALS:
        previous[signum] = signal.signal(signum, request_shutdown)
    return previous


def _restore_signal_handlers(previous: dict) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)


def _all_sources_finished(orchestrator: PipelineOrchestrator) -> bool:
    sources = orchestrator.sources
    return bool(sources) and not any(getattr(s, "running", True) for s in sources)


def run_command(
    config_path: str,
    log_level: str,
    log_dir: str,
    stats_interval: float,
    console: Console,
    error_console: Console,
) -> int:
    """
    Assemble the pipeline and run it until interrupted.

    The pipeline also ends once every source has finished on its own
    (for instance stdin reaching EOF).

    Returns:
        Exit code (0 = success, 1 = fatal startup error)
    """
    cancel_event = threading.Event()

    try:
        orchestrator = PipelineOrchestrator.assemble(
            config_path,
            log_level,
            log_dir,
            cancel_event,
            console=error_console,
        )
    except LogshipError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        return 1

    previous_handlers = _install_signal_handlers(cancel_event)
    tick = stats_interval if stats_interval > 0 else 1.0

    try:
        while not cancel_event.wait(tick):
            if stats_interval > 0:
                logger.info(
                    "%d messages, %d open connections",
                    orchestrator.num_messages,
                    orchestrator.num_connections,
                )
            if _all_sources_finished(orchestrator):
                logger.info("All inputs finished")
                break
    finally:
        orchestrator.shutdown()
        _restore_signal_handlers(previous_handlers)
        if orchestrator.diagnostics is not None:
            orchestrator.diagnostics.close()

    if stats_interval > 0:
        render_stats(orchestrator.stats(), error_console)

    return 0


def check_command(
    config_path: str,
    console: Console,
    error_console: Console,
) -> int:
    """
    Load a configuration and show what it would build.

    Returns:
        Exit code (0 = valid, 1 = error)
    """
    try:
        configuration = load_configuration(config_path)
    except LogshipError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        return 1

    render_configuration(configuration, console)
    return 0
