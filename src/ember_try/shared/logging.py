"""Logging setup for ember-try.

Diagnostics (adapter steps, spawned commands, cleanup) are logged through
structlog on top of standard logging. Scenario output is not logging: the
reporter writes it with click.echo, so the log level never hides a result
line.

Interactive runs get a console renderer on stderr; ``--log-file`` switches to
one JSON object per line so CI can keep the log as an artifact.
"""

import logging
import sys
from pathlib import Path

import structlog

VERBOSITY_LEVELS = {0: "warning", 1: "info"}

SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def level_for_verbosity(verbose: int, quiet: bool = False) -> str:
    """Map the CLI -v/-q flags to a log level name."""
    if quiet:
        return "error"
    return VERBOSITY_LEVELS.get(verbose, "debug")


def _handler(log_file: str | Path | None) -> logging.Handler:
    if log_file:
        return logging.FileHandler(str(log_file), encoding="utf-8")
    return logging.StreamHandler(sys.stderr)


def _renderer(json_output: bool) -> list[structlog.types.Processor]:
    if json_output:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(
    level: str = "warning",
    log_file: str | Path | None = None,
    json_output: bool = False,
) -> None:
    """Configure standard logging and structlog for a CLI invocation.

    Args:
        level: Log level name (debug, info, warning, error, critical);
            unknown names fall back to warning
        log_file: Write logs to this file instead of stderr
        json_output: Render one JSON object per line
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    handler = _handler(log_file)
    handler.setLevel(log_level)
    logging.basicConfig(level=log_level, handlers=[handler], format="%(message)s", force=True)

    structlog.configure(
        processors=[*SHARED_PROCESSORS, *_renderer(json_output)],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to ``name`` (typically __name__)."""
    return structlog.get_logger(name)
