# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
structlog configuration for himark.

Module loggers are structlog BoundLoggers wrapping stdlib loggers under the
`himark` namespace, so levels and handlers are plain stdlib logging. Without
`configure_logging` nothing below WARNING is emitted.

Two output modes once configured, both on stderr:
- human (default): console renderer, colored when stderr is a tty
- JSON (--log-json): one JSON object per line
"""

from __future__ import annotations

import logging
import sys

import structlog

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
	structlog.contextvars.merge_contextvars,
	structlog.stdlib.add_log_level,
	structlog.stdlib.add_logger_name,
	structlog.processors.TimeStamper(fmt="iso"),
	structlog.processors.StackInfoRenderer(),
	structlog.processors.UnicodeDecoder(),
]


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
	return structlog.wrap_logger(
		logging.getLogger(name),
		processors=[
			structlog.stdlib.filter_by_level,
			*_SHARED_PROCESSORS,
			structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
		],
		wrapper_class=structlog.stdlib.BoundLogger,
	)


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
	"""
	Attach a stderr handler to the `himark` logger.

	verbose: enable DEBUG output (WARNING otherwise).
	log_json: use the JSON renderer instead of the console renderer.
	"""
	level = logging.DEBUG if verbose else logging.WARNING

	if log_json:
		renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
	else:
		renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

	formatter = structlog.stdlib.ProcessorFormatter(
		foreign_pre_chain=_SHARED_PROCESSORS,
		processors=[
			structlog.stdlib.ProcessorFormatter.remove_processors_meta,
			renderer,
		],
	)

	handler = logging.StreamHandler(sys.stderr)
	handler.setFormatter(formatter)

	logger = logging.getLogger("himark")
	logger.handlers.clear()
	logger.addHandler(handler)
	logger.setLevel(level)
	logger.propagate = False


__all__ = ["get_logger", "configure_logging"]
