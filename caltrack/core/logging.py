"""
Structured logging configuration.
Estimator calls are traced without exposing API keys.
"""
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from structlog.types import Processor

from caltrack.core.config import settings

_HANDLER_NAME = "caltrack"


def setup_logging() -> None:
    """Configure structured logging for the application."""

    # Common processors
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.LOG_FORMAT == "json":
        # JSON format for production
        renderer = structlog.processors.JSONRenderer()
    else:
        # Console format for development
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )

    # Configure root logger, replacing a handler from an earlier call
    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def _truncate_content(content: str, max_length: int = 0) -> str:
    """Truncate content if max_length is set."""
    if max_length <= 0:
        return content
    if len(content) <= max_length:
        return content
    return content[:max_length] + f"... [truncated, total {len(content)} chars]"


# ========================================
# Estimator Call Logging
# ========================================

class EstimatorCallTrace:
    """
    Timing and outcome of one estimator call.

    One summary event is logged when the call ends. Prompt and reply text
    are logged only when AI_DEBUG_LOG is enabled.
    """

    def __init__(self, logger: structlog.stdlib.BoundLogger, provider: str, model: str, endpoint: str):
        self.logger = logger.bind(
            call_id=uuid.uuid4().hex[:8],
            provider=provider,
            model=model,
            endpoint=endpoint,
        )
        self.show_content = settings.AI_DEBUG_LOG
        self.max_length = settings.AI_DEBUG_LOG_MAX_LENGTH
        self.started = time.perf_counter()
        self.prompt_chars = 0
        self.reply_chars = 0
        self.total_tokens: Optional[int] = None
        self.failure: Optional[tuple[str, str]] = None

    def _debug_content(self, event: str, content: str) -> None:
        if self.show_content:
            self.logger.debug(event, content=_truncate_content(content, self.max_length))

    def set_prompt(self, prompt: str) -> None:
        self.prompt_chars = len(prompt)
        self._debug_content("Estimator prompt", prompt)

    def set_response(self, content: str, total_tokens: Optional[int] = None) -> None:
        self.reply_chars = len(content)
        self.total_tokens = total_tokens
        self._debug_content("Estimator reply", content)

    def set_error(self, kind: str, message: str) -> None:
        self.failure = (kind, message)

    def finish(self) -> None:
        elapsed_ms = round((time.perf_counter() - self.started) * 1000, 2)
        if self.failure is None:
            self.logger.info(
                "Estimator call completed",
                duration_ms=elapsed_ms,
                prompt_chars=self.prompt_chars,
                reply_chars=self.reply_chars,
                total_tokens=self.total_tokens,
            )
        else:
            kind, message = self.failure
            self.logger.warning(
                "Estimator call failed",
                duration_ms=elapsed_ms,
                error_type=kind,
                error_message=message,
            )


@contextmanager
def trace_estimator_call(
    logger: structlog.stdlib.BoundLogger,
    provider: str,
    model: str,
    endpoint: str,
) -> Iterator[EstimatorCallTrace]:
    """Trace an estimator call, recording any exception that escapes it."""
    trace = EstimatorCallTrace(logger, provider, model, endpoint)
    try:
        yield trace
    except Exception as e:
        if trace.failure is None:
            trace.set_error(type(e).__name__, str(e))
        raise
    finally:
        trace.finish()
