# ─────────────────────────────────────────────────────────────────────────────
# Logging Configuration — structlog over stdlib logging
# ─────────────────────────────────────────────────────────────────────────────


import logging
import sys

import structlog

# Third-party loggers that log every outbound request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "google_genai", "google_genai.models")


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Configure structlog for structured logging.

    JSON output gives one parseable object per line (timestamp, level,
    logger name, structured fields). Console output is for local development.
    Exceptions passed via ``exc_info`` are rendered into the event so the
    full model/SDK error stays in the server log and never in a response.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer: structlog.types.Processor
    final_processors: list[structlog.types.Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
    ]
    if json_output:
        final_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()
    final_processors.append(renderer)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    # shared_processors already ran inside structlog.configure(); only the
    # rendering steps belong here, otherwise timestamps are added twice.
    formatter = structlog.stdlib.ProcessorFormatter(processors=final_processors)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper()))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))
