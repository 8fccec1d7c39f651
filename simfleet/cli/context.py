"""CLI runtime context — settings, logging, and the sync/async bridge."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any, Coroutine

import structlog

from simfleet.config import SimfleetSettings
from simfleet.exceptions import ConfigurationError, SinkClientError
from simfleet.sink.base import BaseSink
from simfleet.sink.elasticsearch import ElasticsearchSink
from simfleet.sink.stream import JsonLinesSink

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send stdlib and structlog output to stderr at ``level``."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO

    logging.basicConfig(stream=sys.stderr, level=numeric, format=LOG_FORMAT, force=True)
    logging.getLogger("httpx").setLevel(max(numeric, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def resolve_settings(base: SimfleetSettings, **overrides: Any) -> SimfleetSettings:
    """Apply non-None CLI overrides on top of ``base``.

    Explicit overrides are checked first and rejected if unusable; the
    merged result then goes back through the settings validators.
    """
    update = {k: v for k, v in overrides.items() if v is not None}

    if update.get("server_count", 1) <= 0:
        raise ConfigurationError(
            f"server count must be positive, got {update['server_count']}"
        )
    if update.get("interval_seconds", 0) < 0:
        raise ConfigurationError(
            f"interval must not be negative, got {update['interval_seconds']}"
        )
    if update.get("request_timeout", 1) <= 0:
        raise ConfigurationError(
            f"request timeout must be positive, got {update['request_timeout']}"
        )
    for name in ("es_index", "es_server"):
        if name in update and not str(update[name]).strip():
            raise ConfigurationError(f"{name} must not be blank")

    return type(base).model_validate({**base.model_dump(), **update})


def build_sink(settings: SimfleetSettings, dry_run: bool = False) -> BaseSink:
    """Construct the sink. Raises SinkClientError if it can't be built."""
    if dry_run:
        return JsonLinesSink()
    try:
        return ElasticsearchSink.from_settings(settings)
    except SinkClientError:
        raise
    except Exception as e:
        raise SinkClientError(f"Could not create Elasticsearch client: {e}") from e


def run_async(coro: Coroutine) -> Any:
    """Run an async coroutine from sync CLI code."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop and loop.is_running():
        import concurrent.futures
        with concurrent.futures.ThreadPoolExecutor() as pool:
            return pool.submit(asyncio.run, coro).result()
    return asyncio.run(coro)
