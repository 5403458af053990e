"""
Collector configuration. Values come from explicit arguments, then environment variables, then defaults.
"""

import logging
import math
import os
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from .constants import (
    LOG_TAG,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_BATCH_SIZE,
    DEFAULT_BATCH_INTERVAL_SECONDS,
    DEFAULT_MAX_BACKLOG,
)
from .http_utils import get_collector_url
from .object_serialiser import toNumber

logger = logging.getLogger(LOG_TAG)

T = TypeVar("T")


def _positive_seconds(value: float) -> bool:
    return math.isfinite(value) and value > 0


def _at_least_one(value: int) -> bool:
    return value >= 1


def _from_env(env_var: str, parse: Callable[[str], T], default: T, valid: Callable[[T], bool]) -> T:
    """Read a setting from the environment, logging and falling back to default on an unparseable or out-of-range value."""
    raw = os.getenv(env_var)
    if not raw:
        return default
    try:
        value = parse(raw)
    except ValueError:
        value = None
    if value is None or not valid(value):
        logger.warning(f"Invalid {env_var} value '{raw}', using default {default}")
        return default
    return value


@dataclass(frozen=True)
class CollectorConfig:
    """
    Immutable settings for an HTTPCollector.

    Attributes:
        url: Collection endpoint that receives one POST per flush
        logger: Diagnostic sink for evictions and failed sends
        timeout: Per-request deadline in seconds
        batch_size: Buffer size that triggers an immediate flush
        batch_interval: Maximum seconds spans wait before a time-triggered flush
        max_backlog: Buffer capacity; the oldest spans are evicted beyond it
    """

    url: str
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(LOG_TAG), compare=False)
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    batch_size: int = DEFAULT_BATCH_SIZE
    batch_interval: float = DEFAULT_BATCH_INTERVAL_SECONDS
    max_backlog: int = DEFAULT_MAX_BACKLOG

    def __post_init__(self):
        if not self.url:
            raise ValueError("url is required: pass url= or set SPANCOLLECTOR_URL")
        if not _positive_seconds(self.timeout):
            raise ValueError(f"timeout must be a positive, finite number of seconds, got {self.timeout}")
        if not _at_least_one(self.batch_size):
            raise ValueError(f"batch_size must be at least 1, got {self.batch_size}")
        if not _positive_seconds(self.batch_interval):
            raise ValueError(f"batch_interval must be a positive, finite number of seconds, got {self.batch_interval}")
        if not _at_least_one(self.max_backlog):
            raise ValueError(f"max_backlog must be at least 1, got {self.max_backlog}")

    @classmethod
    def create(
        cls,
        url: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        timeout: Optional[float] = None,
        batch_size: Optional[int] = None,
        max_backlog: Optional[int] = None,
        batch_interval: Optional[float] = None,
    ) -> "CollectorConfig":
        """
        Build a config, filling unset options from the environment.

        Environment variables:
            SPANCOLLECTOR_URL (or OTEL_EXPORTER_OTLP_TRACES_ENDPOINT / OTEL_EXPORTER_OTLP_ENDPOINT)
            SPANCOLLECTOR_TIMEOUT_SECONDS, SPANCOLLECTOR_BATCH_INTERVAL_SECONDS: floats
            SPANCOLLECTOR_BATCH_SIZE, SPANCOLLECTOR_MAX_BACKLOG: integers, k/m suffixes accepted
        """
        if timeout is None:
            timeout = _from_env("SPANCOLLECTOR_TIMEOUT_SECONDS", float, DEFAULT_TIMEOUT_SECONDS, _positive_seconds)
        if batch_size is None:
            batch_size = _from_env("SPANCOLLECTOR_BATCH_SIZE", toNumber, DEFAULT_BATCH_SIZE, _at_least_one)
        if max_backlog is None:
            max_backlog = _from_env("SPANCOLLECTOR_MAX_BACKLOG", toNumber, DEFAULT_MAX_BACKLOG, _at_least_one)
        if batch_interval is None:
            batch_interval = _from_env(
                "SPANCOLLECTOR_BATCH_INTERVAL_SECONDS", float, DEFAULT_BATCH_INTERVAL_SECONDS, _positive_seconds
            )
        return cls(
            url=get_collector_url(url),
            logger=logger or logging.getLogger(LOG_TAG),
            timeout=timeout,
            batch_size=batch_size,
            batch_interval=batch_interval,
            max_backlog=max_backlog,
        )
