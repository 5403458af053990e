"""
Constants used across the spancollector package.
"""

VERSION = "0.1.0"

LOG_TAG = "SpanCollector" # Used in all logging output to identify collector messages

DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_BATCH_SIZE = 100
DEFAULT_BATCH_INTERVAL_SECONDS = 1.0
DEFAULT_MAX_BACKLOG = 1000

# Ticks per batch interval: bounds time-trigger latency to ~10% of the interval
TICKS_PER_INTERVAL = 10

INSTRUMENTATION_NAME = "spancollector"
