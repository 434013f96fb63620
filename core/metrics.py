# =============================================================================
# core/metrics.py  —  Metric Search & Range Queries
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   1. list_metrics: regex search over metric names, each shown with its
#      label keys (the dimensions the agent can filter or group by).
#   2. get_metrics:  PromQL range query rendered as ONE table, even when the
#      returned series carry different label sets.
#
# THE SCHEMA UNIFIER:
#   Series from one query rarely share a label set (one pod has "container",
#   another doesn't).  unified_label_keys() takes the union of every key,
#   drops "__name__", and sorts it.  Each series then fills the columns it
#   has and gets "-" in the rest:
#
#     | Timestamp            | Value  | container | pod   |
#     |----------------------|--------|-----------|-------|
#     | 2025-07-10T12:00:00Z | 0.5000 | app       | web-1 |
#     | 2025-07-10T12:00:00Z | 0.2500 | -         | web-2 |
#
#   Rows follow series order, then sample order: no re-sorting by time.
# =============================================================================

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Iterable

from core.backend import Backend
from core.bounded import bound
from core.errors import BackendError, InvalidArgumentError
from core.markdown import table
from core.models import MetricSeries
from core.timerange import parse_time

logger = logging.getLogger(__name__)

RESERVED_NAME_LABEL = "__name__"
NO_DATA = "no data found"
PLACEHOLDER = "-"

MAX_METRICS_WITH_LABELS = 50
METRIC_LOOKBACK = timedelta(hours=1)
DEFAULT_STEP = "1m"
QUERY_TIMEOUT = "30s"


# -----------------------------------------------------------------------------
# Formatting
# -----------------------------------------------------------------------------
def format_timestamp(timestamp: float) -> str:
    """RFC 3339 in UTC, e.g. ``2025-07-10T12:00:00Z``."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_value(value: float) -> str:
    return f"{value:.4f}"


# -----------------------------------------------------------------------------
# Metric Schema Unifier
# -----------------------------------------------------------------------------
def unified_label_keys(series: Iterable[MetricSeries]) -> list[str]:
    keys = set()
    for one in series:
        keys.update(one.labels)
    keys.discard(RESERVED_NAME_LABEL)
    return sorted(keys)


def render_series(series: list[MetricSeries]) -> str:
    if not series:
        return NO_DATA

    columns = unified_label_keys(series)
    rows = []
    for one in series:
        label_cells = [one.labels.get(key, PLACEHOLDER) for key in columns]
        for sample in one.samples:
            rows.append([format_timestamp(sample.timestamp), format_value(sample.value), *label_cells])

    return table(["Timestamp", "Value", *columns], rows)


def get_metrics(
    backend: Backend,
    query: str,
    start: str,
    end: str,
    step: str | None = None,
    now: datetime | None = None,
) -> str:
    """Run a PromQL range query and render every sample in one table.

    Raises:
        InvalidArgumentError: empty query, unparsable times, or start after end.
        BackendError: the range query failed.
    """
    if not query:
        raise InvalidArgumentError("query is required")
    now = now or datetime.now(timezone.utc)
    start_time = parse_time(start, now)
    end_time = parse_time(end, now)
    if start_time > end_time:
        raise InvalidArgumentError(f"start '{start}' is after end '{end}'")

    series = backend.query_range(query, start_time, end_time, step or DEFAULT_STEP, QUERY_TIMEOUT)
    if not series:
        return NO_DATA

    total_samples = sum(len(one.samples) for one in series)
    return (
        f"Query: `{query}`\n"
        f"Found {len(series)} series with {total_samples} sample(s):\n\n"
        + render_series(series)
    )


# -----------------------------------------------------------------------------
# Metric name search
# -----------------------------------------------------------------------------
def compile_pattern(search_pattern: str) -> re.Pattern:
    if not search_pattern:
        raise InvalidArgumentError("search_pattern is required")
    try:
        return re.compile(search_pattern)
    except re.error as e:
        raise InvalidArgumentError(f"invalid search pattern '{search_pattern}': {e}") from None


def _labels_cell(
    backend: Backend, metric_name: str, start: datetime, end: datetime
) -> str:
    try:
        keys = backend.get_metric_label_keys(metric_name, start, end)
    except BackendError as e:
        logger.warning("Label lookup for metric %r failed: %s", metric_name, e)
        return PLACEHOLDER
    keys = sorted(set(keys) - {RESERVED_NAME_LABEL})
    return ", ".join(keys) if keys else PLACEHOLDER


def list_metrics(
    backend: Backend, search_pattern: str, now: datetime | None = None
) -> str:
    """Find metrics whose name matches ``search_pattern`` and show their labels.

    Raises:
        InvalidArgumentError: empty or unparsable pattern.
        BackendError: the metric name listing failed.
    """
    pattern = compile_pattern(search_pattern)
    end = now or datetime.now(timezone.utc)
    start = end - METRIC_LOOKBACK

    names = sorted(name for name in backend.list_metric_names(start, end) if pattern.search(name))
    if not names:
        return f"No metrics found matching pattern: {search_pattern}"

    shown = bound(names, MAX_METRICS_WITH_LABELS)
    rows = [(name, _labels_cell(backend, name, start, end)) for name in shown.shown]

    output = (
        f"Found {shown.total} metric(s) matching pattern: {search_pattern}\n\n"
        + table(("Metric", "Labels"), rows)
    )
    if shown.truncated:
        output += (
            f"\nShowing first {len(shown.shown)} of {shown.total} matching metrics. "
            f"Refine the search pattern to narrow the results.\n"
        )
    return output
