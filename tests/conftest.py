"""
Pytest configuration and shared fixtures.

FakeBackend implements the Backend protocol in memory.  Tests fill in its
canned data, optionally mark lookups as failing, and inspect ``calls`` to
check what would have been sent to SUSE Observability.
"""

from datetime import datetime, timezone

import pytest

from core.errors import BackendError
from core.models import CheckState, MetricSeries, MonitorSummary, Sample

NOW = datetime(2025, 7, 10, 12, 0, 0, tzinfo=timezone.utc)


class FakeBackend:
    def __init__(self):
        self.components: list[dict] = []
        self.monitors: list[MonitorSummary] = []
        self.check_states: dict[int, list[CheckState]] = {}
        self.failing_check_states: set[int] = set()
        self.metric_names: list[str] = []
        self.label_keys: dict[str, list[str]] = {}
        self.failing_labels: set[str] = set()
        self.series: list[MetricSeries] = []
        self.traces: dict = {"traces": []}
        self.fail_all: str | None = None
        self.calls: list[tuple] = []

    def _maybe_fail(self, operation: str, context: str):
        if self.fail_all:
            raise BackendError(operation, context, self.fail_all)

    def execute_topology_query(self, query, at=None):
        self.calls.append(("topology", query, at))
        self._maybe_fail("topology query", f"query '{query}'")
        return list(self.components)

    def get_monitors_overview(self):
        self.calls.append(("monitors",))
        self._maybe_fail("monitors overview", "all monitors")
        return list(self.monitors)

    def get_monitor_check_states(self, monitor_id, state, page_size, page_offset):
        self.calls.append(("check_states", monitor_id, state, page_size, page_offset))
        if monitor_id in self.failing_check_states:
            raise BackendError("monitor check states", f"monitor {monitor_id}", "HTTP 503")
        states = self.check_states.get(monitor_id, [])
        return states[page_offset * page_size:(page_offset + 1) * page_size]

    def list_metric_names(self, start, end):
        self.calls.append(("metric_names", start, end))
        self._maybe_fail("metric name listing", "all metrics")
        return list(self.metric_names)

    def get_metric_label_keys(self, metric_name, start, end):
        self.calls.append(("label_keys", metric_name))
        if metric_name in self.failing_labels:
            raise BackendError("metric label lookup", f"metric '{metric_name}'", "timeout")
        return list(self.label_keys.get(metric_name, []))

    def query_range(self, query, start, end, step, timeout):
        self.calls.append(("query_range", query, start, end, step, timeout))
        self._maybe_fail("metric range query", f"query '{query}'")
        return list(self.series)

    def query_traces(self, start, end, service_name, service_namespace, page=0, page_size=100):
        self.calls.append(("traces", start, end, service_name, service_namespace, page, page_size))
        self._maybe_fail("trace query", f"service '{service_namespace}/{service_name}'")
        return self.traces


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def now():
    return NOW


def check_states(count: int, start_id: int = 100) -> list[CheckState]:
    """``count`` check states named pod-0.. with ids start_id.."""
    return [CheckState(name=f"pod-{i}", topology_element_id=start_id + i) for i in range(count)]


def series(labels: dict, *points: tuple[float, float]) -> MetricSeries:
    return MetricSeries(labels=labels, samples=tuple(Sample(ts, value) for ts, value in points))
