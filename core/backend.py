# =============================================================================
# core/backend.py  —  SUSE Observability backend access
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Defines the Backend protocol (every call the tool layer makes against
#   the observability platform) and ObservabilityClient, the implementation
#   that speaks the SUSE Observability / StackState REST API over httpx.
#
# THE CONTRACT:
#   - Topology queries return RAW component dicts; core/topology.py owns
#     normalizing them.
#   - Monitor, check-state and metric calls return models from core/models.
#   - Every transport failure, backend-reported error or malformed payload
#     is raised as BackendError with the attempted query or parameter in
#     its message.
#   - No retries, no caching.  One call, one round-trip.
#
# Tests substitute an in-memory fake for this protocol, so nothing above
# this module needs network access to be exercised.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any, Protocol

import httpx

from core.errors import BackendError
from core.models import CheckState, HealthState, MetricSeries, MonitorSummary, Sample

logger = logging.getLogger(__name__)

UNEXPECTED_SHAPE = "unexpected response shape"


class Backend(Protocol):
    def execute_topology_query(self, query: str, at: datetime | None = None) -> list[dict]:
        ...

    def get_monitors_overview(self) -> list[MonitorSummary]:
        ...

    def get_monitor_check_states(
        self, monitor_id: int, state: HealthState, page_size: int, page_offset: int
    ) -> list[CheckState]:
        ...

    def list_metric_names(self, start: datetime, end: datetime) -> list[str]:
        ...

    def get_metric_label_keys(self, metric_name: str, start: datetime, end: datetime) -> list[str]:
        ...

    def query_range(
        self, query: str, start: datetime, end: datetime, step: str, timeout: str
    ) -> list[MetricSeries]:
        ...

    def query_traces(
        self,
        start: datetime,
        end: datetime,
        service_name: str,
        service_namespace: str,
        page: int = 0,
        page_size: int = 100,
    ) -> Any:
        ...


def _epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _rfc3339(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _parsed(parser, payload, operation: str, context: str):
    """Run ``parser`` on a decoded payload, reporting a malformed one as BackendError."""
    try:
        return parser(payload)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise BackendError(operation, context, UNEXPECTED_SHAPE) from e


# -----------------------------------------------------------------------------
# Response parsers (module-level so tests can feed them canned payloads)
# -----------------------------------------------------------------------------
def parse_monitors_overview(payload: dict) -> list[MonitorSummary]:
    monitors = []
    for item in payload.get("monitors") or []:
        monitor = item.get("monitor") or {}
        counters = item.get("runtimeMetrics") or {}
        monitors.append(MonitorSummary(
            id=int(monitor.get("id", 0)),
            name=monitor.get("name", ""),
            description=monitor.get("description") or "",
            critical_count=int(counters.get("criticalCount") or 0),
            deviating_count=int(counters.get("deviatingCount") or 0),
            unknown_count=int(counters.get("unknownCount") or 0),
            clear_count=int(counters.get("clearCount") or 0),
        ))
    return monitors


def parse_check_states(payload: dict) -> list[CheckState]:
    return [
        CheckState(
            name=state.get("name", ""),
            topology_element_id=int(state.get("topologyElementId") or 0),
            topology_element_id_type=state.get("topologyElementIdType") or "id",
        )
        for state in payload.get("states") or []
    ]


def parse_matrix(data: dict) -> list[MetricSeries]:
    """Parse a Prometheus ``matrix`` result into MetricSeries."""
    series = []
    for item in data.get("result") or []:
        samples = tuple(
            Sample(timestamp=float(ts), value=float(value))
            for ts, value in item.get("values") or []
        )
        series.append(MetricSeries(labels=dict(item.get("metric") or {}), samples=samples))
    return series


def attach_type_names(snapshot: dict) -> list[dict]:
    """Resolve numeric component type ids to names on each component.

    The snapshot lists component types once, in its metadata; components
    only reference them by id.  The name is stored as ``typeName``.
    """
    metadata = snapshot.get("metadata") or {}
    type_names = {
        component_type.get("id"): component_type.get("name")
        for component_type in metadata.get("componentTypes") or []
    }
    components = []
    for component in snapshot.get("components") or []:
        if component.get("type") in type_names:
            component = {**component, "typeName": type_names[component["type"]]}
        components.append(component)
    return components


# -----------------------------------------------------------------------------
# ObservabilityClient — httpx implementation of Backend
# -----------------------------------------------------------------------------
class ObservabilityClient:
    """Synchronous client for the SUSE Observability REST API."""

    def __init__(
        self,
        base_url: str,
        token: str,
        use_api_token: bool = False,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if use_api_token:
            headers["Authorization"] = f"ApiToken {token}"
        else:
            headers["X-API-Key"] = token

        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        context: str,
        params: dict | list | None = None,
        json: Any = None,
    ) -> Any:
        logger.debug("%s %s (%s)", method, path, context)
        try:
            response = self._client.request(method, path, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = e.response.text[:200]
            raise BackendError(
                operation, context, f"HTTP {e.response.status_code}: {body}"
            ) from e
        except httpx.HTTPError as e:
            raise BackendError(operation, context, str(e) or type(e).__name__) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise BackendError(operation, context, "response is not valid JSON") from e
        if not isinstance(payload, dict):
            raise BackendError(operation, context, UNEXPECTED_SHAPE)
        return payload

    def _prometheus(self, path: str, operation: str, context: str, params) -> Any:
        payload = self._request("GET", path, operation, context, params=params)
        if payload.get("status") != "success":
            detail = payload.get("error") or payload.get("errorType") or "unknown error"
            raise BackendError(operation, context, detail)
        return payload.get("data")

    # --- Topology ------------------------------------------------------------
    def execute_topology_query(self, query: str, at: datetime | None = None) -> list[dict]:
        body: dict[str, Any] = {
            "_type": "ViewSnapshotRequest",
            "query": query,
            "queryVersion": "0.0.1",
            "metadata": {
                "_type": "QueryMetadata",
                "groupingEnabled": False,
                "showIndirectRelations": False,
                "minGroupSize": 10,
                "groupedByLayer": False,
                "groupedByDomain": False,
                "groupedByRelation": False,
                "autoGrouping": False,
                "connectedComponents": False,
                "neighboringComponents": False,
                "showFullComponent": False,
            },
        }
        if at is not None:
            body["metadata"]["queryTime"] = _epoch_ms(at)

        context = f"query '{query}'"
        payload = self._request("POST", "/api/snapshot", "topology query", context, json=body)
        snapshot = payload.get("viewSnapshotResponse", payload)
        if not isinstance(snapshot, dict):
            raise BackendError("topology query", context, UNEXPECTED_SHAPE)
        if snapshot.get("_type") != "ViewSnapshot":
            detail = snapshot.get("message") or snapshot.get("_type") or UNEXPECTED_SHAPE
            raise BackendError("topology query", context, detail)
        return _parsed(attach_type_names, snapshot, "topology query", context)

    # --- Monitors ------------------------------------------------------------
    def get_monitors_overview(self) -> list[MonitorSummary]:
        payload = self._request(
            "GET", "/api/monitors/overview", "monitors overview", "all monitors"
        )
        return _parsed(parse_monitors_overview, payload, "monitors overview", "all monitors")

    def get_monitor_check_states(
        self, monitor_id: int, state: HealthState, page_size: int, page_offset: int
    ) -> list[CheckState]:
        context = f"monitor {monitor_id} in state {state.value}"
        payload = self._request(
            "GET",
            f"/api/monitors/{monitor_id}/checkStates",
            "monitor check states",
            context,
            params={"healthState": state.value, "limit": page_size, "offset": page_offset},
        )
        return _parsed(parse_check_states, payload, "monitor check states", context)

    # --- Metrics (Prometheus-compatible API) ---------------------------------
    def list_metric_names(self, start: datetime, end: datetime) -> list[str]:
        data = self._prometheus(
            "/api/metrics/label/__name__/values",
            "metric name listing",
            "all metrics",
            {"start": int(start.timestamp()), "end": int(end.timestamp())},
        )
        return list(data or [])

    def get_metric_label_keys(self, metric_name: str, start: datetime, end: datetime) -> list[str]:
        data = self._prometheus(
            "/api/metrics/labels",
            "metric label lookup",
            f"metric '{metric_name}'",
            [
                ("match[]", metric_name),
                ("start", int(start.timestamp())),
                ("end", int(end.timestamp())),
            ],
        )
        return list(data or [])

    def query_range(
        self, query: str, start: datetime, end: datetime, step: str, timeout: str
    ) -> list[MetricSeries]:
        data = self._prometheus(
            "/api/metrics/query_range",
            "metric range query",
            f"query '{query}'",
            {
                "query": query,
                "start": int(start.timestamp()),
                "end": int(end.timestamp()),
                "step": step,
                "timeout": timeout,
            },
        )
        return _parsed(parse_matrix, data or {}, "metric range query", f"query '{query}'")

    # --- Traces --------------------------------------------------------------
    def query_traces(
        self,
        start: datetime,
        end: datetime,
        service_name: str,
        service_namespace: str,
        page: int = 0,
        page_size: int = 100,
    ) -> Any:
        body = {
            "primarySpanFilter": {
                "attributes": {
                    "service.name": [service_name],
                    "service.namespace": [service_namespace],
                },
            },
        }
        return self._request(
            "POST",
            "/api/traces",
            "trace query",
            f"service '{service_namespace}/{service_name}'",
            params={
                "start": _rfc3339(start),
                "end": _rfc3339(end),
                "page": page,
                "pageSize": page_size,
            },
            json=body,
        )
