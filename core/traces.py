# =============================================================================
# core/traces.py  —  Trace listing (pass-through)
# =============================================================================
#
# Traces are bound to OpenTelemetry service components through two tags,
# service.name and service.namespace.  list_traces() resolves a component
# id to those tags and returns the last hour of traces as-is, serialized
# to JSON.  No normalization happens here.
# =============================================================================

import json
from datetime import datetime, timedelta, timezone

from core.backend import Backend
from core.errors import InvalidArgumentError
from core.topology import simplify_components

OTEL_SERVICES_QUERY = '(label IN ("stackpack:open-telemetry") AND type IN ("otel service"))'
TRACE_LOOKBACK = timedelta(hours=1)
TRACE_PAGE_SIZE = 100


def list_traces(backend: Backend, component_id: int, now: datetime | None = None) -> str:
    """Return the last hour of traces for an OpenTelemetry service component.

    Raises:
        InvalidArgumentError: the component is unknown or lacks service tags.
        BackendError: the topology or trace query failed.
    """
    entities = simplify_components(backend.execute_topology_query(OTEL_SERVICES_QUERY))
    component = next((entity for entity in entities if entity.id == component_id), None)
    if component is None or not component.tags:
        raise InvalidArgumentError(f"component {component_id} not found among OpenTelemetry services")

    name = component.tag_value("service.name")
    namespace = component.tag_value("service.namespace")
    if not name or not namespace:
        raise InvalidArgumentError(
            f"component {component_id} has no service.name and service.namespace tags"
        )

    end = now or datetime.now(timezone.utc)
    result = backend.query_traces(
        start=end - TRACE_LOOKBACK,
        end=end,
        service_name=name,
        service_namespace=namespace,
        page=0,
        page_size=TRACE_PAGE_SIZE,
    )
    return json.dumps(result)
