# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Defines ALL MCP tools that the agent can call.  Each tool is a thin
#   wrapper around a core/ flow: it parses parameters, hands the shared
#   Backend to core/, and returns the rendered text.
#
# HOW IT WORKS (the flow):
#   1. The agent decides it needs information (e.g., what is critical)
#   2. It calls a tool by name via MCP (e.g., "getMonitors")
#   3. FastMCP routes the call to the decorated function below
#   4. The function calls core/ logic, which queries the backend and
#      renders a bounded Markdown table or a short message
#   5. The agent receives text it can quote directly
#
# TOOLS:
#   getComponents   topology search by filters or raw STQL
#   getMonitors     monitors in a health state, with affected components
#   listMetrics     metric names matching a regex, with their label keys
#   getMetrics      PromQL range query as a table
#   queryTopology   raw STQL, JSON out (pass-through)
#   listTraces      traces of an OpenTelemetry service (pass-through)
#
# ERRORS:
#   core/ raises ObservabilityError subclasses; they are re-raised here as
#   FastMCP ToolError so the client receives an error result carrying the
#   message.  Empty results are NOT errors: they come back as plain text.
#
# RUNNING THIS SERVER:
#   python -m tools.mcp_server             (stdio transport)
#   MCP_HTTP_ADDRESS=:8080 python -m tools.mcp_server   (streamable HTTP)
# =============================================================================

import logging
import sys
from contextlib import contextmanager
from functools import lru_cache

from dotenv import load_dotenv
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from core.backend import Backend, ObservabilityClient
from core.config import load_settings
from core.errors import ObservabilityError
from core.metrics import get_metrics as run_range_query
from core.metrics import list_metrics as search_metrics
from core.monitors import get_monitors as list_monitors
from core.stql import filter_spec_from_params, neighbor_spec_from_params
from core.timerange import parse_time
from core.topology import get_components as search_components
from core.topology import query_topology as run_topology_query
from core.traces import list_traces as fetch_traces

load_dotenv()

# =============================================================================
# Logging Setup
# =============================================================================
# We log to STDERR because the MCP server talks to the agent over STDOUT
# when using the stdio transport.  Anything printed to stdout would corrupt
# the MCP message stream.
#
# ANSI COLOR CODES:
#     - CYAN for incoming requests (tool name + parameters)
#     - GREEN for responses
#     - YELLOW for intermediate status/progress messages
# =============================================================================

_CYAN = "\033[36m"     # Requests (tool calls with params)
_GREEN = "\033[32m"    # Responses
_YELLOW = "\033[33m"   # Status/progress messages
_RESET = "\033[0m"     # Reset to default terminal color

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: str) -> str:
    """Log the first line and size of a response in GREEN, then return it."""
    first_line = result.split("\n", 1)[0]
    logging.info(f"{_GREEN}  ← {tool_name} response ({len(result)} chars): {first_line}{_RESET}")
    return result


@contextmanager
def _tool_errors(tool_name: str):
    """Turn core errors into ToolError for the MCP client."""
    try:
        yield
    except ObservabilityError as e:
        _log_status(f"{tool_name} failed: {e}")
        raise ToolError(str(e)) from e


@lru_cache(maxsize=1)
def _backend() -> Backend:
    """The process-wide backend client, built from the environment on first use."""
    settings = load_settings()
    _log_status(f"Connecting to {settings.url}")
    return ObservabilityClient(
        settings.url,
        settings.token,
        use_api_token=settings.use_api_token,
        timeout=settings.timeout,
    )


# =============================================================================
# Create the FastMCP server instance
# =============================================================================
mcp = FastMCP("SUSE Observability MCP server")


# =============================================================================
# TOOL 1: getComponents
# =============================================================================
@mcp.tool(name="getComponents")
def get_components(
    query: str = "",
    name_pattern: str = "",
    type: str = "",
    layer: str = "",
    domain: str = "",
    healthstate: str = "",
    with_neighbors: bool = False,
    with_neighbors_levels: int | str = "1",
    with_neighbors_direction: str = "both",
) -> str:
    """Search for topology components using STQL filters.

    Either 'query' or at least one simple filter must be provided.

    Args:
        query: Raw STQL query for advanced filtering (overrides every other filter).
            Example: 'layer = "Containers" AND (healthstate = "CRITICAL" OR healthstate = "DEVIATING")'
        name_pattern: Component name with wildcard support (e.g., 'checkout*', 'redis*').
        type: Component type filter (e.g., 'pod', 'service', 'deployment').
        layer: Layer filter (e.g., 'Containers', 'Services').
        domain: Domain filter (e.g., 'cluster.example.com').
        healthstate: Health state filter (e.g., 'CRITICAL', 'DEVIATING', 'CLEAR').
        with_neighbors: Also include components connected to the matches.
        with_neighbors_levels: Number of levels (1-14) or 'all' (default: 1).
        with_neighbors_direction: 'up', 'down', or 'both' (default: both).

    Returns:
        A markdown table of matching components with their IDs and identifiers.
    """
    _log_request("getComponents",
                 query=query, name_pattern=name_pattern, type=type, layer=layer,
                 domain=domain, healthstate=healthstate, with_neighbors=with_neighbors,
                 with_neighbors_levels=with_neighbors_levels,
                 with_neighbors_direction=with_neighbors_direction)

    with _tool_errors("getComponents"):
        spec = filter_spec_from_params(query, name_pattern, type, layer, domain, healthstate)
        neighbors = neighbor_spec_from_params(
            with_neighbors, with_neighbors_levels, with_neighbors_direction
        )
        result = search_components(_backend(), spec, neighbors)
    return _log_response("getComponents", result)


# =============================================================================
# TOOL 2: getMonitors
# =============================================================================
@mcp.tool(name="getMonitors")
def get_monitors(state: str = "CRITICAL") -> str:
    """Lists active monitors filtered by health state with component details.

    Args:
        state: Filter by state - 'CRITICAL', 'DEVIATING', or 'UNKNOWN' (default: CRITICAL).

    Returns:
        Monitors in the specified state with affected component names and
        their IDs or URNs, at most 5 components per monitor.
    """
    _log_request("getMonitors", state=state)

    with _tool_errors("getMonitors"):
        result = list_monitors(_backend(), state)
    return _log_response("getMonitors", result)


# =============================================================================
# TOOL 3: listMetrics
# =============================================================================
@mcp.tool(name="listMetrics")
def list_metrics(search_pattern: str) -> str:
    """Searches for metrics by pattern and shows their available label keys.

    Args:
        search_pattern: A regex pattern to search for metrics (e.g., 'cpu', 'memory', 'redis.*').

    Returns:
        A markdown table showing matching metric names and their available
        label keys (dimensions).  At most 50 metrics are shown.
    """
    _log_request("listMetrics", search_pattern=search_pattern)

    with _tool_errors("listMetrics"):
        result = search_metrics(_backend(), search_pattern)
    return _log_response("listMetrics", result)


# =============================================================================
# TOOL 4: getMetrics
# =============================================================================
@mcp.tool(name="getMetrics")
def get_metrics(query: str, start: str, end: str, step: str = "1m") -> str:
    """Query metrics over a range of time.

    Args:
        query: The PromQL query to execute.
        start: Start time for the query (e.g., 'now', '1h', '24h').
        end: End time for the query (e.g., 'now', '1h').
        step: Query resolution step width (e.g., '15s', '1m', '5m'). Default: '1m'.

    Returns:
        A markdown table showing the time series data with timestamps,
        values, and labels.
    """
    _log_request("getMetrics", query=query, start=start, end=end, step=step)

    with _tool_errors("getMetrics"):
        result = run_range_query(_backend(), query, start, end, step)
    return _log_response("getMetrics", result)


# =============================================================================
# TOOL 5: queryTopology (pass-through)
# =============================================================================
@mcp.tool(name="queryTopology")
def query_topology(query: str, time: str = "") -> str:
    """Execute a raw STQL topology query.

    Args:
        query: The topology query to execute.
        time: Optional time to execute the query at ('now', a duration like '1h' ago,
            or an RFC 3339 timestamp).

    Returns:
        The matching components as JSON.
    """
    _log_request("queryTopology", query=query, time=time)

    with _tool_errors("queryTopology"):
        at = parse_time(time) if time else None
        result = run_topology_query(_backend(), query, at)
    return _log_response("queryTopology", result)


# =============================================================================
# TOOL 6: listTraces (pass-through)
# =============================================================================
@mcp.tool(name="listTraces")
def list_traces(component_id: int) -> str:
    """List the traces of the last hour bound to an OpenTelemetry service component.

    Args:
        component_id: The ID of the component to list bound traces for.

    Returns:
        The traces as JSON.
    """
    _log_request("listTraces", component_id=component_id)

    with _tool_errors("listTraces"):
        result = fetch_traces(_backend(), component_id)
    return _log_response("listTraces", result)


# =============================================================================
# Server entry point
# =============================================================================
def main() -> None:
    settings = load_settings()
    if settings.http_address:
        host, port = settings.http_host_port()
        _log_status(f"Server listening on {host}:{port}")
        mcp.run(transport="http", host=host, port=port)
    else:
        mcp.run()


if __name__ == "__main__":
    main()
