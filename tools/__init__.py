# =============================================================================
# tools/__init__.py
# =============================================================================
# This package contains the FastMCP tool wrappers.
#
# ARCHITECTURAL ROLE:
#   tools/ is the "translation layer" between MCP and core/.  Each tool:
#     1. Logs the incoming call
#     2. Passes its parameters and the shared Backend to a core/ flow
#     3. Converts core errors into MCP tool errors
#     4. Returns the rendered text unchanged
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT build queries or format tables (that's in core/)
#   - They do NOT know about Google ADK (they're framework-agnostic)
# =============================================================================
