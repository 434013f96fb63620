# =============================================================================
# agent/__init__.py
# =============================================================================
# This package contains the Google ADK agent configuration.
#
# ARCHITECTURAL ROLE:
#   The agent/ layer decides WHICH tools to call and WHEN, and turns their
#   tables into an explanation for the user.  It holds no query building
#   or normalization logic: that lives in core/, behind the MCP tools.
# =============================================================================
