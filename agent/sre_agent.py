# =============================================================================
# agent/sre_agent.py  —  Google ADK Agent Configuration
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Creates the Google ADK agent that investigates incidents using the
#   SUSE Observability MCP tools.
#
#   ┌──────────────────────────────┐
#   │  Google ADK Agent            │
#   │  prompt + LiteLlm model      │
#   └──────────────┬───────────────┘
#                  │ MCP over stdio
#                  ▼
#   ┌──────────────────────────────┐
#   │  FastMCP Server              │
#   │  (tools/mcp_server.py)       │
#   └──────────────┬───────────────┘
#                  │
#                  ▼
#   ┌──────────────────────────────┐
#   │  core/  →  SUSE Observability│
#   └──────────────────────────────┘
#
# MCP CONNECTION:
#   ADK starts the tool server as a subprocess of the current interpreter
#   ("python -m tools.mcp_server") and talks to it over stdin/stdout.  The
#   subprocess inherits this process's environment, so the
#   SUSE_OBSERVABILITY_* variables only need to be set once.
#
# MODEL:
#   Any LiteLlm model string works; AGENT_MODEL overrides the default
#   ("openrouter/openai/gpt-4o", which reads OPENROUTER_API_KEY).
# =============================================================================

import os
import sys

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.mcp_tool import MCPToolset
from mcp import StdioServerParameters

from agent.prompt import get_sre_assistant_prompt
from core.config import agent_model


def create_agent() -> Agent:
    """Create the SRE assistant agent wired to the MCP tool server.

    Returns:
        A configured Google ADK Agent instance.
    """
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    mcp_tools = MCPToolset(
        connection_params=StdioServerParameters(
            command=sys.executable,
            args=["-m", "tools.mcp_server"],
            cwd=project_root,
            env=dict(os.environ),
        ),
    )

    return Agent(
        name="suse_observability_sre",
        model=LiteLlm(model=agent_model()),
        instruction=get_sre_assistant_prompt(),
        tools=[mcp_tools],
    )
