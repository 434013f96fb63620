# =============================================================================
# core/config.py  —  Environment-driven settings
# =============================================================================
#
# Every setting comes from an environment variable.  Entry points call
# dotenv's load_dotenv() before load_settings(), so a local .env works too.
#
#   SUSE_OBSERVABILITY_URL        API base URL                 (required)
#   SUSE_OBSERVABILITY_TOKEN      service or API token          (required)
#   SUSE_OBSERVABILITY_API_TOKEN  "true" if the token is an API token
#   SUSE_OBSERVABILITY_TIMEOUT    HTTP timeout in seconds       (default 30)
#   MCP_HTTP_ADDRESS              host:port for HTTP transport  (default: stdio)
#   AGENT_MODEL                   LiteLlm model string for the agent
# =============================================================================

import os
from dataclasses import dataclass
from typing import Mapping

from core.errors import ConfigurationError

DEFAULT_AGENT_MODEL = "openrouter/openai/gpt-4o"


@dataclass(frozen=True)
class Settings:
    url: str
    token: str
    use_api_token: bool = False
    timeout: float = 30.0
    http_address: str = ""

    def http_host_port(self) -> tuple[str, int]:
        """Split ``http_address`` ("host:port" or ":port") into its parts."""
        host, _, port = self.http_address.rpartition(":")
        try:
            return host or "0.0.0.0", int(port)
        except ValueError:
            raise ConfigurationError(
                f"MCP_HTTP_ADDRESS must look like host:port, got '{self.http_address}'"
            ) from None


def _flag(value: str | None) -> bool:
    return (value or "false").strip().lower() in ("1", "true", "yes")


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Read Settings from ``environ`` (defaults to os.environ).

    Raises:
        ConfigurationError: a required variable is unset or a value is malformed.
    """
    env = os.environ if environ is None else environ

    url = env.get("SUSE_OBSERVABILITY_URL", "").strip()
    if not url:
        raise ConfigurationError("SUSE_OBSERVABILITY_URL is not set")
    token = env.get("SUSE_OBSERVABILITY_TOKEN", "").strip()
    if not token:
        raise ConfigurationError("SUSE_OBSERVABILITY_TOKEN is not set")

    raw_timeout = env.get("SUSE_OBSERVABILITY_TIMEOUT", "30")
    try:
        timeout = float(raw_timeout)
    except ValueError:
        raise ConfigurationError(
            f"SUSE_OBSERVABILITY_TIMEOUT must be a number of seconds, got '{raw_timeout}'"
        ) from None

    return Settings(
        url=url,
        token=token,
        use_api_token=_flag(env.get("SUSE_OBSERVABILITY_API_TOKEN")),
        timeout=timeout,
        http_address=env.get("MCP_HTTP_ADDRESS", "").strip(),
    )


def agent_model(environ: Mapping[str, str] | None = None) -> str:
    """The LiteLlm model string for the agent (AGENT_MODEL)."""
    env = os.environ if environ is None else environ
    return env.get("AGENT_MODEL", "").strip() or DEFAULT_AGENT_MODEL
