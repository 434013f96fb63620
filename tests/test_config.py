"""Tests for environment-driven settings and the agent prompt."""

from datetime import datetime, timezone

import pytest

from agent.prompt import get_sre_assistant_prompt
from core.config import DEFAULT_AGENT_MODEL, Settings, agent_model, load_settings
from core.errors import ConfigurationError

BASE_ENV = {
    "SUSE_OBSERVABILITY_URL": "https://obs.example.com",
    "SUSE_OBSERVABILITY_TOKEN": "svc-token",
}


class TestLoadSettings:
    def test_defaults(self):
        settings = load_settings(BASE_ENV)

        assert settings == Settings(url="https://obs.example.com", token="svc-token")

    def test_all_values(self):
        settings = load_settings({
            **BASE_ENV,
            "SUSE_OBSERVABILITY_API_TOKEN": "true",
            "SUSE_OBSERVABILITY_TIMEOUT": "5",
            "MCP_HTTP_ADDRESS": "127.0.0.1:8080",
        })

        assert settings.use_api_token is True
        assert settings.timeout == 5.0
        assert settings.http_host_port() == ("127.0.0.1", 8080)

    @pytest.mark.parametrize("missing", ["SUSE_OBSERVABILITY_URL", "SUSE_OBSERVABILITY_TOKEN"])
    def test_required(self, missing):
        env = {k: v for k, v in BASE_ENV.items() if k != missing}

        with pytest.raises(ConfigurationError, match=missing):
            load_settings(env)

    def test_bad_timeout(self):
        with pytest.raises(ConfigurationError, match="SUSE_OBSERVABILITY_TIMEOUT"):
            load_settings({**BASE_ENV, "SUSE_OBSERVABILITY_TIMEOUT": "soon"})

    def test_port_only_address(self):
        settings = load_settings({**BASE_ENV, "MCP_HTTP_ADDRESS": ":9000"})

        assert settings.http_host_port() == ("0.0.0.0", 9000)

    def test_bad_address(self):
        settings = load_settings({**BASE_ENV, "MCP_HTTP_ADDRESS": "localhost"})

        with pytest.raises(ConfigurationError, match="host:port"):
            settings.http_host_port()


class TestAgentModel:
    def test_default(self):
        assert agent_model({}) == DEFAULT_AGENT_MODEL

    def test_override(self):
        assert agent_model({"AGENT_MODEL": "openai/gpt-4o-mini"}) == "openai/gpt-4o-mini"


class TestPrompt:
    def test_injects_current_time(self):
        prompt = get_sre_assistant_prompt(datetime(2025, 7, 10, 12, 0, tzinfo=timezone.utc))

        assert "CURRENT TIME (UTC): 2025-07-10T12:00:00Z" in prompt

    def test_mentions_every_tool(self):
        prompt = get_sre_assistant_prompt()

        for tool in ("getMonitors", "getComponents", "listMetrics", "getMetrics", "listTraces", "queryTopology"):
            assert tool in prompt
