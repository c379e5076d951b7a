"""Tests for llm/gemini_client.py."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from investment_advisor.config import ConfigError
from investment_advisor.llm.gemini_client import GeminiClient


@pytest.fixture
def genai_client():
    with patch("investment_advisor.llm.gemini_client.genai") as genai:
        client = MagicMock()
        genai.Client.return_value = client
        yield genai, client


class TestConstruction:
    def test_missing_key_fails_at_startup(self, monkeypatch, genai_client):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        with pytest.raises(ConfigError):
            GeminiClient()

    def test_reads_env(self, monkeypatch, genai_client):
        genai, _ = genai_client
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        monkeypatch.setenv("GEMINI_MODEL", "gemini-2.0-flash")
        monkeypatch.delenv("GEMINI_TEMPERATURE", raising=False)
        c = GeminiClient()
        assert c.model_name == "gemini-2.0-flash"
        assert c.temperature == 0.7
        genai.Client.assert_called_once_with(api_key="test-key")

    def test_explicit_arguments_win(self, monkeypatch, genai_client):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        c = GeminiClient(api_key="k", model="m", temperature=0.0)
        assert (c.api_key, c.model_name, c.temperature) == ("k", "m", 0.0)


class TestGenerateText:
    def test_returns_stripped_text(self, genai_client):
        _, client = genai_client
        client.models.generate_content.return_value = SimpleNamespace(text="  analysis  \n")
        c = GeminiClient(api_key="k", model="gemini-1.5-flash", temperature=0.3, max_output_tokens=1024)
        assert c.generate_text("prompt") == "analysis"
        call = client.models.generate_content.call_args
        assert call.kwargs["model"] == "gemini-1.5-flash"
        assert call.kwargs["contents"] == "prompt"
        assert call.kwargs["config"].temperature == 0.3
        assert call.kwargs["config"].max_output_tokens == 1024

    def test_empty_prompt_rejected(self, genai_client):
        c = GeminiClient(api_key="k")
        with pytest.raises(ValueError):
            c.generate_text("   ")

    def test_api_failure_wrapped(self, genai_client):
        _, client = genai_client
        client.models.generate_content.side_effect = ConnectionError("offline")
        c = GeminiClient(api_key="k")
        with pytest.raises(RuntimeError, match="Gemini API call failed") as exc:
            c.generate_text("prompt")
        assert isinstance(exc.value.__cause__, ConnectionError)

    def test_empty_response_is_error(self, genai_client):
        _, client = genai_client
        client.models.generate_content.return_value = SimpleNamespace(text=None)
        c = GeminiClient(api_key="k")
        with pytest.raises(RuntimeError, match="empty response"):
            c.generate_text("prompt")

    def test_blocked_prompt_reason_reported(self, genai_client):
        _, client = genai_client
        client.models.generate_content.return_value = SimpleNamespace(
            text=None,
            prompt_feedback=SimpleNamespace(block_reason="SAFETY"),
            candidates=[],
        )
        c = GeminiClient(api_key="k")
        with pytest.raises(RuntimeError, match="prompt blocked: SAFETY"):
            c.generate_text("prompt")

    def test_cut_off_answer_reason_reported(self, genai_client):
        _, client = genai_client
        client.models.generate_content.return_value = SimpleNamespace(
            text="",
            prompt_feedback=None,
            candidates=[SimpleNamespace(finish_reason="MAX_TOKENS")],
        )
        c = GeminiClient(api_key="k")
        with pytest.raises(RuntimeError, match="finish reason: MAX_TOKENS"):
            c.generate_text("prompt")
