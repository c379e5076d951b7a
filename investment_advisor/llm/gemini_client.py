# Role: The completion provider. Wraps the Gemini SDK behind one call, generate_text(prompt), and turns every
# way a call can come back without an analysis (transport error, blocked prompt, cut-off or empty answer) into a
# RuntimeError that says why, so the session controller can log it and show its fixed error turn.

from __future__ import annotations

import logging
from typing import Any, Optional

from google import genai
from google.genai import types

import investment_advisor.config as config

logger = logging.getLogger(__name__)


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
    ) -> None:
        # Key line: no key -> ConfigError here, at startup, never on the first submit.
        self.api_key = api_key or config.gemini_api_key()
        self.model_name = model or config.gemini_model()
        self.temperature = config.gemini_temperature() if temperature is None else temperature
        self.max_output_tokens = max_output_tokens or config.gemini_max_output_tokens()

        self.client = genai.Client(api_key=self.api_key)

    def _generation_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
        )

    def generate_text(self, prompt: str) -> str:
        if not prompt or not prompt.strip():
            raise ValueError("Prompt must be non-empty.")

        try:
            resp = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=self._generation_config(),
            )
        except Exception as e:
            raise RuntimeError(f"Gemini API call failed: {e}") from e

        text = (getattr(resp, "text", None) or "").strip()
        if not text:
            raise RuntimeError(f"Gemini returned no analysis ({self._empty_reason(resp)}).")

        self._log_usage(resp)
        return text

    @staticmethod
    def _empty_reason(resp: Any) -> str:
        # 1) Prompt rejected before generation (safety filters)
        # 2) Generation stopped early (finish_reason)
        # 3) Nothing to go on
        feedback = getattr(resp, "prompt_feedback", None)
        blocked = getattr(feedback, "block_reason", None)
        if blocked:
            return f"prompt blocked: {blocked}"

        candidates = getattr(resp, "candidates", None) or []
        if candidates:
            finish = getattr(candidates[0], "finish_reason", None)
            if finish:
                return f"finish reason: {finish}"
        return "empty response"

    def _log_usage(self, resp: Any) -> None:
        usage = getattr(resp, "usage_metadata", None)
        if usage is None:
            return
        logger.debug(
            "%s usage: prompt=%s output=%s tokens",
            self.model_name,
            getattr(usage, "prompt_token_count", None),
            getattr(usage, "candidates_token_count", None),
        )
