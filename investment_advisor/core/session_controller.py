# Role: Orchestrator for one investment-analysis session. It glues together:
# form state, derived query (with manual override latch), validation, the completion provider, and the transcript.

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import investment_advisor.config as config
from investment_advisor.core.validator import FormValidator
from investment_advisor.llm.gemini_client import GeminiClient
from investment_advisor.models.form_state import FormState
from investment_advisor.models.message import ChatTurn
from investment_advisor.models.state import SessionPhase, SessionState
from investment_advisor.prompts.analysis_prompt import build_analysis_prompt
from investment_advisor.utils.query_builder import derive_query, format_request_turn

logger = logging.getLogger(__name__)

MISSING_FIELDS_NOTICE = (
    "⚠️ Please fill all required fields (Company Share, Share Type, Investment Type, Investment Years)"
)
PROVIDER_ERROR_NOTICE = "🚨 Error generating analysis. Please try again."

TranscriptListener = Callable[[List[ChatTurn]], None]


class SubmitOutcome(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    INVALID = "invalid"
    BUSY = "busy"


class SessionController:
    def __init__(
        self,
        client: Optional[GeminiClient] = None,
        validator: Optional[FormValidator] = None,
        state: Optional[SessionState] = None,
        on_transcript_change: Optional[TranscriptListener] = None,
    ) -> None:
        # Key line: dependencies are injectable for testing/mocking.
        # The client is built eagerly so a missing GEMINI_API_KEY fails at startup.
        self.client = client or GeminiClient()
        self.validator = validator or FormValidator()
        self.state = state or SessionState()
        self.on_transcript_change = on_transcript_change
        self._phase_lock = threading.Lock()

    # ----------------------------
    # Read-only views
    # ----------------------------
    @property
    def form(self) -> FormState:
        return self.state.form

    @property
    def transcript(self) -> List[ChatTurn]:
        return list(self.state.transcript)

    @property
    def is_loading(self) -> bool:
        return self.state.phase == SessionPhase.SUBMITTING

    @property
    def last_report(self) -> str:
        return self.state.last_report

    @property
    def query_overridden(self) -> bool:
        return self.state.query_override is not None

    @property
    def derived_query(self) -> str:
        if self.state.query_override is not None:
            return self.state.query_override
        return derive_query(self.state.form)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "form": self.state.form.model_dump(),
            "derived_query": self.derived_query,
            "query_overridden": self.query_overridden,
            "transcript_length": len(self.state.transcript),
            "is_loading": self.is_loading,
            "has_report": bool(self.state.last_report),
            "submit_count": self.state.submit_count,
        }

    # ----------------------------
    # Edits
    # ----------------------------
    def update_field(self, name: str, value: str) -> None:
        # Key line: a field edit is the newest edit, so it drops any manual query text (last edit wins).
        self.state.form.set_field(name, value)
        self.state.query_override = None
        self._touch()

    def edit_derived_query(self, text: str) -> None:
        self.state.query_override = text
        self._touch()

    # ----------------------------
    # Submit
    # ----------------------------
    def submit(self) -> SubmitOutcome:
        # 1) Ignore while a provider call is in flight
        # 2) Validate required fields -> warning turn, early return (form kept)
        # 3) Append user turn, call provider, append answer or fixed error turn
        # 4) Always return to IDLE and reset the form after the provider call

        if self.is_loading:
            logger.info("Submit ignored: a request is already in flight")
            return SubmitOutcome.BUSY

        validation = self.validator.validate(self.state.form)
        if not validation.ok:
            logger.info("Submit rejected: missing %s", ", ".join(validation.missing_fields))
            self._append(ChatTurn(text=MISSING_FIELDS_NOTICE, is_ai=True))
            return SubmitOutcome.INVALID

        if not self._begin():
            logger.info("Submit ignored: a request is already in flight")
            return SubmitOutcome.BUSY

        try:
            query = self.derived_query
            company = self.state.form.company_share
            self.state.submit_count += 1

            self._append(ChatTurn(text=format_request_turn(query), is_ai=False))
            prompt = build_analysis_prompt(query, company)

            if config.DEBUG:
                logger.debug("Submit #%d snapshot: %s", self.state.submit_count, self.snapshot())
                logger.debug("Prompt:\n%s", prompt)

            try:
                text = self.client.generate_text(prompt)
                if not text or not text.strip():
                    raise RuntimeError("Empty analysis text")
            except Exception:
                logger.exception("Analysis request for %r failed", company)
                self._append(ChatTurn(text=PROVIDER_ERROR_NOTICE, is_ai=True))
                return SubmitOutcome.FAILED

            self._append(ChatTurn(text=text, is_ai=True))
            self.state.last_report = text
            logger.info("Analysis for %r completed (%d chars)", company, len(text))
            return SubmitOutcome.COMPLETED
        finally:
            self._finish()

    # ----------------------------
    # Internals
    # ----------------------------
    def _begin(self) -> bool:
        # Role: atomic IDLE -> SUBMITTING. The lock is never held across the provider call.
        with self._phase_lock:
            if self.state.phase == SessionPhase.SUBMITTING:
                return False
            self.state.phase = SessionPhase.SUBMITTING
        return True

    def _finish(self) -> None:
        with self._phase_lock:
            self.state.phase = SessionPhase.IDLE
        self.state.form = FormState()
        self.state.query_override = None
        self._touch()

    def _append(self, turn: ChatTurn) -> None:
        self.state.transcript.append(turn)
        self._touch()
        if self.on_transcript_change is not None:
            self.on_transcript_change(self.transcript)

    def _touch(self) -> None:
        self.state.updated_at = datetime.now(timezone.utc)
