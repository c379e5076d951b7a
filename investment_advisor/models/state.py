# Role: Per-session state container. Holds the form, the manual query override latch, the append-only
# transcript, the busy phase and the last successful report.

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from investment_advisor.models.form_state import FormState
from investment_advisor.models.message import ChatTurn


class SessionPhase(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"


class SessionState(BaseModel):
    form: FormState = Field(default_factory=FormState)

    # Key line: None means "derive from form"; a string is a latched manual edit.
    query_override: Optional[str] = None

    transcript: List[ChatTurn] = Field(default_factory=list)
    phase: SessionPhase = SessionPhase.IDLE
    last_report: str = ""

    submit_count: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
