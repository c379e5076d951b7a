# Role: Single transcript entry. Frozen so a turn can't be edited once appended; is_ai tags the author.

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class ChatTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    is_ai: bool
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def role(self) -> str:
        return "assistant" if self.is_ai else "user"
