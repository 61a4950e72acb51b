"""
Bill Q&A data models
"""
from datetime import datetime
from typing import List, Literal

from pydantic import Field

from .legislation import LensModel, _utcnow


class QAMessage(LensModel):
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)


class QASession(LensModel):
    """Snapshot of a Q&A conversation about one bill"""
    session_id: str = Field(alias="sessionId")
    bill_title: str = Field(alias="billTitle")
    messages: List[QAMessage] = Field(default_factory=list)
    created_at: datetime = Field(alias="createdAt")
