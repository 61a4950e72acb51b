"""
Letter writing data models
Input and output of letters from constituents to their representatives.
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from .legislation import LensModel, _utcnow

LetterPosition = Literal["support", "oppose", "concerned", "neutral"]
WriterTone = Literal["formal", "neutral", "casual"]
WriterLength = Literal["short", "medium", "long"]
LetterTemplate = Literal[
    "support", "oppose", "request-information", "share-story", "request-meeting", "thank-you", "custom",
]
Readability = Literal["easy", "moderate", "complex"]


class LetterInput(LensModel):
    bill_title: str = Field(alias="billTitle", min_length=1)
    bill_number: Optional[str] = Field(default=None, alias="billNumber")
    position: LetterPosition

    recipient_name: str = Field(alias="recipientName", min_length=1)
    recipient_title: str = Field(alias="recipientTitle", min_length=1, description="e.g. Representative, Senator")
    recipient_address: Optional[str] = Field(default=None, alias="recipientAddress")

    personal_story: Optional[str] = Field(default=None, alias="personalStory")
    key_points: List[str] = Field(alias="keyPoints", min_length=1)
    specific_request: Optional[str] = Field(default=None, alias="specificRequest",
                                            description="what the representative is asked to do")

    tone: WriterTone = "formal"
    length: WriterLength = "medium"
    include_call_to_action: bool = Field(default=True, alias="includeCallToAction")

    @field_validator("bill_title", "recipient_name", "recipient_title", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("key_points", mode="before")
    @classmethod
    def _drop_blank_points(cls, value):
        if isinstance(value, list):
            return [p.strip() for p in value if isinstance(p, str) and p.strip()]
        return value


class GeneratedLetter(LensModel):
    content: str
    tone: WriterTone
    length: WriterLength
    generated_at: datetime = Field(default_factory=_utcnow, alias="generatedAt")
    word_count: int = Field(alias="wordCount")


class TemplateGuidance(LensModel):
    title: str
    description: str
    suggested_points: List[str] = Field(alias="suggestedPoints")
    tone: WriterTone


class QualityCheck(LensModel):
    score: int = Field(ge=0, le=100)
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    word_count: int = Field(alias="wordCount")
    readability_level: Readability = Field(alias="readabilityLevel")
