"""
Capability availability data models
"""
from enum import Enum
from typing import List, Literal

from pydantic import BaseModel, Field


class Availability(str, Enum):
    """Discrete availability states of a capability"""
    READY = "ready"
    DOWNLOADING = "downloading"
    DOWNLOADABLE = "downloadable"
    UNAVAILABLE = "unavailable"

    @property
    def usable(self) -> bool:
        """Whether a session may be requested (creation may trigger a download)."""
        return self is not Availability.UNAVAILABLE


class OnDeviceAvailability(BaseModel):
    summarizer: bool = False
    prompt: bool = False
    writer: bool = False
    rewriter: bool = False
    proofreader: bool = False


class CloudAvailability(BaseModel):
    gemini: bool = False
    news_sources: bool = False


class AvailabilityReport(BaseModel):
    on_device: OnDeviceAvailability = Field(default_factory=OnDeviceAvailability)
    cloud: CloudAvailability = Field(default_factory=CloudAvailability)


class LevelRecommendation(BaseModel):
    level: Literal["quick", "standard", "deep"]
    reason: str
    available_features: List[str] = Field(default_factory=list)
