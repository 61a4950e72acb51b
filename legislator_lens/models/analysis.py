"""
Composite analysis data models
One CompositeAnalysis is built per aggregator call. Each optional sub-record is
present only when the adapter that produces it succeeded.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .cloud import BillImpactAnalysis, HistoricalBillAnalysis
from .legislation import (
    BillCategory,
    Provision,
    StakeholderPerspective,
    SummaryVariants,
    UrgencyClassification,
)
from .news import NewsCorrelation


class AnalysisLevel(str, Enum):
    QUICK = "quick"
    STANDARD = "standard"
    DEEP = "deep"


class AnalysisOptions(BaseModel):
    """Feature flags, one per adapter call"""
    # core (on-device)
    include_summary: bool = True
    include_categories: bool = True
    include_provisions: bool = True
    include_stakeholders: bool = True

    # enhanced (cloud)
    include_historical_analysis: bool = False
    include_impact_analysis: bool = False
    include_news: bool = False

    offline_mode: bool = Field(default=False, description="skip the cloud phase entirely")


# flags each level pins, applied over caller overrides
_LEVEL_FLAGS: Dict[AnalysisLevel, Dict[str, bool]] = {
    AnalysisLevel.QUICK: {
        "include_summary": True,
        "include_categories": True,
        "include_provisions": True,
        "include_stakeholders": True,
        "include_historical_analysis": False,
        "include_impact_analysis": False,
        "include_news": False,
        "offline_mode": True,
    },
    # enhanced flags stay off unless the caller enables them
    AnalysisLevel.STANDARD: {
        "include_stakeholders": True,
    },
    AnalysisLevel.DEEP: {
        "include_summary": True,
        "include_categories": True,
        "include_provisions": True,
        "include_stakeholders": True,
        "include_historical_analysis": True,
        "include_impact_analysis": True,
        "include_news": True,
        "offline_mode": False,
    },
}


def options_for_level(level, overrides: Optional[Dict[str, Any]] = None) -> AnalysisOptions:
    """
    Build the options for a named analysis level.

    Caller overrides are applied on top of the base options; the level's own
    flags win over overrides.

    :param level: AnalysisLevel or its string value
    :param overrides: option field names mapped to values
    :return: AnalysisOptions
    """
    level = AnalysisLevel(level)
    base = AnalysisOptions().model_dump()
    known = {k: v for k, v in (overrides or {}).items() if k in base}
    return AnalysisOptions(**{**base, **known, **_LEVEL_FLAGS[level]})


class CoreAnalysis(BaseModel):
    summary: Optional[SummaryVariants] = None
    categories: Optional[List[BillCategory]] = None
    urgency: Optional[UrgencyClassification] = None
    provisions: Optional[List[Provision]] = None
    stakeholder_perspectives: Optional[List[StakeholderPerspective]] = None

    def has_any(self) -> bool:
        return any(
            value is not None
            for value in (self.summary, self.categories, self.urgency,
                          self.provisions, self.stakeholder_perspectives)
        )


class EnhancedAnalysis(BaseModel):
    historical_analysis: Optional[HistoricalBillAnalysis] = None
    impact_analysis: Optional[BillImpactAnalysis] = None
    news_correlation: Optional[NewsCorrelation] = None

    def is_empty(self) -> bool:
        return (self.historical_analysis is None and self.impact_analysis is None
                and self.news_correlation is None)


class ProviderAttribution(BaseModel):
    chrome: bool = Field(default=False, description="on-device provider contributed")
    gemini: bool = False
    news: bool = False


class ProcessingTime(BaseModel):
    """Milliseconds per phase"""
    chrome: int = 0
    cloud: int = 0
    total: int = 0


class CompositeAnalysis(BaseModel):
    core: CoreAnalysis = Field(default_factory=CoreAnalysis)
    enhanced: Optional[EnhancedAnalysis] = None
    providers: ProviderAttribution = Field(default_factory=ProviderAttribution)
    generated_at: datetime
    processing_time: ProcessingTime = Field(default_factory=ProcessingTime)


class AnalysisEnvelope(BaseModel):
    """What the service hands back: the analysis plus where it came from"""
    analysis: CompositeAnalysis
    analysis_level: AnalysisLevel
    from_cache: bool = False
    cached_at: Optional[datetime] = None
