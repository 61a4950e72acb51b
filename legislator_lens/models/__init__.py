"""
Legislator Lens - data models package
"""

from .availability import (
    Availability,
    AvailabilityReport,
    CloudAvailability,
    LevelRecommendation,
    OnDeviceAvailability,
)
from .legislation import (
    BillCategory,
    CategorizationResult,
    CoalitionAnalysis,
    DetailedProvision,
    Provision,
    ProvisionAnalysis,
    StakeholderAnalysis,
    StakeholderPerspective,
    StakeholderTestimony,
    SummaryVariants,
    UrgencyClassification,
)
from .cloud import (
    BillComparison,
    BillImpactAnalysis,
    ConceptExplanation,
    HistoricalBillAnalysis,
)
from .news import NewsArticle, NewsCorrelation, TimelineEvent, TrendingTopic
from .qa import QAMessage, QASession
from .letter import GeneratedLetter, LetterInput, QualityCheck, TemplateGuidance
from .analysis import (
    AnalysisEnvelope,
    AnalysisLevel,
    AnalysisOptions,
    CompositeAnalysis,
    CoreAnalysis,
    EnhancedAnalysis,
    ProcessingTime,
    ProviderAttribution,
    options_for_level,
)

__all__ = [
    "Availability",
    "AvailabilityReport",
    "CloudAvailability",
    "LevelRecommendation",
    "OnDeviceAvailability",
    "BillCategory",
    "CategorizationResult",
    "CoalitionAnalysis",
    "DetailedProvision",
    "Provision",
    "ProvisionAnalysis",
    "StakeholderAnalysis",
    "StakeholderPerspective",
    "StakeholderTestimony",
    "SummaryVariants",
    "UrgencyClassification",
    "BillComparison",
    "BillImpactAnalysis",
    "ConceptExplanation",
    "HistoricalBillAnalysis",
    "NewsArticle",
    "NewsCorrelation",
    "TimelineEvent",
    "TrendingTopic",
    "QAMessage",
    "QASession",
    "GeneratedLetter",
    "LetterInput",
    "QualityCheck",
    "TemplateGuidance",
    "AnalysisEnvelope",
    "AnalysisLevel",
    "AnalysisOptions",
    "CompositeAnalysis",
    "CoreAnalysis",
    "EnhancedAnalysis",
    "ProcessingTime",
    "ProviderAttribution",
    "options_for_level",
]
