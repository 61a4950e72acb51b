"""
On-device analysis data models
Shapes produced by the summarizer, categorizer, provisions and stakeholder roles.
Model output uses camelCase keys; every field also accepts its snake_case name.
"""
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Importance = Literal["low", "medium", "high", "critical"]
Urgency = Literal["low", "medium", "high", "critical"]
ImpactLevel = Literal["narrow", "moderate", "broad", "sweeping"]
Position = Literal["strongly support", "support", "neutral", "oppose", "strongly oppose"]
SummaryType = Literal["key-points", "tl;dr", "teaser", "headline"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LensModel(BaseModel):
    """Base model accepting both alias and field names."""
    model_config = ConfigDict(populate_by_name=True)


class SummaryVariants(LensModel):
    """
    Summary variants of a bill's text
    Any variant that failed to generate is left unset.
    """
    key_points: Optional[str] = Field(default=None, alias="key-points")
    tldr: Optional[str] = Field(default=None, alias="tl;dr")
    teaser: Optional[str] = None
    headline: Optional[str] = None

    def variant_count(self) -> int:
        return sum(1 for v in (self.key_points, self.tldr, self.teaser, self.headline) if v)


class BillCategory(LensModel):
    name: str
    confidence: float = Field(description="0..1, clamped")
    description: str = ""
    tags: List[str] = Field(default_factory=list)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value):
        try:
            value = float(value)
        except TypeError as e:
            raise ValueError(f"confidence must be a number, got {type(value).__name__}") from e
        # some models answer in percent
        if value > 1:
            value = value / 100 if value <= 100 else 1.0
        return min(max(value, 0.0), 1.0)

    @field_validator("tags", mode="before")
    @classmethod
    def _none_tags(cls, value):
        return value or []


class CategorizationResult(LensModel):
    categories: List[BillCategory]
    primary_category: BillCategory
    secondary_categories: List[BillCategory] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=_utcnow)


class UrgencyClassification(LensModel):
    urgency: Urgency
    impact_level: ImpactLevel = Field(alias="impactLevel")
    reasoning: str = ""
    affected_population: str = Field(default="", alias="affectedPopulation")
    timeline_concerns: List[str] = Field(default_factory=list, alias="timelineConcerns")


class Provision(LensModel):
    title: str
    description: str
    impact: str = ""
    stakeholders: List[str] = Field(default_factory=list)
    section: Optional[str] = None
    importance: Importance = "medium"

    @field_validator("section", mode="before")
    @classmethod
    def _section_as_text(cls, value):
        return None if value in (None, "") else str(value)


class ProvisionAnalysis(LensModel):
    provisions: List[Provision]
    total_provisions: int
    key_themes: List[str] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=_utcnow)


class DetailedProvision(Provision):
    legal_language: str = Field(default="", alias="legalLanguage")
    plain_language_explanation: str = Field(default="", alias="plainLanguageExplanation")
    examples: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    tradeoffs: List[str] = Field(default_factory=list)


class StakeholderPerspective(LensModel):
    group: str = Field(alias="stakeholderGroup")
    position: Position
    reasoning: str = ""
    benefits: List[str] = Field(default_factory=list, alias="keyBenefits")
    concerns: List[str] = Field(default_factory=list, alias="keyConcerns")
    actions: List[str] = Field(default_factory=list, alias="likelyActions")
    quotes: List[str] = Field(default_factory=list)

    @field_validator("position", mode="before")
    @classmethod
    def _normalise_position(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class StakeholderAnalysis(LensModel):
    perspectives: List[StakeholderPerspective]
    consensus_areas: List[str] = Field(default_factory=list)
    controversial_areas: List[str] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=_utcnow)


class ArgumentPoint(LensModel):
    point: str
    explanation: str = ""


class StakeholderTestimony(LensModel):
    stakeholder_group: str = Field(alias="stakeholderGroup")
    representative: str = ""
    opening_statement: str = Field(default="", alias="openingStatement")
    key_points: List[ArgumentPoint] = Field(default_factory=list, alias="keyPoints")
    closing_statement: str = Field(default="", alias="closingStatement")
    call_to_action: str = Field(default="", alias="callToAction")


class Coalition(LensModel):
    name: str
    members: List[str] = Field(default_factory=list)
    shared_interests: List[str] = Field(default_factory=list, alias="sharedInterests")
    shared_concerns: List[str] = Field(default_factory=list, alias="sharedConcerns")
    strength: Literal["weak", "moderate", "strong"] = "moderate"


class CoalitionAnalysis(LensModel):
    support_coalitions: List[Coalition] = Field(default_factory=list, alias="supportCoalitions")
    opposition_coalitions: List[Coalition] = Field(default_factory=list, alias="oppositionCoalitions")
    potential_compromises: List[str] = Field(default_factory=list, alias="potentialCompromises")
