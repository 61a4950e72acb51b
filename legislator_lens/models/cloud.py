"""
Cloud analysis data models
Shapes produced by the Gemini-backed historical and impact roles.
"""
from typing import List, Optional

from pydantic import Field, field_validator

from .legislation import LensModel


class SimilarBill(LensModel):
    title: str
    congress: Optional[int] = None
    year: Optional[int] = None
    similarity: str = ""
    outcome: str = ""
    key_differences: List[str] = Field(default_factory=list, alias="keyDifferences")

    @field_validator("congress", "year", mode="before")
    @classmethod
    def _loose_int(cls, value):
        # "117th" / "2021 (approx.)" style answers
        if isinstance(value, str):
            digits = "".join(ch for ch in value if ch.isdigit())
            return int(digits) if digits else None
        return value


class HistoricalBillAnalysis(LensModel):
    similar_bills: List[SimilarBill] = Field(default_factory=list, alias="similarBills")
    trends: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    historical_context: str = Field(default="", alias="historicalContext")


class EconomicImpact(LensModel):
    summary: str = ""
    affected_sectors: List[str] = Field(default_factory=list, alias="affectedSectors")
    estimated_cost: str = Field(default="", alias="estimatedCost")


class SocialImpact(LensModel):
    summary: str = ""
    affected_communities: List[str] = Field(default_factory=list, alias="affectedCommunities")
    timeframe: str = ""


class PoliticalContext(LensModel):
    summary: str = ""
    likely_coalitions: List[str] = Field(default_factory=list, alias="likelyCoalitions")
    potential_obstacles: List[str] = Field(default_factory=list, alias="potentialObstacles")


class BillImpactAnalysis(LensModel):
    economic_impact: EconomicImpact = Field(alias="economicImpact")
    social_impact: SocialImpact = Field(alias="socialImpact")
    political_context: PoliticalContext = Field(alias="politicalContext")


class BillUniqueElements(LensModel):
    bill_title: str = Field(alias="billTitle")
    elements: List[str] = Field(default_factory=list)


class BillRelation(LensModel):
    description: str
    bills: List[str] = Field(default_factory=list)


class BillComparison(LensModel):
    common_themes: List[str] = Field(default_factory=list, alias="commonThemes")
    unique_elements: List[BillUniqueElements] = Field(default_factory=list, alias="uniqueElements")
    conflicts: List[BillRelation] = Field(default_factory=list)
    synergies: List[BillRelation] = Field(default_factory=list)
    recommendation: str = ""


class ConceptExplanation(LensModel):
    simple_explanation: str = Field(alias="simpleExplanation")
    detailed_explanation: str = Field(default="", alias="detailedExplanation")
    examples: List[str] = Field(default_factory=list)
    related_concepts: List[str] = Field(default_factory=list, alias="relatedConcepts")
