"""
Legislator Lens - stakeholder analyzer role
Analyzes a bill from the viewpoints of the groups it affects.
"""
import json
import logging
from typing import List, Optional

from ..core.cancellation import CancelSignal
from ..core.exceptions import MalformedResponseError, ValidationError
from ..models.legislation import (
    CoalitionAnalysis,
    StakeholderAnalysis,
    StakeholderPerspective,
    StakeholderTestimony,
)
from .analyst import OnDeviceAnalyst

logger = logging.getLogger(__name__)

TESTIMONY_SYSTEM_PROMPT = """You are helping simulate realistic congressional testimony.
Generate authentic-sounding testimony that reflects real stakeholder concerns.
Make it professional, well-structured, and grounded in the bill's actual provisions."""


def _numbered(items: List[str]) -> str:
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, 1))


class StakeholderAnalyzer(OnDeviceAnalyst):
    component = "Stakeholders"

    def __init__(self, capability, config):
        super().__init__(capability, config)
        self.analyze_template = self._load_prompt(
            "stakeholders_prompt.md",
            "Analyze this bill from 5-8 stakeholder perspectives and answer with a JSON object "
            "with \"perspectives\", \"consensusAreas\" and \"controversialAreas\".\n"
            "Bill Title: {title}\nSummary: {summary}\nKey Provisions:\n{provisions}",
        )
        self.testimony_template = self._load_prompt(
            "testimony_prompt.md",
            "Generate simulated testimony by {stakeholder_group} ({position}) on this bill as a JSON object.\n"
            "Bill Title: {title}\nSummary: {summary}",
        )
        self.coalitions_template = self._load_prompt(
            "coalitions_prompt.md",
            "Identify support and opposition coalitions in these perspectives as a JSON object.\n{perspectives}",
        )

    async def analyze(self, title: str, summary: str, provisions: List[str],
                      signal: Optional[CancelSignal] = None) -> StakeholderAnalysis:
        """
        :param provisions: plain-language provision descriptions
        """
        prompt = self.analyze_template.format(title=title, summary=summary, provisions=_numbered(provisions))
        response = await self._prompt(prompt, signal)

        result = self._parse(response, expected_type=dict)
        raw = result.get("perspectives")
        if not isinstance(raw, list):
            raise MalformedResponseError("Invalid stakeholder analysis response")

        perspectives = [self._validate(StakeholderPerspective, item) for item in raw]
        logger.info(f"LegislatorLens[Stakeholders]: {len(perspectives)} perspectives for '{title}'")
        return StakeholderAnalysis(
            perspectives=perspectives,
            consensus_areas=result.get("consensusAreas") or [],
            controversial_areas=result.get("controversialAreas") or [],
        )

    async def generate_testimony(self, title: str, summary: str, stakeholder_group: str,
                                 position: str, signal: Optional[CancelSignal] = None) -> StakeholderTestimony:
        if position not in ("support", "oppose"):
            raise ValidationError(f"Testimony position must be 'support' or 'oppose', got '{position}'")
        prompt = self.testimony_template.format(
            title=title, summary=summary, stakeholder_group=stakeholder_group, position=position
        )
        response = await self._prompt(prompt, signal, system_prompt=TESTIMONY_SYSTEM_PROMPT)
        data = self._parse(response, expected_type=dict)
        data.setdefault("stakeholderGroup", stakeholder_group)
        return self._validate(StakeholderTestimony, data)

    async def analyze_coalitions(self, perspectives: List[StakeholderPerspective],
                                 signal: Optional[CancelSignal] = None) -> CoalitionAnalysis:
        perspectives_data = [
            {
                "group": p.group,
                "position": p.position,
                "benefits": p.benefits,
                "concerns": p.concerns,
            }
            for p in perspectives
        ]
        prompt = self.coalitions_template.format(perspectives=json.dumps(perspectives_data, indent=2))
        response = await self._prompt(prompt, signal)
        return self._validate(CoalitionAnalysis, self._parse(response, expected_type=dict))
