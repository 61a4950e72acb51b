"""
Legislator Lens - categorizer role
Contextual categories and urgency classification for a bill.
"""
import logging
from typing import List, Optional

from ..core.cancellation import CancelSignal
from ..core.exceptions import MalformedResponseError
from ..core.text_budget import truncate_head
from ..models.legislation import BillCategory, CategorizationResult, UrgencyClassification
from .analyst import OnDeviceAnalyst

logger = logging.getLogger(__name__)

# excerpt size for category suggestions
SUGGESTION_EXCERPT_TOKENS = 750


class BillCategorizer(OnDeviceAnalyst):
    component = "Categorizer"

    def __init__(self, capability, config):
        super().__init__(capability, config)
        self.categorize_template = self._load_prompt(
            "categorize_prompt.md",
            "Suggest 3-5 categories for this bill as a JSON array of "
            "{{\"name\", \"confidence\", \"description\", \"tags\"}} objects.\n"
            "Bill Title: {title}\nSummary: {summary}",
        )
        self.urgency_template = self._load_prompt(
            "urgency_prompt.md",
            "Classify this bill's urgency and impact level as a JSON object with keys "
            "urgency, impactLevel, reasoning, affectedPopulation, timelineConcerns.\n"
            "Bill Title: {title}\nSummary: {summary}",
        )
        self.suggest_template = self._load_prompt(
            "suggest_categories_prompt.md",
            "Suggest {max_suggestions} category names as a JSON array of strings.\n{text}",
        )

    async def categorize(self, title: str, summary: str,
                         signal: Optional[CancelSignal] = None) -> CategorizationResult:
        """
        Suggest 3-5 contextual categories for a bill.

        :return: categories sorted by confidence, highest first
        :raises MalformedResponseError: no JSON array, or an empty one
        """
        prompt = self.categorize_template.format(title=title, summary=summary)
        response = await self._prompt(prompt, signal)

        raw = self._parse(response, expected_type=list)
        if not raw:
            raise MalformedResponseError("Invalid categorization response: expected array of categories")

        categories = [self._validate(BillCategory, item) for item in raw]
        categories.sort(key=lambda c: c.confidence, reverse=True)

        logger.info(f"LegislatorLens[Categorizer]: primary category '{categories[0].name}' "
                    f"({categories[0].confidence:.2f}) of {len(categories)}")
        return CategorizationResult(
            categories=categories,
            primary_category=categories[0],
            secondary_categories=categories[1:],
        )

    async def classify_urgency(self, title: str, summary: str,
                               signal: Optional[CancelSignal] = None) -> UrgencyClassification:
        prompt = self.urgency_template.format(title=title, summary=summary)
        response = await self._prompt(prompt, signal)
        return self._validate(UrgencyClassification, self._parse(response, expected_type=dict))

    async def suggest_categories(self, text: str, max_suggestions: int = 10,
                                 signal: Optional[CancelSignal] = None) -> List[str]:
        """Category names citizens might search for, from a bill excerpt."""
        excerpt = truncate_head(text, SUGGESTION_EXCERPT_TOKENS, self.encoding)
        prompt = self.suggest_template.format(max_suggestions=max_suggestions, text=excerpt)
        response = await self._prompt(prompt, signal)

        suggestions = self._parse(response, expected_type=list)
        names = [str(s).strip() for s in suggestions if isinstance(s, (str, int, float)) and str(s).strip()]
        return names[:max_suggestions]
