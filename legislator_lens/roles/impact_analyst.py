"""
Legislator Lens - impact analyzer role (cloud)
Economic, social and political impact of a bill, plus plain-language helpers
that use the same cloud model.
"""
import logging
from typing import Optional

from ..core.cancellation import CancelSignal
from ..core.exceptions import MalformedResponseError, ValidationError
from ..core.text_budget import truncate_head
from ..models.cloud import BillImpactAnalysis, ConceptExplanation
from .analyst import CloudAnalyst

logger = logging.getLogger(__name__)

# bill excerpt budgets, in tokens
IMPACT_EXCERPT_TOKENS = 2000
SUMMARY_EXCERPT_TOKENS = 2500

CLOUD_SUMMARY_PROMPTS = {
    "key-points": (
        "Summarize this congressional bill as key points. Provide 3-5 bullet points covering "
        "the main provisions and impacts.\n\nBill Text:\n{text}\n\n"
        "Return ONLY the key points as a markdown list, nothing else."
    ),
    "tl;dr": (
        "Provide a TL;DR (too long; didn't read) summary of this congressional bill in 2-3 sentences."
        "\n\nBill Text:\n{text}\n\nReturn ONLY the summary text, nothing else."
    ),
    "teaser": (
        "Write a one-paragraph teaser summary of this congressional bill that would make citizens "
        "want to learn more.\n\nBill Text:\n{text}\n\nReturn ONLY the teaser paragraph, nothing else."
    ),
    "headline": (
        "Create a compelling headline (10-15 words) that captures the essence of this congressional bill."
        "\n\nBill Text:\n{text}\n\nReturn ONLY the headline, nothing else."
    ),
}


class ImpactAnalyzer(CloudAnalyst):
    component = "ImpactAnalyst"

    def __init__(self, provider, config):
        super().__init__(provider, config)
        self.impact_template = self._load_prompt(
            "impact_prompt.md",
            "Analyze the economic, social and political impact of this bill as a JSON object with "
            "economicImpact, socialImpact and politicalContext.\n"
            "Bill: \"{title}\"\nSummary: {summary}\nBill Text (excerpt):\n{text}",
        )
        self.concept_template = self._load_prompt(
            "explain_concept_prompt.md",
            "Explain the legislative concept \"{concept}\"{context} as a JSON object with "
            "simpleExplanation, detailedExplanation, examples and relatedConcepts.",
        )

    async def analyze(self, title: str, summary: str, text: str,
                      signal: Optional[CancelSignal] = None) -> BillImpactAnalysis:
        excerpt = truncate_head(text, IMPACT_EXCERPT_TOKENS, self.encoding)
        prompt = self.impact_template.format(title=title, summary=summary, text=excerpt)
        response = await self._chat(prompt, temperature=0.6, max_output_tokens=2500, signal=signal)

        impact = self._validate(BillImpactAnalysis, self._parse(response, expected_type=dict))
        logger.info(f"LegislatorLens[ImpactAnalyst]: impact analysis ready for '{title}'")
        return impact

    async def explain_concept(self, concept: str, context: Optional[str] = None,
                              signal: Optional[CancelSignal] = None) -> ConceptExplanation:
        context_clause = f"\n\nContext: {context}" if context else ""
        prompt = self.concept_template.format(concept=concept, context=context_clause)
        response = await self._chat(prompt, temperature=0.7, max_output_tokens=2000, signal=signal)
        return self._validate(ConceptExplanation, self._parse(response, expected_type=dict))

    async def summarize(self, text: str, summary_type: str = "key-points",
                        signal: Optional[CancelSignal] = None) -> str:
        """Cloud summary, used when no on-device summarizer is available."""
        if summary_type not in CLOUD_SUMMARY_PROMPTS:
            raise ValidationError(f"Unsupported summary type: {summary_type}")
        excerpt = truncate_head(text, SUMMARY_EXCERPT_TOKENS, self.encoding)
        prompt = CLOUD_SUMMARY_PROMPTS[summary_type].format(text=excerpt)
        max_output_tokens = 100 if summary_type == "headline" else 800
        response = await self._chat(prompt, temperature=0.7, max_output_tokens=max_output_tokens, signal=signal)

        summary = response.strip()
        if not summary:
            raise MalformedResponseError("Cloud summarizer returned an empty summary")
        return summary
