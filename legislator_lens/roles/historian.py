"""
Legislator Lens - historical analyzer role (cloud)
Finds similar bills from past Congresses and what became of them.
"""
import logging
from typing import Dict, List, Optional

from ..core.cancellation import CancelSignal
from ..core.exceptions import ValidationError
from ..models.cloud import BillComparison, HistoricalBillAnalysis
from .analyst import CloudAnalyst

logger = logging.getLogger(__name__)


class HistoricalAnalyzer(CloudAnalyst):
    component = "Historian"

    def __init__(self, provider, config):
        super().__init__(provider, config)
        self.historical_template = self._load_prompt(
            "historical_prompt.md",
            "Find 3-5 similar bills from U.S. Congress history and answer with a JSON object "
            "with similarBills, trends, recommendations and historicalContext.\n"
            "Current Bill: \"{title}\"\nSummary: {summary}\nKey Provisions:\n{provisions}",
        )
        self.compare_template = self._load_prompt(
            "compare_bills_prompt.md",
            "Compare these bills and answer with a JSON object.\n{bills}",
        )

    async def analyze(self, title: str, summary: str, provisions: List[str],
                      signal: Optional[CancelSignal] = None) -> HistoricalBillAnalysis:
        """
        Historical analysis of a bill.

        :param provisions: provision descriptions of the current bill
        """
        numbered = "\n".join(f"{i}. {p}" for i, p in enumerate(provisions, 1))
        prompt = self.historical_template.format(title=title, summary=summary, provisions=numbered)
        # low temperature keeps the answer factual and structured
        response = await self._chat(prompt, temperature=0.3, max_output_tokens=3000, signal=signal)

        analysis = self._validate(HistoricalBillAnalysis, self._parse(response, expected_type=dict))
        logger.info(f"LegislatorLens[Historian]: {len(analysis.similar_bills)} similar bills for '{title}'")
        return analysis

    async def compare_bills(self, bills: List[Dict], signal: Optional[CancelSignal] = None) -> BillComparison:
        """
        Compare bills side by side.

        :param bills: dicts with title, summary and provisions (list of str)
        """
        if len(bills) < 2:
            raise ValidationError("At least two bills are needed for a comparison")
        blocks = [
            f"Bill {i}: \"{bill.get('title', '')}\"\n"
            f"Summary: {bill.get('summary', '')}\n"
            f"Provisions: {'; '.join(bill.get('provisions', []))}"
            for i, bill in enumerate(bills, 1)
        ]
        prompt = self.compare_template.format(bills="\n---\n".join(blocks))
        response = await self._chat(prompt, temperature=0.5, max_output_tokens=3000, signal=signal)
        return self._validate(BillComparison, self._parse(response, expected_type=dict))
