"""
Legislator Lens - provision extractor role
"""
import logging
from typing import Optional

from ..core.cancellation import CancelSignal
from ..core.exceptions import MalformedResponseError
from ..core.text_budget import sample_head_tail, truncate_head
from ..models.legislation import DetailedProvision, Provision, ProvisionAnalysis
from .analyst import OnDeviceAnalyst

logger = logging.getLogger(__name__)

DEFAULT_MAX_PROVISIONS = 5

# bill context passed along with a single provision
DETAIL_CONTEXT_TOKENS = 500


class ProvisionExtractor(OnDeviceAnalyst):
    """
    Extracts the most important provisions of a bill.
    Long bills are sampled from the beginning and the end, since findings and
    definitions open a bill and effective dates and appropriations close it.
    """
    component = "Provisions"

    def __init__(self, capability, config):
        super().__init__(capability, config)
        # half the budget for each end of the bill
        self.sample_tokens = self.max_tokens // 2
        self.extract_template = self._load_prompt(
            "provisions_prompt.md",
            "Extract the {max_provisions} most important provisions of this bill as a JSON object "
            "with \"provisions\" and \"keyThemes\".\nBill Text:\n{text}",
        )
        self.detail_template = self._load_prompt(
            "provision_detail_prompt.md",
            "Analyze this provision in detail and answer with a JSON object.\n"
            "Provision Text:\n{provision_text}\nContext:\n{bill_context}",
        )

    async def extract(self, text: str, max_provisions: int = DEFAULT_MAX_PROVISIONS,
                      signal: Optional[CancelSignal] = None) -> ProvisionAnalysis:
        """
        :param text: full bill text
        :param max_provisions: cap on returned provisions
        :return: ProvisionAnalysis; total_provisions counts before the cap
        """
        sample = sample_head_tail(text, self.sample_tokens, self.encoding)
        prompt = self.extract_template.format(max_provisions=max_provisions, text=sample)
        response = await self._prompt(prompt, signal)

        result = self._parse(response, expected_type=dict)
        raw_provisions = result.get("provisions")
        if not isinstance(raw_provisions, list):
            raise MalformedResponseError("Invalid provisions response: expected provisions array")

        provisions = [self._validate(Provision, item) for item in raw_provisions]
        key_themes = result.get("keyThemes") or result.get("key_themes") or []
        logger.info(f"LegislatorLens[Provisions]: extracted {len(provisions)} provisions")

        return ProvisionAnalysis(
            provisions=provisions[:max_provisions],
            total_provisions=len(provisions),
            key_themes=[str(t) for t in key_themes],
        )

    async def analyze_detail(self, provision_text: str, bill_context: str,
                             signal: Optional[CancelSignal] = None) -> DetailedProvision:
        context = truncate_head(bill_context, DETAIL_CONTEXT_TOKENS, self.encoding)
        prompt = self.detail_template.format(provision_text=provision_text, bill_context=context)
        response = await self._prompt(prompt, signal)
        return self._validate(DetailedProvision, self._parse(response, expected_type=dict))
