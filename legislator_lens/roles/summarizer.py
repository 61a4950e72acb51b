"""
Legislator Lens - bill summarizer role
Produces the summary variants of a bill with the on-device summarizer.
"""
import logging
from typing import Dict, Iterable, Optional

from ..clients.on_device import open_session
from ..core.cancellation import CancelSignal, run_cancellable
from ..core.exceptions import (
    AnalysisCancelledError,
    ClientError,
    LegislatorLensError,
    MalformedResponseError,
    ValidationError,
)
from ..core.log import log_llm_interaction
from ..core.text_budget import truncate_head
from ..models.legislation import SummaryVariants
from .analyst import OnDeviceAnalyst

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY_TYPES = ("key-points", "tl;dr", "teaser")

SHARED_CONTEXT = "Congressional legislation analysis. Focus on policy impact and key provisions."

# summary type -> SummaryVariants field
_VARIANT_FIELDS = {
    "key-points": "key_points",
    "tl;dr": "tldr",
    "teaser": "teaser",
    "headline": "headline",
}


class BillSummarizer(OnDeviceAnalyst):
    """
    Summarizer role.
    One summarizer session is opened per call and reused across summary types.
    """
    component = "Summarizer"

    def _prepare(self, text: str) -> str:
        if not text or not text.strip():
            raise ValidationError("Text to summarize cannot be empty")
        return truncate_head(text, self.max_tokens, self.encoding)

    async def summarize(self, text: str, summary_type: str = "key-points",
                        signal: Optional[CancelSignal] = None) -> str:
        """Generate a single summary variant."""
        variants = await self.generate_summaries(text, [summary_type], signal=signal)
        return getattr(variants, _VARIANT_FIELDS[summary_type])

    async def generate_summaries(self, text: str, types: Iterable[str] = DEFAULT_SUMMARY_TYPES,
                                 signal: Optional[CancelSignal] = None) -> SummaryVariants:
        """
        Generate several summary variants with a single session.

        A type that fails is skipped; the others are still attempted.

        :param text: bill text
        :param types: summary types, any of key-points, tl;dr, teaser, headline
        :param signal: optional cancellation token
        :return: SummaryVariants with at least one variant set
        :raises MalformedResponseError: no variant could be generated
        """
        content = self._prepare(text)
        types = list(types)
        unknown = [t for t in types if t not in _VARIANT_FIELDS]
        if unknown:
            raise ValidationError(f"Unsupported summary types: {', '.join(unknown)}")

        results: Dict[str, str] = {}
        try:
            async with open_session(self.capability, timeout=self.session_timeout, signal=signal,
                                    shared_context=SHARED_CONTEXT, format="markdown",
                                    length="medium") as session:
                for summary_type in types:
                    try:
                        summary = await run_cancellable(session.summarize(content, summary_type), signal)
                    except AnalysisCancelledError:
                        raise
                    except Exception as e:
                        logger.error(f"LegislatorLens[Summarizer]: error generating {summary_type} summary: {e}")
                        continue
                    log_llm_interaction(f"{self.component}:{summary_type}", content, summary)
                    if summary and summary.strip():
                        results[_VARIANT_FIELDS[summary_type]] = summary.strip()
                    else:
                        logger.warning(f"LegislatorLens[Summarizer]: empty {summary_type} summary")
        except LegislatorLensError:
            raise
        except Exception as e:
            raise ClientError(f"Summarizer failed: {e}") from e

        if not results:
            raise MalformedResponseError("Summarizer produced no summary variants")

        logger.info(f"LegislatorLens[Summarizer]: generated {len(results)} of {len(types)} summary variants")
        return SummaryVariants(**results)
