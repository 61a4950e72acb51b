"""
Legislator Lens service entry point
Wires the roles to their backends and puts a keyed cache in front of the
aggregator.
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .clients.gemini_client import GeminiClient
from .clients.ollama_runtime import OllamaLanguageModel, OllamaRuntime, OllamaSummarizer, OllamaWriter
from .core import cache_manager
from .core.cancellation import CancelSignal
from .core.config import load_config
from .core.exceptions import LegislatorLensError, UnavailableError, ValidationError
from .core.log import get_logger, setup_llm_logger
from .core.validators import require_text
from .models.analysis import AnalysisEnvelope, AnalysisLevel, CompositeAnalysis, options_for_level
from .models.availability import Availability, AvailabilityReport, LevelRecommendation
from .models.cloud import HistoricalBillAnalysis
from .models.letter import GeneratedLetter, LetterInput
from .models.news import NewsCorrelation
from .models.qa import QAMessage
from .roles.aggregator import Aggregator
from .roles.categorizer import BillCategorizer
from .roles.historian import HistoricalAnalyzer
from .roles.impact_analyst import ImpactAnalyzer
from .roles.letter_writer import LetterWriter
from .roles.news_correlator import NewsCorrelator
from .roles.provisions import ProvisionExtractor
from .roles.qa import BillQA, BillQASession
from .roles.stakeholders import StakeholderAnalyzer
from .roles.summarizer import BillSummarizer

logger = get_logger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".legislator_lens"


class LegislatorLens:
    """
    Bill analysis service.
    Validates input, serves cached analyses by (bill_id, level, options) and
    runs the aggregator on a miss.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, aggregator: Optional[Aggregator] = None,
                 qa: Optional[BillQA] = None, letter_writer: Optional[LetterWriter] = None):
        # 1. configuration
        self.config = load_config(config)
        self.cache_expiration = self.config.get("cache_expiration_seconds", cache_manager.CACHE_EXPIRATION)
        setup_llm_logger(self.config)

        # 2. cache
        data_dir = self.config.get("cache_dir") or str(DEFAULT_DATA_DIR)
        cache_manager.init_cache(data_dir)

        # 3. roles
        self.runtime = OllamaRuntime(self.config)
        self.qa = qa or BillQA(OllamaLanguageModel(self.runtime), self.config)
        self.letter_writer = letter_writer or LetterWriter(OllamaWriter(self.runtime), self.config)
        self.aggregator = aggregator or self._build_aggregator()

    def _build_aggregator(self) -> Aggregator:
        summarizer_capability = OllamaSummarizer(self.runtime)
        prompt_capability = OllamaLanguageModel(self.runtime)
        gemini = GeminiClient(self.config)

        return Aggregator(
            self.config,
            summarizer=BillSummarizer(summarizer_capability, self.config),
            categorizer=BillCategorizer(prompt_capability, self.config),
            provision_extractor=ProvisionExtractor(prompt_capability, self.config),
            stakeholder_analyzer=StakeholderAnalyzer(prompt_capability, self.config),
            historical_analyzer=HistoricalAnalyzer(gemini, self.config),
            impact_analyzer=ImpactAnalyzer(gemini, self.config),
            news_correlator=NewsCorrelator(self.config),
            capabilities={
                "summarizer": summarizer_capability,
                "prompt": prompt_capability,
                "writer": self.letter_writer.capability,
            },
        )

    def close(self):
        cache_manager.close_cache()

    @require_text("bill_id", "title", "summary", "text")
    async def analyze_bill(
        self,
        bill_id: str,
        title: str,
        summary: str,
        text: str,
        introduced_date=None,
        level: str = AnalysisLevel.STANDARD.value,
        overrides: Optional[Dict[str, Any]] = None,
        force_refresh: bool = False,
        signal: Optional[CancelSignal] = None,
    ) -> AnalysisEnvelope:
        """
        Analyze a bill at the given level, reusing a cached analysis when present.

        :param bill_id: stable bill identifier, e.g. "118-hr-1234"
        :param level: quick, standard or deep
        :param overrides: option flags applied under the level's own flags
        :param force_refresh: skip the cache lookup
        :param signal: optional cancellation token; a cancelled analysis is returned but not cached
        :raises ValidationError: a required field is missing or the level is unknown
        """
        try:
            level = AnalysisLevel(level)
        except ValueError as e:
            raise ValidationError(f"Unknown analysis level: {level}") from e

        options = options_for_level(level, overrides)
        key = cache_manager.build_analysis_key(bill_id, level.value, options.model_dump())
        if not force_refresh:
            cached = await cache_manager.get(key)
            if cached is not None:
                logger.info(f"LegislatorLens: returning cached {level.value} analysis for {bill_id}")
                return AnalysisEnvelope(
                    analysis=CompositeAnalysis.model_validate(cached["analysis"]),
                    analysis_level=level,
                    from_cache=True,
                    cached_at=datetime.fromisoformat(cached["cached_at"]),
                )

        logger.info(f"LegislatorLens: running {level.value} analysis for {bill_id}")
        try:
            analysis = await self.aggregator.run_analysis(
                title, summary, text, introduced_date,
                options=options,
                signal=signal,
            )
        except LegislatorLensError as e:
            logger.error(f"LegislatorLens: analysis of {bill_id} failed: {type(e).__name__}: {e}")
            raise

        cached_at = datetime.now(timezone.utc)
        if signal is not None and signal.cancelled:
            logger.info(f"LegislatorLens: {level.value} analysis of {bill_id} was cancelled, not caching it")
        else:
            await cache_manager.set(
                key,
                {"cached_at": cached_at.isoformat(), "analysis": analysis.model_dump(mode="json")},
                expire=self.cache_expiration,
                tag=bill_id,
            )
        return AnalysisEnvelope(analysis=analysis, analysis_level=level, from_cache=False, cached_at=cached_at)

    @require_text("bill_id", "title")
    async def bill_news(self, bill_id: str, title: str, summary: str = "", keywords: Optional[List[str]] = None,
                        introduced_date=None, force_refresh: bool = False) -> NewsCorrelation:
        """News coverage of a bill, cached per bill."""
        key = cache_manager.build_news_key(bill_id)
        if not force_refresh:
            cached = await cache_manager.get(key)
            if cached is not None:
                return NewsCorrelation.model_validate(cached)

        correlation = await self.aggregator.news_correlator.correlate(
            title, summary, keywords or [], introduced_date
        )
        await cache_manager.set(key, correlation.model_dump(mode="json"), expire=self.cache_expiration, tag=bill_id)
        return correlation

    @require_text("bill_id", "title", "summary")
    async def bill_history(self, bill_id: str, title: str, summary: str, provisions: List[str],
                           force_refresh: bool = False) -> HistoricalBillAnalysis:
        """Historical analysis of a bill, cached per bill."""
        key = cache_manager.build_historical_key(bill_id)
        if not force_refresh:
            cached = await cache_manager.get(key)
            if cached is not None:
                return HistoricalBillAnalysis.model_validate(cached)

        historical = await self.aggregator.historical_analyzer.analyze(title, summary, provisions)
        await cache_manager.set(key, historical.model_dump(mode="json"), expire=self.cache_expiration, tag=bill_id)
        return historical

    @require_text("text")
    async def summarize(self, text: str, summary_type: str = "key-points",
                        signal: Optional[CancelSignal] = None) -> str:
        """
        Summarize with the on-device summarizer, falling back to the cloud
        model when the summarizer is unavailable.
        """
        summarizer = self.aggregator.summarizer
        if (await summarizer.availability()).usable:
            try:
                return await summarizer.summarize(text, summary_type, signal=signal)
            except UnavailableError:
                logger.info("LegislatorLens: on-device summarizer unavailable, using cloud summary")
        if self.aggregator.impact_analyzer.availability() is not Availability.READY:
            raise UnavailableError("Neither the on-device summarizer nor the cloud model is available")
        return await self.aggregator.impact_analyzer.summarize(text, summary_type, signal=signal)

    async def availability(self) -> AvailabilityReport:
        return await self.aggregator.check_availability()

    async def recommended_level(self) -> LevelRecommendation:
        return await self.aggregator.recommend_analysis_level()

    @require_text("bill_id")
    async def invalidate(self, bill_id: str) -> int:
        """Drop every cached analysis, news correlation and history of a bill."""
        return await cache_manager.evict(bill_id)

    async def cache_stats(self, reset: bool = False) -> Dict[str, Any]:
        """Cache hit/miss counts since startup or the last reset."""
        stats = await cache_manager.get_cache_stats()
        if reset:
            await cache_manager.reset_cache_stats()
        return stats

    @require_text("title", "text")
    async def start_qa_session(self, title: str, text: str, summary: Optional[str] = None) -> BillQASession:
        """Open a conversation about a bill; ask questions on the returned session."""
        return self.qa.start_session(title, text, summary)

    async def quick_answer(self, title: str, summary: str, question: str,
                           signal: Optional[CancelSignal] = None) -> str:
        return await self.qa.quick_answer(title, summary, question, signal=signal)

    async def suggest_questions(self, title: str, summary: str, history: Optional[List[QAMessage]] = None,
                                signal: Optional[CancelSignal] = None) -> List[str]:
        return await self.qa.suggest_follow_up_questions(title, summary, history, signal=signal)

    async def write_letter(self, letter: Union[LetterInput, Dict[str, Any]],
                           signal: Optional[CancelSignal] = None) -> GeneratedLetter:
        """Draft a letter to a representative with the on-device writer."""
        return await self.letter_writer.generate_letter(letter, signal=signal)

    async def write_letter_variations(self, letter: Union[LetterInput, Dict[str, Any]], count: int = 3,
                                      signal: Optional[CancelSignal] = None) -> List[GeneratedLetter]:
        return await self.letter_writer.generate_letter_variations(letter, count, signal=signal)
