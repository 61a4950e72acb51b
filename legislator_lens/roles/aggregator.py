"""
Legislator Lens - hybrid analysis aggregator
Runs the on-device roles, then the cloud roles, and merges everything into a
single CompositeAnalysis. One failing role never fails the whole analysis.
"""
import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Dict, List, Optional, Union

from ..clients.on_device import OnDeviceCapability
from ..core.cancellation import CancelSignal
from ..core.exceptions import AnalysisCancelledError, LegislatorLensError
from ..core.validators import require_text
from ..models.analysis import (
    AnalysisLevel,
    AnalysisOptions,
    CompositeAnalysis,
    EnhancedAnalysis,
    ProcessingTime,
    options_for_level,
)
from ..models.availability import (
    Availability,
    AvailabilityReport,
    CloudAvailability,
    LevelRecommendation,
    OnDeviceAvailability,
)
from ..models.legislation import BillCategory
from .categorizer import BillCategorizer
from .historian import HistoricalAnalyzer
from .impact_analyst import ImpactAnalyzer
from .news_correlator import NewsCorrelator
from .provisions import ProvisionExtractor
from .stakeholders import StakeholderAnalyzer
from .summarizer import DEFAULT_SUMMARY_TYPES, BillSummarizer

logger = logging.getLogger(__name__)

_MS = 1_000_000

# features advertised by the level recommendation, per capability
_FEATURES = (
    ("summarizer", "Bill Summaries"),
    ("prompt", "Categorization & Analysis"),
    ("writer", "Letter Writing"),
    ("gemini", "Historical Analysis"),
    ("news_sources", "News Correlation"),
)


def news_keywords(categories: List[BillCategory]) -> List[str]:
    """Search keywords: tags of the top three categories, or the name when a category has none."""
    keywords: List[str] = []
    for category in categories[:3]:
        keywords.extend(category.tags or [category.name])
    return keywords


def recommend_analysis_level(report: AvailabilityReport) -> LevelRecommendation:
    """
    Pick the richest analysis level the available capabilities support.

    deep: at least two on-device and two cloud capabilities;
    standard: at least two on-device capabilities; quick otherwise.
    """
    on_device = report.on_device.model_dump()
    cloud = report.cloud.model_dump()
    flags = {**on_device, **cloud}
    features = [label for name, label in _FEATURES if flags.get(name)]

    on_device_count = sum(1 for v in on_device.values() if v)
    cloud_count = sum(1 for v in cloud.values() if v)

    if on_device_count >= 2 and cloud_count >= 2:
        return LevelRecommendation(
            level="deep",
            reason="Both on-device and cloud models are available for comprehensive analysis",
            available_features=features,
        )
    if on_device_count >= 2:
        return LevelRecommendation(
            level="standard",
            reason="On-device models are available for core analysis",
            available_features=features,
        )
    return LevelRecommendation(
        level="quick",
        reason="Limited AI capabilities available",
        available_features=features,
    )


class Aggregator:
    """
    Hybrid analysis orchestrator.

    Holds no per-request state, so a single instance can serve concurrent
    analyses.
    """

    def __init__(
        self,
        config: Dict[str, Any],
        summarizer: BillSummarizer,
        categorizer: BillCategorizer,
        provision_extractor: ProvisionExtractor,
        stakeholder_analyzer: StakeholderAnalyzer,
        historical_analyzer: HistoricalAnalyzer,
        impact_analyzer: ImpactAnalyzer,
        news_correlator: NewsCorrelator,
        capabilities: Optional[Dict[str, OnDeviceCapability]] = None,
    ):
        """
        :param capabilities: on-device capabilities by name, checked by check_availability;
            defaults to the summarizer and prompt capabilities behind the roles
        """
        self.config = config
        self.summarizer = summarizer
        self.categorizer = categorizer
        self.provision_extractor = provision_extractor
        self.stakeholder_analyzer = stakeholder_analyzer
        self.historical_analyzer = historical_analyzer
        self.impact_analyzer = impact_analyzer
        self.news_correlator = news_correlator
        self.max_provisions = self.config.get("max_provisions", 5)
        if capabilities is None:
            capabilities = {
                "summarizer": summarizer.capability,
                "prompt": categorizer.capability,
            }
        self.capabilities = capabilities

    async def _guarded(self, label: str, work: Awaitable) -> Optional[Any]:
        """
        Await one role call; failures, caller cancellation included, are
        logged and become None. MemoryError propagates.
        """
        try:
            return await work
        except MemoryError:
            raise
        except AnalysisCancelledError as e:
            logger.info(f"LegislatorLens[Aggregator]: {label} cancelled: {e}")
        except LegislatorLensError as e:
            logger.warning(f"LegislatorLens[Aggregator]: {label} skipped: {type(e).__name__}: {e}")
        except Exception as e:
            logger.error(f"LegislatorLens[Aggregator]: {label} failed unexpectedly: {e}", exc_info=True)
        return None

    @require_text("bill_title", "bill_summary", "bill_text")
    async def run_analysis(
        self,
        bill_title: str,
        bill_summary: str,
        bill_text: str,
        bill_introduced_date=None,
        options: Optional[Union[AnalysisOptions, Dict[str, Any]]] = None,
        signal: Optional[CancelSignal] = None,
    ) -> CompositeAnalysis:
        """
        Run a hybrid analysis of one bill.

        :param bill_introduced_date: date or datetime; narrows the news search window
        :param options: AnalysisOptions or a dict of option fields
        :param signal: optional cancellation token shared by every role call
        :return: CompositeAnalysis with every sub-record that succeeded
        :raises ValidationError: title, summary or text missing or blank
        """
        if options is None:
            options = AnalysisOptions()
        elif isinstance(options, dict):
            options = AnalysisOptions(**options)

        analysis = CompositeAnalysis(generated_at=datetime.now(timezone.utc))
        core = analysis.core
        providers = analysis.providers

        t0 = time.perf_counter_ns()

        # phase 1: on-device, sequential
        if options.include_summary:
            summary = await self._guarded(
                "summary", self.summarizer.generate_summaries(bill_text, DEFAULT_SUMMARY_TYPES, signal=signal)
            )
            if summary is not None:
                core.summary = summary
                providers.chrome = True

        if options.include_categories:
            categorization = await self._guarded(
                "categories", self.categorizer.categorize(bill_title, bill_summary, signal=signal)
            )
            if categorization is not None:
                core.categories = categorization.categories
                providers.chrome = True

            urgency = await self._guarded(
                "urgency", self.categorizer.classify_urgency(bill_title, bill_summary, signal=signal)
            )
            if urgency is not None:
                core.urgency = urgency
                providers.chrome = True

        if options.include_provisions:
            provisions = await self._guarded(
                "provisions",
                self.provision_extractor.extract(bill_text, max_provisions=self.max_provisions, signal=signal),
            )
            if provisions is not None:
                core.provisions = provisions.provisions
                providers.chrome = True

        if options.include_stakeholders and core.provisions:
            stakeholders = await self._guarded(
                "stakeholders",
                self.stakeholder_analyzer.analyze(
                    bill_title, bill_summary, [p.description for p in core.provisions], signal=signal
                ),
            )
            if stakeholders is not None:
                core.stakeholder_perspectives = stakeholders.perspectives
                providers.chrome = True
        elif options.include_stakeholders:
            logger.info("LegislatorLens[Aggregator]: stakeholders skipped, no provisions available")

        t1 = time.perf_counter_ns()

        # phase 2: cloud, concurrent
        if not options.offline_mode:
            enhanced = EnhancedAnalysis()
            labels: List[str] = []
            calls: List[Awaitable] = []

            if options.include_historical_analysis and core.provisions:
                labels.append("historical_analysis")
                calls.append(self._guarded(
                    "historical analysis",
                    self.historical_analyzer.analyze(
                        bill_title, bill_summary, [p.description for p in core.provisions], signal=signal
                    ),
                ))
            if options.include_impact_analysis:
                labels.append("impact_analysis")
                calls.append(self._guarded(
                    "impact analysis",
                    self.impact_analyzer.analyze(bill_title, bill_summary, bill_text, signal=signal),
                ))
            if options.include_news and core.categories:
                labels.append("news_correlation")
                calls.append(self._guarded(
                    "news correlation",
                    self.news_correlator.correlate(
                        bill_title, bill_summary, news_keywords(core.categories),
                        bill_introduced_date, signal=signal,
                    ),
                ))

            results = await asyncio.gather(*calls)
            for label, result in zip(labels, results):
                if result is None:
                    continue
                setattr(enhanced, label, result)
                if label == "news_correlation":
                    providers.news = True
                else:
                    providers.gemini = True

            analysis.enhanced = enhanced
            t2 = time.perf_counter_ns()
            cloud_ms = (t2 - t1) // _MS
        else:
            t2 = t1
            cloud_ms = 0

        analysis.processing_time = ProcessingTime(
            chrome=(t1 - t0) // _MS,
            cloud=cloud_ms,
            total=(t2 - t0) // _MS,
        )
        analysis.generated_at = datetime.now(timezone.utc)

        logger.info(
            f"LegislatorLens[Aggregator]: analysis of '{bill_title}' done in {analysis.processing_time.total}ms "
            f"(chrome={providers.chrome}, gemini={providers.gemini}, news={providers.news})"
        )
        return analysis

    async def quick_analysis(self, bill_title: str, bill_summary: str, bill_text: str,
                             signal: Optional[CancelSignal] = None) -> CompositeAnalysis:
        """On-device only"""
        return await self.run_analysis(bill_title, bill_summary, bill_text,
                                       options=options_for_level(AnalysisLevel.QUICK), signal=signal)

    async def standard_analysis(self, bill_title: str, bill_summary: str, bill_text: str,
                                bill_introduced_date=None, overrides: Optional[Dict[str, Any]] = None,
                                signal: Optional[CancelSignal] = None) -> CompositeAnalysis:
        return await self.run_analysis(bill_title, bill_summary, bill_text, bill_introduced_date,
                                       options=options_for_level(AnalysisLevel.STANDARD, overrides),
                                       signal=signal)

    async def deep_analysis(self, bill_title: str, bill_summary: str, bill_text: str,
                            bill_introduced_date=None,
                            signal: Optional[CancelSignal] = None) -> CompositeAnalysis:
        """Every on-device and cloud role"""
        return await self.run_analysis(bill_title, bill_summary, bill_text, bill_introduced_date,
                                       options=options_for_level(AnalysisLevel.DEEP), signal=signal)

    async def _check_capability(self, name: str, capability: OnDeviceCapability) -> bool:
        try:
            return await capability.availability() is Availability.READY
        except Exception as e:
            logger.warning(f"LegislatorLens[Aggregator]: availability check for '{name}' failed: {e}")
            return False

    async def check_availability(self) -> AvailabilityReport:
        """Which on-device capabilities are ready and which cloud credentials are configured."""
        names = list(OnDeviceAvailability.model_fields)
        states = await asyncio.gather(*(
            self._check_capability(name, self.capabilities[name]) if name in self.capabilities else asyncio.sleep(0, False)
            for name in names
        ))
        return AvailabilityReport(
            on_device=OnDeviceAvailability(**dict(zip(names, states))),
            cloud=CloudAvailability(
                gemini=self.historical_analyzer.availability() is Availability.READY,
                news_sources=self.news_correlator.availability() is Availability.READY,
            ),
        )

    async def recommend_analysis_level(self) -> LevelRecommendation:
        return recommend_analysis_level(await self.check_availability())
