"""
Legislator Lens - aggregator unit tests
Partial failures, dependency gating, offline mode and provider attribution.
"""
import asyncio
from datetime import datetime, timezone

import pytest

from legislator_lens.core.cancellation import CancelSignal
from legislator_lens.core.exceptions import AnalysisCancelledError, ValidationError
from legislator_lens.models.analysis import AnalysisLevel, AnalysisOptions, options_for_level
from legislator_lens.models.availability import (
    Availability,
    AvailabilityReport,
    CloudAvailability,
    OnDeviceAvailability,
)
from legislator_lens.models.legislation import BillCategory
from legislator_lens.models.news import NewsArticle
from legislator_lens.roles.aggregator import Aggregator, news_keywords, recommend_analysis_level
from legislator_lens.roles.categorizer import BillCategorizer
from legislator_lens.roles.historian import HistoricalAnalyzer
from legislator_lens.roles.impact_analyst import ImpactAnalyzer
from legislator_lens.roles.news_correlator import NewsCorrelator
from legislator_lens.roles.provisions import ProvisionExtractor
from legislator_lens.roles.stakeholders import StakeholderAnalyzer
from legislator_lens.roles.summarizer import BillSummarizer

from .conftest import (
    HISTORICAL_JSON,
    IMPACT_JSON,
    FakeCapability,
    FakeNewsClient,
    MockLLMResponse,
    MockProvider,
    route_prompt,
)

TITLE = "Affordable Housing Access Act"
SUMMARY = "Expands rental assistance and funds local zoning reform."
TEXT = ("SECTION 1. SHORT TITLE. This Act may be cited as the Affordable Housing Access Act. " * 60)[:5000]


def news_article(url="https://news.example.com/housing"):
    return NewsArticle(
        title="Housing bill gains support",
        url=url,
        source="The Guardian",
        published_at=datetime(2024, 3, 6, tzinfo=timezone.utc),
    )


def cloud_provider(reply):
    provider = MockProvider()
    if isinstance(reply, BaseException):
        provider.text_chat.side_effect = reply
    else:
        provider.text_chat.return_value = MockLLMResponse(reply)
    return provider


def build_aggregator(config, prompt=None, summarizer=None, historian_provider=None,
                     impact_provider=None, news_client=None, capabilities=None):
    prompt = prompt or FakeCapability(name="prompt", responder=route_prompt)
    summarizer = summarizer or FakeCapability(name="summarizer", responder=lambda t: f"{t} summary")
    historian_provider = historian_provider or cloud_provider(HISTORICAL_JSON)
    impact_provider = impact_provider or cloud_provider(IMPACT_JSON)
    news_client = news_client or FakeNewsClient([news_article()])
    return Aggregator(
        config,
        summarizer=BillSummarizer(summarizer, config),
        categorizer=BillCategorizer(prompt, config),
        provision_extractor=ProvisionExtractor(prompt, config),
        stakeholder_analyzer=StakeholderAnalyzer(prompt, config),
        historical_analyzer=HistoricalAnalyzer(historian_provider, config),
        impact_analyzer=ImpactAnalyzer(impact_provider, config),
        news_correlator=NewsCorrelator(config, sources={"guardian": news_client}),
        capabilities=capabilities,
    )


def failing_on(marker):
    """Route prompts normally except the one containing `marker`, which gets prose."""
    def responder(prompt):
        if marker in prompt:
            return "Sorry, I can't help with that."
        return route_prompt(prompt)
    return responder


class TestPresets:

    @pytest.mark.asyncio
    async def test_quick_analysis_is_on_device_only(self, config):
        """Quick preset: core summary present, no enhanced section, no cloud time"""
        historian_provider = cloud_provider(HISTORICAL_JSON)
        aggregator = build_aggregator(config, historian_provider=historian_provider)

        analysis = await aggregator.quick_analysis(TITLE, SUMMARY, TEXT)

        assert analysis.core.summary.key_points == "key-points summary"
        assert analysis.core.summary.tldr == "tl;dr summary"
        assert analysis.core.summary.teaser == "teaser summary"
        assert analysis.core.categories[0].name == "Urban Development"
        assert analysis.core.urgency.urgency == "high"
        assert len(analysis.core.provisions) == 2
        assert [p.group for p in analysis.core.stakeholder_perspectives] == ["Renters", "Landlords"]
        assert analysis.enhanced is None
        assert analysis.processing_time.cloud == 0
        assert analysis.providers.chrome is True
        assert analysis.providers.gemini is False
        historian_provider.text_chat.assert_not_called()

    @pytest.mark.asyncio
    async def test_deep_analysis_with_failing_historian(self, config):
        """A throwing historical adapter leaves impact and news in place"""
        aggregator = build_aggregator(config, historian_provider=cloud_provider(RuntimeError("quota")))

        analysis = await aggregator.deep_analysis(TITLE, SUMMARY, TEXT)

        assert analysis.enhanced.historical_analysis is None
        assert analysis.enhanced.impact_analysis.social_impact.timeframe == "2-5 years"
        assert analysis.enhanced.news_correlation.total_results == 1
        assert analysis.providers.gemini is True
        assert analysis.providers.news is True

    @pytest.mark.asyncio
    async def test_deep_analysis_all_succeed(self, config):
        news_client = FakeNewsClient([news_article()])
        aggregator = build_aggregator(config, news_client=news_client)

        analysis = await aggregator.deep_analysis(TITLE, SUMMARY, TEXT)

        assert analysis.enhanced.historical_analysis.similar_bills[0].title == "Housing Supply Act"
        assert analysis.enhanced.impact_analysis is not None
        # keywords come from the top three categories
        assert news_client.calls[0]["query"] == f"{TITLE} OR zoning OR housing OR rent OR Federal Grants"
        assert analysis.processing_time.total >= analysis.processing_time.chrome

    @pytest.mark.asyncio
    async def test_deep_analysis_with_iso_introduced_date(self, config):
        news_client = FakeNewsClient([news_article()])
        aggregator = build_aggregator(config, news_client=news_client)

        analysis = await aggregator.deep_analysis(TITLE, SUMMARY, TEXT, bill_introduced_date="2024-01-01")

        assert analysis.enhanced.news_correlation.total_results == 1
        assert news_client.calls[0]["from_date"] == datetime(2023, 10, 3, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_standard_analysis_keeps_cloud_off_by_default(self, config):
        impact_provider = cloud_provider(IMPACT_JSON)
        aggregator = build_aggregator(config, impact_provider=impact_provider)

        analysis = await aggregator.standard_analysis(TITLE, SUMMARY, TEXT)

        assert analysis.enhanced is not None
        assert analysis.enhanced.is_empty()
        assert analysis.providers.gemini is False
        impact_provider.text_chat.assert_not_called()

    @pytest.mark.asyncio
    async def test_standard_analysis_overrides(self, config):
        aggregator = build_aggregator(config)

        analysis = await aggregator.standard_analysis(
            TITLE, SUMMARY, TEXT, overrides={"include_impact_analysis": True, "include_stakeholders": False}
        )

        assert analysis.enhanced.impact_analysis is not None
        # stakeholders stay pinned on
        assert analysis.core.stakeholder_perspectives is not None


class TestFailureTolerance:

    @pytest.mark.asyncio
    async def test_unparseable_categories_are_omitted(self, config):
        """Categorizer returns prose: categories absent, the rest still runs"""
        prompt = FakeCapability(name="prompt", responder=failing_on("contextual categories"))
        news_client = FakeNewsClient([news_article()])
        aggregator = build_aggregator(config, prompt=prompt, news_client=news_client)

        analysis = await aggregator.run_analysis(TITLE, SUMMARY, TEXT, options={"include_news": True})

        assert analysis.core.categories is None
        assert analysis.core.urgency is not None
        assert analysis.core.provisions is not None
        # news needs categories for its keywords
        assert analysis.enhanced.news_correlation is None
        assert news_client.calls == []

    @pytest.mark.asyncio
    async def test_everything_failing_still_returns(self, config):
        prompt = FakeCapability(name="prompt", responder=lambda p: RuntimeError("crash"))
        summarizer = FakeCapability(name="summarizer", responder=lambda t: RuntimeError("crash"))
        aggregator = build_aggregator(
            config,
            prompt=prompt,
            summarizer=summarizer,
            historian_provider=cloud_provider(RuntimeError("down")),
            impact_provider=cloud_provider(RuntimeError("down")),
            news_client=FakeNewsClient(error=RuntimeError("down")),
        )

        analysis = await aggregator.deep_analysis(TITLE, SUMMARY, TEXT)

        assert analysis.core.has_any() is False
        assert analysis.enhanced.is_empty()
        assert analysis.providers.model_dump() == {"chrome": False, "gemini": False, "news": False}

    @pytest.mark.asyncio
    async def test_unavailable_on_device_runtime(self, config):
        """Only the cloud contributes: chrome attribution stays false"""
        prompt = FakeCapability(name="prompt", state=Availability.UNAVAILABLE)
        summarizer = FakeCapability(name="summarizer", state=Availability.UNAVAILABLE)
        aggregator = build_aggregator(config, prompt=prompt, summarizer=summarizer)

        analysis = await aggregator.run_analysis(
            TITLE, SUMMARY, TEXT, options=AnalysisOptions(include_impact_analysis=True)
        )

        assert analysis.core.has_any() is False
        assert analysis.providers.chrome is False
        assert analysis.providers.gemini is True
        assert prompt.sessions == []

    @pytest.mark.asyncio
    async def test_session_timeout_is_tolerated(self, config):
        slow = FakeCapability(name="summarizer", create_delay=1)
        aggregator = build_aggregator({**config, "session_timeout_seconds": 0.01}, summarizer=slow)

        analysis = await aggregator.quick_analysis(TITLE, SUMMARY, TEXT)

        assert analysis.core.summary is None
        assert analysis.core.categories is not None


class TestDependencyGating:

    @pytest.mark.asyncio
    async def test_stakeholders_need_provisions(self, config):
        prompt = FakeCapability(name="prompt", responder=route_prompt)
        aggregator = build_aggregator(config, prompt=prompt)

        analysis = await aggregator.run_analysis(
            TITLE, SUMMARY, TEXT, options={"include_provisions": False, "include_stakeholders": True}
        )

        assert analysis.core.provisions is None
        assert analysis.core.stakeholder_perspectives is None
        assert not any("stakeholder perspectives" in p for p in prompt.prompts)

    @pytest.mark.asyncio
    async def test_stakeholders_skipped_when_provisions_fail(self, config):
        prompt = FakeCapability(name="prompt", responder=failing_on("most important provisions"))
        aggregator = build_aggregator(config, prompt=prompt)

        analysis = await aggregator.run_analysis(TITLE, SUMMARY, TEXT)

        assert analysis.core.provisions is None
        assert analysis.core.stakeholder_perspectives is None

    @pytest.mark.asyncio
    async def test_historical_needs_provisions(self, config):
        historian_provider = cloud_provider(HISTORICAL_JSON)
        aggregator = build_aggregator(config, historian_provider=historian_provider)

        analysis = await aggregator.run_analysis(
            TITLE, SUMMARY, TEXT,
            options={"include_provisions": False, "include_historical_analysis": True},
        )

        assert analysis.enhanced.historical_analysis is None
        historian_provider.text_chat.assert_not_called()

    @pytest.mark.asyncio
    async def test_provisions_capped_by_config(self, config):
        aggregator = build_aggregator({**config, "max_provisions": 1})

        analysis = await aggregator.run_analysis(TITLE, SUMMARY, TEXT)

        assert len(analysis.core.provisions) == 1


class TestOfflineMode:

    @pytest.mark.asyncio
    async def test_offline_skips_every_cloud_call(self, config):
        historian_provider = cloud_provider(HISTORICAL_JSON)
        impact_provider = cloud_provider(IMPACT_JSON)
        news_client = FakeNewsClient([news_article()])
        aggregator = build_aggregator(config, historian_provider=historian_provider,
                                      impact_provider=impact_provider, news_client=news_client)
        options = AnalysisOptions(include_historical_analysis=True, include_impact_analysis=True,
                                  include_news=True, offline_mode=True)

        analysis = await aggregator.run_analysis(TITLE, SUMMARY, TEXT, options=options)

        assert analysis.enhanced is None
        assert analysis.processing_time.cloud == 0
        assert analysis.processing_time.total == analysis.processing_time.chrome
        assert analysis.providers.gemini is False
        assert analysis.providers.news is False
        historian_provider.text_chat.assert_not_called()
        impact_provider.text_chat.assert_not_called()
        assert news_client.calls == []


class TestInputAndCancellation:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title,summary,text", [
        ("", SUMMARY, TEXT),
        (TITLE, "   ", TEXT),
        (TITLE, SUMMARY, None),
    ])
    async def test_required_fields(self, config, title, summary, text):
        aggregator = build_aggregator(config)

        with pytest.raises(ValidationError):
            await aggregator.run_analysis(title, summary, text)

    @pytest.mark.asyncio
    async def test_cancelled_signal_empties_core(self, config):
        aggregator = build_aggregator(config)
        signal = CancelSignal()
        signal.cancel("user left the page")

        analysis = await aggregator.quick_analysis(TITLE, SUMMARY, TEXT, signal=signal)

        assert analysis.core.has_any() is False
        assert analysis.providers.chrome is False

    @pytest.mark.asyncio
    async def test_cancelled_mid_analysis_keeps_earlier_fields(self, config):
        signal = CancelSignal()
        prompt = FakeCapability(name="prompt", responder=route_prompt, prompt_delay=5)
        aggregator = build_aggregator(config, prompt=prompt)

        async def cancel_once_categorizing():
            while not any("contextual categories" in p for p in prompt.prompts):
                await asyncio.sleep(0)
            signal.cancel("user left the page")

        canceller = asyncio.create_task(cancel_once_categorizing())
        analysis = await aggregator.quick_analysis(TITLE, SUMMARY, TEXT, signal=signal)
        await canceller

        assert analysis.core.summary is not None
        assert analysis.core.categories is None
        assert analysis.core.provisions is None
        assert analysis.providers.chrome is True
        assert not any("most important provisions" in p for p in prompt.prompts)

    @pytest.mark.asyncio
    async def test_cancelled_cloud_call_spares_siblings(self, config):
        historian_provider = cloud_provider(AnalysisCancelledError("user left the page"))
        aggregator = build_aggregator(config, historian_provider=historian_provider)

        analysis = await aggregator.deep_analysis(TITLE, SUMMARY, TEXT)

        assert analysis.enhanced.historical_analysis is None
        assert analysis.enhanced.impact_analysis is not None
        assert analysis.enhanced.news_correlation is not None
        assert analysis.providers.gemini is True


class TestAvailability:

    @pytest.mark.asyncio
    async def test_check_availability(self, config):
        summarizer = FakeCapability(name="summarizer", state=Availability.READY)
        prompt = FakeCapability(name="prompt", state=Availability.DOWNLOADABLE)
        writer = FakeCapability(name="writer", state=Availability.READY)
        aggregator = build_aggregator(
            config,
            prompt=prompt,
            summarizer=summarizer,
            news_client=FakeNewsClient(available=False),
            capabilities={"summarizer": summarizer, "prompt": prompt, "writer": writer},
        )

        report = await aggregator.check_availability()

        assert report.on_device.model_dump() == {
            "summarizer": True, "prompt": False, "writer": True, "rewriter": False, "proofreader": False,
        }
        assert report.cloud.gemini is True
        assert report.cloud.news_sources is False

    @pytest.mark.asyncio
    async def test_failing_availability_check_counts_as_unavailable(self, config):
        class BrokenCapability(FakeCapability):
            async def availability(self):
                raise RuntimeError("runtime not installed")

        broken = BrokenCapability(name="prompt")
        aggregator = build_aggregator(config, prompt=broken, capabilities={"prompt": broken})

        report = await aggregator.check_availability()

        assert report.on_device.prompt is False

    @pytest.mark.asyncio
    async def test_recommended_level_deep(self, config):
        aggregator = build_aggregator(config)

        recommendation = await aggregator.recommend_analysis_level()

        assert recommendation.level == "deep"
        assert recommendation.available_features == [
            "Bill Summaries", "Categorization & Analysis", "Historical Analysis", "News Correlation",
        ]

    @pytest.mark.parametrize("on_device,cloud,expected", [
        ({"summarizer": True, "prompt": True}, {"gemini": True, "news_sources": True}, "deep"),
        ({"summarizer": True, "prompt": True}, {"gemini": True}, "standard"),
        ({"summarizer": True}, {"gemini": True, "news_sources": True}, "quick"),
        ({}, {}, "quick"),
    ])
    def test_recommendation_thresholds(self, on_device, cloud, expected):
        report = AvailabilityReport(on_device=OnDeviceAvailability(**on_device),
                                    cloud=CloudAvailability(**cloud))

        assert recommend_analysis_level(report).level == expected


class TestNewsKeywords:

    def test_tags_of_top_three_with_name_fallback(self):
        categories = [
            BillCategory(name="Housing", confidence=0.9, tags=["rent", "vouchers"]),
            BillCategory(name="Federal Grants", confidence=0.8),
            BillCategory(name="Zoning", confidence=0.7, tags=["land use"]),
            BillCategory(name="Taxes", confidence=0.6, tags=["lihtc"]),
        ]

        assert news_keywords(categories) == ["rent", "vouchers", "Federal Grants", "land use"]


class TestOptionsForLevel:

    def test_quick_pins_offline(self):
        options = options_for_level(AnalysisLevel.QUICK, {"offline_mode": False, "include_news": True})

        assert options.offline_mode is True
        assert options.include_news is False

    def test_standard_pins_only_stakeholders(self):
        options = options_for_level("standard", {"include_news": True, "include_stakeholders": False,
                                                 "unknown_flag": True})

        assert options.include_news is True
        assert options.include_stakeholders is True
        assert options.offline_mode is False

    def test_deep_enables_everything(self):
        options = options_for_level(AnalysisLevel.DEEP, {"include_summary": False})

        assert options.include_summary is True
        assert options.include_historical_analysis is True
        assert options.offline_mode is False

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            options_for_level("exhaustive")
