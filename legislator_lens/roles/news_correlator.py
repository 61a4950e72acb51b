"""
Legislator Lens - news correlator role
Correlates a bill with news coverage from several sources and summarizes the
coverage as a weekly timeline and a coarse sentiment label.
"""
import asyncio
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from ..clients.base_client import BaseNewsClient
from ..clients.guardian_client import GUARDIAN_SOURCE, GuardianClient
from ..clients.newsapi_client import NewsApiClient
from ..clients.serpapi_client import GOOGLE_NEWS_SOURCE, SerpApiClient
from ..core.cancellation import CancelSignal, run_cancellable
from ..core.exceptions import ValidationError
from ..models.availability import Availability
from ..models.news import NewsArticle, NewsCorrelation, TimelineEvent, TrendingTopic

logger = logging.getLogger(__name__)

DEFAULT_SOURCES = ("guardian", "serpapi", "newsapi")
DEFAULT_MAX_RESULTS = 30
MAX_TIMELINE_EVENTS = 10

POSITIVE_WORDS = ("support", "approve", "benefit", "improve", "success", "advance")
NEGATIVE_WORDS = ("oppose", "reject", "harm", "fail", "concern", "problem")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def week_start(value: datetime) -> datetime:
    """Midnight UTC of the Sunday starting the week that contains `value`."""
    value = _as_utc(value)
    days_since_sunday = (value.weekday() + 1) % 7
    sunday = value.date() - timedelta(days=days_since_sunday)
    return datetime.combine(sunday, time.min, tzinfo=timezone.utc)


def source_tier(article: NewsArticle) -> int:
    if article.source == GUARDIAN_SOURCE:
        return 3
    if GOOGLE_NEWS_SOURCE in article.source:
        return 2
    return 1


def deduplicate(articles: Iterable[NewsArticle]) -> List[NewsArticle]:
    """Drop articles whose URL was already seen; the first occurrence wins."""
    seen = set()
    unique = []
    for article in articles:
        if article.url in seen:
            continue
        seen.add(article.url)
        unique.append(article)
    return unique


def merge_articles(results: Sequence[List[NewsArticle]],
                   max_results: int = DEFAULT_MAX_RESULTS) -> List[NewsArticle]:
    """
    Merge per-source article lists into one ranked list.

    Ranking: most recent week first, then source tier, then publication time.
    The sort is stable, so articles tied on all three keep their merge order.
    """
    unique = deduplicate(article for result in results for article in result)
    unique.sort(
        key=lambda a: (week_start(a.published_at), source_tier(a), _as_utc(a.published_at)),
        reverse=True,
    )
    return unique[:max_results]


def group_by_week(articles: List[NewsArticle]) -> List[TimelineEvent]:
    """Weekly timeline buckets, most recent week first, at most ten."""
    groups: Dict[datetime, List[NewsArticle]] = {}
    for article in articles:
        groups.setdefault(week_start(article.published_at), []).append(article)

    events = [
        TimelineEvent(
            date=week,
            event=f"{len(items)} article{'s' if len(items) > 1 else ''} published",
            articles=items,
        )
        for week, items in groups.items()
    ]
    events.sort(key=lambda e: e.date, reverse=True)
    return events[:MAX_TIMELINE_EVENTS]


def analyze_sentiment(articles: List[NewsArticle]) -> str:
    """
    Lexicon heuristic over titles and descriptions.
    Each lexicon word counts at most once per article.
    """
    positive = negative = 0
    for article in articles:
        text = f"{article.title} {article.description}".lower()
        positive += sum(1 for word in POSITIVE_WORDS if word in text)
        negative += sum(1 for word in NEGATIVE_WORDS if word in text)

    # nothing to go on
    if positive + negative == 0:
        return "neutral"

    ratio = positive / (positive + negative)
    if ratio > 0.6:
        return "positive"
    if ratio < 0.4:
        return "negative"
    if abs(positive - negative) < 2:
        return "mixed"
    return "neutral"


def _to_datetime(value) -> datetime:
    """Accept a datetime, a date or an ISO 8601 string such as "2024-01-03"."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise ValidationError(f"Introduced date is not an ISO 8601 date: {value!r}") from e
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    raise ValidationError(f"Expected a date, datetime or ISO string, got {type(value).__name__}")


class NewsCorrelator:
    """
    News correlation role.

    :param config: service configuration
    :param sources: source name -> client; defaults to Guardian, SerpAPI and NewsAPI
    """
    component = "News"

    def __init__(self, config: Dict, sources: Optional[Dict[str, BaseNewsClient]] = None):
        self.config = config
        self.max_results = self.config.get("max_news_results", DEFAULT_MAX_RESULTS)
        if sources is None:
            sources = {
                "guardian": GuardianClient(config),
                "serpapi": SerpApiClient(config),
                "newsapi": NewsApiClient(config),
            }
        self.sources = sources

    def availability(self) -> Availability:
        if any(client.available for client in self.sources.values()):
            return Availability.READY
        return Availability.UNAVAILABLE

    async def _search(self, name: str, query: str, from_date: Optional[datetime],
                      to_date: Optional[datetime]) -> List[NewsArticle]:
        client = self.sources.get(name)
        if client is None:
            return []
        try:
            return await client.search(query, from_date, to_date)
        except Exception as e:
            logger.error(f"LegislatorLens[News]: source '{name}' failed: {e}", exc_info=True)
            return []

    async def find_related_news(self, title: str, keywords: List[str],
                                from_date: Optional[datetime] = None,
                                to_date: Optional[datetime] = None,
                                max_results: Optional[int] = None,
                                sources: Sequence[str] = DEFAULT_SOURCES,
                                signal: Optional[CancelSignal] = None) -> List[NewsArticle]:
        """
        Query the selected sources concurrently and merge their results.

        :param title: bill title
        :param keywords: extra search terms, OR-ed with the title
        :param sources: source names in merge order
        :return: deduplicated, ranked articles
        """
        query = " OR ".join([title, *keywords])
        names = [name for name in DEFAULT_SOURCES if name in sources]
        results = await run_cancellable(
            asyncio.gather(*(self._search(name, query, from_date, to_date) for name in names)),
            signal,
        )
        merged = merge_articles(results, max_results or self.max_results)
        logger.info(f"LegislatorLens[News]: {len(merged)} articles from {len(names)} sources")
        return merged

    async def correlate(self, title: str, summary: str, keywords: List[str],
                        introduced_date=None, signal: Optional[CancelSignal] = None) -> NewsCorrelation:
        """
        Correlate a bill with its news coverage.

        Coverage is searched from 90 days before introduction, or the last
        180 days when the introduction date is unknown, through today.
        """
        now = datetime.now(timezone.utc)
        if introduced_date is not None:
            from_date = _to_datetime(introduced_date) - timedelta(days=90)
        else:
            from_date = now - timedelta(days=180)

        articles = await self.find_related_news(title, keywords, from_date=from_date, to_date=now,
                                                signal=signal)
        return NewsCorrelation(
            articles=articles,
            total_results=len(articles),
            keywords=keywords,
            timeline_events=group_by_week(articles),
            sentiment=analyze_sentiment(articles),
        )

    async def provision_news_context(self, provision_description: str,
                                     keywords: List[str]) -> List[NewsArticle]:
        """Recent coverage (last 180 days) of one provision, at most ten articles."""
        query = f"{provision_description} {' '.join(keywords)}".strip()
        from_date = datetime.now(timezone.utc) - timedelta(days=180)

        newsapi_articles = await self._search("newsapi", query, from_date, None)
        guardian_articles = await self._search("guardian", query, from_date, None)
        return deduplicate([*newsapi_articles, *guardian_articles])[:10]

    async def trending_topics(self, categories: List[str]) -> List[TrendingTopic]:
        """Guardian coverage of the top three categories; categories without coverage are left out."""
        topics = []
        for category in categories[:3]:
            articles = await self.find_related_news(category, [], max_results=5, sources=("guardian",))
            if articles:
                topics.append(TrendingTopic(topic=category, articles=articles))
        return topics
