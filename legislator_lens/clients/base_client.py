"""
Base news client
Shared request and error handling for the news source clients. A source never
raises: a missing key or any failure yields an empty result.
"""
import httpx
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..core.log import get_logger
from ..models.news import NewsArticle

logger = get_logger(__name__)


def parse_published(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a publication timestamp into an aware UTC datetime.

    Accepts ISO 8601 (with or without a trailing Z) and the
    "MM/DD/YYYY, HH:MM AM, +0000 UTC" form Google News results use.
    """
    if not value:
        return None
    text = value.strip()
    parsed = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        for fmt in ("%m/%d/%Y, %I:%M %p, %z UTC", "%m/%d/%Y, %I:%M %p, %z", "%m/%d/%Y"):
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class BaseNewsClient(ABC):
    """
    News source base class: HTTP plumbing plus the never-raise search contract
    """
    name: str = "news"

    def __init__(self, api_endpoint: str, api_key: Optional[str], config: Dict):
        """
        :param api_endpoint: search endpoint URL
        :param api_key: credential, None when not configured
        :param config: service configuration dict
        """
        self.API_ENDPOINT = api_endpoint
        self.api_key = api_key
        self.config = config
        self.retrieval_config = self.config.get("retrieval", {})

        self.HEADERS = {
            "User-Agent": "LegislatorLens/1.0"
        }

        timeout_seconds = self.retrieval_config.get("timeout_seconds", 10)
        self.timeout = httpx.Timeout(timeout_seconds)

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    async def _make_request(self, params: Dict) -> Optional[Dict]:
        """
        Shared GET handling

        :param params: query parameters
        :return: the response JSON, or None if the request failed
        """
        try:
            async with httpx.AsyncClient(headers=self.HEADERS, timeout=self.timeout) as client:
                response = await client.get(self.API_ENDPOINT, params=params)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"LegislatorLens[{self.name}]: API request failed: {e}")
            return None
        except httpx.TimeoutException as e:
            logger.error(f"LegislatorLens[{self.name}]: request timed out: {e}")
            return None
        except Exception as e:
            logger.error(f"LegislatorLens[{self.name}]: unexpected error: {e}", exc_info=True)
            return None

    async def search(self, query: str, from_date: Optional[datetime] = None,
                     to_date: Optional[datetime] = None) -> List[NewsArticle]:
        """
        Search the source for articles matching `query`.

        :return: articles in source order; [] when the key is missing or anything fails
        """
        if not self.available:
            logger.warning(f"LegislatorLens[{self.name}]: API key not configured")
            return []

        data = await self._make_request(self._build_params(query, from_date, to_date))
        if data is None:
            return []

        try:
            articles = []
            for item in self._extract_items(data):
                article = self._to_article(item)
                if article is not None:
                    articles.append(article)
        except Exception as e:
            logger.error(f"LegislatorLens[{self.name}]: failed to read results: {e}", exc_info=True)
            return []

        logger.debug(f"LegislatorLens[{self.name}]: {len(articles)} articles for '{query[:80]}'")
        return articles

    @abstractmethod
    def _build_params(self, query: str, from_date: Optional[datetime],
                      to_date: Optional[datetime]) -> Dict[str, str]:
        pass

    @abstractmethod
    def _extract_items(self, data: Dict) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def _to_article(self, item: Dict[str, Any]) -> Optional[NewsArticle]:
        """Map one raw result to a NewsArticle, or None to skip it."""
        pass
