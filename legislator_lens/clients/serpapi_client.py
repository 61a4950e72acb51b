"""
SerpAPI Google News search
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .base_client import BaseNewsClient, parse_published
from ..models.news import NewsArticle

GOOGLE_NEWS_SOURCE = "Google News"


class SerpApiClient(BaseNewsClient):
    name = "SerpAPI"

    def __init__(self, config: Dict):
        super().__init__(
            api_endpoint="https://serpapi.com/search",
            api_key=config.get("serpapi_api_key"),
            config=config,
        )

    def _build_params(self, query: str, from_date: Optional[datetime],
                      to_date: Optional[datetime]) -> Dict[str, str]:
        params = {
            "q": query,
            "api_key": self.api_key,
            "engine": "google_news",
            "num": "20",
        }
        # custom date range needs both ends
        if from_date and to_date:
            params["tbs"] = f"cdr:1,cd_min:{int(from_date.timestamp())},cd_max:{int(to_date.timestamp())}"
        return params

    def _extract_items(self, data: Dict) -> List[Dict[str, Any]]:
        return data.get("news_results") or []

    def _to_article(self, item: Dict[str, Any]) -> Optional[NewsArticle]:
        url = item.get("link")
        if not url:
            return None
        source = item.get("source")
        source_name = source.get("name") if isinstance(source, dict) else source
        return NewsArticle(
            title=item.get("title") or item.get("snippet", ""),
            description=item.get("snippet") or "",
            url=url,
            source=source_name or GOOGLE_NEWS_SOURCE,
            published_at=parse_published(item.get("date")) or datetime.now(timezone.utc),
            image_url=item.get("thumbnail"),
        )
