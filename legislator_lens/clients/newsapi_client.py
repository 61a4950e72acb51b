"""
NewsAPI.org "everything" search
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from .base_client import BaseNewsClient, parse_published
from ..models.news import NewsArticle


class NewsApiClient(BaseNewsClient):
    name = "NewsAPI"

    def __init__(self, config: Dict):
        super().__init__(
            api_endpoint="https://newsapi.org/v2/everything",
            api_key=config.get("news_api_key"),
            config=config,
        )

    def _build_params(self, query: str, from_date: Optional[datetime],
                      to_date: Optional[datetime]) -> Dict[str, str]:
        params = {
            "q": query,
            "apiKey": self.api_key,
            "language": "en",
            "sortBy": "relevancy",
            "pageSize": "20",
        }
        if from_date:
            params["from"] = from_date.date().isoformat()
        if to_date:
            params["to"] = to_date.date().isoformat()
        return params

    def _extract_items(self, data: Dict) -> List[Dict[str, Any]]:
        return data.get("articles") or []

    def _to_article(self, item: Dict[str, Any]) -> Optional[NewsArticle]:
        url = item.get("url")
        published_at = parse_published(item.get("publishedAt"))
        if not url or published_at is None:
            return None
        return NewsArticle(
            title=item.get("title") or "",
            description=item.get("description") or "",
            url=url,
            source=(item.get("source") or {}).get("name") or "NewsAPI",
            published_at=published_at,
            author=item.get("author"),
            image_url=item.get("urlToImage"),
        )
