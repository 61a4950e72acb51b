"""
The Guardian Open Platform content search
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from .base_client import BaseNewsClient, parse_published
from ..models.news import NewsArticle

GUARDIAN_SOURCE = "The Guardian"


class GuardianClient(BaseNewsClient):
    name = "Guardian"

    def __init__(self, config: Dict):
        super().__init__(
            api_endpoint="https://content.guardianapis.com/search",
            api_key=config.get("guardian_api_key"),
            config=config,
        )

    def _build_params(self, query: str, from_date: Optional[datetime],
                      to_date: Optional[datetime]) -> Dict[str, str]:
        params = {
            "q": query,
            "api-key": self.api_key,
            "show-fields": "headline,trailText,thumbnail,byline",
            "page-size": "20",
            "order-by": "relevance",
        }
        if from_date:
            params["from-date"] = from_date.date().isoformat()
        if to_date:
            params["to-date"] = to_date.date().isoformat()
        return params

    def _extract_items(self, data: Dict) -> List[Dict[str, Any]]:
        return data.get("response", {}).get("results", [])

    def _to_article(self, item: Dict[str, Any]) -> Optional[NewsArticle]:
        url = item.get("webUrl")
        published_at = parse_published(item.get("webPublicationDate"))
        if not url or published_at is None:
            return None
        fields = item.get("fields") or {}
        return NewsArticle(
            title=fields.get("headline") or item.get("webTitle", ""),
            description=fields.get("trailText") or "",
            url=url,
            source=GUARDIAN_SOURCE,
            published_at=published_at,
            author=fields.get("byline"),
            image_url=fields.get("thumbnail"),
        )
