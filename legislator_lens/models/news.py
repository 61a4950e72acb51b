"""
News data models
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

Sentiment = Literal["positive", "neutral", "negative", "mixed"]


class NewsArticle(BaseModel):
    """A single article returned by one of the news sources"""
    title: str
    description: str = ""
    url: str
    source: str = Field(description="publisher name, e.g. 'The Guardian'")
    published_at: datetime
    author: Optional[str] = None
    image_url: Optional[str] = None
    relevance: Optional[float] = Field(default=None, description="0-100 score")


class TimelineEvent(BaseModel):
    """One Sunday-aligned week of coverage"""
    date: datetime
    event: str
    articles: List[NewsArticle] = Field(default_factory=list)


class NewsCorrelation(BaseModel):
    articles: List[NewsArticle] = Field(default_factory=list)
    total_results: int = 0
    keywords: List[str] = Field(default_factory=list)
    timeline_events: List[TimelineEvent] = Field(default_factory=list)
    sentiment: Sentiment = "neutral"


class TrendingTopic(BaseModel):
    topic: str
    articles: List[NewsArticle] = Field(default_factory=list)
