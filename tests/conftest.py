"""
Legislator Lens - pytest configuration and shared fixtures
"""
import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from legislator_lens.clients.on_device import (
    LanguageModelSession,
    OnDeviceCapability,
    SummarizerSession,
    WriterSession,
)
from legislator_lens.core.config import load_config
from legislator_lens.models.availability import Availability


# --- Fakes for the on-device runtime ---

class FakePromptSession(LanguageModelSession):
    def __init__(self, capability, system_prompt=None):
        self.capability = capability
        self.system_prompt = system_prompt
        self.destroyed = False

    async def prompt(self, message: str) -> str:
        self.capability.prompts.append(message)
        if self.capability.prompt_delay:
            await asyncio.sleep(self.capability.prompt_delay)
        reply = self.capability.responder(message)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    async def destroy(self) -> None:
        self.destroyed = True


class FakeSummarizerSession(SummarizerSession):
    def __init__(self, capability):
        self.capability = capability
        self.destroyed = False

    async def summarize(self, text: str, summary_type: str = "key-points") -> str:
        self.capability.prompts.append(summary_type)
        reply = self.capability.responder(summary_type)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    async def destroy(self) -> None:
        self.destroyed = True


class FakeWriterSession(WriterSession):
    def __init__(self, capability, options):
        self.capability = capability
        self.options = options
        self.destroyed = False

    async def write(self, prompt: str) -> str:
        self.capability.prompts.append(prompt)
        if self.capability.prompt_delay:
            await asyncio.sleep(self.capability.prompt_delay)
        reply = self.capability.responder(prompt)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    async def destroy(self) -> None:
        self.destroyed = True


class FakeCapability(OnDeviceCapability):
    """
    Scriptable on-device capability.

    :param responder: callable mapping a prompt (or summary type) to a reply
        string, or to an exception instance to raise
    """

    def __init__(self, name="prompt", responder=None, state=Availability.READY,
                 create_delay=0, prompt_delay=0):
        self.name = name
        self.responder = responder or (lambda prompt: "")
        self.state = state
        self.create_delay = create_delay
        self.prompt_delay = prompt_delay
        self.sessions = []
        self.prompts = []
        self.create_options = []

    async def availability(self) -> Availability:
        return self.state

    async def create(self, **options):
        self.create_options.append(options)
        if self.create_delay:
            await asyncio.sleep(self.create_delay)
        if self.name == "summarizer":
            session = FakeSummarizerSession(self)
        elif self.name == "writer":
            session = FakeWriterSession(self, options)
        else:
            session = FakePromptSession(self, options.get("system_prompt"))
        self.sessions.append(session)
        return session


# --- Canned model output ---

CATEGORIES_JSON = json.dumps([
    {"name": "Housing Affordability", "confidence": 0.8, "description": "Rent and ownership costs",
     "tags": ["housing", "rent"]},
    {"name": "Urban Development", "confidence": 0.95, "description": "City planning",
     "tags": ["zoning"]},
    {"name": "Federal Grants", "confidence": 0.6, "description": "Grant programs", "tags": []},
    {"name": "Tax Credits", "confidence": 0.4, "description": "Low-income housing credit",
     "tags": ["lihtc"]},
])

URGENCY_JSON = json.dumps({
    "urgency": "high",
    "impactLevel": "broad",
    "reasoning": "Housing costs are rising quickly",
    "affectedPopulation": "Renters in high-cost areas",
    "timelineConcerns": ["FY2025 appropriations"],
})

PROVISIONS_JSON = json.dumps({
    "provisions": [
        {"title": "Rental Assistance", "description": "Expands housing vouchers",
         "impact": "More families qualify", "stakeholders": ["Renters", "Landlords"],
         "section": 101, "importance": "high"},
        {"title": "Zoning Grants", "description": "Funds local zoning reform",
         "impact": "More housing supply", "stakeholders": ["Cities"], "importance": "medium"},
    ],
    "keyThemes": ["affordability", "supply"],
})

STAKEHOLDERS_JSON = json.dumps({
    "perspectives": [
        {"stakeholderGroup": "Renters", "position": "Strongly Support", "reasoning": "Lower rents",
         "keyBenefits": ["vouchers"], "keyConcerns": [], "likelyActions": ["advocacy"],
         "quotes": ["This helps us."]},
        {"stakeholderGroup": "Landlords", "position": "oppose", "reasoning": "Compliance costs",
         "keyBenefits": [], "keyConcerns": ["paperwork"], "likelyActions": ["lobbying"]},
    ],
    "consensusAreas": ["Need for more supply"],
    "controversialAreas": ["Voucher inspection rules"],
})

HISTORICAL_JSON = json.dumps({
    "similarBills": [
        {"title": "Housing Supply Act", "congress": "117th", "year": 2021,
         "similarity": "Zoning grants", "outcome": "Died in committee",
         "keyDifferences": ["Smaller budget"]},
    ],
    "trends": ["Bipartisan interest in zoning"],
    "recommendations": ["Pair with infrastructure funding"],
    "historicalContext": "Federal zoning incentives date to the 1990s.",
})

IMPACT_JSON = json.dumps({
    "economicImpact": {"summary": "Moderate cost", "affectedSectors": ["Construction"],
                       "estimatedCost": "$10B over 10 years"},
    "socialImpact": {"summary": "Reduced cost burden", "affectedCommunities": ["Renters"],
                     "timeframe": "2-5 years"},
    "politicalContext": {"summary": "Bipartisan support possible", "likelyCoalitions": ["Mayors"],
                         "potentialObstacles": ["Budget hawks"]},
})


def route_prompt(prompt: str):
    """Answer each on-device prompt with the canned JSON for its task."""
    if "contextual categories" in prompt:
        return CATEGORIES_JSON
    if "urgency and impact level" in prompt:
        return URGENCY_JSON
    if "most important provisions" in prompt:
        return PROVISIONS_JSON
    if "stakeholder perspectives" in prompt:
        return STAKEHOLDERS_JSON
    return RuntimeError(f"unexpected prompt: {prompt[:60]}")


def summary_reply(summary_type: str) -> str:
    return f"{summary_type} summary of the bill"


class FakeNewsClient:
    """News source stand-in; `articles` may be a list or a callable taking the query"""

    def __init__(self, articles=None, available=True, error=None):
        self.articles = articles or []
        self.available = available
        self.error = error
        self.calls = []

    async def search(self, query, from_date=None, to_date=None):
        self.calls.append({"query": query, "from_date": from_date, "to_date": to_date})
        if self.error:
            raise self.error
        if callable(self.articles):
            return self.articles(query)
        return list(self.articles)


class MockLLMResponse:
    def __init__(self, completion_text=""):
        self.completion_text = completion_text


class MockProvider:
    """Cloud provider stand-in with the text_chat surface"""

    def __init__(self, available=True):
        self.available = available
        self.text_chat = AsyncMock()


# --- Pytest fixtures ---

@pytest.fixture
def config():
    """Defaults only, no environment, character budgets instead of tiktoken"""
    return load_config({"use_tokenizer": False}, environ={})


@pytest.fixture
def prompt_capability():
    return FakeCapability(name="prompt", responder=route_prompt)


@pytest.fixture
def summarizer_capability():
    return FakeCapability(name="summarizer", responder=summary_reply)


@pytest.fixture
def mock_provider():
    return MockProvider()


@pytest.fixture
def mock_llm_response():
    return MockLLMResponse()
