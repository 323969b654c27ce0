"""
Shared fixtures for the gapscope test suite.

The narrative service is always replaced by an in-process stub: no test needs
Ollama or Groq to be reachable.  API tests drive the FastAPI app through
httpx's ASGITransport with ``get_narrative_service`` overridden.
"""
from __future__ import annotations

import asyncio
from typing import AsyncGenerator, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from gapscope.main import app
from gapscope.models.schemas import PublicationRecord, PublicationTags
from gapscope.services.narrative import NarrativeServiceError, get_narrative_service


# ---------------------------------------------------------------------------
# Narrative service stubs
# ---------------------------------------------------------------------------

class StubNarrativeService:
    """Deterministic narrative service that records every prompt."""

    def __init__(self, text: str = "Stub narrative summary.") -> None:
        self.text = text
        self.prompts: List[str] = []

    async def summarize(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.text

    async def check_health(self) -> bool:
        return True


class FailingNarrativeService:
    """Narrative service that is always down."""

    def __init__(self) -> None:
        self.calls = 0

    async def summarize(self, prompt: str) -> str:
        self.calls += 1
        raise NarrativeServiceError("connection error: service unreachable")

    async def check_health(self) -> bool:
        return False


class SlowNarrativeService:
    """Narrative service that never answers within a test-sized timeout."""

    async def summarize(self, prompt: str) -> str:
        await asyncio.sleep(5)
        return "too late"


# ---------------------------------------------------------------------------
# Corpus builders
# ---------------------------------------------------------------------------

def make_pub(
    pub_id,
    organism: Optional[str] = None,
    area: Optional[str] = None,
    abstract: Optional[str] = None,
    date: Optional[str] = None,
    title: str = "",
) -> PublicationRecord:
    tags = None
    if organism is not None or area is not None:
        tags = PublicationTags(organism=organism, research_area=area)
    return PublicationRecord(
        id=str(pub_id), title=title, abstract=abstract, date=date, tags=tags
    )


BALANCED_ORGANISMS = [
    "Mus musculus",
    "Arabidopsis thaliana",
    "Caenorhabditis elegans",
    "Drosophila melanogaster",
    "Rattus norvegicus",
]


def balanced_corpus(abstract: str = "Exposure lasted 10 days in orbit.") -> List[PublicationRecord]:
    """10 publications, 5 organisms × 2, no Homo sapiens, no research-area tags."""
    return [
        make_pub(f"{i}-{j}", organism=name, abstract=abstract)
        for i, name in enumerate(BALANCED_ORGANISMS)
        for j in range(2)
    ]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def stub_narrative() -> StubNarrativeService:
    return StubNarrativeService()


@pytest.fixture
def failing_narrative() -> FailingNarrativeService:
    return FailingNarrativeService()


@pytest_asyncio.fixture
async def client(stub_narrative: StubNarrativeService) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx AsyncClient wired to the FastAPI app with the narrative service
    overridden by the deterministic stub.
    """
    app.dependency_overrides[get_narrative_service] = lambda: stub_narrative

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
