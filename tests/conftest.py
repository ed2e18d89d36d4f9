"""Shared fixtures: temporary SQLite database and in-memory fakes for external services."""

import json
from contextlib import asynccontextmanager

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

import ledger.models  # noqa: F401 - register tables
from ledger.config import Settings
from ledger.database import Base, create_session_maker
from ledger.errors import TranscriptError
from ledger.main import create_app

GUEST_ID = "11111111-1111-4111-8111-111111111111"
OTHER_ID = "22222222-2222-4222-8222-222222222222"
OTHER_TOKEN = "other-user-token"


class FakeModelClient:
    """Returns queued completions in order and records every call."""

    def __init__(self):
        self.responses: list = []
        self.calls: list[tuple[str, str]] = []

    def queue(self, *responses):
        for r in responses:
            self.responses.append(r if isinstance(r, (str, Exception)) else json.dumps(r))

    async def complete(self, instruction: str, user_text: str) -> str:
        self.calls.append((instruction, user_text))
        if not self.responses:
            raise AssertionError("model called with no queued response")
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


class FakeStorage:
    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        self.objects[path] = (data, content_type)

    async def create_signed_url(self, path: str, expires_in: int) -> str:
        return f"https://storage.test/signed/{path}?expires_in={expires_in}"


class FakeIdentityProvider:
    def __init__(self, tokens: dict[str, str] | None = None):
        self.tokens = tokens or {}

    async def get_user_id(self, token: str) -> str | None:
        return self.tokens.get(token)


class FakeTranscripts:
    def __init__(self, text: str | None = None):
        self.text = text
        self.calls: list[str] = []

    async def fetch(self, url: str) -> str | None:
        self.calls.append(url)
        return self.text


class FakeCaptions:
    """Caption source returning fixed text, or raising TranscriptError when text is None."""

    def __init__(self, text: str | None = "never gonna give you up"):
        self.text = text
        self.calls: list[str] = []

    async def fetch_text(self, url: str) -> str:
        self.calls.append(url)
        if self.text is None:
            raise TranscriptError()
        return self.text


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}",
        "guest_mode_enabled": True,
        "guest_user_id": GUEST_ID,
        "ai_api_key": "test-key",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest_asyncio.fixture
async def engine(settings):
    eng = create_async_engine(settings.database_url)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_maker(engine):
    return create_session_maker(engine)


@pytest.fixture
def model():
    return FakeModelClient()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def identity():
    return FakeIdentityProvider({OTHER_TOKEN: OTHER_ID})


@pytest.fixture
def transcripts():
    return FakeTranscripts("Transcript of the walkthrough video.")


@pytest.fixture
def captions():
    return FakeCaptions()


@asynccontextmanager
async def running_app(settings, engine, **clients):
    app = create_app(settings, engine=engine, **clients)
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest_asyncio.fixture
async def client(settings, engine, model, storage, identity, transcripts, captions):
    async with running_app(
        settings,
        engine,
        model_client=model,
        storage=storage,
        identity_provider=identity,
        transcripts=transcripts,
        captions=captions,
    ) as c:
        yield c


# Canned model outputs

CLASSIFICATION = {
    "primary_domain": "Business_Strategy",
    "secondary_domain": "Finance",
    "complexity_level": "Beginner",
    "eligible": True,
    "eligibility_reason": "The learner built and used the tracker themselves.",
    "key_topics": ["inventory", "spreadsheets"],
    "evaluator_lens": "Practical stock management.",
}

QUESTIONS = {
    "q1": "How did your formulas work out current stock?",
    "q2": "How did the shop use the tracker day to day?",
    "q3": "What are the limits of a spreadsheet for this?",
    "q4": "What would you change next?",
}


def evaluation(band: str) -> dict:
    return {
        "capability_summary": "Built and ran a spreadsheet stock tracker for a small shop.",
        "confidence_band": band,
        "rationale": "Answers were specific and consistent with the evidence.",
        "layer1_descriptor": "Strong",
        "layer2_descriptor": "Adequate",
        "layer3_descriptor": "Adequate",
        "layer4_descriptor": "Needs work",
    }


ANSWERS = [
    {"questionNumber": 1, "answer": "SUMIF over the sales sheet subtracted from deliveries."},
    {"questionNumber": 2, "answer": "My parents checked it each morning before ordering."},
    {"questionNumber": 3, "answer": "No concurrent edits and formulas break when rows move."},
    {"questionNumber": 4, "answer": "Move it to a small database with a barcode scanner."},
]
