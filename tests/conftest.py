import asyncio
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from ai_service import AIService
from config import Settings
from main import create_app, get_ai_service


class FakeCompletions:
    """Records every completion request and answers with a canned reply"""

    def __init__(self):
        self.calls = []
        self.reply = "Try a licensed plumber."
        self.error = None
        self.delay = 0

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self):
        self.chat = SimpleNamespace(completions=FakeCompletions())


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", openai_api_key="")


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fake_openai():
    return FakeOpenAI()


@pytest.fixture
def ai_client(app, fake_openai):
    app.dependency_overrides[get_ai_service] = lambda: AIService(client=fake_openai)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_service(client):
    def _make(**overrides):
        body = {
            "title": "Leak repair",
            "description": "Fix leaking pipes",
            "category": "plumbing",
            "price": 80,
            "providerId": "p1",
            "providerName": "Pipe Pros",
            "location": "Austin, TX",
        }
        body.update(overrides)
        response = client.post("/services", json=body)
        assert response.status_code == 201, response.text
        return response.json()
    return _make
