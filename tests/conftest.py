import asyncio
import os
import pathlib
import sys

import pytest

# 1) Put the project root on the import path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# 2) Test defaults, set before smart_campus.config is imported
os.environ["GEMINI_API_KEY"] = ""
os.environ["GOOGLE_API_KEY"] = ""
os.environ["AI_ENABLED"] = "false"
os.environ["APP_ENV"] = "test"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["INSTITUTION_NAME"] = "KLH University"
os.environ["INSTITUTION_KEYWORD"] = "klh"


class FakeGeminiResponse:
    def __init__(self, text):
        self.text = text


class FakeModels:
    def __init__(self, text="Hello from AI", exc=None, delay=0.0, response=None):
        self.text = text
        self.exc = exc
        self.delay = delay
        self.response = response
        self.calls = []

    async def generate_content(self, model, contents):
        self.calls.append({"model": model, "contents": contents})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        if self.response is not None:
            return self.response
        return FakeGeminiResponse(self.text)


class FakeAio:
    def __init__(self, models):
        self.models = models


class FakeGeminiClient:
    """Mimics the `client.aio.models.generate_content` surface of google-genai."""

    def __init__(self, **kwargs):
        self.models = FakeModels(**kwargs)
        self.aio = FakeAio(self.models)


@pytest.fixture
def fake_gemini():
    return FakeGeminiClient


@pytest.fixture
def ai_capability():
    from smart_campus.engines.ai_engine_async import Capability

    def _make(**kwargs):
        return Capability(
            ai_enabled=True,
            client=FakeGeminiClient(**kwargs),
            model_name="gemini-test",
            reason="ready",
        )

    return _make


@pytest.fixture(autouse=True)
def _reset_metrics():
    from smart_campus.engines.monitoring import metrics_store

    metrics_store.metrics.clear()
    yield
    metrics_store.metrics.clear()
