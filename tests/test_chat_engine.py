import asyncio
import random
from datetime import datetime

import pytest

from smart_campus.core.errors import InvalidRequest
from smart_campus.engines.ai_engine_async import AIResponder, Capability
from smart_campus.engines.chat_engine import (
    APOLOGY_RESPONSES,
    ChatRequest,
    ChatResponder,
    Identity,
)
from smart_campus.engines.rule_engine import RuleResponder
from smart_campus.engines.topic_config import CLUBS_RESPONSE


class ExplodingRules(RuleResponder):
    def classify(self, message):
        raise RuntimeError("rule table corrupted")


class CountingRules(RuleResponder):
    def __init__(self):
        super().__init__()
        self.calls = 0

    def classify(self, message):
        self.calls += 1
        return super().classify(message)


class BrokenAI:
    source = "ai"

    async def generate(self, message):
        raise RuntimeError("adapter bug")


def _resolve(responder, message, identity=None):
    return asyncio.run(responder.resolve(ChatRequest(message=message, identity=identity)))


def _disabled():
    return Capability.disabled("missing GEMINI_API_KEY")


def test_disabled_ai_always_uses_rules():
    responder = ChatResponder(_disabled())
    rules = RuleResponder()

    for message in ["Tell me about campus clubs", "hello", "Where is my lost umbrella?"]:
        reply = _resolve(responder, message)
        assert reply.source == "fallback"
        assert reply.message == rules.classify(message)
        assert reply.error_info is None

    assert responder.ai is None
    assert responder.ai_enabled is False


@pytest.mark.parametrize("message", ["", "   ", None, 42])
def test_missing_message_raises_before_any_responder(message, ai_capability):
    capability = ai_capability()
    rules = CountingRules()
    responder = ChatResponder(capability, rule_responder=rules)

    with pytest.raises(InvalidRequest) as exc:
        _resolve(responder, message)

    assert exc.value.message == "Message is required"
    assert rules.calls == 0
    assert capability.client.models.calls == []


def test_ai_success_is_returned_verbatim(ai_capability):
    capability = ai_capability(text="Hello from AI")
    identity = Identity(id="u1", display_name="Asha Rao", role="student")
    responder = ChatResponder(capability)

    reply = _resolve(responder, "What is happening this week?", identity)

    assert reply.message == "Hello from AI"
    assert reply.source == "ai"
    assert reply.identity == identity
    prompt = capability.client.models.calls[0]["contents"]
    assert "User query: What is happening this week?" in prompt
    assert capability.client.models.calls[0]["model"] == "gemini-test"


def test_ai_failure_falls_back_without_leaking(ai_capability):
    capability = ai_capability(exc=ConnectionError("upstream refused: secret-host:443"))
    responder = ChatResponder(capability)

    reply = _resolve(responder, "Tell me about campus clubs")

    assert reply.source == "fallback"
    assert reply.message == CLUBS_RESPONSE
    assert "secret-host" not in reply.message
    assert reply.error_info is None


def test_ai_timeout_falls_back(ai_capability):
    capability = ai_capability(delay=1.0)
    responder = ChatResponder(capability, timeout=0.01)

    reply = _resolve(responder, "Tell me about campus clubs")

    assert reply.source == "fallback"
    assert reply.message == CLUBS_RESPONSE


def test_ai_empty_completion_falls_back(ai_capability):
    responder = ChatResponder(ai_capability(text="   "))
    reply = _resolve(responder, "hello")
    assert reply.source == "fallback"
    assert reply.message == RuleResponder().classify("hello")


def test_unexpected_adapter_exception_still_falls_back():
    responder = ChatResponder(_disabled(), ai_responder=BrokenAI())
    reply = _resolve(responder, "Tell me about campus clubs")
    assert reply.source == "fallback"
    assert reply.message == CLUBS_RESPONSE


def test_both_paths_failing_returns_apology_with_detail_outside_production():
    responder = ChatResponder(
        _disabled(),
        rule_responder=ExplodingRules(),
        ai_responder=BrokenAI(),
        production=False,
    )

    reply = _resolve(responder, "anything")

    assert reply.message in APOLOGY_RESPONSES
    assert reply.source is None
    assert reply.failed
    assert reply.error_info.kind == "internal_failure"
    assert reply.error_info.detail == "rule table corrupted"


def test_apology_hides_detail_in_production():
    responder = ChatResponder(_disabled(), rule_responder=ExplodingRules(), production=True)

    reply = _resolve(responder, "anything")

    assert reply.message in APOLOGY_RESPONSES
    assert reply.error_info.detail is None


def test_apology_choice_follows_seeded_rng():
    def pick(seed):
        responder = ChatResponder(
            _disabled(),
            rule_responder=ExplodingRules(),
            rng=random.Random(seed),
        )
        return [_resolve(responder, "x").message for _ in range(5)]

    assert pick(7) == pick(7)
    assert set(pick(11)) <= set(APOLOGY_RESPONSES)


def test_reply_has_iso_timestamp():
    reply = _resolve(ChatResponder(_disabled()), "hello")
    parsed = datetime.fromisoformat(reply.timestamp.replace("Z", "+00:00"))
    assert parsed.tzinfo is not None


def test_reply_is_immutable():
    reply = _resolve(ChatResponder(_disabled()), "hello")
    with pytest.raises(Exception):
        reply.message = "changed"


def test_explicit_ai_responder_is_used(ai_capability):
    capability = ai_capability(text="From injected responder")
    responder = ChatResponder(_disabled(), ai_responder=AIResponder(capability, timeout=1.0))
    reply = _resolve(responder, "hi")
    assert reply.source == "ai"
    assert reply.message == "From injected responder"
