import asyncio
import time
from dataclasses import dataclass
from typing import Any, Optional

from smart_campus.config import Config
from smart_campus.core.errors import AIProviderError
from smart_campus.engines import monitoring
from smart_campus.utils.logging_utils import get_logger

logger = get_logger("ai")

# ============================================================
# CAMPUS ASSISTANT PROMPT
# ============================================================

CAMPUS_PROMPT_TEMPLATE = """
You are a helpful campus assistant for {institution}. You help students, faculty, and staff with:
- Campus information and navigation
- Event schedules and registration
- Lost and found items
- Club activities and meetings
- Academic policies and procedures
- Feedback and complaints
- General campus services

Please provide helpful, accurate, and concise responses. If you don't know something specific, suggest contacting the appropriate department.

User query: {message}

Please respond in a friendly, professional manner as a campus assistant."""


def build_campus_prompt(message: str, institution: str = Config.INSTITUTION_NAME) -> str:
    return CAMPUS_PROMPT_TEMPLATE.format(institution=institution, message=message)


# ============================================================
# CAPABILITY DETECTION
# ============================================================

@dataclass(frozen=True)
class Capability:
    """Resolved once at startup; read-only afterwards."""

    ai_enabled: bool
    client: Any = None
    model_name: Optional[str] = None
    reason: str = ""

    @classmethod
    def disabled(cls, reason: str) -> "Capability":
        return cls(ai_enabled=False, client=None, model_name=None, reason=reason)


def build_capability(
    api_key: Optional[str] = Config.GEMINI_API_KEY,
    model_name: str = Config.GEMINI_MODEL,
    enabled: bool = Config.AI_ENABLED,
) -> Capability:
    """Try to construct a Gemini client. Never raises."""
    if not enabled:
        logger.info("AI responses disabled by configuration, using fallback responses")
        return Capability.disabled("disabled by configuration")

    if not api_key:
        logger.warning("Gemini API key not found, using fallback responses")
        return Capability.disabled("missing GEMINI_API_KEY")

    try:
        from google import genai
    except ImportError as e:
        logger.warning(f"google-genai package not available ({e}), using fallback responses")
        return Capability.disabled("google-genai not installed")

    try:
        client = genai.Client(api_key=api_key)
    except Exception as e:
        logger.warning(f"Gemini client init failed ({e}), using fallback responses")
        return Capability.disabled(f"client init failed: {e}")

    name = str(model_name or "").replace("models/", "")
    logger.info(f"Gemini AI initialized with model: {name}")
    return Capability(ai_enabled=True, client=client, model_name=name, reason="ready")


# ============================================================
# RESULT TYPE
# ============================================================

@dataclass(frozen=True)
class AIOutcome:
    text: Optional[str] = None
    error: Optional[AIProviderError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.text)

    @property
    def error_kind(self) -> Optional[str]:
        return self.error.kind if self.error else None

    @classmethod
    def success(cls, text: str) -> "AIOutcome":
        return cls(text=text)

    @classmethod
    def failure(cls, kind: str, detail: Optional[str] = None) -> "AIOutcome":
        return cls(error=AIProviderError(kind, detail))


def _classify_provider_error(exc: Exception) -> str:
    code = getattr(exc, "code", None) or getattr(exc, "status_code", None)
    message = str(exc).lower()
    if code in (401, 403) or "api key" in message or "permission" in message:
        return "auth"
    if code == 429 or "resource_exhausted" in message or "quota" in message:
        return "quota"
    if isinstance(exc, (ConnectionError, OSError)) or "connect" in type(exc).__name__.lower():
        return "network"
    return "provider_error"


# ============================================================
# AI RESPONDER
# ============================================================

class AIResponder:
    """Single-shot Gemini completion bounded by a timeout. No retries."""

    source = "ai"

    def __init__(
        self,
        capability: Capability,
        timeout: float = Config.AI_TIMEOUT_SECONDS,
        institution: str = Config.INSTITUTION_NAME,
    ):
        self.capability = capability
        self.timeout = timeout
        self.institution = institution

    @property
    def enabled(self) -> bool:
        return bool(self.capability.ai_enabled and self.capability.client is not None)

    async def generate(self, message: str) -> AIOutcome:
        if not self.enabled:
            return AIOutcome.failure("unavailable", self.capability.reason or None)

        prompt = build_campus_prompt(message, institution=self.institution)
        start = time.time()
        outcome = await self._call(prompt)
        duration_ms = (time.time() - start) * 1000

        await monitoring.record_llm_call(
            duration_ms=duration_ms,
            success=outcome.ok,
            error_kind=outcome.error_kind,
        )
        if outcome.ok:
            logger.info(f"Gemini AI response generated in {duration_ms:.0f}ms")
        return outcome

    async def _call(self, prompt: str) -> AIOutcome:
        client = self.capability.client
        try:
            response = await asyncio.wait_for(
                client.aio.models.generate_content(
                    model=self.capability.model_name,
                    contents=prompt,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            return AIOutcome.failure("timeout", f"no response within {self.timeout:.1f}s")
        except Exception as e:
            return AIOutcome.failure(_classify_provider_error(e), str(e))

        try:
            text = response.text
        except (AttributeError, ValueError) as e:
            return AIOutcome.failure("malformed_response", str(e))

        if not isinstance(text, str) or not text.strip():
            return AIOutcome.failure("malformed_response", "empty completion")
        return AIOutcome.success(text)
