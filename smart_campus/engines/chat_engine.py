"""
Smart Campus Chatbot - response resolution

Flow per message:
1. Reject empty input (InvalidRequest, no responder runs)
2. AI responder, when the startup capability allows it
3. Keyword rule responder on any AI failure or when AI is off
4. Apology reply if the fallback itself blows up
"""

import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from smart_campus.config import Config
from smart_campus.core.errors import InternalFailure, InvalidRequest
from smart_campus.engines.ai_engine_async import AIOutcome, AIResponder, Capability
from smart_campus.engines.rule_engine import RuleResponder
from smart_campus.utils.logging_utils import anonymize_text, get_logger

logger = get_logger("chat")

SOURCE_AI = "ai"
SOURCE_FALLBACK = "fallback"

APOLOGY_RESPONSES: Tuple[str, ...] = (
    "I'm sorry, I'm having trouble connecting to the campus information system right now. "
    "Please try again later or contact the campus administration office for assistance.",
    "I apologize, but I'm currently unable to process your request. "
    "Please reach out to the relevant department directly for help with your inquiry.",
    "There seems to be a technical issue with my connection. Please try asking again in a "
    "few moments, or contact campus support for immediate assistance.",
)


# =============================================================================
# DATA TYPES
# =============================================================================

@dataclass(frozen=True)
class Identity:
    id: str
    display_name: str
    role: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.display_name, "role": self.role}


@dataclass(frozen=True)
class ChatRequest:
    message: Any
    identity: Optional[Identity] = None


@dataclass(frozen=True)
class ErrorInfo:
    kind: str
    detail: Optional[str] = None


@dataclass(frozen=True)
class ChatReply:
    message: str
    timestamp: str
    source: Optional[str] = None
    identity: Optional[Identity] = None
    error_info: Optional[ErrorInfo] = None

    @property
    def failed(self) -> bool:
        return self.error_info is not None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# =============================================================================
# ORCHESTRATOR
# =============================================================================

class ChatResponder:
    def __init__(
        self,
        capability: Capability,
        rule_responder: Optional[RuleResponder] = None,
        ai_responder: Optional[AIResponder] = None,
        production: Optional[bool] = None,
        rng: Optional[random.Random] = None,
        timeout: float = Config.AI_TIMEOUT_SECONDS,
    ):
        self.capability = capability
        self.rules = rule_responder or RuleResponder()
        # Only hold an AI responder when the capability says one can work.
        if ai_responder is not None:
            self.ai = ai_responder
        elif capability.ai_enabled:
            self.ai = AIResponder(capability, timeout=timeout)
        else:
            self.ai = None
        self.production = Config.is_production() if production is None else production
        self.rng = rng or random.Random()

    @property
    def ai_enabled(self) -> bool:
        return self.ai is not None

    async def resolve(self, request: ChatRequest) -> ChatReply:
        message = request.message
        if not isinstance(message, str) or not message.strip():
            raise InvalidRequest()

        logger.info(f"Chatbot request received: {anonymize_text(message)[:200]}")

        if self.ai is not None:
            outcome = await self._try_ai(message)
            if outcome.ok:
                return ChatReply(
                    message=outcome.text,
                    timestamp=_now_iso(),
                    source=SOURCE_AI,
                    identity=request.identity,
                )
            logger.warning(
                f"Gemini AI error ({outcome.error_kind}): {outcome.error.detail if outcome.error else ''}; "
                "falling back to predefined responses"
            )

        try:
            text = self.rules.classify(message)
            if not text:
                raise InternalFailure("rule responder returned empty text")
        except Exception as e:
            failure = e if isinstance(e, InternalFailure) else InternalFailure(str(e), cause=e)
            logger.error(f"Chatbot error: {failure.detail}", exc_info=True)
            return self.apology_reply(failure, identity=request.identity)

        logger.info("Using fallback responses")
        return ChatReply(
            message=text,
            timestamp=_now_iso(),
            source=SOURCE_FALLBACK,
            identity=request.identity,
        )

    async def _try_ai(self, message: str) -> AIOutcome:
        try:
            return await self.ai.generate(message)
        except Exception as e:
            # Anything the adapter did not turn into an outcome still counts as a provider failure.
            return AIOutcome.failure("provider_error", str(e))

    def apology_reply(
        self,
        failure: InternalFailure,
        identity: Optional[Identity] = None,
    ) -> ChatReply:
        return ChatReply(
            message=self.rng.choice(APOLOGY_RESPONSES),
            timestamp=_now_iso(),
            source=None,
            identity=identity,
            error_info=ErrorInfo(
                kind="internal_failure",
                detail=None if self.production else failure.detail,
            ),
        )
