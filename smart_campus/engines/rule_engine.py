from typing import Sequence

from smart_campus.engines.topic_config import DEFAULT_RESPONSE, TOPIC_RULES, TopicRule


class RuleResponder:
    """Keyword fallback. Pure and deterministic; no I/O."""

    source = "fallback"

    def __init__(self, rules: Sequence[TopicRule] = TOPIC_RULES):
        self.rules = tuple(rules)
        self._default = next((r for r in self.rules if not r.keywords), None)

    def match(self, message: str) -> TopicRule | None:
        """Return the first rule whose keywords appear in the message."""
        lowered = str(message or "").lower()
        for rule in self.rules:
            if rule.keywords and rule.matches(lowered):
                return rule
        return self._default

    def classify(self, message: str) -> str:
        rule = self.match(message)
        if rule is None or not rule.response:
            return DEFAULT_RESPONSE
        return rule.response

