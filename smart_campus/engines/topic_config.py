"""
Topic Configuration: single source of truth for the fallback keyword table.

The rule responder walks TOPIC_RULES in order and answers with the first
rule whose keywords appear in the message. Order is priority: a message
mentioning both "event" and "lost" gets the events answer.
"""

from dataclasses import dataclass
from typing import FrozenSet, Tuple

from smart_campus.config import Config


@dataclass(frozen=True)
class TopicRule:
    name: str
    keywords: FrozenSet[str]
    response: str

    def matches(self, lowered: str) -> bool:
        return any(kw in lowered for kw in self.keywords)


# =============================================================================
# CANNED RESPONSES
# =============================================================================

EVENTS_RESPONSE = (
    "I can help you find information about campus events. Please check the Events "
    "section in the app or visit the campus notice board for the latest event schedules."
)

LOST_FOUND_RESPONSE = (
    "For lost and found items, please visit the Lost & Found section in the app or "
    "contact the campus security office. You can report lost items or check if your "
    "missing item has been found."
)

CLUBS_RESPONSE = (
    "You can find information about student clubs and organizations in the Clubs "
    "section. There are many active clubs for different interests including academic, "
    "cultural, sports, and technical activities."
)

FEEDBACK_RESPONSE = (
    "You can submit feedback, suggestions, or complaints through the Feedback section "
    "in the app. Your input helps us improve campus services and facilities."
)

ACADEMIC_RESPONSE = (
    "For academic-related questions, please contact your department office or academic "
    "advisor. You can also check the academic calendar and policies in the student handbook."
)

CAMPUS_RESPONSE_TEMPLATE = (
    "{institution} provides various services including academic support, student "
    "activities, campus facilities, and administrative services. Please visit the "
    "respective sections in the app for specific information."
)

DEFAULT_RESPONSE = (
    "I'm here to help with campus-related questions. You can ask me about events, "
    "lost & found items, clubs, feedback, or general campus information. For specific "
    "questions, please contact the relevant department directly."
)


# =============================================================================
# RULE TABLE
# =============================================================================

def build_topic_rules(
    institution_name: str = Config.INSTITUTION_NAME,
    institution_keyword: str = Config.INSTITUTION_KEYWORD,
) -> Tuple[TopicRule, ...]:
    """Build the ordered rule table for one institution."""
    campus_keywords = {"campus", "university"}
    keyword = (institution_keyword or "").strip().lower()
    if keyword:
        campus_keywords.add(keyword)

    return (
        TopicRule("events", frozenset({"event", "schedule"}), EVENTS_RESPONSE),
        TopicRule("lost_found", frozenset({"lost", "found", "missing"}), LOST_FOUND_RESPONSE),
        TopicRule("clubs", frozenset({"club", "organization", "society"}), CLUBS_RESPONSE),
        TopicRule("feedback", frozenset({"feedback", "complaint", "suggestion"}), FEEDBACK_RESPONSE),
        TopicRule("academic", frozenset({"academic", "class", "grade"}), ACADEMIC_RESPONSE),
        TopicRule(
            "campus",
            frozenset(campus_keywords),
            CAMPUS_RESPONSE_TEMPLATE.format(institution=institution_name),
        ),
        TopicRule("default", frozenset(), DEFAULT_RESPONSE),
    )


TOPIC_RULES: Tuple[TopicRule, ...] = build_topic_rules()
