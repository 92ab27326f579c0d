"""Command taxonomy and confidence thresholds for growthchat.

This module defines the entity types, intents, parameter tables and the
immutable ParsedCommand value produced by the classifier.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class EntityType(str, Enum):
    """Domain nouns a chat message can target."""

    ROUTINE = "routine"
    BELIEF = "belief"
    SYNCHRONICITY = "synchronicity"
    MOOD = "mood"
    GOAL = "goal"


class IntentKind(str, Enum):
    """Action a chat message requests against an entity type."""

    CREATE = "create"
    UPDATE = "update"
    COMPLETE = "complete"
    VIEW = "view"


class IntentConfidence:
    """Confidence threshold levels for command classification.

    - HIGH (≥0.85): Unambiguous command phrasing
    - MEDIUM (≥0.65): Clear command, possibly missing details
    - LOW (≥0.40): Weak cue, ask the user to confirm
    - DISPATCH (0.50): Default threshold below which the dispatcher refuses
    """

    HIGH = 0.85
    MEDIUM = 0.65
    LOW = 0.40
    DISPATCH = 0.50


# Final tie-break order when two pairs score the same. Earlier wins.
ENTITY_PRIORITY: tuple[EntityType, ...] = (
    EntityType.SYNCHRONICITY,
    EntityType.MOOD,
    EntityType.BELIEF,
    EntityType.ROUTINE,
    EntityType.GOAL,
)

INTENT_PRIORITY: tuple[IntentKind, ...] = (
    IntentKind.COMPLETE,
    IntentKind.UPDATE,
    IntentKind.CREATE,
    IntentKind.VIEW,
)

# Singular and plural nouns used when talking to the user
ENTITY_NOUNS: dict[EntityType, tuple[str, str]] = {
    EntityType.ROUTINE: ("routine", "routines"),
    EntityType.BELIEF: ("belief", "beliefs"),
    EntityType.SYNCHRONICITY: ("synchronicity", "synchronicities"),
    EntityType.MOOD: ("mood entry", "mood entries"),
    EntityType.GOAL: ("goal", "goals"),
}


Pair = tuple[EntityType, IntentKind]

# Parameter names each (entity, intent) extractor may produce
PARAMETER_KEYS: dict[Pair, frozenset[str]] = {
    (EntityType.ROUTINE, IntentKind.CREATE): frozenset(
        {"name", "steps", "category", "time_of_day", "frequency", "duration_minutes", "tags"}
    ),
    (EntityType.ROUTINE, IntentKind.UPDATE): frozenset(
        {"target", "steps", "category", "time_of_day", "frequency", "duration_minutes"}
    ),
    (EntityType.ROUTINE, IntentKind.COMPLETE): frozenset({"target", "completed_on"}),
    (EntityType.ROUTINE, IntentKind.VIEW): frozenset({"time_of_day", "category"}),
    (EntityType.BELIEF, IntentKind.CREATE): frozenset(
        {"statement", "category", "belief_type", "conviction", "tags"}
    ),
    (EntityType.BELIEF, IntentKind.UPDATE): frozenset({"target", "action", "conviction"}),
    (EntityType.BELIEF, IntentKind.VIEW): frozenset({"category", "belief_type"}),
    (EntityType.SYNCHRONICITY, IntentKind.CREATE): frozenset(
        {
            "title",
            "description",
            "significance",
            "tags",
            "emotions",
            "context",
            "date_occurred",
        }
    ),
    (EntityType.SYNCHRONICITY, IntentKind.VIEW): frozenset({"tags", "patterns", "days"}),
    (EntityType.MOOD, IntentKind.CREATE): frozenset(
        {"mood_rating", "energy_level", "notes", "tags", "entry_date"}
    ),
    (EntityType.MOOD, IntentKind.VIEW): frozenset({"trend", "days"}),
    (EntityType.GOAL, IntentKind.CREATE): frozenset(
        {"title", "category", "priority", "target_date", "tags"}
    ),
    (EntityType.GOAL, IntentKind.UPDATE): frozenset(
        {"target", "progress", "priority", "target_date"}
    ),
    (EntityType.GOAL, IntentKind.COMPLETE): frozenset({"target", "completed_on"}),
    (EntityType.GOAL, IntentKind.VIEW): frozenset({"status", "category"}),
}

# Required parameters per pair; absence is reported, never guessed
REQUIRED_PARAMETERS: dict[Pair, tuple[str, ...]] = {
    (EntityType.ROUTINE, IntentKind.CREATE): ("name",),
    (EntityType.ROUTINE, IntentKind.UPDATE): ("target",),
    (EntityType.ROUTINE, IntentKind.COMPLETE): ("target",),
    (EntityType.BELIEF, IntentKind.CREATE): ("statement",),
    (EntityType.BELIEF, IntentKind.UPDATE): ("target",),
    (EntityType.SYNCHRONICITY, IntentKind.CREATE): ("title",),
    (EntityType.MOOD, IntentKind.CREATE): ("mood_rating",),
    (EntityType.GOAL, IntentKind.CREATE): ("title",),
    (EntityType.GOAL, IntentKind.UPDATE): ("target",),
    (EntityType.GOAL, IntentKind.COMPLETE): ("target",),
}


@dataclass(frozen=True)
class ParsedCommand:
    """Result of classifying one chat message.

    Attributes:
        entity_type: Targeted entity type (routine, mood, etc.)
        intent: Requested action (create, update, complete, view)
        parameters: Read-only mapping of extracted parameters
        confidence: Confidence score 0.0-1.0
        raw_excerpt: Substring of the message that triggered the match
        matched_rules: Names of the rules that matched the winning pair
        missing_parameters: Required parameters the message did not provide
    """

    entity_type: EntityType
    intent: IntentKind
    parameters: Mapping[str, Any]
    confidence: float
    raw_excerpt: str
    matched_rules: tuple[str, ...] = ()
    missing_parameters: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range: {self.confidence}")
        if not isinstance(self.parameters, MappingProxyType):
            object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    @property
    def needs_clarification(self) -> bool:
        """Whether required parameters are missing."""
        return bool(self.missing_parameters)

    def is_high_confidence(self) -> bool:
        """Check if confidence meets the high threshold."""
        return self.confidence >= IntentConfidence.HIGH

    def is_low_confidence(self) -> bool:
        """Check if confidence is below the medium threshold."""
        return self.confidence < IntentConfidence.MEDIUM

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        params: dict[str, Any] = {}
        for key, value in self.parameters.items():
            if isinstance(value, frozenset):
                params[key] = sorted(value)
            elif isinstance(value, tuple):
                params[key] = list(value)
            elif hasattr(value, "isoformat"):
                params[key] = value.isoformat()
            else:
                params[key] = value
        return {
            "entity_type": self.entity_type.value,
            "intent": self.intent.value,
            "parameters": params,
            "confidence": self.confidence,
            "raw_excerpt": self.raw_excerpt,
            "matched_rules": list(self.matched_rules),
            "missing_parameters": list(self.missing_parameters),
        }
