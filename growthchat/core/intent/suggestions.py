"""Rephrasing suggestions for messages no rule recognized.

When classification returns nothing, the message is inspected for the pieces
a command needs: an action word and an entity word. Suggestions point at
whichever piece is missing, offer corrections for common misspellings and
show an example for the entity the user seems to mean.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .entities import truncate_title
from .patterns import PatternRegistry, build_default_registry
from .taxonomy import ENTITY_NOUNS, EntityType, IntentKind
from .vocabulary import ACTION_WORDS, COMMON_TYPOS, ENTITY_WORDS

MAX_SUGGESTIONS = 4

# Messages shorter than this, or with fewer words, are asked for more detail
MIN_MESSAGE_LENGTH = 10
MIN_MESSAGE_WORDS = 3

EXAMPLES: dict[EntityType, str] = {
    EntityType.ROUTINE: "Create morning routine: meditation, journaling",
    EntityType.BELIEF: "I believe I am capable of growth",
    EntityType.SYNCHRONICITY: "Log synch: saw 11:11 while thinking about my goal",
    EntityType.MOOD: "Mood: 7/10",
    EntityType.GOAL: "Create a goal to run a marathon by next month",
}

_INTENT_WORDS: dict[IntentKind, str] = {
    IntentKind.CREATE: "create",
    IntentKind.UPDATE: "update",
    IntentKind.COMPLETE: "complete",
    IntentKind.VIEW: "show",
}

_WORD = re.compile(r"[\w'-]+")


def _alternation(words: Iterable[str], suffix: str = "") -> re.Pattern[str]:
    options = "|".join(re.escape(w) for w in sorted(words, key=len, reverse=True))
    return re.compile(rf"(?<![\w-])({options}){suffix}(?![\w-])", re.IGNORECASE)


_ACTION_PATTERN = _alternation(ACTION_WORDS)
_ENTITY_PATTERN = _alternation(ENTITY_WORDS, suffix=r"(?:s|es)?")


class SuggestionKind(str, Enum):
    """What a suggestion asks the user to change."""

    FIX_TYPO = "fix_typo"
    BE_SPECIFIC = "be_specific"
    CHOOSE_ACTION = "choose_action"
    SHOW_EXAMPLE = "show_example"
    ADD_ACTION = "add_action"
    NAME_ENTITY = "name_entity"


@dataclass(frozen=True)
class Suggestion:
    """One way to rephrase an unrecognized message.

    Attributes:
        kind: What the suggestion addresses
        text: Sentence shown to the user
        entity_type: Entity the suggestion is about, when one was detected
    """

    kind: SuggestionKind
    text: str
    entity_type: EntityType | None = None


def correct_typos(message: str) -> tuple[str, list[str]]:
    """Replace common misspellings in a message.

    Args:
        message: Raw message text

    Returns:
        (corrected message, misspelled words found in order)
    """
    found: list[str] = []

    def fix(match: re.Match[str]) -> str:
        word = match.group(0)
        replacement = COMMON_TYPOS.get(word.lower())
        if replacement is None:
            return word
        found.append(word)
        return replacement.capitalize() if word[0].isupper() else replacement

    return _WORD.sub(fix, message), found


def detect_entity(text: str) -> EntityType | None:
    """The first entity type a word in text refers to, if any."""
    found = _ENTITY_PATTERN.search(text)
    if found is None:
        return None
    return EntityType(ENTITY_WORDS[found.group(1).lower()])


def has_action_word(text: str) -> bool:
    return _ACTION_PATTERN.search(text) is not None


def _join(words: list[str]) -> str:
    if len(words) < 2:
        return "".join(words)
    return f"{', '.join(words[:-1])} or {words[-1]}"


def _supported_verbs(registry: PatternRegistry, entity_type: EntityType) -> list[str]:
    intents = {intent for entity, intent in registry.pairs() if entity is entity_type}
    return [word for intent, word in _INTENT_WORDS.items() if intent in intents]


def suggest_rephrasing(
    message: str,
    registry: PatternRegistry | None = None,
) -> list[Suggestion]:
    """Suggest how to rephrase a message that matched no rule.

    Suggestions come most specific first: typo corrections, a request for
    detail on very short messages, then guidance on the missing action or
    entity word. Detection runs on the typo-corrected text.

    Args:
        message: Raw message text
        registry: Registry whose pairs bound the verbs offered per entity
            (defaults to the built-in rules)

    Returns:
        At most MAX_SUGGESTIONS suggestions
    """
    registry = registry if registry is not None else build_default_registry()
    text = " ".join(message.split())
    corrected, typos = correct_typos(text)
    suggestions: list[Suggestion] = []

    if typos:
        suggestions.append(
            Suggestion(SuggestionKind.FIX_TYPO, f'Did you mean "{truncate_title(corrected, 60)}"?')
        )

    if len(text) < MIN_MESSAGE_LENGTH or len(text.split()) < MIN_MESSAGE_WORDS:
        suggestions.append(
            Suggestion(
                SuggestionKind.BE_SPECIFIC,
                f'Could you say a bit more? For example "{EXAMPLES[EntityType.MOOD]}" '
                f'or "{EXAMPLES[EntityType.ROUTINE]}".',
            )
        )

    entity_type = detect_entity(corrected)
    action = has_action_word(corrected)

    if entity_type is not None:
        plural = ENTITY_NOUNS[entity_type][1]
        example = EXAMPLES[entity_type]
        if not action:
            verbs = _join(_supported_verbs(registry, entity_type))
            suggestions.append(
                Suggestion(
                    SuggestionKind.CHOOSE_ACTION,
                    f'What would you like to do with your {plural}? I can {verbs} them, '
                    f'for example "{example}".',
                    entity_type,
                )
            )
        else:
            suggestions.append(
                Suggestion(
                    SuggestionKind.SHOW_EXAMPLE,
                    f'To work with {plural}, try something like "{example}".',
                    entity_type,
                )
            )
    else:
        if not action:
            suggestions.append(
                Suggestion(
                    SuggestionKind.ADD_ACTION,
                    'Start with an action word like "create", "log", "update", "complete" or "show".',
                )
            )
        suggestions.append(
            Suggestion(
                SuggestionKind.NAME_ENTITY,
                "Mention what it's about: a routine, belief, synchronicity, mood or goal.",
            )
        )

    return suggestions[:MAX_SUGGESTIONS]


__all__ = [
    "EXAMPLES",
    "MAX_SUGGESTIONS",
    "Suggestion",
    "SuggestionKind",
    "correct_typos",
    "detect_entity",
    "has_action_word",
    "suggest_rephrasing",
]
