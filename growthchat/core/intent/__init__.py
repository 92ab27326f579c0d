"""Chat command classification for growthchat.

This module decides whether a chat message asks to create, update, complete
or view a routine, belief, synchronicity, mood entry or goal, and extracts the
structured parameters the message carries.

Example usage:
    ```python
    from growthchat.core.intent import EntityClassifier, EntityType

    classifier = EntityClassifier()

    command = classifier.classify("Mood: anxious about work 4/10")
    assert command.entity_type == EntityType.MOOD
    assert command.parameters["mood_rating"] == 4

    # Messages without a recognizable command return None
    assert classifier.classify("hello there") is None
    ```
"""

from .entities import (
    Extracted,
    Extraction,
    NormalizedMessage,
    ParameterExtractor,
    Provenance,
    extract_date,
    extract_free_text,
    extract_hashtags,
    extract_keywords,
    extract_rating,
    extract_target_date,
    infer_category,
    normalize,
)
from .parser import (
    MAX_INPUT_LENGTH,
    Candidate,
    EntityClassifier,
    create_classifier,
)
from .patterns import (
    DEFAULT_RULES,
    PatternRegistry,
    Rule,
    RuleMatch,
    build_default_registry,
)
from .scoring import score_confidence
from .suggestions import (
    Suggestion,
    SuggestionKind,
    suggest_rephrasing,
)
from .taxonomy import (
    ENTITY_NOUNS,
    PARAMETER_KEYS,
    REQUIRED_PARAMETERS,
    EntityType,
    IntentConfidence,
    IntentKind,
    ParsedCommand,
)

__all__ = [
    # Classifier
    "EntityClassifier",
    "Candidate",
    "create_classifier",
    "MAX_INPUT_LENGTH",
    # Rules
    "Rule",
    "RuleMatch",
    "PatternRegistry",
    "DEFAULT_RULES",
    "build_default_registry",
    # Taxonomy
    "EntityType",
    "IntentKind",
    "IntentConfidence",
    "ParsedCommand",
    "PARAMETER_KEYS",
    "REQUIRED_PARAMETERS",
    "ENTITY_NOUNS",
    # Scoring
    "score_confidence",
    # Suggestions
    "Suggestion",
    "SuggestionKind",
    "suggest_rephrasing",
    # Extraction
    "ParameterExtractor",
    "Extraction",
    "Extracted",
    "NormalizedMessage",
    "Provenance",
    "normalize",
    "extract_rating",
    "extract_date",
    "extract_target_date",
    "extract_keywords",
    "extract_hashtags",
    "extract_free_text",
    "infer_category",
]
