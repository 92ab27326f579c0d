"""Core components for growthchat."""

from __future__ import annotations

from .dispatch import (
    DispatchOutcome,
    FailureReason,
    OperationDispatcher,
)
from .errors import (
    EntityNotFoundError,
    EntityValidationError,
    GrowthChatError,
    InvalidMessageError,
    ServiceError,
    UnsupportedOperationError,
)
from .intent import (
    EntityClassifier,
    EntityType,
    IntentConfidence,
    IntentKind,
    ParsedCommand,
    PatternRegistry,
    Rule,
    Suggestion,
    build_default_registry,
    score_confidence,
    suggest_rephrasing,
)
from .interpreter import (
    ChatInterpreter,
    ChatReply,
    fallback_prompt,
)
from .services import (
    CAPABILITY_FOR_INTENT,
    Capability,
    DomainService,
    Entity,
    InMemoryService,
    build_memory_services,
)

__all__ = [
    # Classification
    "EntityClassifier",
    "EntityType",
    "IntentKind",
    "IntentConfidence",
    "ParsedCommand",
    "PatternRegistry",
    "Rule",
    "build_default_registry",
    "score_confidence",
    "Suggestion",
    "suggest_rephrasing",
    # Dispatch
    "OperationDispatcher",
    "DispatchOutcome",
    "FailureReason",
    # Services
    "DomainService",
    "Capability",
    "CAPABILITY_FOR_INTENT",
    "Entity",
    "InMemoryService",
    "build_memory_services",
    # Interpreter
    "ChatInterpreter",
    "ChatReply",
    "fallback_prompt",
    # Errors
    "GrowthChatError",
    "InvalidMessageError",
    "ServiceError",
    "EntityValidationError",
    "EntityNotFoundError",
    "UnsupportedOperationError",
]
