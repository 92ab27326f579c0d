"""growthchat: chat command interpreter for a personal-growth journal."""

from .core import (
    ChatInterpreter,
    DispatchOutcome,
    EntityClassifier,
    EntityType,
    IntentKind,
    OperationDispatcher,
    ParsedCommand,
)

__version__ = "0.1.0"

__all__ = [
    "ChatInterpreter",
    "DispatchOutcome",
    "EntityClassifier",
    "EntityType",
    "IntentKind",
    "OperationDispatcher",
    "ParsedCommand",
    "__version__",
]
