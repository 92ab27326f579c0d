"""Chat interpreter: classify a message, dispatch it, and phrase a reply."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Sequence

from .dispatch import DispatchOutcome, FailureReason, OperationDispatcher
from .intent.entities import truncate_title
from .intent.parser import EntityClassifier
from .intent.suggestions import Suggestion, suggest_rephrasing
from .intent.taxonomy import ENTITY_NOUNS, IntentKind, ParsedCommand

logger = logging.getLogger(__name__)

_VERBS: dict[IntentKind, tuple[str, str]] = {
    IntentKind.CREATE: ("create", "Created"),
    IntentKind.UPDATE: ("update", "Updated"),
    IntentKind.COMPLETE: ("complete", "Completed"),
    IntentKind.VIEW: ("view", "Found"),
}

GENERIC_PROMPT = (
    "I can log moods, synchronicities, beliefs, routines and goals. "
    'Try "Mood: 7/10", "Create morning routine: meditation, journaling" '
    'or "Show mood trends".'
)


def fallback_prompt(
    command: ParsedCommand | None,
    message: str | None = None,
    suggestions: Sequence[Suggestion] | None = None,
) -> str:
    """Prompt used when a message can't be acted on with confidence.

    Args:
        command: The low-confidence command, or None when nothing matched
        message: The unrecognized message, used to tailor the prompt
        suggestions: Precomputed suggestions for message

    Returns:
        Reply text
    """
    if command is None:
        if suggestions is None and message is not None:
            suggestions = suggest_rephrasing(message)
        if not suggestions:
            return GENERIC_PROMPT
        quoted = truncate_title(" ".join(message.split()), 40) if message else ""
        opener = f'I couldn\'t understand "{quoted}".' if quoted else "I couldn't understand that."
        return f"{opener} {suggestions[0].text}"
    noun = ENTITY_NOUNS[command.entity_type][0]
    verb = _VERBS[command.intent][0]
    return f"It sounds like you want to {verb} a {noun}. Could you say a bit more so I get it right?"


def _label(entity: Any) -> str | None:
    if isinstance(entity, dict):
        return entity.get("label")
    return getattr(entity, "label", None)


def describe_outcome(command: ParsedCommand, outcome: DispatchOutcome) -> str:
    """Phrase a dispatch outcome for the user.

    Args:
        command: The dispatched command
        outcome: Result of the dispatch

    Returns:
        Reply text
    """
    singular, plural = ENTITY_NOUNS[command.entity_type]
    verb, past = _VERBS[command.intent]

    if outcome.ok:
        if command.intent is IntentKind.VIEW:
            count = len(outcome.entity) if isinstance(outcome.entity, (list, tuple)) else None
            if count is None:
                return f"Here are your {plural}."
            return f"Found {count} {singular if count == 1 else plural}."
        label = _label(outcome.entity)
        return f"{past} {singular}: {label}" if label else f"{past} {singular}."

    if outcome.reason is FailureReason.LOW_CONFIDENCE:
        return fallback_prompt(command)
    if outcome.reason is FailureReason.MISSING_PARAMETERS:
        needed = ", ".join(p.replace("_", " ") for p in command.missing_parameters)
        return f"To {verb} a {singular} I still need: {needed}."
    if outcome.reason is FailureReason.UNSUPPORTED_OPERATION:
        return f"I can't {verb} {plural} yet."
    if outcome.code == "not_found":
        return f"I couldn't find that {singular}."
    if outcome.code == "validation_failed":
        return f"That {singular} couldn't be saved: {outcome.detail}"
    return f"Something went wrong while trying to {verb} your {singular}. Please try again."


@dataclass(frozen=True)
class ChatReply:
    """Reply to one chat message.

    Attributes:
        message: The message as received
        command: Parsed command, or None when nothing matched
        outcome: Dispatch outcome, or None when nothing was dispatched
        text: Reply text for the user
        suggestions: Rephrasing suggestions when nothing matched
    """

    message: str
    command: ParsedCommand | None
    outcome: DispatchOutcome | None
    text: str
    suggestions: tuple[Suggestion, ...] = ()

    @property
    def handled(self) -> bool:
        """Whether the message resulted in a successful service call."""
        return self.outcome is not None and self.outcome.ok


class ChatInterpreter:
    """Glues the classifier and the dispatcher together.

    Messages that match nothing get rephrasing suggestions; they are not
    errors.

    Attributes:
        classifier: Entity classifier
        dispatcher: Operation dispatcher
    """

    def __init__(self, classifier: EntityClassifier, dispatcher: OperationDispatcher) -> None:
        self.classifier = classifier
        self.dispatcher = dispatcher

    async def handle(
        self,
        message: str,
        *,
        now: datetime | None = None,
        threshold: float | None = None,
    ) -> ChatReply:
        """Interpret one message.

        Args:
            message: Raw message text
            now: Reference time for relative dates
            threshold: Per-call confidence threshold

        Returns:
            ChatReply with the command, outcome and reply text

        Raises:
            InvalidMessageError: If message is not a string or is blank
        """
        command = self.classifier.classify(message, now=now)
        if command is None:
            suggestions = tuple(
                suggest_rephrasing(
                    message[: self.classifier.max_input_length], self.classifier.registry
                )
            )
            return ChatReply(
                message=message,
                command=None,
                outcome=None,
                text=fallback_prompt(None, message, suggestions),
                suggestions=suggestions,
            )

        outcome = await self.dispatcher.dispatch(command, threshold=threshold)
        if not outcome.ok:
            logger.info(
                f"{command.entity_type.value}/{command.intent.value} not dispatched: "
                f"{outcome.reason.value if outcome.reason else 'unknown'}"
            )
        return ChatReply(
            message=message,
            command=command,
            outcome=outcome,
            text=describe_outcome(command, outcome),
        )


__all__ = ["ChatInterpreter", "ChatReply", "describe_outcome", "fallback_prompt"]
