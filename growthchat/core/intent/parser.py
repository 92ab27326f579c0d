"""Entity classifier for growthchat chat messages.

This module implements the classification pipeline:
1. Validate and normalize the message once
2. Test every registered rule and group matches by (entity, intent)
3. Rank candidate pairs and pick a single winner
4. Extract parameters for the winner and score confidence

Candidates are ranked by the cumulative weight of their lexical rules, then
by cumulative weight including corroborating rules (a bare "x/10"), then by
the number of evidenced parameters, then by a fixed entity order
(synchronicity, mood, belief, routine, goal) and finally a fixed intent order
(complete, update, create, view). The result is deterministic for a given
message and time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..errors import InvalidMessageError
from .entities import Extraction, NormalizedMessage, ParameterExtractor, normalize
from .patterns import PatternRegistry, RuleMatch, build_default_registry
from .scoring import score_confidence
from .taxonomy import (
    ENTITY_PRIORITY,
    INTENT_PRIORITY,
    EntityType,
    IntentKind,
    Pair,
    ParsedCommand,
)

logger = logging.getLogger(__name__)

# Security: Maximum input length to bound regex work
MAX_INPUT_LENGTH = 10_000


@dataclass(frozen=True)
class Candidate:
    """One (entity, intent) pair considered for a message.

    Attributes:
        entity_type: Candidate entity type
        intent: Candidate intent
        matches: Rule matches for the pair, in registry order
        extraction: Parameters extracted for the pair
    """

    entity_type: EntityType
    intent: IntentKind
    matches: tuple[RuleMatch, ...]
    extraction: Extraction

    @property
    def pair(self) -> Pair:
        return (self.entity_type, self.intent)

    @property
    def total_weight(self) -> float:
        return round(sum(m.rule.weight for m in self.matches), 6)

    @property
    def lexical_weight(self) -> float:
        """Cumulative weight of the non-corroborating matches."""
        return round(sum(m.rule.weight for m in self.matches if not m.rule.corroborating), 6)

    @property
    def top_match(self) -> RuleMatch:
        """Highest-weight match; registry order breaks ties."""
        best = self.matches[0]
        for match in self.matches[1:]:
            if match.rule.weight > best.rule.weight:
                best = match
        return best

    def rank_key(self) -> tuple[float, float, int, int, int]:
        """Sort key; smaller sorts first."""
        return (
            -self.lexical_weight,
            -self.total_weight,
            -self.extraction.evidence_count,
            ENTITY_PRIORITY.index(self.entity_type),
            INTENT_PRIORITY.index(self.intent),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_type": self.entity_type.value,
            "intent": self.intent.value,
            "lexical_weight": self.lexical_weight,
            "total_weight": self.total_weight,
            "evidence": self.extraction.evidence_count,
            "rules": [m.rule.name for m in self.matches],
        }


class EntityClassifier:
    """Classifies chat messages into parsed commands.

    Both collaborators are built once and only read afterwards, so a single
    classifier can be shared between callers.

    Attributes:
        registry: Rule registry consulted for every message
        extractor: Per-pair parameter extractor
        max_input_length: Messages longer than this are truncated
    """

    def __init__(
        self,
        registry: PatternRegistry | None = None,
        extractor: ParameterExtractor | None = None,
        max_input_length: int = MAX_INPUT_LENGTH,
    ) -> None:
        """Initialize the classifier.

        Args:
            registry: Rule registry (defaults to the built-in rules)
            extractor: Parameter extractor (defaults to ParameterExtractor())
            max_input_length: Truncation limit for incoming messages
        """
        if max_input_length < 1:
            raise ValueError(f"max_input_length must be positive: {max_input_length}")
        self.registry = registry if registry is not None else build_default_registry()
        self.extractor = extractor if extractor is not None else ParameterExtractor()
        self.max_input_length = max_input_length

    def classify(self, message: str, now: datetime | None = None) -> ParsedCommand | None:
        """Classify a chat message.

        Args:
            message: Raw message text
            now: Reference time for relative dates (defaults to now)

        Returns:
            ParsedCommand for the winning pair, or None when no rule matches

        Raises:
            InvalidMessageError: If message is not a string or is blank
        """
        normalized = self._prepare(message)
        now = now or datetime.now()

        candidates = self._candidates(normalized, now)
        if not candidates:
            logger.debug("No rule matched message")
            return None

        winner = candidates[0]
        if len(candidates) > 1:
            logger.debug(
                f"Ranked {len(candidates)} candidates: "
                + ", ".join(
                    f"{c.entity_type.value}/{c.intent.value}={c.lexical_weight}/{c.total_weight}"
                    for c in candidates
                )
            )

        extraction = winner.extraction
        missing = extraction.missing
        confidence = score_confidence(
            [m.rule.weight for m in winner.matches],
            explicit=extraction.explicit_count,
            inferred=extraction.inferred_count,
            missing=len(missing),
        )

        return ParsedCommand(
            entity_type=winner.entity_type,
            intent=winner.intent,
            parameters=extraction.parameters,
            confidence=confidence,
            raw_excerpt=winner.top_match.excerpt,
            matched_rules=tuple(m.rule.name for m in winner.matches),
            missing_parameters=missing,
        )

    def explain(self, message: str, now: datetime | None = None) -> list[dict[str, Any]]:
        """Describe every candidate pair in ranking order.

        Useful for debugging why a message was classified a certain way.

        Args:
            message: Raw message text
            now: Reference time for relative dates

        Returns:
            List of candidate dictionaries, winner first
        """
        normalized = self._prepare(message)
        return [c.to_dict() for c in self._candidates(normalized, now or datetime.now())]

    def _prepare(self, message: str) -> NormalizedMessage:
        if not isinstance(message, str):
            raise InvalidMessageError(f"Message must be a string, got {type(message).__name__}")
        if not message.strip():
            raise InvalidMessageError("Message is empty")

        # Security: truncate excessively long input
        if len(message) > self.max_input_length:
            logger.warning(
                f"Input truncated from {len(message)} to {self.max_input_length} chars"
            )
            message = message[: self.max_input_length]

        return normalize(message)

    def _candidates(self, message: NormalizedMessage, now: datetime) -> list[Candidate]:
        grouped: dict[Pair, list[RuleMatch]] = {}
        for match in self.registry.match(message.text):
            grouped.setdefault(match.rule.pair, []).append(match)

        candidates = []
        for (entity_type, intent), matches in grouped.items():
            if not self.extractor.supports(entity_type, intent):
                logger.debug(f"Skipping {entity_type.value}/{intent.value}: no extractor")
                continue
            candidates.append(
                Candidate(
                    entity_type=entity_type,
                    intent=intent,
                    matches=tuple(matches),
                    extraction=self.extractor.extract(message, entity_type, intent, now),
                )
            )
        candidates.sort(key=Candidate.rank_key)
        return candidates


def create_classifier(
    registry: PatternRegistry | None = None,
    max_input_length: int = MAX_INPUT_LENGTH,
) -> EntityClassifier:
    """Factory function to create an EntityClassifier.

    Args:
        registry: Optional custom rule registry
        max_input_length: Truncation limit for incoming messages

    Returns:
        Configured EntityClassifier instance
    """
    return EntityClassifier(registry=registry, max_input_length=max_input_length)
