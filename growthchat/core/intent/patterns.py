"""Rule registry for growthchat command classification.

Each rule is a regex recognizer tagged with the (entity, intent) pair it votes
for and a specificity weight. Explicit command phrasing ("create ... routine",
"log synch:") carries a high weight; loose cues (an angel number, a bare
"x/10") carry a low one. A bare "x/10" is corroborating: it supports a mood
reading but does not outvote another pair's phrasing. The registry is
ordered and append-only.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from .taxonomy import EntityType, IntentKind, Pair

R = EntityType.ROUTINE
B = EntityType.BELIEF
S = EntityType.SYNCHRONICITY
M = EntityType.MOOD
G = EntityType.GOAL

CREATE = IntentKind.CREATE
UPDATE = IntentKind.UPDATE
COMPLETE = IntentKind.COMPLETE
VIEW = IntentKind.VIEW

# Up to three qualifier words before a noun ("my morning", "new evening wind-down")
_QUALIFIERS = r"(?:(?!to\b|into\b|for\b)[\w'-]+\s+){0,3}"

# Explicit rating fraction: "8/10", "(8/10)", "8 out of 10"
RATING_FRACTION = r"\(?(?<![\d/])(\d{1,3})\s*(?:/|out\s+of)\s*10(?![\d/])\)?"

# Angel numbers and mirrored times: 11:11, 12:12, 222, 1111
ANGEL_NUMBER = r"\b(?:(\d\d):\1|([1-9])\2{2,3})\b"

# Short gap that stays inside one clause
_GAP = r"[^.!?;]{0,40}?"


@dataclass(frozen=True)
class Rule:
    """A single recognizer rule.

    Attributes:
        entity_type: Entity the rule votes for
        intent: Intent the rule votes for
        pattern: Regex source, matched case-insensitively
        weight: Specificity weight in (0, 1]
        name: Short identifier used in audit trails
        corroborating: When True the rule only backs up other evidence.
            It still counts toward confidence but cannot win the ranking
            over a pair that has a lexical match.
    """

    entity_type: EntityType
    intent: IntentKind
    pattern: str
    weight: float
    name: str = ""
    corroborating: bool = False
    compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not 0.0 < self.weight <= 1.0:
            raise ValueError(f"Rule weight must be in (0, 1]: {self.weight}")
        object.__setattr__(self, "compiled", re.compile(self.pattern, re.IGNORECASE))
        if not self.name:
            object.__setattr__(
                self, "name", f"{self.entity_type.value}.{self.intent.value}:{self.pattern[:24]}"
            )

    @property
    def pair(self) -> Pair:
        return (self.entity_type, self.intent)


@dataclass(frozen=True)
class RuleMatch:
    """A rule that matched a message.

    Attributes:
        rule: The matching rule
        start: Start offset of the match in the normalized text
        end: End offset of the match in the normalized text
        excerpt: Matched substring
    """

    rule: Rule
    start: int
    end: int
    excerpt: str


DEFAULT_RULES: tuple[Rule, ...] = (
    # ------------------------------------------------------------------
    # Routine
    # ------------------------------------------------------------------
    Rule(
        R,
        CREATE,
        rf"^(?:please\s+)?(?:create|add|new|start|set\s+up|build|make|design)\s+"
        rf"(?:a\s+|an\s+|my\s+)?(?:new\s+)?{_QUALIFIERS}routine\b",
        0.9,
        "routine.create.command",
    ),
    Rule(R, CREATE, r"\broutine\s+(?:called|named)\b", 0.8, "routine.create.named"),
    Rule(R, CREATE, r"^(?:new\s+)?routine\s*:", 0.85, "routine.create.colon"),
    Rule(
        R,
        CREATE,
        r"\bi\s+want\s+(?:a|to\s+(?:start|build|have)\s+a)\s+[\w\s'-]{0,40}?routine\b",
        0.7,
        "routine.create.want",
    ),
    Rule(
        R,
        UPDATE,
        rf"^(?:update|edit|change|modify|rename|adjust)\s+(?:my\s+|the\s+)?{_QUALIFIERS}routine\b",
        0.85,
        "routine.update.command",
    ),
    Rule(
        R,
        UPDATE,
        r"^(?:add|insert|append)\s+.+?\s+(?:to|into)\s+(?:my\s+|the\s+)?[\w\s'-]{0,40}?routine\b",
        0.8,
        "routine.update.add-step",
    ),
    Rule(
        R,
        COMPLETE,
        rf"^(?:i\s+)?(?:just\s+)?(?:completed|finished|did|done\s+with)\s+"
        rf"(?:my\s+|the\s+)?{_QUALIFIERS}routine\b",
        0.9,
        "routine.complete.past",
    ),
    Rule(
        R,
        COMPLETE,
        rf"^(?:complete|finish)\s+(?:my\s+|the\s+)?{_QUALIFIERS}routine\b",
        0.9,
        "routine.complete.command",
    ),
    Rule(
        R,
        COMPLETE,
        rf"^mark\s+{_GAP}\broutine\s+(?:as\s+)?(?:done|complete|completed|finished)\b",
        0.9,
        "routine.complete.mark",
    ),
    Rule(
        R,
        COMPLETE,
        r"\broutine\s+(?:is\s+)?(?:done|complete|completed|finished)\b",
        0.6,
        "routine.complete.status",
    ),
    Rule(
        R,
        VIEW,
        r"^(?:show|list|view|display|see)\s+(?:me\s+)?(?:my\s+|all\s+|the\s+)?(?:[\w-]+\s+)?routines?\b",
        0.85,
        "routine.view.command",
    ),
    Rule(
        R,
        VIEW,
        r"^what\s+(?:are|is)\s+my\s+(?:[\w-]+\s+)?routines?\b",
        0.85,
        "routine.view.question",
    ),
    # ------------------------------------------------------------------
    # Belief
    # ------------------------------------------------------------------
    Rule(B, CREATE, r"^i\s+(?:truly\s+|really\s+|now\s+)?believe\b", 0.85, "belief.create.i-believe"),
    Rule(
        B,
        CREATE,
        r"^(?:new\s+)?(?:belief|affirmation|mantra)\s*:",
        0.9,
        "belief.create.colon",
    ),
    Rule(
        B,
        CREATE,
        r"^(?:add|create|new|record)\s+(?:a\s+|an\s+)?(?:new\s+)?(?:belief|affirmation|mantra)\b",
        0.9,
        "belief.create.command",
    ),
    Rule(
        B,
        CREATE,
        r"\b(?:i\s+am|i'm)\s+(?:so\s+|truly\s+|fully\s+)?(?:capable|worthy|enough|deserving|strong|"
        r"confident|loved|lovable|successful|resilient|whole|abundant|safe)\b",
        0.55,
        "belief.create.affirmation",
    ),
    Rule(
        B,
        CREATE,
        r"^i\s+(?:can|will)\s+(?:achieve|accomplish|succeed|overcome|handle)\b",
        0.5,
        "belief.create.can",
    ),
    Rule(
        B,
        UPDATE,
        r"^(?:reinforce|strengthen|affirm|practice|practise)\s+(?:my\s+|the\s+)?(?:belief|mindset|affirmation)\b",
        0.9,
        "belief.update.reinforce",
    ),
    Rule(
        B,
        UPDATE,
        r"^(?:challenge|question|examine|reframe)\s+(?:my\s+|the\s+)?(?:limiting\s+)?(?:belief|mindset)\b",
        0.9,
        "belief.update.challenge",
    ),
    Rule(
        B,
        UPDATE,
        r"^(?:update|edit|change)\s+(?:my\s+|the\s+)?belief\b",
        0.85,
        "belief.update.command",
    ),
    Rule(
        B,
        VIEW,
        r"^(?:show|list|view|display|see)\s+(?:me\s+)?(?:my\s+|all\s+)?(?:[\w-]+\s+)?(?:beliefs|affirmations)\b",
        0.9,
        "belief.view.command",
    ),
    Rule(B, VIEW, r"^what\s+are\s+my\s+(?:[\w-]+\s+)?beliefs\b", 0.85, "belief.view.question"),
    # ------------------------------------------------------------------
    # Synchronicity
    # ------------------------------------------------------------------
    Rule(
        S,
        CREATE,
        r"^(?:log|record|note|add)\s+(?:a\s+|an\s+|another\s+)?(?:synchronicity|synch|sync|sign)\b",
        0.95,
        "synchronicity.create.log",
    ),
    Rule(S, CREATE, r"^(?:synchronicity|synch)\s*[:!]", 0.9, "synchronicity.create.colon"),
    Rule(
        S,
        CREATE,
        r"\b(?:amazing|incredible|wow|powerful|crazy|wild)\s+(?:synchronicity|synch|sign|coincidence)\b",
        0.85,
        "synchronicity.create.exclaim",
    ),
    Rule(S, CREATE, r"\bmeaningful\s+coincidence\b", 0.7, "synchronicity.create.meaningful"),
    Rule(S, CREATE, r"\bsynchronicity\b", 0.5, "synchronicity.create.keyword"),
    Rule(S, CREATE, r"\bcoincidence\b", 0.4, "synchronicity.create.coincidence"),
    Rule(S, CREATE, ANGEL_NUMBER, 0.35, "synchronicity.create.angel-number"),
    Rule(
        S,
        VIEW,
        r"^(?:show|list|view|display|see)\s+(?:me\s+)?(?:my\s+|all\s+)?(?:recent\s+)?"
        r"(?:synchronicities|synchs|syncs|signs)\b",
        0.9,
        "synchronicity.view.command",
    ),
    Rule(
        S,
        VIEW,
        r"\bsynchronicit(?:y|ies)\s+(?:patterns?|stats|history|log)\b",
        0.85,
        "synchronicity.view.patterns",
    ),
    # ------------------------------------------------------------------
    # Mood
    # ------------------------------------------------------------------
    Rule(M, CREATE, r"^(?:my\s+)?mood\s*:", 0.9, "mood.create.colon"),
    Rule(
        M,
        CREATE,
        r"^(?:log|record|track|add)\s+(?:my\s+|a\s+)?mood\b",
        0.9,
        "mood.create.log",
    ),
    Rule(M, CREATE, r"\b(?:i\s+am|i'm)\s+feeling\b", 0.8, "mood.create.i-am-feeling"),
    Rule(M, CREATE, r"\bi\s+feel\b", 0.7, "mood.create.i-feel"),
    Rule(M, CREATE, r"^feeling\s+\w+", 0.65, "mood.create.feeling"),
    Rule(
        M,
        CREATE,
        r"\bmood\s+(?:is|was|of|rating|score)\b",
        0.75,
        "mood.create.mood-is",
    ),
    Rule(M, CREATE, r"\benergy\s+(?:is|was|level|:)", 0.5, "mood.create.energy"),
    Rule(M, CREATE, RATING_FRACTION, 0.3, "mood.create.rating", corroborating=True),
    Rule(
        M,
        VIEW,
        rf"\b(?:show|display|view|see)\b{_GAP}\bmood\b{_GAP}\b(?:trends?|history|patterns?|over\s+time|stats)\b",
        0.9,
        "mood.view.show-trends",
    ),
    Rule(
        M,
        VIEW,
        r"\bmood\s+(?:trends?|history|patterns?|analytics|stats)\b",
        0.85,
        "mood.view.trends",
    ),
    Rule(
        M,
        VIEW,
        r"\bhow\s+(?:has|is)\s+my\s+mood\s+(?:been|trending)\b",
        0.9,
        "mood.view.how-has",
    ),
    Rule(
        M,
        VIEW,
        r"^(?:show|list|view|display)\s+(?:me\s+)?(?:my\s+)?(?:recent\s+)?(?:moods|mood\s+(?:entries|log))\b",
        0.8,
        "mood.view.entries",
    ),
    # ------------------------------------------------------------------
    # Goal
    # ------------------------------------------------------------------
    Rule(
        G,
        CREATE,
        r"^(?:please\s+)?(?:create|add|set|new|start)\s+(?:a\s+|an\s+)?(?:new\s+)?"
        r"(?:[\w-]+\s+)?goal\b",
        0.9,
        "goal.create.command",
    ),
    Rule(G, CREATE, r"^(?:my\s+)?(?:new\s+)?goal\s*:", 0.9, "goal.create.colon"),
    Rule(G, CREATE, r"^(?:my\s+)?(?:new\s+)?goal\s+is\s+to\b", 0.85, "goal.create.goal-is"),
    Rule(
        G,
        CREATE,
        r"^i\s+want\s+to\s+(?:achieve|accomplish|reach)\b",
        0.6,
        "goal.create.want",
    ),
    Rule(
        G,
        UPDATE,
        r"^(?:update|edit|change|modify|adjust)\s+(?:my\s+|the\s+)?(?:[\w-]+\s+)?goal\b",
        0.85,
        "goal.update.command",
    ),
    Rule(
        G,
        UPDATE,
        rf"\bgoal\b{_GAP}\bprogress\b{_GAP}\b\d{{1,3}}\s*%",
        0.85,
        "goal.update.progress",
    ),
    Rule(
        G,
        COMPLETE,
        r"^(?:i\s+)?(?:just\s+)?(?:completed|achieved|accomplished|reached|finished|hit)\s+"
        r"(?:my\s+|the\s+)?(?:[\w-]+\s+)?goal\b",
        0.9,
        "goal.complete.past",
    ),
    Rule(
        G,
        COMPLETE,
        r"^(?:complete|finish|close)\s+(?:my\s+|the\s+)?(?:[\w-]+\s+)?goal\b",
        0.85,
        "goal.complete.command",
    ),
    Rule(
        G,
        COMPLETE,
        rf"^mark\s+{_GAP}\bgoal\b{_GAP}\b(?:as\s+)?(?:done|complete|completed|achieved)\b",
        0.9,
        "goal.complete.mark",
    ),
    Rule(
        G,
        VIEW,
        r"^(?:show|list|view|display|see)\s+(?:me\s+)?(?:my\s+|all\s+)?(?:[\w-]+\s+)?goals\b",
        0.9,
        "goal.view.command",
    ),
    Rule(G, VIEW, r"^what\s+are\s+my\s+(?:[\w-]+\s+)?goals\b", 0.85, "goal.view.question"),
)


class PatternRegistry:
    """Ordered, append-only collection of recognizer rules.

    Registration order is preserved and used as the secondary ordering for
    excerpts when two rules of the same pair share the top weight. Rules can
    be added but never removed or replaced.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: list[Rule] = []
        self.extend(rules)

    def register(self, rule: Rule) -> None:
        """Append a rule to the registry."""
        if not isinstance(rule, Rule):
            raise TypeError(f"Expected Rule, got {type(rule).__name__}")
        self._rules.append(rule)

    def extend(self, rules: Iterable[Rule]) -> None:
        """Append several rules, preserving their order."""
        for rule in rules:
            self.register(rule)

    @property
    def rules(self) -> tuple[Rule, ...]:
        """Snapshot of the registered rules."""
        return tuple(self._rules)

    def pairs(self) -> list[Pair]:
        """Supported (entity, intent) pairs in first-registration order."""
        seen: dict[Pair, None] = {}
        for rule in self._rules:
            seen.setdefault(rule.pair, None)
        return list(seen)

    def rules_for(self, entity_type: EntityType, intent: IntentKind) -> tuple[Rule, ...]:
        """Rules registered for one pair."""
        return tuple(r for r in self._rules if r.pair == (entity_type, intent))

    def match(self, text: str) -> list[RuleMatch]:
        """Test every rule against text and return the matches in registry order.

        Args:
            text: Normalized message text

        Returns:
            One RuleMatch per matching rule (first occurrence)
        """
        matches: list[RuleMatch] = []
        for rule in self._rules:
            found = rule.compiled.search(text)
            if found:
                matches.append(
                    RuleMatch(rule=rule, start=found.start(), end=found.end(), excerpt=found.group(0))
                )
        return matches

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(tuple(self._rules))


def build_default_registry() -> PatternRegistry:
    """Create a fresh registry loaded with DEFAULT_RULES."""
    return PatternRegistry(DEFAULT_RULES)
