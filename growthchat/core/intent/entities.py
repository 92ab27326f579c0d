"""Parameter extraction for growthchat command classification.

This module turns a chat message into the structured parameters of one
(entity, intent) pair: ratings, dates, tags, emotions and free-text fields.
Extractors never raise on malformed input; they report absence instead.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Iterable, Mapping

from .patterns import ANGEL_NUMBER, RATING_FRACTION
from .taxonomy import PARAMETER_KEYS, REQUIRED_PARAMETERS, EntityType, IntentKind, Pair
from .vocabulary import (
    BELIEF_THEMES,
    CATEGORY_KEYWORDS,
    EMOTION_KEYWORDS,
    ENERGY_WORDS,
    FREQUENCY_WORDS,
    GOAL_STATUS_WORDS,
    LIMITING_MARKERS,
    MOOD_WORDS,
    PRIORITY_WORDS,
    SIGNIFICANCE_WORDS,
    SYNCHRONICITY_TAG_KEYWORDS,
    TIME_OF_DAY_WORDS,
    TREND_KEYWORDS,
)

# End of a free-text field: sentence punctuation followed by a space, or a newline
SENTENCE_BOUNDARY = r"[.!?;](?=\s|$)|\n"

# Labels that claim a rating fraction for a field other than the main rating
SECONDARY_RATING_LABELS: tuple[str, ...] = ("energy",)

TITLE_MAX_LENGTH = 80

_STRIP_CHARS = " \t\"'`:,-"

_MONTHS: dict[str, int] = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

_WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

_MONTH_NAME = (
    r"(january|february|march|april|may|june|july|august|september|october|november|december|"
    r"jan|feb|mar|apr|jun|jul|aug|sept|sep|oct|nov|dec)"
)
_WEEKDAY_NAME = r"(monday|tuesday|wednesday|thursday|friday|saturday|sunday)"


@lru_cache(maxsize=None)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


@lru_cache(maxsize=None)
def _phrase_pattern(phrase: str, plural: bool = False) -> re.Pattern[str]:
    suffix = r"(?:s|es)?" if plural else ""
    return re.compile(rf"(?<![\w-]){re.escape(phrase)}{suffix}(?![\w-])", re.IGNORECASE)


# =============================================================================
# Normalization
# =============================================================================


@dataclass(frozen=True)
class NormalizedMessage:
    """A chat message normalized once for rule matching and lookups.

    Attributes:
        raw: The message as received (possibly truncated)
        text: Trimmed, whitespace-collapsed text with straight quotes
        folded: Case-folded copy of text for vocabulary lookups
    """

    raw: str
    text: str
    folded: str


_QUOTE_MAP = str.maketrans({"‘": "'", "’": "'", "“": '"', "”": '"'})


def normalize(message: str) -> NormalizedMessage:
    """Normalize a message: trim, collapse whitespace, straighten quotes."""
    text = " ".join(message.translate(_QUOTE_MAP).split())
    return NormalizedMessage(raw=message, text=text, folded=text.casefold())


# =============================================================================
# Extractor primitives
# =============================================================================


@dataclass(frozen=True)
class Extracted:
    """A value pulled out of a message.

    Attributes:
        value: The extracted value
        explicit: True when the message stated it literally (a fraction, a date)
    """

    value: Any
    explicit: bool


def clamp_rating(value: int) -> int:
    """Clamp a rating into the 1-10 scale."""
    return max(1, min(10, value))


def lookup_phrase(text: str, table: Mapping[str, Any]) -> tuple[str, Any] | None:
    """Find the longest table phrase present in text.

    Phrases are checked longest-first on word boundaries, so "not great" wins
    over "great" and "work" never matches inside "workout".

    Args:
        text: Text to search
        table: Phrase -> value mapping

    Returns:
        (phrase, value) for the first hit, or None
    """
    for phrase in sorted(table, key=lambda p: (-len(p), p)):
        if _phrase_pattern(phrase).search(text):
            return phrase, table[phrase]
    return None


def _rating_labelled(text: str, start: int, label: str) -> bool:
    # The label must sit directly before the fraction: "energy 6/10", "energy level: 6/10"
    window = text[max(0, start - 32) : start]
    return bool(
        _compile(
            rf"\b{re.escape(label)}\b(?:\s+level)?(?:\s*[:=-]|\s+(?:is|was|at|of))?\s*\(?$"
        ).search(window)
    )


def extract_rating(
    text: str,
    words: Mapping[str, int] | None = None,
    label: str | None = None,
) -> Extracted | None:
    """Extract a 1-10 rating from text.

    An explicit "N/10", "(N/10)" or "N out of 10" always wins and is clamped
    to [1, 10]. Otherwise the descriptive-word table is consulted.

    Args:
        text: Message text
        words: Optional descriptor -> rating table
        label: When set, only fractions preceded by this label count
            (e.g. "energy 6/10"). When unset, fractions claimed by a
            secondary label are skipped.

    Returns:
        Extracted rating, or None
    """
    for found in _compile(RATING_FRACTION).finditer(text):
        if label is not None:
            if not _rating_labelled(text, found.start(), label):
                continue
        elif any(_rating_labelled(text, found.start(), other) for other in SECONDARY_RATING_LABELS):
            continue
        return Extracted(clamp_rating(int(found.group(1))), explicit=True)

    if words:
        hit = lookup_phrase(text, words)
        if hit is not None:
            return Extracted(clamp_rating(hit[1]), explicit=False)
    return None


def strip_rating(text: str) -> str:
    """Remove rating fractions from text and tidy the remainder."""
    stripped = _compile(RATING_FRACTION).sub(" ", text)
    return " ".join(stripped.split()).strip(_STRIP_CHARS + "()")


# -----------------------------------------------------------------------------
# Dates
# -----------------------------------------------------------------------------


def _add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _iso_date(text: str, today: date) -> date | None:
    found = _compile(r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b").search(text)
    if not found:
        return None
    return _safe_date(int(found.group(1)), int(found.group(2)), int(found.group(3)))


def _numeric_date(text: str, today: date) -> date | None:
    # Year required so "8/10" is never mistaken for a date
    found = _compile(r"\b(\d{1,2})/(\d{1,2})/(\d{4})\b").search(text)
    if not found:
        return None
    return _safe_date(int(found.group(3)), int(found.group(1)), int(found.group(2)))


def _month_name_date(text: str, today: date) -> date | None:
    found = _compile(
        rf"\b{_MONTH_NAME}\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?(?:,?\s+(\d{{4}}))?\b"
    ).search(text)
    if not found:
        return None
    month = _MONTHS[found.group(1)[:3].lower()]
    year = int(found.group(3)) if found.group(3) else today.year
    return _safe_date(year, month, int(found.group(2)))


def _relative_date(text: str, today: date) -> date | None:
    found = _compile(r"\b(\d{1,3})\s+days?\s+ago\b").search(text)
    if found:
        return today - timedelta(days=int(found.group(1)))
    if _compile(r"\ba\s+week\s+ago\b").search(text):
        return today - timedelta(days=7)
    if _compile(r"\b(?:yesterday|last\s+night)\b").search(text):
        return today - timedelta(days=1)
    if _compile(r"\b(?:today|tonight|this\s+(?:morning|afternoon|evening))\b").search(text):
        return today
    return None


def _weekday_date(text: str, today: date) -> date | None:
    found = _compile(rf"\b(?:last|on|this\s+past)\s+{_WEEKDAY_NAME}\b").search(text)
    if not found:
        return None
    index = _WEEKDAYS.index(found.group(1).lower())
    days_back = (today.weekday() - index) % 7 or 7
    return today - timedelta(days=days_back)


_DATE_PARSERS: tuple[Callable[[str, date], date | None], ...] = (
    _iso_date,
    _numeric_date,
    _month_name_date,
    _relative_date,
    _weekday_date,
)


def extract_date(text: str, now: datetime) -> Extracted | None:
    """Extract the date an event happened.

    Relative expressions resolve against ``now``. Invalid calendar dates
    count as absent.

    Args:
        text: Message text
        now: Reference time

    Returns:
        Extracted date, or None
    """
    today = now.date()
    for parser in _DATE_PARSERS:
        value = parser(text, today)
        if value is not None:
            return Extracted(value, explicit=True)
    return None


def _deadline_from(tail: str, today: date) -> date | None:
    if _compile(r"^tomorrow\b").search(tail):
        return today + timedelta(days=1)
    if _compile(r"^next\s+week\b").search(tail):
        return today + timedelta(days=7)
    if _compile(r"^next\s+month\b").search(tail):
        return _add_months(today, 1)
    if _compile(r"^next\s+year\b").search(tail):
        return _add_months(today, 12)
    if _compile(r"^(?:the\s+)?end\s+of\s+(?:the\s+|this\s+)?week\b").search(tail):
        return today + timedelta(days=6 - today.weekday())
    if _compile(r"^(?:the\s+)?end\s+of\s+(?:the\s+|this\s+)?month\b").search(tail):
        return date(today.year, today.month, calendar.monthrange(today.year, today.month)[1])
    if _compile(r"^(?:the\s+)?end\s+of\s+(?:the\s+|this\s+)?year\b").search(tail):
        return date(today.year, 12, 31)
    found = _compile(rf"^(?:next\s+)?{_WEEKDAY_NAME}\b").search(tail)
    if found:
        index = _WEEKDAYS.index(found.group(1).lower())
        return today + timedelta(days=(index - today.weekday()) % 7 or 7)

    absolute = _iso_date(tail, today) or _numeric_date(tail, today)
    if absolute is not None:
        return absolute
    named = _month_name_date(tail, today)
    if named is not None and named < today and not _compile(r"\d{4}").search(tail):
        named = _safe_date(named.year + 1, named.month, named.day)
    return named


def extract_target_date(text: str, now: datetime) -> Extracted | None:
    """Extract a deadline ("by next month", "in 3 weeks", "due 2026-05-01").

    Args:
        text: Message text
        now: Reference time

    Returns:
        Extracted date, or None
    """
    today = now.date()
    found = _compile(r"\b(?:by|before|until|due(?:\s+(?:by|on))?)\s+(?:the\s+)?(.+)$").search(text)
    if found:
        value = _deadline_from(found.group(1), today)
        if value is not None:
            return Extracted(value, explicit=True)

    found = _compile(r"\bin\s+(\d{1,3})\s+(days?|weeks?|months?)\b").search(text)
    if found:
        amount = int(found.group(1))
        unit = found.group(2).lower()
        if unit.startswith("day"):
            return Extracted(today + timedelta(days=amount), explicit=True)
        if unit.startswith("week"):
            return Extracted(today + timedelta(weeks=amount), explicit=True)
        return Extracted(_add_months(today, amount), explicit=True)
    return None


# -----------------------------------------------------------------------------
# Keywords and free text
# -----------------------------------------------------------------------------


def _keyword_pairs(table: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Flatten either keyword->value or value->keywords tables."""
    pairs: list[tuple[str, str]] = []
    for key, value in table.items():
        if isinstance(value, str):
            pairs.append((key, value))
        else:
            pairs.extend((keyword, key) for keyword in value)
    return pairs


def extract_keywords(text: str, table: Mapping[str, Any]) -> frozenset[str]:
    """Collect the canonical value of every table keyword present in text.

    Args:
        text: Text to search
        table: keyword -> value, or value -> keywords

    Returns:
        Set of canonical values (possibly empty)
    """
    return frozenset(
        value for keyword, value in _keyword_pairs(table) if _phrase_pattern(keyword).search(text)
    )


def first_keyword(text: str, table: Mapping[str, Iterable[str]], plural: bool = False) -> str | None:
    """Return the table key whose keyword occurs first in text.

    Ties at the same position go to the longer keyword.
    """
    best: tuple[int, int] | None = None
    best_key: str | None = None
    for key, keywords in table.items():
        for keyword in keywords:
            found = _phrase_pattern(keyword, plural).search(text)
            if not found:
                continue
            rank = (found.start(), -len(keyword))
            if best is None or rank < best:
                best = rank
                best_key = key
    return best_key


def infer_category(text: str) -> str | None:
    """Infer a category from the first category keyword in text."""
    return first_keyword(text, CATEGORY_KEYWORDS, plural=True)


def extract_hashtags(text: str) -> frozenset[str]:
    """Collect "#tag" markers, lower-cased."""
    return frozenset(tag.lower() for tag in _compile(r"(?<![\w#])#(\w[\w-]*)").findall(text))


def extract_free_text(
    text: str,
    trigger: str | re.Pattern[str],
    boundary: str = SENTENCE_BOUNDARY,
) -> str | None:
    """Extract the free-text segment that follows a trigger phrase.

    The segment runs to the next sentence boundary and is trimmed of
    surrounding quotes and punctuation. Colons and commas are kept.

    Args:
        text: Message text
        trigger: Regex marking where the segment begins
        boundary: Regex marking where the segment ends

    Returns:
        The segment, or None when absent or empty
    """
    pattern = _compile(trigger) if isinstance(trigger, str) else trigger
    found = pattern.search(text)
    if not found:
        return None
    rest = text[found.end() :]
    end = _compile(boundary).search(rest)
    if end:
        rest = rest[: end.start()]
    value = rest.strip(_STRIP_CHARS)
    return value or None


def truncate_title(text: str, limit: int = TITLE_MAX_LENGTH) -> str:
    """Shorten text to at most ``limit`` characters on a word boundary."""
    if len(text) <= limit:
        return text
    cut = text[:limit].rsplit(" ", 1)[0]
    return cut.rstrip(_STRIP_CHARS) or text[:limit]


def split_steps(text: str) -> tuple[str, ...]:
    """Split "a, b and then c" into ordered steps."""
    parts = _compile(r"\s*,\s*(?:and\s+then\s+|then\s+|and\s+)?|\s+(?:and\s+then|then|and)\s+|\s*\+\s*").split(text)
    steps = []
    for part in parts:
        cleaned = part.strip(_STRIP_CHARS)
        if cleaned:
            steps.append(cleaned)
    return tuple(steps)


def extract_days_window(text: str) -> Extracted | None:
    """Extract a look-back window in days ("last 14 days", "this month")."""
    found = _compile(r"\b(?:last|past)\s+(\d{1,3})\s+days\b").search(text)
    if found:
        return Extracted(max(1, int(found.group(1))), explicit=True)
    for pattern, days in (
        (r"\b(?:this|last|past)\s+week\b", 7),
        (r"\b(?:this|last|past)\s+month\b", 30),
        (r"\b(?:this|last|past)\s+year\b", 365),
    ):
        if _compile(pattern).search(text):
            return Extracted(days, explicit=False)
    return None


def extract_duration_minutes(text: str) -> Extracted | None:
    """Extract a duration such as "20 minutes" or "1 hour"."""
    found = _compile(r"\b(\d{1,3})\s*(?:min|mins|minutes?)\b").search(text)
    if found:
        return Extracted(int(found.group(1)), explicit=True)
    found = _compile(r"\b(\d{1,2})\s*(?:h|hr|hrs|hours?)\b").search(text)
    if found:
        return Extracted(int(found.group(1)) * 60, explicit=True)
    return None


# =============================================================================
# Assembled parameters
# =============================================================================


class Provenance(str, Enum):
    """Where a parameter value came from."""

    EXPLICIT = "explicit"
    INFERRED = "inferred"
    DEFAULTED = "defaulted"


class Extraction:
    """Parameters assembled for one (entity, intent) pair.

    Only keys in PARAMETER_KEYS for the pair are accepted; anything else is a
    programming error and raises KeyError. Each value records its provenance.
    """

    def __init__(self, entity_type: EntityType, intent: IntentKind) -> None:
        self.pair: Pair = (entity_type, intent)
        self.allowed = PARAMETER_KEYS[self.pair]
        self._values: dict[str, Any] = {}
        self._sources: dict[str, Provenance] = {}

    def put(self, key: str, value: Any, source: Provenance | str = Provenance.INFERRED) -> None:
        """Record a parameter. Empty values are ignored.

        Raises:
            KeyError: If key is not a parameter of this pair
        """
        if key not in self.allowed:
            raise KeyError(f"{key!r} is not a parameter of {self.pair[0].value}/{self.pair[1].value}")
        if value is None or value == "" or (isinstance(value, (frozenset, tuple)) and not value):
            return
        self._values[key] = value
        self._sources[key] = Provenance(source)

    def put_extracted(self, key: str, found: Extracted | None) -> None:
        """Record an Extracted value with matching provenance."""
        if found is None:
            return
        self.put(key, found.value, Provenance.EXPLICIT if found.explicit else Provenance.INFERRED)

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    @property
    def parameters(self) -> dict[str, Any]:
        return dict(self._values)

    def keys_from(self, source: Provenance) -> frozenset[str]:
        return frozenset(k for k, s in self._sources.items() if s is source)

    @property
    def explicit_count(self) -> int:
        return len(self.keys_from(Provenance.EXPLICIT))

    @property
    def inferred_count(self) -> int:
        return len(self.keys_from(Provenance.INFERRED))

    @property
    def evidence_count(self) -> int:
        """Evidenced parameters; defaults do not count."""
        return self.explicit_count + self.inferred_count

    @property
    def missing(self) -> tuple[str, ...]:
        """Required parameters that were not extracted."""
        return tuple(k for k in REQUIRED_PARAMETERS.get(self.pair, ()) if k not in self._values)


# Reference fields end before these clauses
_REFERENCE_END = (
    r"\s+(?:progress|priority|by|before|until|to\s+\d|is\s+\d|at\s+\d|as\s+"
    r"(?:done|complete|completed|achieved|finished))\b|\s*\d{1,3}\s*%|[.!?;,]|$"
)
_DEADLINE_CLAUSE = r"\s+(?:by|before|until|due)\b.*$|\s+in\s+\d{1,3}\s+(?:days?|weeks?|months?)\b.*$"
_LEADING_ARTICLE = r"^(?:my|the|a|an)\b\s*"

R = EntityType.ROUTINE
B = EntityType.BELIEF
S = EntityType.SYNCHRONICITY
M = EntityType.MOOD
G = EntityType.GOAL


def _reference(noun: str, qualifier: str | None) -> str | None:
    """Build "<qualifier> <noun>" when a qualifier was given."""
    if not qualifier:
        return None
    cleaned = _compile(_LEADING_ARTICLE).sub("", qualifier.strip()).strip(_STRIP_CHARS)
    if not cleaned:
        return None
    return f"{cleaned} {noun}"


class ParameterExtractor:
    """Runs the per-pair extractor for a classified message.

    Each supported (entity, intent) pair has one handler. Handlers only write
    keys listed in PARAMETER_KEYS for their pair.
    """

    def __init__(self) -> None:
        self._handlers: dict[Pair, Callable[[NormalizedMessage, Extraction, datetime], None]] = {
            (R, IntentKind.CREATE): self._routine_create,
            (R, IntentKind.UPDATE): self._routine_update,
            (R, IntentKind.COMPLETE): self._routine_complete,
            (R, IntentKind.VIEW): self._routine_view,
            (B, IntentKind.CREATE): self._belief_create,
            (B, IntentKind.UPDATE): self._belief_update,
            (B, IntentKind.VIEW): self._belief_view,
            (S, IntentKind.CREATE): self._synchronicity_create,
            (S, IntentKind.VIEW): self._synchronicity_view,
            (M, IntentKind.CREATE): self._mood_create,
            (M, IntentKind.VIEW): self._mood_view,
            (G, IntentKind.CREATE): self._goal_create,
            (G, IntentKind.UPDATE): self._goal_update,
            (G, IntentKind.COMPLETE): self._goal_complete,
            (G, IntentKind.VIEW): self._goal_view,
        }

    def supports(self, entity_type: EntityType, intent: IntentKind) -> bool:
        return (entity_type, intent) in self._handlers

    def extract(
        self,
        message: NormalizedMessage | str,
        entity_type: EntityType,
        intent: IntentKind,
        now: datetime | None = None,
    ) -> Extraction:
        """Extract parameters for one pair.

        Args:
            message: Normalized message (or raw text, normalized here)
            entity_type: Target entity type
            intent: Target intent
            now: Reference time for relative dates (defaults to now)

        Returns:
            Extraction with values and provenance

        Raises:
            ValueError: If the pair has no extractor
        """
        handler = self._handlers.get((entity_type, intent))
        if handler is None:
            raise ValueError(f"No extractor for {entity_type.value}/{intent.value}")
        if isinstance(message, str):
            message = normalize(message)
        out = Extraction(entity_type, intent)
        handler(message, out, now or datetime.now())
        return out

    # -------------------------------------------------------------------------
    # Shared helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _put_event_date(msg: NormalizedMessage, out: Extraction, key: str, now: datetime) -> None:
        found = extract_date(msg.text, now)
        if found is not None:
            out.put_extracted(key, found)
        else:
            out.put(key, now.date(), Provenance.DEFAULTED)

    @staticmethod
    def _put_lookup(msg: NormalizedMessage, out: Extraction, key: str, table: Mapping[str, str]) -> None:
        hit = lookup_phrase(msg.folded, table)
        if hit is not None:
            out.put(key, hit[1])

    # -------------------------------------------------------------------------
    # Routine
    # -------------------------------------------------------------------------

    _ROUTINE_COMMAND = (
        r"^(?:please\s+)?(?:create|add|new|start|set\s+up|build|make|design)\s+"
        r"(?:a\s+|an\s+|my\s+)?(?:new\s+)?((?:(?!to\b|into\b|for\b)[\w'-]+\s+){0,3}?)routine\b"
    )

    def _routine_create(self, msg: NormalizedMessage, out: Extraction, now: datetime) -> None:
        text = msg.text
        name = extract_free_text(text, r"\broutine\s+(?:called|named)\s+", r"[:.!?;]|\s+with\s+|$")
        steps_text: str | None = None

        colon_form = _compile(r"^(?:new\s+)?routine\s*:\s*").search(text)
        if name is None and colon_form:
            head = extract_free_text(text, r"^(?:new\s+)?routine\s*:\s*", r"\s+with\s+|\s+-\s+|[.!?;]|$")
            name = head
            steps_text = extract_free_text(text, r"\s(?:with|-)\s+")
        if name is None:
            found = _compile(self._ROUTINE_COMMAND).search(text)
            if found:
                name = _reference("routine", found.group(1))

        if steps_text is None:
            steps_text = extract_free_text(text, r"\broutine\b[^:.!?;]{0,60}?:\s*") if not colon_form else None
        if steps_text is None:
            steps_text = extract_free_text(text, r"\bwith\s+")
        if steps_text:
            out.put("steps", split_steps(steps_text), Provenance.INFERRED)

        out.put("name", name, Provenance.INFERRED)
        out.put("category", infer_category(msg.folded))
        self._put_lookup(msg, out, "time_of_day", TIME_OF_DAY_WORDS)
        self._put_lookup(msg, out, "frequency", FREQUENCY_WORDS)
        out.put_extracted("duration_minutes", extract_duration_minutes(text))
        out.put("tags", extract_hashtags(text), Provenance.EXPLICIT)

    def _routine_update(self, msg: NormalizedMessage, out: Extraction, now: datetime) -> None:
        text = msg.text
        add_step = _compile(
            r"^(?:add|insert|append)\s+(.+?)\s+(?:to|into)\s+(?:my\s+|the\s+)?([\w\s'-]{0,40}?)\s*routine\b"
        ).search(text)
        if add_step:
            out.put("target", _reference("routine", add_step.group(2)), Provenance.INFERRED)
            out.put("steps", split_steps(add_step.group(1)), Provenance.INFERRED)
        else:
            found = _compile(
                r"^(?:update|edit|change|modify|rename|adjust)\s+(?:my\s+|the\s+)?"
                r"((?:[\w'-]+\s+){0,3}?)routine\b"
            ).search(text)
            if found:
                out.put("target", _reference("routine", found.group(1)), Provenance.INFERRED)
            steps_text = extract_free_text(text, r"\broutine\b[^:.!?;]{0,60}?:\s*") or extract_free_text(
                text, r"\bwith\s+"
            )
            if steps_text:
                out.put("steps", split_steps(steps_text), Provenance.INFERRED)

        moved = _compile(r"\b(?:to|into)\s+(?:the\s+)?(morning|afternoon|evening|night)\b").search(text)
        if moved:
            out.put("time_of_day", TIME_OF_DAY_WORDS[moved.group(1).lower()])
        self._put_lookup(msg, out, "frequency", FREQUENCY_WORDS)
        out.put_extracted("duration_minutes", extract_duration_minutes(text))
        if "steps" in out:
            out.put("category", infer_category(" ".join(out.get("steps")).casefold()))

    def _routine_complete(self, msg: NormalizedMessage, out: Extraction, now: datetime) -> None:
        text = msg.text
        target: str | None = None
        for pattern in (
            r"^mark\s+(.+?\broutine)\s+(?:as\s+)?(?:done|complete|completed|finished)\b",
            r"(?:completed|finished|did|done\s+with|complete|finish)\s+(?:my\s+|the\s+)?"
            r"((?:[\w'-]+\s+){1,3}?routine)\b",
            r"^((?:[\w'-]+\s+){1,3}?routine)\s+(?:is\s+)?(?:done|complete|completed|finished)\b",
        ):
            found = _compile(pattern).search(text)
            if found:
                qualifier = _compile(r"\s*routine$").sub("", found.group(1))
                target = _reference("routine", qualifier)
                if target:
                    break
        out.put("target", target, Provenance.INFERRED)
        self._put_event_date(msg, out, "completed_on", now)

    def _routine_view(self, msg: NormalizedMessage, out: Extraction, now: datetime) -> None:
        self._put_lookup(msg, out, "time_of_day", TIME_OF_DAY_WORDS)
        out.put("category", infer_category(msg.folded))

    # -------------------------------------------------------------------------
    # Belief
    # -------------------------------------------------------------------------

    _BELIEF_TRIGGERS: tuple[str, ...] = (
        r"^i\s+(?:truly\s+|really\s+|now\s+)?believe\s+(?:that\s+)?",
        r"^(?:new\s+)?(?:belief|affirmation|mantra)\s*:\s*",
        r"^(?:add|create|new|record)\s+(?:a\s+|an\s+)?(?:new\s+)?(?:belief|affirmation|mantra)"
        r"\s*(?::|-|that\b)?\s*",
    )

    @staticmethod
    def _belief_attributes(statement: str, out: Extraction) -> None:
        folded = statement.casefold()
        limiting = any(_phrase_pattern(marker).search(folded) for marker in LIMITING_MARKERS)
        out.put("category", "limiting" if limiting else "empowering")
        out.put("belief_type", first_keyword(folded, BELIEF_THEMES))

    def _belief_create(self, msg: NormalizedMessage, out: Extraction, now: datetime) -> None:
        text = msg.text
        statement: str | None = None
        for trigger in self._BELIEF_TRIGGERS:
            statement = extract_free_text(text, trigger)
            if statement:
                break
        else:
            statement = extract_free_text(text, r"^")

        if statement:
            statement = strip_rating(statement) or None
        out.put("statement", statement, Provenance.INFERRED)
        if statement:
            self._belief_attributes(statement, out)
        out.put_extracted("conviction", extract_rating(text))
        out.put("tags", extract_hashtags(text), Provenance.EXPLICIT)

    def _belief_update(self, msg: NormalizedMessage, out: Extraction, now: datetime) -> None:
        text = msg.text
        if _compile(r"^(?:reinforce|strengthen|affirm|practice|practise)\b").search(text):
            out.put("action", "reinforce")
        elif _compile(r"^(?:challenge|question|examine|reframe)\b").search(text):
            out.put("action", "challenge")

        target = extract_free_text(
            text, r"\b(?:belief|mindset|affirmation)\b\s*(?::|-|that\b|about\b|in\b)?\s*"
        )
        if target:
            target = strip_rating(target) or None
        out.put("target", target, Provenance.INFERRED)
        out.put_extracted("conviction", extract_rating(text))

    def _belief_view(self, msg: NormalizedMessage, out: Extraction, now: datetime) -> None:
        if _phrase_pattern("limiting").search(msg.folded):
            out.put("category", "limiting")
        elif _phrase_pattern("empowering").search(msg.folded):
            out.put("category", "empowering")
        out.put("belief_type", first_keyword(msg.folded, BELIEF_THEMES))

    # -------------------------------------------------------------------------
    # Synchronicity
    # -------------------------------------------------------------------------

    _SYNCHRONICITY_TRIGGERS: tuple[str, ...] = (
        r"^(?:log|record|note|add)\s+(?:a\s+|an\s+|another\s+)?(?:synchronicity|synch|sync|sign)"
        r"\b\s*[:!-]?\s*",
        r"^(?:synchronicity|synch)\s*[:!]\s*",
    )

    def _synchronicity_create(self, msg: NormalizedMessage, out: Extraction, now: datetime) -> None:
        text = msg.text
        body: str | None = None
        title: str | None = None
        for trigger in self._SYNCHRONICITY_TRIGGERS:
            title = extract_free_text(text, trigger)
            if title:
                body = extract_free_text(text, trigger, boundary=r"(?!)")
                break
        else:
            title = extract_free_text(text, r"^")
            body = text.strip(_STRIP_CHARS) or None

        if title:
            out.put("title", truncate_title(title), Provenance.INFERRED)
        if body and body != out.get("title"):
            out.put("description", body, Provenance.INFERRED)

        significance = extract_rating(text, SIGNIFICANCE_WORDS)
        out.put_extracted("significance", significance)

        tags = set(extract_keywords(msg.folded, SYNCHRONICITY_TAG_KEYWORDS))
        if _compile(ANGEL_NUMBER).search(text):
            tags.add("numbers")
        tags |= extract_hashtags(text)
        out.put("tags", frozenset(tags))
        out.put("emotions", extract_keywords(msg.folded, EMOTION_KEYWORDS))
        out.put(
            "context",
            extract_free_text(
                text, r"\b(?:while|during|right\s+when|just\s+as|when\s+i\s+was|as\s+i\s+was)\s+"
            ),
        )
        self._put_event_date(msg, out, "date_occurred", now)

    def _synchronicity_view(self, msg: NormalizedMessage, out: Extraction, now: datetime) -> None:
        tags = set(extract_keywords(msg.folded, SYNCHRONICITY_TAG_KEYWORDS))
        tags.discard("messages")
        out.put("tags", frozenset(tags))
        if _compile(r"\b(?:patterns?|stats)\b").search(msg.text):
            out.put("patterns", True)
        out.put_extracted("days", extract_days_window(msg.text))

    # -------------------------------------------------------------------------
    # Mood
    # -------------------------------------------------------------------------

    _MOOD_NOTE_TRIGGERS: tuple[str, ...] = (
        r"^(?:my\s+)?mood\s*:\s*",
        r"^(?:log|record|track|add)\s+(?:my\s+|a\s+)?mood\b\s*(?::|-)?\s*",
    )
    _FEEL_TRIGGER = r"\b(?:i\s+am|i'm)\s+feeling\s+|\bi\s+feel\s+|^feeling\s+"
    _NOTE_CONNECTOR = r"\b(?:about|because|due\s+to|after|since|with)\b"

    def _mood_create(self, msg: NormalizedMessage, out: Extraction, now: datetime) -> None:
        text = msg.text
        out.put_extracted("mood_rating", extract_rating(msg.folded, MOOD_WORDS))
        out.put_extracted("energy_level", extract_rating(msg.folded, ENERGY_WORDS, label="energy"))

        notes: str | None = None
        for trigger in self._MOOD_NOTE_TRIGGERS:
            notes = extract_free_text(text, trigger)
            if notes:
                break
        else:
            segment = extract_free_text(text, self._FEEL_TRIGGER)
            if segment and _compile(self._NOTE_CONNECTOR).search(segment):
                notes = segment
        if notes:
            out.put("notes", strip_rating(notes) or None, Provenance.INFERRED)

        out.put("tags", extract_hashtags(text), Provenance.EXPLICIT)
        self._put_event_date(msg, out, "entry_date", now)

    def _mood_view(self, msg: NormalizedMessage, out: Extraction, now: datetime) -> None:
        if any(_phrase_pattern(keyword).search(msg.folded) for keyword in TREND_KEYWORDS):
            out.put("trend", True)
        out.put_extracted("days", extract_days_window(msg.text))

    # -------------------------------------------------------------------------
    # Goal
    # -------------------------------------------------------------------------

    _GOAL_TRIGGERS: tuple[str, ...] = (
        r"^(?:my\s+)?(?:new\s+)?goal\s*:\s*",
        r"^(?:my\s+)?(?:new\s+)?goal\s+is\s+to\s+",
        r"^(?:please\s+)?(?:create|add|set|new|start)\s+(?:a\s+|an\s+)?(?:new\s+)?(?:[\w-]+\s+)?goal"
        r"\b\s*(?:to\b|of\b|for\b|:|-)?\s*",
        r"^i\s+want\s+to\s+(?:achieve|accomplish|reach)\s+",
    )

    def _goal_create(self, msg: NormalizedMessage, out: Extraction, now: datetime) -> None:
        text = msg.text
        title: str | None = None
        for trigger in self._GOAL_TRIGGERS:
            title = extract_free_text(text, trigger)
            if title:
                break
        if title:
            title = _compile(_DEADLINE_CLAUSE).sub("", title).strip(_STRIP_CHARS) or None
        out.put("title", title, Provenance.INFERRED)

        out.put("category", infer_category(msg.folded))
        self._put_lookup(msg, out, "priority", PRIORITY_WORDS)
        out.put_extracted("target_date", extract_target_date(text, now))
        out.put("tags", extract_hashtags(text), Provenance.EXPLICIT)

    def _goal_reference(self, text: str, verbs: str) -> str | None:
        qualified = _compile(
            rf"\b{verbs}\s+(?:my\s+|the\s+)?((?:(?!goal\b)[\w'-]+\s+){{1,3}}?)goal\b(?!\s*(?::|to\b|of\b|for\b))"
        ).search(text)
        if qualified:
            return _reference("goal", qualified.group(1))
        after = extract_free_text(
            text,
            rf"\b{verbs}\s+(?:my\s+|the\s+)?(?:[\w'-]+\s+)?goal\b\s*(?::|-|to\b|of\b|for\b)?\s*",
            boundary=_REFERENCE_END,
        )
        return after

    def _goal_update(self, msg: NormalizedMessage, out: Extraction, now: datetime) -> None:
        text = msg.text
        target = self._goal_reference(text, r"(?:update|edit|change|modify|adjust)")
        if target is None:
            found = _compile(r"\b(?:my\s+|the\s+)((?:(?!goal\b)[\w'-]+\s+){1,3}?)goal\b").search(text)
            if found:
                target = _reference("goal", found.group(1))
        out.put("target", target, Provenance.INFERRED)

        progress = _compile(r"\b(\d{1,3})\s*%").search(text)
        if progress:
            out.put("progress", max(0, min(100, int(progress.group(1)))), Provenance.EXPLICIT)
        level = _compile(r"\bpriority\s+(?:to\s+)?(high|medium|low)\b").search(text)
        if level:
            out.put("priority", level.group(1).lower(), Provenance.EXPLICIT)
        else:
            self._put_lookup(msg, out, "priority", PRIORITY_WORDS)
        out.put_extracted("target_date", extract_target_date(text, now))

    def _goal_complete(self, msg: NormalizedMessage, out: Extraction, now: datetime) -> None:
        text = msg.text
        target: str | None = None
        mark = _compile(
            r"^mark\s+(?:my\s+|the\s+)?(.+?)\s+(?:as\s+)?(?:done|complete|completed|achieved)\b"
        ).search(text)
        if mark:
            target = mark.group(1).strip(_STRIP_CHARS) or None
            if target and target.casefold() == "goal":
                target = None
        if target is None:
            target = self._goal_reference(
                text, r"(?:completed|achieved|accomplished|reached|finished|hit|complete|finish|close)"
            )
        out.put("target", target, Provenance.INFERRED)
        self._put_event_date(msg, out, "completed_on", now)

    def _goal_view(self, msg: NormalizedMessage, out: Extraction, now: datetime) -> None:
        self._put_lookup(msg, out, "status", GOAL_STATUS_WORDS)
        out.put("category", infer_category(msg.folded))


__all__ = [
    "Extracted",
    "Extraction",
    "NormalizedMessage",
    "ParameterExtractor",
    "Provenance",
    "extract_date",
    "extract_days_window",
    "extract_duration_minutes",
    "extract_free_text",
    "extract_hashtags",
    "extract_keywords",
    "extract_rating",
    "extract_target_date",
    "first_keyword",
    "infer_category",
    "lookup_phrase",
    "normalize",
    "split_steps",
    "strip_rating",
    "truncate_title",
]
