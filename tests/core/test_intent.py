"""Tests for growthchat command classification.

Tests cover:
- Extractors (ratings, dates, deadlines, keywords, free text)
- Rule registry
- Confidence scoring
- Entity classifier (ranking, scenarios, properties)
- Rephrasing suggestions
- Edge cases
"""

from __future__ import annotations

import dataclasses
import logging
import time
from datetime import date, datetime

import pytest

from growthchat.core.errors import InvalidMessageError
from growthchat.core.intent import (
    DEFAULT_RULES,
    PARAMETER_KEYS,
    EntityClassifier,
    EntityType,
    Extraction,
    IntentConfidence,
    IntentKind,
    ParameterExtractor,
    ParsedCommand,
    PatternRegistry,
    Provenance,
    Rule,
    build_default_registry,
    extract_date,
    extract_free_text,
    extract_hashtags,
    extract_keywords,
    extract_rating,
    extract_target_date,
    infer_category,
    normalize,
    score_confidence,
)
from growthchat.core.intent.entities import lookup_phrase, split_steps, truncate_title
from growthchat.core.intent.suggestions import (
    EXAMPLES,
    MAX_SUGGESTIONS,
    SuggestionKind,
    correct_typos,
    detect_entity,
    suggest_rephrasing,
)
from growthchat.core.intent.vocabulary import EMOTION_KEYWORDS, ENERGY_WORDS, MOOD_WORDS

# Wednesday
NOW = datetime(2026, 3, 18, 9, 30)


# ============================================================================
# Extractor Tests
# ============================================================================


class TestExtractRating:
    """Tests for rating extraction."""

    def test_explicit_fraction(self) -> None:
        found = extract_rating("feeling 8/10")
        assert found.value == 8
        assert found.explicit is True

    def test_parenthesized_fraction(self) -> None:
        assert extract_rating("happy today (7/10)").value == 7

    def test_out_of_ten(self) -> None:
        assert extract_rating("I'd say 6 out of 10").value == 6

    def test_fraction_clamped_high(self) -> None:
        assert extract_rating("mood 15/10").value == 10

    def test_fraction_clamped_low(self) -> None:
        assert extract_rating("mood 0/10").value == 1

    def test_descriptive_word(self) -> None:
        found = extract_rating("feeling great", MOOD_WORDS)
        assert found.value == 9
        assert found.explicit is False

    def test_longest_phrase_wins(self) -> None:
        """'not great' must not be read as 'great'."""
        assert extract_rating("honestly not great", MOOD_WORDS).value == 4

    def test_fraction_beats_word(self) -> None:
        assert extract_rating("great day 6/10", MOOD_WORDS).value == 6

    def test_energy_label_claims_fraction(self) -> None:
        text = "energy 6/10, mood 7/10"
        assert extract_rating(text, MOOD_WORDS).value == 7
        assert extract_rating(text, ENERGY_WORDS, label="energy").value == 6

    def test_energy_word_without_fraction(self) -> None:
        assert extract_rating("so tired", ENERGY_WORDS, label="energy").value == 3

    def test_date_is_not_a_rating(self) -> None:
        assert extract_rating("on 1/10/2026") is None

    def test_absent(self) -> None:
        assert extract_rating("nothing to see", MOOD_WORDS) is None


class TestExtractDate:
    """Tests for event date extraction."""

    def test_yesterday(self) -> None:
        assert extract_date("yesterday was rough", NOW).value == date(2026, 3, 17)

    def test_last_night(self) -> None:
        assert extract_date("dreamt of it last night", NOW).value == date(2026, 3, 17)

    def test_today(self) -> None:
        found = extract_date("happy today", NOW)
        assert found.value == date(2026, 3, 18)
        assert found.explicit is True

    def test_days_ago(self) -> None:
        assert extract_date("3 days ago", NOW).value == date(2026, 3, 15)

    def test_last_weekday(self) -> None:
        assert extract_date("last Monday", NOW).value == date(2026, 3, 16)

    def test_same_weekday_goes_back_a_week(self) -> None:
        assert extract_date("last Wednesday", NOW).value == date(2026, 3, 11)

    def test_iso_date(self) -> None:
        assert extract_date("on 2026-02-14", NOW).value == date(2026, 2, 14)

    def test_numeric_date(self) -> None:
        assert extract_date("on 2/14/2026", NOW).value == date(2026, 2, 14)

    def test_month_name(self) -> None:
        assert extract_date("on March 3rd", NOW).value == date(2026, 3, 3)

    def test_invalid_calendar_date_is_absent(self) -> None:
        assert extract_date("on 2026-02-30", NOW) is None

    def test_absent(self) -> None:
        assert extract_date("no date here", NOW) is None


class TestExtractTargetDate:
    """Tests for deadline extraction."""

    def test_next_month(self) -> None:
        assert extract_target_date("run a marathon by next month", NOW).value == date(2026, 4, 18)

    def test_in_weeks(self) -> None:
        assert extract_target_date("read 3 books in 2 weeks", NOW).value == date(2026, 4, 1)

    def test_end_of_month(self) -> None:
        assert extract_target_date("finish by end of month", NOW).value == date(2026, 3, 31)

    def test_end_of_year(self) -> None:
        assert extract_target_date("save money by the end of the year", NOW).value == date(2026, 12, 31)

    def test_weekday(self) -> None:
        assert extract_target_date("done by Friday", NOW).value == date(2026, 3, 20)

    def test_due_iso(self) -> None:
        assert extract_target_date("due 2026-05-01", NOW).value == date(2026, 5, 1)

    def test_past_month_name_rolls_forward(self) -> None:
        assert extract_target_date("by January 5", NOW).value == date(2027, 1, 5)

    def test_absent(self) -> None:
        assert extract_target_date("someday maybe", NOW) is None


class TestKeywordsAndText:
    """Tests for keyword, hashtag and free-text helpers."""

    def test_lookup_phrase(self) -> None:
        assert lookup_phrase("not great at all", MOOD_WORDS) == ("not great", 4)

    def test_category_first_keyword(self) -> None:
        assert infer_category("meditation, exercise, breakfast") == "wellness"

    def test_category_word_boundary(self) -> None:
        """'work' does not match inside 'workout'."""
        assert infer_category("workout after work") == "fitness"
        assert infer_category("work then workout") == "productivity"

    def test_category_plural(self) -> None:
        assert infer_category("evening walks") == "fitness"

    def test_category_absent(self) -> None:
        assert infer_category("nothing relevant") is None

    def test_emotions(self) -> None:
        assert extract_keywords("wow, i got chills", EMOTION_KEYWORDS) == frozenset({"amazed", "awe"})

    def test_hashtags(self) -> None:
        assert extract_hashtags("#gratitude and #Morning-Pages") == frozenset(
            {"gratitude", "morning-pages"}
        )

    def test_free_text_stops_at_sentence(self) -> None:
        text = "Mood: anxious about work. Long day"
        assert extract_free_text(text, r"^mood\s*:\s*") == "anxious about work"

    def test_free_text_keeps_colons(self) -> None:
        text = "Log synch: saw 11:11 again"
        assert extract_free_text(text, r"^log\s+synch\s*:\s*") == "saw 11:11 again"

    def test_free_text_missing_trigger(self) -> None:
        assert extract_free_text("hello", r"^mood:") is None

    def test_split_steps(self) -> None:
        assert split_steps("meditation, exercise, and breakfast") == (
            "meditation",
            "exercise",
            "breakfast",
        )
        assert split_steps("stretch then journal") == ("stretch", "journal")

    def test_truncate_title(self) -> None:
        long_text = "word " * 30
        title = truncate_title(long_text.strip())
        assert len(title) <= 80
        assert not title.endswith(" ")

    def test_normalize(self) -> None:
        message = normalize("  I’m   feeling\tgood  ")
        assert message.text == "I'm feeling good"
        assert message.folded == "i'm feeling good"


class TestExtraction:
    """Tests for the Extraction parameter bag."""

    def test_rejects_unknown_key(self) -> None:
        out = Extraction(EntityType.MOOD, IntentKind.CREATE)
        with pytest.raises(KeyError):
            out.put("title", "nope")

    def test_provenance_counts(self) -> None:
        out = Extraction(EntityType.MOOD, IntentKind.CREATE)
        out.put("mood_rating", 7, Provenance.EXPLICIT)
        out.put("notes", "long day")
        out.put("entry_date", NOW.date(), Provenance.DEFAULTED)
        assert out.explicit_count == 1
        assert out.inferred_count == 1
        assert out.evidence_count == 2

    def test_empty_values_ignored(self) -> None:
        out = Extraction(EntityType.MOOD, IntentKind.CREATE)
        out.put("tags", frozenset())
        out.put("notes", "")
        assert out.parameters == {}

    def test_missing_required(self) -> None:
        out = Extraction(EntityType.GOAL, IntentKind.CREATE)
        assert out.missing == ("title",)

    def test_extractor_rejects_unsupported_pair(self) -> None:
        with pytest.raises(ValueError):
            ParameterExtractor().extract("hi", EntityType.MOOD, IntentKind.UPDATE, NOW)


# ============================================================================
# Rule Registry Tests
# ============================================================================


class TestPatternRegistry:
    """Tests for the rule registry."""

    def test_default_registry_covers_every_pair(self) -> None:
        registry = build_default_registry()
        assert set(registry.pairs()) == set(PARAMETER_KEYS)

    def test_fresh_registry_each_call(self) -> None:
        first = build_default_registry()
        second = build_default_registry()
        first.register(Rule(EntityType.MOOD, IntentKind.CREATE, r"\bvibes\b", 0.5))
        assert len(first) == len(DEFAULT_RULES) + 1
        assert len(second) == len(DEFAULT_RULES)

    def test_rules_are_appended_in_order(self) -> None:
        registry = PatternRegistry()
        a = Rule(EntityType.GOAL, IntentKind.VIEW, r"\ba\b", 0.5, "a")
        b = Rule(EntityType.GOAL, IntentKind.VIEW, r"\bb\b", 0.5, "b")
        registry.extend([a, b])
        assert registry.rules == (a, b)

    def test_register_rejects_non_rules(self) -> None:
        with pytest.raises(TypeError):
            PatternRegistry().register("not a rule")  # type: ignore[arg-type]

    @pytest.mark.parametrize("weight", [0.0, -0.1, 1.5])
    def test_invalid_weight(self, weight: float) -> None:
        with pytest.raises(ValueError):
            Rule(EntityType.MOOD, IntentKind.CREATE, r"x", weight)

    def test_match_is_case_insensitive(self) -> None:
        registry = PatternRegistry([Rule(EntityType.MOOD, IntentKind.CREATE, r"^mood\s*:", 0.9, "m")])
        matches = registry.match("MOOD: fine")
        assert len(matches) == 1
        assert matches[0].excerpt == "MOOD:"
        assert matches[0].start == 0

    def test_rules_for(self) -> None:
        registry = build_default_registry()
        rules = registry.rules_for(EntityType.MOOD, IntentKind.VIEW)
        assert rules
        assert all(r.pair == (EntityType.MOOD, IntentKind.VIEW) for r in rules)


# ============================================================================
# Scoring Tests
# ============================================================================


class TestScoreConfidence:
    """Tests for the confidence formula."""

    def test_single_rule(self) -> None:
        assert score_confidence([0.9]) == 0.9

    def test_extra_rules_capped(self) -> None:
        assert score_confidence([0.5, 0.4]) == 0.55
        assert score_confidence([0.5, 0.4, 0.3, 0.2, 0.1]) == 0.6

    def test_parameter_bonuses(self) -> None:
        assert score_confidence([0.6], explicit=1) == 0.7
        assert score_confidence([0.6], inferred=2) == 0.7

    def test_capped_at_one(self) -> None:
        assert score_confidence([1.0], explicit=3) == 1.0

    def test_missing_caps_below_medium(self) -> None:
        score = score_confidence([0.9], explicit=2, missing=1)
        assert score < IntentConfidence.MEDIUM
        assert score == 0.64

    def test_more_evidence_never_lowers(self) -> None:
        assert score_confidence([0.7], explicit=1) >= score_confidence([0.7], inferred=1)
        assert score_confidence([0.7], inferred=1) >= score_confidence([0.7])

    def test_requires_weights(self) -> None:
        with pytest.raises(ValueError):
            score_confidence([])

    def test_rejects_negative_counts(self) -> None:
        with pytest.raises(ValueError):
            score_confidence([0.5], explicit=-1)


# ============================================================================
# Classifier Tests
# ============================================================================


class TestEntityClassifier:
    """Tests for EntityClassifier."""

    @pytest.fixture
    def classifier(self) -> EntityClassifier:
        return EntityClassifier()

    # --- End-to-end scenarios ---

    def test_routine_create(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("Create morning routine: meditation, exercise, breakfast", NOW)
        assert command.entity_type == EntityType.ROUTINE
        assert command.intent == IntentKind.CREATE
        assert "morning" in command.parameters["name"]
        assert command.parameters["category"] == "wellness"
        assert command.parameters["steps"] == ("meditation", "exercise", "breakfast")
        assert command.parameters["time_of_day"] == "morning"
        assert command.raw_excerpt == "Create morning routine"

    def test_mood_feeling_with_fraction(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("I am feeling happy today (8/10)", NOW)
        assert command.entity_type == EntityType.MOOD
        assert command.intent == IntentKind.CREATE
        assert command.parameters["mood_rating"] == 8
        assert command.parameters["entry_date"] == date(2026, 3, 18)
        assert "notes" not in command.parameters

    def test_mood_colon_with_notes(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("Mood: anxious about work 4/10", NOW)
        assert command.entity_type == EntityType.MOOD
        assert command.intent == IntentKind.CREATE
        assert command.parameters["mood_rating"] == 4
        assert "anxious about work" in command.parameters["notes"]

    def test_mood_trends(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("Show mood trends", NOW)
        assert command.entity_type == EntityType.MOOD
        assert command.intent == IntentKind.VIEW
        assert command.parameters["trend"] is True

    def test_belief_create(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("I believe I am capable of achieving my goals", NOW)
        assert command.entity_type == EntityType.BELIEF
        assert command.intent == IntentKind.CREATE
        assert "capable" in command.parameters["statement"]
        assert command.parameters["belief_type"] == "capability"
        assert command.parameters["category"] == "empowering"

    def test_synchronicity_create(self, classifier: EntityClassifier) -> None:
        command = classifier.classify(
            "Log synch: Saw 11:11 on the clock right when thinking about my goal", NOW
        )
        assert command.entity_type == EntityType.SYNCHRONICITY
        assert command.intent == IntentKind.CREATE
        assert "11:11" in command.parameters["title"]
        assert command.parameters["tags"] == frozenset({"numbers", "timing"})
        assert command.parameters["context"] == "thinking about my goal"
        assert command.parameters["date_occurred"] == date(2026, 3, 18)

    # --- Other pairs ---

    def test_routine_update_add_step(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("Add stretching to my morning routine", NOW)
        assert (command.entity_type, command.intent) == (EntityType.ROUTINE, IntentKind.UPDATE)
        assert command.parameters["target"] == "morning routine"
        assert command.parameters["steps"] == ("stretching",)

    def test_routine_complete(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("I completed my morning routine", NOW)
        assert (command.entity_type, command.intent) == (EntityType.ROUTINE, IntentKind.COMPLETE)
        assert command.parameters["target"] == "morning routine"
        assert command.parameters["completed_on"] == date(2026, 3, 18)

    def test_goal_create_with_deadline(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("Create a new goal to run a marathon by next month", NOW)
        assert (command.entity_type, command.intent) == (EntityType.GOAL, IntentKind.CREATE)
        assert command.parameters["title"] == "run a marathon"
        assert command.parameters["target_date"] == date(2026, 4, 18)
        assert command.parameters["category"] == "fitness"

    def test_goal_update_progress(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("Update my marathon goal progress to 50%", NOW)
        assert (command.entity_type, command.intent) == (EntityType.GOAL, IntentKind.UPDATE)
        assert command.parameters["target"] == "marathon goal"
        assert command.parameters["progress"] == 50

    def test_goal_complete(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("Mark my marathon goal as achieved", NOW)
        assert (command.entity_type, command.intent) == (EntityType.GOAL, IntentKind.COMPLETE)
        assert command.parameters["target"] == "marathon goal"

    def test_goal_view_status(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("Show my active goals", NOW)
        assert (command.entity_type, command.intent) == (EntityType.GOAL, IntentKind.VIEW)
        assert command.parameters["status"] == "active"

    def test_belief_reinforce(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("Reinforce my belief that I am worthy", NOW)
        assert (command.entity_type, command.intent) == (EntityType.BELIEF, IntentKind.UPDATE)
        assert command.parameters["action"] == "reinforce"
        assert command.parameters["target"] == "I am worthy"

    def test_belief_view(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("Show my limiting beliefs", NOW)
        assert (command.entity_type, command.intent) == (EntityType.BELIEF, IntentKind.VIEW)
        assert command.parameters["category"] == "limiting"

    def test_synchronicity_view_window(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("Show my synchronicities from this month", NOW)
        assert (command.entity_type, command.intent) == (EntityType.SYNCHRONICITY, IntentKind.VIEW)
        assert command.parameters["days"] == 30

    def test_mood_view_question(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("How has my mood been this week?", NOW)
        assert (command.entity_type, command.intent) == (EntityType.MOOD, IntentKind.VIEW)
        assert command.parameters["trend"] is True
        assert command.parameters["days"] == 7

    def test_mood_words_and_energy(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("Feeling excited and energetic today", NOW)
        assert command.entity_type == EntityType.MOOD
        assert command.parameters["mood_rating"] == 8
        assert command.parameters["energy_level"] == 8

    def test_relative_entry_date(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("Mood: great yesterday", NOW)
        assert command.parameters["entry_date"] == date(2026, 3, 17)
        assert command.parameters["mood_rating"] == 9

    # --- Properties ---

    @pytest.mark.parametrize(
        "message,rating",
        [
            ("Mood: calm 6/10", 6),
            ("I feel okay 5/10", 5),
            ("Feeling good 9/10", 9),
            ("Log mood 3/10", 3),
        ],
    )
    def test_explicit_fraction_is_exact_and_never_lowers_confidence(
        self, classifier: EntityClassifier, message: str, rating: int
    ) -> None:
        with_fraction = classifier.classify(message, NOW)
        without_fraction = classifier.classify(message.rsplit(" ", 1)[0], NOW)

        assert with_fraction.parameters["mood_rating"] == rating
        assert without_fraction is not None
        assert without_fraction.entity_type == with_fraction.entity_type
        assert with_fraction.confidence >= without_fraction.confidence

    def test_fraction_does_not_flip_competing_pair(self, classifier: EntityClassifier) -> None:
        message = "I believe in myself and I feel great"
        without_fraction = classifier.classify(message, NOW)
        with_fraction = classifier.classify(f"{message} 9/10", NOW)

        assert without_fraction.entity_type == EntityType.BELIEF
        assert with_fraction.entity_type == EntityType.BELIEF
        assert with_fraction.confidence >= without_fraction.confidence

    def test_bare_fraction_still_logs_mood(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("9/10", NOW)
        assert (command.entity_type, command.intent) == (EntityType.MOOD, IntentKind.CREATE)
        assert command.parameters["mood_rating"] == 9

    def test_mood_rating_required(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("I feel tired", NOW)
        assert command.entity_type == EntityType.MOOD
        assert command.missing_parameters == ("mood_rating",)
        assert command.confidence < IntentConfidence.MEDIUM

    @pytest.mark.parametrize(

        "message",
        ["hello there", "What a lovely day", "ok", "pass the salt please"],
    )
    def test_no_match_returns_none(self, classifier: EntityClassifier, message: str) -> None:
        assert classifier.classify(message, NOW) is None

    def test_deterministic(self, classifier: EntityClassifier) -> None:
        message = "Log synch: Saw 11:11 on the clock right when thinking about my goal"
        first = classifier.classify(message, NOW)
        second = classifier.classify(message, NOW)
        assert first.to_dict() == second.to_dict()
        assert first.confidence == second.confidence

    @pytest.mark.parametrize("message,expected", [("Mood: 15/10", 10), ("Mood: 0/10", 1)])
    def test_ratings_clamped(self, classifier: EntityClassifier, message: str, expected: int) -> None:
        assert classifier.classify(message, NOW).parameters["mood_rating"] == expected

    def test_parameter_keys_always_allowed(self, classifier: EntityClassifier) -> None:
        for message in (
            "Create morning routine: meditation, exercise, breakfast",
            "Mood: anxious about work 4/10",
            "Create a new goal to run a marathon by next month",
            "Log synch: Saw 11:11 on the clock",
        ):
            command = classifier.classify(message, NOW)
            allowed = PARAMETER_KEYS[(command.entity_type, command.intent)]
            assert set(command.parameters) <= allowed

    def test_confidence_in_range(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("Mood: great 8/10 #win", NOW)
        assert 0.0 <= command.confidence <= 1.0

    # --- Missing parameters and weak cues ---

    def test_missing_required_caps_confidence(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("Create a routine", NOW)
        assert command.entity_type == EntityType.ROUTINE
        assert command.missing_parameters == ("name",)
        assert command.needs_clarification is True
        assert command.confidence < IntentConfidence.MEDIUM

    def test_weak_cue_scores_low(self, classifier: EntityClassifier) -> None:
        command = classifier.classify("I keep seeing 333 everywhere", NOW)
        assert command.entity_type == EntityType.SYNCHRONICITY
        assert command.confidence < IntentConfidence.DISPATCH

    # --- Input validation ---

    @pytest.mark.parametrize("message", ["", "   ", "\n\t"])
    def test_blank_message_rejected(self, classifier: EntityClassifier, message: str) -> None:
        with pytest.raises(InvalidMessageError):
            classifier.classify(message, NOW)

    def test_non_string_rejected(self, classifier: EntityClassifier) -> None:
        with pytest.raises(ValueError):
            classifier.classify(42, NOW)  # type: ignore[arg-type]

    def test_long_input_truncated(self, caplog: pytest.LogCaptureFixture) -> None:
        classifier = EntityClassifier(max_input_length=40)
        with caplog.at_level(logging.WARNING):
            command = classifier.classify("Mood: great" + " and more" * 100, NOW)
        assert command is not None
        assert any("truncated" in record.message for record in caplog.records)

    @pytest.mark.parametrize(
        "message",
        [
            "show mood " * 1000,
            "goal progress " * 715,
            "mark routine " * 770,
            "mark goal " * 1000,
            "Create routine " + "routine " * 1248,
        ],
    )
    def test_long_repetitive_input_is_fast(
        self, classifier: EntityClassifier, message: str
    ) -> None:
        started = time.perf_counter()
        classifier.classify(message, NOW)
        assert time.perf_counter() - started < 1.0

    def test_invalid_max_input_length(self) -> None:
        with pytest.raises(ValueError):
            EntityClassifier(max_input_length=0)

    # --- Explain ---

    def test_explain_lists_candidates_in_order(self, classifier: EntityClassifier) -> None:
        candidates = classifier.explain("Reinforce my belief that I am worthy", NOW)
        assert candidates[0]["entity_type"] == "belief"
        assert candidates[0]["intent"] == "update"
        assert {c["intent"] for c in candidates} == {"update", "create"}


class TestRanking:
    """Tests for candidate ranking and tie-breaks."""

    def _classifier(self, *rules: Rule) -> EntityClassifier:
        return EntityClassifier(registry=PatternRegistry(rules))

    def test_weight_beats_priority(self) -> None:
        classifier = self._classifier(
            Rule(EntityType.MOOD, IntentKind.CREATE, r"\bsame\b", 0.4),
            Rule(EntityType.BELIEF, IntentKind.CREATE, r"\bsame\b", 0.6),
        )
        assert classifier.classify("same", NOW).entity_type == EntityType.BELIEF

    def test_evidence_beats_priority(self) -> None:
        classifier = self._classifier(
            Rule(EntityType.MOOD, IntentKind.CREATE, r"\bfeel\b", 0.5),
            Rule(EntityType.BELIEF, IntentKind.CREATE, r"\bfeel\b", 0.5),
        )
        command = classifier.classify("feel great 8/10", NOW)
        assert command.entity_type == EntityType.BELIEF

    def test_entity_priority_tie_break(self) -> None:
        classifier = self._classifier(
            Rule(EntityType.GOAL, IntentKind.VIEW, r"\bsame\b", 0.5),
            Rule(EntityType.ROUTINE, IntentKind.VIEW, r"\bsame\b", 0.5),
        )
        assert classifier.classify("same", NOW).entity_type == EntityType.ROUTINE

    def test_intent_priority_tie_break(self) -> None:
        classifier = self._classifier(
            Rule(EntityType.ROUTINE, IntentKind.VIEW, r"\bsame\b", 0.5),
            Rule(EntityType.ROUTINE, IntentKind.COMPLETE, r"\bsame\b", 0.5),
        )
        assert classifier.classify("same", NOW).intent == IntentKind.COMPLETE

    def test_cumulative_weight(self) -> None:
        classifier = self._classifier(
            Rule(EntityType.GOAL, IntentKind.VIEW, r"\ba\b", 0.5),
            Rule(EntityType.GOAL, IntentKind.VIEW, r"\bb\b", 0.4),
            Rule(EntityType.ROUTINE, IntentKind.VIEW, r"\bb\b", 0.8),
        )
        command = classifier.classify("a b", NOW)
        assert command.entity_type == EntityType.GOAL
        assert command.matched_rules == (
            classifier.registry.rules[0].name,
            classifier.registry.rules[1].name,
        )

    def test_corroborating_rule_cannot_outvote_lexical(self) -> None:
        classifier = self._classifier(
            Rule(EntityType.MOOD, IntentKind.CREATE, r"\bx\b", 0.5, "x", corroborating=True),
            Rule(EntityType.MOOD, IntentKind.CREATE, r"\by\b", 0.3, "y"),
            Rule(EntityType.BELIEF, IntentKind.CREATE, r"\by\b", 0.6, "belief-y"),
        )

        command = classifier.classify("x y", NOW)
        candidates = classifier.explain("x y", NOW)

        assert command.entity_type == EntityType.BELIEF
        assert candidates[1]["lexical_weight"] == 0.3
        assert candidates[1]["total_weight"] == 0.8

    def test_corroborating_only_candidates_still_rank(self) -> None:
        classifier = self._classifier(
            Rule(EntityType.MOOD, IntentKind.CREATE, r"\bx\b", 0.3, "x", corroborating=True),
            Rule(EntityType.GOAL, IntentKind.VIEW, r"\bx\b", 0.2, "goal-x", corroborating=True),
        )
        command = classifier.classify("x", NOW)
        assert command.entity_type == EntityType.MOOD
        assert command.matched_rules == ("x",)

    def test_corroborating_weight_still_scores(self) -> None:
        classifier = self._classifier(
            Rule(EntityType.MOOD, IntentKind.CREATE, r"\bfeel\b", 0.7, "feel"),
            Rule(EntityType.MOOD, IntentKind.CREATE, r"\bvery\b", 0.3, "very", corroborating=True),
        )
        plain = classifier.classify("feel good", NOW)
        corroborated = classifier.classify("feel very good", NOW)
        assert corroborated.confidence > plain.confidence


# ============================================================================
# ParsedCommand Tests
# ============================================================================


class TestParsedCommand:
    """Tests for the ParsedCommand value."""

    @pytest.fixture
    def command(self) -> ParsedCommand:
        return ParsedCommand(
            entity_type=EntityType.MOOD,
            intent=IntentKind.CREATE,
            parameters={"mood_rating": 7, "tags": frozenset({"b", "a"}), "entry_date": date(2026, 3, 18)},
            confidence=0.9,
            raw_excerpt="Mood:",
        )

    def test_parameters_read_only(self, command: ParsedCommand) -> None:
        with pytest.raises(TypeError):
            command.parameters["mood_rating"] = 1  # type: ignore[index]

    def test_frozen(self, command: ParsedCommand) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            command.confidence = 0.1  # type: ignore[misc]

    def test_confidence_range_checked(self) -> None:
        with pytest.raises(ValueError):
            ParsedCommand(EntityType.MOOD, IntentKind.CREATE, {}, 1.2, "x")

    def test_to_dict(self, command: ParsedCommand) -> None:
        data = command.to_dict()
        assert data["entity_type"] == "mood"
        assert data["parameters"]["tags"] == ["a", "b"]
        assert data["parameters"]["entry_date"] == "2026-03-18"

    def test_confidence_helpers(self, command: ParsedCommand) -> None:
        assert command.is_high_confidence() is True
        assert command.is_low_confidence() is False


# ============================================================================
# Suggestion Tests
# ============================================================================


class TestSuggestRephrasing:
    """Tests for rephrasing suggestions on unrecognized messages."""

    @staticmethod
    def kinds(message: str, registry: PatternRegistry | None = None) -> list[SuggestionKind]:
        return [s.kind for s in suggest_rephrasing(message, registry)]

    def test_short_message_asks_for_detail(self) -> None:
        assert self.kinds("hmm ok") == [
            SuggestionKind.BE_SPECIFIC,
            SuggestionKind.ADD_ACTION,
            SuggestionKind.NAME_ENTITY,
        ]

    def test_no_action_and_no_entity(self) -> None:
        assert self.kinds("What a lovely day it has been") == [
            SuggestionKind.ADD_ACTION,
            SuggestionKind.NAME_ENTITY,
        ]

    def test_action_without_entity(self) -> None:
        suggestions = suggest_rephrasing("please show everything from last week")
        assert [s.kind for s in suggestions] == [SuggestionKind.NAME_ENTITY]
        assert "routine, belief, synchronicity, mood or goal" in suggestions[0].text

    def test_entity_without_action(self) -> None:
        (suggestion,) = suggest_rephrasing("my goals for this year")
        assert suggestion.kind == SuggestionKind.CHOOSE_ACTION
        assert suggestion.entity_type == EntityType.GOAL
        assert "I can create, update, complete or show them" in suggestion.text
        assert EXAMPLES[EntityType.GOAL] in suggestion.text

    def test_offered_verbs_follow_registry(self) -> None:
        (default,) = suggest_rephrasing("thinking about my beliefs lately")
        assert "I can create, update or show them" in default.text

        registry = PatternRegistry([Rule(EntityType.BELIEF, IntentKind.VIEW, r"^x$", 0.5)])
        (custom,) = suggest_rephrasing("thinking about my beliefs lately", registry)
        assert "I can show them" in custom.text

    def test_entity_and_action_get_example(self) -> None:
        (suggestion,) = suggest_rephrasing("Create a habit of reading daily")
        assert suggestion.kind == SuggestionKind.SHOW_EXAMPLE
        assert suggestion.entity_type == EntityType.ROUTINE
        assert EXAMPLES[EntityType.ROUTINE] in suggestion.text

    def test_typos_corrected_first(self) -> None:
        suggestions = suggest_rephrasing("creat a new rutine for evenings")
        assert [s.kind for s in suggestions] == [SuggestionKind.FIX_TYPO, SuggestionKind.SHOW_EXAMPLE]
        assert suggestions[0].text == 'Did you mean "create a new routine for evenings"?'
        assert suggestions[1].entity_type == EntityType.ROUTINE

    def test_correct_typos_keeps_case(self) -> None:
        assert correct_typos("Creat my Rutine") == ("Create my Routine", ["Creat", "Rutine"])
        assert correct_typos("all spelled fine") == ("all spelled fine", [])

    def test_capped(self) -> None:
        assert self.kinds("excercise hmm") == [
            SuggestionKind.FIX_TYPO,
            SuggestionKind.BE_SPECIFIC,
            SuggestionKind.ADD_ACTION,
            SuggestionKind.NAME_ENTITY,
        ]
        assert len(suggest_rephrasing("excercise hmm")) == MAX_SUGGESTIONS

    def test_detect_entity_plurals_and_boundaries(self) -> None:
        assert detect_entity("all my synchronicities") == EntityType.SYNCHRONICITY
        assert detect_entity("my routines") == EntityType.ROUTINE
        assert detect_entity("a new affirmation") == EntityType.BELIEF
        assert detect_entity("moody workout") is None

    def test_unrecognized_messages_get_suggestions(self) -> None:
        classifier = EntityClassifier()
        for message in ("hello there", "my goals for this year", "creat a new rutine for evenings"):
            assert classifier.classify(message, NOW) is None
            assert suggest_rephrasing(message)
