"""Confidence scoring for classified commands.

Confidence is a pure function of the matched rule weights and the evidence
extracted for the winning pair, so it can be tested without the classifier.
"""

from __future__ import annotations

from typing import Sequence

from .taxonomy import IntentConfidence

EXTRA_RULE_BONUS = 0.05
EXTRA_RULE_CAP = 0.1
EXPLICIT_PARAMETER_BONUS = 0.1
INFERRED_PARAMETER_BONUS = 0.05

# Ceiling applied when required parameters are missing
MISSING_PARAMETER_CAP = IntentConfidence.MEDIUM - 0.01


def score_confidence(
    weights: Sequence[float],
    explicit: int = 0,
    inferred: int = 0,
    missing: int = 0,
) -> float:
    """Score a classification.

    Args:
        weights: Weights of the rules that matched the winning pair
        explicit: Parameters stated literally (explicit fraction, explicit date)
        inferred: Parameters inferred from descriptive words or free text
        missing: Required parameters that are absent

    Returns:
        Confidence in [0.0, 1.0], rounded to 4 places

    Raises:
        ValueError: If no weights are given or a count is negative
    """
    if not weights:
        raise ValueError("At least one rule weight is required")
    if explicit < 0 or inferred < 0 or missing < 0:
        raise ValueError("Parameter counts must be non-negative")

    score = max(weights)
    score += min(EXTRA_RULE_CAP, EXTRA_RULE_BONUS * (len(weights) - 1))
    score += EXPLICIT_PARAMETER_BONUS * explicit
    score += INFERRED_PARAMETER_BONUS * inferred
    score = min(1.0, score)

    if missing:
        score = min(score, MISSING_PARAMETER_CAP)

    return round(max(0.0, score), 4)
