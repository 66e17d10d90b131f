"""Tests for score input rendering, entry state and categorical resolution."""

from __future__ import annotations

import pytest

from annotator.models.score import ScoreCategory, ScoreConfig, ScoreDataType
from annotator.services.score_entry import (
    ScoreEntryState,
    ScoreValidationError,
    is_offered_value,
    resolve_category_label,
    score_input_for,
)

ACCURACY = ScoreConfig(id="a", name="Accuracy", data_type=ScoreDataType.NUMERIC, min_value=1, max_value=3)
RESOLVED = ScoreConfig(id="b", name="Resolved", data_type=ScoreDataType.BOOLEAN)
LATENCY = ScoreConfig(id="c", name="Latency", data_type=ScoreDataType.NUMERIC, min_value=0, max_value=100)
FREE = ScoreConfig(id="d", name="Cost", data_type=ScoreDataType.NUMERIC)
TONE = ScoreConfig(
    id="e",
    name="Tone",
    data_type=ScoreDataType.CATEGORICAL,
    categories=[
        ScoreCategory(label="Friendly", value=10),
        ScoreCategory(label="Neutral"),
        ScoreCategory(label="Rude", value=30),
    ],
)


class TestScoreInputFor:
    def test_categorical_buttons_use_declared_value_or_position(self) -> None:
        score_input = score_input_for(TONE)
        assert score_input.kind == "buttons"
        assert [(o.label, o.value) for o in score_input.options] == [
            ("Friendly", 10),
            ("Neutral", 1),
            ("Rude", 30),
        ]

    def test_categorical_without_categories_is_unsupported(self) -> None:
        config = ScoreConfig(id="x", name="X", data_type=ScoreDataType.CATEGORICAL)
        assert score_input_for(config).kind == "unsupported"

    def test_boolean_is_yes_no(self) -> None:
        score_input = score_input_for(RESOLVED)
        assert [(o.label, o.value) for o in score_input.options] == [("Yes", 1), ("No", 0)]

    def test_small_numeric_range_is_buttons(self) -> None:
        score_input = score_input_for(ACCURACY)
        assert score_input.kind == "buttons"
        assert [o.value for o in score_input.options] == [1, 2, 3]

    def test_range_of_exactly_ten_is_buttons(self) -> None:
        config = ScoreConfig(id="t", name="T", data_type=ScoreDataType.NUMERIC, min_value=1, max_value=10)
        assert len(score_input_for(config).options) == 10

    def test_fractional_bounds_step_from_minimum(self) -> None:
        config = ScoreConfig(
            id="f", name="F", data_type=ScoreDataType.NUMERIC, min_value=0.5, max_value=3.5
        )
        score_input = score_input_for(config)
        assert score_input.kind == "buttons"
        assert [o.value for o in score_input.options] == [0.5, 1.5, 2.5, 3.5]
        assert [o.label for o in score_input.options] == ["0.5", "1.5", "2.5", "3.5"]

    def test_wide_numeric_range_is_bounded_input(self) -> None:
        score_input = score_input_for(LATENCY)
        assert score_input.kind == "bounded_input"
        assert (score_input.min_value, score_input.max_value) == (0, 100)

    def test_unbounded_numeric_is_free_input(self) -> None:
        assert score_input_for(FREE).kind == "free_input"


class TestScoreEntryState:
    def test_bounded_entry_rejects_out_of_range_silently(self) -> None:
        entry = ScoreEntryState("item-1")
        assert entry.enter(LATENCY, "42") is True
        assert entry.enter(LATENCY, "101") is False
        assert entry.enter(LATENCY, -1) is False
        assert entry.values == {"c": 42.0}

    def test_free_entry_accepts_any_finite_number(self) -> None:
        entry = ScoreEntryState()
        assert entry.enter(FREE, "-1e6") is True
        assert entry.values["d"] == -1e6
        for raw in ("abc", "", "nan", "inf", None):
            assert entry.enter(FREE, raw) is False
        assert entry.values["d"] == -1e6

    def test_completion_requires_every_config(self) -> None:
        """NUMERIC[1-3] + BOOLEAN: selecting only the first keeps it incomplete."""
        configs = [ACCURACY, RESOLVED]
        entry = ScoreEntryState("item-1")
        assert entry.is_complete(configs) is False

        entry.select("a", 2)
        assert entry.is_complete(configs) is False
        assert entry.missing(configs) == ["Resolved"]

        entry.select("b", 0)
        assert entry.is_complete(configs) is True

    def test_clear(self) -> None:
        entry = ScoreEntryState()
        entry.select("a", 1)
        entry.clear("a")
        assert entry.is_selected("a") is False


class TestIsOfferedValue:
    def test_buttons_accept_only_rendered_values(self) -> None:
        assert is_offered_value(RESOLVED, 1) is True
        assert is_offered_value(RESOLVED, 7) is False
        assert is_offered_value(ACCURACY, 3) is True
        assert is_offered_value(ACCURACY, 42) is False
        assert is_offered_value(ACCURACY, 1.5) is False

    def test_inputs_and_categories_are_checked_elsewhere(self) -> None:
        assert is_offered_value(LATENCY, 42.5) is True
        assert is_offered_value(FREE, -3) is True
        assert is_offered_value(TONE, 99) is True


class TestResolveCategoryLabel:
    def test_declared_and_positional_values(self) -> None:
        assert resolve_category_label(TONE, 10) == "Friendly"
        assert resolve_category_label(TONE, 1) == "Neutral"

    def test_unknown_value_names_the_score(self) -> None:
        with pytest.raises(ScoreValidationError, match='"Tone"'):
            resolve_category_label(TONE, 99)

    def test_config_without_categories(self) -> None:
        config = ScoreConfig(id="x", name="Mood", data_type=ScoreDataType.CATEGORICAL, categories=[])
        with pytest.raises(ScoreValidationError, match="Configuration error"):
            resolve_category_label(config, 0)
