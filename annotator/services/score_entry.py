"""Per-item score entry state.

Holds the values an annotator has picked for the current item, decides
how each score config is presented, and validates the selection before
anything is sent upstream.  A new :class:`ScoreEntryState` is created for
every item; nothing carries over between items.
"""

from __future__ import annotations

import logging
import math

from annotator.models.score import (
    ScoreCategory,
    ScoreConfig,
    ScoreDataType,
    ScoreInput,
    ScoreOption,
)

logger = logging.getLogger(__name__)

# Bounded numeric ranges up to this many integers are shown as buttons.
MAX_BUTTON_RANGE = 10


class ScoreValidationError(ValueError):
    """Selected scores cannot be submitted as they are."""


def category_value(category: ScoreCategory, index: int) -> float:
    """Numeric value a category button sets: declared value or its position."""
    return category.value if category.value is not None else float(index)


def score_input_for(config: ScoreConfig) -> ScoreInput:
    """Return how *config* is presented for entry."""
    base = {"config_id": config.id, "name": config.name, "description": config.description}

    if config.data_type == ScoreDataType.CATEGORICAL:
        if not config.categories:
            return ScoreInput(kind="unsupported", **base)
        options = [
            ScoreOption(label=category.label, value=category_value(category, index))
            for index, category in enumerate(config.categories)
        ]
        return ScoreInput(kind="buttons", options=options, **base)

    if config.data_type == ScoreDataType.BOOLEAN:
        options = [ScoreOption(label="Yes", value=1), ScoreOption(label="No", value=0)]
        return ScoreInput(kind="buttons", options=options, **base)

    if config.has_bounds:
        # Steps of one from min_value; never truncated to integers.
        count = int(config.max_value - config.min_value + 1)
        if count <= MAX_BUTTON_RANGE:
            values = [config.min_value + step for step in range(count)]
            options = [ScoreOption(label=f"{v:g}", value=v) for v in values]
            return ScoreInput(kind="buttons", options=options, **base)
        return ScoreInput(
            kind="bounded_input",
            min_value=config.min_value,
            max_value=config.max_value,
            **base,
        )

    return ScoreInput(kind="free_input", **base)


def is_offered_value(config: ScoreConfig, value: float) -> bool:
    """Whether *value* is one of the buttons rendered for *config*.

    Categorical values are checked later by :func:`resolve_category_label`.
    """
    score_input = score_input_for(config)
    if score_input.kind != "buttons" or config.data_type == ScoreDataType.CATEGORICAL:
        return True
    return value in {option.value for option in score_input.options}


def resolve_category_label(config: ScoreConfig, value: float) -> str:
    """Map a selected categorical *value* back to its label.

    Raises:
        ScoreValidationError: if the config has no categories or none of
            them carries *value*.
    """
    if not config.categories:
        logger.error('No categories defined for categorical score "%s"', config.name)
        raise ScoreValidationError(f'Configuration error for "{config.name}"')
    for index, category in enumerate(config.categories):
        if category_value(category, index) == value:
            return category.label
    logger.error(
        'No label found for categorical score "%s" with value %s', config.name, value
    )
    raise ScoreValidationError(f'Invalid category value for "{config.name}"')


class ScoreEntryState:
    """Selected values (config id -> number) and comment for one item."""

    def __init__(self, item_id: str | None = None) -> None:
        self.item_id = item_id
        self.values: dict[str, float] = {}
        self.comment = ""

    def select(self, config_id: str, value: float) -> None:
        """Record a button click."""
        self.values[config_id] = value

    def enter(self, config: ScoreConfig, raw: str | float) -> bool:
        """Record a free-form numeric entry.

        Non-numeric, non-finite, and out-of-bounds entries are ignored
        without touching the state.  Returns whether the value was taken.
        """
        try:
            value = float(raw)
        except (TypeError, ValueError):
            return False
        if not math.isfinite(value):
            return False
        if config.has_bounds and not (config.min_value <= value <= config.max_value):
            return False
        self.values[config.id] = value
        return True

    def clear(self, config_id: str) -> None:
        self.values.pop(config_id, None)

    def is_selected(self, config_id: str) -> bool:
        return config_id in self.values

    def is_complete(self, configs: list[ScoreConfig]) -> bool:
        """Every config has a selected value."""
        return all(config.id in self.values for config in configs)

    def missing(self, configs: list[ScoreConfig]) -> list[str]:
        return [config.name for config in configs if config.id not in self.values]
