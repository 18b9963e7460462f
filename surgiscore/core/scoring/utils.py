#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Clinical Scoring Utilities

Shared helpers used by the scoring systems: half-up rounding, threshold banding
and precondition checks on scalar arguments.
"""

import logging
import math
from enum import Enum
from typing import Any, Optional, Sequence, Tuple, Type, TypeVar

from surgiscore.core.exceptions import ScoringInputError

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def round_half_up(value, ndigits=0):
    """Round a number with halves going up (2.5 -> 3), unlike the builtin round()

    Args:
        value: Number to round
        ndigits: Decimal places to keep

    Returns:
        int when ndigits is 0, otherwise float
    """
    factor = 10 ** ndigits
    rounded = math.floor(value * factor + 0.5)
    if ndigits == 0:
        return int(rounded)
    return rounded / factor


def normalize_to_band(score, thresholds, default, inclusive=False):
    """Convert a numeric score to a band based on ascending thresholds

    Bands are evaluated in order and the first matching band wins.

    Args:
        score: Numeric score
        thresholds: Sequence of (threshold, band) tuples in ascending order
        default: Band returned when the score exceeds every threshold
        inclusive: Match on ``score <= threshold`` instead of ``score < threshold``

    Returns:
        The matched band
    """
    for threshold, band in thresholds:
        if (score <= threshold) if inclusive else (score < threshold):
            return band
    return default


def require_non_negative(name: str, value: Any) -> float:
    """Raise ScoringInputError unless value is a finite number >= 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value) or math.isinf(value):
        raise ScoringInputError(f"{name} must be a finite number", parameter=name, value=value)
    if value < 0:
        raise ScoringInputError(f"{name} must not be negative", parameter=name, value=value)
    return value


def require_positive(name: str, value: Any) -> float:
    """Raise ScoringInputError unless value is a finite number > 0."""
    require_non_negative(name, value)
    if value == 0:
        raise ScoringInputError(f"{name} must be greater than zero", parameter=name, value=value)
    return value


def require_in_range(name: str, value: Any, low: float, high: float) -> float:
    """Raise ScoringInputError unless low <= value <= high."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        raise ScoringInputError(f"{name} must be a number", parameter=name, value=value)
    if value < low or value > high:
        raise ScoringInputError(
            f"{name} must be between {low} and {high}", parameter=name, value=value
        )
    return value


def require_percent(name: str, value: Any) -> float:
    return require_in_range(name, value, 0, 100)


def require_enum(name: str, value: Any, enum_cls: Type[E]) -> E:
    """Coerce value to a member of enum_cls, raising ScoringInputError for an unknown value."""
    try:
        return enum_cls(value)
    except ValueError as e:
        raise ScoringInputError(
            f"{name} must be one of: {', '.join(m.value for m in enum_cls)}", parameter=name, value=value
        ) from e


def input_fields(record, model_cls):
    """Extract the fields of ``model_cls`` from a record, dropping derived fields

    Lets a result record (which subclasses its input record) be scored again.

    Args:
        record: Input or result record
        model_cls: The input model class whose fields should be kept

    Returns:
        Dictionary of the input field values
    """
    return record.model_dump(include=set(model_cls.model_fields))
