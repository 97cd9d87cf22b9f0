# -*- coding: utf-8 -*-
"""
stripes.py
----------
Conversions between the three ways a stripe count can be expressed:

  legacy count    – a bare integer 0..4 with no colour information
  manual pattern  – four slots edited one by one, possibly garbage
  youth degree    – ordinal 0..11 of the standardized kids curriculum

and the canonical pattern: a tuple of exactly four StripeToken values,
slot 0 most senior, filled contiguously from slot 0.

Nothing in here raises on bad data.  Out-of-range counts, degrees and
array lengths are clamped.
"""

from collections.abc import Sequence

from . import belts
from .constants import (
    DEGREE_WAVES,
    DEGREES_PER_WAVE,
    EMPTY_PATTERN,
    MAX_DEGREE,
    SLOT_COUNT,
    StripeToken,
)

_TOKEN_VALUES = frozenset(t.value for t in StripeToken)


def _to_int(value, default=0):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _clamp(value, low, high):
    return max(low, min(high, value))


def _safe_token(value):
    if isinstance(value, StripeToken):
        return value
    if isinstance(value, str) and value in _TOKEN_VALUES:
        return StripeToken(value)
    return StripeToken.NONE


def normalize_from_raw(raw):
    """Canonical pattern from unvalidated input.

    Keeps the first four elements, turns anything that is not a known
    token into an empty slot, pads to four slots and packs the filled
    slots toward slot 0 (their relative order is kept).
    """
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raw = ()
    tokens = [_safe_token(v) for v in list(raw)[:SLOT_COUNT]]
    filled = [t for t in tokens if t is not StripeToken.NONE]
    return tuple(filled) + (StripeToken.NONE,) * (SLOT_COUNT - len(filled))


def from_legacy_count(count, fallback_token):
    n = _clamp(_to_int(count), 0, SLOT_COUNT)
    token = _safe_token(fallback_token)
    return (token,) * n + (StripeToken.NONE,) * (SLOT_COUNT - n)


def count_from_pattern(pattern):
    return sum(1 for t in pattern if _safe_token(t) is not StripeToken.NONE)


def is_empty(pattern):
    return count_from_pattern(pattern) == 0


def clamp_degree(degree):
    return _clamp(_to_int(degree), 0, MAX_DEGREE)


def from_degree(degree):
    """Pattern of a youth curriculum degree.

    Each wave colour (white, red, yellow) spans four degrees.  A new wave
    overwrites the belt tip from slot 0 while the previous wave's colour
    stays in the remaining slots, like an odometer rolling over:

        4 → W W W W    5 → R W W W    8 → R R R R    9 → Y R R R
    """
    d = clamp_degree(degree)
    if d == 0:
        return EMPTY_PATTERN
    wave_index, position = divmod(d - 1, DEGREES_PER_WAVE)
    position += 1
    current = DEGREE_WAVES[wave_index]
    previous = DEGREE_WAVES[wave_index - 1] if wave_index > 0 else StripeToken.NONE
    return (current,) * position + (previous,) * (SLOT_COUNT - position)


def degree_is_applicable(belt):
    return belts.is_youth_family(belt)


def add_stripe(pattern, token):
    """Fill the first empty slot with ``token``; a full pattern is returned as is."""
    pattern = normalize_from_raw(pattern)
    count = count_from_pattern(pattern)
    if count >= SLOT_COUNT:
        return pattern
    return pattern[:count] + (_safe_token(token),) + pattern[count + 1:]


def format_stripes(pattern):
    """Compact text form, e.g. ``'R W W -'``."""
    return ' '.join(
        '-' if t is StripeToken.NONE else t.value[0].upper()
        for t in normalize_from_raw(pattern)
    )


def as_values(pattern):
    """Plain string values, for JSON columns and API payloads."""
    return [_safe_token(t).value for t in pattern]
