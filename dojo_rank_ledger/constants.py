# -*- coding: utf-8 -*-
"""
constants.py
------------
Enumerations and fixed sizes shared by the catalog, the codec and the
transition engine.
"""

import enum
from types import MappingProxyType


class StripeToken(str, enum.Enum):
    """Content of a single stripe slot on the belt tip."""

    NONE = 'none'
    WHITE = 'white'
    RED = 'red'
    YELLOW = 'yellow'
    BLACK = 'black'

    def __str__(self):
        return self.value


class StripeMode(str, enum.Enum):
    """How the stripe pattern of a rank was decided.

    MANUAL      – the slots were edited one by one (any belt).
    CURRICULUM  – the slots were derived from a youth degree (0–11).
    """

    MANUAL = 'manual'
    CURRICULUM = 'curriculum'

    def __str__(self):
        return self.value


SLOT_COUNT = 4
MAX_DEGREE = 11

# Colour bands of the youth degree curriculum, four degrees each.
DEGREE_WAVES = (StripeToken.WHITE, StripeToken.RED, StripeToken.YELLOW)
DEGREES_PER_WAVE = 4

EMPTY_PATTERN = (StripeToken.NONE,) * SLOT_COUNT

STRIPE_COLORS = MappingProxyType({
    StripeToken.WHITE:  '#FFFFFF',
    StripeToken.RED:    '#EF4444',
    StripeToken.YELLOW: '#FACC15',
    StripeToken.BLACK:  '#111827',
})
