# -*- coding: utf-8 -*-
"""
belts.py
--------
Static belt catalog.

Belts come in two families:

  adult  – white → blue → purple → brown → black, then the coral belts
  youth  – kids-* belts, a base colour optionally paired with a
           companion colour (grey/white, grey, grey/black, ...)

The catalog is read-only data.  Unknown identifiers are never an error:
stored records may carry belts that were renamed or retired, so every
accessor falls back to a default entry.
"""

from collections import namedtuple
from types import MappingProxyType

from .constants import STRIPE_COLORS, StripeToken

ADULT = 'adult'
YOUTH = 'youth'

DEFAULT_BELT = 'white'
DEFAULT_COLOR = '#E5E7EB'
YOUTH_PREFIX = 'kids-'

BeltInfo = namedtuple('BeltInfo', ['value', 'label', 'color', 'family'])

_BELTS = (
    BeltInfo('white',             'White',             '#E5E7EB', ADULT),
    BeltInfo('blue',              'Blue',              '#2563EB', ADULT),
    BeltInfo('purple',            'Purple',            '#7C3AED', ADULT),
    BeltInfo('brown',             'Brown',             '#92400E', ADULT),
    BeltInfo('black',             'Black',             '#1F2937', ADULT),
    BeltInfo('red_black',         'Red/Black (Coral)', '#8B0000', ADULT),
    BeltInfo('red',               'Red',               '#CC0000', ADULT),
    BeltInfo('kids-white',        'Kids White',        '#E5E7EB', YOUTH),
    BeltInfo('kids-grey-white',   'Kids Grey/White',   '#9CA3AF', YOUTH),
    BeltInfo('kids-grey',         'Kids Grey',         '#9CA3AF', YOUTH),
    BeltInfo('kids-grey-black',   'Kids Grey/Black',   '#9CA3AF', YOUTH),
    BeltInfo('kids-yellow-white', 'Kids Yellow/White', '#FBBF24', YOUTH),
    BeltInfo('kids-yellow',       'Kids Yellow',       '#FBBF24', YOUTH),
    BeltInfo('kids-yellow-black', 'Kids Yellow/Black', '#FBBF24', YOUTH),
    BeltInfo('kids-orange-white', 'Kids Orange/White', '#F97316', YOUTH),
    BeltInfo('kids-orange',       'Kids Orange',       '#F97316', YOUTH),
    BeltInfo('kids-orange-black', 'Kids Orange/Black', '#F97316', YOUTH),
    BeltInfo('kids-green-white',  'Kids Green/White',  '#22C55E', YOUTH),
    BeltInfo('kids-green',        'Kids Green',        '#22C55E', YOUTH),
    BeltInfo('kids-green-black',  'Kids Green/Black',  '#22C55E', YOUTH),
)

_BY_VALUE = MappingProxyType({b.value: b for b in _BELTS})

# Entry-level belt of each family: legacy stripe counts on these belts are
# displayed as black stripes (white stripes would not show on a white belt).
_ENTRY_BELTS = frozenset(['white', 'kids-white'])


def _lookup(belt):
    info = _BY_VALUE.get(belt or '')
    if info is None:
        # Retired kids belts keep their family.
        belt_family = YOUTH if (belt or '').startswith(YOUTH_PREFIX) else ADULT
        return BeltInfo(belt or DEFAULT_BELT, belt or 'White', DEFAULT_COLOR, belt_family)
    return info


def is_known(belt):
    return belt in _BY_VALUE


def family(belt):
    return _lookup(belt).family


def is_youth_family(belt):
    return family(belt) == YOUTH


def default_senior_token(belt):
    """Token used to rebuild a pattern from a bare legacy stripe count."""
    return StripeToken.BLACK if belt in _ENTRY_BELTS else StripeToken.WHITE


def label(belt):
    return _lookup(belt).label


def display_color(belt):
    return _lookup(belt).color


def stripe_color(token):
    """Hex colour of a stripe token; ``None`` for an empty slot."""
    try:
        return STRIPE_COLORS.get(StripeToken(token))
    except ValueError:
        return None


def all_belts():
    return tuple(b.value for b in _BELTS)


def belt_order(belt_family):
    return tuple(b.value for b in _BELTS if b.family == belt_family)


def selection():
    """``[(value, label), ...]`` suitable for an Odoo Selection field."""
    return [(b.value, b.label) for b in _BELTS]


def next_belt(belt):
    """Suggested next belt inside the same family.

    Only a default for promotion forms; any belt may be awarded to any
    member.  Returns ``None`` at the top of the family or for unknown belts.
    """
    if not is_known(belt):
        return None
    order = belt_order(family(belt))
    idx = order.index(belt)
    if idx >= len(order) - 1:
        return None
    return order[idx + 1]
