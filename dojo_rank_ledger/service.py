# -*- coding: utf-8 -*-
"""
service.py
----------
Operations offered to the UI / API layer.

  promote_member()      – award a belt + stripes, record the promotion
  add_stripe()          – one more stripe on the current belt
  get_rank_history()    – newest-first promotion history
  belt_distribution()   – member count per belt and per stripe count

Every write goes through ``store.apply_promotion_atomic`` so the member's
rank and its history entry are applied together or not at all.
"""

import logging
from collections import Counter, defaultdict, namedtuple

from . import belts, transitions
from .constants import StripeMode
from .exceptions import InvalidRequest, PersistenceFailure, RankLedgerError

_logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10
MAX_HISTORY_LIMIT = 50

PromotionOutcome = namedtuple('PromotionOutcome', ['next_state', 'history_entry_id', 'previous_state'])
BeltDistribution = namedtuple('BeltDistribution', ['total', 'rows'])
BeltDistributionRow = namedtuple('BeltDistributionRow', ['belt', 'label', 'count', 'stripes'])


def _require_member(member_id):
    if member_id is None or not str(member_id).strip():
        raise InvalidRequest('member id is required')


def _apply(store, member_id, result):
    try:
        store.apply_promotion_atomic(member_id, result)
    except PersistenceFailure:
        _logger.warning('Promotion of member %s was not applied', member_id, exc_info=True)
        raise
    except RankLedgerError:
        raise
    except Exception as e:
        _logger.warning('Promotion of member %s was not applied: %s', member_id, e)
        raise PersistenceFailure('could not store promotion of member %s' % member_id) from e
    _logger.info(
        'Member %s promoted to %s (%d stripes, #%d)',
        member_id, result.next_state.belt, result.next_state.stripe_count,
        result.history_entry.sequence,
    )
    return PromotionOutcome(
        next_state=result.next_state,
        history_entry_id=result.history_entry.id,
        previous_state=result.history_entry.previous,
    )


def promote_member(store, member_id, belt, mode=StripeMode.MANUAL, manual_pattern=None,
                   degree=None, note=None, actor=None, fallback_to_manual=False, now=None,
                   known_belts_only=False):
    """Award ``belt`` to the member with the given stripes.

    Raises InvalidRequest when the request cannot be honoured (curriculum
    mode on an adult belt without ``fallback_to_manual``, or a belt missing
    from the catalog when ``known_belts_only`` is set) and
    PersistenceFailure when the store did not apply the promotion.
    """
    _require_member(member_id)
    belt = str(belt or '').strip()
    if not belt:
        raise InvalidRequest('belt is required')
    if known_belts_only and not belts.is_known(belt):
        raise InvalidRequest('unknown belt %r' % belt)
    request = transitions.PromotionRequest(
        belt=belt,
        mode=mode,
        manual_pattern=manual_pattern,
        degree=degree,
        note=note,
        fallback_to_manual=fallback_to_manual,
    )
    current = store.read_rank_state(member_id)
    result = transitions.propose(member_id, current, request, actor=actor, now=now)
    return _apply(store, member_id, result)


def add_stripe(store, member_id, actor=None, note=None, now=None):
    _require_member(member_id)
    current = store.read_rank_state(member_id)
    result = transitions.propose_add_stripe(member_id, current, actor=actor, note=note, now=now)
    return _apply(store, member_id, result)


def clamp_history_limit(limit, max_limit=MAX_HISTORY_LIMIT):
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        limit = DEFAULT_HISTORY_LIMIT
    if limit <= 0:
        limit = DEFAULT_HISTORY_LIMIT
    return min(limit, max_limit)


def get_rank_history(store, member_id, limit=DEFAULT_HISTORY_LIMIT, max_limit=MAX_HISTORY_LIMIT):
    """Newest-first history of the member, a single-pass iterator."""
    _require_member(member_id)
    return iter(store.list_history(member_id, clamp_history_limit(limit, max_limit)))


def belt_distribution(store):
    """How many members hold each belt, split by stripe count.

    Known belts come first in catalog order; belts missing from the
    catalog follow in name order.
    """
    counts = Counter()
    stripe_counts = defaultdict(Counter)
    for state in store.iter_member_states():
        counts[state.belt] += 1
        stripe_counts[state.belt][state.stripe_count] += 1

    order = [b for b in belts.all_belts() if b in counts]
    order += sorted(b for b in counts if not belts.is_known(b))
    rows = [
        BeltDistributionRow(
            belt=b,
            label=belts.label(b),
            count=counts[b],
            stripes=dict(sorted(stripe_counts[b].items())),
        )
        for b in order
    ]
    return BeltDistribution(total=sum(counts.values()), rows=rows)
