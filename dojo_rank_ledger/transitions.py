# -*- coding: utf-8 -*-
"""
transitions.py
--------------
Turns a promotion request into the canonical next rank state plus the
history entry that records it.

A promotion has exactly two states: *proposed* (the RankTransitionResult
returned here, nothing written yet) and *applied* (the store persisted
state and entry together).  Nothing in this module touches a store.

Rules
-----
  CURRICULUM on a youth belt   → pattern derived from the degree
  CURRICULUM on an adult belt  → InvalidRequest, or forced to MANUAL
                                 (degree dropped) when the caller asked
                                 for the fallback
  MANUAL on any belt           → pattern normalized from the edited slots,
                                 no degree
"""

import datetime
import uuid
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from . import belts, stripes
from .constants import MAX_DEGREE, SLOT_COUNT, StripeMode
from .exceptions import InvalidRequest
from .state import RankHistoryEntry, RankState

STRIPE_ADDED_NOTE = 'Stripe added'


@dataclass(frozen=True)
class PromotionRequest:
    belt: str
    mode: StripeMode = StripeMode.MANUAL
    manual_pattern: Optional[Sequence] = None
    degree: Optional[int] = None
    note: Optional[str] = None
    fallback_to_manual: bool = False


@dataclass(frozen=True)
class RankTransitionResult:
    next_state: RankState
    history_entry: RankHistoryEntry
    record: dict
    omitted_fields: Tuple[str, ...] = ()


def _clean_note(note):
    note = (note or '').strip()
    return note or None


def _utcnow():
    return datetime.datetime.now(datetime.timezone.utc)


def _resolve(request):
    """(mode, pattern, degree) of the requested rank."""
    belt = request.belt
    try:
        mode = StripeMode(request.mode)
    except ValueError:
        raise InvalidRequest('unknown stripe mode %r' % (request.mode,))

    if mode is StripeMode.CURRICULUM:
        if stripes.degree_is_applicable(belt):
            degree = stripes.clamp_degree(request.degree)
            return mode, stripes.from_degree(degree), degree
        if not request.fallback_to_manual:
            raise InvalidRequest(
                'curriculum degrees only apply to youth belts, not %r' % belt)
        # Forced back to manual: keep what the caller edited, or what the
        # degree previewed when nothing was edited.
        if request.manual_pattern is not None:
            pattern = stripes.normalize_from_raw(request.manual_pattern)
        else:
            pattern = stripes.from_degree(request.degree)
        return StripeMode.MANUAL, pattern, None

    return StripeMode.MANUAL, stripes.normalize_from_raw(request.manual_pattern), None


def propose(member_id, current, request, actor=None, now=None):
    """Compute the next state and its history entry for ``request``."""
    if not request.belt:
        raise InvalidRequest('belt is required')

    mode, pattern, degree = _resolve(request)
    next_state = RankState(
        belt=request.belt,
        pattern=pattern,
        stripe_count=stripes.count_from_pattern(pattern),
        degree=degree,
        mode=mode,
        version=current.version + 1,
    )
    return _result(member_id, current, next_state, actor, request.note, now)


def propose_add_stripe(member_id, current, actor=None, note=None, now=None):
    """One more stripe on the current belt.

    Curriculum ranks move up one degree; manual ranks fill the next slot
    with the belt's default stripe colour.
    """
    if current.mode is StripeMode.CURRICULUM and current.degree is not None:
        if current.degree >= MAX_DEGREE:
            raise InvalidRequest('maximum degree (%d) reached' % MAX_DEGREE)
        request = PromotionRequest(
            belt=current.belt,
            mode=StripeMode.CURRICULUM,
            degree=current.degree + 1,
            note=note or STRIPE_ADDED_NOTE,
        )
    else:
        if current.stripe_count >= SLOT_COUNT:
            raise InvalidRequest('maximum stripes (%d) reached' % SLOT_COUNT)
        request = PromotionRequest(
            belt=current.belt,
            mode=StripeMode.MANUAL,
            manual_pattern=stripes.add_stripe(
                current.pattern, belts.default_senior_token(current.belt)),
            note=note or STRIPE_ADDED_NOTE,
        )
    return propose(member_id, current, request, actor=actor, now=now)


def _result(member_id, current, next_state, actor, note, now):
    record = next_state.to_record()
    omitted = tuple(f for f in ('stripe_pattern', 'degree') if f not in record)
    entry = RankHistoryEntry(
        id=uuid.uuid4().hex,
        member_id=member_id,
        previous=current,
        next=next_state,
        actor=actor,
        note=_clean_note(note),
        created_at=now or _utcnow(),
        sequence=next_state.version,
    )
    return RankTransitionResult(
        next_state=next_state,
        history_entry=entry,
        record=record,
        omitted_fields=omitted,
    )
