# -*- coding: utf-8 -*-
"""
state.py
--------
Value objects of the ledger.

  RankState         – live rank of a member (belt + stripes + degree)
  RankHistoryEntry  – one immutable promotion record with full before /
                      after snapshots

plus the mapping between a RankState and the logical member record a
store persists (``stripe_pattern`` and ``degree`` are optional keys).
"""

import datetime
from dataclasses import dataclass, field
from typing import Optional, Tuple

from . import belts, stripes
from .constants import EMPTY_PATTERN, StripeMode, StripeToken

RECORD_FIELDS = ('belt', 'stripe_count', 'stripe_pattern', 'degree', 'version')


@dataclass(frozen=True)
class RankState:
    belt: str = belts.DEFAULT_BELT
    pattern: Tuple[StripeToken, ...] = EMPTY_PATTERN
    stripe_count: int = 0
    degree: Optional[int] = None
    mode: StripeMode = StripeMode.MANUAL
    version: int = 0

    @classmethod
    def create(cls, belt, pattern=None, mode=StripeMode.MANUAL, degree=None, version=0):
        """Build a state that satisfies the rank invariants.

        The stripe count is always derived from the pattern, and a degree
        is only kept for curriculum mode on a youth belt.
        """
        belt = belt or belts.DEFAULT_BELT
        mode = StripeMode(mode)
        if mode is StripeMode.CURRICULUM and belts.is_youth_family(belt):
            degree = stripes.clamp_degree(degree)
            pattern = stripes.from_degree(degree)
        else:
            mode = StripeMode.MANUAL
            degree = None
            pattern = stripes.normalize_from_raw(pattern)
        return cls(
            belt=belt,
            pattern=pattern,
            stripe_count=stripes.count_from_pattern(pattern),
            degree=degree,
            mode=mode,
            version=int(version or 0),
        )

    @classmethod
    def from_record(cls, record):
        """Read a stored member record, including legacy count-only records."""
        record = record or {}
        belt = record.get('belt') or belts.DEFAULT_BELT
        raw_pattern = record.get('stripe_pattern')
        if raw_pattern:
            pattern = stripes.normalize_from_raw(raw_pattern)
        else:
            pattern = stripes.from_legacy_count(
                record.get('stripe_count') or 0,
                belts.default_senior_token(belt),
            )
        degree = record.get('degree')
        if degree is not None and belts.is_youth_family(belt):
            return cls.create(belt, mode=StripeMode.CURRICULUM, degree=degree,
                              version=record.get('version') or 0)
        return cls.create(belt, pattern=pattern, version=record.get('version') or 0)

    @property
    def has_pattern(self):
        return not stripes.is_empty(self.pattern)

    def to_record(self):
        """Logical persisted shape; empty pattern and absent degree are omitted."""
        record = {
            'belt': self.belt,
            'stripe_count': self.stripe_count,
            'version': self.version,
        }
        if self.has_pattern:
            record['stripe_pattern'] = stripes.as_values(self.pattern)
        if self.degree is not None:
            record['degree'] = self.degree
        return record

    def to_dict(self):
        """Full snapshot, every key present."""
        return {
            'belt': self.belt,
            'belt_label': belts.label(self.belt),
            'stripe_count': self.stripe_count,
            'stripe_pattern': stripes.as_values(self.pattern),
            'degree': self.degree,
            'mode': self.mode.value,
            'version': self.version,
        }

    def describe(self):
        if not self.stripe_count:
            return belts.label(self.belt)
        return '%s (%d stripe%s)' % (
            belts.label(self.belt), self.stripe_count,
            '' if self.stripe_count == 1 else 's',
        )


@dataclass(frozen=True)
class RankHistoryEntry:
    id: str
    member_id: str
    previous: RankState
    next: RankState
    actor: Optional[str] = None
    note: Optional[str] = None
    created_at: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc))
    sequence: int = 1

    def to_dict(self):
        return {
            'id': self.id,
            'member_id': self.member_id,
            'previous': self.previous.to_dict(),
            'next': self.next.to_dict(),
            'actor': self.actor,
            'note': self.note,
            'created_at': self.created_at.isoformat(),
            'sequence': self.sequence,
        }
