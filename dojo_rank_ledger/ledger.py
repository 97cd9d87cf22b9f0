# -*- coding: utf-8 -*-
"""
ledger.py
---------
Append-only promotion history, keyed by member.

Entries are never updated or removed: a wrong promotion is corrected by
a new promotion.  ``append`` is only called by a store from inside the
unit of work that also writes the member's new rank.
"""

import logging
from collections import defaultdict
from itertools import islice

from .exceptions import LedgerError

_logger = logging.getLogger(__name__)


class RankHistoryLedger:

    def __init__(self):
        self._entries = defaultdict(list)   # member_id -> oldest first
        self._ids = set()

    def last_sequence(self, member_id):
        entries = self._entries.get(member_id)
        return entries[-1].sequence if entries else 0

    def check_append(self, entry):
        """Raise LedgerError if ``entry`` cannot extend the member's chain."""
        if entry.id in self._ids:
            raise LedgerError('history entry %s already recorded' % entry.id)
        if entry.sequence < 1:
            raise LedgerError('history entry sequence must start at 1')
        # A member migrated with a rank but no history may start anywhere.
        last = self.last_sequence(entry.member_id)
        expected = last + 1
        if last and entry.sequence != expected:
            raise LedgerError(
                'history entry for member %s has sequence %d, expected %d'
                % (entry.member_id, entry.sequence, expected))

    def append(self, entry):
        self.check_append(entry)
        self._entries[entry.member_id].append(entry)
        self._ids.add(entry.id)

    def list_recent(self, member_id, limit):
        """Newest entries first, at most ``limit`` of them.

        Returns a generator: it is consumed once and cannot be restarted.
        """
        entries = tuple(self._entries.get(member_id, ()))
        ordered = sorted(entries, key=lambda e: (e.created_at, e.sequence), reverse=True)
        return (e for e in islice(ordered, max(int(limit), 0)))

    def __len__(self):
        return len(self._ids)


def verify_chain(entries):
    """Broken links in a member's history.

    ``entries`` may be in any order.  Consecutive entries must have
    consecutive sequences and the older entry's ``next`` snapshot must be
    the newer entry's ``previous`` snapshot.  Returns a list of
    ``(older, newer)`` pairs that do not line up; empty when intact.
    """
    ordered = sorted(entries, key=lambda e: e.sequence)
    broken = []
    for older, newer in zip(ordered, ordered[1:]):
        if newer.sequence != older.sequence + 1 or older.next != newer.previous:
            _logger.warning(
                'Rank history chain broken for member %s between #%d and #%d',
                newer.member_id, older.sequence, newer.sequence)
            broken.append((older, newer))
    return broken
