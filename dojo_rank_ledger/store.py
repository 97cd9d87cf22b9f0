# -*- coding: utf-8 -*-
"""
store.py
--------
Persistence contract consumed by the service layer, and an in-process
implementation of it.

A store must apply a member's new rank and its history entry as one
unit: when either write fails, neither is visible afterwards.  The
production implementation is ``OdooRankStore`` in the dojo_ranks addon.
"""

import abc
import logging
import threading

from .exceptions import ConcurrentPromotion, LedgerError, MemberNotFound, PersistenceFailure
from .ledger import RankHistoryLedger
from .state import RankState

_logger = logging.getLogger(__name__)


class RankStore(abc.ABC):

    @abc.abstractmethod
    def read_rank_state(self, member_id):
        """Current RankState of the member; raises MemberNotFound."""

    @abc.abstractmethod
    def apply_promotion_atomic(self, member_id, result):
        """Persist ``result.record`` and append ``result.history_entry`` together.

        Raises ConcurrentPromotion when the stored version is not the one
        the promotion was computed from, PersistenceFailure for any other
        failure.  Either way nothing is applied.
        """

    @abc.abstractmethod
    def list_history(self, member_id, limit):
        """Newest-first iterable of RankHistoryEntry, at most ``limit`` long."""

    @abc.abstractmethod
    def iter_member_states(self):
        """RankState of every member, for reporting."""


class MemoryRankStore(RankStore):
    """Dict-backed store.

    Member records are kept in their persisted shape (see
    ``RankState.to_record``) so that legacy count-only records can be
    loaded with ``put_record``.
    """

    def __init__(self, records=None):
        self._lock = threading.Lock()
        self._records = {}
        self.ledger = RankHistoryLedger()
        for member_id, record in (records or {}).items():
            self.put_record(member_id, record)

    def put_record(self, member_id, record):
        with self._lock:
            self._records[member_id] = dict(record)

    def get_record(self, member_id):
        with self._lock:
            if member_id not in self._records:
                raise MemberNotFound('member %s not found' % member_id)
            return dict(self._records[member_id])

    def read_rank_state(self, member_id):
        return RankState.from_record(self.get_record(member_id))

    def apply_promotion_atomic(self, member_id, result):
        entry = result.history_entry
        with self._lock:
            if member_id not in self._records:
                raise PersistenceFailure('member %s not found' % member_id)
            stored_version = self._records[member_id].get('version') or 0
            if stored_version != result.next_state.version - 1:
                raise ConcurrentPromotion(
                    'member %s is at version %d, promotion expected %d'
                    % (member_id, stored_version, result.next_state.version - 1))
            try:
                self.ledger.check_append(entry)
            except LedgerError as e:
                raise PersistenceFailure(str(e)) from e
            # Both writes validated; commit them together.
            self._records[member_id] = dict(result.record)
            self.ledger.append(entry)
        _logger.debug('Stored promotion #%d for member %s', entry.sequence, member_id)

    def list_history(self, member_id, limit):
        with self._lock:
            return self.ledger.list_recent(member_id, limit)

    def iter_member_states(self):
        with self._lock:
            records = [dict(r) for r in self._records.values()]
        for record in records:
            yield RankState.from_record(record)
