# -*- coding: utf-8 -*-
"""
exceptions.py
-------------
Error types raised by the rank ledger.

Codec functions never raise on bad data; they clamp.  Only the
transition engine (belt / mode mismatch, stripe ceiling) and the
persistence boundary fail.
"""


class RankLedgerError(Exception):
    """Base class for every rank ledger error."""


class InvalidRequest(RankLedgerError):
    """The promotion request cannot be applied as given."""


class MemberNotFound(RankLedgerError):
    """The store holds no rank record for the member."""


class LedgerError(RankLedgerError):
    """An entry would break the append-only history chain."""


class PersistenceFailure(RankLedgerError):
    """The combined state + history write did not complete.

    Nothing was applied: the member keeps the previous rank and the
    history holds no entry for the attempt.
    """


class ConcurrentPromotion(PersistenceFailure):
    """Another promotion was applied to the member after the state was read."""
