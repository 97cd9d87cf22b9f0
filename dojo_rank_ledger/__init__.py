# -*- coding: utf-8 -*-
"""
Belt & stripe progression ledger.

Canonical stripe patterns, conversions from legacy counts and youth
curriculum degrees, the promotion transition rules and the append-only
promotion history.  Storage is pluggable through ``RankStore``.
"""

from . import belts, stripes, transitions
from .constants import StripeMode, StripeToken
from .exceptions import (
    ConcurrentPromotion,
    InvalidRequest,
    LedgerError,
    MemberNotFound,
    PersistenceFailure,
    RankLedgerError,
)
from .ledger import RankHistoryLedger, verify_chain
from .service import (
    add_stripe,
    belt_distribution,
    get_rank_history,
    promote_member,
)
from .state import RankHistoryEntry, RankState
from .store import MemoryRankStore, RankStore
from .transitions import PromotionRequest, RankTransitionResult

__version__ = '19.0.1.0.0'
