import datetime

import pytest

from dojo_rank_ledger import MemoryRankStore


@pytest.fixture
def store():
    return MemoryRankStore({
        'm-adult': {'belt': 'blue', 'stripe_count': 2},
        'm-kid': {'belt': 'kids-grey', 'stripe_count': 0},
        'm-new': {},
    })


@pytest.fixture
def clock():
    """Strictly increasing timestamps, one minute apart."""
    start = datetime.datetime(2026, 3, 1, 18, 0, tzinfo=datetime.timezone.utc)
    ticks = iter(range(1000))

    def _now():
        return start + datetime.timedelta(minutes=next(ticks))
    return _now
