import pytest

from dojo_rank_ledger import stripes
from dojo_rank_ledger.constants import StripeToken

N = StripeToken.NONE
W = StripeToken.WHITE
R = StripeToken.RED
Y = StripeToken.YELLOW
B = StripeToken.BLACK


class TestNormalizeFromRaw:

    def test_pads_short_input(self):
        assert stripes.normalize_from_raw(['white']) == (W, N, N, N)

    def test_truncates_long_input(self):
        raw = ['red', 'red', 'white', 'white', 'yellow', 'black']
        assert stripes.normalize_from_raw(raw) == (R, R, W, W)

    def test_unknown_values_become_empty_slots(self):
        assert stripes.normalize_from_raw(['purple', 7, None, 'black']) == (B, N, N, N)

    @pytest.mark.parametrize('raw', [None, 'white', 42, {}, ()])
    def test_non_sequences_give_empty_pattern(self, raw):
        assert stripes.normalize_from_raw(raw) == (N, N, N, N)

    def test_gaps_are_packed_toward_slot_zero(self):
        assert stripes.normalize_from_raw(['none', 'red', 'none', 'white']) == (R, W, N, N)

    def test_accepts_tokens(self):
        assert stripes.normalize_from_raw((Y, Y, R, N)) == (Y, Y, R, N)

    @pytest.mark.parametrize('raw', [
        ['white', 'none', 'red'],
        ['x', 'y', 'z', 'w', 'black'],
        [],
        ['yellow', 'yellow', 'yellow', 'red'],
    ])
    def test_idempotent(self, raw):
        once = stripes.normalize_from_raw(raw)
        assert stripes.normalize_from_raw(once) == once
        assert len(once) == 4


class TestLegacyCount:

    @pytest.mark.parametrize('n', range(5))
    @pytest.mark.parametrize('token', [W, R, Y, B])
    def test_count_survives(self, n, token):
        assert stripes.count_from_pattern(stripes.from_legacy_count(n, token)) == n

    def test_clamps(self):
        assert stripes.from_legacy_count(9, W) == (W, W, W, W)
        assert stripes.from_legacy_count(-3, W) == (N, N, N, N)
        assert stripes.from_legacy_count('2', B) == (B, B, N, N)
        assert stripes.from_legacy_count(None, B) == (N, N, N, N)


class TestFromDegree:

    @pytest.mark.parametrize('degree, expected', [
        (0, (N, N, N, N)),
        (1, (W, N, N, N)),
        (4, (W, W, W, W)),
        (5, (R, W, W, W)),
        (6, (R, R, W, W)),
        (8, (R, R, R, R)),
        (9, (Y, R, R, R)),
        (11, (Y, Y, Y, R)),
    ])
    def test_literal_values(self, degree, expected):
        assert stripes.from_degree(degree) == expected

    def test_clamps_out_of_range(self):
        assert stripes.from_degree(-4) == stripes.from_degree(0)
        assert stripes.from_degree(40) == stripes.from_degree(11)

    def test_filled_slots_never_shrink(self):
        for d in range(11):
            before = {i for i, t in enumerate(stripes.from_degree(d)) if t is not N}
            after = {i for i, t in enumerate(stripes.from_degree(d + 1)) if t is not N}
            assert before <= after


def test_degree_is_applicable():
    assert stripes.degree_is_applicable('kids-yellow')
    assert not stripes.degree_is_applicable('brown')


def test_add_stripe():
    assert stripes.add_stripe((R, N, N, N), W) == (R, W, N, N)
    assert stripes.add_stripe((W, W, W, W), B) == (W, W, W, W)


def test_format_stripes():
    assert stripes.format_stripes(['red', 'white']) == 'R W - -'
