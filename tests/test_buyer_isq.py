"""
Unit tests for buyer_isq.py
Run: pytest tests/test_buyer_isq.py -v
"""
from buyer_isq import rank_common_specs, score_common_spec, select_buyer_isqs
from spec_models import PRIORITY_BUYER, PRIORITY_CONFIG, PRIORITY_KEY, TIER_PRIMARY, TIER_SECONDARY, CommonSpec


def _common(name, options=(), tier=TIER_PRIMARY, source=None, target=None, priority=PRIORITY_BUYER):
    return CommonSpec(
        name=name,
        options=tuple(options),
        tier=tier,
        source_options=tuple(source if source is not None else options),
        target_options=tuple(target if target is not None else options),
        target_priority=priority,
    )


# ============================================================
# SCORING
# ============================================================

class TestScore:

    def test_full_bonus(self):
        spec = _common('Thickness', ('2mm', '3mm', '4mm'), priority=PRIORITY_CONFIG)
        assert score_common_spec(spec) == 10

    def test_minimal(self):
        spec = _common('Color', (), tier=TIER_SECONDARY, priority=PRIORITY_BUYER)
        assert score_common_spec(spec) == 1

    def test_option_capacity(self):
        spec = _common('Color', [f'c{i}' for i in range(9)], tier=TIER_SECONDARY)
        assert score_common_spec(spec) == 1 + 5
        assert score_common_spec(spec, option_capacity=10) == 1 + 9

    def test_key_spec_bonus(self):
        as_key = _common('Color', ('Red',), priority=PRIORITY_KEY)
        as_buyer = _common('Color', ('Red',), priority=PRIORITY_BUYER)
        assert score_common_spec(as_key) - score_common_spec(as_buyer) == 2


class TestRank:

    def test_ties_keep_input_order(self):
        specs = [_common('Color', ('Red',)), _common('Pattern', ('Plain',)), _common('Shape', ('Round',))]
        ranked = rank_common_specs(specs)
        assert [s.name for s, _ in ranked] == ['Color', 'Pattern', 'Shape']

    def test_descending(self):
        specs = [_common('Color', ('Red',), tier=TIER_SECONDARY), _common('Material', ('MS', 'GI'))]
        assert [s.name for s, _ in rank_common_specs(specs)] == ['Material', 'Color']


# ============================================================
# SELECTION
# ============================================================

class TestSelectBuyerISQs:

    def test_bounded_to_two(self):
        specs = [_common(n, ('a1',)) for n in ('Color', 'Pattern', 'Shape', 'Design')]
        assert len(select_buyer_isqs(specs)) == 2

    def test_fewer_specs_than_limit(self):
        assert len(select_buyer_isqs([_common('Color', ('Red',))])) == 1
        assert select_buyer_isqs([]) == []

    def test_options_rebuilt_from_original_lists(self):
        spec = _common('Material', (), source=('SS304', 'SS316'), target=('Aluminium',))
        isq = select_buyer_isqs([spec])[0]
        assert isq.options == ('SS304', 'SS316', 'Aluminium')
        assert isq.tier == TIER_PRIMARY

    def test_option_cap(self):
        spec = _common('Size', (), source=[f'{i}mm' for i in range(1, 11)], target=['20mm', '30mm'])
        isq = select_buyer_isqs([spec])[0]
        assert len(isq.options) == 8

    def test_case_insensitive_dedup(self):
        spec = _common('Finish', ('Mirror',), source=('Mirror', 'MIRROR'), target=('mirror',))
        assert select_buyer_isqs([spec])[0].options == ('Mirror',)

    def test_score_recorded(self):
        spec = _common('Thickness', ('2mm', '3mm', '4mm'), priority=PRIORITY_CONFIG)
        assert select_buyer_isqs([spec])[0].score == 10
        assert 'score' not in select_buyer_isqs([spec])[0].to_dict()
