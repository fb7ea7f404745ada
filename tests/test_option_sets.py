"""
Unit tests for option_sets.py
Run: pytest tests/test_option_sets.py -v
"""
import pytest

from option_sets import buyer_options, clean_options, common_options, dedupe_options, unique_options


# ============================================================
# CLEANING
# ============================================================

class TestCleanOptions:

    def test_strips_wrapping_and_drops_junk(self):
        assert clean_options(['"2mm"', '[3mm]', 'Option 1', None, '']) == ['2mm', '3mm']

    def test_keeps_inch_mark(self):
        assert clean_options(['6"', 'undefined']) == ['6"']

    def test_placeholders(self):
        assert clean_options(['null', '[]', '{}', 'Value A', 'Spec X', 'Red']) == ['Red']

    def test_too_long(self):
        assert clean_options(['x' * 51, 'y' * 50]) == ['y' * 50]

    def test_numbers_kept_as_text(self):
        assert clean_options([5, 2.5, True]) == ['5', '2.5']

    def test_limit(self):
        options = [f'{i}mm' for i in range(1, 13)]
        assert len(clean_options(options, limit=10)) == 10

    def test_non_list(self):
        assert clean_options('2mm') == []
        assert clean_options(None) == []


class TestDedupe:

    def test_first_spelling_kept(self):
        assert dedupe_options(['SS304', 'ss304', 'MS']) == ['SS304', 'MS']


# ============================================================
# COMMON SUBSET
# ============================================================

class TestCommonOptions:

    def test_material_equivalence(self):
        source = ['SS304', 'SS316', 'MS']
        target = ['304', 'Mild Steel']
        assert common_options(source, target) == ['SS304', 'MS']

    def test_exact_pass_keeps_source_spelling(self):
        assert common_options(['2mm', '3mm', '4mm'], ['2 mm', '4mm']) == ['2mm', '4mm']

    def test_target_consumed_once(self):
        assert common_options(['2mm', '2 mm'], ['2mm']) == ['2mm']

    def test_exact_pass_runs_before_matcher(self):
        # 'SS304' would take '304' in the matcher pass if exact matches did not go first
        assert common_options(['SS304', '304'], ['304', 'SS 304']) == ['SS304', '304']

    def test_case_insensitive_duplicates_removed(self):
        assert common_options(['SS304', 'ss304'], ['304', 'SS304']) == ['SS304']

    def test_disjoint_is_empty(self):
        assert common_options(['Mirror'], ['Matte']) == []

    def test_empty_and_malformed_inputs(self):
        assert common_options([], ['2mm']) == []
        assert common_options(None, None) == []
        assert common_options(['2mm', None, 7], ['2mm']) == ['2mm']

    def test_source_order_preserved(self):
        assert common_options(['MS', 'SS304'], ['304', 'Mild Steel']) == ['MS', 'SS304']


class TestRangeAugmentation:

    def test_source_range_absorbs_target_values(self):
        result = common_options(['1-5mm'], ['2mm', '3mm', '8mm'], spec_name='Thickness')
        assert result == ['1-5mm', '2mm', '3mm']

    def test_range_keeps_the_value_it_paired_with(self):
        # '4mm' is the first in-range target, so pass 2 pairs it with the range
        result = common_options(['2-6mm', '9mm'], ['4mm', '9mm', '5mm'], spec_name='Width')
        assert result == ['2-6mm', '4mm', '5mm', '9mm']

    def test_absorbed_values_not_reused(self):
        result = common_options(['1-5mm', '3mm'], ['3mm', '4mm'], spec_name='Thickness')
        assert result == ['1-5mm', '4mm', '3mm']

    def test_only_for_measurable_names(self):
        assert common_options(['1-5mm'], ['2mm', '3mm'], spec_name='Color') == ['1-5mm']
        assert common_options(['1-5mm'], ['2mm', '3mm']) == ['1-5mm']

    def test_target_range_with_consumed_slot(self):
        # '2mm' takes the range in pass 2; '4mm' finds no free target
        result = common_options(['2mm', '4mm'], ['1-5mm'], spec_name='Width')
        assert result == ['2mm']


# ============================================================
# BUYER LIST
# ============================================================

class TestBuyerOptions:

    def test_phase_order(self):
        assert buyer_options(['Red', '2mm', '3mm'], ['3 mm', 'Blue']) == ['3mm', 'Red', '2mm', 'Blue']

    def test_common_then_source_then_target(self):
        assert buyer_options(['2mm', '3mm'], ['3 mm', '5mm']) == ['3mm', '2mm', '5mm']

    def test_capped_at_eight(self):
        source = [f'{i}mm' for i in range(1, 11)]
        result = buyer_options(source, ['20mm', '30mm'])
        assert len(result) == 8
        assert result == source[:8]

    def test_custom_limit(self):
        assert len(buyer_options(['1mm', '2mm', '3mm'], [], limit=2)) == 2

    def test_case_insensitive_identity(self):
        assert buyer_options(['2mm', '2MM'], ['2mm']) == ['2mm']

    def test_empty(self):
        assert buyer_options([], []) == []
        assert buyer_options(None, ['5mm']) == ['5mm']


class TestUniqueOptions:

    def test_one_sided(self):
        assert unique_options(['SS304', 'Brass'], ['304']) == ['Brass']

    def test_nothing_unique(self):
        assert unique_options(['MS'], ['Mild Steel']) == []

    @pytest.mark.parametrize('other', [[], None])
    def test_empty_other(self, other):
        assert unique_options(['MS', 'ms'], other) == ['MS']
