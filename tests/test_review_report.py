"""
Unit tests for review_report.py
Run: pytest tests/test_review_report.py -v
"""
import pandas as pd
import pytest

from review_report import (
    REVIEW_COLUMNS,
    build_review_frame,
    compute_reconciliation_metrics,
    suggest_near_misses,
)
from spec_models import Stage3Result
from spec_reconciler import run_stage3


@pytest.fixture
def result(stage1_record, stage2_record):
    return run_stage3(stage1_record, stage2_record)


# ============================================================
# REVIEW FRAME
# ============================================================

class TestBuildReviewFrame:

    def test_one_row_per_common_spec(self, result):
        df = build_review_frame(result)
        assert list(df.columns) == REVIEW_COLUMNS
        assert list(df['spec_name']) == ['Material', 'Thickness (mm)', 'Finish']
        assert list(df['matched_on']) == ['Material Grade', 'Thk', 'Surface Finish']

    def test_buyer_columns(self, result):
        df = build_review_frame(result)
        assert list(df['buyer_isq']) == [True, True, False]
        assert df.loc[0, 'buyer_options'] == 'SS304, MS, SS316'
        assert df.loc[2, 'buyer_options'] == ''

    def test_empty_result(self):
        df = build_review_frame(Stage3Result())
        assert df.empty
        assert list(df.columns) == REVIEW_COLUMNS


class TestMetrics:

    def test_summary(self, result):
        metrics = compute_reconciliation_metrics(build_review_frame(result))
        assert metrics['total_common'] == 3
        assert metrics['tier_breakdown'] == {'Primary': 2, 'Secondary': 1, 'Tertiary': 0}
        assert metrics['empty_common_count'] == 0
        assert metrics['buyer_isq_count'] == 2
        assert metrics['avg_option_count'] == round(5 / 3, 2)

    def test_empty_common_rate(self):
        df = pd.DataFrame([
            {'tier': 'Primary', 'no_common_options': True, 'buyer_isq': False, 'option_count': 0},
            {'tier': 'Primary', 'no_common_options': False, 'buyer_isq': True, 'option_count': 2},
        ])
        metrics = compute_reconciliation_metrics(df)
        assert metrics['empty_common_count'] == 1
        assert metrics['empty_common_rate'] == 50.0

    def test_empty_frame(self):
        metrics = compute_reconciliation_metrics(build_review_frame(Stage3Result()))
        assert metrics['total_common'] == 0
        assert metrics['avg_option_count'] == 0.0


# ============================================================
# NEAR MISSES
# ============================================================

class TestSuggestNearMisses:

    def test_closest_candidate(self):
        suggestions = suggest_near_misses(['Coating Type'], ['Coating', 'Brand'])
        assert [c for c, _ in suggestions['Coating Type']] == ['Coating']

    def test_cutoff(self):
        assert suggest_near_misses(['Color'], ['Thickness'], score_cutoff=90) == {}

    def test_empty_inputs(self):
        assert suggest_near_misses([], ['Color']) == {}
        assert suggest_near_misses(['Color'], []) == {}

