"""
Review diagnostics for a reconciliation run.

Turns a Stage3Result into a flat pandas frame for human review, summarizes
it, and suggests fuzzy name candidates for specs that found no partner.
Suggestions are a review aid only: they never change a match.
"""

import logging
from typing import Dict, List, Sequence, Tuple

import pandas as pd
from rapidfuzz import fuzz, process

from match_tables import DEFAULT_TABLES, MatchTables
from spec_models import TIERS, Stage3Result
from spec_names import normalize_spec_name

logger = logging.getLogger(__name__)

NEAR_MISS_LIMIT = 3
NEAR_MISS_CUTOFF = 60

REVIEW_COLUMNS = [
    'spec_name', 'tier', 'input_type', 'matched_on', 'option_count', 'options',
    'no_common_options', 'buyer_isq', 'buyer_options',
]


def build_review_frame(result: Stage3Result) -> pd.DataFrame:
    """One row per common spec; buyer ISQ columns filled for the selected specs."""
    buyer_lookup = {b.name: b for b in result.buyer_isqs}

    rows = []
    for spec in result.common_specs:
        buyer = buyer_lookup.get(spec.name)
        rows.append({
            'spec_name': spec.name,
            'tier': spec.tier,
            'input_type': spec.input_type,
            'matched_on': spec.target_name,
            'option_count': len(spec.options),
            'options': ', '.join(spec.options),
            'no_common_options': spec.no_common_options,
            'buyer_isq': buyer is not None,
            'buyer_options': ', '.join(buyer.options) if buyer else '',
        })

    return pd.DataFrame(rows, columns=REVIEW_COLUMNS)


def compute_reconciliation_metrics(df: pd.DataFrame) -> Dict[str, any]:
    """
    Summary metrics from a review frame.

    Returns a dict with:
        total_common: common specs found
        tier_breakdown: dict of tier -> count
        empty_common_count / empty_common_rate: specs matched with no common options
        buyer_isq_count: specs selected as buyer ISQs
        avg_option_count: average common options per spec
    """
    total = len(df)
    if total == 0:
        return {'total_common': 0, 'tier_breakdown': {t: 0 for t in TIERS},
                'empty_common_count': 0, 'empty_common_rate': 0.0,
                'buyer_isq_count': 0, 'avg_option_count': 0.0}

    tier_counts = df['tier'].value_counts().to_dict()
    empty = df[df['no_common_options']]

    return {
        'total_common': total,
        'tier_breakdown': {t: int(tier_counts.get(t, 0)) for t in TIERS},
        'empty_common_count': len(empty),
        'empty_common_rate': round(len(empty) / total * 100, 1),
        'buyer_isq_count': int(df['buyer_isq'].sum()),
        'avg_option_count': round(float(df['option_count'].mean()), 2),
    }


def suggest_near_misses(
    names: Sequence[str],
    candidates: Sequence[str],
    tables: MatchTables = DEFAULT_TABLES,
    limit: int = NEAR_MISS_LIMIT,
    score_cutoff: float = NEAR_MISS_CUTOFF,
) -> Dict[str, List[Tuple[str, float]]]:
    """
    Closest candidate names for each unmatched name, by token_sort_ratio on normalized forms.

    Returns:
        {name: [(candidate, score), ...]}, only for names with at least one
        candidate scoring `score_cutoff` or more.
    """
    if not names or not candidates:
        return {}

    normalized = [normalize_spec_name(c, tables) or c.lower() for c in candidates]

    suggestions: Dict[str, List[Tuple[str, float]]] = {}
    for name in names:
        query = normalize_spec_name(name, tables) or name.lower()
        top = process.extract(
            query, normalized,
            scorer=fuzz.token_sort_ratio,
            limit=limit,
            score_cutoff=score_cutoff,
        )
        if top:
            suggestions[name] = [(candidates[idx], round(score, 2)) for _, score, idx in top]
    logger.debug("Near-miss candidates found for %d of %d unmatched names", len(suggestions), len(names))
    return suggestions

