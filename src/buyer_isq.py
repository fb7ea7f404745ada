"""
Buyer-ISQ selection: pick the common specs worth asking a buyer about.

Score per common spec:
    tier weight        Primary 3, Secondary 1
    option coverage    min(number of common options, OPTION_CAPACITY)
    importance bonus   +2 name holds a high-value attribute (material, thickness, ...)
                       +2 paired Stage 2 spec is a config or key spec
"""

import logging
from typing import List, Sequence, Tuple

from match_tables import DEFAULT_TABLES, MatchTables
from option_sets import BUYER_OPTION_LIMIT, buyer_options, dedupe_options
from spec_models import PRIORITY_KEY, TIER_PRIMARY, TIER_SECONDARY, BuyerISQ, CommonSpec
from spec_names import name_has_attribute

logger = logging.getLogger(__name__)

BUYER_ISQ_LIMIT = 2
OPTION_CAPACITY = 5

TIER_WEIGHTS = {TIER_PRIMARY: 3, TIER_SECONDARY: 1}
HIGH_VALUE_BONUS = 2
STAGE2_IMPORTANCE_BONUS = 2


def tier_weight(tier: str) -> int:
    return TIER_WEIGHTS.get(tier, 0)


def score_common_spec(
    spec: CommonSpec,
    tables: MatchTables = DEFAULT_TABLES,
    option_capacity: int = OPTION_CAPACITY,
) -> int:
    """
    Importance score of one common spec; higher is more buyer-relevant.

    Examples:
        Primary 'Thickness' with 3 options, paired with a Stage 2 config spec
            -> 3 + 3 + 2 + 2 = 10
        Secondary 'Color' with 0 options, paired with a buyer spec
            -> 1 + 0 = 1
    """
    score = tier_weight(spec.tier)
    score += min(len(spec.options), option_capacity)
    if name_has_attribute(spec.name, tables.high_value_attributes, tables):
        score += HIGH_VALUE_BONUS
    if spec.target_priority >= PRIORITY_KEY:
        score += STAGE2_IMPORTANCE_BONUS
    return score


def rank_common_specs(
    common_specs: Sequence[CommonSpec],
    tables: MatchTables = DEFAULT_TABLES,
) -> List[Tuple[CommonSpec, int]]:
    """(spec, score) pairs, highest score first; ties keep their input order."""
    scored = [(spec, score_common_spec(spec, tables)) for spec in common_specs]
    # sorted() is stable
    return sorted(scored, key=lambda pair: pair[1], reverse=True)


def select_buyer_isqs(
    common_specs: Sequence[CommonSpec],
    limit: int = BUYER_ISQ_LIMIT,
    option_limit: int = BUYER_OPTION_LIMIT,
    tables: MatchTables = DEFAULT_TABLES,
) -> List[BuyerISQ]:
    """
    Top `limit` common specs, each with a buyer-facing option list.

    Options are rebuilt from the pair's original Stage 1 / Stage 2 lists so
    a spec with few common options still offers up to `option_limit` choices.

    Returns:
        Exactly min(limit, len(common_specs)) BuyerISQ records.
    """
    ranked = rank_common_specs(common_specs, tables)

    selected = []
    for spec, score in ranked[:limit]:
        options = buyer_options(spec.source_options, spec.target_options, option_limit, tables)
        options = dedupe_options(options)[:option_limit]
        selected.append(BuyerISQ(name=spec.name, options=tuple(options), tier=spec.tier, score=score))
        logger.debug("Buyer ISQ %r selected with score %d and %d options", spec.name, score, len(options))

    return selected
