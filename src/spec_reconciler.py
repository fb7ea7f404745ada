"""
Spec-level reconciliation: pair Stage 1 specs with Stage 2 specs by name,
reconcile each pair's options, and assemble the Stage 3 result.

Pair selection policies:
    first  - FIRST_MATCH: each source spec takes the first free target spec
             whose name matches (default)
    best   - BEST_PRIORITY: each source spec takes the free matching target
             spec with the highest priority (config > keys > buyers), earliest
             on ties
"""

import logging
from typing import Dict, List, Optional, Sequence, Set

from buyer_isq import select_buyer_isqs
from match_tables import DEFAULT_TABLES, MatchTables
from option_sets import common_options, unique_options
from review_report import suggest_near_misses
from spec_models import (
    RECONCILED_TIERS, CommonSpec, ComparedSpec, MatchedSpecPair, Spec, SpecComparison,
    Stage3Result,
)
from spec_names import spec_names_match
from stage_inputs import specs_from_stage1, specs_from_stage2

logger = logging.getLogger(__name__)

FIRST_MATCH = 'first'
BEST_PRIORITY = 'best'
POLICIES = (FIRST_MATCH, BEST_PRIORITY)


def _check_policy(policy: str) -> None:
    if policy not in POLICIES:
        raise ValueError(f"Unknown pair selection policy {policy!r}; expected one of {POLICIES}")


def _pick_target(source: Spec, targets: Sequence[Spec], consumed: Set[int],
                 policy: str, tables: MatchTables) -> Optional[int]:
    best_index = None
    for j, target in enumerate(targets):
        if j in consumed:
            continue
        if not spec_names_match(source.name, target.name, tables):
            continue
        if policy == FIRST_MATCH:
            return j
        if best_index is None or target.priority > targets[best_index].priority:
            best_index = j
    return best_index


def match_spec_pairs(
    source: Sequence[Spec],
    target: Sequence[Spec],
    policy: str = FIRST_MATCH,
    tables: MatchTables = DEFAULT_TABLES,
) -> List[MatchedSpecPair]:
    """
    Pair source specs with target specs by name; each target is used at most once.

    Source specs are visited in order, so an earlier source spec wins a
    contested target.
    """
    _check_policy(policy)
    consumed: Set[int] = set()
    pairs = []
    for i, spec in enumerate(source):
        j = _pick_target(spec, target, consumed, policy, tables)
        if j is None:
            continue
        consumed.add(j)
        pairs.append(MatchedSpecPair(source=spec, target=target[j], source_index=i, target_index=j))
    return pairs


def reconcile(
    source_specs: Sequence[Spec],
    target_specs: Sequence[Spec],
    policy: str = FIRST_MATCH,
    tables: MatchTables = DEFAULT_TABLES,
) -> List[CommonSpec]:
    """
    Common specs between Stage 1 (source) and Stage 2 (target).

    Only Primary and Secondary source specs take part. Specs without options
    on either side are left out of the candidate pool. A matched pair is
    reported even when its common option set is empty.

    Returns:
        CommonSpec list in source order, unique by exact name.
    """
    sources = [s for s in source_specs if s.tier in RECONCILED_TIERS and s.options]
    targets = [t for t in target_specs if t.options]

    common: List[CommonSpec] = []
    seen_names: Set[str] = set()

    for pair in match_spec_pairs(sources, targets, policy, tables):
        src, tgt = pair.source, pair.target
        if src.name in seen_names:
            continue
        seen_names.add(src.name)

        options = common_options(src.options, tgt.options, spec_name=src.name, tables=tables)
        if not options:
            logger.debug("Spec %r matched %r with no common options", src.name, tgt.name)

        common.append(CommonSpec(
            name=src.name,
            options=tuple(options),
            tier=src.tier,
            input_type=src.input_type,
            target_name=tgt.name,
            source_options=src.options,
            target_options=tgt.options,
            target_priority=tgt.priority,
        ))

    logger.info("Reconciled %d source specs against %d target specs: %d common",
                len(sources), len(targets), len(common))
    return common


def compare_spec_sets(
    left: Sequence[Spec],
    right: Sequence[Spec],
    tables: MatchTables = DEFAULT_TABLES,
) -> SpecComparison:
    """
    Side-by-side comparison of two spec sets of the same shape (e.g. two Stage 1 runs).

    All tiers take part. Matched specs carry their common options and the
    options each side holds alone; unmatched specs are listed per side with
    their closest fuzzy name candidates for review.
    """
    pairs = match_spec_pairs(left, right, FIRST_MATCH, tables)
    matched_left = {p.source_index for p in pairs}
    matched_right = {p.target_index for p in pairs}

    compared = []
    for pair in pairs:
        l_opts, r_opts = pair.source.options, pair.target.options
        compared.append(ComparedSpec(
            name=pair.source.name,
            left_name=pair.source.name,
            right_name=pair.target.name,
            common_options=tuple(common_options(l_opts, r_opts, pair.source.name, tables)),
            left_unique_options=tuple(unique_options(l_opts, r_opts, tables)),
            right_unique_options=tuple(unique_options(r_opts, l_opts, tables)),
        ))

    left_unique = tuple(s for i, s in enumerate(left) if i not in matched_left)
    right_unique = tuple(s for j, s in enumerate(right) if j not in matched_right)

    near_misses: Dict = suggest_near_misses(
        [s.name for s in left_unique], [s.name for s in right_unique], tables,
    )

    return SpecComparison(
        common_specs=tuple(compared),
        left_unique_specs=left_unique,
        right_unique_specs=right_unique,
        near_misses=near_misses,
    )


def run_stage3(
    stage1_record,
    stage2_record,
    policy: str = FIRST_MATCH,
    tables: MatchTables = DEFAULT_TABLES,
) -> Stage3Result:
    """Parse both stage records, reconcile them, and select buyer ISQs."""
    source = specs_from_stage1(stage1_record)
    target = specs_from_stage2(stage2_record)
    common = reconcile(source, target, policy, tables)
    buyers = select_buyer_isqs(common, tables=tables)
    return Stage3Result(common_specs=tuple(common), buyer_isqs=tuple(buyers))
