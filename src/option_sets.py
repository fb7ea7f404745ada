"""
Option-set reconciliation: common subsets, buyer-facing option lists, and
one-sided differences between two ordered option lists.

Target options are consumed at most once; source order is preserved; output
never holds two values that differ only by case.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Set

from match_tables import DEFAULT_TABLES, MatchTables
from option_matcher import exact_option_match, is_range_option, options_match, value_in_range
from spec_names import name_has_attribute

logger = logging.getLogger(__name__)

BUYER_OPTION_LIMIT = 8
MAX_OPTION_LENGTH = 50

# Values that only echo the prompt template, never a real option
PLACEHOLDER_FRAGMENTS = ('option', 'value', 'spec')
PLACEHOLDER_VALUES = {'undefined', 'null', 'none', 'nan', '[]', '{}'}

_LEADING_JUNK = re.compile(r'^["\'\[]+')
_TRAILING_JUNK = re.compile(r'["\'\]]+$')
# 6" and 10' are inch/foot marks, not stray quotes
_TRAILING_BRACKET = re.compile(r'\]+$')


# ---------------------------------------------------------------------------
# Cleaning
# ---------------------------------------------------------------------------

def _clean_option(raw) -> Optional[str]:
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, (int, float)):
        raw = str(raw)
    if not isinstance(raw, str):
        return None

    s = raw.strip()
    wrapped = bool(_LEADING_JUNK.match(s))
    s = _LEADING_JUNK.sub('', s)
    if wrapped or not re.search(r'\d["\']+\]*$', s):
        s = _TRAILING_JUNK.sub('', s)
    else:
        s = _TRAILING_BRACKET.sub('', s)
    return s.strip()


def _is_placeholder(option: str) -> bool:
    low = option.lower()
    if low in PLACEHOLDER_VALUES:
        return True
    return any(fragment in low for fragment in PLACEHOLDER_FRAGMENTS)


def clean_options(options, limit: Optional[int] = None) -> List[str]:
    """
    Drop malformed and placeholder values from a raw option list.

    Examples:
        ['"2mm"', '[3mm]', 'Option 1', None, ''] -> ['2mm', '3mm']
        ['6"', 'undefined'] -> ['6"']

    Non-list input yields []. `limit` caps the result length.
    """
    if not isinstance(options, (list, tuple)):
        return []

    cleaned = []
    for raw in options:
        option = _clean_option(raw)
        if not option:
            continue
        if len(option) > MAX_OPTION_LENGTH or _is_placeholder(option):
            continue
        cleaned.append(option)

    if limit is not None:
        cleaned = cleaned[:limit]
    return cleaned


def _usable(options: Iterable) -> List[str]:
    return [o for o in options if isinstance(o, str) and o.strip()]


def dedupe_options(options: Iterable[str]) -> List[str]:
    """Keep the first spelling of each value, case-insensitively."""
    seen: Set[str] = set()
    result = []
    for option in options:
        key = option.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(option)
    return result


# ---------------------------------------------------------------------------
# Common subset
# ---------------------------------------------------------------------------

def _first_free(option: str, target: List[str], consumed: Set[int], predicate) -> Optional[int]:
    for j, other in enumerate(target):
        if j in consumed:
            continue
        if predicate(option, other):
            return j
    return None


def common_options(
    source,
    target,
    spec_name: Optional[str] = None,
    tables: MatchTables = DEFAULT_TABLES,
) -> List[str]:
    """
    Options of `source` confirmed by `target`, in source order.

    Pass 1 pairs exact matches, pass 2 pairs anything the option matcher
    accepts, so a discrete source value already lands in a free target
    range there. For measurable specs (thickness, width, ...) pass 3 lets a
    source range absorb every discrete target value inside it.

    Examples:
        (['2mm', '3mm', '4mm'], ['2 mm', '4mm']) -> ['2mm', '4mm']
        (['1-5mm'], ['2mm', '3mm', '8mm'], 'Thickness') -> ['1-5mm', '2mm', '3mm']
        (['SS304', 'SS316'], ['304L']) -> ['SS304']
        (['Mirror'], ['Matte']) -> []
    """
    src = _usable(source or [])
    tgt = _usable(target or [])
    if not src or not tgt:
        return []

    consumed: Set[int] = set()
    paired: Dict[int, int] = {}

    # Pass 1: exact
    for i, option in enumerate(src):
        j = _first_free(option, tgt, consumed, exact_option_match)
        if j is not None:
            paired[i] = j
            consumed.add(j)

    # Pass 2: full option matcher; covers a discrete source inside a target range
    for i, option in enumerate(src):
        if i in paired:
            continue
        j = _first_free(option, tgt, consumed, lambda a, b: options_match(a, b, tables))
        if j is not None:
            paired[i] = j
            consumed.add(j)

    emitted: Dict[int, List[str]] = {i: [src[i]] for i in paired}

    # Pass 3: a source range also emits every discrete target value inside it,
    # including the one it was paired with above
    if spec_name and name_has_attribute(spec_name, tables.measurable_attributes, tables):
        for i, option in enumerate(src):
            if not is_range_option(option, tables):
                continue
            absorbed = []
            for j, other in enumerate(tgt):
                if (j in consumed and paired.get(i) != j) or is_range_option(other, tables):
                    continue
                if value_in_range(option, other, tables):
                    absorbed.append(other)
                    consumed.add(j)
            if absorbed:
                emitted[i] = [option] + absorbed

    result = dedupe_options(value for i in sorted(emitted) for value in emitted[i])
    logger.debug("common_options(%s): %d source, %d target -> %d common",
                 spec_name, len(src), len(tgt), len(result))
    return result


# ---------------------------------------------------------------------------
# Buyer-facing list
# ---------------------------------------------------------------------------

def buyer_options(
    source,
    target,
    limit: int = BUYER_OPTION_LIMIT,
    tables: MatchTables = DEFAULT_TABLES,
) -> List[str]:
    """
    Blend two option lists into a buyer-facing list of at most `limit` values.

    Phase 1: source values confirmed by target (each target index used once)
    Phase 2: remaining source values in order
    Phase 3: target values no source value claimed

    Examples:
        (['2mm', '3mm'], ['3 mm', '5mm']) -> ['3mm', '2mm', '5mm']
    """
    src = _usable(source or [])
    tgt = _usable(target or [])

    result: List[str] = []
    used: Set[str] = set()
    matched_targets: Set[int] = set()

    def _emit(option: str) -> None:
        key = option.strip().lower()
        if key not in used and len(result) < limit:
            result.append(option)
            used.add(key)

    for option in src:
        if len(result) >= limit:
            break
        j = _first_free(option, tgt, matched_targets, lambda a, b: options_match(a, b, tables))
        if j is not None:
            _emit(option)
            matched_targets.add(j)

    for option in src:
        if len(result) >= limit:
            break
        _emit(option)

    for j, option in enumerate(tgt):
        if len(result) >= limit:
            break
        if j not in matched_targets:
            _emit(option)

    return result[:limit]


def unique_options(options, other, tables: MatchTables = DEFAULT_TABLES) -> List[str]:
    """Options with no option-matcher counterpart in `other`, de-duplicated."""
    others = _usable(other or [])
    unique = [
        option for option in _usable(options or [])
        if not any(options_match(option, o, tables) for o in others)
    ]
    return dedupe_options(unique)
