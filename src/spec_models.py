"""
Value objects exchanged between the reconciliation components.

All records are frozen: the engine reads Specs and derives new records,
it never mutates what the Stage 1 / Stage 2 producers handed over.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

TIER_PRIMARY = "Primary"
TIER_SECONDARY = "Secondary"
TIER_TERTIARY = "Tertiary"
TIERS = (TIER_PRIMARY, TIER_SECONDARY, TIER_TERTIARY)
RECONCILED_TIERS = (TIER_PRIMARY, TIER_SECONDARY)

INPUT_SINGLE_SELECT = "single-select"
INPUT_MULTI_SELECT = "multi-select"
INPUT_TYPES = (INPUT_SINGLE_SELECT, INPUT_MULTI_SELECT)

# Stage 2 roles, highest priority first
PRIORITY_CONFIG = 3
PRIORITY_KEY = 2
PRIORITY_BUYER = 1

TIER_PRIORITY = {TIER_PRIMARY: 3, TIER_SECONDARY: 2, TIER_TERTIARY: 1}


@dataclass(frozen=True)
class Spec:
    """One named attribute of a product category, as produced by Stage 1 or Stage 2."""
    name: str
    options: Tuple[str, ...] = ()
    tier: str = TIER_PRIMARY
    input_type: str = INPUT_SINGLE_SELECT
    priority: int = 0

    def to_dict(self) -> Dict:
        return {
            'spec_name': self.name,
            'options': list(self.options),
            'tier': self.tier,
            'input_type': self.input_type,
        }


@dataclass(frozen=True)
class MatchedSpecPair:
    source: Spec
    target: Spec
    source_index: int
    target_index: int


@dataclass(frozen=True)
class CommonSpec:
    """
    A Stage 1 spec confirmed by a Stage 2 spec.

    `options` is the reconciled common subset and may be empty; the pair's
    original option lists are kept for the buyer-ISQ selector.
    """
    name: str
    options: Tuple[str, ...]
    tier: str
    input_type: str = INPUT_SINGLE_SELECT
    target_name: str = ''
    source_options: Tuple[str, ...] = ()
    target_options: Tuple[str, ...] = ()
    target_priority: int = 0

    @property
    def no_common_options(self) -> bool:
        return not self.options

    def to_dict(self) -> Dict:
        return {
            'spec_name': self.name,
            'options': list(self.options),
            'tier': self.tier,
            'input_type': self.input_type,
            'no_common_options': self.no_common_options,
        }


@dataclass(frozen=True)
class BuyerISQ:
    name: str
    options: Tuple[str, ...]
    tier: str
    score: int = 0

    def to_dict(self) -> Dict:
        return {
            'spec_name': self.name,
            'options': list(self.options),
            'tier': self.tier,
        }


@dataclass(frozen=True)
class Stage3Result:
    common_specs: Tuple[CommonSpec, ...] = ()
    buyer_isqs: Tuple[BuyerISQ, ...] = ()

    def to_dict(self) -> Dict:
        return {
            'common_specs': [s.to_dict() for s in self.common_specs],
            'buyer_isqs': [b.to_dict() for b in self.buyer_isqs],
        }


@dataclass(frozen=True)
class ComparedSpec:
    """A spec found on both sides of a two-producer comparison."""
    name: str
    left_name: str
    right_name: str
    common_options: Tuple[str, ...]
    left_unique_options: Tuple[str, ...]
    right_unique_options: Tuple[str, ...]

    def to_dict(self) -> Dict:
        return {
            'spec_name': self.name,
            'left_name': self.left_name,
            'right_name': self.right_name,
            'common_options': list(self.common_options),
            'left_unique_options': list(self.left_unique_options),
            'right_unique_options': list(self.right_unique_options),
        }


@dataclass(frozen=True)
class SpecComparison:
    common_specs: Tuple[ComparedSpec, ...] = ()
    left_unique_specs: Tuple[Spec, ...] = ()
    right_unique_specs: Tuple[Spec, ...] = ()
    near_misses: Dict[str, List[Tuple[str, float]]] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            'common_specs': [c.to_dict() for c in self.common_specs],
            'left_unique_specs': [s.to_dict() for s in self.left_unique_specs],
            'right_unique_specs': [s.to_dict() for s in self.right_unique_specs],
            'near_misses': {
                name: [{'candidate': c, 'score': round(sc, 2)} for c, sc in cands]
                for name, cands in self.near_misses.items()
            },
        }
