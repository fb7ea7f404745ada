"""
Boundary between the stage producers and the reconciliation engine.

Stage 1 and Stage 2 records arrive as loosely-structured JSON produced by
upstream extractors. Everything here degrades instead of raising: a node
that does not have the expected shape is skipped with a warning, and a file
that cannot be read becomes the empty record for its stage.

Stage 1 (nested):
    {"seller_specs": [{"mcats": [{"finalized_specs": {
        "finalized_primary_specs":   {"specs": [{"spec_name", "options", "input_type"}]},
        "finalized_secondary_specs": {"specs": [...]},
        "finalized_tertiary_specs":  {"specs": [...]}}}]}]}

Stage 1 (short):
    {"primary": [...], "secondary": [...], "tertiary": [...]}

Stage 2:
    {"config": {"name", "options"}, "keys": [{"name", "options"}], "buyers": [...]}
"""

import json
import logging
import os
from typing import Dict, List

from option_sets import clean_options
from spec_models import (
    INPUT_MULTI_SELECT, INPUT_SINGLE_SELECT, PRIORITY_BUYER, PRIORITY_CONFIG, PRIORITY_KEY,
    TIER_PRIMARY, TIER_PRIORITY, TIER_SECONDARY, TIER_TERTIARY, Spec,
)

logger = logging.getLogger(__name__)

STAGE2_OPTION_LIMIT = 10
DEFAULT_SPEC_NAME = "Specification"

STAGE1_BUCKETS = (
    ('finalized_primary_specs', 'primary', TIER_PRIMARY),
    ('finalized_secondary_specs', 'secondary', TIER_SECONDARY),
    ('finalized_tertiary_specs', 'tertiary', TIER_TERTIARY),
)

_MULTI_SELECT_SPELLINGS = {'multi-select', 'multi_select', 'multiselect', 'multi select', 'multiple'}


def empty_stage1_record() -> Dict:
    return {'seller_specs': []}


def empty_stage2_record() -> Dict:
    return {'config': {'name': '', 'options': []}, 'keys': [], 'buyers': []}


def _input_type(raw) -> str:
    if isinstance(raw, str) and raw.strip().lower() in _MULTI_SELECT_SPELLINGS:
        return INPUT_MULTI_SELECT
    return INPUT_SINGLE_SELECT


def _string_options(raw) -> List[str]:
    if not isinstance(raw, (list, tuple)):
        return []
    return [o.strip() for o in raw if isinstance(o, str) and o.strip()]


# ---------------------------------------------------------------------------
# Stage 1
# ---------------------------------------------------------------------------

def _stage1_spec(item, tier: str):
    if not isinstance(item, dict):
        logger.warning("Skipping Stage 1 spec that is not an object: %r", item)
        return None
    name = item.get('spec_name')
    if not isinstance(name, str) or not name.strip():
        logger.warning("Skipping Stage 1 spec without a name: %r", item)
        return None
    return Spec(
        name=name.strip(),
        options=tuple(_string_options(item.get('options'))),
        tier=tier,
        input_type=_input_type(item.get('input_type')),
        priority=TIER_PRIORITY[tier],
    )


def _bucket_items(bucket) -> list:
    # finalized buckets wrap their list in {"specs": [...]}; short buckets are the list
    if isinstance(bucket, dict):
        bucket = bucket.get('specs')
    if bucket is None:
        return []
    if not isinstance(bucket, list):
        logger.warning("Skipping Stage 1 bucket that is not a list: %r", type(bucket).__name__)
        return []
    return bucket


def _specs_from_buckets(node: Dict, use_finalized_keys: bool) -> List[Spec]:
    specs = []
    for finalized_key, short_key, tier in STAGE1_BUCKETS:
        key = finalized_key if use_finalized_keys else short_key
        for item in _bucket_items(node.get(key)):
            spec = _stage1_spec(item, tier)
            if spec is not None:
                specs.append(spec)
    return specs


def specs_from_stage1(record) -> List[Spec]:
    """
    Flatten a Stage 1 record into Specs, in document order per tier bucket.

    Accepts the nested seller_specs shape and the short primary/secondary/
    tertiary shape. Anything else yields [].
    """
    if not isinstance(record, dict):
        logger.warning("Stage 1 record is not an object; using empty record")
        return []

    if any(short_key in record for _, short_key, _ in STAGE1_BUCKETS):
        return _specs_from_buckets(record, use_finalized_keys=False)

    seller_specs = record.get('seller_specs')
    if not isinstance(seller_specs, list):
        if seller_specs is not None:
            logger.warning("Stage 1 seller_specs is not a list; ignoring it")
        return []

    specs: List[Spec] = []
    for category in seller_specs:
        if not isinstance(category, dict) or not isinstance(category.get('mcats'), list):
            logger.warning("Skipping Stage 1 category without an mcats list")
            continue
        for mcat in category['mcats']:
            finalized = mcat.get('finalized_specs') if isinstance(mcat, dict) else None
            if not isinstance(finalized, dict):
                logger.warning("Skipping Stage 1 sub-category without finalized_specs")
                continue
            specs.extend(_specs_from_buckets(finalized, use_finalized_keys=True))
    return specs


# ---------------------------------------------------------------------------
# Stage 2
# ---------------------------------------------------------------------------

def _stage2_spec(item, default_name: str, tier: str, priority: int):
    if not isinstance(item, dict):
        logger.warning("Skipping Stage 2 ISQ that is not an object: %r", item)
        return None
    name = item.get('name')
    name = name.strip() if isinstance(name, str) and name.strip() else default_name
    options = clean_options(item.get('options'), limit=STAGE2_OPTION_LIMIT)
    return Spec(name=name, options=tuple(options), tier=tier, priority=priority)


def specs_from_stage2(record) -> List[Spec]:
    """
    Flatten a Stage 2 record into Specs: config first, then keys, then buyers.

    Config specs carry priority 3 and the Primary tier; keys priority 2 and
    buyers priority 1, both Secondary. Options are cleaned and capped at
    STAGE2_OPTION_LIMIT. Keys and buyers left without options are dropped.
    """
    if not isinstance(record, dict):
        logger.warning("Stage 2 record is not an object; using empty record")
        return []

    specs: List[Spec] = []

    config = record.get('config')
    if config is not None:
        spec = _stage2_spec(config, DEFAULT_SPEC_NAME, TIER_PRIMARY, PRIORITY_CONFIG)
        if spec is not None and spec.options:
            specs.append(spec)

    for role, priority in (('keys', PRIORITY_KEY), ('buyers', PRIORITY_BUYER)):
        items = record.get(role) or []
        if not isinstance(items, list):
            logger.warning("Stage 2 %s is not a list; ignoring it", role)
            continue
        for index, item in enumerate(items):
            spec = _stage2_spec(item, f"{DEFAULT_SPEC_NAME} {index + 1}", TIER_SECONDARY, priority)
            if spec is not None and spec.options:
                specs.append(spec)

    return specs


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

def load_stage_record(path: str, stage: int) -> Dict:
    """
    Read a Stage 1 or Stage 2 JSON file.

    A missing file, invalid JSON or a top-level value that is not an object
    gives the empty record for that stage (logged as a warning).
    """
    if stage not in (1, 2):
        raise ValueError(f"stage must be 1 or 2, got {stage!r}")
    empty = empty_stage1_record() if stage == 1 else empty_stage2_record()

    if not path or not os.path.exists(path):
        logger.warning("Stage %d file not found: %s; using empty record", stage, path)
        return empty

    try:
        with open(path, 'r', encoding='utf-8') as f:
            record = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read Stage %d file %s (%s); using empty record", stage, path, e)
        return empty

    if not isinstance(record, dict):
        logger.warning("Stage %d file %s does not hold a JSON object; using empty record", stage, path)
        return empty

    return record
