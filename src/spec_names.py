"""
Specification-name normalization and matching.

Two sources rarely label the same attribute the same way: "Thk (mm)",
"Sheet Thickness" and "Thickness" all describe one attribute. Names are
reduced to a canonical token string and then compared with a short,
ordered list of rules.

Normalization:
    1. Lowercase, punctuation ()-_,.; becomes whitespace
    2. Singularize tokens (bolts -> bolt, boxes -> box, categories -> category)
    3. Fold synonyms (thk -> thickness, colour -> color, usage -> application)
    4. De-duplicate, then drop filler words (category nouns, connectors, unit labels)

Matching (first rule that holds wins):
    1. Equal normalized forms
    2. One normalized form contains the other
    3. Single-token forms equal after singularizing
    4. Both sides carry a word from the same synonym group
"""

import logging
import re
from functools import lru_cache

from match_tables import DEFAULT_TABLES, MatchTables

logger = logging.getLogger(__name__)

_NAME_PUNCTUATION = re.compile(r'[()\-_,.;]')

# Tokens shorter than this are never rewritten by substring synonym lookup
_MIN_FUZZY_SYNONYM_LEN = 3


def singularize(word: str) -> str:
    """
    Strip common English plural endings.

    Examples:
        'bolts' -> 'bolt'
        'categories' -> 'category'
        'boxes' -> 'box'
        'glass' -> 'glass'
    """
    if len(word) <= 3:
        return word
    if word.endswith('ies'):
        return word[:-3] + 'y'
    if word.endswith('es'):
        stem = word[:-2]
        if stem.endswith(('ss', 'x', 'ch', 'sh')):
            return stem
    if word.endswith('s') and not word.endswith('ss'):
        return word[:-1]
    return word


def _canonical_token(token: str, synonyms, fillers) -> str:
    if token in synonyms:
        return synonyms[token]
    # filler words stay filler: "and" sits inside "brand", "meter" inside "diameter"
    if token in fillers or len(token) < _MIN_FUZZY_SYNONYM_LEN:
        return token
    for key, value in synonyms.items():
        if len(key) < _MIN_FUZZY_SYNONYM_LEN:
            continue
        if key in token or token in key:
            return value
    return token


def normalize_spec_name(name: str, tables: MatchTables = DEFAULT_TABLES) -> str:
    """
    Reduce a free-text specification name to a comparable token string.

    Examples:
        'Thk (mm)' -> 'thickness'
        'Sheet Thickness' -> 'thickness'
        'Colours' -> 'color'
        'Usage' -> 'application'

    Returns an empty string when nothing meaningful is left; an empty
    normalized name never matches anything.
    """
    if not isinstance(name, str):
        return ''
    return _normalize_spec_name(name, tables)


@lru_cache(maxsize=20000)
def _normalize_spec_name(name: str, tables: MatchTables) -> str:
    s = _NAME_PUNCTUATION.sub(' ', name.lower().strip())
    tokens = [t for t in s.split() if t]

    canonical = [
        _canonical_token(singularize(t), tables.name_synonyms, tables.filler_words)
        for t in tokens
    ]

    seen = set()
    unique = []
    for token in canonical:
        if token not in seen:
            seen.add(token)
            unique.append(token)

    kept = [t for t in unique if t not in tables.filler_words]
    return ' '.join(kept).strip()


def _shares_synonym_group(norm_a: str, norm_b: str, tables: MatchTables) -> bool:
    for group in tables.name_synonym_groups:
        if any(w in norm_a for w in group) and any(w in norm_b for w in group):
            return True
    return False


def spec_names_match(a: str, b: str, tables: MatchTables = DEFAULT_TABLES) -> bool:
    """
    Decide whether two specification names describe the same attribute.

    Symmetric in its arguments: spec_names_match(a, b) == spec_names_match(b, a).

    Examples:
        ('Thk (mm)', 'Thickness') -> True      (synonym fold, equal forms)
        ('Material', 'Composition') -> True    (synonym group)
        ('Width', 'Length') -> False
    """
    norm_a = normalize_spec_name(a, tables)
    norm_b = normalize_spec_name(b, tables)

    if not norm_a or not norm_b:
        return False

    if norm_a == norm_b:
        return True

    if norm_a in norm_b or norm_b in norm_a:
        return True

    words_a = norm_a.split(' ')
    words_b = norm_b.split(' ')
    if len(words_a) == 1 and len(words_b) == 1:
        if singularize(words_a[0]) == singularize(words_b[0]):
            return True

    if _shares_synonym_group(norm_a, norm_b, tables):
        return True

    return False


def name_has_attribute(name: str, attributes, tables: MatchTables = DEFAULT_TABLES) -> bool:
    """True when any word of the normalized name is one of `attributes`."""
    norm = normalize_spec_name(name, tables)
    return any(word in attributes for word in norm.split())
