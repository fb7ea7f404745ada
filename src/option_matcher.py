"""
Option-value matching for reconciled specifications.

Options are short, templated strings: a number with a unit ("2mm",
"0.1mm to 6.0mm"), or a word from a controlled vocabulary ("SS304",
"Mild Steel", "Mirror Finish"). Matching is rule-based; no edit distance.

Rules (first rule that holds wins, none holding means no match; a range
rule that applies is final even when it fails):
    1. Exact           case/whitespace-insensitive equality ("2mm" == "2 mm")
    2. Range contains  "0.1mm to 6.0mm" contains "2mm"
    3. Range overlap   "1-3mm" overlaps "2-5mm"
    4. Single value    one number each, exactly equal, same unit (1.2mm != 12mm)
    5. Equivalence     grade / material / brand / finish / shape / size-word groups
                       ("SS304" == "304L", "MS" == "Mild Steel", "Mirror" == "Polished")

Unit compatibility:
    Units are folded through the unit alias table (millimeter -> mm, " -> in,
    feet -> ft). No conversion is done: "2cm" and "20mm" do not match.
    Range rules accept a unit-less side; the single-value rule does not.

Range detection:
    A connector (to, -, ~, up to, upto, from, till) between the first two
    numbers, and those numbers differ. Free text such as "A-to-Z Tools 5"
    therefore never reads as a range.
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Tuple

from match_tables import DEFAULT_TABLES, MatchTables

logger = logging.getLogger(__name__)

UNICODE_FRAC = {
    "½": " 1/2", "¼": " 1/4", "¾": " 3/4",
    "⅛": " 1/8", "⅜": " 3/8", "⅝": " 5/8", "⅞": " 7/8",
    "⅓": " 1/3", "⅔": " 2/3",
}

QUOTE_NORMALIZE_MAP = {
    "″": '"', "”": '"', "“": '"',
    "′": "'", "’": "'", "‘": "'",
}

# mixed fraction (1 1/2, 1-1/2) | fraction (3/4) | decimal (0.5, .5) | integer
_NUMBER = r'(?:\d+(?:\s+|-)\d+/\d+|\d+/\d+|\d+(?:\.\d+)?|\.\d+)'

_RANGE_CONNECTOR = re.compile(r'\bup\s*to\b|\bto\b|\bfrom\b|\btill\b|~|-')

# 1,000 is one thousand, 1,2 stays two numbers
_THOUSANDS_SEP = re.compile(r'(?<=\d),(?=\d{3}(?!\d))')


@dataclass(frozen=True)
class Measurement:
    """Numbers (and their units) found in one option string."""
    values: Tuple[float, ...] = ()
    units: Tuple[Optional[str], ...] = ()
    is_range: bool = False

    @property
    def is_single(self) -> bool:
        return len(self.values) == 1

    @property
    def unit(self) -> Optional[str]:
        scope = self.units[:2] if self.is_range else self.units
        for u in scope:
            if u:
                return u
        return None

    @property
    def low(self) -> Optional[float]:
        if not self.values:
            return None
        return min(self.values[:2])

    @property
    def high(self) -> Optional[float]:
        if not self.values:
            return None
        return max(self.values[:2])


# ---------------------------------------------------------------------------
# Text cleanup
# ---------------------------------------------------------------------------

def _is_option(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def clean_option_text(text: str) -> str:
    """Lowercase, unify quotes and unicode fractions, drop thousands separators, collapse whitespace."""
    s = text.strip().lower()
    for bad, good in QUOTE_NORMALIZE_MAP.items():
        s = s.replace(bad, good)
    for frac, ascii_frac in UNICODE_FRAC.items():
        s = s.replace(frac, ascii_frac)
    s = s.replace('\u2013', '-').replace('\u2014', '-')
    s = _THOUSANDS_SEP.sub('', s)
    return re.sub(r'\s+', ' ', s).strip()


def exact_option_match(a, b) -> bool:
    """
    Rule 1: case-insensitive trimmed equality, or equality with all whitespace removed.

    Examples:
        ('2mm', '2 mm') -> True
        ('SS 304', 'ss304') -> True
        ('2mm', '3mm') -> False
    """
    if not _is_option(a) or not _is_option(b):
        return False
    clean_a = a.strip().lower()
    clean_b = b.strip().lower()
    if clean_a == clean_b:
        return True
    return re.sub(r'\s+', '', clean_a) == re.sub(r'\s+', '', clean_b)


# ---------------------------------------------------------------------------
# Measurement parsing
# ---------------------------------------------------------------------------

@lru_cache(maxsize=32)
def _measurement_pattern(tables: MatchTables) -> re.Pattern:
    aliases = sorted(tables.unit_aliases, key=len, reverse=True)
    units = '|'.join(re.escape(u) for u in aliases)
    return re.compile(rf'(?P<num>{_NUMBER})\s*(?:(?P<unit>{units})(?![a-z]))?')


def _to_float(token: str) -> float:
    token = token.strip()
    mixed = re.fullmatch(r'(\d+)(?:\s+|-)(\d+)/(\d+)', token)
    if mixed:
        whole, num, den = mixed.groups()
        return int(whole) + int(num) / int(den)
    if '/' in token:
        num, den = token.split('/', 1)
        return int(num) / int(den)
    return float(token)


def parse_measurement(option: str, tables: MatchTables = DEFAULT_TABLES) -> Measurement:
    """
    Extract numeric tokens, their units, and range shape from an option.

    Examples:
        '2mm'            -> values (2.0,), units ('mm',)
        '0.1mm to 6.0mm' -> values (0.1, 6.0), is_range True, unit 'mm'
        '1-1/2"'         -> values (1.5,), units ('in',)
        'SS304'          -> values (304.0,), units (None,)
        'Mirror'         -> no values

    Tokens that cannot be read as numbers are skipped, never raised.
    """
    if not _is_option(option):
        return Measurement()
    return _parse_measurement(option, tables)


@lru_cache(maxsize=20000)
def _parse_measurement(option: str, tables: MatchTables) -> Measurement:
    text = clean_option_text(option)
    values: List[float] = []
    units: List[Optional[str]] = []
    spans: List[Tuple[int, int]] = []

    for m in _measurement_pattern(tables).finditer(text):
        try:
            value = _to_float(m.group('num'))
        except (ValueError, ZeroDivisionError):
            continue
        unit = m.group('unit')
        values.append(value)
        units.append(tables.unit_aliases.get(unit) if unit else None)
        spans.append(m.span())

    is_range = False
    if len(values) >= 2 and values[0] != values[1]:
        # mixed fractions consume their own hyphen, so '-' here is a connector
        between = text[spans[0][1]:spans[1][0]]
        is_range = _RANGE_CONNECTOR.search(between) is not None

    return Measurement(values=tuple(values), units=tuple(units), is_range=is_range)


def is_range_option(option: str, tables: MatchTables = DEFAULT_TABLES) -> bool:
    return parse_measurement(option, tables).is_range


def _units_compatible(u1: Optional[str], u2: Optional[str]) -> bool:
    return u1 is None or u2 is None or u1 == u2


def _range_contains(rng: Measurement, single: Measurement) -> bool:
    value = single.values[0]
    return rng.low <= value <= rng.high and _units_compatible(rng.unit, single.unit)


def value_in_range(range_option: str, value_option: str, tables: MatchTables = DEFAULT_TABLES) -> bool:
    """
    True when `value_option` is a single number inside the range `range_option`.

    Examples:
        ('0.1mm to 6.0mm', '2mm') -> True
        ('0.1mm to 6.0mm', '8mm') -> False
        ('1-3mm', '2cm') -> False   (unit mismatch)
    """
    rng = parse_measurement(range_option, tables)
    single = parse_measurement(value_option, tables)
    if not rng.is_range or not single.is_single:
        return False
    return _range_contains(rng, single)


def _numeric_verdict(ma: Measurement, mb: Measurement) -> Optional[bool]:
    """
    Rules 2-4. True/False is final; None means fall through to the tables.
    """
    # Rule 2: exactly one side is a range, the other a single value
    if ma.is_range != mb.is_range:
        rng, single = (ma, mb) if ma.is_range else (mb, ma)
        if single.is_single:
            return _range_contains(rng, single)
        return None

    # Rule 3: both ranges overlap
    if ma.is_range and mb.is_range:
        overlap = ma.high >= mb.low and mb.high >= ma.low
        return overlap and _units_compatible(ma.unit, mb.unit)

    # Rule 4: one number each, exact equality, same unit or both unit-less
    if ma.is_single and mb.is_single:
        if ma.values[0] == mb.values[0] and ma.unit == mb.unit:
            return True

    return None


# ---------------------------------------------------------------------------
# Equivalence tables
# ---------------------------------------------------------------------------

@lru_cache(maxsize=4096)
def _term_pattern(term: str) -> re.Pattern:
    """
    Containment pattern for a table term.

    The term may not run into characters of the same class on either edge:
    'gi' is not found in 'original', while '304' is found in 'ss304'.
    """
    before = ''
    after = ''
    if term[0].isalpha():
        before = r'(?<![a-z])'
    elif term[0].isdigit():
        before = r'(?<![\d.])'
    if term[-1].isalpha():
        after = r'(?![a-z])'
    elif term[-1].isdigit():
        after = r'(?![\d])'
    return re.compile(before + re.escape(term) + after)


def contains_term(text: str, term: str) -> bool:
    """Edge-aware containment; single-character terms must equal the whole text."""
    if not term:
        return False
    if len(term) == 1:
        return text == term
    return _term_pattern(term).search(text) is not None


def _group_hit(text: str, group: Tuple[str, ...]) -> bool:
    return any(contains_term(text, term) for term in group)


def _numbers_agree(ma: Measurement, mb: Measurement) -> bool:
    if ma.values and mb.values:
        return ma.values[0] == mb.values[0]
    return True


def equivalence_group_match(a: str, b: str, tables: MatchTables = DEFAULT_TABLES) -> Optional[str]:
    """
    Rule 5: name of the first equivalence table under which `a` and `b` agree, else None.

    A group agrees when each side contains one of its terms. When both sides
    carry a number the leading numbers must be equal, so 'SS304' and 'SS316'
    never agree through the shared 'ss' material term.
    """
    if not _is_option(a) or not _is_option(b):
        return None
    text_a = clean_option_text(a)
    text_b = clean_option_text(b)
    if not _numbers_agree(parse_measurement(a, tables), parse_measurement(b, tables)):
        return None

    for kind, groups in tables.option_groups():
        for group in groups:
            if _group_hit(text_a, group) and _group_hit(text_b, group):
                return kind
    return None


# ---------------------------------------------------------------------------
# Public matcher
# ---------------------------------------------------------------------------

def options_match(a, b, tables: MatchTables = DEFAULT_TABLES) -> bool:
    """
    Decide whether two option strings denote the same real-world value.

    Examples:
        ('2mm', '2 mm') -> True              (exact, whitespace-insensitive)
        ('1.2mm', '12mm') -> False           (1.2 != 12)
        ('0.1mm to 6.0mm', '2mm') -> True    (range containment)
        ('SS304', '304') -> True             (single value)
        ('MS', 'Mild Steel') -> True         (material table)
        ('SS304', 'SS316') -> False          (grade digits disagree)

    Non-string or blank input never matches.
    """
    if not _is_option(a) or not _is_option(b):
        return False

    if exact_option_match(a, b):
        return True

    verdict = _numeric_verdict(parse_measurement(a, tables), parse_measurement(b, tables))
    if verdict is not None:
        return verdict

    kind = equivalence_group_match(a, b, tables)
    if kind:
        logger.debug("Options %r and %r matched via %s table", a, b, kind)
        return True

    return False


# ---------------------------------------------------------------------------
# Self-test
# ---------------------------------------------------------------------------

def self_test_option_matcher(tables: MatchTables = DEFAULT_TABLES) -> List[str]:
    """
    Run built-in sanity checks for the option matcher.

    Returns a list of failure messages (empty list = all passed).
    """
    failures: List[str] = []

    cases = [
        # (a, b, expected, description)

        # --- EXACT ---
        ('2mm', '2 mm', True, 'Whitespace-insensitive exact match'),
        ('Mirror Finish', 'mirror finish', True, 'Case-insensitive exact match'),

        # --- SINGLE VALUE ---
        ('1.2mm', '12mm', False, '1.2mm vs 12mm must not match'),
        ('2mm', '2 millimeter', True, 'mm and millimeter are one unit'),
        ('6"', '6 inch', True, 'Inch mark and inch are one unit'),
        ('2cm', '20mm', False, 'No unit conversion'),
        ('2', '2mm', False, 'Unit-less vs unit on single values'),

        # --- RANGES ---
        ('0.1mm to 6.0mm', '2mm', True, 'Value inside range'),
        ('0.1mm to 6.0mm', '8mm', False, 'Value outside range'),
        ('1-3mm', '2-5mm', True, 'Overlapping ranges'),
        ('1-3mm', '4-5mm', False, 'Disjoint ranges'),
        ('10 to 20', '15mm', True, 'Unit-less range accepts a unit'),
        ('1-3 cm', '2mm', False, 'Range unit must agree'),

        # --- EQUIVALENCE TABLES ---
        ('SS304', '304', True, 'Grade prefix'),
        ('304L', 'Stainless Steel 304', True, 'Grade suffix vs long form'),
        ('SS304', 'SS316', False, 'Different grades'),
        ('MS', 'Mild Steel', True, 'Mild steel abbreviation'),
        ('GI', 'Galvanized Iron', True, 'Galvanized iron abbreviation'),
        ('Aluminium', 'Aluminum', True, 'British vs US spelling'),
        ('Mirror', 'Polished', True, 'Finish variant'),
        ('Hairline', 'Brushed', True, 'Finish variant'),
        ('Round', 'Circular', True, 'Shape variant'),
        ('Round 10mm', 'Round 12mm', False, 'Shape agrees, size does not'),
        ('S', 'Small', True, 'Size word abbreviation'),
        ('Original', 'GI', False, 'Term inside a longer word'),
        ('5 m', 'Medium', False, 'Single-letter unit is not a size word'),
    ]

    for a, b, expected, description in cases:
        got = options_match(a, b, tables)
        if got != expected:
            failures.append(f"{description}: options_match({a!r}, {b!r}) = {got}, expected {expected}")
        if options_match(b, a, tables) != got:
            failures.append(f"{description}: options_match is not symmetric for {a!r} / {b!r}")

    return failures
