"""
Declarative match tables for the ISQ reconciliation engine.

Every synonym, equivalence group and word set used by the name and option
matchers lives here as plain data. Matchers never hard-code vocabulary; they
receive a MatchTables value (DEFAULT_TABLES unless the caller injects another).

Table kinds:
    - mapping tables   term -> canonical           (name_synonyms, unit_aliases)
    - group tables     list of equivalent terms    (*_groups)
    - word sets        flat set of words           (filler_words, high_value_attributes,
                                                    measurable_attributes)

Loading overrides:
    - JSON   {"grade_groups": [["304", "ss304"], ...], "filler_words": [...], ...}
    - Excel  one sheet per table, columns key/value
    - CSV    long format, columns table/key/value

    For group tables `key` is the group id and `value` a member term.
    For mapping tables `key` is the term and `value` its canonical form.
    For word sets only `value` is read.
"""

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

import pandas as pd

logger = logging.getLogger(__name__)

Groups = Tuple[Tuple[str, ...], ...]


# ---------------------------------------------------------------------------
# Spec-name vocabulary
# ---------------------------------------------------------------------------

NAME_SYNONYMS: Dict[str, str] = {
    'material': 'material',
    'grade': 'grade',
    'thk': 'thickness',
    'thickness': 'thickness',
    'type': 'type',
    'shape': 'shape',
    'size': 'size',
    'dimension': 'size',
    'length': 'length',
    'width': 'width',
    'height': 'height',
    'dia': 'diameter',
    'diameter': 'diameter',
    'color': 'color',
    'colour': 'color',
    'finish': 'finish',
    'surface': 'finish',
    'weight': 'weight',
    'wt': 'weight',
    'capacity': 'capacity',
    'brand': 'brand',
    'model': 'model',
    'quality': 'quality',
    'standard': 'standard',
    'specification': 'spec',
    'perforation': 'hole',
    'hole': 'hole',
    'pattern': 'pattern',
    'design': 'design',
    'application': 'application',
    'usage': 'application',
    # Product nouns fold onto one canonical noun, then drop out as filler
    'bolt': 'bolt',
    'stud': 'stud',
    'nut': 'nut',
    'screw': 'bolt',
    'fastener': 'bolt',
    'pipe': 'pipe',
    'tube': 'pipe',
    'sheet': 'sheet',
    'plate': 'sheet',
    'rod': 'rod',
    'bar': 'rod',
    'wire': 'wire',
    'cable': 'wire',
}

FILLER_WORDS: FrozenSet[str] = frozenset({
    # category nouns
    'sheet', 'plate', 'pipe', 'rod', 'bar', 'wire', 'cable',
    'bolt', 'nut', 'stud', 'screw',
    # connectors
    'in', 'for', 'of', 'the', 'and', 'or', 'to',
    # unit labels in parentheses: "Thickness (mm)" is still thickness
    'mm', 'cm', 'm', 'mtr', 'meter', 'inch', 'ft', 'kg', 'gm',
})

NAME_SYNONYM_GROUPS: Groups = (
    ('material', 'composition', 'fabric'),
    ('grade', 'quality', 'class', 'standard'),
    ('thickness', 'thk', 'gauge'),
    ('size', 'dimension', 'measurement'),
    ('diameter', 'dia', 'bore'),
    ('length', 'long', 'lng'),
    ('width', 'breadth', 'wide'),
    ('height', 'high', 'depth'),
    ('color', 'colour', 'shade'),
    ('finish', 'surface', 'coating', 'polish'),
    ('weight', 'wt', 'mass'),
    ('type', 'kind', 'variety', 'style'),
    ('shape', 'form', 'profile'),
    ('hole', 'perforation', 'aperture'),
    ('pattern', 'design', 'arrangement'),
    ('application', 'use', 'purpose', 'usage'),
    ('bolt', 'bolts', 'screw'),
    ('stud', 'studs', 'pin'),
    ('nut', 'nuts', 'fastener'),
    ('pipe', 'pipes', 'tube'),
    ('sheet', 'sheets', 'plate'),
    ('rod', 'rods', 'bar'),
    ('wire', 'wires', 'cable'),
)

# Names carrying these words are treated as decision-relevant for buyers
HIGH_VALUE_ATTRIBUTES: FrozenSet[str] = frozenset({
    'material', 'thickness', 'grade', 'size', 'width', 'length',
})

# Names carrying these words hold measurable quantities (range-aware reconciliation)
MEASURABLE_ATTRIBUTES: FrozenSet[str] = frozenset({
    'thickness', 'width', 'length', 'diameter', 'size', 'height',
})


# ---------------------------------------------------------------------------
# Option vocabulary
# ---------------------------------------------------------------------------

GRADE_GROUPS: Groups = (
    ('304', '304l', '304h', 'ss304', 'ss 304', 'ss-304', 'sus304', 'aisi 304', 'stainless steel 304'),
    ('316', '316l', '316ti', 'ss316', 'ss 316', 'ss-316', 'sus316', 'aisi 316', 'stainless steel 316'),
    ('310', '310s', 'ss310', 'ss 310', 'stainless steel 310'),
    ('321', 'ss321', 'ss 321', 'stainless steel 321'),
    ('409', '409l', 'ss409', 'ss 409'),
    ('410', 'ss410', 'ss 410'),
    ('430', 'ss430', 'ss 430', 'stainless steel 430'),
    ('201', 'ss201', 'ss 201', 'j1'),
    ('202', 'ss202', 'ss 202'),
)

MATERIAL_GROUPS: Groups = (
    ('ms', 'mild steel', 'carbon steel', 'cs'),
    ('gi', 'galvanized iron', 'galvanised iron'),
    ('aluminium', 'aluminum', 'alu'),
    ('ss', 'stainless steel', 'stainless'),
    ('ci', 'cast iron'),
    ('cu', 'copper'),
    ('brass',),
    ('hdpe', 'high density polyethylene'),
    ('pvc', 'polyvinyl chloride'),
)

BRAND_GROUPS: Groups = (
    ('jindal', 'jindal stainless', 'jsl'),
    ('tata', 'tata steel', 'tata tiscon'),
    ('sail', 'steel authority of india'),
    ('jsw', 'jsw steel'),
    ('apollo', 'apollo tubes', 'apl apollo'),
    ('hindalco', 'hindalco industries'),
    ('essar', 'essar steel', 'am/ns'),
    ('posco', 'posco india'),
)

FINISH_GROUPS: Groups = (
    ('mirror', 'polished', 'mirror finish', '8k'),
    ('hairline', 'brushed', 'satin', 'hl'),
    ('mill finish', 'mill', 'unpolished'),
    ('galvanized', 'galvanised', 'gi', 'zinc coated'),
    ('matte', 'matt', 'dull'),
    ('bright annealed', 'ba'),
    ('powder coated', 'powder coating'),
)

SHAPE_GROUPS: Groups = (
    ('round', 'circular', 'circle'),
    ('square', 'squared'),
    ('rectangular', 'rectangle'),
    ('hexagonal', 'hexagon', 'hex'),
    ('flat', 'flat bar'),
    ('angle', 'l shape', 'l-shaped'),
    ('channel', 'c shape', 'c-shaped'),
    ('pipe', 'tube', 'tubular'),
    ('slotted', 'slot'),
)

SIZE_WORD_GROUPS: Groups = (
    ('small', 'sm', 's'),
    ('medium', 'med', 'm'),
    ('large', 'lg', 'l'),
    ('extra large', 'xl'),
    ('extra small', 'xs'),
)

UNIT_ALIASES: Dict[str, str] = {
    'mm': 'mm', 'millimeter': 'mm', 'millimeters': 'mm', 'millimetre': 'mm', 'millimetres': 'mm',
    'cm': 'cm', 'centimeter': 'cm', 'centimeters': 'cm', 'centimetre': 'cm', 'centimetres': 'cm',
    'm': 'm', 'mtr': 'm', 'mtrs': 'm', 'meter': 'm', 'meters': 'm', 'metre': 'm', 'metres': 'm',
    'in': 'in', 'inch': 'in', 'inches': 'in', '"': 'in',
    'ft': 'ft', 'feet': 'ft', 'foot': 'ft', "'": 'ft',
    'micron': 'micron', 'microns': 'micron', 'um': 'micron',
    'swg': 'swg', 'gauge': 'swg', 'ga': 'swg',
    'kg': 'kg', 'kgs': 'kg', 'g': 'g', 'gm': 'g', 'gms': 'g', 'gram': 'g', 'grams': 'g',
    'l': 'l', 'ltr': 'l', 'litre': 'l', 'liter': 'l', 'litres': 'l', 'liters': 'l', 'ml': 'ml',
    'mpa': 'mpa', 'bar': 'bar', 'psi': 'psi',
    'v': 'v', 'volt': 'v', 'w': 'w', 'watt': 'w', 'kw': 'kw', 'hp': 'hp',
}


# ---------------------------------------------------------------------------
# Table container
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class MatchTables:
    """
    One authoritative set of match tables.

    Frozen and compared by identity, so a MatchTables value can key an
    lru_cache: normalization results are memoized per table set.
    """
    name_synonyms: Dict[str, str]
    filler_words: FrozenSet[str]
    name_synonym_groups: Groups
    high_value_attributes: FrozenSet[str]
    measurable_attributes: FrozenSet[str]
    grade_groups: Groups
    material_groups: Groups
    brand_groups: Groups
    finish_groups: Groups
    shape_groups: Groups
    size_word_groups: Groups
    unit_aliases: Dict[str, str]

    def option_groups(self) -> List[Tuple[str, Groups]]:
        """Option equivalence tables in the order the option matcher consults them."""
        return [
            ('grade', self.grade_groups),
            ('material', self.material_groups),
            ('brand', self.brand_groups),
            ('finish', self.finish_groups),
            ('shape', self.shape_groups),
            ('size_word', self.size_word_groups),
        ]


DEFAULT_TABLES = MatchTables(
    name_synonyms=NAME_SYNONYMS,
    filler_words=FILLER_WORDS,
    name_synonym_groups=NAME_SYNONYM_GROUPS,
    high_value_attributes=HIGH_VALUE_ATTRIBUTES,
    measurable_attributes=MEASURABLE_ATTRIBUTES,
    grade_groups=GRADE_GROUPS,
    material_groups=MATERIAL_GROUPS,
    brand_groups=BRAND_GROUPS,
    finish_groups=FINISH_GROUPS,
    shape_groups=SHAPE_GROUPS,
    size_word_groups=SIZE_WORD_GROUPS,
    unit_aliases=UNIT_ALIASES,
)

MAPPING_TABLES = ('name_synonyms', 'unit_aliases')
WORD_SET_TABLES = ('filler_words', 'high_value_attributes', 'measurable_attributes')
GROUP_TABLES = (
    'name_synonym_groups', 'grade_groups', 'material_groups', 'brand_groups',
    'finish_groups', 'shape_groups', 'size_word_groups',
)
TABLE_NAMES = MAPPING_TABLES + WORD_SET_TABLES + GROUP_TABLES


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------

def _clean_term(term) -> str:
    if term is None or (isinstance(term, float) and pd.isna(term)):
        return ''
    return str(term).strip().lower()


def _as_mapping(raw) -> Dict[str, str]:
    if not isinstance(raw, dict):
        raise ValueError(f"expected a term -> canonical mapping, got {type(raw).__name__}")
    mapping = {}
    for key, value in raw.items():
        k, v = _clean_term(key), _clean_term(value)
        if k and v:
            mapping[k] = v
    return mapping


def _as_word_set(raw) -> FrozenSet[str]:
    if isinstance(raw, str) or not isinstance(raw, Iterable):
        raise ValueError(f"expected a list of words, got {type(raw).__name__}")
    return frozenset(t for t in (_clean_term(w) for w in raw) if t)


def _as_groups(raw) -> Groups:
    if isinstance(raw, dict):
        raw = list(raw.values())
    if isinstance(raw, str) or not isinstance(raw, Iterable):
        raise ValueError(f"expected a list of term groups, got {type(raw).__name__}")
    groups = []
    for group in raw:
        if isinstance(group, str) or not isinstance(group, Iterable):
            raise ValueError(f"expected a list of terms per group, got {group!r}")
        terms = tuple(t for t in (_clean_term(g) for g in group) if t)
        if terms:
            groups.append(terms)
    return tuple(groups)


def _coerce_table(table_name: str, raw):
    if table_name in MAPPING_TABLES:
        return _as_mapping(raw)
    if table_name in WORD_SET_TABLES:
        return _as_word_set(raw)
    return _as_groups(raw)


def _rows_to_raw(table_name: str, rows: List[Tuple[str, str]]):
    """Turn (key, value) rows from a spreadsheet into the raw JSON-like table form."""
    if table_name in MAPPING_TABLES:
        return {k: v for k, v in rows}
    if table_name in WORD_SET_TABLES:
        return [v for _, v in rows]
    grouped: Dict[str, List[str]] = {}
    for key, value in rows:
        grouped.setdefault(key, []).append(value)
    return list(grouped.values())


def _frame_rows(df: pd.DataFrame, source: str) -> List[Tuple[str, str]]:
    df = df.rename(columns=lambda c: str(c).strip().lower())
    if 'value' not in df.columns:
        raise ValueError(f"{source}: missing 'value' column")
    if 'key' not in df.columns:
        df = df.assign(key='')
    rows = []
    for key, value in zip(df['key'], df['value']):
        value = _clean_term(value)
        if value:
            rows.append((_clean_term(key), value))
    return rows


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def tables_from_dict(raw: Dict, base: MatchTables = DEFAULT_TABLES) -> MatchTables:
    """
    Build a MatchTables from a JSON-like dict of overrides.

    Tables absent from `raw` keep the value from `base`.

    Raises:
        ValueError: unknown table name or a table of the wrong shape
    """
    if not isinstance(raw, dict):
        raise ValueError("match tables must be an object keyed by table name")
    unknown = sorted(set(raw) - set(TABLE_NAMES))
    if unknown:
        raise ValueError(f"unknown match tables: {', '.join(unknown)}")

    overrides = {}
    for table_name, table in raw.items():
        try:
            overrides[table_name] = _coerce_table(table_name, table)
        except ValueError as e:
            raise ValueError(f"{table_name}: {e}") from e
    return replace(base, **overrides)


def _load_excel(path: str) -> Dict:
    sheets = pd.read_excel(path, sheet_name=None, dtype=str, engine='openpyxl')
    raw = {}
    for sheet_name, df in sheets.items():
        table_name = str(sheet_name).strip().lower()
        raw[table_name] = _rows_to_raw(table_name, _frame_rows(df, f"sheet '{sheet_name}'"))
    return raw


def _load_csv(path: str) -> Dict:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df = df.rename(columns=lambda c: str(c).strip().lower())
    if 'table' not in df.columns:
        raise ValueError(f"{path}: missing 'table' column")
    raw = {}
    for table_name, group in df.groupby(df['table'].str.strip().str.lower(), sort=False):
        raw[table_name] = _rows_to_raw(table_name, _frame_rows(group, f"table '{table_name}'"))
    return raw


def load_tables(path: str, base: MatchTables = DEFAULT_TABLES) -> MatchTables:
    """
    Load match-table overrides from a JSON, Excel or CSV file.

    Examples:
        load_tables("tables/steel.json")
        load_tables("tables/steel.xlsx")   # sheets: grade_groups, filler_words, ...
        load_tables("tables/steel.csv")    # columns: table,key,value

    Raises:
        ValueError: unsupported extension or malformed table content
    """
    ext = os.path.splitext(path)[1].lower()
    if ext == '.json':
        with open(path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    elif ext in ('.xlsx', '.xlsm'):
        raw = _load_excel(path)
    elif ext == '.csv':
        raw = _load_csv(path)
    else:
        raise ValueError(f"unsupported match table file: {path}")

    tables = tables_from_dict(raw, base=base)
    logger.info("Loaded %d match table override(s) from %s", len(raw), path)
    return tables


def tables_to_dict(tables: MatchTables) -> Dict:
    """JSON-serializable form of a table set (inverse of tables_from_dict)."""
    out = {}
    for f in fields(tables):
        value = getattr(tables, f.name)
        if f.name in MAPPING_TABLES:
            out[f.name] = dict(value)
        elif f.name in WORD_SET_TABLES:
            out[f.name] = sorted(value)
        else:
            out[f.name] = [list(g) for g in value]
    return out


def resolve_tables(path: Optional[str] = None) -> MatchTables:
    """DEFAULT_TABLES, or DEFAULT_TABLES overridden by the file at `path`."""
    if not path:
        return DEFAULT_TABLES
    return load_tables(path)
