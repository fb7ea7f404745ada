"""
Unit tests for spec_names.py
Run: pytest tests/test_spec_names.py -v
"""
import pytest

from match_tables import HIGH_VALUE_ATTRIBUTES, NAME_SYNONYMS, tables_from_dict
from spec_names import name_has_attribute, normalize_spec_name, singularize, spec_names_match


# ============================================================
# SINGULARIZE
# ============================================================

class TestSingularize:

    @pytest.mark.parametrize('word,expected', [
        ('bolts', 'bolt'),
        ('categories', 'category'),
        ('boxes', 'box'),
        ('inches', 'inch'),
        ('glass', 'glass'),
        ('bus', 'bus'),
        ('size', 'size'),
    ])
    def test_plural_endings(self, word, expected):
        assert singularize(word) == expected


# ============================================================
# NORMALIZATION
# ============================================================

class TestNormalizeSpecName:

    @pytest.mark.parametrize('name,expected', [
        ('Thk (mm)', 'thickness'),
        ('Sheet Thickness', 'thickness'),
        ('Colours', 'color'),
        ('Usage', 'application'),
        ('Bolt Size', 'size'),
        ('Dia.', 'diameter'),
        ('Material Grade', 'material grade'),
    ])
    def test_examples(self, name, expected):
        assert normalize_spec_name(name) == expected

    def test_non_string_is_empty(self):
        assert normalize_spec_name(None) == ''
        assert normalize_spec_name(42) == ''

    def test_only_filler_is_empty(self):
        assert normalize_spec_name('(mm)') == ''

    def test_repeated_calls_agree(self):
        assert normalize_spec_name('Sheet Thickness (mm)') == normalize_spec_name('Sheet Thickness (mm)')

    def test_duplicate_tokens_collapse(self):
        assert normalize_spec_name('Thickness Thk') == 'thickness'

    @pytest.mark.parametrize('name,expected', [
        ('Length and Width', 'length width'),
        ('Size and Shape', 'size shape'),
        ('Diameter in meter', 'diameter'),
    ])
    def test_connectors_are_dropped(self, name, expected):
        assert normalize_spec_name(name) == expected

    def test_unhashable_is_empty(self):
        assert normalize_spec_name(['Thickness']) == ''
        assert normalize_spec_name({'name': 'Thickness'}) == ''


# ============================================================
# NAME MATCHING
# ============================================================

NAME_PAIRS = [
    ('Thk (mm)', 'Thickness'),
    ('Material', 'Composition'),
    ('Width', 'Length'),
    ('Material', 'Material Grade'),
    ('Grade', 'Quality'),
    ('Finish', 'Surface Finish'),
    ('Color', 'Coating Type'),
    ('Bolts', 'Bolt'),
    ('', 'Thickness'),
]


class TestSpecNamesMatch:

    def test_synonym_fold(self):
        assert spec_names_match('Thk (mm)', 'Thickness') is True

    def test_synonym_group(self):
        assert spec_names_match('Material', 'Composition') is True
        assert spec_names_match('Grade', 'Quality') is True

    def test_containment(self):
        assert spec_names_match('Material', 'Material Grade') is True

    def test_distinct_attributes(self):
        assert spec_names_match('Width', 'Length') is False
        assert spec_names_match('Color', 'Coating Type') is False

    def test_empty_normalized_never_matches(self):
        assert spec_names_match('', 'Thickness') is False
        assert spec_names_match('(mm)', 'mm') is False
        assert spec_names_match(None, 'Thickness') is False

    def test_connector_never_matches_brand(self):
        assert spec_names_match('Size and Shape', 'Brand') is False
        assert spec_names_match('Length and Width', 'Brand Name') is False

    def test_unhashable_names(self):
        assert spec_names_match(['Thickness'], 'Thickness') is False
        assert spec_names_match('Thickness', {'name': 'Thickness'}) is False

    @pytest.mark.parametrize('a,b', NAME_PAIRS)
    def test_commutative(self, a, b):
        assert spec_names_match(a, b) == spec_names_match(b, a)


# ============================================================
# INJECTED TABLES
# ============================================================

class TestInjectedTables:

    def test_extra_synonym(self):
        tables = tables_from_dict({'name_synonyms': dict(NAME_SYNONYMS, gsm='weight')})
        assert normalize_spec_name('GSM', tables) == 'weight'
        assert spec_names_match('GSM', 'Weight', tables) is True

    def test_default_tables_unaffected(self):
        assert spec_names_match('GSM', 'Weight') is False


class TestNameHasAttribute:

    def test_high_value(self):
        assert name_has_attribute('Sheet Thickness', HIGH_VALUE_ATTRIBUTES) is True
        assert name_has_attribute('Color', HIGH_VALUE_ATTRIBUTES) is False
