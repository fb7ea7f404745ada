"""
Pytest configuration and shared fixtures
"""
import os
import sys

import pytest

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))


# ============================================================
# STAGE RECORDS
# ============================================================

@pytest.fixture
def stage1_record():
    """Nested Stage 1 record: one category, one sub-category, three tiers"""
    return {
        'seller_specs': [{
            'mcats': [{
                'finalized_specs': {
                    'finalized_primary_specs': {'specs': [
                        {'spec_name': 'Material', 'options': ['SS304', 'SS316', 'MS'],
                         'input_type': 'single-select'},
                        {'spec_name': 'Thickness (mm)', 'options': ['0.5mm', '1mm', '2mm', '3mm'],
                         'input_type': 'single-select'},
                    ]},
                    'finalized_secondary_specs': {'specs': [
                        {'spec_name': 'Finish', 'options': ['Mirror', 'Hairline', 'Matte'],
                         'input_type': 'multi-select'},
                    ]},
                    'finalized_tertiary_specs': {'specs': [
                        {'spec_name': 'Brand', 'options': ['Jindal', 'Tata'],
                         'input_type': 'single-select'},
                    ]},
                },
            }],
        }],
    }


@pytest.fixture
def stage2_record():
    """Stage 2 record: config spec, key specs, no buyer specs"""
    return {
        'config': {'name': 'Thk', 'options': ['1 mm', '2mm', '5mm']},
        'keys': [
            {'name': 'Material Grade', 'options': ['304', 'Mild Steel']},
            {'name': 'Surface Finish', 'options': ['Polished', 'Option 1']},
            {'name': 'Brand', 'options': ['Jindal Stainless']},
        ],
        'buyers': [],
    }


@pytest.fixture
def write_json(tmp_path):
    """Write an object to a JSON file under tmp_path and return its path"""
    import json

    def _write(name, data):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding='utf-8')
        return str(path)
    return _write
