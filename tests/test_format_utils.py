"""Tests for output formatting helpers."""

import json

import pytest
import yaml

from hashrarity.format_utils import (
    flatten_dict, format_output, get_format_from_env
)

RECORDS = [
    {'hash': 'ab' * 20, 'zero_bits': 0, 'tier': 'Common'},
    {'hash': '00' * 20, 'zero_bits': 160, 'tier': 'Rare', 'kind': 'blob'},
]


class TestFormatOutput:

    def test_jsonl(self):
        """JSONL is one object per line."""
        lines = list(format_output(iter(RECORDS), 'jsonl'))
        assert [json.loads(line) for line in lines] == RECORDS

    def test_json(self):
        """JSON is a single array."""
        [text] = format_output(iter(RECORDS), 'json')
        assert json.loads(text) == RECORDS

    def test_yaml(self):
        """YAML round-trips the records."""
        [text] = format_output(iter(RECORDS), 'yaml')
        assert yaml.safe_load(text) == RECORDS

    def test_csv_uses_union_of_fields(self):
        """CSV headers cover every key seen, in first-seen order."""
        [text] = format_output(iter(RECORDS), 'csv')
        lines = text.split('\n')
        assert lines[0] == 'hash,zero_bits,tier,kind'
        assert lines[1].endswith(',0,Common,')

    def test_tsv_with_selected_fields(self):
        """--fields selects and orders TSV columns."""
        [text] = format_output(iter(RECORDS), 'tsv', fields=['tier', 'zero_bits'])
        assert text.split('\n') == ['tier\tzero_bits', 'Common\t0', 'Rare\t160']

    def test_empty_delimited_output(self):
        """No records means no header either."""
        assert list(format_output(iter([]), 'csv')) == []

    def test_unknown_format(self):
        """Unknown formats raise ValueError."""
        with pytest.raises(ValueError):
            list(format_output(iter(RECORDS), 'xml'))


def test_flatten_dict():
    """Nested dicts become dotted keys and lists are joined."""
    flat = flatten_dict({'enumeration': {'loose': 1, 'packed': 2}, 'tags': ['a', 'b'], 'total': 3})
    assert flat == {'enumeration.loose': 1, 'enumeration.packed': 2, 'tags': 'a, b', 'total': 3}


def test_format_from_env(monkeypatch):
    """HASHRARITY_FORMAT is honoured only for known formats."""
    assert get_format_from_env() == 'jsonl'
    monkeypatch.setenv('HASHRARITY_FORMAT', 'YAML')
    assert get_format_from_env() == 'yaml'
    monkeypatch.setenv('HASHRARITY_FORMAT', 'pdf')
    assert get_format_from_env('csv') == 'csv'
