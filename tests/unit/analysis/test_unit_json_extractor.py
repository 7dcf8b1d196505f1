# tests/unit/analysis/test_json_extractor.py — v1
"""Tests for analysis/json_extractor.py."""

from __future__ import annotations

import pytest

from salesintel.analysis.json_extractor import extract_json
from salesintel.core.errors import AnalysisError


class TestExtractJson:
    def test_plain_object(self):
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_surrounding_whitespace(self):
        assert extract_json('\n  {"a": 1}  \n') == {"a": 1}

    def test_fenced_block(self):
        text = 'Here is the report:\n```json\n{"a": {"b": 2}}\n```\nDone.'
        assert extract_json(text) == {"a": {"b": 2}}

    def test_fence_without_language(self):
        assert extract_json('```\n{"a": 1}\n```') == {"a": 1}

    def test_embedded_object(self):
        assert extract_json('Sure! {"a": [1, 2]} Hope that helps.') == {"a": [1, 2]}

    def test_array_rejected(self):
        with pytest.raises(AnalysisError):
            extract_json("[1, 2, 3]")

    def test_no_json(self):
        with pytest.raises(AnalysisError, match="No JSON object"):
            extract_json("I could not find anything about this company.")

    def test_truncated_json(self):
        with pytest.raises(AnalysisError):
            extract_json('{"company": {"name": "Acme"')
