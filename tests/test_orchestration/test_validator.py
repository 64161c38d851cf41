"""
Tests for final-answer acceptance.
"""

import pytest

from callsheet_agent.orchestration.validator import (
    Accepted,
    ParseFailure,
    SchemaFailure,
    accept,
    strip_code_fences,
)
from callsheet_agent.schemas import BASIC, COMPANY


class TestStripCodeFences:
    """Tests for markdown fence removal."""

    @pytest.mark.parametrize(
        "text",
        [
            '```json\n{"a": 1}\n```',
            '```\n{"a": 1}\n```',
            '  ```JSON\n{"a": 1}```  ',
            '{"a": 1}',
        ],
    )
    def test_fences_removed(self, text):
        assert strip_code_fences(text) == '{"a": 1}'

    def test_inner_backticks_untouched(self):
        """Only a surrounding fence is removed."""
        text = 'prefix ```json\n{"a": 1}\n```'
        assert strip_code_fences(text) == text


class TestAccept:
    """Tests for accept()."""

    def test_valid_object_accepted(self):
        outcome = accept(
            '{"date": "2025-03-14", "projectName": "Der Bergdoktor", "locations": []}',
            BASIC,
        )
        assert isinstance(outcome, Accepted)
        assert outcome.data["projectName"] == "Der Bergdoktor"

    def test_fenced_object_accepted(self):
        outcome = accept(
            '```json\n{"date": "2025-03-14", "projectName": "X", "locations": ["A"]}\n```',
            BASIC,
        )
        assert isinstance(outcome, Accepted)
        assert outcome.data["locations"] == ["A"]

    def test_extra_keys_survive(self):
        """The parsed JSON is returned, not a model dump."""
        outcome = accept(
            '{"date": "d", "projectName": "p", "locations": [], "motiv": "Park"}',
            BASIC,
        )
        assert isinstance(outcome, Accepted)
        assert outcome.data["motiv"] == "Park"

    def test_invalid_json_is_parse_failure(self):
        outcome = accept("Here is the result: {date: 2025}", BASIC)
        assert isinstance(outcome, ParseFailure)
        assert outcome.error

    def test_missing_key_is_schema_failure(self):
        outcome = accept('{"date": "2025-03-14", "projectName": "X", "locations": []}', COMPANY)

        assert isinstance(outcome, SchemaFailure)
        assert "missing required field 'productionCompany'" in outcome.problems
        assert outcome.data["projectName"] == "X"

    def test_wrong_type_is_schema_failure(self):
        outcome = accept('{"date": "d", "projectName": "p", "locations": "Wien"}', BASIC)

        assert isinstance(outcome, SchemaFailure)
        assert any("locations" in p for p in outcome.problems)

    def test_non_object_is_schema_failure(self):
        """A JSON array parses but does not conform."""
        outcome = accept("[1, 2, 3]", BASIC)

        assert isinstance(outcome, SchemaFailure)
        assert outcome.summary == "expected a JSON object, got list"
