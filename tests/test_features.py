"""
Tests for features parsing and display helpers
"""

import pytest
from subbill.modules.services.features import (
    parse_features, normalize_features, features_to_text, FEATURES_FORMAT_ERROR
)


class TestParseFeatures:

    def test_json_array(self):
        assert parse_features('["Feature 1", "Feature 2"]') == ["Feature 1", "Feature 2"]

    def test_json_object(self):
        assert parse_features('{"Storage": "100 GB"}') == {"Storage": "100 GB"}

    def test_already_parsed_values_pass_through(self):
        assert parse_features(["a"]) == ["a"]
        assert parse_features({"a": 1}) == {"a": 1}

    @pytest.mark.parametrize("raw", ["not json", "[1, 2", "", "   ", '"just a string"', "42", None])
    def test_rejects_malformed_or_scalar_values(self, raw):
        with pytest.raises(ValueError) as exc_info:
            parse_features(raw)
        assert str(exc_info.value) == FEATURES_FORMAT_ERROR


class TestNormalizeFeatures:

    def test_none_is_empty(self):
        assert normalize_features(None) == []

    def test_stored_json_text_is_parsed(self):
        assert normalize_features('["A", "B"]') == ["A", "B"]

    def test_unreadable_value_is_empty(self):
        assert normalize_features("{broken") == []


class TestFeaturesToText:

    def test_list_is_dumped_as_json(self):
        assert features_to_text(["Offline", "4K"]) == '["Offline", "4K"]'

    def test_non_ascii_is_kept(self):
        assert features_to_text(["Café"]) == '["Café"]'

    def test_text_is_returned_as_is(self):
        assert features_to_text('["A"]') == '["A"]'

    def test_missing_value(self):
        assert features_to_text(None) == "[]"
