"""Tests for clarity_consent.detection.extraction: identifier extraction."""

from __future__ import annotations

import pydantic
import pytest

from clarity_consent.detection.extraction import extract_project_id


class TestEmptyValues:
    """Empty option values yield nothing."""

    @pytest.mark.parametrize("value", [None, "", "0", False, 0, [], {}])
    def test_returns_none(self, value: object) -> None:
        assert extract_project_id(value) is None


class TestStrictPattern:
    """The clarity.ms/tag/ URL pattern."""

    def test_tag_url(self) -> None:
        assert extract_project_id("https://www.clarity.ms/tag/aq9itx5whc") == "aq9itx5whc"

    def test_tag_url_inside_script_snippet(self) -> None:
        snippet = '(function(c,l,a,r,i,t,y){...})(window, document, "clarity", "script", "x");<script src="https://www.clarity.ms/tag/k2m4n6p8q0"></script>'
        assert extract_project_id(snippet) == "k2m4n6p8q0"

    def test_preferred_over_earlier_generic_run(self) -> None:
        assert extract_project_id("build 98765432 https://clarity.ms/tag/aq9itx5whc") == "aq9itx5whc"

    def test_invalid_strict_capture_does_not_fall_back(self) -> None:
        # The generic pattern alone would find "12345678".
        assert extract_project_id("ref 12345678 https://www.clarity.ms/tag/abcdefghij") is None


class TestGenericPattern:
    """The bare alphanumeric run pattern."""

    def test_bare_id(self) -> None:
        assert extract_project_id("aq9itx5whc") == "aq9itx5whc"

    def test_structured_value(self) -> None:
        assert extract_project_id({"note": "id: ab3d9f12xy"}) == "ab3d9f12xy"

    def test_list_value(self) -> None:
        assert extract_project_id(["aq9itx5whc"]) == "aq9itx5whc"

    def test_nested_structure(self) -> None:
        value = {"clarity": {"id": "ab3d9f12xy", "on": True}}
        assert extract_project_id(value) == "ab3d9f12xy"

    def test_numeric_value(self) -> None:
        assert extract_project_id(123456789) == "123456789"

    def test_blocklisted_only_run(self) -> None:
        assert extract_project_id("switching123") is None

    def test_first_run_failing_validation_stops_scan(self) -> None:
        assert extract_project_id("wordpress aq9itx5whc") is None

    def test_long_run_is_truncated_to_first_fifteen(self) -> None:
        assert extract_project_id("abcdefghijklmnop1234") is None

    def test_no_qualifying_run(self) -> None:
        assert extract_project_id("id: abc-123") is None

    def test_mixed_key_types(self) -> None:
        assert extract_project_id({1: "x", "a": "aq9itx5whc"}) == "aq9itx5whc"

    def test_pydantic_model_value(self) -> None:
        class ClaritySettings(pydantic.BaseModel):
            project: str

        assert extract_project_id([ClaritySettings(project="ab3d9f12xy")]) == "ab3d9f12xy"

    def test_mapping_scanned_in_insertion_order(self) -> None:
        assert extract_project_id({"zz": "abc12345xy", "aa": "def67890zz"}) == "abc12345xy"
