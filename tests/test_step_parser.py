"""
Tests for test step extraction
"""
import math

import pytest

from ali_dev_mcp.errors import ParseError
from ali_dev_mcp.step_parser import extract_steps, normalize, split_expected


class TestNormalize:
    """Test markup stripping"""

    @pytest.mark.parametrize("raw", [
        "",
        "<b></b>",
        "plain text",
        "<DIV><P>Open app</P></DIV>",
        "  <span>padded</span>  ",
        "a < b and c > d",
        "<<b>x>",
        "unterminated <tag",
    ])
    def test_idempotent(self, raw):
        once = normalize(raw)
        assert normalize(once) == once

    def test_empty_becomes_sentinel(self):
        assert normalize("") == "none"
        assert normalize("<b></b>") == "none"
        assert normalize("   ") == "none"

    def test_strips_tags_and_whitespace(self):
        assert normalize("  <DIV><P>Open <b>app</b></P></DIV> ") == "Open app"

    def test_malformed_markup_does_not_raise(self):
        assert normalize("<DIV>broken <P") == "broken <P"


class TestSplitExpected:
    """Test numbered expected result splitting"""

    def test_run_on_numbered_list(self):
        assert split_expected("1. First step2. Second step") == ["First step", "Second step"]

    def test_spaced_numbered_list(self):
        assert split_expected("1. Dialog opens 2. Title is shown 3. OK is enabled") == [
            "Dialog opens",
            "Title is shown",
            "OK is enabled",
        ]

    def test_plain_text(self):
        assert split_expected("just text") == ["just text"]

    def test_empty(self):
        assert split_expected("") == ["none"]
        assert split_expected("   ") == ["none"]

    def test_entities_removed(self):
        assert split_expected("Saved&nbsp;") == ["Saved"]
        assert split_expected("&nbsp;&amp;") == ["none"]

    def test_markers_without_text_fall_back_to_raw(self):
        assert split_expected("1. 2. 3.") == ["1. 2. 3."]


class TestExtractSteps:
    """Test step extraction from the steps field"""

    def test_pairs_actions_and_expected_results(self, sample_steps_markup):
        result = extract_steps(sample_steps_markup)

        assert [step.model_dump() for step in result.steps] == [
            {"step": 1, "action": "Open app", "expected_result": ["App opens"]},
            {"step": 2, "action": "Click save", "expected_result": ["Saved"]},
        ]

    def test_serialises_with_camel_case_keys(self, sample_steps_markup):
        data = extract_steps(sample_steps_markup).to_json_dict()
        assert data["steps"][0] == {"step": 1, "action": "Open app", "expectedResult": ["App opens"]}

    def test_odd_fragment_count_uses_sentinel(self, make_steps_markup):
        result = extract_steps(make_steps_markup("Open app", "App opens", "Close app"))

        assert len(result.steps) == 2
        assert result.steps[-1].action == "Close app"
        assert result.steps[-1].expected_result == ["none"]

    @pytest.mark.parametrize("count", [1, 2, 3, 4, 7])
    def test_step_count_and_numbering(self, count, make_steps_markup):
        fragments = [f"Fragment {chr(ord('a') + i)}" for i in range(count)]
        result = extract_steps(make_steps_markup(*fragments))

        assert len(result.steps) == math.ceil(count / 2)
        assert [step.step for step in result.steps] == list(range(1, len(result.steps) + 1))
        assert result.steps[-1].expected_result

    def test_no_matching_fragments(self):
        assert extract_steps("<steps><step id='1'></step></steps>").steps == []

    @pytest.mark.parametrize("markup", [None, ""])
    def test_missing_field(self, markup):
        assert extract_steps(markup).steps == []

    def test_tag_match_is_case_insensitive(self):
        markup = "<PARAMETERIZEDSTRING>Do it</PARAMETERIZEDSTRING><ParameterizedString>Done</ParameterizedString>"
        result = extract_steps(markup)

        assert result.steps[0].action == "Do it"
        assert result.steps[0].expected_result == ["Done"]

    def test_empty_fragment_becomes_sentinel(self):
        markup = '<parameterizedString isformatted="true" /><parameterizedString>Shown</parameterizedString>'
        result = extract_steps(markup)

        assert result.steps[0].action == "none"
        assert result.steps[0].expected_result == ["Shown"]

    def test_numbered_expected_results_with_entities(self, make_steps_markup):
        markup = make_steps_markup("Open dialog", "1. Dialog opens&amp;nbsp;2. Focus is on OK")
        result = extract_steps(markup)

        assert result.steps[0].expected_result == ["Dialog opens", "Focus is on OK"]

    def test_non_text_markup_raises_parse_error(self):
        with pytest.raises(ParseError):
            extract_steps(12345)
