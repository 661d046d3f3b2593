"""
DrawCalc Backend - Model Reply Parser Tests
===========================================

What we test:
    ✅ Strict decode of clean JSON arrays (one, many, empty)
    ✅ Salvage of arrays wrapped in prose or markdown fences
    ✅ Failure (not empty success) for replies without brackets
    ✅ The reported error is the whole-text one, not the salvage one
"""

import pytest

from drawcalc.exceptions import MalformedUpstreamResponseError
from drawcalc.services.response_parser import extract_bracketed_span, parse_model_reply


class TestStrictDecode:
    def test_single_result(self):
        results = parse_model_reply('[{"expr": "2+2", "result": 4}]')
        assert len(results) == 1
        assert results[0].expression == "2+2"
        assert results[0].result == 4
        assert results[0].assign is False

    def test_assignments(self):
        results = parse_model_reply(
            '[{"expr": "x", "result": 2, "assign": true},'
            ' {"expr": "y", "result": 5, "assign": true}]'
        )
        assert [(r.expression, r.result, r.assign) for r in results] == [
            ("x", 2, True),
            ("y", 5, True),
        ]

    def test_empty_array(self):
        assert parse_model_reply("[]") == []

    def test_string_result_for_abstract_concept(self):
        results = parse_model_reply('[{"expr": "Two hearts joined", "result": "love"}]')
        assert results[0].result == "love"

    def test_expression_key_is_accepted(self):
        results = parse_model_reply('[{"expression": "3*4", "result": 12}]')
        assert results[0].expression == "3*4"


class TestSalvageParse:
    def test_prose_around_array(self):
        clean = '[{"expr": "5/2", "result": 2.5}]'
        noisy = f"Sure! Here is the answer:\n{clean}\nLet me know if you need more."
        assert parse_model_reply(noisy) == parse_model_reply(clean)

    def test_markdown_fence(self):
        reply = '```json\n[{"expr": "7-8", "result": -1}]\n```'
        results = parse_model_reply(reply)
        assert results[0].expression == "7-8"
        assert results[0].result == -1

    def test_multiple_results_in_prose(self):
        reply = 'Solved: [{"expr": "x", "result": 4, "assign": true}, {"expr": "y", "result": 5, "assign": true}] done'
        assert len(parse_model_reply(reply)) == 2


class TestParseFailures:
    def test_no_brackets_fails(self):
        with pytest.raises(MalformedUpstreamResponseError, match="error parsing response as JSON"):
            parse_model_reply("The answer is four.")

    def test_bare_object_fails(self):
        with pytest.raises(MalformedUpstreamResponseError):
            parse_model_reply('{"expr": "2+2", "result": 4}')

    def test_python_literals_fail(self):
        """True/False are not JSON; the slice is still invalid after salvage."""
        with pytest.raises(MalformedUpstreamResponseError):
            parse_model_reply('[{"expr": "x", "result": 2, "assign": True}]')

    @pytest.mark.parametrize("assign", ['"true"', "1", '"yes"'])
    def test_non_boolean_assign_fails(self, assign):
        with pytest.raises(MalformedUpstreamResponseError):
            parse_model_reply(f'[{{"expr": "x", "result": 2, "assign": {assign}}}]')

    def test_multiple_bracketed_spans_are_not_narrowed(self):
        reply = 'Reading [x] from the image. [{"expr": "x", "result": 1}]'
        with pytest.raises(MalformedUpstreamResponseError):
            parse_model_reply(reply)

    def test_original_error_is_the_cause(self):
        reply = "no json here"
        with pytest.raises(MalformedUpstreamResponseError) as excinfo:
            parse_model_reply(reply)
        assert excinfo.value.__cause__ is not None
        assert excinfo.value.context["reply_length"] == len(reply)


class TestExtractBracketedSpan:
    def test_outermost_span(self):
        assert extract_bracketed_span("a [1, [2]] b") == "[1, [2]]"

    def test_no_brackets_returns_whole_text(self):
        assert extract_bracketed_span("plain") == "plain"

    def test_reversed_brackets(self):
        assert extract_bracketed_span("] then [") is None
