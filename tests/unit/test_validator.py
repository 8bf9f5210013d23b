# tests/unit/test_validator.py
"""Tests for ResponseValidator hallucination filtering and frame parsing."""

import copy

import pytest

from dialect_bridge.capabilities import CapabilityRegistry, Dialect, ModelCapabilities
from dialect_bridge.errors import ProtocolError
from dialect_bridge.translation.validator import (
    RawResponse,
    ResponseValidator,
    ValidatorSettings,
    parse_frame,
)
from dialect_bridge.types import BackendToolCall, CanonicalTool, FinishReason

SEARCH = CanonicalTool(name="search", description="Search", parameter_schema={"properties": {}})
READ = CanonicalTool(name="read_file", description="Read", parameter_schema={"properties": {}})

OPENAI = ModelCapabilities(supports_tools=True, dialect=Dialect.OPENAI, max_tools=8)


def _raw(*calls, text="", done=True, done_reason="stop"):
    return RawResponse(
        text=text,
        tool_calls=[BackendToolCall(name=n, arguments=a) for n, a in calls],
        done=done,
        done_reason=done_reason,
        prompt_eval_count=10,
        eval_count=5,
        model_id="test-model",
    )


class TestExistenceCheck:
    def test_unregistered_call_dropped(self):
        result = ResponseValidator().validate(_raw(("unregistered_fn", "{}")), OPENAI, [])

        assert result.response.tool_calls == []
        assert result.stats.unknown_tool == 1
        assert result.stats.hallucinated == 1
        assert result.stats.total == 1
        assert result.stats.valid == 0

    def test_registered_call_kept(self):
        result = ResponseValidator().validate(_raw(("search", '{"q": "x"}')), OPENAI, [SEARCH])

        assert len(result.response.tool_calls) == 1
        call = result.response.tool_calls[0]
        assert call.name == "search"
        assert call.args == {"q": "x"}
        assert result.stats.hallucinated == 0
        assert result.stats.warnings == []


class TestArgumentCheck:
    def test_malformed_json_dropped(self):
        result = ResponseValidator().validate(_raw(("search", "not-json")), OPENAI, [SEARCH])

        assert result.response.tool_calls == []
        assert result.stats.invalid_json == 1
        assert result.stats.hallucinated == 1
        assert any("Invalid JSON" in w for w in result.stats.warnings)

    @pytest.mark.parametrize("arguments", [None, 42, ["a"], "[1, 2]", '"text"'])
    def test_non_object_arguments_dropped(self, arguments):
        result = ResponseValidator().validate(_raw(("search", arguments)), OPENAI, [SEARCH])
        assert result.stats.invalid_json == 1
        assert result.response.tool_calls == []

    def test_dict_arguments_accepted(self):
        result = ResponseValidator().validate(_raw(("search", {"q": "x"})), OPENAI, [SEARCH])
        assert result.response.tool_calls[0].args == {"q": "x"}


class TestDialectHeuristics:
    def test_markup_name_rejected_for_custom_dialect(self):
        caps = ModelCapabilities(supports_tools=True, dialect=Dialect.CUSTOM, max_tools=8)
        tool = CanonicalTool(name="<search>", parameter_schema={})
        result = ResponseValidator().validate(_raw(("<search>", "{}")), caps, [tool])

        assert result.response.tool_calls == []
        assert result.stats.hallucinated == 1
        assert result.stats.unknown_tool == 0

    def test_markup_name_allowed_for_openai(self):
        tool = CanonicalTool(name="<search>", parameter_schema={})
        result = ResponseValidator().validate(_raw(("<search>", "{}")), OPENAI, [tool])
        assert len(result.response.tool_calls) == 1

    def test_poor_multi_turn_follow_up_name_rejected(self):
        caps = CapabilityRegistry().get("deepseek-chat")
        tool = CanonicalTool(name="next_page", parameter_schema={})
        result = ResponseValidator().validate(_raw(("next_page", "{}")), caps, [tool])

        assert result.response.tool_calls == []
        assert result.stats.hallucinated == 1

    def test_poor_multi_turn_heuristic_can_be_disabled(self):
        caps = CapabilityRegistry().get("deepseek-chat")
        tool = CanonicalTool(name="next_page", parameter_schema={})
        validator = ResponseValidator(ValidatorSettings(poor_multi_turn_heuristic=False))
        result = validator.validate(_raw(("next_page", "{}")), caps, [tool])

        assert len(result.response.tool_calls) == 1

    def test_custom_tokens(self):
        caps = CapabilityRegistry().get("deepseek-chat")
        validator = ResponseValidator(ValidatorSettings(suspicious_name_tokens=("read",)))
        result = validator.validate(_raw(("read_file", "{}"), ("search", "{}")), caps, [READ, SEARCH])

        assert [c.name for c in result.response.tool_calls] == ["search"]

    def test_hermes_unwraps_nested_parameters(self):
        caps = CapabilityRegistry().get("qwen2.5-coder:32b")
        raw = _raw(("search", '{"parameters": {"q": "x"}}'))
        result = ResponseValidator().validate(raw, caps, [SEARCH])
        assert result.response.tool_calls[0].args == {"q": "x"}


class TestResponseAssembly:
    def test_mixed_calls_counts_and_summary(self):
        raw = _raw(("search", "{}"), ("ghost", "{}"), ("read_file", "{bad"))
        result = ResponseValidator().validate(raw, OPENAI, [SEARCH, READ])

        stats = result.stats
        assert (stats.total, stats.valid, stats.hallucinated) == (3, 1, 2)
        assert stats.unknown_tool == 1
        assert stats.invalid_json == 1
        assert stats.warnings[-1] == "Filtered 2 hallucinated tool call(s) from test-model"
        assert result.response.stats is stats

    def test_input_not_mutated(self):
        raw = _raw(("search", {"parameters": {"q": "x"}}))
        before = copy.deepcopy(raw)
        caps = CapabilityRegistry().get("qwen2.5-coder:32b")
        ResponseValidator().validate(raw, caps, [SEARCH])
        assert raw == before

    def test_text_part_kept(self):
        result = ResponseValidator().validate(_raw(text="Hello"), OPENAI, [])
        assert result.response.text_parts == ["Hello"]

    def test_whitespace_text_kept(self):
        result = ResponseValidator().validate(_raw(text=" ", done=False), OPENAI, [])
        assert result.response.text_parts == [" "]

    def test_empty_response_has_one_empty_text_part(self):
        result = ResponseValidator().validate(_raw(), OPENAI, [])
        assert result.response.text_parts == [""]

    def test_calls_without_text_have_no_text_parts(self):
        result = ResponseValidator().validate(_raw(("search", "{}")), OPENAI, [SEARCH])
        assert result.response.text_parts == []

    @pytest.mark.parametrize(
        "done,done_reason,expected",
        [
            (False, None, None),
            (True, "stop", FinishReason.STOP),
            (True, "length", FinishReason.MAX_TOKENS),
            (True, "load", FinishReason.OTHER),
            (True, None, FinishReason.STOP),
        ],
    )
    def test_finish_reason(self, done, done_reason, expected):
        raw = _raw(done=done, done_reason=done_reason)
        assert ResponseValidator().validate(raw, OPENAI, []).response.finish_reason is expected

    def test_usage(self):
        usage = ResponseValidator().validate(_raw(), OPENAI, []).response.usage
        assert (usage.prompt_tokens, usage.completion_tokens, usage.total_tokens) == (10, 5, 15)


class TestDetectResponseIssues:
    def test_describing_tools(self):
        raw = _raw(text="I need to call the search tool")
        issues = ResponseValidator.detect_response_issues(raw, OPENAI)
        assert "Model is describing tool usage instead of calling tools" in issues

    def test_poor_multi_turn_many_calls(self):
        caps = CapabilityRegistry().get("deepseek-chat")
        raw = _raw(*[("search", "{}")] * 4)
        issues = ResponseValidator.detect_response_issues(raw, caps)
        assert any("poor multi-turn" in i for i in issues)

    def test_issues_never_drop_calls(self):
        raw = _raw(("search", "{}"), text="I should use tool_search")
        result = ResponseValidator().validate(raw, OPENAI, [SEARCH])
        assert len(result.response.tool_calls) == 1
        assert len(result.stats.model_issues) == 2


class TestParseFrame:
    def test_full_frame(self):
        raw = parse_frame(
            {
                "model": "llama3.1:latest",
                "message": {
                    "role": "assistant",
                    "content": "hi",
                    "tool_calls": [{"function": {"name": "search", "arguments": {"q": "x"}}}],
                },
                "done": True,
                "done_reason": "stop",
                "prompt_eval_count": 7,
                "eval_count": 3,
            }
        )
        assert raw.text == "hi"
        assert raw.tool_calls == [BackendToolCall(name="search", arguments={"q": "x"})]
        assert raw.done is True
        assert raw.model_id == "llama3.1:latest"
        assert (raw.prompt_eval_count, raw.eval_count) == (7, 3)

    def test_minimal_frame(self):
        raw = parse_frame({"message": {"content": "partial"}})
        assert raw.text == "partial"
        assert raw.done is False
        assert raw.tool_calls == []

    def test_malformed_tool_call_entry_keeps_empty_name(self):
        raw = parse_frame({"message": {"tool_calls": ["junk"]}})
        assert raw.tool_calls == [BackendToolCall(name="", arguments=None)]

    @pytest.mark.parametrize("obj", [[1, 2], "text", {"message": "oops"}, {"error": "model not found"}])
    def test_bad_shapes_raise(self, obj):
        with pytest.raises(ProtocolError):
            parse_frame(obj)
