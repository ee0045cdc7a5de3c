"""
TabTagger v1 - Response Normalizer Tests
"""

import json

from conftest import suggestions_body

from tagging_service.models import TabDescriptor
from tagging_service.normalizer import (
    ParseTier,
    json_candidate,
    normalize,
    parse,
    parse_fallback,
    strip_think_blocks,
)


class TestStrictParse:
    """Tests for the JSON tier."""

    def test_index_round_trip(self, tabs):
        """tabIndex 1 maps to the first tab's id with tags as given."""
        raw = '{"suggestions":[{"tabIndex":1,"tags":["a","b"]}]}'
        result = parse(raw, tabs)
        assert len(result) == 1
        assert result[0].tab_id == 101
        assert result[0].tags == ["a", "b"]

    def test_out_of_bounds_index_dropped(self, tabs):
        raw = '{"suggestions":[{"tabIndex":99,"tags":["a","b"]}]}'
        assert parse(raw, tabs) == []

    def test_zero_index_dropped(self, tabs):
        raw = '{"suggestions":[{"tabIndex":0,"tags":["a"]}]}'
        assert parse(raw, tabs) == []

    def test_missing_tags_dropped(self, tabs):
        raw = '{"suggestions":[{"tabIndex":1},{"tabIndex":2,"tags":["news"]}]}'
        result = parse(raw, tabs)
        assert [s.tab_id for s in result] == [202]

    def test_order_follows_response_not_tabs(self, tabs):
        raw = suggestions_body((2, ["news"]), (1, ["docs"]))
        result = parse(raw, tabs)
        assert [s.tab_id for s in result] == [202, 101]

    def test_tags_not_bounded_at_this_stage(self, tabs):
        """Count and length limits are applied later, by the orchestrator."""
        tags = ["one", "two", "three", "four", "a-very-long-tag-name-indeed"]
        result = parse(suggestions_body((1, tags)), tabs)
        assert result[0].tags == tags

    def test_json_wrapped_in_prose(self, tabs):
        raw = "Sure! Here are the tags:\n" + suggestions_body((1, ["python"])) + "\nHope this helps."
        outcome = normalize(raw, tabs)
        assert outcome.tier == ParseTier.STRICT
        assert outcome.suggestions[0].tags == ["python"]

    def test_string_tab_index_accepted(self, tabs):
        raw = '{"suggestions":[{"tabIndex":"2","tags":["news"]}]}'
        assert parse(raw, tabs)[0].tab_id == 202

    def test_non_ascii_digit_index_dropped_alone(self, tabs):
        """A superscript tabIndex drops only its own entry."""
        raw = '{"suggestions":[{"tabIndex":1,"tags":["a"]},{"tabIndex":"²","tags":["b"]}]}'
        outcome = normalize(raw, tabs)
        assert outcome.tier == ParseTier.STRICT
        assert [(s.tab_id, s.tags) for s in outcome.suggestions] == [(101, ["a"])]

    def test_non_finite_index_dropped_alone(self, tabs):
        raw = '{"suggestions":[{"tabIndex":Infinity,"tags":["x"]},{"tabIndex":2,"tags":["news"]}]}'
        assert [s.tab_id for s in parse(raw, tabs)] == [202]

    def test_non_object_entries_skipped(self, tabs):
        raw = '{"suggestions":["junk", 3, {"tabIndex":1,"tags":["docs"]}]}'
        assert [s.tab_id for s in parse(raw, tabs)] == [101]

    def test_strict_tier_reported_even_when_all_dropped(self, tabs):
        outcome = normalize(suggestions_body((42, ["x"])), tabs)
        assert outcome.tier == ParseTier.STRICT
        assert outcome.suggestions == []


class TestThinkBlocks:
    """Tests for chain-of-thought stripping."""

    def test_think_block_stripped(self):
        tabs = [TabDescriptor(id="only", title="t")]
        body = '{"suggestions":[{"tabIndex":1,"tags":["x"]}]}'
        with_think = parse("<think>reasoning</think>" + body, tabs)
        without_think = parse(body, tabs)
        assert with_think == without_think
        assert with_think[0].tags == ["x"]

    def test_braces_inside_think_block_ignored(self, tabs):
        """Braces in the reasoning must not widen the JSON slice."""
        raw = "<think>maybe {tabIndex: 1}?\n{not json}</think>\n" + suggestions_body((1, ["docs"]))
        outcome = normalize(raw, tabs)
        assert outcome.tier == ParseTier.STRICT
        assert outcome.suggestions[0].tags == ["docs"]

    def test_multiple_blocks_removed(self):
        assert strip_think_blocks("<think>a</think>keep<THINK>\nb\n</THINK>") == "keep"


class TestJsonCandidate:
    """Tests for locating the JSON span."""

    def test_first_open_to_last_close(self):
        assert json_candidate('x {"a": {"b": 1}} y') == '{"a": {"b": 1}}'

    def test_no_braces_returns_text(self):
        assert json_candidate("no json here") == "no json here"

    def test_reversed_braces_returns_text(self):
        assert json_candidate("} backwards {") == "} backwards {"


class TestFallbackParse:
    """Tests for the natural-language tier."""

    def test_fallback_activation(self, tabs):
        outcome = normalize("Tab 1: work, docs\nTab 2: misc", tabs)
        assert outcome.tier == ParseTier.FALLBACK
        assert [(s.tab_id, s.tags) for s in outcome.suggestions] == [
            (101, ["work", "docs"]),
            (202, ["misc"]),
        ]

    def test_fallback_tag_cap(self, tabs):
        result = parse("Tab 1: alpha, beta, gamma, delta, epsilon", tabs)
        assert result[0].tags == ["alpha", "beta", "gamma"]

    def test_hash_prefix_and_case(self, tabs):
        result = parse_fallback("#2 News, Tech", tabs)
        assert result[0].tab_id == 202
        assert result[0].tags == ["news", "tech"]

    def test_long_tokens_filtered(self, tabs):
        result = parse_fallback("tab 1: ok, this-tag-is-far-too-long-to-keep", tabs)
        assert result[0].tags == ["ok"]

    def test_out_of_bounds_line_dropped(self, tabs):
        assert parse_fallback("Tab 7: news", tabs) == []

    def test_unmatched_lines_ignored(self, tabs):
        raw = "Here are my thoughts.\nTab 2: social\nThanks!"
        assert [(s.tab_id, s.tags) for s in parse(raw, tabs)] == [(202, ["social"])]

    def test_json_without_suggestions_falls_back(self, tabs):
        raw = '{"answer": "see below"}\nTab 1: reading'
        outcome = normalize(raw, tabs)
        assert outcome.tier == ParseTier.FALLBACK
        assert outcome.suggestions[0].tags == ["reading"]

    def test_suggestions_not_a_list_falls_back(self, tabs):
        raw = json.dumps({"suggestions": {"tabIndex": 1}}) + "\nTab 2: misc"
        outcome = normalize(raw, tabs)
        assert outcome.tier == ParseTier.FALLBACK


class TestTotalFailure:
    """Tests for output nothing can be recovered from."""

    def test_prose_only_yields_empty(self, tabs):
        outcome = normalize("I cannot help with that request.", tabs)
        assert outcome.tier == ParseTier.EMPTY
        assert outcome.suggestions == []

    def test_empty_string(self, tabs):
        assert parse("", tabs) == []

    def test_no_tabs(self):
        assert parse(suggestions_body((1, ["a"])), []) == []

    def test_broken_json_without_fallback_lines(self, tabs):
        assert parse('{"suggestions": [{"tabIndex": 1, "tags": ["a"', tabs) == []
