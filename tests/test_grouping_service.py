"""Tests for classifier response validation and the grouping implementations."""
import json

import pytest
from openai import OpenAIError

from nadfeud.core.errors import ValidationError
from nadfeud.services import grouping_service
from nadfeud.services.grouping_service import (
    MAX_GROUPS,
    LLMGroupingClassifier,
    MockGroupingClassifier,
    build_grouping_prompt,
    manual_groups,
    parse_classifier_response,
)


class TestParseClassifierResponse:
    def test_plain_array(self):
        raw = json.dumps([
            {"group_text": "Cat", "count": 2, "percentage": 66.67},
            {"group_text": "Dog", "count": 1, "percentage": 33.33},
        ])
        result = parse_classifier_response(raw, 3)
        assert result.ok
        assert [(g.group_text, g.count, g.percentage) for g in result.groups] == [
            ("Cat", 2, 66.67),
            ("Dog", 1, 33.33),
        ]

    def test_wrapped_object_and_markdown_fence(self):
        raw = "```json\n" + json.dumps({"groups": [{"group_text": "Pizza", "count": 4, "percentage": 80}]}) + "\n```"
        result = parse_classifier_response(raw, 5)
        assert result.ok
        assert result.groups[0].group_text == "Pizza"
        assert result.groups[0].percentage == 80.0

    def test_groups_are_sorted_by_count_descending(self):
        raw = json.dumps([
            {"group_text": "Dog", "count": 1, "percentage": 25},
            {"group_text": "Cat", "count": 3, "percentage": 75},
        ])
        result = parse_classifier_response(raw, 4)
        assert [g.group_text for g in result.groups] == ["Cat", "Dog"]

    def test_top_eight_keep_percentages_over_all_answers(self):
        items = [{"group_text": f"Answer {i}", "count": 1, "percentage": 50} for i in range(10)]
        result = parse_classifier_response(json.dumps(items), 10)
        assert result.ok
        assert len(result.groups) == MAX_GROUPS
        assert all(g.percentage == 10.0 for g in result.groups)
        assert sum(g.percentage for g in result.groups) == pytest.approx(80.0)

    def test_model_percentages_are_replaced_by_count_over_total(self):
        raw = json.dumps([{"group_text": "Cat", "count": 2, "percentage": 100}])
        result = parse_classifier_response(raw, 3)
        assert result.groups[0].percentage == 66.67

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "not json at all",
            json.dumps({"answer": "cats"}),
            json.dumps([{"group_text": "Cat"}]),
            json.dumps([{"group_text": "Cat", "count": -1, "percentage": 10}]),
            json.dumps([{"group_text": "   ", "count": 1, "percentage": 10}]),
            json.dumps([]),
        ],
    )
    def test_unusable_responses_are_errors(self, raw):
        result = parse_classifier_response(raw, 3)
        assert not result.ok
        assert result.reason

    def test_counts_larger_than_answer_total_are_rejected(self):
        raw = json.dumps([{"group_text": "Cat", "count": 5, "percentage": 100}])
        assert not parse_classifier_response(raw, 3).ok


class TestMockGroupingClassifier:
    @pytest.mark.asyncio
    async def test_groups_identical_answers(self):
        result = await MockGroupingClassifier().classify("Name a pet", ["cat", "Cats", "dog", " cat "])
        assert result.ok
        assert [(g.group_text, g.count, g.percentage) for g in result.groups] == [
            ("Cat", 3, 75.0),
            ("Dog", 1, 25.0),
        ]

    @pytest.mark.asyncio
    async def test_caps_at_eight_groups(self):
        answers = [f"answer {i}" for i in range(12)]
        result = await MockGroupingClassifier().classify("q", answers)
        assert len(result.groups) == MAX_GROUPS
        assert all(g.percentage == round(100 / 12, 2) for g in result.groups)

    @pytest.mark.asyncio
    async def test_no_answers_is_an_error(self):
        result = await MockGroupingClassifier().classify("q", [])
        assert not result.ok


class TestLLMGroupingClassifier:
    @pytest.mark.asyncio
    async def test_valid_model_reply(self, monkeypatch):
        seen = {}

        async def fake_complete_json(prompt, *, model=None):
            seen["prompt"] = prompt
            seen["model"] = model
            return json.dumps({"groups": [{"group_text": "Cats", "count": 2, "percentage": 66.67}]})

        monkeypatch.setattr(grouping_service, "complete_json", fake_complete_json)
        result = await LLMGroupingClassifier(model="test-model").classify("Name a pet", ["cat", "cats", "dog"])
        assert result.ok
        assert result.groups[0].group_text == "Cats"
        assert seen["model"] == "test-model"
        assert '"cats"' in seen["prompt"]

    @pytest.mark.asyncio
    async def test_api_error_becomes_classification_error(self, monkeypatch):
        async def failing_complete_json(prompt, *, model=None):
            raise OpenAIError("quota exceeded")

        monkeypatch.setattr(grouping_service, "complete_json", failing_complete_json)
        result = await LLMGroupingClassifier().classify("Name a pet", ["cat"])
        assert not result.ok
        assert "quota exceeded" in result.reason

    @pytest.mark.asyncio
    async def test_malformed_reply_becomes_classification_error(self, monkeypatch):
        async def bad_complete_json(prompt, *, model=None):
            return "Sure! Here are your groups: cats and dogs"

        monkeypatch.setattr(grouping_service, "complete_json", bad_complete_json)
        result = await LLMGroupingClassifier().classify("Name a pet", ["cat"])
        assert not result.ok

    def test_prompt_lists_question_and_answers(self):
        prompt = build_grouping_prompt("Name a pet", ["cat", "dog"])
        assert 'Question: "Name a pet"' in prompt
        assert '["cat", "dog"]' in prompt
        assert f"top {MAX_GROUPS} groups" in prompt


class TestManualGroups:
    def test_count_is_rounded_percentage(self):
        groups = manual_groups([
            {"group_text": "Cats", "percentage": 60},
            {"group_text": "Dogs", "percentage": 39.5},
        ])
        assert [(g.group_text, g.count, g.percentage) for g in groups] == [("Cats", 60, 60.0), ("Dogs", 40, 39.5)]

    def test_keeps_admin_order(self):
        groups = manual_groups([{"group_text": "Dogs", "percentage": 10}, {"group_text": "Cats", "percentage": 90}])
        assert [g.group_text for g in groups] == ["Dogs", "Cats"]

    @pytest.mark.parametrize(
        "entries",
        [
            [],
            [{"group_text": "", "percentage": 50}],
            [{"group_text": "Cats", "percentage": 150}],
            [{"group_text": "Cats", "percentage": -1}],
            [{"group_text": "Cats", "percentage": "lots"}],
            [{"group_text": "Cats"}],
            [{"group_text": f"G{i}", "percentage": 10} for i in range(MAX_GROUPS + 1)],
        ],
    )
    def test_invalid_entries_are_rejected(self, entries):
        with pytest.raises(ValidationError):
            manual_groups(entries)
