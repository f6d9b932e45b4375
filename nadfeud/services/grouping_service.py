"""Answer grouping: cluster the raw answers of a question into at most 8 labeled groups.

Two automatic implementations share one contract, `classify(question, answers)`:
- LLMGroupingClassifier asks an OpenAI-compatible model (Gemini by default).
- MockGroupingClassifier groups identical answers locally, deterministic, for dev and tests.
The manual path (admin typed groups) goes through `manual_groups`.

Percentages are always computed against the full answer count, so after the top-8
cut they may sum to less than 100.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Protocol, Union

from openai import OpenAIError
from pydantic import BaseModel, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from nadfeud.core.config import settings
from nadfeud.core.errors import ValidationError
from nadfeud.services.llm_service import complete_json, dump_debug, parse_json_content
from nadfeud.services.scoring_service import normalize, round_points

logger = logging.getLogger(__name__)

MAX_GROUPS = 8


class GroupSpec(BaseModel):
    group_text: str = Field(..., description="Group label")
    count: int = Field(..., ge=0, description="Answers in this group")
    percentage: float = Field(..., ge=0, le=100, description="Share of all answers, 0-100")

    @field_validator("group_text")
    @classmethod
    def _label_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("group_text must not be blank")
        return v


class _ModelGroup(BaseModel):
    """One element as the model returns it. Its percentage is recomputed, so it is optional here."""
    group_text: str
    count: int = Field(..., ge=0)
    percentage: float | None = None


_model_groups_adapter = TypeAdapter(list[_ModelGroup])


@dataclass(frozen=True)
class ClassificationOk:
    groups: list[GroupSpec]
    ok: bool = True


@dataclass(frozen=True)
class ClassificationErr:
    reason: str
    ok: bool = False


ClassificationResult = Union[ClassificationOk, ClassificationErr]


class GroupingClassifier(Protocol):
    async def classify(self, question: str, answers: list[str]) -> ClassificationResult:
        ...


def _percentage(count: int, total: int) -> float:
    return round(count * 100.0 / total, 2) if total else 0.0


def finalize_groups(groups: Iterable[tuple[str, int]], total: int) -> list[GroupSpec]:
    """Sort (label, count) pairs by count descending (stable), keep the top 8, percentages over `total`."""
    ordered = sorted(groups, key=lambda g: g[1], reverse=True)[:MAX_GROUPS]
    return [
        GroupSpec(group_text=label, count=count, percentage=_percentage(count, total))
        for label, count in ordered
    ]


def parse_classifier_response(raw: str, total: int) -> ClassificationResult:
    """
    Validate a model reply: a JSON array of {group_text, count, percentage}, or {"groups": [...]}.
    Anything else becomes a ClassificationErr.
    """
    try:
        data: Any = parse_json_content(raw)
    except ValueError as e:
        return ClassificationErr(str(e))
    if isinstance(data, dict):
        data = data.get("groups")
    if not isinstance(data, list):
        return ClassificationErr("expected a JSON array of groups")
    try:
        items = _model_groups_adapter.validate_python(data)
    except PydanticValidationError as e:
        return ClassificationErr(f"malformed groups in model response ({e.error_count()} errors)")
    pairs = [(item.group_text.strip(), item.count) for item in items]
    if any(not label for label, _ in pairs):
        return ClassificationErr("model returned a blank group label")
    if not pairs:
        return ClassificationErr("model returned no groups")
    if sum(count for _, count in pairs) > total:
        return ClassificationErr(f"group counts exceed the {total} submitted answers")
    return ClassificationOk(finalize_groups(pairs, total))


def build_grouping_prompt(question: str, answers: list[str]) -> str:
    return f"""You are an intelligent answer-grouping assistant for a game called "Nad Feud".
Your task is to analyze a list of user-submitted answers to a specific question and group them based on semantic similarity.

Question: "{question}"

Here is the list of raw answers submitted by users:
{json.dumps(answers, ensure_ascii=False)}

Please perform the following steps:
1. Group answers that mean the same thing. For example, "cat", "cats", "a cat", and "kitty" should be in the same group.
2. For each group, create a concise and representative label (e.g., "Cats").
3. Count how many raw answers fall into each group.
4. Calculate the percentage of total users that fall into each group.
5. Return ONLY the top {MAX_GROUPS} groups, sorted by count in descending order.

Reply with a JSON object of the form {{"groups": [{{"group_text": string, "count": integer, "percentage": number}}]}}.
Do not add any extra text or markdown."""


class LLMGroupingClassifier:
    def __init__(self, model: str | None = None):
        self.model = model or settings.grouping_model

    async def classify(self, question: str, answers: list[str]) -> ClassificationResult:
        if not answers:
            return ClassificationErr("no answers to group")
        prompt = build_grouping_prompt(question, answers)
        logger.info("[grouping] model=%s answers=%d", self.model, len(answers))
        try:
            raw = await complete_json(prompt, model=self.model)
        except OpenAIError as e:
            logger.warning("[grouping] model call failed: %s", e)
            return ClassificationErr(f"model call failed: {e}")
        await dump_debug("grouping_last_response", {"question": question, "answers": answers, "raw": raw})
        result = parse_classifier_response(raw, len(answers))
        if not result.ok:
            logger.warning("[grouping] unusable model response: %s", result.reason)
        return result


class MockGroupingClassifier:
    """Groups answers that normalize to the same text. Label is the first spelling seen, capitalized."""

    async def classify(self, question: str, answers: list[str]) -> ClassificationResult:
        if not answers:
            return ClassificationErr("no answers to group")
        buckets: dict[str, list] = {}
        for answer in answers:
            key = normalize(answer) or answer.strip().lower()
            if key not in buckets:
                label = answer.strip() or key
                buckets[key] = [label[:1].upper() + label[1:], 0]
            buckets[key][1] += 1
        groups = finalize_groups(((label, count) for label, count in buckets.values()), len(answers))
        return ClassificationOk(groups)


def manual_groups(entries: Iterable[Any]) -> list[GroupSpec]:
    """
    Admin-supplied groups. Entries have `group_text` and `percentage` (attributes or keys).
    No real counts exist on this path, so count is the rounded percentage.
    """
    groups: list[GroupSpec] = []
    for entry in entries:
        if isinstance(entry, dict):
            group_text, percentage = entry.get("group_text"), entry.get("percentage")
        else:
            group_text, percentage = getattr(entry, "group_text", None), getattr(entry, "percentage", None)
        try:
            pct = float(percentage)
            groups.append(GroupSpec(group_text=group_text or "", count=round_points(pct), percentage=pct))
        except (TypeError, ValueError, PydanticValidationError) as e:
            raise ValidationError(f"invalid group {group_text!r}: {e}") from e
    if not groups:
        raise ValidationError("at least one group is required")
    if len(groups) > MAX_GROUPS:
        raise ValidationError(f"at most {MAX_GROUPS} groups are allowed")
    return groups


def get_grouping_classifier() -> GroupingClassifier:
    if settings.ai_backend == "mock":
        return MockGroupingClassifier()
    return LLMGroupingClassifier()
