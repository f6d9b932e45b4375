"""Scoring: match each raw answer to a group and award the group's rounded percentage.

Matching is plain text comparison. The semantic clustering already happened in the
classifier, so an answer matches a group label when, after normalizing both
(lowercase, trim, drop one trailing "s"), they are equal or one contains the other.
The first matching group in classifier order wins.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from nadfeud.core.errors import ScoreApplicationFailure
from nadfeud.repositories import score_repository

logger = logging.getLogger(__name__)


def normalize(text: str | None) -> str:
    """Lowercase, trim and strip a single trailing "s" (naive singular)."""
    value = (text or "").lower().strip()
    if value.endswith("s"):
        value = value[:-1]
    return value


def matches(answer_text: str, group_text: str) -> bool:
    answer = normalize(answer_text)
    label = normalize(group_text)
    # an empty string is a substring of everything
    if not answer or not label:
        return False
    return answer == label or answer in label or label in answer


def match_group(answer_text: str, groups: Sequence):
    """First group whose label matches the answer, or None. Groups need a `group_text` attribute."""
    for group in groups:
        if matches(answer_text, group.group_text):
            return group
    return None


def round_points(percentage: float) -> int:
    """Half-up rounding of a percentage to whole points (66.67 -> 67, 12.5 -> 13)."""
    return int(math.floor(float(percentage) + 0.5))


def compute_score_deltas(answers: Iterable[tuple[str, str]], groups: Sequence) -> dict[str, int]:
    """
    Points per user for one ending event.
    answers: (user_id, answer_text) pairs, one per answer row.
    Points add up per answer row; users ending with zero points are left out.
    """
    deltas: dict[str, int] = {}
    for user_id, answer_text in answers:
        group = match_group(answer_text, groups)
        if group is None:
            continue
        deltas[user_id] = deltas.get(user_id, 0) + round_points(group.percentage)
    return {user_id: points for user_id, points in deltas.items() if points > 0}


@dataclass
class ScoringReport:
    awarded: dict[str, int] = field(default_factory=dict)
    failed: list[ScoreApplicationFailure] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


async def apply_score_deltas(
    db: AsyncSession,
    question_id: str,
    deltas: dict[str, int],
    *,
    skip_user_ids: Iterable[str] = (),
) -> ScoringReport:
    """
    Apply each user's increment in its own transaction.
    A failing user is logged and recorded, the others still get their points.
    """
    report = ScoringReport()
    skip = set(skip_user_ids)
    for user_id, points in deltas.items():
        if user_id in skip:
            report.skipped.append(user_id)
            continue
        try:
            applied = await score_repository.increment_user_score(
                db, user_id=user_id, question_id=question_id, points=points
            )
        except SQLAlchemyError as e:
            await db.rollback()
            logger.exception("[scoring] question_id=%s user_id=%s increment failed: %s", question_id, user_id, e)
            report.failed.append(ScoreApplicationFailure(user_id, points, str(e)))
            continue
        if not applied:
            logger.error("[scoring] question_id=%s user_id=%s user not found, %d points dropped", question_id, user_id, points)
            report.failed.append(ScoreApplicationFailure(user_id, points, "user not found"))
            continue
        report.awarded[user_id] = points
        logger.info("[scoring] question_id=%s awarded %d points to user_id=%s", question_id, points, user_id)
    return report
