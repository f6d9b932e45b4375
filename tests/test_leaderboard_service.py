"""All-time and weekly leaderboards."""
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from conftest import StubClassifier, make_user

from nadfeud.core.auth import AuthSession
from nadfeud.models import Answer, ScoreEvent
from nadfeud.repositories import question_repository
from nadfeud.services import question_service
from nadfeud.services.leaderboard_service import get_leaderboard, get_weekly_leaderboard
from nadfeud.services.question_service import QuestionLifecycle

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _answer(user_id, question_id, created_at):
    return Answer(
        id=str(uuid.uuid4()),
        user_id=user_id,
        question_id=question_id,
        answer_text="cat",
        created_at=created_at,
        updated_at=created_at,
    )


def _event(user_id, question_id, points, created_at):
    return ScoreEvent(
        id=str(uuid.uuid4()),
        user_id=user_id,
        question_id=question_id,
        points=points,
        created_at=created_at,
        updated_at=created_at,
    )


@pytest.mark.asyncio
async def test_all_time_sorted_by_score_with_participation(db):
    low = await make_user(db, "low", total_score=10, roles=["r1"])
    high = await make_user(db, "high", total_score=30, roles=["r1", "r2"])
    mid = await make_user(db, "mid", total_score=20)
    low_id, high_id, mid_id = low.id, high.id, mid.id
    q1 = await question_repository.create_question(db, question_text="Name a pet")
    q2 = await question_repository.create_question(db, question_text="Name a fruit")
    await question_repository.add_answer(db, question_id=q1.id, user_id=high_id, answer_text="cat")
    await question_repository.add_answer(db, question_id=q2.id, user_id=high_id, answer_text="apple")
    await question_repository.add_answer(db, question_id=q1.id, user_id=mid_id, answer_text="dog")

    board = await get_leaderboard(db)

    assert [(e.id, e.total_score, e.questions_participated) for e in board] == [
        (high_id, 30, 2),
        (mid_id, 20, 1),
        (low_id, 10, 0),
    ]
    assert board[0].username == "high"
    assert board[0].discord_id == "discord-high"


@pytest.mark.asyncio
async def test_role_filter(db):
    low = await make_user(db, "low", total_score=10, roles=["r1"])
    high = await make_user(db, "high", total_score=30, roles=["r1", "r2"])
    await make_user(db, "mid", total_score=20)

    assert [e.id for e in await get_leaderboard(db, role_id="r1")] == [high.id, low.id]
    assert [e.id for e in await get_leaderboard(db, role_id="r2")] == [high.id]
    assert await get_leaderboard(db, role_id="nobody-has-this") == []


@pytest.mark.asyncio
async def test_scores_from_an_ending_show_up(db, admin):
    lifecycle = QuestionLifecycle(StubClassifier([{"group_text": "Cat", "count": 1, "percentage": 100}]))
    question = await question_service.create_question(db, admin, "Name a pet")
    await lifecycle.start_question(db, admin, question.id)
    alice = AuthSession.from_user(await make_user(db, "alice"))
    await lifecycle.submit_answer(db, alice, question.id, "cat")
    await lifecycle.end_question(db, admin, question.id)

    board = await get_leaderboard(db)

    assert (board[0].id, board[0].total_score, board[0].questions_participated) == (alice.user_id, 100, 1)


@pytest.mark.asyncio
async def test_weekly_counts_only_the_last_seven_days(db):
    recent = await make_user(db, "recent", total_score=150)
    steady = await make_user(db, "steady", total_score=500)
    lurker = await make_user(db, "lurker")
    gone = await make_user(db, "gone", total_score=900)
    recent_id, steady_id, lurker_id, gone_id = recent.id, steady.id, lurker.id, gone.id
    old_q = await question_repository.create_question(db, question_text="Old question")
    new_q = await question_repository.create_question(db, question_text="New question")

    db.add_all([
        _event(recent_id, new_q.id, 50, NOW - timedelta(days=1)),
        _event(recent_id, old_q.id, 100, NOW - timedelta(days=10)),
        _event(steady_id, new_q.id, 20, NOW - timedelta(days=2)),
        _event(gone_id, old_q.id, 900, NOW - timedelta(days=8)),
        _answer(recent_id, new_q.id, NOW - timedelta(days=1)),
        _answer(recent_id, old_q.id, NOW - timedelta(days=10)),
        _answer(steady_id, new_q.id, NOW - timedelta(days=2)),
        _answer(lurker_id, new_q.id, NOW - timedelta(days=3)),
        _answer(gone_id, old_q.id, NOW - timedelta(days=8)),
    ])
    await db.commit()

    board = await get_weekly_leaderboard(db, now=NOW)

    assert [(e.id, e.total_score, e.questions_participated) for e in board] == [
        (recent_id, 50, 1),
        (steady_id, 20, 1),
        (lurker_id, 0, 1),
    ]
    assert gone_id not in {e.id for e in board}


@pytest.mark.asyncio
async def test_weekly_role_filter(db):
    member = await make_user(db, "member", roles=["r1"])
    outsider = await make_user(db, "outsider")
    member_id, outsider_id = member.id, outsider.id
    question = await question_repository.create_question(db, question_text="Name a pet")
    db.add_all([
        _event(member_id, question.id, 10, NOW - timedelta(hours=1)),
        _event(outsider_id, question.id, 40, NOW - timedelta(hours=1)),
    ])
    await db.commit()

    board = await get_weekly_leaderboard(db, role_id="r1", now=NOW)

    assert [(e.id, e.total_score) for e in board] == [(member_id, 10)]
