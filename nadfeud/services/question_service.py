"""Question lifecycle: pending -> live -> ended, and everything that happens at the end.

Ending a live question:
  1. snapshot its answers
  2. classify them (automatic) or take the admin's groups (manual)
  3. persist the groups and mark the question ended, in one transaction
  4. award points, one transaction per user (a failing user does not stop the others)

A classification failure changes nothing: the question stays live and ending can be retried.
Only one transition per question runs at a time; a second attempt is rejected, not queued.
A transition first waits for answers already being stored, and answers arriving after it
started are rejected, so the snapshot always holds every answer of the question.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nadfeud.core.auth import AuthSession, require_admin
from nadfeud.core.config import settings
from nadfeud.core.errors import (
    ClassificationFailure,
    ConcurrencyViolation,
    DuplicateAnswer,
    InvalidTransition,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from nadfeud.models.answer import Answer
from nadfeud.models.grouped_answer import GroupedAnswer
from nadfeud.models.question import (
    QUESTION_STATUS_ENDED,
    QUESTION_STATUS_LIVE,
    QUESTION_STATUS_PENDING,
    Question,
)
from nadfeud.repositories import question_repository, score_repository
from nadfeud.services.grouping_service import GroupingClassifier, GroupSpec, get_grouping_classifier, manual_groups
from nadfeud.services.scoring_service import ScoringReport, apply_score_deltas, compute_score_deltas

logger = logging.getLogger(__name__)


@dataclass
class EndResult:
    question: Question
    groups: list[GroupSpec] = field(default_factory=list)
    scoring: ScoringReport = field(default_factory=ScoringReport)


def _clean_question_text(question_text: str | None) -> str:
    text = (question_text or "").strip()
    if not text:
        raise ValidationError("question text must not be empty")
    return text


async def _get_question_or_404(
    db: AsyncSession,
    question_id: str,
    *,
    for_update: bool = False,
    shared: bool = False,
) -> Question:
    question = await question_repository.get_question_by_id(db, question_id, for_update=for_update, shared=shared)
    if question is None:
        raise NotFound("question not found")
    return question


# ---------- authoring ----------


async def create_question(
    db: AsyncSession,
    session: AuthSession,
    question_text: str,
    image_url: str | None = None,
) -> Question:
    require_admin(session)
    question = await question_repository.create_question(
        db,
        question_text=_clean_question_text(question_text),
        image_url=image_url or None,
        created_by=session.user_id,
    )
    logger.info("[create-question] question_id=%s by user_id=%s", question.id, session.user_id)
    return question


async def update_question(
    db: AsyncSession,
    session: AuthSession,
    question_id: str,
    question_text: str,
    image_url: str | None = None,
) -> Question:
    """Edit text and image. Ended questions are historical record and cannot be edited."""
    require_admin(session)
    question = await _get_question_or_404(db, question_id)
    if question.status == QUESTION_STATUS_ENDED:
        raise InvalidTransition("ended questions cannot be edited")
    question.question_text = _clean_question_text(question_text)
    question.image_url = image_url or None
    await db.commit()
    await db.refresh(question)
    return question


async def delete_question(db: AsyncSession, session: AuthSession, question_id: str) -> None:
    """Delete a pending question. Live questions go through delete_live_question."""
    require_admin(session)
    question = await _get_question_or_404(db, question_id)
    if question.status != QUESTION_STATUS_PENDING:
        raise InvalidTransition(f"only pending questions can be deleted, this one is {question.status}")
    await question_repository.delete_question_cascade(db, question_id)
    logger.info("[delete-question] question_id=%s", question_id)


async def list_questions(db: AsyncSession, session: AuthSession, status: str = QUESTION_STATUS_PENDING) -> list[Question]:
    require_admin(session)
    if status not in (QUESTION_STATUS_PENDING, QUESTION_STATUS_LIVE, QUESTION_STATUS_ENDED):
        raise ValidationError(f"unknown status {status!r}")
    return await question_repository.list_questions_by_status(db, status, newest_first=True)


# ---------- player views ----------


async def list_live_questions(db: AsyncSession, user_id: str | None = None) -> list[tuple[Question, bool]]:
    """Live questions (oldest first) with whether `user_id` already answered each."""
    questions = await question_repository.list_questions_by_status(db, QUESTION_STATUS_LIVE)
    answered: set[str] = set()
    if user_id:
        answered = await question_repository.get_answered_question_ids(db, user_id, [q.id for q in questions])
    return [(q, q.id in answered) for q in questions]


async def list_ended_questions(db: AsyncSession) -> list[tuple[Question, list[GroupedAnswer]]]:
    """Ended questions newest first, each with its groups sorted by count."""
    questions = await question_repository.list_questions_by_status(db, QUESTION_STATUS_ENDED, newest_first=True)
    groups = await question_repository.get_grouped_answers_by_question_ids(db, [q.id for q in questions])
    return [(q, groups.get(q.id, [])) for q in questions]


async def get_answer_history(db: AsyncSession, user_id: str) -> list[tuple[Answer, str | None]]:
    return await question_repository.get_answer_history(db, user_id)


async def list_answers_with_details(db: AsyncSession, session: AuthSession):
    require_admin(session)
    return await question_repository.list_answers_with_details(db)


async def reset_all_data(db: AsyncSession, session: AuthSession) -> None:
    """Delete every answer, group and score event and reset all scores to 0. Questions are kept."""
    require_admin(session)
    logger.warning("[reset] user_id=%s is resetting all game data", session.user_id)
    await score_repository.reset_game_data(db)


# ---------- transitions ----------


class QuestionLifecycle:
    """Owns the transitions that need per-question mutual exclusion."""

    def __init__(
        self,
        classifier: GroupingClassifier | None = None,
        *,
        timeout_seconds: float | None = None,
    ):
        self.classifier = classifier or get_grouping_classifier()
        self.timeout_seconds = settings.classifier_timeout_seconds if timeout_seconds is None else timeout_seconds
        self._locks: dict[str, asyncio.Lock] = {}
        self._submitting: dict[str, int] = {}
        self._drained: dict[str, asyncio.Event] = {}
        self._start_lock = asyncio.Lock()

    def is_transitioning(self, question_id: str) -> bool:
        lock = self._locks.get(question_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def _transition(self, question_id: str):
        lock = self._locks.setdefault(question_id, asyncio.Lock())
        if lock.locked():
            raise ConcurrencyViolation("this question is already being ended")
        async with lock:
            try:
                await self._wait_for_submissions(question_id)
                yield
            finally:
                # nobody waits on these locks, so the entry can go once released
                self._locks.pop(question_id, None)

    @asynccontextmanager
    async def _answer_slot(self, question_id: str):
        """Register an answer in flight. Checking and registering happen without a suspension point."""
        if self.is_transitioning(question_id):
            raise ConcurrencyViolation("this question is closing, answers are no longer accepted")
        self._submitting[question_id] = self._submitting.get(question_id, 0) + 1
        try:
            yield
        finally:
            remaining = self._submitting[question_id] - 1
            if remaining:
                self._submitting[question_id] = remaining
            else:
                del self._submitting[question_id]
                event = self._drained.pop(question_id, None)
                if event is not None:
                    event.set()

    async def _wait_for_submissions(self, question_id: str) -> None:
        while self._submitting.get(question_id):
            await self._drained.setdefault(question_id, asyncio.Event()).wait()

    async def _classify(self, question: Question, answers: list[str]) -> list[GroupSpec]:
        try:
            result = await asyncio.wait_for(
                self.classifier.classify(question.question_text, answers),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise ClassificationFailure(
                f"answer grouping timed out after {self.timeout_seconds:g}s, the question is still live, try again"
            ) from e
        except Exception as e:
            logger.exception("[end-question] question_id=%s classifier raised: %s", question.id, e)
            raise ClassificationFailure(f"answer grouping failed: {e}") from e
        if not result.ok:
            raise ClassificationFailure(f"answer grouping failed: {result.reason}")
        return list(result.groups)

    async def _finish(
        self,
        db: AsyncSession,
        question: Question,
        snapshot: list[tuple[str, str]],
        groups: list[GroupSpec],
        *,
        skip_user_ids: Iterable[str] = (),
    ) -> EndResult:
        question_id = question.id
        await question_repository.replace_grouped_answers(db, question_id, [g.model_dump() for g in groups])
        await question_repository.set_question_status(db, question, QUESTION_STATUS_ENDED)
        await db.commit()
        logger.info("[end-question] question_id=%s ended with %d groups", question_id, len(groups))

        deltas = compute_score_deltas(snapshot, groups)
        report = await apply_score_deltas(db, question_id, deltas, skip_user_ids=skip_user_ids)
        if report.failed:
            logger.error(
                "[end-question] question_id=%s %d score increments failed: %s",
                question_id,
                len(report.failed),
                ", ".join(f.user_id for f in report.failed),
            )
        await db.refresh(question)
        return EndResult(question=question, groups=groups, scoring=report)

    async def _end_locked(self, db: AsyncSession, question_id: str) -> EndResult:
        question = await _get_question_or_404(db, question_id, for_update=True)
        status = question.status
        if status == QUESTION_STATUS_ENDED:
            await db.rollback()
            raise ConcurrencyViolation("question has already ended")
        if status != QUESTION_STATUS_LIVE:
            await db.rollback()
            raise InvalidTransition(f"only live questions can be ended, this one is {status}")

        answers = await question_repository.get_answers_by_question_id(db, question_id)
        snapshot = [(a.user_id, a.answer_text) for a in answers]
        if not snapshot:
            await question_repository.set_question_status(db, question, QUESTION_STATUS_ENDED)
            await db.commit()
            logger.info("[end-question] question_id=%s had no answers, ended without grouping", question_id)
            return EndResult(question=question)

        logger.info("[end-question] question_id=%s grouping %d answers", question_id, len(snapshot))
        try:
            groups = await self._classify(question, [text for _, text in snapshot])
        except ClassificationFailure:
            await db.rollback()
            raise
        return await self._finish(db, question, snapshot, groups)

    async def end_question(self, db: AsyncSession, session: AuthSession, question_id: str) -> EndResult:
        require_admin(session)
        async with self._transition(question_id):
            return await self._end_locked(db, question_id)

    async def set_manual_grouped_answers(
        self,
        db: AsyncSession,
        session: AuthSession,
        question_id: str,
        entries: Iterable[Any],
    ) -> EndResult:
        """
        End a question with admin-supplied groups instead of the classifier.
        Also works on an ended question to correct its groups; users already scored for it are not scored again.
        """
        require_admin(session)
        groups = manual_groups(entries)
        async with self._transition(question_id):
            question = await _get_question_or_404(db, question_id, for_update=True)
            if question.status == QUESTION_STATUS_PENDING:
                await db.rollback()
                raise InvalidTransition("a pending question has to be started before it can be ended")
            already_scored: set[str] = set()
            if question.status == QUESTION_STATUS_ENDED:
                already_scored = await score_repository.get_scored_user_ids(db, question_id)
            answers = await question_repository.get_answers_by_question_id(db, question_id)
            snapshot = [(a.user_id, a.answer_text) for a in answers]
            logger.info(
                "[manual-groups] question_id=%s groups=%d answers=%d", question_id, len(groups), len(snapshot)
            )
            return await self._finish(db, question, snapshot, groups, skip_user_ids=already_scored)

    async def start_question(self, db: AsyncSession, session: AuthSession, question_id: str) -> Question:
        """
        pending -> live. Whatever question is live gets ended first, grouping and scoring included,
        so there is never more than one live question. If that ending fails, nothing is started.
        """
        require_admin(session)
        if self._start_lock.locked():
            raise ConcurrencyViolation("another question is being started")
        async with self._start_lock:
            question = await _get_question_or_404(db, question_id)
            if question.status != QUESTION_STATUS_PENDING:
                raise InvalidTransition(f"only pending questions can be started, this one is {question.status}")

            for live in await question_repository.list_questions_by_status(db, QUESTION_STATUS_LIVE):
                logger.info("[start-question] auto-ending live question_id=%s before starting %s", live.id, question_id)
                async with self._transition(live.id):
                    await self._end_locked(db, live.id)

            async with self._transition(question_id):
                question = await _get_question_or_404(db, question_id, for_update=True)
                status = question.status
                if status != QUESTION_STATUS_PENDING:
                    await db.rollback()
                    raise InvalidTransition(f"only pending questions can be started, this one is {status}")
                if await question_repository.list_questions_by_status(db, QUESTION_STATUS_LIVE):
                    await db.rollback()
                    raise ConcurrencyViolation("another question is still live")
                await question_repository.set_question_status(db, question, QUESTION_STATUS_LIVE)
                await db.commit()
                await db.refresh(question)
        logger.info("[start-question] question_id=%s is live", question_id)
        return question

    async def delete_live_question(self, db: AsyncSession, session: AuthSession, question_id: str) -> None:
        """Drop a live question together with its answers, without grouping or scoring."""
        require_admin(session)
        async with self._transition(question_id):
            question = await _get_question_or_404(db, question_id)
            if question.status != QUESTION_STATUS_LIVE:
                raise InvalidTransition(f"question is {question.status}, not live")
            await question_repository.delete_question_cascade(db, question_id)
        logger.info("[delete-live-question] question_id=%s deleted with its answers", question_id)

    async def submit_answer(
        self,
        db: AsyncSession,
        session: AuthSession,
        question_id: str,
        answer_text: str,
    ) -> Answer:
        """Record a user's answer to the live question. One answer per user and question."""
        if not session.can_vote:
            raise PermissionDenied("this account cannot answer questions")
        if not answer_text or not answer_text.strip():
            raise ValidationError("answer must not be empty")
        if len(answer_text) > settings.answer_max_length:
            raise ValidationError(f"answer is longer than {settings.answer_max_length} characters")
        async with self._answer_slot(question_id):
            # FOR SHARE waits for an ending in another process and re-reads the status after it
            question = await _get_question_or_404(db, question_id, shared=True)
            if question.status != QUESTION_STATUS_LIVE:
                await db.rollback()
                raise InvalidTransition("this question is not accepting answers")
            if await question_repository.get_user_answer(db, question_id, session.user_id) is not None:
                await db.rollback()
                raise DuplicateAnswer("you have already answered this question")
            try:
                return await question_repository.add_answer(
                    db,
                    question_id=question_id,
                    user_id=session.user_id,
                    answer_text=answer_text,
                )
            except IntegrityError as e:
                await db.rollback()
                raise DuplicateAnswer("you have already answered this question") from e


_lifecycle: QuestionLifecycle | None = None


def get_lifecycle() -> QuestionLifecycle:
    """Process-wide controller, so every request shares the same per-question locks."""
    global _lifecycle
    if _lifecycle is None:
        _lifecycle = QuestionLifecycle()
    return _lifecycle
