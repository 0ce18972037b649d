import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from quiz_engine.errors import (
    DuplicateSubmissionError,
    QuizEngineError,
    QuizNotFoundError,
    SubmissionNotFoundError,
    SessionNotOpenError,
)
from quiz_engine.helpers.clock import utcnow
from quiz_engine.helpers.grading_engine import grade_quiz
from quiz_engine.helpers.session_statistics import (
    aggregate_question_stats,
    aggregate_session_statistics,
    exact_percent,
)
from quiz_engine.helpers.session_window import SessionState, results_visible, session_state
from quiz_engine.helpers.transaction import unit_of_work
from quiz_engine.models import QuizSession, Submission, SubmissionAnswer
from quiz_engine.services.quiz_reader import QuizDefinitionReader
from quiz_engine.services.session_registry import SessionRegistry
from quiz_engine.services.submission_ledger import SubmissionLedger
from quiz_engine.services.submission_locks import SubmissionLocks

logger = logging.getLogger(__name__)


@dataclass
class QuestionResult:
    question_id: UUID
    position: int
    chosen_option_ids: List[str]
    correct_option_ids: List[str]
    points: int
    max_points: int
    exact_percent: Optional[int] = None


@dataclass
class ScoredResult:
    submission_id: UUID
    result_token: str
    session_name: str
    quiz_id: UUID
    quiz_title: Optional[str]
    participant_identity: str
    score: int
    max_score: int
    created_at: datetime
    questions: List[QuestionResult] = field(default_factory=list)


@dataclass
class WithheldUntil:
    result_token: str
    open_until: datetime


def _scored_result(
    submission: Submission,
    quiz_session: QuizSession,
    quiz_title: Optional[str],
    percents: Optional[Dict[UUID, Optional[int]]] = None,
) -> ScoredResult:
    percents = percents or {}
    return ScoredResult(
        submission_id=submission.id,
        result_token=submission.result_token,
        session_name=quiz_session.session_name,
        quiz_id=quiz_session.quiz_id,
        quiz_title=quiz_title,
        participant_identity=submission.participant_identity,
        score=submission.score,
        max_score=submission.max_score,
        created_at=submission.created_at,
        questions=[
            QuestionResult(
                question_id=a.question_id,
                position=a.position,
                chosen_option_ids=list(a.chosen_option_ids),
                correct_option_ids=list(a.correct_option_ids),
                points=a.points,
                max_points=a.max_points,
                exact_percent=percents.get(a.question_id),
            )
            for a in submission.answers
        ],
    )


class SubmissionService:
    """
    Runs the participant submission path and the reads built on the ledger.

    ``submit`` is the only multi-step write in the engine. The duplicate
    check, grading and insert for one (session, identity) pair run under
    that pair's lock and inside a single transaction, so concurrent
    submissions from the same identity yield exactly one stored row.
    """

    def __init__(
        self,
        db: AsyncSession,
        registry: SessionRegistry,
        ledger: SubmissionLedger,
        quiz_reader: QuizDefinitionReader,
        locks: SubmissionLocks,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.registry = registry
        self.ledger = ledger
        self.quiz_reader = quiz_reader
        self.locks = locks
        self.clock = clock

    async def submit(
        self,
        session_name: str,
        participant_identity: str,
        answers: Mapping[UUID, Iterable[UUID]],
    ) -> ScoredResult:
        logger.info("Submission attempt: session=%s participant=%s", session_name, participant_identity)

        # --------------------------
        # Resolve session + window
        # --------------------------
        quiz_session = await self.registry.get_session(session_name)

        now = self.clock()
        state = session_state(quiz_session, now)
        if state is not SessionState.OPEN:
            logger.warning("Submission rejected, session %s is %s", session_name, state.value)
            raise SessionNotOpenError(
                session_name, state, quiz_session.open_from, quiz_session.open_until
            )

        # --------------------------
        # Check, grade and insert
        # --------------------------
        try:
            async with self.locks.hold(quiz_session.id, participant_identity):
                async with unit_of_work(self.db, "SubmitAnswers"):
                    existing = await self.ledger.find_by_identity(quiz_session.id, participant_identity)
                    if existing:
                        raise DuplicateSubmissionError(session_name, participant_identity)

                    quiz = await self.quiz_reader.get_quiz_definition(quiz_session.quiz_id)
                    if quiz is None:
                        raise QuizNotFoundError(quiz_session.quiz_id)

                    grade = grade_quiz(quiz, answers)

                    submission = Submission(
                        id=uuid.uuid4(),
                        session_id=quiz_session.id,
                        participant_identity=participant_identity,
                        result_token=uuid.uuid4().hex,
                        score=grade.total,
                        max_score=grade.max_total,
                        created_at=now,
                        answers=[
                            SubmissionAnswer(
                                id=uuid.uuid4(),
                                question_id=g.question_id,
                                position=g.position,
                                answered=g.answered,
                                chosen_option_ids=[str(oid) for oid in g.chosen_option_ids],
                                correct_option_ids=[str(oid) for oid in g.correct_option_ids],
                                points=g.points,
                                max_points=g.max_points,
                            )
                            for g in grade.questions
                        ],
                    )
                    await self.ledger.create(submission, session_name)
        except QuizEngineError as exc:
            logger.warning(
                "Submission rejected: session=%s participant=%s reason=%s",
                session_name,
                participant_identity,
                exc.message,
            )
            raise

        logger.info(
            "Submission successful: session=%s participant=%s score=%d/%d",
            session_name,
            participant_identity,
            submission.score,
            submission.max_score,
        )
        return _scored_result(submission, quiz_session, quiz.title)

    async def get_result(self, result_token: str) -> Union[ScoredResult, WithheldUntil]:
        """
        The participant's own result, or WithheldUntil while a timed session
        is still running.
        """
        submission = await self.ledger.find_by_result_token(result_token)
        if not submission:
            logger.warning("Result not found: %s", result_token)
            raise SubmissionNotFoundError(result_token)

        quiz_session = submission.quiz_session

        if not results_visible(quiz_session, self.clock()):
            logger.debug("Result %s withheld until %s", result_token, quiz_session.open_until)
            return WithheldUntil(result_token=result_token, open_until=quiz_session.open_until)

        quiz = await self.quiz_reader.get_quiz_definition(quiz_session.quiz_id)

        stats = aggregate_question_stats(
            await self.ledger.list_by_session(quiz_session.id), quiz
        )
        percents = {entry["question_id"]: exact_percent(entry) for entry in stats}

        return _scored_result(
            submission,
            quiz_session,
            quiz.title if quiz else None,
            percents,
        )

    async def get_session_statistics(self, session_name: str) -> Dict:
        quiz_session = await self.registry.get_session(session_name)
        submissions = await self.ledger.list_by_session(quiz_session.id)

        # falls back to the stored answers alone once the quiz is gone
        quiz = await self.quiz_reader.get_quiz_definition(quiz_session.quiz_id)

        stats = aggregate_session_statistics(submissions, quiz)
        stats["session_name"] = quiz_session.session_name
        stats["quiz_id"] = quiz_session.quiz_id

        logger.debug(
            "Statistics for %s: %d participants", session_name, stats["participant_count"]
        )
        return stats

    async def list_session_submissions(self, session_name: str) -> List[Submission]:
        quiz_session = await self.registry.get_session(session_name)
        return await self.ledger.list_by_session(quiz_session.id)
