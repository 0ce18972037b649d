import logging
import os
import uuid
from datetime import datetime
from typing import Callable, List, Optional, Tuple
from uuid import UUID

from dotenv import load_dotenv
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from quiz_engine.errors import (
    InvalidSessionWindowError,
    QuizNotFoundError,
    SessionNameTakenError,
    SessionNotFoundError,
    SessionNotOpenError,
)
from quiz_engine.helpers.clock import to_naive_utc, utcnow
from quiz_engine.helpers.session_window import SessionState, session_state
from quiz_engine.models import Quiz, QuizSession, Submission
from quiz_engine.services.quiz_reader import QuizDefinitionReader

load_dotenv()

SESSION_LIST_LIMIT = int(os.getenv("SESSION_LIST_LIMIT", 100))

logger = logging.getLogger(__name__)


def generate_session_name(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d-%H-%M")


def _check_window(open_from: datetime, open_until: Optional[datetime]) -> None:
    if open_until is not None and open_until < open_from:
        raise InvalidSessionWindowError(open_from, open_until)


class SessionRegistry:
    """
    Holds quiz sessions and their open/close windows.

    Window state is never stored; every caller evaluates it against the
    clock at call time through ``session_state``.
    """

    def __init__(
        self,
        db: AsyncSession,
        quiz_reader: QuizDefinitionReader,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.quiz_reader = quiz_reader
        self.clock = clock

    # ---------------------------
    # Lookups
    # ---------------------------
    async def find_session(self, session_name: str) -> Optional[QuizSession]:
        result = await self.db.execute(
            select(QuizSession).where(QuizSession.session_name == session_name)
        )
        return result.scalar_one_or_none()

    async def get_session(self, session_name: str) -> QuizSession:
        quiz_session = await self.find_session(session_name)
        if not quiz_session:
            logger.warning("Session not found: %s", session_name)
            raise SessionNotFoundError(session_name)
        return quiz_session

    async def list_sessions(self, limit: int = SESSION_LIST_LIMIT) -> List[QuizSession]:
        result = await self.db.execute(
            select(QuizSession)
            .order_by(QuizSession.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_open_sessions(self, now: Optional[datetime] = None) -> List[QuizSession]:
        """Sessions that accept submissions at ``now``, newest first."""
        now = now or self.clock()

        result = await self.db.execute(
            select(QuizSession)
            .where(QuizSession.open_from <= now)
            .order_by(QuizSession.created_at.desc())
        )
        return [
            s for s in result.scalars().all()
            if session_state(s, now) is SessionState.OPEN
        ]

    async def get_session_quiz(self, session_name: str) -> Tuple[QuizSession, Quiz]:
        """Session plus its quiz, only while the session is open."""
        quiz_session = await self.get_session(session_name)

        state = session_state(quiz_session, self.clock())
        if state is not SessionState.OPEN:
            raise SessionNotOpenError(
                session_name, state, quiz_session.open_from, quiz_session.open_until
            )

        quiz = await self.quiz_reader.get_quiz_definition(quiz_session.quiz_id)
        if quiz is None:
            logger.error(
                "Session %s references missing quiz %s", session_name, quiz_session.quiz_id
            )
            raise QuizNotFoundError(quiz_session.quiz_id)

        return quiz_session, quiz

    # ---------------------------
    # Mutations
    # ---------------------------
    async def _unique_session_name(self, base: str) -> str:
        result = await self.db.execute(
            select(QuizSession.session_name).where(QuizSession.session_name.like(f"{base}%"))
        )
        taken = set(result.scalars().all())

        if base not in taken:
            return base

        suffix = 2
        while f"{base}-{suffix}" in taken:
            suffix += 1
        return f"{base}-{suffix}"

    async def create_session(
        self,
        quiz_id: UUID,
        open_from: Optional[datetime] = None,
        open_until: Optional[datetime] = None,
        session_name: Optional[str] = None,
    ) -> QuizSession:
        now = self.clock()
        open_from = to_naive_utc(open_from) or now
        open_until = to_naive_utc(open_until)

        _check_window(open_from, open_until)

        if not await self.quiz_reader.quiz_exists(quiz_id):
            raise QuizNotFoundError(quiz_id)

        # a blank name counts as no name
        session_name = (session_name or "").strip()
        if session_name:
            if await self.find_session(session_name):
                raise SessionNameTakenError(session_name)
        else:
            session_name = await self._unique_session_name(generate_session_name(open_from))

        quiz_session = QuizSession(
            id=uuid.uuid4(),
            session_name=session_name,
            quiz_id=quiz_id,
            open_from=open_from,
            open_until=open_until,
            created_at=now,
        )
        self.db.add(quiz_session)

        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            raise SessionNameTakenError(session_name) from exc

        logger.info("Session created: %s (quiz %s)", session_name, quiz_id)
        return quiz_session

    async def update_session_window(
        self,
        session_name: str,
        open_from: datetime,
        open_until: Optional[datetime] = None,
    ) -> QuizSession:
        quiz_session = await self.get_session(session_name)

        open_from = to_naive_utc(open_from)
        open_until = to_naive_utc(open_until)
        _check_window(open_from, open_until)

        quiz_session.open_from = open_from
        quiz_session.open_until = open_until
        await self.db.commit()

        logger.info("Session window updated: %s", session_name)
        return quiz_session

    async def delete_session(self, session_name: str) -> None:
        """Deletes the session together with all of its submissions."""
        result = await self.db.execute(
            select(QuizSession)
            .options(
                selectinload(QuizSession.submissions)
                .selectinload(Submission.answers)
            )
            .where(QuizSession.session_name == session_name)
        )
        quiz_session = result.scalar_one_or_none()

        if not quiz_session:
            raise SessionNotFoundError(session_name)

        submission_count = len(quiz_session.submissions)
        await self.db.delete(quiz_session)
        await self.db.commit()

        logger.info(
            "Session deleted: %s (%d submissions removed)", session_name, submission_count
        )
