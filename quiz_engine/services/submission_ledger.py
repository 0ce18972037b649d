import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from quiz_engine.errors import DuplicateSubmissionError
from quiz_engine.models import Submission

logger = logging.getLogger(__name__)


class SubmissionLedger:
    """
    Store of scored submissions, one per (session, participant identity).

    The ledger does not serialize check-then-create across callers; it only
    guarantees that a second row for the same pair never gets written.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_identity(self, session_id: UUID, participant_identity: str) -> Optional[Submission]:
        result = await self.db.execute(
            select(Submission).where(
                Submission.session_id == session_id,
                Submission.participant_identity == participant_identity,
            )
        )
        return result.scalar_one_or_none()

    async def find_by_result_token(self, result_token: str) -> Optional[Submission]:
        result = await self.db.execute(
            select(Submission)
            .options(
                selectinload(Submission.answers),
                selectinload(Submission.quiz_session),
            )
            .where(Submission.result_token == result_token)
        )
        return result.scalar_one_or_none()

    async def create(self, submission: Submission, session_name: str) -> Submission:
        """
        Adds the submission to the caller's transaction and flushes it.
        A clash on (session, identity) surfaces as DuplicateSubmissionError.
        """
        self.db.add(submission)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            logger.warning(
                "Unique constraint rejected submission for %s in %s",
                submission.participant_identity,
                session_name,
            )
            raise DuplicateSubmissionError(session_name, submission.participant_identity) from exc

        return submission

    async def list_by_session(self, session_id: UUID) -> List[Submission]:
        result = await self.db.execute(
            select(Submission)
            .options(selectinload(Submission.answers))
            .where(Submission.session_id == session_id)
            .order_by(Submission.created_at.desc())
        )
        return list(result.scalars().all())
