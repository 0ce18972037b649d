from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from quiz_engine.models import Quiz, QuizQuestion


class QuizDefinitionReader:
    """Read-only access to quiz definitions owned by the authoring side."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_quiz_definition(self, quiz_id: UUID) -> Optional[Quiz]:
        """
        Point-in-time snapshot of a quiz with its questions and options
        loaded in order. Returns None when the quiz does not exist.
        """
        result = await self.db.execute(
            select(Quiz)
            .options(
                selectinload(Quiz.questions)
                .selectinload(QuizQuestion.options)
            )
            .where(Quiz.id == quiz_id)
        )
        return result.scalar_one_or_none()

    async def quiz_exists(self, quiz_id: UUID) -> bool:
        result = await self.db.execute(
            select(Quiz.id).where(Quiz.id == quiz_id)
        )
        return result.scalar_one_or_none() is not None

    async def list_quizzes(self) -> List[Quiz]:
        """All definitions with their questions, newest first."""
        result = await self.db.execute(
            select(Quiz)
            .options(selectinload(Quiz.questions))
            .order_by(Quiz.created_at.desc())
        )
        return list(result.scalars().all())
