# quiz_engine/routes/instructor/quiz.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from typing import List
from uuid import UUID
import logging

from quiz_engine.database import get_db
from quiz_engine.dependencies import get_quiz_reader
from quiz_engine.errors import QuizNotFoundError
from quiz_engine.helpers.quiz_validation import validate_quiz_definition
from quiz_engine.models import Quiz, QuizQuestion, QuizOption
from quiz_engine.schemas.quiz import (
    QuizCreate, QuizCreateResponse, QuizDetailView, QuizListItem, QuizReplace
)
from quiz_engine.services.quiz_reader import QuizDefinitionReader

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/instructor/quiz",
    tags=["Instructor Quiz Endpoints"]
)


def _build_questions(quiz_in: QuizCreate) -> list:
    return [
        QuizQuestion(
            position=q_pos,
            question_text=q.question_text,
            question_type=q.question_type,
            marks=q.marks,
            options=[
                QuizOption(position=o_pos, option_text=opt.option_text, is_correct=opt.is_correct)
                for o_pos, opt in enumerate(q.options)
            ],
        )
        for q_pos, q in enumerate(quiz_in.questions)
    ]


def _summary(quiz: Quiz, quiz_in: QuizCreate) -> dict:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "question_count": len(quiz_in.questions),
        "max_score": sum(q.marks for q in quiz_in.questions),
    }


async def _load_quiz(db: AsyncSession, quiz_id: UUID) -> Quiz:
    # questions and options must be loaded for the ORM cascade to reach them
    result = await db.execute(
        select(Quiz)
        .options(selectinload(Quiz.questions).selectinload(QuizQuestion.options))
        .where(Quiz.id == quiz_id)
    )
    quiz = result.scalar_one_or_none()

    if not quiz:
        raise QuizNotFoundError(quiz_id)
    return quiz


@router.post(
    "/create-quiz",
    response_model=QuizCreateResponse,
    status_code=201
)
async def create_quiz(
    quiz_in: QuizCreate,
    db: AsyncSession = Depends(get_db),
):
    validate_quiz_definition(quiz_in)

    quiz = Quiz(
        title=quiz_in.title,
        description=quiz_in.description,
        questions=_build_questions(quiz_in),
    )
    db.add(quiz)
    await db.commit()

    logger.info("Quiz created: %s (%s)", quiz.title, quiz.id)
    return _summary(quiz, quiz_in)


@router.put(
    "/replace-quiz/{quiz_id}",
    response_model=QuizCreateResponse,
)
async def replace_quiz(
    quiz_id: UUID,
    quiz_in: QuizReplace,
    db: AsyncSession = Depends(get_db),
):
    """
    Swaps in a new set of questions. Submissions already made keep their
    graded snapshot; sessions running on this quiz grade against the new one.
    """
    quiz = await _load_quiz(db, quiz_id)
    validate_quiz_definition(quiz_in)

    quiz.title = quiz_in.title
    quiz.description = quiz_in.description

    # --------------------------
    # delete-orphan removes the old questions and their options
    # --------------------------
    quiz.questions.clear()
    await db.flush()

    quiz.questions.extend(_build_questions(quiz_in))
    await db.commit()

    logger.info("Quiz replaced: %s (%s)", quiz.title, quiz.id)
    return _summary(quiz, quiz_in)


@router.delete(
    "/delete-quiz/{quiz_id}",
    status_code=204
)
async def delete_quiz(
    quiz_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    quiz = await _load_quiz(db, quiz_id)

    # sessions keep pointing at the id; they are not owned by the quiz
    await db.delete(quiz)
    await db.commit()

    logger.info("Quiz deleted: %s", quiz_id)
    return None


@router.get(
    "/list-quizzes",
    response_model=List[QuizListItem],
)
async def list_quizzes(
    quiz_reader: QuizDefinitionReader = Depends(get_quiz_reader),
):
    return [
        QuizListItem(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            question_count=len(quiz.questions),
            max_score=sum(q.marks for q in quiz.questions),
            created_at=quiz.created_at,
        )
        for quiz in await quiz_reader.list_quizzes()
    ]


@router.get(
    "/quiz-details/{quiz_id}",
    response_model=QuizDetailView,
)
async def get_quiz_details(
    quiz_id: UUID,
    quiz_reader: QuizDefinitionReader = Depends(get_quiz_reader),
):
    quiz = await quiz_reader.get_quiz_definition(quiz_id)

    if not quiz:
        raise QuizNotFoundError(quiz_id)

    return QuizDetailView(
        id=quiz.id,
        title=quiz.title,
        description=quiz.description,
        max_score=sum(q.marks for q in quiz.questions),
        questions=[
            {
                "id": q.id,
                "question_text": q.question_text,
                "question_type": q.question_type,
                "marks": q.marks,
                "options": [
                    {
                        "id": opt.id,
                        "option_text": opt.option_text,
                        "is_correct": opt.is_correct,
                    }
                    for opt in q.options
                ],
            }
            for q in quiz.questions
        ],
    )
