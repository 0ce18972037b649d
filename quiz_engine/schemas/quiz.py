from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID

from quiz_engine.models import QuestionType


class QuizOptionCreate(BaseModel):
    option_text: str
    is_correct: bool = False


class QuizQuestionCreate(BaseModel):
    question_text: str
    question_type: QuestionType = QuestionType.SINGLE
    marks: int = Field(1, ge=1)
    options: List[QuizOptionCreate]


class QuizCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    questions: List[QuizQuestionCreate]


class QuizReplace(QuizCreate):
    pass


class QuizCreateResponse(BaseModel):
    id: UUID
    title: str
    question_count: int
    max_score: int

    model_config = {"from_attributes": True}


class QuizListItem(BaseModel):
    id: UUID
    title: str
    description: Optional[str]
    question_count: int
    max_score: int
    created_at: datetime


# Quiz definition with answer key, for instructors

class QuizOptionView(BaseModel):
    id: UUID
    option_text: str
    is_correct: Optional[bool] = None


class QuizQuestionView(BaseModel):
    id: UUID
    question_text: str
    question_type: QuestionType
    marks: int
    options: List[QuizOptionView]


class QuizDetailView(BaseModel):
    id: UUID
    title: str
    description: Optional[str]
    max_score: int
    questions: List[QuizQuestionView]
