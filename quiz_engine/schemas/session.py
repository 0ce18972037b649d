from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional
from uuid import UUID
from datetime import datetime

from quiz_engine.helpers.session_window import SessionState
from quiz_engine.models import QuestionType


#For Instructors
class SessionCreate(BaseModel):
    quiz_id: UUID
    session_name: Optional[str] = Field(None, min_length=1, max_length=100)
    open_from: Optional[datetime] = None
    open_until: Optional[datetime] = None

    @field_validator("session_name", mode="before")
    @classmethod
    def strip_session_name(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class SessionWindowUpdate(BaseModel):
    open_from: datetime
    open_until: Optional[datetime] = None


class SessionItem(BaseModel):
    id: UUID
    session_name: str
    quiz_id: UUID
    open_from: datetime
    open_until: Optional[datetime]
    created_at: datetime
    state: SessionState


class QuestionStatistics(BaseModel):
    question_id: UUID
    total_answers: int
    correct_count: int
    option_counts: Dict[str, int]


class SessionStatisticsView(BaseModel):
    session_name: str
    quiz_id: UUID
    participant_count: int
    average_score: Optional[float]
    per_question: List[QuestionStatistics]


#For Participants
class ParticipantOptionView(BaseModel):
    id: UUID
    option_text: str


class ParticipantQuestionView(BaseModel):
    id: UUID
    question_text: str
    question_type: QuestionType
    marks: int
    options: List[ParticipantOptionView]


class SessionQuizView(BaseModel):
    session_name: str
    quiz_id: UUID
    title: str
    description: Optional[str]
    open_until: Optional[datetime]
    questions: List[ParticipantQuestionView]
