from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Literal, Optional
from uuid import UUID
from datetime import datetime

MAX_ANSWERED_QUESTIONS = 1000
MAX_CHOSEN_OPTIONS = 50


#for participants
class SubmitRequest(BaseModel):
    participant_identity: str = Field(..., min_length=1, max_length=100, pattern=r"^[\w -]+$")
    answers: Dict[UUID, List[UUID]]

    @field_validator("participant_identity", mode="before")
    @classmethod
    def strip_identity(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("answers")
    @classmethod
    def limit_answers(cls, value):
        if len(value) > MAX_ANSWERED_QUESTIONS:
            raise ValueError(f"too many answers (max {MAX_ANSWERED_QUESTIONS})")
        for chosen in value.values():
            if len(chosen) > MAX_CHOSEN_OPTIONS:
                raise ValueError(f"too many options chosen (max {MAX_CHOSEN_OPTIONS})")
        return value


class SubmitResponse(BaseModel):
    result_token: str
    score: int
    max_score: int


class QuestionResultItem(BaseModel):
    question_id: UUID
    chosen_option_ids: List[UUID]
    correct_option_ids: List[UUID]
    points: int
    max_points: int
    exact_percent: Optional[int] = None


class ScoredResultView(BaseModel):
    status: Literal["available"] = "available"
    result_token: str
    session_name: str
    quiz_id: UUID
    quiz_title: Optional[str]
    participant_identity: str
    score: int
    max_score: int
    created_at: datetime
    questions: List[QuestionResultItem]


class WithheldResultView(BaseModel):
    status: Literal["withheld"] = "withheld"
    result_token: str
    open_until: datetime


#for instructors
class SubmissionListItem(BaseModel):
    participant_identity: str
    result_token: str
    score: int
    max_score: int
    created_at: datetime

    model_config = {"from_attributes": True}
