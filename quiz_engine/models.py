import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Enum, ForeignKey, Text, JSON, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from quiz_engine.database import Base


# ---------------------------
# Question Type Enum
# ---------------------------
class QuestionType(str, enum.Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"


# ---------------------------
# Quiz Definition
# ---------------------------
class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    questions = relationship(
        "QuizQuestion",
        back_populates="quiz",
        cascade="all, delete-orphan",
        order_by="QuizQuestion.position",
    )


class QuizQuestion(Base):
    __tablename__ = "quiz_questions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    quiz_id = Column(UUID(as_uuid=True), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)

    position = Column(Integer, nullable=False, default=0)
    question_text = Column(Text, nullable=False)
    question_type = Column(Enum(QuestionType, name="question_type_enum"), nullable=False, default=QuestionType.SINGLE)
    marks = Column(Integer, nullable=False, default=1)

    quiz = relationship("Quiz", back_populates="questions")
    options = relationship(
        "QuizOption",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="QuizOption.position",
    )


class QuizOption(Base):
    __tablename__ = "quiz_options"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    question_id = Column(UUID(as_uuid=True), ForeignKey("quiz_questions.id", ondelete="CASCADE"), nullable=False)

    position = Column(Integer, nullable=False, default=0)
    option_text = Column(Text, nullable=False)
    is_correct = Column(Boolean, default=False)

    question = relationship("QuizQuestion", back_populates="options")


# ---------------------------
# Quiz Session
# ---------------------------
class QuizSession(Base):
    __tablename__ = "quiz_sessions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_name = Column(String(100), unique=True, nullable=False)

    # weak reference: the quiz may be deleted while the session lives on
    quiz_id = Column(UUID(as_uuid=True), nullable=False)

    open_from = Column(DateTime, nullable=False)
    open_until = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    submissions = relationship("Submission", back_populates="quiz_session", cascade="all, delete-orphan")


# ---------------------------
# Submission Ledger
# ---------------------------
class Submission(Base):
    __tablename__ = "submissions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(UUID(as_uuid=True), ForeignKey("quiz_sessions.id", ondelete="CASCADE"), nullable=False)

    participant_identity = Column(String(100), nullable=False)
    result_token = Column(String(32), unique=True, nullable=False, default=lambda: uuid.uuid4().hex)

    score = Column(Integer, nullable=False)
    max_score = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    quiz_session = relationship("QuizSession", back_populates="submissions")
    answers = relationship(
        "SubmissionAnswer",
        back_populates="submission",
        cascade="all, delete-orphan",
        order_by="SubmissionAnswer.position",
    )

    __table_args__ = (
        UniqueConstraint("session_id", "participant_identity", name="unique_session_participant"),
    )


class SubmissionAnswer(Base):
    """Graded snapshot of one question, kept independent of later quiz edits."""

    __tablename__ = "submission_answers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    submission_id = Column(UUID(as_uuid=True), ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False)

    question_id = Column(UUID(as_uuid=True), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    answered = Column(Boolean, default=False)
    chosen_option_ids = Column(JSON, nullable=False, default=list)
    correct_option_ids = Column(JSON, nullable=False, default=list)

    points = Column(Integer, nullable=False, default=0)
    max_points = Column(Integer, nullable=False, default=1)

    submission = relationship("Submission", back_populates="answers")
