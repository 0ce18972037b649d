import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="quiz_engine_tests_")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(_DB_DIR, "test.db")

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Dict

import httpx
import pytest

from quiz_engine.database import AsyncSessionLocal, engine, init_models
from quiz_engine.dependencies import get_clock
from quiz_engine.main import app
from quiz_engine.models import QuestionType, Quiz, QuizOption, QuizQuestion
from quiz_engine.services.quiz_reader import QuizDefinitionReader
from quiz_engine.services.session_registry import SessionRegistry
from quiz_engine.services.submission_ledger import SubmissionLedger
from quiz_engine.services.submission_locks import SubmissionLocks
from quiz_engine.services.submission_service import SubmissionService

NOON = datetime(2030, 1, 1, 12, 0, 0)


class FrozenClock:
    """Callable clock whose time only moves when a test sets it."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@dataclass
class SampleQuiz:
    quiz_id: uuid.UUID
    q1: uuid.UUID
    q1_options: Dict[str, uuid.UUID]
    q2: uuid.UUID
    q2_options: Dict[str, uuid.UUID]


def build_question(question_type, flags, marks=1, position=0):
    """
    Transient question with options named A, B, C... and the given
    correctness flags, e.g. build_question(QuestionType.MULTIPLE, "TTFT").
    """
    options = [
        QuizOption(
            id=uuid.uuid4(),
            position=idx,
            option_text=chr(ord("A") + idx),
            is_correct=flag == "T",
        )
        for idx, flag in enumerate(flags)
    ]
    return QuizQuestion(
        id=uuid.uuid4(),
        position=position,
        question_text=f"Question {position + 1}",
        question_type=question_type,
        marks=marks,
        options=options,
    )


def option_id(question, letter):
    return question.options[ord(letter) - ord("A")].id


def build_service(db, clock, locks=None) -> SubmissionService:
    quiz_reader = QuizDefinitionReader(db)
    registry = SessionRegistry(db, quiz_reader, clock)
    return SubmissionService(
        db,
        registry,
        SubmissionLedger(db),
        quiz_reader,
        locks or SubmissionLocks(),
        clock,
    )


@pytest.fixture(autouse=True)
async def database():
    await init_models(reset=True)
    yield
    await engine.dispose()


@pytest.fixture
def clock():
    return FrozenClock(NOON)


@pytest.fixture
async def db():
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def sample_quiz() -> SampleQuiz:
    """
    Q1 single choice, C correct.
    Q2 multiple choice, A B D correct, C wrong.
    """
    q1 = build_question(QuestionType.SINGLE, "FFT", position=0)
    q2 = build_question(QuestionType.MULTIPLE, "TTFT", position=1)
    quiz = Quiz(id=uuid.uuid4(), title="Sample quiz", questions=[q1, q2])

    async with AsyncSessionLocal() as session:
        session.add(quiz)
        await session.commit()

    return SampleQuiz(
        quiz_id=quiz.id,
        q1=q1.id,
        q1_options={opt.option_text: opt.id for opt in q1.options},
        q2=q2.id,
        q2_options={opt.option_text: opt.id for opt in q2.options},
    )


@pytest.fixture
def locks():
    return SubmissionLocks()


@pytest.fixture
def service(db, clock, locks):
    return build_service(db, clock, locks)


@pytest.fixture
async def client(clock):
    app.dependency_overrides[get_clock] = lambda: clock
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
