from datetime import datetime
from typing import Callable

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from quiz_engine.database import get_db
from quiz_engine.helpers.clock import utcnow
from quiz_engine.services.quiz_reader import QuizDefinitionReader
from quiz_engine.services.session_registry import SessionRegistry
from quiz_engine.services.submission_ledger import SubmissionLedger
from quiz_engine.services.submission_locks import SubmissionLocks
from quiz_engine.services.submission_service import SubmissionService

# one lock registry per process, shared by every request
submission_locks = SubmissionLocks()


def get_clock() -> Callable[[], datetime]:
    return utcnow


def get_quiz_reader(db: AsyncSession = Depends(get_db)) -> QuizDefinitionReader:
    return QuizDefinitionReader(db)


def get_session_registry(
    db: AsyncSession = Depends(get_db),
    quiz_reader: QuizDefinitionReader = Depends(get_quiz_reader),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> SessionRegistry:
    return SessionRegistry(db, quiz_reader, clock)


def get_submission_ledger(db: AsyncSession = Depends(get_db)) -> SubmissionLedger:
    return SubmissionLedger(db)


def get_submission_service(
    db: AsyncSession = Depends(get_db),
    registry: SessionRegistry = Depends(get_session_registry),
    ledger: SubmissionLedger = Depends(get_submission_ledger),
    quiz_reader: QuizDefinitionReader = Depends(get_quiz_reader),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> SubmissionService:
    return SubmissionService(db, registry, ledger, quiz_reader, submission_locks, clock)
