from datetime import datetime
from typing import Callable, List

from fastapi import APIRouter, Depends, Query

from quiz_engine.dependencies import get_clock, get_session_registry, get_submission_service
from quiz_engine.helpers.session_window import session_state
from quiz_engine.models import QuizSession
from quiz_engine.schemas.session import (
    SessionCreate, SessionItem, SessionWindowUpdate, SessionStatisticsView
)
from quiz_engine.schemas.submission import SubmissionListItem
from quiz_engine.services.session_registry import SESSION_LIST_LIMIT, SessionRegistry
from quiz_engine.services.submission_service import SubmissionService

router = APIRouter(
    prefix="/instructor/session",
    tags=["Instructor Session Endpoints"]
)


def session_item(quiz_session: QuizSession, now: datetime) -> SessionItem:
    return SessionItem(
        id=quiz_session.id,
        session_name=quiz_session.session_name,
        quiz_id=quiz_session.quiz_id,
        open_from=quiz_session.open_from,
        open_until=quiz_session.open_until,
        created_at=quiz_session.created_at,
        state=session_state(quiz_session, now),
    )


@router.post(
    "/create-session",
    response_model=SessionItem,
    status_code=201,
)
async def create_session(
    session_in: SessionCreate,
    registry: SessionRegistry = Depends(get_session_registry),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    quiz_session = await registry.create_session(
        quiz_id=session_in.quiz_id,
        open_from=session_in.open_from,
        open_until=session_in.open_until,
        session_name=session_in.session_name,
    )
    return session_item(quiz_session, clock())


@router.get(
    "/list-sessions",
    response_model=List[SessionItem],
)
async def list_sessions(
    limit: int = Query(SESSION_LIST_LIMIT, ge=1, le=1000),
    registry: SessionRegistry = Depends(get_session_registry),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    now = clock()
    return [session_item(s, now) for s in await registry.list_sessions(limit)]


@router.get(
    "/session-details/{session_name}",
    response_model=SessionItem,
)
async def get_session_details(
    session_name: str,
    registry: SessionRegistry = Depends(get_session_registry),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    quiz_session = await registry.get_session(session_name)
    return session_item(quiz_session, clock())


@router.patch(
    "/update-window/{session_name}",
    response_model=SessionItem,
)
async def update_session_window(
    session_name: str,
    window_in: SessionWindowUpdate,
    registry: SessionRegistry = Depends(get_session_registry),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    quiz_session = await registry.update_session_window(
        session_name,
        open_from=window_in.open_from,
        open_until=window_in.open_until,
    )
    return session_item(quiz_session, clock())


@router.delete(
    "/delete-session/{session_name}",
    status_code=204,
)
async def delete_session(
    session_name: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    await registry.delete_session(session_name)
    return None


@router.get(
    "/statistics/{session_name}",
    response_model=SessionStatisticsView,
)
async def get_session_statistics(
    session_name: str,
    service: SubmissionService = Depends(get_submission_service),
):
    return await service.get_session_statistics(session_name)


@router.get(
    "/submissions/{session_name}",
    response_model=List[SubmissionListItem],
)
async def list_session_submissions(
    session_name: str,
    service: SubmissionService = Depends(get_submission_service),
):
    submissions = await service.list_session_submissions(session_name)
    return [SubmissionListItem.model_validate(s) for s in submissions]
