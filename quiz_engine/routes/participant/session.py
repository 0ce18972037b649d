from datetime import datetime
from typing import Callable, List

from fastapi import APIRouter, Depends

from quiz_engine.dependencies import get_clock, get_session_registry, get_submission_service
from quiz_engine.routes.instructor.session import session_item
from quiz_engine.schemas.session import SessionItem, SessionQuizView
from quiz_engine.schemas.submission import SubmitRequest, SubmitResponse
from quiz_engine.services.session_registry import SessionRegistry
from quiz_engine.services.submission_service import SubmissionService

router = APIRouter(
    prefix="/participant/session",
    tags=["Participant Session Endpoints"]
)


@router.get(
    "/open-sessions",
    response_model=List[SessionItem],
)
async def list_open_sessions(
    registry: SessionRegistry = Depends(get_session_registry),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    now = clock()
    return [session_item(s, now) for s in await registry.list_open_sessions(now)]


@router.get(
    "/{session_name}/quiz",
    response_model=SessionQuizView,
)
async def get_session_quiz(
    session_name: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    quiz_session, quiz = await registry.get_session_quiz(session_name)

    # --------------------------
    # Response without answer key
    # --------------------------
    return SessionQuizView(
        session_name=quiz_session.session_name,
        quiz_id=quiz.id,
        title=quiz.title,
        description=quiz.description,
        open_until=quiz_session.open_until,
        questions=[
            {
                "id": q.id,
                "question_text": q.question_text,
                "question_type": q.question_type,
                "marks": q.marks,
                "options": [
                    {"id": opt.id, "option_text": opt.option_text}
                    for opt in q.options
                ],
            }
            for q in quiz.questions
        ],
    )


@router.post(
    "/{session_name}/submit",
    response_model=SubmitResponse,
    status_code=201,
)
async def submit_answers(
    session_name: str,
    payload: SubmitRequest,
    service: SubmissionService = Depends(get_submission_service),
):
    result = await service.submit(
        session_name=session_name,
        participant_identity=payload.participant_identity,
        answers=payload.answers,
    )

    # per-question detail stays behind the result endpoint's visibility rule
    return SubmitResponse(
        result_token=result.result_token,
        score=result.score,
        max_score=result.max_score,
    )
