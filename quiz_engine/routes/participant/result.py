from dataclasses import asdict
from typing import Union

from fastapi import APIRouter, Depends

from quiz_engine.dependencies import get_submission_service
from quiz_engine.schemas.submission import ScoredResultView, WithheldResultView
from quiz_engine.services.submission_service import SubmissionService, WithheldUntil

router = APIRouter(
    prefix="/participant/result",
    tags=["Participant Result Endpoints"]
)


@router.get(
    "/{result_token}",
    response_model=Union[ScoredResultView, WithheldResultView],
)
async def get_result(
    result_token: str,
    service: SubmissionService = Depends(get_submission_service),
):
    """
    Result lookup by the opaque token handed out on submit.
    No login involved; the token itself is the credential.
    """
    result = await service.get_result(result_token)

    if isinstance(result, WithheldUntil):
        return WithheldResultView(**asdict(result))

    return ScoredResultView(**asdict(result))
