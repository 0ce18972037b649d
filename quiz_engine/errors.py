import enum
from typing import Any, Dict, Optional
from datetime import datetime
from uuid import UUID

from fastapi.encoders import jsonable_encoder

from quiz_engine.helpers.session_window import SessionState


# ---------------------------
# Error kinds
# ---------------------------
class ErrorKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    SESSION_NOT_OPEN = "session_not_open"
    CONFLICT = "conflict"
    INVALID_ANSWER = "invalid_answer"
    INVALID_INPUT = "invalid_input"


STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.SESSION_NOT_OPEN: 403,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INVALID_ANSWER: 400,
    ErrorKind.INVALID_INPUT: 400,
}


class QuizEngineError(Exception):
    """
    Base of every error raised by the engine.

    Each concrete error is a direct subclass that only fixes ``kind`` and
    fills ``details``; callers branch on ``kind`` rather than on the class
    hierarchy. None of them is retried by the engine itself.
    """

    kind: ErrorKind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detail": self.message,
            "kind": self.kind.value,
            "details": jsonable_encoder(self.details),
        }


# ---------------------------
# Not found
# ---------------------------
class SessionNotFoundError(QuizEngineError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, session_name: str):
        super().__init__(
            f"Session '{session_name}' not found",
            resource="session",
            identifier=session_name,
        )


class QuizNotFoundError(QuizEngineError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, quiz_id: UUID):
        super().__init__(
            f"Quiz '{quiz_id}' not found",
            resource="quiz",
            identifier=quiz_id,
        )


class SubmissionNotFoundError(QuizEngineError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, result_token: str):
        super().__init__(
            "Result not found",
            resource="submission",
            identifier=result_token,
        )


# ---------------------------
# Session window
# ---------------------------
class SessionNotOpenError(QuizEngineError):
    kind = ErrorKind.SESSION_NOT_OPEN

    def __init__(
        self,
        session_name: str,
        state: SessionState,
        open_from: datetime,
        open_until: Optional[datetime] = None,
    ):
        if state is SessionState.NOT_YET_OPEN:
            message = "Session is not yet open"
        else:
            message = "Session is already closed"

        super().__init__(
            message,
            session_name=session_name,
            state=state.value,
            open_from=open_from,
            open_until=open_until,
        )
        self.state = state


# ---------------------------
# Conflicts
# ---------------------------
class DuplicateSubmissionError(QuizEngineError):
    kind = ErrorKind.CONFLICT

    def __init__(self, session_name: str, participant_identity: str):
        super().__init__(
            f"You have already participated in this quiz ({session_name})",
            session_name=session_name,
            participant_identity=participant_identity,
        )


class SessionNameTakenError(QuizEngineError):
    kind = ErrorKind.CONFLICT

    def __init__(self, session_name: str):
        super().__init__(
            f"A session named '{session_name}' already exists",
            session_name=session_name,
        )


# ---------------------------
# Invalid input
# ---------------------------
class InvalidAnswerError(QuizEngineError):
    kind = ErrorKind.INVALID_ANSWER

    def __init__(self, message: str, question_id: UUID, option_id: Optional[UUID] = None):
        super().__init__(message, question_id=question_id, option_id=option_id)


class InvalidSessionWindowError(QuizEngineError):
    kind = ErrorKind.INVALID_INPUT

    def __init__(self, open_from: datetime, open_until: datetime):
        super().__init__(
            "open_until must not be earlier than open_from",
            open_from=open_from,
            open_until=open_until,
        )


class InvalidQuizError(QuizEngineError):
    kind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str, question_index: Optional[int] = None):
        super().__init__(message, question_index=question_index)
