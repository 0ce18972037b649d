import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from quiz_engine.errors import QuizEngineError
from quiz_engine.logging_config import configure_logging

from quiz_engine.routes.instructor.quiz import router as instructor_quiz_router
from quiz_engine.routes.instructor.session import router as instructor_session_router

from quiz_engine.routes.participant.session import router as participant_session_router
from quiz_engine.routes.participant.result import router as participant_result_router


configure_logging()
logger = logging.getLogger(__name__)


app=FastAPI(
    title="Quiz Session Engine"
)


@app.exception_handler(QuizEngineError)
async def quiz_engine_error_handler(request: Request, exc: QuizEngineError):
    logger.info(
        "%s %s -> %s (%s)", request.method, request.url.path, exc.status_code, exc.kind.value
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/")
def root():
    return {
        "message":"Quiz Session Engine is Running!"
        }


app.include_router(instructor_quiz_router)
app.include_router(instructor_session_router)

app.include_router(participant_session_router)
app.include_router(participant_result_router)
