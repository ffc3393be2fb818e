import logging
import os
import uuid
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from typing import Optional

import uvicorn
from fastapi import Cookie, Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from .config import settings
from .errors import (
    DuplicateAnswerError,
    InsufficientPoolError,
    NoActiveSessionError,
    QuestionBankError,
    QuizError,
    SessionCompleteError,
    StorageQuotaError,
    UnknownQuestionError,
)
from .models import WireModel
from .question_bank import QuestionBank
from .redis_session import RedisStore
from .scoring import get_performance_message, is_passing
from .service import QuizService
from .storage import KeyValueStore, QuizStorage

logger = logging.getLogger(__name__)


# --- Logging Setup ---
def configure_logging() -> None:
    package_logger = logging.getLogger(__package__)
    package_logger.setLevel(logging.INFO)
    if not settings.LOG_TO_FILE:
        return
    if not os.path.exists(settings.LOG_DIR):
        os.makedirs(settings.LOG_DIR)
    log_path = os.path.join(settings.LOG_DIR, settings.LOG_FILE)
    file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")
    )
    package_logger.addHandler(file_handler)


# --- Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info(f"Question sources: {question_bank.list_sources()}")
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

question_bank = QuestionBank(settings.QUESTION_DIR)


# --- Request bodies ---
class StartRequest(WireModel):
    source: Optional[str] = None


class AnswerRequest(WireModel):
    question_id: str
    selected_choice_id: str


# --- Dependencies ---
def get_question_bank() -> QuestionBank:
    return question_bank


def get_store() -> KeyValueStore:
    return RedisStore()


def get_client_id(
    client_id: Optional[str] = Cookie(None, alias=settings.CLIENT_COOKIE_NAME),
) -> str:
    return client_id or uuid.uuid4().hex


def get_service(
    client_id: str = Depends(get_client_id),
    store: KeyValueStore = Depends(get_store),
    bank: QuestionBank = Depends(get_question_bank),
) -> QuizService:
    storage = QuizStorage(store, key=f"{settings.STORAGE_KEY}:{client_id}")
    return QuizService(bank, storage)


# --- Error mapping ---
_ERROR_STATUS = {
    InsufficientPoolError: 409,
    DuplicateAnswerError: 409,
    SessionCompleteError: 409,
    UnknownQuestionError: 400,
    NoActiveSessionError: 404,
    QuestionBankError: 503,
    StorageQuotaError: 507,
}


@app.exception_handler(QuizError)
async def quiz_error_handler(request: Request, exc: QuizError):
    status_code = next(
        (code for error, code in _ERROR_STATUS.items() if isinstance(exc, error)), 500
    )
    body = {"error": str(exc)}
    if isinstance(exc, InsufficientPoolError):
        body.update(available=exc.available, required=exc.required)
    if status_code == 500:
        logger.error(f"Unhandled quiz error on {request.url.path}: {exc}")
    return JSONResponse(body, status_code=status_code)


def _dump(model: WireModel) -> dict:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


# --- Routes ---
@app.get("/api/sources")
def get_sources(bank: QuestionBank = Depends(get_question_bank)):
    return bank.list_sources()


@app.post("/api/session")
def start_session(
    response: Response,
    body: StartRequest = StartRequest(),
    client_id: str = Depends(get_client_id),
    service: QuizService = Depends(get_service),
):
    session = service.start(body.source or settings.DEFAULT_SOURCE)
    response.set_cookie(
        key=settings.CLIENT_COOKIE_NAME,
        value=client_id,
        httponly=True,
        samesite="lax",
    )
    return _dump(session)


@app.get("/api/session")
def get_session(service: QuizService = Depends(get_service)):
    session = service.resume()
    if session is None:
        raise NoActiveSessionError()
    return _dump(session)


@app.post("/api/session/answer")
def submit_answer(body: AnswerRequest, service: QuizService = Depends(get_service)):
    return _dump(service.answer(body.question_id, body.selected_choice_id))


@app.post("/api/session/next")
def next_question(service: QuizService = Depends(get_service)):
    return _dump(service.next())


@app.post("/api/session/finish")
def finish_session(service: QuizService = Depends(get_service)):
    result = service.finish()
    return {
        "result": _dump(result),
        "passing": is_passing(result.percentage_score),
        "message": get_performance_message(result.percentage_score),
    }


@app.delete("/api/session")
def reset_session(response: Response, service: QuizService = Depends(get_service)):
    service.discard()
    response.delete_cookie(settings.CLIENT_COOKIE_NAME)
    return {"status": "success"}


@app.get("/api/timer")
def get_timer(service: QuizService = Depends(get_service)):
    return _dump(service.timer())


@app.get("/api/history")
def get_history(service: QuizService = Depends(get_service)):
    return [_dump(result) for result in service.history()]


def run() -> None:
    uvicorn.run("obake.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)


if __name__ == "__main__":
    run()
