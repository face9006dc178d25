"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the question bank backend.
Controllers are intentionally thin: they accept requests, delegate to
services, and return JSON responses. Service errors are rendered by the
exception handlers registered below.

Endpoints implemented:
- POST /register
- POST /login
- GET /api/courses
- GET /api/questions
- GET /api/questions/{id}
- POST /api/questions
- PUT /api/questions/{id}
- DELETE /api/questions/{id}
- GET /
- GET /health
"""

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from sqlmodel import Session

from . import services
from .config import settings
from .database import create_db_and_tables, get_session
from .errors import ServiceError
from .schemas import CredentialsIn, QuestionIn

logger = logging.getLogger("questionbank.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.CREATE_TABLES:
        create_db_and_tables()
    logger.info("question bank API ready")
    yield


app = FastAPI(title="Question Bank API", lifespan=lifespan)

if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    context = {
        "request_id": req_id,
        "path": request.url.path,
        "method": request.method,
        "client": request.client.host if request.client else "unknown",
    }
    # unhandled exceptions propagate to unhandled_error_handler, which logs them
    response: Response = await call_next(request)
    response.headers["X-Request-ID"] = req_id
    context["status_code"] = response.status_code
    context["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info("request_done %s", json.dumps(context, ensure_ascii=True))
    return response


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_body()))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "error": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    req_id = getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID") or uuid.uuid4().hex
    context = {"request_id": req_id, "path": request.url.path, "method": request.method}
    logger.exception("request_failed %s", json.dumps(context, ensure_ascii=True))
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error"},
        headers={"X-Request-ID": req_id},
    )


@app.post('/register')
def register(payload: Optional[CredentialsIn] = None, db: Session = Depends(get_session)):
    """Register a new user with an email and PIN.

    Duplicate emails are rejected with 400.
    """
    payload = payload or CredentialsIn()
    return services.AuthService(db).register(payload.email, payload.pin)


@app.post('/login')
def login(payload: Optional[CredentialsIn] = None, db: Session = Depends(get_session)):
    """Check an email/PIN pair.

    Returns a plain success message; no session or token is issued.
    """
    payload = payload or CredentialsIn()
    return services.AuthService(db).login(payload.email, payload.pin)


@app.get('/api/courses')
def list_courses(search: Optional[str] = None, db: Session = Depends(get_session)):
    """List active subjects, optionally filtered by a name substring."""
    return services.CatalogService(db).list_subjects(search)


@app.get('/api/questions')
def list_questions(
    subject_id: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db: Session = Depends(get_session),
):
    """List questions one page at a time.

    Each row carries its subject name and a comma-joined `tags` string.
    """
    return services.QuestionService(db).list_questions(subject_id, page, limit)


@app.get('/api/questions/{question_id}')
def get_question(question_id: int, db: Session = Depends(get_session)):
    return services.QuestionService(db).get_question(question_id)


@app.post('/api/questions', status_code=201)
def create_questions(payload: Any = Body(default=None), db: Session = Depends(get_session)):
    """Bulk-create questions from a JSON array."""
    return services.QuestionService(db).create_questions(payload)


@app.put('/api/questions/{question_id}')
def update_question(question_id: int, data: QuestionIn, db: Session = Depends(get_session)):
    """Replace every field of an existing question."""
    return services.QuestionService(db).update_question(question_id, data)


@app.delete('/api/questions/{question_id}')
def delete_question(question_id: int, db: Session = Depends(get_session)):
    return services.QuestionService(db).delete_question(question_id)


@app.get("/", response_class=PlainTextResponse)
def home():
    return "Hello from the question bank API"


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}


def run():
    """Serve the API with uvicorn on all interfaces."""
    import uvicorn

    uvicorn.run(
        "questionbank.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
