import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session
import uvicorn

from siap_bimbingan.config import CORS_ORIGINS, LOG_LEVEL
from siap_bimbingan.dependencies import create_db_and_tables, get_db
from siap_bimbingan.routers import router
from siap_bimbingan.routers.auth import issue_token
from siap_bimbingan.schemas.auth import TokenResponse
from siap_bimbingan.services.conflict_service import ScheduleConflictError
from siap_bimbingan.services.guidance_workflow import WorkflowError
from siap_bimbingan.utils.authentication import authenticate
from siap_bimbingan.utils.validation import (
    PayloadValidationError,
    payload_validation_exception_handler,
    request_validation_exception_handler,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="SIAP Bimbingan API",
    description="Thesis guidance scheduling and progress tracking API built with FastAPI and SQLModel",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=[
        "GET",
        "POST",
        "PUT",
        "PATCH",
        "DELETE",
        "OPTIONS",
    ],
    allow_headers=[
        "Content-Type",
        "Authorization",
    ],
)

app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
app.add_exception_handler(PayloadValidationError, payload_validation_exception_handler)


@app.exception_handler(ScheduleConflictError)
async def schedule_conflict_exception_handler(request: Request, exc: ScheduleConflictError):
    return JSONResponse(
        status_code=400,
        content={"message": exc.message, "conflicts": exc.conflicts},
    )


@app.exception_handler(WorkflowError)
async def workflow_exception_handler(request: Request, exc: WorkflowError):
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Event handler to create database and tables on startup
@app.on_event("startup")
def on_startup():
    create_db_and_tables()


@app.post("/token", response_model=TokenResponse)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)
):
    """
    OAuth2 compatible token login endpoint.
    The username field carries the email address; works for every role.
    """
    user, _ = authenticate(db, form_data.username.lower(), form_data.password)
    return issue_token(user)


@app.get("/")
async def root():
    return {
        "message": "Welcome to the SIAP Bimbingan API. Visit /docs for API documentation."
    }


app.include_router(router)


if __name__ == "__main__":
    uvicorn.run("siap_bimbingan.main:app", host="127.0.0.1", port=8000, reload=True)
