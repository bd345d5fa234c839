from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from assessment_engine.core.config import settings
from assessment_engine.core.logging import configure_logging
from assessment_engine.core.scheduler import start_scheduler, stop_scheduler
from assessment_engine.endpoints import assessment, session, skill, utility
from assessment_engine.middleware.exceptions import (
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from assessment_engine.middleware.logging import RequestLoggingMiddleware
import assessment_engine.models.all  # noqa: F401
import assessment_engine.services.session_effects  # noqa: F401  subscribes completion handlers

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

app.include_router(assessment.router, prefix="/assessments", tags=["Assessments"])
app.include_router(session.router, prefix="/sessions", tags=["Assessment Sessions"])
app.include_router(skill.router, prefix="/skills", tags=["Skills"])
app.include_router(utility.router, prefix="/utility", tags=["utility"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
