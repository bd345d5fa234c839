import logging
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from assessment_engine.core.config import settings
from assessment_engine.schemas.response import APIResponse
from assessment_engine.utils import deps

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/health", response_model=APIResponse[dict])
async def health_check(db: Session = Depends(deps.get_db)):
    db.execute(text("SELECT 1"))
    return APIResponse(message="OK", data={"status": "healthy", "version": settings.VERSION})
