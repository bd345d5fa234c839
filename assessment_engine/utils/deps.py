from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from pydantic import ValidationError

from assessment_engine.core.database import SessionLocal
from assessment_engine.core.security import decode_access_token
from assessment_engine.schemas.context import OrgUserContext

http_bearer = HTTPBearer()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_transactional_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def get_current_user_with_context(
    credentials: HTTPAuthorizationCredentials = Depends(http_bearer)
) -> OrgUserContext:
    try:
        payload = decode_access_token(credentials.credentials)
        return OrgUserContext(
            user_id=payload.get("user_id"),
            org_id=payload.get("org_id"),
            role=payload.get("role"),
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

def get_client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None
