from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from assessment_engine.core.config import settings


def build_engine(database_url: str):
    if database_url.startswith("sqlite"):
        # sqlite's busy timeout is in seconds
        return create_engine(
            database_url,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.DATABASE_STATEMENT_TIMEOUT_MS / 1000,
            },
        )
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_timeout=settings.DATABASE_POOL_TIMEOUT_SECONDS,
        connect_args={"options": f"-c statement_timeout={settings.DATABASE_STATEMENT_TIMEOUT_MS}"},
    )


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
