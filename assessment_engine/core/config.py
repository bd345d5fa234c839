from pydantic_settings import BaseSettings
from typing import Optional, List

class Settings(BaseSettings):
    PROJECT_NAME: str = "Assessment Session Engine"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 2  # 2 days

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Database Configuration
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: str = "5432"
    DATABASE_USER: str = "postgres"
    DATABASE_PASSWORD: str = "postgres"
    DATABASE_NAME: str = "assessments"

    DATABASE_URL: str = ""
    TEST_DATABASE_URL: Optional[str] = None

    # Every store call is bounded
    DATABASE_STATEMENT_TIMEOUT_MS: int = 5000
    DATABASE_POOL_TIMEOUT_SECONDS: int = 10

    def __init__(self, **data):
        super().__init__(**data)
        if not self.DATABASE_URL:
            self.DATABASE_URL = (
                f'postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}'
                f'@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}'
            )

    # Expiry sweeper
    EXPIRY_SWEEP_INTERVAL_MINUTES: int = 1
    EXPIRY_SWEEP_BATCH_SIZE: int = 1000

    # Email
    EMAILS_ENABLED: bool = False
    SENDGRID_API_KEY: Optional[str] = None
    EMAILS_FROM_EMAIL: str = "no-reply@example.com"
    EMAILS_FROM_NAME: str = "Assessments"
    FRONTEND_BASE_URL: str = "http://localhost:3000"

    CERTIFICATE_BASE_URL: str = "http://localhost:3000/certificates"

    TESTING: bool = False

    class Config:
        env_file = ".env"

settings = Settings()
