from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # API Settings
    PROJECT_NAME: str = "Society Ledgers API"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "Bill approval and expense tracking for housing societies"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # MongoDB
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "society_ledgers"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8080"]

    # JWT
    SECRET_KEY: str = "change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    BCRYPT_ROUNDS: int = 12
    INVITATION_EXPIRE_DAYS: int = 7

    # Email notifications
    EMAIL_SERVICE_URL: str = ""
    EMAIL_SERVICE_API_KEY: str = ""
    EMAIL_FROM: str = ""
    EMAIL_TIMEOUT_SECONDS: float = 10.0

    # File Upload
    MAX_FILE_SIZE: int = 10485760
    MAX_UPLOAD_FILES: int = 5
    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/files"

    # Workflow hardening switches
    LOCK_TERMINAL_BILLS: bool = False
    ENFORCE_ADVANCE_BILL_LINK: bool = False

    # Bootstrap admin, created on startup when both are set
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

settings = Settings()
