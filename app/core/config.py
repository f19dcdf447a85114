from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Customer Registry"

    # Audit log file (append-only, human readable)
    AUDIT_LOG_FILE: str = "logs.txt"
    AUDIT_DEFAULT_ACTOR: str = "System"
    # Exports requested over HTTP must land inside this directory
    AUDIT_EXPORT_DIR: str = "exports"

    LOG_LEVEL: str = "INFO"

    class Config:
        case_sensitive = True

settings = Settings()
