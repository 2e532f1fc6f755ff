import os

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./eventhub.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")


def get_database_url():
    return DATABASE_URL


def get_cors_origins() -> list[str]:
    return [origin.strip() for origin in CORS_ORIGINS.split(",") if origin.strip()]
