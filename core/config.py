import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    APP_NAME: str = "HabitTrack"

    # Frontend
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")

    # Storage
    # 'local' keeps every habit in a single JSON blob (the browser store layout),
    # 'mongo' uses a habits collection plus a habit_completions collection.
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "local")
    LOCAL_STORE_PATH: str = os.getenv("LOCAL_STORE_PATH", "data/habits.json")

    # Database
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    DB_NAME: str = os.getenv("DB_NAME", "habittrack")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: str = os.getenv("LOG_FILE", "")

    # Reminders
    REMINDERS_ENABLED: bool = True
    REMINDER_CHECK_MINUTES: int = 1

    # Stats Configuration
    # Habit detail returns completions for this many trailing days.
    COMPLETIONS_LOOKBACK_DAYS: int = 30
    # Default number of buckets per contribution-matrix granularity.
    CONTRIBUTION_DEFAULT_LENGTH: dict = {"day": 30, "week": 12, "month": 12}

    # Pydantic Settings Config
    model_config = {"env_file": ".env", "extra": "ignore"}

settings = Settings()
