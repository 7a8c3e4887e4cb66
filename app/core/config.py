from pydantic_settings import BaseSettings
from typing import List
import os
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = os.getenv("APP_NAME", "LinguaGuide")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # MongoDB Settings
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    DB_NAME: str = os.getenv("DB_NAME", "linguaguide_db")

    # JWT Auth (tokens are issued by the auth service)
    SECRET_KEY: str = os.getenv("SECRET_KEY", "your_secret_key_here")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",  # React frontend
        "http://localhost:5000",  # Vite dev server
    ]

    # Availability
    DEFAULT_TIMEZONE: str = os.getenv("DEFAULT_TIMEZONE", "Asia/Shanghai")
    # Booking statuses that occupy a provider's day
    BOOKED_STATUSES: List[str] = ["confirmed"]
    # Per-provider fetch budget (seconds) while filtering a listing by date
    AVAILABILITY_FETCH_TIMEOUT: float = float(os.getenv("AVAILABILITY_FETCH_TIMEOUT", "5.0"))
    AVAILABILITY_FETCH_CONCURRENCY: int = int(os.getenv("AVAILABILITY_FETCH_CONCURRENCY", "10"))

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
