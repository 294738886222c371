# estatecrm/config.py
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="CRM_", extra="ignore")

    # --- Database ---
    database_url: str = "sqlite:///estatecrm/estatecrm_dev.db"

    # --- Bookings ---
    default_hold_hours: int = 48
    cancel_bookings_on_project_close: bool = False
    auto_release_expired_holds: bool = False

    # --- Payments / receipts ---
    receipt_prefix: str = "RCP"
    receipt_output_dir: str = "uploads/receipts"

    # --- Reminders ---
    reminder_backend: Literal["log", "local"] = "log"
    reminder_outbox_dir: str = "uploads/reminders"

    # --- Scheduler ---
    scheduler_interval_seconds: int = 60

    # --- Logging ---
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    log_json: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

# Ensure path directory exists (for SQLite)
if settings.database_url.startswith("sqlite:///"):
    db_path = Path(settings.database_url.replace("sqlite:///", ""))
    db_path.parent.mkdir(parents=True, exist_ok=True)

# --- SQLAlchemy setup ---
engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False}
    if settings.database_url.startswith("sqlite")
    else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()
