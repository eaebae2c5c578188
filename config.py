import os
import logging

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file (if there is one)
load_dotenv()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class Settings(BaseModel):
    # "sqlite://" with no path keeps everything in memory
    database_url: str = "sqlite://"
    echo_sql: bool = False
    reject_overlaps: bool = True
    top_users: int = Field(default=5, gt=0)
    trend_period_days: int = Field(default=30, gt=0)
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build Settings from ROOMBOOK_* environment variables, falling back to defaults."""
    env = {
        "database_url": os.environ.get("ROOMBOOK_DATABASE_URL"),
        "echo_sql": os.environ.get("ROOMBOOK_ECHO_SQL"),
        "reject_overlaps": os.environ.get("ROOMBOOK_REJECT_OVERLAPS"),
        "top_users": os.environ.get("ROOMBOOK_TOP_USERS"),
        "trend_period_days": os.environ.get("ROOMBOOK_TREND_PERIOD_DAYS"),
        "log_level": os.environ.get("ROOMBOOK_LOG_LEVEL"),
    }
    # pydantic turns "true"/"0"/"12" into the right types
    return Settings(**{key: value for key, value in env.items() if value is not None})


def configure_logging(level: str = "INFO"):
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
