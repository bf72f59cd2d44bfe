# backend/pvz/config.py
from __future__ import annotations
import os


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/pvz.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location (postgresql://...)
        "sqlite:///pvz.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Empty value disables the whitelist; only the length rule applies then
    PVZ_ALLOWED_CITIES = _split_csv(
        os.environ.get("PVZ_ALLOWED_CITIES", "Москва,Санкт-Петербург,Казань")
    )

    DEFAULT_PAGE_LIMIT = int(os.environ.get("DEFAULT_PAGE_LIMIT", "10"))
    MAX_PAGE_LIMIT = int(os.environ.get("MAX_PAGE_LIMIT", "30"))
