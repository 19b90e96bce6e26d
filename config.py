#!/usr/bin/env python
# config.py
import os
from typing import List

# This assumes config.py is at the root of your project
basedir = os.path.abspath(os.path.dirname(__file__))


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _get_csv_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name)
    source = raw if raw is not None else default
    return [token.strip() for token in source.split(",") if token and token.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-only-secret'

    # Database. Production runs on PostgreSQL with pg_trgm; SQLite is the local default.
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'ruido', 'database', 'instance', 'ruido.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Object storage (public URL construction only)
    STORAGE_ENDPOINT = os.getenv('STORAGE_ENDPOINT', 'http://localhost:9000')
    STORAGE_BUCKET = os.getenv('STORAGE_BUCKET', 'ruido')

    # Search tuning
    SEARCH_SIMILARITY_THRESHOLD = _get_float('SEARCH_SIMILARITY_THRESHOLD', 0.2)
    # Applied with SET LOCAL on PostgreSQL; 0 disables the timeout
    SEARCH_STATEMENT_TIMEOUT_MS = _get_int('SEARCH_STATEMENT_TIMEOUT_MS', 3000)
    SEARCH_MAX_QUERY_LENGTH = _get_int('SEARCH_MAX_QUERY_LENGTH', 200)

    # HTTP
    CORS_ALLOWED_ORIGINS = _get_csv_list('CORS_ALLOWED_ORIGINS', 'http://localhost:3000')
    # Header set by the upstream auth gateway once a session is established
    PROFILE_HEADER = os.getenv('PROFILE_HEADER', 'X-Profile-Id')

    # Runtime behavior
    # Turn Flask debug on/off from env; default off to avoid noisy console
    DEBUG = _get_bool('DEBUG', False)
    # Control console logging; when disabled, logs go only to file
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', False)
