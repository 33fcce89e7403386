"""Configuration module for Flask application."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '1') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')
    TESTING = False

    # Session Configuration (Production-safe defaults)
    SESSION_COOKIE_SECURE = os.getenv('SESSION_COOKIE_SECURE', 'false').lower() == 'true'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv('SESSION_COOKIE_SAMESITE', 'Lax')
    PERMANENT_SESSION_LIFETIME = 86400  # 24 hours

    # JSON API: CSRF is enforced on session-authenticated POSTs
    WTF_CSRF_ENABLED = os.getenv('WTF_CSRF_ENABLED', 'true').lower() == 'true'

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    SENTRY_DSN = os.getenv('SENTRY_DSN')

    # Database - Support multiple environment variable naming conventions
    # Priority: DATABASE_URL > DB_* > POSTGRES_*
    DATABASE_URL = os.getenv('DATABASE_URL')

    if not DATABASE_URL:
        DB_HOST = os.getenv('DB_HOST') or os.getenv('POSTGRES_HOST', 'localhost')
        DB_PORT = os.getenv('DB_PORT') or os.getenv('POSTGRES_PORT', '5432')
        DB_NAME = os.getenv('DB_NAME') or os.getenv('POSTGRES_DB', 'sunstone')
        DB_USER = os.getenv('DB_USER') or os.getenv('POSTGRES_USER', 'sunstone')
        DB_PASSWORD = os.getenv('DB_PASSWORD') or os.getenv('POSTGRES_PASSWORD', 'sunstone')

        DATABASE_URL = (
            f"postgresql+psycopg://{DB_USER}:{DB_PASSWORD}"
            f"@{DB_HOST}:{DB_PORT}/{DB_NAME}"
        )

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'false').lower() == 'true'

    # Client suggestions (dashboard "reach out" card)
    BIRTHDAY_WINDOW_DAYS = int(os.getenv('BIRTHDAY_WINDOW_DAYS', '14'))
    LAPSED_AFTER_DAYS = int(os.getenv('LAPSED_AFTER_DAYS', '90'))
    NEW_LEAD_WINDOW_DAYS = int(os.getenv('NEW_LEAD_WINDOW_DAYS', '7'))
    SUGGESTION_CANDIDATE_LIMIT = int(os.getenv('SUGGESTION_CANDIDATE_LIMIT', '10'))
    CLIENT_SUGGESTION_LIMIT = int(os.getenv('CLIENT_SUGGESTION_LIMIT', '6'))

    # Admin "needs attention" card
    ADMIN_SUGGESTION_LIMIT = int(os.getenv('ADMIN_SUGGESTION_LIMIT', '8'))


class TestConfig(Config):
    """Configuration used by the pytest suite (in-memory SQLite)."""

    TESTING = True
    DEBUG = False
    ENV = 'testing'
    WTF_CSRF_ENABLED = False
    SQLALCHEMY_DATABASE_URI = 'sqlite+pysqlite:///:memory:'
    SQLALCHEMY_ECHO = False
    SENTRY_DSN = None
