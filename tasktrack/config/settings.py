# tasktrack/config/settings.py
# Runtime configuration for the service layer (database, tokens, logging)

import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings read from the environment"""

    # Database
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///./tasktrack.db')
    DB_SSLMODE = os.getenv('DB_SSLMODE')  # e.g. "require" on hosted PostgreSQL

    # Tokens
    SECRET_KEY = os.getenv('SECRET_KEY', 'change-me')
    ALGORITHM = os.getenv('ALGORITHM', 'HS256')
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv('ACCESS_TOKEN_EXPIRE_MINUTES', 60 * 24))

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # Server
    HOST = os.getenv('HOST', '0.0.0.0')
    PORT = int(os.getenv('PORT', '8000'))
    RELOAD = os.getenv('RELOAD', 'true').lower() == 'true'

    # Seed admin (create_tables.py)
    DEFAULT_ADMIN_EMAIL = os.getenv('DEFAULT_ADMIN_EMAIL', 'admin@example.com')
    DEFAULT_ADMIN_PASSWORD = os.getenv('DEFAULT_ADMIN_PASSWORD', 'admin123')

    @classmethod
    def is_sqlite(cls) -> bool:
        """Check if the configured database is SQLite"""
        return cls.DATABASE_URL.startswith('sqlite')

    @classmethod
    def get_connect_args(cls) -> dict:
        """Driver-specific connection arguments for create_engine"""
        if cls.is_sqlite():
            return {"check_same_thread": False}
        if cls.DB_SSLMODE:
            return {"sslmode": cls.DB_SSLMODE}
        return {}


settings = Settings()
