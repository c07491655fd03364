import os


def _env(name, default):
    # empty values count as unset
    return os.getenv(name) or default


class Config:
    # Full override, e.g. "sqlite:///bookstore.db". When unset the URL is
    # built from the DB_* parts below.
    DATABASE_URL = os.getenv("DATABASE_URL")

    DB_HOST = _env("DB_HOST", "localhost")
    DB_PORT = int(_env("DB_PORT", "5432"))
    DB_USER = _env("DB_USER", "postgres")
    DB_PASSWORD = _env("DB_PASSWORD", "postgres")
    DB_NAME = _env("DB_NAME", "bookstore")

    # Pool bounds
    DB_MAX_OPEN_CONNS = int(_env("DB_MAX_OPEN_CONNS", "25"))
    DB_MAX_IDLE_CONNS = int(_env("DB_MAX_IDLE_CONNS", "20"))
    DB_CONN_MAX_LIFETIME = int(_env("DB_CONN_MAX_LIFETIME", "300"))  # seconds

    # Startup retry
    DB_CONNECT_ATTEMPTS = int(_env("DB_CONNECT_ATTEMPTS", "10"))
    DB_CONNECT_DELAY = float(_env("DB_CONNECT_DELAY", "3"))

    SQLALCHEMY_ECHO = False

    PORT = int(_env("PORT", "8080"))
    RECENT_BOOKS_LIMIT = 4
