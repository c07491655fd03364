import pytest

from bookstore_service.app import create_app
from bookstore_service.config import Config
from bookstore_service.db import ConnectionManager
from bookstore_service.repository import BookRepository


@pytest.fixture
def config(tmp_path):
    # Each test gets its own SQLite file behind the real pool/engine path
    class TestConfig(Config):
        TESTING = True
        DATABASE_URL = f"sqlite:///{tmp_path / 'bookstore.db'}"
        DB_MAX_OPEN_CONNS = 5
        DB_MAX_IDLE_CONNS = 2
        DB_CONNECT_ATTEMPTS = 2
        DB_CONNECT_DELAY = 0

    return TestConfig


@pytest.fixture
def manager(config):
    manager = ConnectionManager.from_config(config)
    manager.initialize(attempts=1, delay=0)
    manager.create_schema()
    yield manager
    manager.shutdown()


@pytest.fixture
def repo(manager):
    return BookRepository(manager)


@pytest.fixture
def app(config, manager):
    return create_app(config, manager)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def dune():
    return {
        "title": "Dune",
        "author": "Herbert",
        "isbn": "001",
        "year": 1965,
        "price": 9.99,
    }
