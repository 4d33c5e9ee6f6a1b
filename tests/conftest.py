"""
Pytest configuration and fixtures
"""
import logging
import os
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from employees_api.main import app
from employees_api.api.endpoints import get_today
from employees_api.db.database import Base, build_engine, get_db, seed_catalogs
from employees_api.models import models  # noqa: F401  (registers tables)

logger = logging.getLogger(__name__)


TODAY = date(2024, 3, 15)


@pytest.fixture(scope="session")
def test_db_url(tmp_path_factory):
    """
    Get test database URL.

    TEST_DATABASE_URL wins; otherwise a disposable PostgreSQL container is
    started, and when Docker is not reachable the suite runs on a SQLite file.
    """
    url = os.environ.get("TEST_DATABASE_URL")
    if url:
        yield url
        return

    try:
        from testcontainers.postgres import PostgresContainer

        postgres = PostgresContainer(
            image="postgres:15-alpine",
            username="postgres",
            password="test",
            dbname="test_db",
            driver="psycopg",
        )
        postgres.start()
    except Exception as e:
        logger.warning("PostgreSQL container unavailable (%s), using SQLite", e)
        yield f"sqlite:///{tmp_path_factory.mktemp('db') / 'employees.db'}"
        return

    try:
        yield postgres.get_connection_url()
    finally:
        postgres.stop()


@pytest.fixture(scope="function")
def db_engine(test_db_url):
    """Fresh schema with seeded catalogs for every test"""
    engine = build_engine(test_db_url)
    Base.metadata.create_all(bind=engine)
    seed_catalogs(engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=db_engine)


@pytest.fixture(scope="function")
def test_db(session_factory):
    """Create test database session and point the app at the test database"""
    def override_get_db():
        try:
            db = session_factory()
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    db = session_factory()
    yield db
    db.close()

    app.dependency_overrides.clear()


class FrozenClock:
    """Stand-in for get_today; tests move it between days"""

    def __init__(self, day: date):
        self.day = day

    def __call__(self) -> date:
        return self.day


@pytest.fixture
def clock():
    return FrozenClock(TODAY)


@pytest.fixture
def client(test_db, clock):
    """Create FastAPI test client bound to the test database and clock"""
    app.dependency_overrides[get_today] = clock
    return TestClient(app)


@pytest.fixture
def employee_payload():
    """Sample create payload"""
    return {
        "birth_date": "1990-05-21",
        "first_name": "Maria",
        "last_name": "Lopez",
        "gender": "F",
        "title": "Engineer",
        "salary": 75000,
        "dept_no": "d005",
    }


@pytest.fixture
def create_employee(client, employee_payload):
    """Factory creating employees through the API"""
    def _create(**overrides):
        response = client.post("/api/employees", json={**employee_payload, **overrides})
        assert response.status_code == 201, response.text
        return response.json()

    return _create
