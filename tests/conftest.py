import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mwa_survey.db.session import get_db, init_db
from mwa_survey.main import app
from mwa_survey.routes.runs import STORE


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    # not entered as a context manager: startup would create the file database
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def fresh_run_store():
    STORE.clear()
    yield
    STORE.clear()


@pytest.fixture
def make_record():
    def _make(**overrides):
        record = {
            "doctorName": "Dr. Smith",
            "hospitalName": "City General",
            "specialty": "endocrinologist",
            "yearsOfPractice": "5-10",
            "practiceSetting": "private",
            "managedThyroidPatients": "yes",
            "familiarWithMWA": "no",
        }
        record.update(overrides)
        return record

    return _make
