import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# must be set before any assessment_engine import builds the engine
os.environ["TESTING"] = "true"
os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL") or "sqlite:///./test.db"

import pytest
from fastapi.testclient import TestClient

from assessment_engine.core.constants import OrgRoleEnum
from assessment_engine.core.database import Base, SessionLocal, engine
from assessment_engine.core.security import create_access_token
from assessment_engine.utils import deps as deps_utils
from assessment_engine.utils.events import event_bus
import assessment_engine.models.all  # noqa: F401
import main
from tests.helpers import factories


@pytest.fixture(scope="session")
def database_engine():
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if engine.url.drivername.startswith("sqlite") and os.path.exists("./test.db"):
        os.remove("./test.db")

@pytest.fixture(scope="function")
def db_session(database_engine):
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()

@pytest.fixture(autouse=True)
def published_events(monkeypatch):
    """Capture completion events instead of running side effects in the background."""
    events = []
    monkeypatch.setattr(event_bus, "publish_nowait", lambda event_type, data: events.append((event_type, data)))
    return events

@pytest.fixture(scope="function")
def client(db_session):
    main.app.dependency_overrides[deps_utils.get_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_transactional_db] = lambda: db_session
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()

@pytest.fixture
def org(db_session):
    return factories.create_org(db_session)

@pytest.fixture
def candidate(db_session):
    return factories.create_profile(db_session)

@pytest.fixture
def creator(db_session):
    return factories.create_profile(db_session, full_name="Test Creator")

@pytest.fixture
def candidate_context(org, candidate):
    return factories.make_context(candidate, org, OrgRoleEnum.CANDIDATE)

@pytest.fixture
def creator_context(org, creator):
    return factories.make_context(creator, org, OrgRoleEnum.CREATOR)

@pytest.fixture
def deck(db_session, org):
    return factories.create_deck(db_session, org, correct_indexes=[0, 1])

@pytest.fixture
def published_assessment(db_session, org, deck, creator):
    return factories.create_assessment(db_session, org, deck, creator, pass_score=70)

@pytest.fixture
def token_for():
    def _token_for(context):
        return create_access_token({
            "user_id": context.user_id,
            "org_id": context.org_id,
            "role": context.role.value,
        })
    return _token_for

@pytest.fixture
def auth_headers(token_for):
    def _auth_headers(context):
        return {"Authorization": f"Bearer {token_for(context)}"}
    return _auth_headers
