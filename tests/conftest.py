import pytest
from fastapi.testclient import TestClient

from tripplanner.main import app
from tripplanner.database.supabase_client import get_supabase, get_service_supabase
from tripplanner.core.dependencies import get_current_user_id
from tests.fakes import FakeSupabase

ALICE = "11111111-1111-1111-1111-111111111111"
BOB = "22222222-2222-2222-2222-222222222222"
CAROL = "33333333-3333-3333-3333-333333333333"
MALLORY = "99999999-9999-9999-9999-999999999999"


@pytest.fixture
def db():
    fake = FakeSupabase()
    fake.seed(
        "profiles",
        {"id": ALICE, "username": "alice", "full_name": "Alice Adams"},
        {"id": BOB, "username": "bob", "full_name": "Bob Brown"},
        {"id": CAROL, "username": "carol", "full_name": "Carol Clark"},
        {"id": MALLORY, "username": "mallory", "full_name": None},
    )
    return fake


@pytest.fixture
def trip(db):
    """A trip owned by Alice with Bob and Carol as members."""
    row = db.seed("trips", {"name": "Lisbon", "created_by": ALICE, "start_date": None, "end_date": None})
    db.seed(
        "trip_members",
        {"trip_id": row["id"], "user_id": ALICE, "role": "owner"},
        {"trip_id": row["id"], "user_id": BOB, "role": "member"},
        {"trip_id": row["id"], "user_id": CAROL, "role": "member"},
    )
    return row


@pytest.fixture
def current_user():
    return {"id": ALICE, "email": "alice@example.com"}


@pytest.fixture
def client(db, current_user):
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_service_supabase] = lambda: db
    app.dependency_overrides[get_current_user_id] = lambda: dict(current_user)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def login_as(current_user):
    """Switch the user the client is authenticated as."""
    def _login(user_id, email=None):
        current_user["id"] = user_id
        current_user["email"] = email or f"{user_id[:4]}@example.com"
    return _login
