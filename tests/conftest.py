import os

# Cheap hashes for the suite; must be set before the package reads settings
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from society_ledgers.core.auth import create_access_token
from society_ledgers.db.mongo import create_indexes, get_db
from society_ledgers.main import app
from society_ledgers.models.user import Principal, UserRole
from society_ledgers.repositories.society_repo import SocietyRepository
from society_ledgers.repositories.user_repo import UserRepository
from society_ledgers.schemas.bill import BillCreate
from society_ledgers.schemas.society import SocietyCreate

TEST_MONGODB_DB = "society_ledgers_test"
TEST_PASSWORD = "Password123"


@pytest_asyncio.fixture
async def test_db():
    """In-memory Motor database carrying the production indexes."""
    client = AsyncMongoMockClient()
    db = client[TEST_MONGODB_DB]
    await create_indexes(db)
    yield db


@pytest_asyncio.fixture
async def client(test_db):
    """HTTP client for the app, wired to the in-memory database."""
    app.dependency_overrides[get_db] = lambda: test_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def societies(test_db):
    """Three approved societies keyed S1, S2 and S3."""
    repo = SocietyRepository(test_db)
    created = {}
    for key in ("S1", "S2", "S3"):
        created[key] = await repo.create_society(SocietyCreate(
            name=f"Society {key}",
            address={"street": "1 Main St", "city": "Pune", "state": "MH", "zip": "411001"},
            contact_info={"phone": "5550100"},
        ))
    return created


@pytest_asyncio.fixture
async def users(test_db, societies):
    """
    Admin, the four officers of S1, an agent assigned to S2 only, and a
    treasurer of S3.
    """
    repo = UserRepository(test_db)
    s1 = str(societies["S1"].id)
    s2 = str(societies["S2"].id)
    s3 = str(societies["S3"].id)

    return {
        "admin": await repo.create_user("admin@example.com", TEST_PASSWORD, UserRole.ADMIN, name="Admin"),
        "manager": await repo.create_user("manager@example.com", TEST_PASSWORD, UserRole.MANAGER, associated_society_id=s1),
        "treasurer": await repo.create_user("treasurer@example.com", TEST_PASSWORD, UserRole.TREASURER, associated_society_id=s1),
        "secretary": await repo.create_user("secretary@example.com", TEST_PASSWORD, UserRole.SECRETARY, associated_society_id=s1),
        "president": await repo.create_user("president@example.com", TEST_PASSWORD, UserRole.PRESIDENT, associated_society_id=s1),
        "agent": await repo.create_user("agent@example.com", TEST_PASSWORD, UserRole.AGENT, assigned_societies=[s2]),
        "s3_treasurer": await repo.create_user("s3.treasurer@example.com", TEST_PASSWORD, UserRole.TREASURER, associated_society_id=s3),
    }


@pytest.fixture
def principals(users):
    return {key: Principal.from_user(user) for key, user in users.items()}


@pytest.fixture
def auth_headers(users):
    """auth_headers("treasurer") gives a bearer header for that user."""
    def _headers(key: str) -> dict:
        return {"Authorization": f"Bearer {create_access_token(users[key])}"}
    return _headers


@pytest.fixture
def bill_payload():
    """Factory for a valid bill creation payload."""
    def _payload(society_id, **overrides) -> BillCreate:
        data = {
            "society_id": str(society_id),
            "vendor_name": "Acme Plumbing",
            "transaction_nature": "Maintenance",
            "amount": 150.75,
            "due_date": datetime.now(timezone.utc) + timedelta(days=14),
            "attachments": [{"file_name": "invoice.pdf", "file_url": "/files/invoice.pdf"}],
        }
        data.update(overrides)
        return BillCreate(**data)
    return _payload
