import os

os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ.setdefault("MONGODB_DB_NAME", "microcredx_test")

import httpx
import pytest
import pytest_asyncio
from beanie import init_beanie
from jose import jwt
from mongomock_motor import AsyncMongoMockClient

from microcredx.database.connection import Database
from microcredx.database.models import DOCUMENT_MODELS
from microcredx.main import create_app
from microcredx.services import ApplicationLedgerService, LoanCatalogService, UserDirectoryService

TEST_SECRET = "test-secret"


def make_token(email=None, secret=TEST_SECRET, **claims):
    payload = {"sub": "uid-123", **claims}
    if email is not None:
        payload["email"] = email
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def mongo_db():
    client = AsyncMongoMockClient()
    database = client["microcredx_test"]
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)
    # mongomock drops partialFilterExpression from IndexModel, so rebuild the pending-only index by hand
    applications = database["loan-application"]
    await applications.drop_index("one_pending_application_per_email")
    await applications.create_index(
        [("email", 1)],
        name="one_pending_application_per_email",
        unique=True,
        partialFilterExpression={"status": "Pending"},
    )
    yield database


@pytest.fixture
def catalog_service():
    return LoanCatalogService()


@pytest.fixture
def ledger_service():
    return ApplicationLedgerService()


@pytest.fixture
def user_service(ledger_service):
    return UserDirectoryService(ledger=ledger_service)


@pytest.fixture
def app():
    # Lifespan never runs under ASGITransport; Beanie is bound by mongo_db instead
    return create_app(database=Database(db_name="microcredx_test"), home_loans_limit=None)


@pytest_asyncio.fixture
async def client(mongo_db, app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
