"""
Centralized Test Configuration.

Storage, identity and payment providers are swapped for in-memory fakes
through ``app.dependency_overrides``; the application lifespan (which would
connect to MongoDB, Firebase and Stripe) is never run by ``ASGITransport``.
"""

import copy
import pytest
from datetime import datetime, timezone
from bson import ObjectId
from httpx import AsyncClient, ASGITransport
from pymongo.errors import DuplicateKeyError
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult

from backend.app.main import app
from backend.app.core.dependencies import get_identity_provider
from backend.app.core.exceptions import PaymentProviderError
from backend.app.core.identity import InvalidCredentialError, Principal
from backend.app.db.mongo import get_db
from backend.app.services.payment_provider import CheckoutSession, get_payment_provider


# Mock MongoDB collections (equality filters, $set updates, unique indexes)
def _matches(document, query):
    for key, value in query.items():
        if value is None:
            if document.get(key) is not None:
                return False
        elif document.get(key) != value:
            return False
    return True


class MockCursor:
    def __init__(self, documents):
        self.documents = documents

    async def to_list(self, length=None):
        return self.documents if length is None else self.documents[:length]


class MockCollection:
    def __init__(self, name):
        self.name = name
        self.documents = []
        self.unique_keys = []
        self.writes = []

    async def insert_one(self, document):
        for key in self.unique_keys:
            if any(doc.get(key) == document.get(key) for doc in self.documents):
                raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name} index: {key}_1", 11000)
        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))
        self.writes.append(("insert_one", document["_id"]))
        return InsertOneResult(document["_id"], True)

    async def find_one(self, query):
        for doc in self.documents:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    def find(self, query, sort=None):
        found = [copy.deepcopy(doc) for doc in self.documents if _matches(doc, query)]
        for key, direction in reversed(sort or []):
            # Missing values sort lowest, as in MongoDB
            found.sort(key=lambda doc: (doc.get(key) is not None, doc.get(key)), reverse=direction < 0)
        return MockCursor(found)

    async def update_one(self, query, update):
        self.writes.append(("update_one", query))
        for doc in self.documents:
            if _matches(doc, query):
                changes = update.get("$set", {})
                modified = any(doc.get(k) != v for k, v in changes.items())
                doc.update(changes)
                return UpdateResult({"n": 1, "nModified": int(modified)}, True)
        return UpdateResult({"n": 0, "nModified": 0}, True)

    async def delete_one(self, query):
        self.writes.append(("delete_one", query))
        for index, doc in enumerate(self.documents):
            if _matches(doc, query):
                del self.documents[index]
                return DeleteResult({"n": 1}, True)
        return DeleteResult({"n": 0}, True)


class MockMongo:
    """Stand-in for ``MongoDatabase`` with the same indexes."""

    def __init__(self):
        self.users = MockCollection("users")
        self.parcels = MockCollection("parcels")
        self.payments = MockCollection("payments")
        self.riders = MockCollection("riders")
        self.users.unique_keys.append("email")
        self.payments.unique_keys.append("transactionId")


class MockIdentityProvider:
    """Accepts only the tokens registered in ``tokens``."""

    def __init__(self):
        self.tokens = {}
        self.verified = []

    async def verify(self, token):
        if token not in self.tokens:
            raise InvalidCredentialError("Firebase ID token has invalid signature")
        self.verified.append(token)
        return Principal(email=self.tokens[token], uid=f"uid-{token}")


class MockPaymentProvider:
    def __init__(self):
        self.sessions = {}
        self.checkouts = []

    async def create_checkout_session(self, checkout):
        self.checkouts.append(checkout)
        return f"https://checkout.stripe.test/c/pay/cs_test_{len(self.checkouts)}"

    async def retrieve_session(self, session_id):
        if session_id not in self.sessions:
            raise PaymentProviderError(details={"provider_error": "InvalidRequestError"})
        return self.sessions[session_id]

    def add_session(self, session_id, parcel_id, payment_status="paid", transaction_id="pi_test_1",
                    amount_total=15000, customer_email="sender@test.com", parcel_name="Books"):
        self.sessions[session_id] = CheckoutSession(
            id=session_id,
            payment_status=payment_status,
            transaction_id=transaction_id,
            amount_total=amount_total,
            currency="usd",
            customer_email=customer_email,
            metadata={"parcelId": str(parcel_id), "parcelName": parcel_name},
        )
        return self.sessions[session_id]


@pytest.fixture
def mongo():
    return MockMongo()


@pytest.fixture
def identity_provider():
    return MockIdentityProvider()


@pytest.fixture
def payment_provider():
    return MockPaymentProvider()


@pytest.fixture(autouse=True)
def apply_overrides(mongo, identity_provider, payment_provider):
    """Point the app's dependencies at this test's fakes."""

    async def override_get_db():
        return mongo

    async def override_get_identity_provider():
        return identity_provider

    async def override_get_payment_provider():
        return payment_provider

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider] = override_get_identity_provider
    app.dependency_overrides[get_payment_provider] = override_get_payment_provider
    yield
    app.dependency_overrides = {}


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers(identity_provider):
    """Register a valid token for an email and return request headers using it."""

    def _headers(email="sender@test.com", token="valid-token"):
        identity_provider.tokens[token] = email
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
async def parcel_id(mongo):
    """An unpaid parcel stored directly in the fake parcels collection."""
    result = await mongo.parcels.insert_one({
        "parcelName": "Books",
        "senderEmail": "sender@test.com",
        "cost": 150,
        "createdAt": datetime.now(timezone.utc),
    })
    mongo.parcels.writes.clear()
    return str(result.inserted_id)
