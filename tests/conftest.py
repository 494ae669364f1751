"""Test configuration and fixtures"""

import hashlib
import hmac
import json
import pytest
import time
from datetime import datetime
from decimal import Decimal
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from uuid import uuid4

from app.main import app
from app.config import settings
from app.database import Base, get_db
from app.exceptions import ExternalServiceError, WebhookVerificationError
from app.models.organization import Organization, Member
from app.models.user import User, UserRole
from app.models.menu import MenuCategory, MenuItem
from app.models.order import Order, OrderItem
from app.schemas.organization import AgentSettingsResponse
from app.services.agent import get_agent_client, get_webhook_verifier
from app.services.embeddings import get_embeddings_client
from app.services.storage import LocalStorage, get_storage
from app.api.auth import get_password_hash


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

VALID_SIGNATURE = "t=1700000000,v0=valid"


class FakeWebhookVerifier:
    """Accepts exactly VALID_SIGNATURE"""

    def verify(self, raw_body: bytes, signature_header):
        if signature_header != VALID_SIGNATURE:
            raise WebhookVerificationError("Invalid signature")
        return json.loads(raw_body)


class FakeEmbeddingsClient:
    """Deterministic vectors; set ``fail`` to simulate an outage"""

    def __init__(self):
        self.fail = False
        self.calls = []

    def _vector(self, text: str):
        vector = [0.0] * settings.embedding_dimensions
        vector[len(text) % settings.embedding_dimensions] = 1.0
        return vector

    async def embed_documents(self, texts):
        self.calls.append(list(texts))
        if self.fail:
            raise ExternalServiceError("embeddings", "service unavailable")
        return [self._vector(text) for text in texts]

    async def embed_query(self, text):
        vectors = await self.embed_documents([text])
        return vectors[0]


class FakeAgentClient:
    """In-memory stand-in for the voice platform management API"""

    def __init__(self):
        self.agents = {}

    async def create_agent(self, organization):
        agent_id = f"agent_{uuid4().hex[:12]}"
        self.agents[agent_id] = AgentSettingsResponse(
            agent_id=agent_id,
            voice=settings.elevenlabs_default_voice_id,
            language=settings.elevenlabs_default_language,
            llm_model=settings.elevenlabs_default_llm,
            system_prompt="prompt",
            first_message=f"Hi, thanks for calling {organization.name}!",
        )
        return agent_id

    async def get_settings(self, agent_id):
        return self.agents[agent_id]

    async def update_settings(self, agent_id, updates):
        current = self.agents[agent_id]
        self.agents[agent_id] = current.model_copy(update=updates.model_dump(exclude_none=True))
        return self.agents[agent_id]


@pytest.fixture
async def test_db():
    """Create test database"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_org(test_db):
    """Create a test restaurant bound to a voice agent"""
    organization = Organization(
        id=uuid4(),
        name="Moonbrew Coffee House",
        slug=f"moonbrew-coffee-house-{uuid4().hex[:6]}",
        description="Slow mornings, good stories",
        agent_id="agent_moonbrew",
        metadata_json={},
    )
    test_db.add(organization)
    await test_db.commit()

    return organization


@pytest.fixture
async def other_org(test_db):
    """Create a second restaurant the test user does not belong to"""
    organization = Organization(
        id=uuid4(),
        name="Sunset Diner",
        slug=f"sunset-diner-{uuid4().hex[:6]}",
        agent_id="agent_sunset",
        metadata_json={},
    )
    test_db.add(organization)
    await test_db.commit()

    return organization


@pytest.fixture
async def test_user(test_db, test_org):
    """Create a restaurant admin who owns test_org"""
    user = User(
        id=uuid4(),
        email="owner@moonbrew.coffee",
        hashed_password=get_password_hash("testpass123"),
        full_name="Test Owner",
        role=UserRole.RESTAURANT_ADMIN,
        active_organization_id=test_org.id,
        is_active=True,
    )
    test_db.add(user)
    await test_db.flush()

    test_db.add(Member(organization_id=test_org.id, user_id=user.id, role="owner"))
    await test_db.commit()

    return user


@pytest.fixture
async def test_admin_user(test_db):
    """Create a super admin user"""
    user = User(
        id=uuid4(),
        email="admin@example.com",
        hashed_password=get_password_hash("adminpass123"),
        full_name="Admin User",
        role=UserRole.SUPER_ADMIN,
        is_active=True,
    )
    test_db.add(user)
    await test_db.commit()

    return user


@pytest.fixture
async def test_categories(test_db, test_org):
    """Create two ranked categories"""
    categories = [
        MenuCategory(organization_id=test_org.id, name="Coffee", order_column=1),
        MenuCategory(organization_id=test_org.id, name="Pastry", order_column=2),
    ]
    test_db.add_all(categories)
    await test_db.commit()

    return categories


@pytest.fixture
async def test_menu_items(test_db, test_org, test_categories):
    """Create test menu items: [latte 8.00, espresso 2.50, croissant 3.50, muffin unavailable]"""
    coffee, pastry = test_categories
    items = [
        MenuItem(
            organization_id=test_org.id,
            category_id=coffee.id,
            name="Caramel Cloud Latte",
            description="Milk latte with caramel foam",
            price=Decimal("8.00"),
        ),
        MenuItem(
            organization_id=test_org.id,
            category_id=coffee.id,
            name="Espresso Bliss",
            description="Single-shot espresso",
            price=Decimal("2.50"),
        ),
        MenuItem(
            organization_id=test_org.id,
            category_id=pastry.id,
            name="Butter Croissant",
            description="Flaky croissant",
            price=Decimal("3.50"),
        ),
        MenuItem(
            organization_id=test_org.id,
            category_id=pastry.id,
            name="Blueberry Muffin",
            description="Sold out today",
            price=Decimal("3.25"),
            is_available=False,
        ),
    ]

    for item in items:
        test_db.add(item)

    await test_db.commit()
    return items


@pytest.fixture
def fake_embeddings():
    return FakeEmbeddingsClient()


@pytest.fixture
def fake_agent_client():
    return FakeAgentClient()


@pytest.fixture
def test_storage(tmp_path):
    return LocalStorage(str(tmp_path / "storage"), "http://test/storage")


@pytest.fixture
async def client(test_db, fake_embeddings, fake_agent_client, test_storage):
    """Create test client with overridden database and external services"""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_webhook_verifier] = FakeWebhookVerifier
    app.dependency_overrides[get_embeddings_client] = lambda: fake_embeddings
    app.dependency_overrides[get_agent_client] = lambda: fake_agent_client
    app.dependency_overrides[get_storage] = lambda: test_storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def authenticated_client(client, test_user):
    """Create authenticated test client"""
    from app.api.auth import create_access_token

    token = create_access_token(test_user)
    client.headers["Authorization"] = f"Bearer {token}"

    return client


@pytest.fixture
async def admin_client(client, test_admin_user):
    """Create admin authenticated test client"""
    from app.api.auth import create_access_token

    token = create_access_token(test_admin_user)
    client.headers["Authorization"] = f"Bearer {token}"

    return client


@pytest.fixture
def make_order():
    """Factory inserting an order directly; items are (name, quantity, price) tuples"""
    async def _make_order(db, organization, order_id, status="new", created_at=None, items=None):
        items = items or [("Espresso Bliss", 1, Decimal("2.50"))]
        lines = [
            OrderItem(
                position=position,
                name=name,
                quantity=quantity,
                price=price,
                total=price * quantity,
                status="new",
            )
            for position, (name, quantity, price) in enumerate(items)
        ]
        order = Order(
            id=order_id,
            organization_id=organization.id,
            type="takeaway",
            customer_name="Bob",
            payment_type="cash",
            total=sum(line.total for line in lines),
            status=status,
            completed_at=datetime.now() if status == "completed" else None,
            created_at=created_at or datetime.now(),
            items=lines,
        )
        db.add(order)
        await db.commit()
        return order

    return _make_order


@pytest.fixture
def webhook_signature():
    """Signature header accepted by the fake webhook verifier"""
    return VALID_SIGNATURE


@pytest.fixture
def sign_webhook():
    """Builds an ElevenLabs-Signature header: t=<unix seconds>,v0=<hex HMAC-SHA256 of "t.body">"""
    def _sign(body: str, secret: str, timestamp=None):
        timestamp = str(int(time.time())) if timestamp is None else str(timestamp)
        digest = hmac.new(secret.encode("utf-8"), f"{timestamp}.{body}".encode("utf-8"), hashlib.sha256).hexdigest()
        return f"t={timestamp},v0={digest}"

    return _sign
