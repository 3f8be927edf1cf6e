import hashlib
import hmac
import json
import time
from decimal import Decimal
import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient
from headphoneweb.auth.utils import hash_password
from headphoneweb.common.custom_exceptions import PaymentProviderError
from headphoneweb.config.settings import Settings
from headphoneweb.db.schema import Admin, ContactMessage, Headphones
from headphoneweb.main import create_app
from headphoneweb.orders.gateway import StripeGateway

SITE_PASSWORD = "letmein"
SESSION_SECRET = "test-session-secret"
WEBHOOK_SECRET = "whsec_test_secret"
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "s3cret-pass"


class FakeGateway(StripeGateway):
    """In-memory payment intents; webhook signature checks still go through stripe."""

    def __init__(self):
        super().__init__("sk_test_fake", WEBHOOK_SECRET, "usd")
        self.intents = {}
        self.fail_with = None
        self.created = []
        self.canceled = []

    async def create_payment_intent(self, amount, metadata, receipt_email=None):
        if self.fail_with:
            raise PaymentProviderError(self.fail_with)
        intent_id = f"pi_test_{len(self.intents) + 1}"
        intent = {
            "id": intent_id,
            "client_secret": f"{intent_id}_secret_abc",
            "status": "requires_payment_method",
            "amount": amount,
            "amount_received": 0,
            "currency": self.currency,
            "metadata": dict(metadata),
            "receipt_email": receipt_email,
        }
        self.intents[intent_id] = intent
        self.created.append(intent)
        return dict(intent)

    async def retrieve_payment_intent(self, intent_id):
        if intent_id not in self.intents:
            raise PaymentProviderError(f"No such payment_intent: '{intent_id}'", not_found=True)
        return dict(self.intents[intent_id])

    async def cancel_payment_intent(self, intent_id):
        if intent_id not in self.intents:
            raise PaymentProviderError(f"No such payment_intent: '{intent_id}'", not_found=True)
        self.canceled.append(intent_id)
        return self.settle(intent_id, "canceled")

    def settle(self, intent_id, status):
        intent = self.intents[intent_id]
        intent["status"] = status
        if status == "succeeded":
            intent["amount_received"] = intent["amount"]
        return dict(intent)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        ENV="dev",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'headphoneweb_test.db'}",
        SITE_PASSWORD=SITE_PASSWORD,
        SESSION_SECRET=SESSION_SECRET,
        STRIPE_WEBHOOK_SECRET=WEBHOOK_SECRET,
    )


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
async def app(settings, gateway):
    app = create_app(settings, payment_gateway=gateway)
    async with LifespanManager(app):
        await app.state.db.create_all()
        yield app


def _client(app):
    # 500 paths are asserted on, so let the exception handlers answer instead of re-raising
    return AsyncClient(transport=ASGITransport(app=app, raise_app_exceptions=False), base_url="http://test")


@pytest.fixture
async def anon_client(app):
    async with _client(app) as ac:
        yield ac


@pytest.fixture
async def client(app):
    """Client holding a valid site session cookie."""
    async with _client(app) as ac:
        resp = await ac.post("/api/verify-password", json={"password": SITE_PASSWORD})
        assert resp.status_code == 200, resp.text
        yield ac


@pytest.fixture
async def admin_account(app):
    async with app.state.db.session_maker() as s:
        admin = Admin(username=ADMIN_USERNAME, password_hash=hash_password(ADMIN_PASSWORD))
        s.add(admin)
        await s.commit()
        await s.refresh(admin)
        return admin.admin_id


@pytest.fixture
async def admin_client(client, admin_account):
    resp = await client.post("/api/admin/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200, resp.text
    return client


@pytest.fixture
def make_product(app):
    async def _make(name="Studio Reference One", price="199.99", stock=10, description=None, image_url=None):
        async with app.state.db.session_maker() as s:
            product = Headphones(name=name, price=Decimal(price), stock_quantity=stock,
                                 description=description, image_url=image_url or f"/images/{name}.webp")
            s.add(product)
            await s.commit()
            await s.refresh(product)
            return product.product_id
    return _make


@pytest.fixture
def make_message(app):
    async def _make(email="customer@example.com", message="Do you ship abroad?", name="Customer",
                    status="UNREAD"):
        async with app.state.db.session_maker() as s:
            msg = ContactMessage(name=name, email=email, message=message, status=status)
            s.add(msg)
            await s.commit()
            await s.refresh(msg)
            return msg.message_id
    return _make


@pytest.fixture
def fetch_all(app):
    """Run a select on a fresh session and return the mapped rows."""
    async def _fetch(stmt):
        async with app.state.db.session_maker() as s:
            res = await s.execute(stmt)
            return [dict(r._mapping) for r in res.all()]
    return _fetch


@pytest.fixture
def signed_event():
    """Body and stripe-signature header for an event signed with the test webhook secret."""
    def _sign(event: dict, secret: str = WEBHOOK_SECRET):
        payload = json.dumps(event)
        ts = int(time.time())
        sig = hmac.new(secret.encode(), f"{ts}.{payload}".encode(), hashlib.sha256).hexdigest()
        return payload, {"stripe-signature": f"t={ts},v1={sig}", "content-type": "application/json"}
    return _sign
