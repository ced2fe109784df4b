import os

# settings are read at import time, point them at throwaway values first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from marketplace.api.deps import get_lock_service, get_notifier
from marketplace.data.database import Base, get_db
from marketplace.data.models import CartItemModel, ProductModel, UserModel
from marketplace.main import create_app
from marketplace.utils.security import create_access_token


class FakeLockService:
    """In-memory stand-in for the redis checkout lock."""

    def __init__(self):
        self.held = {}
        self.acquired = []

    def acquire_checkout_lock(self, buyer_id, token, ttl):
        if buyer_id in self.held:
            return False
        self.held[buyer_id] = token
        self.acquired.append(buyer_id)
        return True

    def release_checkout_lock(self, buyer_id, token):
        if self.held.get(buyer_id) == token:
            del self.held[buyer_id]
            return True
        return False


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def order_placed(self, buyer_id, order_id, seller_ids):
        self.sent.append((buyer_id, order_id, sorted(set(seller_ids))))


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def lock_service():
    return FakeLockService()


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def client(session_factory, lock_service, notifier):
    app = create_app(init_database=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    app.dependency_overrides[get_notifier] = lambda: notifier
    return TestClient(app)


# ---- factories, every one of them commits so service rollbacks can't undo setup ----

@pytest.fixture()
def make_user(db):
    def _make(name="Buyer"):
        user = UserModel(email=f"{name.lower()}-{uuid4().hex[:8]}@example.com", name=name)
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture()
def seller(make_user):
    return make_user("Seller")


@pytest.fixture()
def buyer(make_user):
    return make_user("Buyer")


@pytest.fixture()
def make_product(db, seller):
    def _make(title="Widget", price="10.00", quantity=5, status="active", owner=None):
        product = ProductModel(
            seller_id=(owner or seller).id,
            title=title,
            description=f"{title} description",
            price=Decimal(price),
            quantity=quantity,
            status=status,
        )
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture()
def add_to_cart(db):
    def _add(user, product, quantity=1):
        item = CartItemModel(user_id=user.id, product_id=product.id, quantity=quantity)
        db.add(item)
        db.commit()
        return item

    return _add


@pytest.fixture()
def auth_headers():
    def _headers(user):
        token = create_access_token(user.id, user.email, user.name)
        return {"Authorization": f"Bearer {token}"}

    return _headers
