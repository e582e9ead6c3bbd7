"""Shared test fixtures.

Settings are read from the environment at import time, so the test
environment is pinned before anything from `allertify` is imported.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["TIMEZONE"] = "Asia/Jakarta"
os.environ["USE_DETERMINISTIC_CLASSIFIER"] = "true"
os.environ["USE_FIXED_ALLERGENS"] = "false"

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from allertify.ai.classifier import DeterministicClassifier
from allertify.application.services.auth_service import create_access_token, hash_password
from allertify.application.services.product_service import ProductService
from allertify.application.services.quota_service import DailyQuotaTracker
from allertify.application.services.scan_service import ScanService
from allertify.config import ScanConfig
from allertify.core.exceptions import ProductNotFoundException
from allertify.domain.models.allergen import Allergen, UserAllergen  # noqa: F401
from allertify.domain.models.preference import UserProductPreference  # noqa: F401
from allertify.domain.models.product import Product
from allertify.domain.models.product_scan import ProductScan
from allertify.domain.models.scan_usage import DailyScanUsage  # noqa: F401
from allertify.domain.models.subscription import Subscription, TierPlan  # noqa: F401
from allertify.domain.models.user import User
from allertify.infrastructure.cloudinary_storage import UploadedImage
from allertify.infrastructure.database import Base
from allertify.infrastructure.open_food_facts import OpenFoodFactsProduct
from allertify.infrastructure.repositories.allergen_repository import SQLAlchemyAllergenRepository
from allertify.infrastructure.repositories.preference_repository import SQLAlchemyPreferenceRepository
from allertify.infrastructure.repositories.product_repository import SQLAlchemyProductRepository
from allertify.infrastructure.repositories.scan_repository import SQLAlchemyScanRepository
from allertify.infrastructure.repositories.subscription_repository import SQLAlchemySubscriptionRepository
from allertify.infrastructure.repositories.usage_repository import SQLAlchemyScanUsageRepository

# 2025-08-19 15:10:21 in Asia/Jakarta (UTC+7)
DEFAULT_NOW = datetime(2025, 8, 19, 8, 10, 21, tzinfo=timezone.utc)


class FixedClock:
    """Settable stand-in for `utc_now`."""

    def __init__(self, now: datetime = DEFAULT_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeOpenFoodFacts:
    """In-memory product database keyed by barcode."""

    def __init__(self, products: Optional[Dict[str, OpenFoodFactsProduct]] = None):
        self.products = products or {}
        self.calls: List[str] = []

    def add(self, barcode: str, **fields) -> None:
        self.products[barcode] = OpenFoodFactsProduct(**fields)

    async def get_product(self, barcode: str) -> OpenFoodFactsProduct:
        self.calls.append(barcode)
        if barcode not in self.products:
            raise ProductNotFoundException(f"Product with barcode {barcode} not found in Open Food Facts")
        return self.products[barcode]


class FakeImageHost:
    def __init__(self):
        self.uploads: List[bytes] = []

    def is_configured(self) -> bool:
        return True

    async def upload_image(self, content: bytes, tags=None) -> UploadedImage:
        self.uploads.append(content)
        n = len(self.uploads)
        return UploadedImage(
            public_id=f"allertify/products/img{n}",
            url=f"http://res.cloudinary.com/demo/image/upload/img{n}.jpg",
            secure_url=f"https://res.cloudinary.com/demo/image/upload/img{n}.jpg",
            bytes=len(content),
        )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def off_client():
    client = FakeOpenFoodFacts()
    client.add(
        "8992761111111",
        product_name="Choco Wafer",
        brands="Tango",
        ingredients_text="Wheat flour, sugar, MILK powder, cocoa, soy lecithin",
        nutriments={"nutrition-score-fr": 18},
    )
    client.add(
        "8990000000017",
        product_name="Mineral Water",
        ingredients_text="Water",
    )
    client.add("8990000000024", product_name="Mystery Snack", ingredients_text=None)
    return client


@pytest.fixture
def image_host():
    return FakeImageHost()


@pytest.fixture
def scan_config():
    return ScanConfig(use_deterministic_classifier=True, timezone="Asia/Jakarta", default_daily_limit=100)


def make_user(db, email: str = "ana@example.com", role: str = "user") -> User:
    user = User(full_name="Ana Putri", email=email, password_hash=hash_password("secret-pass"), role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db):
    return make_user(db)


@pytest.fixture
def other_user(db):
    return make_user(db, email="budi@example.com")


@pytest.fixture
def build_quota(db, clock, scan_config):
    def _build(config: Optional[ScanConfig] = None) -> DailyQuotaTracker:
        return DailyQuotaTracker(
            SQLAlchemyScanUsageRepository(db),
            SQLAlchemySubscriptionRepository(db),
            config or scan_config,
            clock=clock,
        )

    return _build


@pytest.fixture
def build_scan_service(db, clock, off_client, image_host, scan_config, build_quota):
    def _build(config: Optional[ScanConfig] = None, classifier=None) -> ScanService:
        config = config or scan_config
        return ScanService(
            products=ProductService(SQLAlchemyProductRepository(db, Product), off_client),
            quota=build_quota(config),
            classifier=classifier or DeterministicClassifier(),
            scans=SQLAlchemyScanRepository(db, ProductScan),
            allergens=SQLAlchemyAllergenRepository(db),
            preferences=SQLAlchemyPreferenceRepository(db),
            config=config,
            image_host=image_host,
            clock=clock,
        )

    return _build


# ── API ──────────────────────────────────────────────────────────────────────


@pytest.fixture
def api_config():
    """Scan configuration served to the app; tests may replace fields before requests."""
    return {"config": ScanConfig(use_deterministic_classifier=True, timezone="Asia/Jakarta")}


@pytest.fixture
def client(session_factory, clock, off_client, image_host, api_config):
    from allertify.infrastructure.database import get_db
    from allertify.interfaces.deps import (
        get_classifier,
        get_clock,
        get_image_host,
        get_off_client,
        get_scan_config,
    )
    from allertify.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_off_client] = lambda: off_client
    app.dependency_overrides[get_image_host] = lambda: image_host
    app.dependency_overrides[get_classifier] = lambda: DeterministicClassifier()
    app.dependency_overrides[get_scan_config] = lambda: api_config["config"]

    yield TestClient(app)

    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(user):
    return auth_headers(user)


@pytest.fixture
def other_headers(other_user):
    return auth_headers(other_user)


@pytest.fixture
def admin_headers(db):
    return auth_headers(make_user(db, email="admin@allertify.com", role="admin"))
