"""FastAPI application — main entry point."""

import structlog
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from allertify.config import get_settings
from allertify.infrastructure.database import engine, Base
from allertify.core.logging import configure_logging
from allertify.core.middleware import setup_middleware
from allertify.core.exceptions import AppError, global_exception_handler, validation_exception_handler

# Import all models so SQLAlchemy knows about them
from allertify.domain.models.user import User
from allertify.domain.models.allergen import Allergen, UserAllergen
from allertify.domain.models.product import Product
from allertify.domain.models.product_scan import ProductScan
from allertify.domain.models.scan_usage import DailyScanUsage
from allertify.domain.models.subscription import Subscription, TierPlan
from allertify.domain.models.preference import UserProductPreference

# Import routers
from allertify.interfaces.api.auth import router as auth_router
from allertify.interfaces.api.scans import router as scans_router
from allertify.interfaces.api.allergens import router as allergens_router
from allertify.interfaces.api.subscriptions import router as subscriptions_router

settings = get_settings()

# Configure logging immediately
configure_logging()
logger = structlog.get_logger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@allertify.com"


def seed_reference_data() -> None:
    """Standard allergens, tier plans and a default admin account."""
    from allertify.infrastructure.database import SessionLocal
    from allertify.application.services.auth_service import get_user_by_email, create_user
    from allertify.application.services.allergen_service import seed_standard_allergens
    from allertify.application.services.subscription_service import seed_tier_plans
    from allertify.infrastructure.repositories.allergen_repository import SQLAlchemyAllergenRepository
    from allertify.infrastructure.repositories.subscription_repository import SQLAlchemySubscriptionRepository

    db = SessionLocal()
    try:
        seed_standard_allergens(SQLAlchemyAllergenRepository(db))
        seed_tier_plans(SQLAlchemySubscriptionRepository(db))
        if not get_user_by_email(db, DEFAULT_ADMIN_EMAIL):
            create_user(
                db,
                full_name="Admin",
                email=DEFAULT_ADMIN_EMAIL,
                password="admin12345",
                role="admin",
                is_verified=True,
            )
            logger.info("Default admin user created", email=DEFAULT_ADMIN_EMAIL)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown events."""
    logger.info("Starting Allertify API", env=settings.ENVIRONMENT, timezone=settings.TIMEZONE)

    # Create DB tables (dev only — use migrations in production)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    seed_reference_data()

    yield

    logger.info("Allertify API stopped")


app = FastAPI(
    title="Allertify — Allergen Scanning API",
    description="Scan packaged food and get a personal allergen risk verdict",
    version="1.0.0",
    lifespan=lifespan,
)

# Setup Middleware (Correlation ID, Logging)
setup_middleware(app)

# Global Exception Handling
app.add_exception_handler(AppError, global_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router, prefix=settings.API_PREFIX)
app.include_router(scans_router, prefix=settings.API_PREFIX)
app.include_router(allergens_router, prefix=settings.API_PREFIX)
app.include_router(subscriptions_router, prefix=settings.API_PREFIX)


@app.get("/")
def root():
    return {
        "name": "Allertify API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "healthy"}
