"""
API Dependencies.
"""

from datetime import datetime
from functools import lru_cache
from typing import Callable

from fastapi import Depends
from sqlalchemy.orm import Session

from allertify.ai.classifier import RiskClassifier, build_classifier
from allertify.application.services.product_service import ProductService
from allertify.application.services.quota_service import DailyQuotaTracker
from allertify.application.services.scan_service import ScanService
from allertify.config import ScanConfig, get_settings
from allertify.core.timezone import utc_now
from allertify.domain.models.product import Product
from allertify.domain.models.product_scan import ProductScan
from allertify.domain.repositories.allergen_repository import AllergenRepository
from allertify.domain.repositories.preference_repository import PreferenceRepository
from allertify.domain.repositories.product_repository import ProductRepository
from allertify.domain.repositories.scan_repository import ScanRepository
from allertify.domain.repositories.subscription_repository import SubscriptionRepository
from allertify.domain.repositories.usage_repository import ScanUsageRepository
from allertify.infrastructure.cloudinary_storage import CloudinaryImageHost
from allertify.infrastructure.database import get_db
from allertify.infrastructure.open_food_facts import OpenFoodFactsClient
from allertify.infrastructure.repositories.allergen_repository import SQLAlchemyAllergenRepository
from allertify.infrastructure.repositories.preference_repository import SQLAlchemyPreferenceRepository
from allertify.infrastructure.repositories.product_repository import SQLAlchemyProductRepository
from allertify.infrastructure.repositories.scan_repository import SQLAlchemyScanRepository
from allertify.infrastructure.repositories.subscription_repository import SQLAlchemySubscriptionRepository
from allertify.infrastructure.repositories.usage_repository import SQLAlchemyScanUsageRepository


def get_product_repository(db: Session = Depends(get_db)) -> ProductRepository:
    return SQLAlchemyProductRepository(db, Product)


def get_scan_repository(db: Session = Depends(get_db)) -> ScanRepository:
    return SQLAlchemyScanRepository(db, ProductScan)


def get_usage_repository(db: Session = Depends(get_db)) -> ScanUsageRepository:
    return SQLAlchemyScanUsageRepository(db)


def get_subscription_repository(db: Session = Depends(get_db)) -> SubscriptionRepository:
    return SQLAlchemySubscriptionRepository(db)


def get_allergen_repository(db: Session = Depends(get_db)) -> AllergenRepository:
    return SQLAlchemyAllergenRepository(db)


def get_preference_repository(db: Session = Depends(get_db)) -> PreferenceRepository:
    return SQLAlchemyPreferenceRepository(db)


def get_scan_config() -> ScanConfig:
    return get_settings().scan_config()


def get_clock() -> Callable[[], datetime]:
    return utc_now


@lru_cache
def _shared_classifier() -> RiskClassifier:
    settings = get_settings()
    return build_classifier(settings.scan_config(), timeout=settings.AI_TIMEOUT_SECONDS)


def get_classifier() -> RiskClassifier:
    return _shared_classifier()


def get_off_client() -> OpenFoodFactsClient:
    settings = get_settings()
    return OpenFoodFactsClient(
        base_url=settings.OPEN_FOOD_FACTS_URL,
        timeout=settings.OPEN_FOOD_FACTS_TIMEOUT_SECONDS,
    )


@lru_cache
def _shared_image_host() -> CloudinaryImageHost:
    settings = get_settings()
    return CloudinaryImageHost(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        folder=settings.CLOUDINARY_FOLDER,
    )


def get_image_host() -> CloudinaryImageHost:
    return _shared_image_host()


def get_quota_tracker(
    usage_repo: ScanUsageRepository = Depends(get_usage_repository),
    subscription_repo: SubscriptionRepository = Depends(get_subscription_repository),
    config: ScanConfig = Depends(get_scan_config),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> DailyQuotaTracker:
    return DailyQuotaTracker(usage_repo, subscription_repo, config, clock=clock)


def get_product_service(
    repo: ProductRepository = Depends(get_product_repository),
    off_client: OpenFoodFactsClient = Depends(get_off_client),
) -> ProductService:
    return ProductService(repo, off_client)


def get_scan_service(
    products: ProductService = Depends(get_product_service),
    quota: DailyQuotaTracker = Depends(get_quota_tracker),
    classifier: RiskClassifier = Depends(get_classifier),
    scans: ScanRepository = Depends(get_scan_repository),
    allergens: AllergenRepository = Depends(get_allergen_repository),
    preferences: PreferenceRepository = Depends(get_preference_repository),
    config: ScanConfig = Depends(get_scan_config),
    image_host: CloudinaryImageHost = Depends(get_image_host),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> ScanService:
    return ScanService(
        products=products,
        quota=quota,
        classifier=classifier,
        scans=scans,
        allergens=allergens,
        preferences=preferences,
        config=config,
        image_host=image_host,
        clock=clock,
    )
