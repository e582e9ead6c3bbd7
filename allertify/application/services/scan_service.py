"""Scan orchestration — quota check, product resolution, risk classification, persistence.

Every scan path runs the same ordered stages:

    QUOTA_CHECK -> PRODUCT_RESOLVE -> RISK_CLASSIFY -> PERSIST -> QUOTA_INCREMENT -> DONE

Quota, product and persistence failures propagate to the caller. Classification
never fails a scan (the model classifier degrades to the deterministic one), and a
failed usage increment is logged while the already persisted scan is still returned.
"""

from datetime import datetime
from enum import Enum
from typing import Callable, Optional

import structlog

from allertify.ai.classifier import RiskClassifier
from allertify.application.services.product_service import ProductService
from allertify.application.services.quota_service import DailyQuotaTracker
from allertify.config import ScanConfig
from allertify.core.exceptions import QuotaExceededException, ScanNotFoundException
from allertify.core.timezone import format_in_timezone, utc_now
from allertify.domain.models.product import Product
from allertify.domain.models.product_scan import ProductScan
from allertify.domain.repositories.allergen_repository import AllergenRepository
from allertify.domain.repositories.preference_repository import PreferenceRepository
from allertify.domain.repositories.scan_repository import ScanRepository
from allertify.domain.schemas.risk import ProductContext, RiskEvaluation, RiskLevel
from allertify.domain.schemas.scan import (
    HistoryQuery,
    ListType,
    Pagination,
    ProductListResponse,
    ScanHistoryResponse,
    ScanLimitSnapshot,
    ScanProduct,
    ScanResult,
)
from allertify.infrastructure.cloudinary_storage import CloudinaryImageHost

logger = structlog.get_logger(__name__)

UNIQUE_HISTORY_WINDOW = 500
UPLOAD_TAGS = ["product-scan", "allergen-analysis"]
NO_INGREDIENTS_REASONING = (
    "No ingredient information is available for this product, "
    "so it could not be checked against your allergens."
)


class ScanStage(str, Enum):
    QUOTA_CHECK = "QUOTA_CHECK"
    PRODUCT_RESOLVE = "PRODUCT_RESOLVE"
    RISK_CLASSIFY = "RISK_CLASSIFY"
    PERSIST = "PERSIST"
    QUOTA_INCREMENT = "QUOTA_INCREMENT"
    DONE = "DONE"


class ScanService:
    def __init__(
        self,
        products: ProductService,
        quota: DailyQuotaTracker,
        classifier: RiskClassifier,
        scans: ScanRepository,
        allergens: AllergenRepository,
        preferences: PreferenceRepository,
        config: ScanConfig,
        image_host: Optional[CloudinaryImageHost] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.products = products
        self.quota = quota
        self.classifier = classifier
        self.scans = scans
        self.allergens = allergens
        self.preferences = preferences
        self.config = config
        self.image_host = image_host
        self.clock = clock or utc_now

    # ── Scan paths ──────────────────────────────────────────────────────────

    async def scan_barcode(self, user_id: int, barcode: str) -> ScanResult:
        log = logger.bind(user_id=user_id, barcode=barcode)

        log.debug("Scan stage", stage=ScanStage.QUOTA_CHECK.value)
        self._check_quota(user_id)

        log.debug("Scan stage", stage=ScanStage.PRODUCT_RESOLVE.value)
        product = await self.products.resolve_by_barcode(barcode)

        log.debug("Scan stage", stage=ScanStage.RISK_CLASSIFY.value)
        allergens = self.get_user_allergens(user_id)
        evaluation = await self._evaluate_ingredients(
            product, allergens, ProductContext(product_name=product.name)
        )

        return self._record(user_id, product, evaluation, log)

    async def scan_image(self, user_id: int, image_url: str, product_id: Optional[int] = None) -> ScanResult:
        log = logger.bind(user_id=user_id, product_id=product_id)

        log.debug("Scan stage", stage=ScanStage.QUOTA_CHECK.value)
        self._check_quota(user_id)

        log.debug("Scan stage", stage=ScanStage.PRODUCT_RESOLVE.value)
        if product_id is not None:
            product = self.products.resolve_by_id(product_id)
        else:
            product = self.products.resolve_minimal_from_image(image_url)

        log.debug("Scan stage", stage=ScanStage.RISK_CLASSIFY.value)
        allergens = self.get_user_allergens(user_id)
        evaluation = await self.classifier.classify_image(image_url, allergens)

        return self._record(user_id, product, evaluation, log)

    async def scan_upload(self, user_id: int, content: bytes, product_name: Optional[str] = None) -> ScanResult:
        log = logger.bind(user_id=user_id, upload_bytes=len(content))

        log.debug("Scan stage", stage=ScanStage.QUOTA_CHECK.value)
        self._check_quota(user_id)

        log.debug("Scan stage", stage=ScanStage.PRODUCT_RESOLVE.value)
        if self.image_host is None:
            raise RuntimeError("Scan service was built without an image host")
        uploaded = await self.image_host.upload_image(content, tags=UPLOAD_TAGS)
        name = (product_name or "").strip()
        if name:
            product = self.products.find_or_create_by_name(name, image_url=uploaded.secure_url)
        else:
            product = self.products.resolve_minimal_from_image(uploaded.secure_url)

        log.debug("Scan stage", stage=ScanStage.RISK_CLASSIFY.value)
        allergens = self.get_user_allergens(user_id)
        evaluation = await self.classifier.classify_image(uploaded.secure_url, allergens)

        return self._record(user_id, product, evaluation, log)

    # ── Save toggle, history and product lists ──────────────────────────────

    def toggle_save(self, user_id: int, scan_id: int) -> ScanResult:
        scan = self.scans.get_owned(scan_id, user_id)
        if scan is None:
            raise ScanNotFoundException()
        scan = self.scans.update(scan, {"is_saved": not scan.is_saved})
        pref = self.preferences.get(user_id, scan.product_id)
        return self._to_result(scan, pref.list_type if pref else None)

    def get_history(self, user_id: int, query: HistoryQuery) -> ScanHistoryResponse:
        if query.unique_by_product:
            recent = self.scans.list_for_user(
                user_id, saved_only=query.saved_only, limit=UNIQUE_HISTORY_WINDOW, offset=0
            )
            seen = set()
            latest = []
            for scan in recent:
                if scan.product_id not in seen:
                    seen.add(scan.product_id)
                    latest.append(scan)
                if len(latest) >= query.limit + query.offset:
                    break
            page = latest[query.offset:query.offset + query.limit]
        else:
            page = self.scans.list_for_user(
                user_id, saved_only=query.saved_only, limit=query.limit, offset=query.offset
            )

        list_types = self.preferences.get_list_types(user_id, [s.product_id for s in page])
        results = []
        for scan in page:
            list_type = list_types.get(scan.product_id)
            if query.list_type is not None and list_type != query.list_type.value:
                continue
            results.append(self._to_result(scan, list_type))

        return ScanHistoryResponse(
            scans=results,
            pagination=Pagination(limit=query.limit, offset=query.offset, total=len(results)),
        )

    def set_product_list(self, user_id: int, product_id: int, list_type: Optional[ListType]) -> ProductListResponse:
        self.products.resolve_by_id(product_id)
        if list_type is None:
            self.preferences.delete(user_id, product_id)
            return ProductListResponse(product_id=product_id, list_type=None)

        pref = self.preferences.upsert(user_id, product_id, list_type.value)
        return ProductListResponse(product_id=product_id, list_type=pref.list_type)

    def get_user_allergens(self, user_id: int) -> list[str]:
        if self.config.fixed_allergen_list is not None:
            return list(self.config.fixed_allergen_list)
        return self.allergens.list_names_for_user(user_id)

    # ── Internals ───────────────────────────────────────────────────────────

    def _check_quota(self, user_id: int) -> None:
        permission = self.quota.can_scan_today(user_id)
        if not permission.can_scan:
            logger.info("Scan refused, daily limit reached", user_id=user_id, daily_limit=permission.daily_limit)
            raise QuotaExceededException(permission.daily_limit)

    async def _evaluate_ingredients(
        self, product: Product, allergens: list[str], context: ProductContext
    ) -> RiskEvaluation:
        if allergens and not (product.ingredients or "").strip():
            return RiskEvaluation(
                risk_level=RiskLevel.CAUTION,
                matched_allergens=[],
                reasoning=NO_INGREDIENTS_REASONING,
            )
        return await self.classifier.classify(product.ingredients or "", allergens, context)

    def _record(self, user_id: int, product: Product, evaluation: RiskEvaluation, log) -> ScanResult:
        log.debug("Scan stage", stage=ScanStage.PERSIST.value)
        scan = self.scans.create(
            {
                "user_id": user_id,
                "product_id": product.id,
                "scan_date": self.clock(),
                "risk_level": evaluation.risk_level.value,
                "risk_explanation": evaluation.reasoning,
                "matched_allergens": ", ".join(evaluation.matched_allergens) or None,
                "is_saved": False,
            }
        )

        log.debug("Scan stage", stage=ScanStage.QUOTA_INCREMENT.value)
        try:
            self.quota.increment_usage(user_id)
        except Exception as e:
            # The scan already happened; usage is undercounted rather than the result lost.
            log.error("Scan persisted but usage increment failed", scan_id=scan.id, error=str(e))

        permission = self.quota.can_scan_today(user_id)
        pref = self.preferences.get(user_id, product.id)
        result = self._to_result(
            scan,
            pref.list_type if pref else None,
            ScanLimitSnapshot(remaining_scans=permission.remaining_scans, daily_limit=permission.daily_limit),
        )
        log.info(
            "Scan completed",
            stage=ScanStage.DONE.value,
            scan_id=scan.id,
            product_id=product.id,
            risk_level=result.risk_level,
        )
        return result

    def _to_result(
        self,
        scan: ProductScan,
        list_type: Optional[str] = None,
        scan_limit: Optional[ScanLimitSnapshot] = None,
    ) -> ScanResult:
        return ScanResult(
            id=scan.id,
            user_id=scan.user_id,
            product_id=scan.product_id,
            scan_date=scan.scan_date,
            scan_date_local=format_in_timezone(scan.scan_date, self.config.timezone),
            risk_level=scan.risk_level,
            risk_explanation=scan.risk_explanation,
            matched_allergens=scan.matched_allergens,
            is_saved=scan.is_saved,
            list_type=list_type,
            product=ScanProduct.model_validate(scan.product),
            scan_limit=scan_limit,
        )
