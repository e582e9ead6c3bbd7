"""Scan API routes — quota, barcode/image/upload scans, save toggle, history, product lists."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile

from allertify.application.services.quota_service import DailyQuotaTracker
from allertify.application.services.scan_service import ScanService
from allertify.config import get_settings
from allertify.core.exceptions import ForbiddenException, ValidationException
from allertify.domain.models.user import User
from allertify.domain.schemas.scan import (
    HistoryQuery,
    ImageScanRequest,
    ListType,
    ProductListRequest,
    ProductListResponse,
    ScanHistoryResponse,
    ScanLimitResponse,
    ScanResult,
    UsageRecord,
)
from allertify.interfaces.api.deps import get_current_user
from allertify.interfaces.deps import get_quota_tracker, get_scan_service

router = APIRouter(prefix="/scans", tags=["Scans"])

BARCODE_PATTERN = r"^[0-9]{8,14}$"


def _limit_response(quota: DailyQuotaTracker, user_id: int) -> ScanLimitResponse:
    status = quota.get_status(user_id)
    return ScanLimitResponse(**status.model_dump(), can_scan=not status.is_limit_exceeded)


@router.get("/limit", response_model=ScanLimitResponse)
def get_scan_limit(
    quota: DailyQuotaTracker = Depends(get_quota_tracker),
    user: User = Depends(get_current_user),
):
    return _limit_response(quota, user.id)


@router.get("/limit/history", response_model=List[UsageRecord])
def get_scan_limit_history(
    days: int = Query(7, ge=1, le=90),
    quota: DailyQuotaTracker = Depends(get_quota_tracker),
    user: User = Depends(get_current_user),
):
    return [UsageRecord.model_validate(row) for row in quota.get_usage_history(user.id, days)]


@router.delete("/limit", response_model=ScanLimitResponse)
def reset_scan_limit(
    quota: DailyQuotaTracker = Depends(get_quota_tracker),
    user: User = Depends(get_current_user),
):
    """Reset today's usage. Development and testing only."""
    if get_settings().is_production:
        raise ForbiddenException("Resetting the scan limit is not allowed in production")
    quota.reset_usage(user.id)
    return _limit_response(quota, user.id)


@router.post("/barcode/{barcode}", response_model=ScanResult)
async def scan_barcode(
    barcode: str = Path(..., pattern=BARCODE_PATTERN),
    service: ScanService = Depends(get_scan_service),
    user: User = Depends(get_current_user),
):
    return await service.scan_barcode(user.id, barcode)


@router.post("/image", response_model=ScanResult)
async def scan_image(
    body: ImageScanRequest,
    service: ScanService = Depends(get_scan_service),
    user: User = Depends(get_current_user),
):
    return await service.scan_image(user.id, str(body.image_url), body.product_id)


@router.post("/upload", response_model=ScanResult)
async def scan_upload(
    image: UploadFile = File(...),
    product_name: Optional[str] = Form(None, alias="productName"),
    service: ScanService = Depends(get_scan_service),
    user: User = Depends(get_current_user),
):
    if not (image.content_type or "").startswith("image/"):
        raise ValidationException("Only image files are allowed", {"contentType": image.content_type})

    max_bytes = get_settings().MAX_UPLOAD_BYTES
    too_large = ValidationException(
        f"Image exceeds the maximum upload size of {max_bytes} bytes", {"maxBytes": max_bytes}
    )
    if image.size is not None and image.size > max_bytes:
        raise too_large
    content = await image.read(max_bytes + 1)
    if not content:
        raise ValidationException("Uploaded image is empty")
    if len(content) > max_bytes:
        raise too_large

    return await service.scan_upload(user.id, content, product_name)


@router.put("/{scan_id}/save", response_model=ScanResult)
def toggle_save(
    scan_id: int = Path(..., gt=0),
    service: ScanService = Depends(get_scan_service),
    user: User = Depends(get_current_user),
):
    return service.toggle_save(user.id, scan_id)


@router.get("/history", response_model=ScanHistoryResponse)
def scan_history(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    saved_only: bool = Query(False, alias="savedOnly"),
    unique_by_product: bool = Query(False, alias="uniqueByProduct"),
    list_type: Optional[ListType] = Query(None, alias="listType"),
    service: ScanService = Depends(get_scan_service),
    user: User = Depends(get_current_user),
):
    query = HistoryQuery(
        limit=limit,
        offset=offset,
        saved_only=saved_only,
        unique_by_product=unique_by_product,
        list_type=list_type,
    )
    return service.get_history(user.id, query)


@router.get("/saved", response_model=ScanHistoryResponse)
def saved_scans(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: ScanService = Depends(get_scan_service),
    user: User = Depends(get_current_user),
):
    return service.get_history(user.id, HistoryQuery(limit=limit, offset=offset, saved_only=True))


@router.post("/list", response_model=ProductListResponse)
def set_product_list(
    body: ProductListRequest,
    service: ScanService = Depends(get_scan_service),
    user: User = Depends(get_current_user),
):
    return service.set_product_list(user.id, body.product_id, body.list_type)
