"""Pydantic schemas for scans, quota and product list preferences."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, HttpUrl

from allertify.domain.schemas.common import CamelModel


class ListType(str, Enum):
    RED = "RED"
    GREEN = "GREEN"


class ScanLimitStatus(CamelModel):
    user_id: int
    current_usage: int
    daily_limit: int
    remaining_scans: int
    is_limit_exceeded: bool


class ScanLimitResponse(ScanLimitStatus):
    can_scan: bool


class ScanPermission(CamelModel):
    can_scan: bool
    remaining_scans: int
    daily_limit: int


class ScanLimitSnapshot(CamelModel):
    remaining_scans: int
    daily_limit: int


class UsageRecord(CamelModel):
    usage_date: datetime
    scan_count: int


class ScanProduct(CamelModel):
    id: int
    barcode: str
    name: str
    image_url: Optional[str] = None
    ingredients: Optional[str] = None


class ScanResult(CamelModel):
    id: int
    user_id: int
    product_id: int
    scan_date: datetime
    scan_date_local: Optional[str] = None
    risk_level: str
    risk_explanation: Optional[str] = None
    matched_allergens: Optional[str] = None
    is_saved: bool
    list_type: Optional[ListType] = None
    product: ScanProduct
    scan_limit: Optional[ScanLimitSnapshot] = None


class ImageScanRequest(CamelModel):
    image_url: HttpUrl
    product_id: Optional[int] = Field(default=None, gt=0)


class HistoryQuery(CamelModel):
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)
    saved_only: bool = False
    unique_by_product: bool = False
    list_type: Optional[ListType] = None


class Pagination(CamelModel):
    limit: int
    offset: int
    total: int


class ScanHistoryResponse(CamelModel):
    scans: list[ScanResult]
    pagination: Pagination


class ProductListRequest(CamelModel):
    product_id: int = Field(gt=0)
    list_type: Optional[ListType] = None


class ProductListResponse(CamelModel):
    product_id: int
    list_type: Optional[ListType] = None
