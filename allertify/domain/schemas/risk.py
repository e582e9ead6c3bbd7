"""Pydantic schemas for allergen risk evaluation."""

from enum import Enum
from typing import Optional

from pydantic import Field

from allertify.domain.schemas.common import CamelModel


class RiskLevel(str, Enum):
    SAFE = "SAFE"
    CAUTION = "CAUTION"
    RISKY = "RISKY"


class RiskEvaluation(CamelModel):
    """Allergen risk verdict for one product."""

    risk_level: RiskLevel = Field(
        description="SAFE: no allergens detected. CAUTION: possible cross-contamination or unclear "
        "ingredients. RISKY: a user allergen is directly present."
    )
    matched_allergens: list[str] = Field(
        default_factory=list,
        description="Names from the user's allergy list that were found in the product.",
    )
    reasoning: str = Field(description="Concise explanation of the assessment.")


class ProductContext(CamelModel):
    product_name: Optional[str] = None
    brand: Optional[str] = None
    category: Optional[str] = None

    def lines(self) -> list[str]:
        lines = []
        if self.product_name:
            lines.append(f"Product: {self.product_name}")
        if self.brand:
            lines.append(f"Brand: {self.brand}")
        if self.category:
            lines.append(f"Category: {self.category}")
        return lines
