"""Open Food Facts HTTP client.

One bounded GET per barcode, no retries. Not-found, timeout and other
upstream failures raise distinct exceptions.
"""

from typing import Any, Optional

import httpx
import structlog
from pydantic import BaseModel, Field, ValidationError, field_validator

from allertify.core.exceptions import (
    ProductNotFoundException,
    UpstreamServiceException,
    UpstreamTimeoutException,
)

logger = structlog.get_logger(__name__)

USER_AGENT = "Allertify/1.0.0 (https://allertify.com)"


class OpenFoodFactsProduct(BaseModel):
    product_name: Optional[str] = None
    brands: Optional[str] = None
    categories: Optional[str] = None
    image_url: Optional[str] = None
    ingredients_text: Optional[str] = None
    nutriments: dict[str, Any] = Field(default_factory=dict)

    @field_validator("nutriments", mode="before")
    @classmethod
    def _null_nutriments(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def nutritional_score(self) -> str:
        score = self.nutriments.get("nutrition-score-fr")
        return str(score) if score is not None else "N/A"


class OpenFoodFactsClient:
    """Client for the Open Food Facts v2 product API."""

    def __init__(
        self,
        base_url: str = "https://world.openfoodfacts.org/api/v2",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {"User-Agent": USER_AGENT}
        self._transport = transport

    async def get_product(self, barcode: str) -> OpenFoodFactsProduct:
        """Fetch a product by barcode.

        Raises:
            ProductNotFoundException: 404, or a body with status != 1
            UpstreamTimeoutException: no answer within `timeout`
            UpstreamServiceException: any other HTTP or transport failure
        """
        url = f"{self.base_url}/product/{barcode}.json"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, headers=self.headers, transport=self._transport
            ) as client:
                response = await client.get(url)
                if response.status_code == 404:
                    raise ProductNotFoundException(
                        f"Product with barcode {barcode} not found in Open Food Facts database"
                    )
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            logger.warning("Open Food Facts timeout", barcode=barcode, timeout=self.timeout)
            raise UpstreamTimeoutException("Request to Open Food Facts API timed out") from e
        except httpx.HTTPStatusError as e:
            raise UpstreamServiceException(
                f"Open Food Facts API error: {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamServiceException(f"Open Food Facts API error: {e}") from e
        except ValueError as e:
            raise UpstreamServiceException("Open Food Facts API returned invalid JSON") from e

        if data.get("status") != 1 or not data.get("product"):
            logger.info("Product not found in Open Food Facts", barcode=barcode)
            raise ProductNotFoundException(f"Product with barcode {barcode} not found in Open Food Facts")

        try:
            product = OpenFoodFactsProduct.model_validate(data["product"])
        except ValidationError as e:
            logger.warning("Malformed Open Food Facts product", barcode=barcode, errors=e.error_count())
            raise UpstreamServiceException("Open Food Facts API returned a malformed product") from e
        logger.info("Product found in Open Food Facts", barcode=barcode, name=product.product_name)
        return product
