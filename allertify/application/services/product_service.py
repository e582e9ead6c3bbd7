"""Product resolver — finds cached products or creates them from Open Food Facts, images or names."""

import time
import uuid
from typing import Optional

import structlog

from allertify.core.exceptions import ProductNotFoundException
from allertify.domain.models.product import Product
from allertify.domain.repositories.product_repository import ProductRepository
from allertify.infrastructure.open_food_facts import OpenFoodFactsClient

logger = structlog.get_logger(__name__)

IMAGE_PRODUCT_NAME = "Product from Image Scan"
IMAGE_PRODUCT_INGREDIENTS = "Extracted from image"
NAME_PRODUCT_INGREDIENTS = "Product created from name"


def mint_product_key(prefix: str) -> str:
    """Synthetic unique barcode-like key, e.g. IMG_1724050000000_3f9a1c2b7."""
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class ProductService:
    def __init__(self, repo: ProductRepository, off_client: OpenFoodFactsClient):
        self.repo = repo
        self.off_client = off_client

    async def resolve_by_barcode(self, barcode: str) -> Product:
        """Cached product, else fetched from Open Food Facts and stored."""
        product = self.repo.get_by_barcode(barcode)
        if product is not None:
            return product

        off_product = await self.off_client.get_product(barcode)
        product = self.repo.create(
            {
                "barcode": barcode,
                "name": off_product.product_name or "Unknown Product",
                "image_url": off_product.image_url or "",
                "ingredients": off_product.ingredients_text or "",
                "nutritional_score": off_product.nutritional_score,
            }
        )
        logger.info("Product cached from Open Food Facts", barcode=barcode, product_id=product.id)
        return product

    def resolve_by_id(self, product_id: int) -> Product:
        product = self.repo.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundException(f"Product with ID {product_id} not found")
        return product

    def resolve_minimal_from_image(self, image_url: str) -> Product:
        return self.repo.create(
            {
                "barcode": mint_product_key("IMG"),
                "name": IMAGE_PRODUCT_NAME,
                "image_url": image_url,
                "nutritional_score": "N/A",
                "ingredients": IMAGE_PRODUCT_INGREDIENTS,
            }
        )

    def find_or_create_by_name(
        self,
        name: str,
        image_url: Optional[str] = None,
        ingredients: Optional[str] = None,
    ) -> Product:
        product = self.repo.find_by_name(name)
        if product is not None:
            updates = {}
            if ingredients and product.ingredients == NAME_PRODUCT_INGREDIENTS:
                updates["ingredients"] = ingredients
            if image_url and not product.image_url:
                updates["image_url"] = image_url
            return self.repo.update(product, updates) if updates else product

        return self.repo.create(
            {
                "barcode": mint_product_key("NAME"),
                "name": name,
                "image_url": image_url or "",
                "nutritional_score": "N/A",
                "ingredients": ingredients or NAME_PRODUCT_INGREDIENTS,
            }
        )
