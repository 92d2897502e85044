"""Store products that grant report credits."""

from django.db import models

from .exceptions import ProductNotFoundError


class PurchaseProduct(models.TextChoices):
    SINGLE_CREDIT = 'com.zorya.report_generation', '1 Report Credit'


# Number of credits each consumable product grants
PRODUCT_CREDIT_AMOUNTS = {
    PurchaseProduct.SINGLE_CREDIT: 1,
}

# Upper bound for credits granted by one store transaction
MAX_CREDITS_PER_PURCHASE = 20


def credits_for_product(product_id):
    """
    Return how many credits a store product grants.

    Raises:
        ProductNotFoundError: If the product is not sold by the app.
    """
    try:
        return PRODUCT_CREDIT_AMOUNTS[PurchaseProduct(product_id)]
    except ValueError:
        raise ProductNotFoundError(f"Unknown product: {product_id}")
