# catalog/managers.py
from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import models

if TYPE_CHECKING:
    from .models import Product


# Relations the product page and the cart form read for every product
CATALOG_PREFETCH = ("attributes__options", "variations__options")


# ============================================================
# Product Manager
# ============================================================
class ProductQuerySet(models.QuerySet["Product"]):
    def active(self) -> "ProductQuerySet":
        return self.filter(is_active=True)

    def with_catalog(self) -> "ProductQuerySet":
        """
        Prefetch everything the product page and the cart form need:
        attributes with their options and variations with their options.
        """
        return self.prefetch_related(*CATALOG_PREFETCH)


class ProductManager(models.Manager.from_queryset(ProductQuerySet)):  # type: ignore[misc]
    pass
