# catalog/services.py

from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Set

from django.apps import apps
from django.utils.translation import gettext as _

from .managers import CATALOG_PREFETCH
from .models import Attribute, Product, Variation

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


# ============================================================
# Product lookup
# ============================================================

def get_product(product_class: Any, product_id: Any) -> Optional[Product]:
    """
    Resolve an active product from the type discriminator and id the cart
    form posts back ("catalog.Product", "12").

    Returns None for anything that does not name an existing, active product.
    """
    if not product_class or not product_id:
        return None

    try:
        model = apps.get_model(str(product_class))
    except (LookupError, ValueError):
        logger.warning("Unknown product class %r", product_class)
        return None

    if not issubclass(model, Product):
        logger.warning("Model %s is not a product", model._meta.label)
        return None

    try:
        pk = int(product_id)
    except (TypeError, ValueError):
        return None

    return (
        model._default_manager.filter(pk=pk, is_active=True)
        .prefetch_related(*CATALOG_PREFETCH)
        .first()
    )


# ============================================================
# Variations
# ============================================================

def get_variations(product: Product) -> List[Variation]:
    # Reads the prefetch cache when the product came through with_catalog()
    return list(product.variations.all())


def matching_variations(product: Product, options: Mapping[str, str]) -> List[Variation]:
    """
    Enabled variations whose full option set equals the submitted
    {attribute_id: option_id} mapping.

    A variation without options never matches, so an empty selection can not
    stand in for a choice on a product with attributes.
    """
    submitted = {str(key): str(value) for key, value in options.items()}
    if not submitted:
        return []

    return [
        variation
        for variation in get_variations(product)
        if variation.is_enabled() and variation.option_map() == submitted
    ]


def resolve_variation(product: Product, options: Mapping[str, str]) -> Optional[Variation]:
    """
    Return the variation selected by `options`, or None.

    Several enabled variations with the same option set are a catalog data
    error; the lowest id wins and the clash is logged.
    """
    matches = matching_variations(product, options)
    if not matches:
        return None

    if len(matches) > 1:
        logger.warning(
            "Product %s has %d enabled variations for options %s; using variation %s",
            product.pk,
            len(matches),
            dict(options),
            matches[0].pk,
        )
    return matches[0]


def stock_level_for(product: Product, variation: Optional[Variation] = None) -> int:
    if variation is not None:
        return variation.get_stock_level()
    return product.get_stock_level()


# ============================================================
# Product page helpers
# ============================================================

def price_map(product: Product) -> List[Dict[str, Any]]:
    """
    Client-side price preview data for the product form.

    Each entry carries the displayed price and the option ids selecting it:

        [{"price": "12.00", "options": [3, 7], "free": "Free"}, ...]

    The displayed price is a running total: every variation's delta is added
    on top of the previous entry's price, starting from the product price.
    """
    entries: List[Dict[str, Any]] = []
    running_total = Decimal(product.price)

    for variation in get_variations(product):
        running_total = running_total + Decimal(variation.amount)
        entries.append(
            {
                "price": str(running_total.quantize(TWO_PLACES)),
                "options": variation.option_ids(),
                "free": _("Free"),
            }
        )

    return entries


def option_dependencies(
    product: Product,
    previous: Attribute,
    attribute: Attribute,
) -> Dict[str, List[str]]:
    """
    For chained selects: map each option id of `previous` to the option ids of
    `attribute` that appear with it in an enabled variation.
    """
    allowed: Dict[str, Set[str]] = defaultdict(set)

    for variation in get_variations(product):
        if not variation.is_enabled():
            continue
        selected = variation.option_map()
        prev_option = selected.get(str(previous.pk))
        option = selected.get(str(attribute.pk))
        if prev_option and option:
            allowed[prev_option].add(option)

    return {key: sorted(values, key=int) for key, values in allowed.items()}
