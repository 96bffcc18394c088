# cart/cart.py
from __future__ import annotations

import hashlib
import json
import logging
from decimal import Decimal
from typing import Any, Dict, Iterator, Optional, Sequence

from django.conf import settings

from catalog.models import Product, Variation

from .hooks import ItemOption

logger = logging.getLogger(__name__)

# Session key used to store the current order
CART_SESSION_ID = getattr(settings, "CART_SESSION_ID", "cart")


class Order:
    """
    The current order, stored in the session.

    Structure in session:
    {
        "<line key>": {
            "product_class": "catalog.Product",
            "product_id": 12,
            "variation_id": 40,          # or null
            "quantity": 2,
            "price": "<unit price as string>",
            "title": "T-shirt - Red / L",
            "options": [{"description": "...", "price": "..."}],
        },
        ...
    }
    """

    def __init__(self, session) -> None:
        self.session = session
        lines = self.session.get(CART_SESSION_ID)

        # Ensure lines is always a dict
        if not isinstance(lines, dict):
            lines = {}
            self.session[CART_SESSION_ID] = lines

        self.lines: Dict[str, Dict[str, Any]] = lines

    # -----------------
    # Internal helpers
    # -----------------
    def _save(self) -> None:
        self.session[CART_SESSION_ID] = self.lines
        self.session.modified = True

    @staticmethod
    def line_key(
        product: Product,
        variation: Optional[Variation],
        options: Sequence[ItemOption] = (),
    ) -> str:
        key = f"{product.pk}-{variation.pk if variation else 0}"
        if options:
            payload = json.dumps([option.as_dict() for option in options], sort_keys=True)
            key += "-" + hashlib.sha1(payload.encode("utf-8")).hexdigest()[:10]
        return key

    @staticmethod
    def unit_price(
        product: Product,
        variation: Optional[Variation],
        options: Sequence[ItemOption] = (),
    ) -> Decimal:
        price = Decimal(product.price)
        if variation is not None:
            price += Decimal(variation.amount)
        for option in options:
            price += option.price
        return price

    # -----------------
    # Public API
    # -----------------
    def add_item(
        self,
        product: Product,
        variation: Optional[Variation] = None,
        quantity: int = 1,
        options: Sequence[ItemOption] = (),
    ) -> Dict[str, Any]:
        """
        Add `quantity` of a product (and variation) to the order.

        Lines are merged on product, variation and options; adding the same
        combination again increases the line quantity.
        """
        options = list(options)
        key = self.line_key(product, variation, options)
        line = self.lines.get(key)

        if line is None:
            line = {
                "product_class": product.product_class,
                "product_id": product.pk,
                "variation_id": variation.pk if variation else None,
                "quantity": 0,
                "price": str(self.unit_price(product, variation, options)),
                "title": str(variation) if variation else str(product),
                "options": [option.as_dict() for option in options],
            }
            self.lines[key] = line

        line["quantity"] = int(line["quantity"]) + int(quantity)
        self._save()

        logger.info(
            "Cart line %s now has quantity %s (product=%s, variation=%s)",
            key,
            line["quantity"],
            product.pk,
            variation.pk if variation else None,
        )
        return line

    def remove_item(self, key: str) -> bool:
        if key not in self.lines:
            return False
        del self.lines[key]
        self._save()
        return True

    def clear(self) -> None:
        self.session[CART_SESSION_ID] = {}
        self.session.modified = True
        self.lines = {}

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        """
        Iterate over the lines, attaching Product / Variation instances
        and computed total_price for each line.
        """
        lines = list(self.lines.items())
        products = Product.objects.in_bulk([line["product_id"] for _, line in lines])
        variations = Variation.objects.in_bulk(
            [line["variation_id"] for _, line in lines if line.get("variation_id")]
        )

        for key, data in lines:
            product = products.get(data["product_id"])
            if not product:
                # Product may have been deleted; skip silently
                continue

            price = Decimal(data["price"])
            quantity = int(data["quantity"])

            yield {
                "key": key,
                "product": product,
                "variation": variations.get(data.get("variation_id")),
                "title": data.get("title") or str(product),
                "options": [ItemOption.from_dict(option) for option in data.get("options", [])],
                "price": price,
                "quantity": quantity,
                "total_price": price * quantity,
            }

    def __len__(self) -> int:
        return len(self.lines)

    def get_total_price(self) -> Decimal:
        return sum(
            (Decimal(line["price"]) * int(line["quantity"]) for line in self.lines.values()),
            Decimal("0.00"),
        )

    def get_total_quantity(self) -> int:
        return sum(int(line["quantity"]) for line in self.lines.values())

    def is_empty(self) -> bool:
        return len(self.lines) == 0


class Cart:
    """Entry point to the order of the current session."""

    @staticmethod
    def get_current_order(request, create: bool = False) -> Optional[Order]:
        """
        Return the session's order; with `create`, start an empty one
        when the session has none yet.
        """
        session = request.session
        if CART_SESSION_ID not in session and not create:
            return None
        return Order(session)
