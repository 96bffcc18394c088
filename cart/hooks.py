# cart/hooks.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, List, Optional

if TYPE_CHECKING:
    from catalog.models import Product, Variation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemOption:
    """
    Extra option attached to a cart line, e.g. gift wrapping or engraving.

    `price` is added to the line's unit price.
    """
    description: str
    price: Decimal = field(default=Decimal("0.00"))

    def as_dict(self) -> dict[str, str]:
        return {"description": self.description, "price": str(self.price)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ItemOption":
        return cls(description=data["description"], price=Decimal(data.get("price") or "0"))


OptionHook = Callable[..., None]


class OptionHookRegistry:
    """
    Hooks that contribute ItemOptions to an item before it enters the cart.

    Usage:

        from cart.hooks import register_option_hook, ItemOption

        @register_option_hook
        def gift_wrap(options, *, product, variation, quantity, request):
            if request is not None and request.POST.get("GiftWrap"):
                options.append(ItemOption("Gift wrap", Decimal("2.50")))

    Hooks run in registration order and receive the same list, so a later hook
    sees what earlier hooks appended. Exceptions propagate to the caller.
    """

    def __init__(self) -> None:
        self._hooks: List[OptionHook] = []

    def __len__(self) -> int:
        return len(self._hooks)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register(self, func: OptionHook) -> OptionHook:
        self._hooks.append(func)
        logger.debug("Registered cart option hook %s", func.__name__)
        return func

    def unregister(self, func: OptionHook) -> None:
        if func in self._hooks:
            self._hooks.remove(func)

    # ------------------------------------------------------------------
    # Collecting
    # ------------------------------------------------------------------
    def collect(
        self,
        *,
        product: "Product",
        variation: Optional["Variation"],
        quantity: int,
        request: Any = None,
    ) -> List[ItemOption]:
        options: List[ItemOption] = []

        for hook in self._hooks:
            hook(
                options,
                product=product,
                variation=variation,
                quantity=quantity,
                request=request,
            )

        if options:
            logger.debug(
                "Option hooks added %d option(s) for product %s",
                len(options),
                product.pk,
            )
        return options


# Global registry used by the add-to-cart view
option_hooks = OptionHookRegistry()

# Convenience API
register_option_hook = option_hooks.register
