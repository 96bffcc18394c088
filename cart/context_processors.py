# cart/context_processors.py
from .cart import Cart


def cart(request):
    """
    Provide a cart summary for the site header:
    - cart_item_count: total quantity across lines
    - cart_total: order total as Decimal
    """
    order = Cart.get_current_order(request) if hasattr(request, "session") else None
    if order is None:
        return {"cart_item_count": 0, "cart_total": None}

    return {
        "cart_item_count": order.get_total_quantity(),
        "cart_total": order.get_total_price(),
    }
