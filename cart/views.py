from django.http import HttpRequest, HttpResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_POST

from .cart import Cart
from .forms import ProductForm
from .services import add_to_cart, form_invalid_response, resolve_product


@require_POST
def cart_add(request: HttpRequest) -> HttpResponse:
    """
    Add a product (and the variation picked by its options) to the cart.

    Invalid submissions come back as a JSON error list for async callers,
    otherwise as a redirect with the errors kept in the session.
    """
    product = resolve_product(request.POST)
    form = ProductForm(product, data=request.POST)

    if not form.is_valid():
        fallback = product.get_absolute_url() if product else "/"
        return form_invalid_response(request, form, fallback)

    return add_to_cart(request, form)


@require_POST
def cart_remove(request: HttpRequest, key: str) -> HttpResponse:
    """
    Remove a line completely from the cart.
    """
    order = Cart.get_current_order(request)
    if order is not None:
        order.remove_item(key)
    return redirect("cart:detail")


def cart_detail(request: HttpRequest) -> HttpResponse:
    """
    Display cart contents.
    """
    order = Cart.get_current_order(request)
    context = {"order": order}
    return render(request, "cart/detail.html", context)
