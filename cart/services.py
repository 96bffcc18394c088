# cart/services.py

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

from django.contrib import messages
from django.forms.forms import NON_FIELD_ERRORS
from django.http import Http404, HttpRequest, HttpResponseRedirect, JsonResponse
from django.urls import NoReverseMatch, reverse
from django.utils.html import format_html
from django.utils.http import url_has_allowed_host_and_scheme
from django.utils.translation import gettext as _

from catalog.models import Product
from catalog.services import get_product, resolve_variation

from .cart import Cart
from .forms import ProductForm, submitted_options
from .hooks import OptionHookRegistry, option_hooks

logger = logging.getLogger(__name__)

FORM_INFO_PREFIX = "FormInfo."


# ============================================================
# Request helpers
# ============================================================

def is_async_request(request: HttpRequest) -> bool:
    """True for XHR / fetch submissions that expect JSON back."""
    if request.headers.get("x-requested-with") == "XMLHttpRequest":
        return True
    return "application/json" in request.headers.get("accept", "")


def is_site_url(request: HttpRequest, url: Optional[str]) -> bool:
    if not url:
        return False
    # Relative paths would resolve against the endpoint, not the site root
    if not url.startswith("/") and not urlsplit(url).netloc:
        return False
    return url_has_allowed_host_and_scheme(
        url,
        allowed_hosts={request.get_host()},
        require_https=request.is_secure(),
    )


def get_next_url(request: HttpRequest, redirect_to: Optional[str], fallback: str = "/") -> str:
    """
    Where to send the shopper after a submission: the posted `Redirect` when
    it stays on this site, otherwise back to the referring page.
    """
    if is_site_url(request, redirect_to):
        return redirect_to

    if redirect_to:
        logger.warning("Ignoring off-site redirect target %r", redirect_to)

    referer = request.META.get("HTTP_REFERER")
    if is_site_url(request, referer):
        return referer
    return fallback


# ============================================================
# Product resolution
# ============================================================

def resolve_product(data) -> Optional[Product]:
    """
    Product named by posted `ProductClass` / `ProductID`.

    Missing ids give None so the form can report the required fields;
    ids that name no active product raise Http404.
    """
    product_class = (data.get("ProductClass") or "").strip()
    product_id = (data.get("ProductID") or "").strip()
    if not product_class or not product_id:
        return None

    product = get_product(product_class, product_id)
    if product is None:
        logger.warning("Add to cart for unknown product %s #%s", product_class, product_id)
        raise Http404(_("This product could not be found."))
    return product


# ============================================================
# Validation errors
# ============================================================

def form_errors_payload(form: ProductForm) -> List[Dict[str, str]]:
    """
    Flatten form errors to [{fieldName, message, messageType}, ...].
    Form-wide errors use the `__all__` field name and the "bad" message type.
    """
    payload: List[Dict[str, str]] = []
    for field_name, field_errors in form.errors.items():
        message_type = "bad" if field_name == NON_FIELD_ERRORS else "error"
        for message in field_errors:
            payload.append(
                {
                    "fieldName": field_name,
                    "message": str(message),
                    "messageType": message_type,
                }
            )
    return payload


def form_info_key(form_name: str) -> str:
    return f"{FORM_INFO_PREFIX}{form_name}"


def store_form_info(session, form: ProductForm) -> Dict[str, Any]:
    """
    Keep errors and submitted data in the session so the product page can
    redisplay them after the redirect.
    """
    data = {
        key: value
        for key, value in form.data.items()
        if key != "csrfmiddlewaretoken"
    }

    form_error: Dict[str, str] = {}
    non_field_errors = form.non_field_errors()
    if non_field_errors:
        form_error = {
            "message": " ".join(str(message) for message in non_field_errors),
            "messageType": "bad",
        }

    info = {
        "errors": form_errors_payload(form),
        "data": data,
        "formError": form_error,
    }
    session[form_info_key(form.form_name)] = info
    session.modified = True
    return info


def pop_form_info(
    session,
    form_name: str = ProductForm.form_name,
    product: Optional[Product] = None,
) -> Optional[Dict[str, Any]]:
    """
    Take the stored state of a rejected submission out of the session.

    With `product`, state left by another product's form is discarded instead
    of being returned, so its hidden ids never end up on this product's page.
    """
    info = session.pop(form_info_key(form_name), None)
    if not info or product is None:
        return info

    data = info.get("data") or {}
    if (
        data.get("ProductClass") != product.product_class
        or str(data.get("ProductID")) != str(product.pk)
    ):
        return None
    return info


def form_invalid_response(request: HttpRequest, form: ProductForm, fallback: str = "/"):
    errors = form_errors_payload(form)
    logger.warning(
        "Add to cart rejected for product %s: %s",
        form.product.pk if form.product else None,
        "; ".join(error["message"] for error in errors),
    )

    if is_async_request(request):
        return JsonResponse(
            {
                "status": "bad",
                "message": _("Validation failed"),
                "errors": errors,
            },
            status=400,
        )

    store_form_info(request.session, form)
    return HttpResponseRedirect(get_next_url(request, None, fallback))


# ============================================================
# Submission
# ============================================================

def add_to_cart(
    request: HttpRequest,
    form: ProductForm,
    *,
    hooks: Optional[OptionHookRegistry] = None,
) -> HttpResponseRedirect:
    """
    Put the validated form's product into the current order and redirect.

    `hooks` contributes extra ItemOptions to the line; defaults to the global
    option hook registry.
    """
    data = form.data
    product = form.product if form.product is not None else resolve_product(data)
    if product is None:
        raise Http404(_("This product could not be found."))

    variation = resolve_variation(product, submitted_options(data))
    quantity = form.cleaned_data["Quantity"]
    options = (hooks if hooks is not None else option_hooks).collect(
        product=product,
        variation=variation,
        quantity=quantity,
        request=request,
    )

    Cart.get_current_order(request, create=True).add_item(product, variation, quantity, options)

    redirect_to = (data.get("Redirect") or "").strip()

    # Feedback only when going back to the product page
    if not redirect_to:
        messages.success(request, added_message())

    return HttpResponseRedirect(get_next_url(request, redirect_to, product.get_absolute_url()))


def added_message() -> str:
    try:
        cart_url = reverse("cart:detail")
    except NoReverseMatch:
        return _("The product was added to your cart.")
    return format_html(
        _('The product was added to <a href="{}">your cart</a>.'),
        cart_url,
    )
