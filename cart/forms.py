# cart/forms.py
from __future__ import annotations

import json
import re
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from django import forms
from django.conf import settings
from django.utils.translation import gettext_lazy as _

from catalog.models import Attribute, Product, Variation
from catalog.services import (
    matching_variations,
    option_dependencies,
    price_map,
    stock_level_for,
)
from core.models import ShopConfig

OPTION_FIELD_RE = re.compile(r"^Options\[(\d+)\]$")

MAX_QUANTITY = getattr(settings, "CART_MAX_QUANTITY", 2147483647)


def submitted_options(data) -> Dict[str, str]:
    """
    Extract the {attribute_id: option_id} mapping from posted
    `Options[<attribute id>]=<option id>` fields. Empty selections are dropped.
    """
    options: Dict[str, str] = {}
    if not data:
        return options

    for key in data.keys():
        match = OPTION_FIELD_RE.match(key)
        if not match:
            continue
        value = (data.get(key) or "").strip()
        if value:
            options[match.group(1)] = value
    return options


# ============================================================
# Fields
# ============================================================

class QuantityField(forms.CharField):
    """
    Quantity input for one cart line.

    Cleans to an int in 1..CART_MAX_QUANTITY. `custom_validation_message`
    replaces every format/range message when given.
    """
    widget = forms.NumberInput

    default_error_messages = {
        "not_a_number": _("The quantity must be a number"),
        "min_value": _("The quantity must be at least 1"),
        "max_value": _("The quantity must be less than %(limit)s"),
    }

    def __init__(self, *, max_quantity: int = MAX_QUANTITY, custom_validation_message=None, **kwargs):
        self.max_quantity = max_quantity
        self.custom_validation_message = custom_validation_message
        super().__init__(**kwargs)

    def widget_attrs(self, widget):
        attrs = super().widget_attrs(widget)
        attrs.setdefault("min", "1")
        attrs.setdefault("step", "1")
        return attrs

    def _error(self, code: str, params=None) -> forms.ValidationError:
        if self.custom_validation_message:
            return forms.ValidationError(self.custom_validation_message, code=code)
        return forms.ValidationError(self.error_messages[code], code=code, params=params)

    def to_python(self, value) -> Optional[int]:
        value = super().to_python(value)
        if value in self.empty_values:
            return None

        try:
            quantity = Decimal(value)
        except (InvalidOperation, TypeError, ValueError):
            raise self._error("not_a_number")

        if not quantity.is_finite() or quantity != quantity.to_integral_value():
            raise self._error("not_a_number")
        if quantity <= 0:
            raise self._error("min_value")
        if quantity > self.max_quantity:
            raise self._error("max_value", {"limit": f"{self.max_quantity:,}"})

        return int(quantity)


class OptionChoiceField(forms.ChoiceField):
    """
    Select for one product attribute.

    Chained selects: `data-prev` names the previous attribute's field and
    `data-depends` maps each previous option id to the option ids allowed here.
    """

    def __init__(
        self,
        attribute: Attribute,
        *,
        previous: Optional[Attribute] = None,
        dependencies: Optional[Dict[str, List[str]]] = None,
        **kwargs,
    ):
        self.attribute = attribute
        self.previous = previous
        self.dependencies = dependencies or {}

        kwargs.setdefault("required", False)
        kwargs.setdefault("label", attribute.get_label())
        super().__init__(choices=self.build_choices(), **kwargs)

        attrs = {
            "class": "form-select option-select",
            "data-attribute": str(attribute.pk),
        }
        if previous is not None:
            attrs["data-prev"] = previous.field_name
            attrs["data-depends"] = json.dumps(self.dependencies)
        self.widget.attrs.update(attrs)

    def build_choices(self, allowed: Optional[List[str]] = None):
        placeholder = [("", _("Select %(label)s") % {"label": self.attribute.get_label()})]
        return placeholder + [
            (str(option.pk), option.title)
            for option in self.attribute.options.all()
            if allowed is None or str(option.pk) in allowed
        ]

    def limit_to(self, previous_value: Optional[str]) -> None:
        """Restrict choices to options that go with the previous attribute's selection."""
        if self.previous is None or not previous_value:
            return
        self.choices = self.build_choices(self.dependencies.get(previous_value, []))


# ============================================================
# Product form
# ============================================================

class ProductForm(forms.Form):
    """
    "Add to cart" form shown on a product page.

    Fields, in order: ProductClass, ProductID, Redirect (hidden), one
    `Options[<attribute id>]` select per attribute, Quantity.
    """
    form_name = "ProductForm"
    css_class = "product-form"
    submit_label = _("Add To Cart")

    validation_messages = {
        "variation_required": _("This product requires options before it can be added to the cart."),
        "out_of_stock": _("Sorry, this product is out of stock."),
        "stock_exceeded": _("The quantity is greater than available stock for this product."),
        "currency_not_set": _("The currency is not set."),
    }

    ProductClass = forms.CharField(widget=forms.HiddenInput)
    ProductID = forms.CharField(widget=forms.HiddenInput)
    Redirect = forms.CharField(widget=forms.HiddenInput, required=False)
    Quantity = QuantityField(label=_("Quantity"))

    def __init__(
        self,
        product: Optional[Product] = None,
        *args,
        quantity: Optional[int] = None,
        redirect_url: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.product = product
        self.variation: Optional[Variation] = None
        self.stock_level: Optional[int] = None

        if product is not None:
            self.fields["ProductClass"].initial = product.product_class
            self.fields["ProductID"].initial = product.pk
        self.fields["Redirect"].initial = redirect_url
        self.fields["Quantity"].initial = quantity or 1

        quantity_field = self.fields.pop("Quantity")
        for name, field in self._build_option_fields():
            self.fields[name] = field
        self.fields["Quantity"] = quantity_field

    def _build_option_fields(self):
        if self.product is None:
            return []

        fields = []
        previous: Optional[Attribute] = None
        for attribute in self.product.attributes.all():
            dependencies = (
                option_dependencies(self.product, previous, attribute)
                if previous is not None
                else None
            )
            field = OptionChoiceField(attribute, previous=previous, dependencies=dependencies)
            if self.is_bound and previous is not None:
                field.limit_to(self.data.get(previous.field_name))
            fields.append((attribute.field_name, field))
            previous = attribute
        return fields

    # -----------------
    # Rendering helpers
    # -----------------
    @property
    def data_map(self) -> str:
        """JSON price map rendered into the form's data-map attribute."""
        if self.product is None:
            return "[]"
        return json.dumps(price_map(self.product))

    def get_options(self) -> Dict[str, str]:
        return submitted_options(self.data)

    # -----------------
    # Validation
    # -----------------
    def clean(self):
        cleaned_data = super().clean()
        product = self.product

        if product is not None:
            self._clean_stock(product, cleaned_data.get("Quantity"))

        if not ShopConfig.get_solo().has_base_currency:
            self.add_error(None, self.validation_messages["currency_not_set"])

        return cleaned_data

    def _clean_stock(self, product: Product, quantity: Optional[int]) -> None:
        requires_variation = product.requires_variation()
        variations = matching_variations(product, self.get_options())

        if requires_variation and not variations:
            self.add_error(None, self.validation_messages["variation_required"])
            return

        if requires_variation:
            self.variation = variations[0]

        stock_level = stock_level_for(product, self.variation)
        self.stock_level = stock_level

        if stock_level == 0:
            self.add_error(None, self.validation_messages["out_of_stock"])
        elif quantity is not None and quantity > stock_level:
            self.add_error(None, self.validation_messages["stock_exceeded"])
